"""
Application constants for FocusFlow.

Centralizes session timing, reward rules and store catalog identifiers.
"""

# Session configuration
MIN_SESSION_SECONDS = 60
SESSION_STEP_SECONDS = 60  # durations are chosen in whole minutes
DEFAULT_SESSION_SECONDS = 1800
SECONDS_PER_COIN = 60  # one coin per started minute of focus

# Break passes (consumable store items), checked shortest first
BREAK_PASS_SHORT_ID = "break-1"
BREAK_PASS_SHORT_SECONDS = 60
BREAK_PASS_LONG_ID = "break-5"
BREAK_PASS_LONG_SECONDS = 300
BREAK_PASS_ORDER = [
    (BREAK_PASS_SHORT_ID, BREAK_PASS_SHORT_SECONDS),
    (BREAK_PASS_LONG_ID, BREAK_PASS_LONG_SECONDS),
]

# Session list paging
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

# Content length limits
TASK_NAME_MAX_LENGTH = 200
SLACK_FIELD_MAX_LENGTH = 200

# Store
MAX_PURCHASE_QUANTITY = 99
