"""
Task and reminder models.

Tasks are created locally and may be linked to focus sessions. Reminders
are read-only items mirrored from the external reminders calendar.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from focusflow.core.constants import TASK_NAME_MAX_LENGTH


class Task(BaseModel):
    """Local task."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    due_date: Optional[datetime] = None  # drop-dead due date
    estimated_duration: Optional[int] = None  # seconds
    completed: bool = False
    created_at: Optional[datetime] = None


class TaskCreate(BaseModel):
    """Request to create a task."""

    name: str = Field(min_length=1, max_length=TASK_NAME_MAX_LENGTH)
    due_date: Optional[datetime] = None
    estimated_duration: Optional[int] = Field(None, ge=0)


class TaskUpdate(BaseModel):
    """Partial task update; omitted fields are left untouched."""

    name: Optional[str] = Field(None, min_length=1, max_length=TASK_NAME_MAX_LENGTH)
    due_date: Optional[datetime] = None
    estimated_duration: Optional[int] = Field(None, ge=0)
    completed: Optional[bool] = None


class Reminder(BaseModel):
    """Reminder from the external calendar."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    notes: Optional[str] = None
    due_date: Optional[datetime] = None
    is_completed: bool = False
    list_id: Optional[str] = None


class ReminderList(BaseModel):
    """Reminder list (calendar) from the external calendar."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    color: Optional[str] = None


# --- Exceptions ---


class TaskServiceError(Exception):
    """Base exception for task errors."""

    pass


class TaskNotFoundError(TaskServiceError):
    """Task not found."""

    pass
