"""Tests for application wiring."""

import pytest

from focusflow.main import app


@pytest.mark.unit
def test_routes_mounted_under_api_prefix():
    paths = {route.path for route in app.routes}

    assert "/health" in paths
    assert "/api/v1/sessions/start" in paths
    assert "/api/v1/sessions/background" in paths
    assert "/api/v1/sessions/foreground" in paths
    assert "/api/v1/sessions/{session_id}" in paths
    assert "/api/v1/store/buy" in paths
    assert "/api/v1/tasks/{task_id}/toggle" in paths
    assert "/api/v1/reminders/lists" in paths
    assert "/api/v1/settings/slack/test" in paths
