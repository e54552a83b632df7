"""
Task service for locally created tasks.

Tasks can be linked to focus sessions; a session keeps only the task id.
"""

import logging
from typing import Optional

from supabase import Client

from focusflow.core.database import get_supabase
from focusflow.models.task import (
    Task,
    TaskCreate,
    TaskNotFoundError,
    TaskServiceError,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

TABLE = "tasks"


class TaskService:
    """Service for task CRUD."""

    def __init__(self, supabase: Optional[Client] = None):
        self._supabase = supabase

    @property
    def supabase(self) -> Client:
        if self._supabase is None:
            self._supabase = get_supabase()
        return self._supabase

    def list_tasks(self, include_completed: bool = False) -> list[Task]:
        query = self.supabase.table(TABLE).select("*")
        if not include_completed:
            query = query.eq("completed", False)
        result = query.order("created_at", desc=False).execute()

        if not result.data:
            return []

        return [Task(**row) for row in result.data]

    def get_task(self, task_id: str) -> Task:
        result = self.supabase.table(TABLE).select("*").eq("id", task_id).execute()

        if not result.data:
            raise TaskNotFoundError(f"Task {task_id} not found")

        return Task(**result.data[0])

    def create_task(self, data: TaskCreate) -> Task:
        payload = data.model_dump(mode="json")
        payload["completed"] = False
        result = self.supabase.table(TABLE).insert(payload).execute()

        if not result.data:
            raise TaskServiceError("Failed to create task")

        return Task(**result.data[0])

    def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        updates = data.model_dump(mode="json", exclude_unset=True)
        if not updates:
            return self.get_task(task_id)

        result = self.supabase.table(TABLE).update(updates).eq("id", task_id).execute()

        if not result.data:
            raise TaskNotFoundError(f"Task {task_id} not found")

        return Task(**result.data[0])

    def toggle_completed(self, task_id: str) -> Task:
        task = self.get_task(task_id)
        return self.update_task(task_id, TaskUpdate(completed=not task.completed))

    def delete_task(self, task_id: str) -> None:
        result = self.supabase.table(TABLE).delete().eq("id", task_id).execute()

        if not result.data:
            raise TaskNotFoundError(f"Task {task_id} not found")

        logger.info("Deleted task %s", task_id)
