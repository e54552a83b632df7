"""
Task API endpoints.

Handles:
- GET / - List tasks
- POST / - Create a task
- GET /{task_id} - Get a task
- PATCH /{task_id} - Update a task
- POST /{task_id}/toggle - Flip the completed flag
- DELETE /{task_id} - Delete a task
"""

from fastapi import APIRouter, Depends

from focusflow.models.task import Task, TaskCreate, TaskUpdate
from focusflow.services.task_service import TaskService

router = APIRouter()


def get_task_service() -> TaskService:
    """Dependency to get TaskService instance."""
    return TaskService()


@router.get("/", response_model=list[Task])
async def list_tasks(
    include_completed: bool = False,
    task_service: TaskService = Depends(get_task_service),
) -> list[Task]:
    return task_service.list_tasks(include_completed=include_completed)


@router.post("/", response_model=Task, status_code=201)
async def create_task(
    request: TaskCreate,
    task_service: TaskService = Depends(get_task_service),
) -> Task:
    return task_service.create_task(request)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    task_service: TaskService = Depends(get_task_service),
) -> Task:
    return task_service.get_task(task_id)


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    request: TaskUpdate,
    task_service: TaskService = Depends(get_task_service),
) -> Task:
    return task_service.update_task(task_id, request)


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task(
    task_id: str,
    task_service: TaskService = Depends(get_task_service),
) -> Task:
    return task_service.toggle_completed(task_id)


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    task_service: TaskService = Depends(get_task_service),
) -> None:
    """Delete a task. Sessions keep their task id."""
    task_service.delete_task(task_id)
