from typing import Annotated

from fastapi import APIRouter, Depends, Query

from zoocare.config import Settings
from zoocare.dependencies import CurrentUser, get_settings, task_manager
from zoocare.models import TaskStatus
from zoocare.schemas import TaskCompleteRequest, TaskRequest
from zoocare.services.tasks import TaskManager

router = APIRouter(prefix="/tasks")

Manager = Annotated[TaskManager, Depends(task_manager)]


@router.post("/add", status_code=201)
async def add_task(body: TaskRequest, manager: Manager) -> dict:
    task = manager.create_task(body)
    return {"success": True, "message": "Task created.", "task": task.to_json()}


@router.put("/edit/{task_id}")
async def edit_task(task_id: str, body: TaskRequest, manager: Manager) -> dict:
    task = manager.update_task(task_id, body)
    return {"success": True, "message": "Task updated.", "task": task.to_json()}


@router.get("/getAll")
async def all_tasks(
    manager: Manager,
    status: TaskStatus | None = None,
    assigned_to: Annotated[str | None, Query(alias="assignedTo")] = None,
    animal_id: Annotated[str | None, Query(alias="animalId")] = None,
) -> list[dict]:
    # bare list: the admin dashboard consumes it directly
    tasks = manager.list_tasks(
        status=status, assigned_to=assigned_to, animal_id=animal_id
    )
    return [t.to_json() for t in tasks]


@router.get("")
async def my_tasks(manager: Manager, user: CurrentUser) -> list[dict]:
    return [t.to_json() for t in manager.list_tasks(assigned_to=user.id)]


@router.get("/count/pending")
async def count_pending(manager: Manager) -> dict:
    return {"success": True, "count": manager.count_by_status(TaskStatus.PENDING)}


@router.get("/count/completed")
async def count_completed(manager: Manager) -> dict:
    return {"success": True, "count": manager.count_by_status(TaskStatus.COMPLETED)}


@router.put("/complete/{task_id}")
async def complete_task(
    task_id: str, manager: Manager, body: TaskCompleteRequest | None = None
) -> dict:
    task = manager.complete_task(task_id, body or TaskCompleteRequest())
    return {"success": True, "message": "Task completed.", "task": task.to_json()}


@router.put("/verify/{task_id}")
async def verify_task(task_id: str, manager: Manager) -> dict:
    task = manager.verify_completion(task_id)
    return {
        "success": True,
        "message": "Task completion verified.",
        "task": task.to_json(),
    }


@router.delete("/delete/{task_id}")
async def delete_task(task_id: str, manager: Manager) -> dict:
    manager.delete_task(task_id)
    return {"success": True, "message": "Task deleted."}


@router.get("/{task_id}/occurrences")
async def task_occurrences(
    task_id: str,
    manager: Manager,
    settings: Annotated[Settings, Depends(get_settings)],
    limit: int | None = None,
) -> dict:
    limit = min(limit or settings.max_occurrences, settings.max_occurrences)
    occurrences = manager.occurrences(task_id, max(limit, 1))
    return {
        "success": True,
        "taskId": task_id,
        "count": len(occurrences),
        "occurrences": [o.isoformat(timespec="minutes") for o in occurrences],
    }


@router.get("/{task_id}")
async def get_task(task_id: str, manager: Manager) -> dict:
    return {"success": True, "task": manager.get(task_id).to_json()}
