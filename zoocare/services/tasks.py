"""
Care task manager.

Tasks are validated in full before every write. Recurrence fields describe the
schedule only; nothing here dispatches or materializes occurrences.
"""

from datetime import datetime

from loguru import logger

from zoocare.errors import NotFound, ValidationError, check_identifier
from zoocare.models import Task, TaskStatus
from zoocare.recurrence import expand_occurrences
from zoocare.schemas import TaskCompleteRequest, TaskRequest
from zoocare.services.animals import AnimalRegistry
from zoocare.services.base import BaseService, Database, NowFn, new_id
from zoocare.services.users import UserDirectory
from zoocare.validators import validate_task_fields


def task_key(task_id: str) -> str:
    return f"task:{task_id}"


class TaskManager(BaseService):
    def __init__(self, db: Database, now_fn: NowFn) -> None:
        super().__init__(db, now_fn)
        self.animals = AnimalRegistry(db, now_fn)
        self.users = UserDirectory(db, now_fn)

    def get(self, task_id: str) -> Task:
        check_identifier(task_id, "taskId")
        task = self.db.get(task_key(task_id))
        if not isinstance(task, Task):
            raise NotFound("Task not found.")
        return task

    def _check_references(self, animal_id: str, assigned_to: str) -> None:
        self.animals.get(animal_id)
        check_identifier(assigned_to, "assignedTo")
        if self.users.find(assigned_to) is None:
            raise NotFound("Assigned user not found.")

    def _transition(
        self,
        task: Task,
        status: TaskStatus,
        *,
        completed_at: datetime | None = None,
        image_proof: str | None = None,
    ) -> Task:
        if status == TaskStatus.PENDING:
            return task.model_copy(
                update={
                    "status": status,
                    "completed_at": None,
                    "completion_verified": False,
                    "image_proof": None,
                }
            )

        changes: dict = {"status": status}
        if task.status != TaskStatus.COMPLETED:
            changes["completed_at"] = completed_at or self.now()
            changes["completion_verified"] = False
            changes["image_proof"] = image_proof
        else:
            if completed_at is not None:
                changes["completed_at"] = completed_at
            if image_proof is not None:
                changes["image_proof"] = image_proof
        return task.model_copy(update=changes)

    def create_task(self, request: TaskRequest) -> Task:
        fields = validate_task_fields(request.model_dump())
        self._check_references(fields["animal_id"], fields["assigned_to"])

        now = self.now()
        task = Task(
            id=new_id(),
            **fields,
            notes=request.notes,
            created_at=now,
            updated_at=now,
        )
        task = self._transition(
            task,
            request.status or TaskStatus.PENDING,
            completed_at=request.completed_at,
            image_proof=request.image_proof,
        )
        self.db.put(task_key(task.id), task)
        logger.info(
            f"Task {task.id} ({task.type}) created for animal {task.animal_id}, "
            f"assigned to {task.assigned_to}"
        )
        return task

    def update_task(self, task_id: str, request: TaskRequest) -> Task:
        existing = self.get(task_id)
        submitted = request.model_dump(exclude_unset=True)
        merged = existing.model_dump() | submitted

        fields = validate_task_fields(merged)
        self._check_references(fields["animal_id"], fields["assigned_to"])

        task = existing.model_copy(
            update={
                **fields,
                "notes": merged.get("notes"),
                "updated_at": self.now(),
            }
        )
        task = self._transition(
            task,
            submitted.get("status") or existing.status,
            completed_at=submitted.get("completed_at"),
            image_proof=submitted.get("image_proof"),
        )
        self.db.put(task_key(task.id), task)
        logger.info(f"Task {task.id} updated")
        return task

    def complete_task(self, task_id: str, request: TaskCompleteRequest) -> Task:
        task = self._transition(
            self.get(task_id),
            TaskStatus.COMPLETED,
            completed_at=request.completed_at,
            image_proof=request.image_proof,
        )
        task = task.model_copy(update={"updated_at": self.now()})
        self.db.put(task_key(task.id), task)
        logger.info(f"Task {task.id} marked completed")
        return task

    def verify_completion(self, task_id: str) -> Task:
        task = self.get(task_id)
        if task.status != TaskStatus.COMPLETED:
            raise ValidationError(
                "Only completed tasks can be verified", field="status"
            )
        task = task.model_copy(
            update={"completion_verified": True, "updated_at": self.now()}
        )
        self.db.put(task_key(task.id), task)
        logger.info(f"Task {task.id} completion verified")
        return task

    def delete_task(self, task_id: str) -> Task:
        task = self.get(task_id)
        self.db.delete(task_key(task.id))
        logger.info(f"Task {task.id} deleted")
        return task

    def list_tasks(
        self,
        *,
        status: TaskStatus | None = None,
        assigned_to: str | None = None,
        animal_id: str | None = None,
    ) -> list[Task]:
        tasks = [
            t
            for t in self.db.all()
            if isinstance(t, Task)
            and (status is None or t.status == status)
            and (assigned_to is None or t.assigned_to == assigned_to)
            and (animal_id is None or t.animal_id == animal_id)
        ]
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)

    def count_by_status(self, status: TaskStatus) -> int:
        return len(self.list_tasks(status=status))

    def occurrences(self, task_id: str, limit: int) -> list[datetime]:
        return expand_occurrences(self.get(task_id), limit)
