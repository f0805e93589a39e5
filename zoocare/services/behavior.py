"""
Behavior log: append-only observations per animal.

Recording a log is two independent writes. The log itself is persisted first
and always kept. If the observation is critical, the animal is then flagged
``needs_attention`` as a best-effort second step; a failure there is logged and
reported on the result (``status_updated=False``) but does not fail the call.
The flag is one-way: nothing here ever resets an animal to ``healthy``.
"""

import math
from collections.abc import Awaitable, Callable

from loguru import logger
from pydantic import BaseModel

from zoocare.errors import ValidationError, check_identifier
from zoocare.models import (
    Animal,
    AnimalStatus,
    BehaviorLog,
    Eating,
    Mood,
    Movement,
)
from zoocare.schemas import BehaviorCreateRequest
from zoocare.services.animals import AnimalRegistry
from zoocare.services.base import (
    BaseService,
    Database,
    NowFn,
    new_id,
    parse_bound,
)
from zoocare.services.users import UserDirectory

NotifyFn = Callable[[Animal, BehaviorLog], Awaitable[None]]


def needs_attention(eating: Eating, movement: Movement, mood: Mood) -> bool:
    return (
        eating == Eating.NONE
        or movement == Movement.LIMPING
        or mood == Mood.AGGRESSIVE
    )


class BehaviorRecordResult(BaseModel):
    log: BehaviorLog
    needs_attention: bool
    status_updated: bool


class BehaviorPage(BaseModel):
    logs: list[BehaviorLog]
    total: int
    total_pages: int
    current_page: int


class BehaviorLogService(BaseService):
    def __init__(
        self,
        db: Database,
        now_fn: NowFn,
        *,
        notify: NotifyFn | None = None,
    ) -> None:
        super().__init__(db, now_fn)
        self.animals = AnimalRegistry(db, now_fn)
        self.users = UserDirectory(db, now_fn)
        self.notify = notify

    async def record_behavior(
        self, request: BehaviorCreateRequest
    ) -> BehaviorRecordResult:
        check_identifier(request.animal_id, "animalId")
        check_identifier(request.recorded_by, "recordedBy")

        log = BehaviorLog(
            id=new_id(),
            animal_id=request.animal_id,
            eating=request.eating,
            movement=request.movement,
            mood=request.mood,
            notes=request.notes,
            recorded_by=request.recorded_by,
            created_at=self.now(),
        )
        self.db.put(f"behavior:{log.id}", log)
        logger.info(f"Behavior log {log.id} saved for animal {log.animal_id}")

        if not needs_attention(log.eating, log.movement, log.mood):
            return BehaviorRecordResult(
                log=log, needs_attention=False, status_updated=False
            )

        status_updated = await self._flag_animal(log)
        return BehaviorRecordResult(
            log=log, needs_attention=True, status_updated=status_updated
        )

    async def _flag_animal(self, log: BehaviorLog) -> bool:
        try:
            animal = self.animals.set_status(
                log.animal_id, AnimalStatus.NEEDS_ATTENTION
            )
        except Exception:
            logger.exception(
                f"Could not flag animal {log.animal_id}; behavior log {log.id} was kept"
            )
            return False

        if animal is None:
            logger.warning(
                f"Behavior log {log.id} references unknown animal "
                f"{log.animal_id}; status not updated"
            )
            return False

        logger.warning(f"Animal {animal.id} flagged for attention.")
        if self.notify is not None:
            try:
                await self.notify(animal, log)
            except Exception:
                logger.exception(f"Alert for animal {animal.id} failed")
        return True

    def _all_logs(self) -> list[BehaviorLog]:
        logs = [b for b in self.db.all() if isinstance(b, BehaviorLog)]
        return sorted(logs, key=lambda b: b.created_at, reverse=True)

    def list_for_animal(self, animal_id: str) -> list[BehaviorLog]:
        check_identifier(animal_id, "animalId")
        return [b for b in self._all_logs() if b.animal_id == animal_id]

    def list_all(self) -> list[BehaviorLog]:
        return self._all_logs()

    def list_filtered(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        animal_id: str | None = None,
        eating: Eating | None = None,
        movement: Movement | None = None,
        mood: Mood | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> BehaviorPage:
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers")
        start = parse_bound(start_date, "startDate")
        end = parse_bound(end_date, "endDate")

        matching = [
            b
            for b in self._all_logs()
            if (animal_id is None or b.animal_id == animal_id)
            and (eating is None or b.eating == eating)
            and (movement is None or b.movement == movement)
            and (mood is None or b.mood == mood)
            and (start is None or b.created_at >= start)
            and (end is None or b.created_at <= end)
        ]
        offset = (page - 1) * limit
        return BehaviorPage(
            logs=matching[offset : offset + limit],
            total=len(matching),
            total_pages=math.ceil(len(matching) / limit),
            current_page=page,
        )

    def present(self, log: BehaviorLog, *, with_animal: bool = False) -> dict:
        """Serialize a log with its recording user and, optionally, its animal."""
        body = log.to_json()
        user = self.users.find(log.recorded_by)
        body["recordedBy"] = user.public() if user else None
        if with_animal:
            animal = self.animals.find(log.animal_id)
            body["animalId"] = (
                {
                    "id": animal.id,
                    "name": animal.name,
                    "species": animal.species,
                    "breed": animal.breed,
                }
                if animal
                else None
            )
        return body
