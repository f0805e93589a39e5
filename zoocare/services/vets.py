"""
Veterinarian assignment. The assignment lives on the animal record
(``vet_id``, ``assignment_reason``, ``assigned_at``).
"""

from datetime import datetime

from loguru import logger

from zoocare.errors import NotFound, ValidationError, check_identifier
from zoocare.models import Animal, AnimalStatus, CamelModel, User
from zoocare.services.animals import AnimalRegistry, animal_key
from zoocare.services.base import BaseService, Database, NowFn
from zoocare.services.users import UserDirectory

VET_NOT_FOUND = "Veterinarian not found or invalid user type."
ALREADY_ASSIGNED = "Veterinarian is already assigned to this animal."


class AssignmentResult(CamelModel):
    animal_id: str
    animal_name: str
    vet_id: str
    vet_name: str
    specialization: str | None = None
    reason: str | None = None
    assigned_at: datetime


class VetAssignmentService(BaseService):
    def __init__(self, db: Database, now_fn: NowFn) -> None:
        super().__init__(db, now_fn)
        self.animals = AnimalRegistry(db, now_fn)
        self.users = UserDirectory(db, now_fn)

    def _get_vet(self, vet_id: str) -> User:
        check_identifier(vet_id, "vetId")
        vet = self.users.find_vet(vet_id)
        if vet is None:
            raise NotFound(VET_NOT_FOUND)
        return vet

    def assign_vet(
        self, animal_id: str | None, vet_id: str | None, reason: str | None = None
    ) -> AssignmentResult:
        if not animal_id or not vet_id:
            raise ValidationError("animalId and vetId are required.")

        animal = self.animals.get(animal_id)
        vet = self._get_vet(vet_id)
        if animal.vet_id == vet.id:
            raise ValidationError(ALREADY_ASSIGNED, field="vetId")

        reason = reason.strip() if reason else None
        assigned_at = self.now()
        if not self.db.assign_vet_if_not_assigned(
            animal_key(animal.id), vet.id, reason, assigned_at
        ):
            # lost a race with an identical assignment
            raise ValidationError(ALREADY_ASSIGNED, field="vetId")

        logger.info(f"Vet {vet.id} assigned to animal {animal.id}")
        return AssignmentResult(
            animal_id=animal.id,
            animal_name=animal.name,
            vet_id=vet.id,
            vet_name=vet.name,
            specialization=vet.specialization,
            reason=reason,
            assigned_at=assigned_at,
        )

    def unassign_vet(self, animal_id: str) -> Animal:
        animal = self.animals.get(animal_id)
        if animal.vet_id is None:
            raise ValidationError(
                "No veterinarian is assigned to this animal.", field="vetId"
            )
        animal = animal.model_copy(
            update={
                "vet_id": None,
                "assignment_reason": None,
                "assigned_at": None,
                "updated_at": self.now(),
            }
        )
        self.db.put(animal_key(animal.id), animal)
        logger.info(f"Vet assignment cleared on animal {animal.id}")
        return animal

    def get_assigned_vet(self, animal_id: str) -> tuple[Animal, User | None]:
        animal = self.animals.get(animal_id)
        if animal.vet_id is None:
            return animal, None
        return animal, self.users.find(animal.vet_id)

    def get_assigned_animals(
        self, vet_id: str, *, status: AnimalStatus | None = None
    ) -> list[Animal]:
        vet = self._get_vet(vet_id)
        return self.animals.list_animals(vet_id=vet.id, status=status)
