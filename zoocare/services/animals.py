from loguru import logger

from zoocare.errors import NotFound, check_identifier
from zoocare.models import Animal, AnimalStatus
from zoocare.schemas import AnimalCreateRequest, AnimalUpdateRequest
from zoocare.services.base import BaseService, new_id

# optional fields an admin may blank out on edit
CLEARABLE_FIELDS = {"breed", "age", "photo"}


def animal_key(animal_id: str) -> str:
    return f"animal:{animal_id}"


class AnimalRegistry(BaseService):
    """CRUD over animal records."""

    def find(self, animal_id: str) -> Animal | None:
        animal = self.db.get(animal_key(animal_id))
        return animal if isinstance(animal, Animal) else None

    def get(self, animal_id: str) -> Animal:
        check_identifier(animal_id, "animalId")
        animal = self.find(animal_id)
        if animal is None:
            raise NotFound("Animal not found.")
        return animal

    def list_animals(
        self,
        *,
        status: AnimalStatus | None = None,
        species: str | None = None,
        vet_id: str | None = None,
    ) -> list[Animal]:
        animals = [
            a
            for a in self.db.all()
            if isinstance(a, Animal)
            and (status is None or a.status == status)
            and (species is None or a.species.lower() == species.lower())
            and (vet_id is None or a.vet_id == vet_id)
        ]
        return sorted(animals, key=lambda a: a.created_at)

    def count(self, *, status: AnimalStatus | None = None) -> int:
        return len(self.list_animals(status=status))

    def create(self, request: AnimalCreateRequest) -> Animal:
        now = self.now()
        animal = Animal(
            id=new_id(),
            **request.model_dump(),
            created_at=now,
            updated_at=now,
        )
        self.db.put(animal_key(animal.id), animal)
        logger.info(f"Animal {animal.id} ({animal.name}) added")
        return animal

    def update(self, animal_id: str, request: AnimalUpdateRequest) -> Animal:
        animal = self.get(animal_id)
        changes = {
            field: value
            for field, value in request.model_dump(exclude_unset=True).items()
            if value is not None or field in CLEARABLE_FIELDS
        }
        animal = animal.model_copy(update={**changes, "updated_at": self.now()})
        self.db.put(animal_key(animal.id), animal)
        logger.info(f"Animal {animal.id} updated: {sorted(changes)}")
        return animal

    def delete(self, animal_id: str) -> Animal:
        animal = self.get(animal_id)
        self.db.delete(animal_key(animal.id))
        logger.info(f"Animal {animal.id} deleted")
        return animal

    def set_status(self, animal_id: str, status: AnimalStatus) -> Animal | None:
        """Overwrite an animal's status. Returns None when the animal does not exist."""
        animal = self.find(animal_id)
        if animal is None:
            return None
        animal = animal.model_copy(update={"status": status, "updated_at": self.now()})
        self.db.put(animal_key(animal.id), animal)
        return animal
