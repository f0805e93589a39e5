from typing import Annotated

from fastapi import APIRouter, Depends, Query

from zoocare.dependencies import animal_registry
from zoocare.models import AnimalStatus
from zoocare.schemas import AnimalCreateRequest, AnimalUpdateRequest
from zoocare.services.animals import AnimalRegistry

router = APIRouter(prefix="/animal")

Registry = Annotated[AnimalRegistry, Depends(animal_registry)]


@router.get("/getAll")
async def all_animals(
    registry: Registry,
    status: AnimalStatus | None = None,
    species: str | None = None,
    vet_id: Annotated[str | None, Query(alias="vetId")] = None,
) -> dict:
    animals = registry.list_animals(status=status, species=species, vet_id=vet_id)
    return {
        "success": True,
        "count": len(animals),
        "animals": [a.to_json() for a in animals],
    }


@router.get("/count")
async def count_animals(registry: Registry, status: AnimalStatus | None = None) -> dict:
    return {"success": True, "count": registry.count(status=status)}


@router.post("/add", status_code=201)
async def add_animal(body: AnimalCreateRequest, registry: Registry) -> dict:
    animal = registry.create(body)
    return {"success": True, "animal": animal.to_json()}


@router.put("/update/{animal_id}")
async def update_animal(
    animal_id: str, body: AnimalUpdateRequest, registry: Registry
) -> dict:
    animal = registry.update(animal_id, body)
    return {"success": True, "animal": animal.to_json()}


@router.delete("/delete/{animal_id}")
async def delete_animal(animal_id: str, registry: Registry) -> dict:
    animal = registry.delete(animal_id)
    return {"success": True, "message": f"{animal.name} deleted successfully."}


@router.get("/{animal_id}")
async def get_animal(animal_id: str, registry: Registry) -> dict:
    return {"success": True, "animal": registry.get(animal_id).to_json()}
