from typing import Annotated

from fastapi import APIRouter, Depends

from zoocare.dependencies import vet_assignments
from zoocare.models import AnimalStatus
from zoocare.schemas import AnimalAssignVetRequest, AssignVetRequest
from zoocare.services.vets import VetAssignmentService

router = APIRouter()

Service = Annotated[VetAssignmentService, Depends(vet_assignments)]


def _assigned(service: VetAssignmentService, body: AssignVetRequest) -> dict:
    assignment = service.assign_vet(body.animal_id, body.vet_id, body.reason)
    return {
        "success": True,
        "message": "Veterinarian assigned successfully.",
        "assignment": assignment.to_json(),
    }


@router.post("/behavior/assign-vet")
async def assign_vet(body: AssignVetRequest, service: Service) -> dict:
    return _assigned(service, body)


@router.post("/animals/{animal_id}/assign-vet")
async def assign_vet_to_animal(
    animal_id: str, body: AnimalAssignVetRequest, service: Service
) -> dict:
    request = AssignVetRequest(
        animal_id=animal_id, vet_id=body.vet_id, reason=body.reason
    )
    return _assigned(service, request)


@router.delete("/behavior/assign-vet/{animal_id}")
async def unassign_vet(animal_id: str, service: Service) -> dict:
    animal = service.unassign_vet(animal_id)
    return {
        "success": True,
        "message": "Veterinarian assignment removed.",
        "animal": animal.to_json(),
    }


@router.get("/behavior/assigned-vet/{animal_id}")
async def assigned_vet(animal_id: str, service: Service) -> dict:
    animal, vet = service.get_assigned_vet(animal_id)
    return {
        "success": True,
        "animalId": animal.id,
        "vet": vet.to_json() if vet else None,
        "assignmentReason": animal.assignment_reason,
        "assignedAt": animal.assigned_at.isoformat() if animal.assigned_at else None,
    }


@router.get("/behavior/vet/{vet_id}/assigned-animals")
@router.get("/user/vet/{vet_id}/assigned-animals")
async def assigned_animals(
    vet_id: str, service: Service, status: AnimalStatus | None = None
) -> dict:
    animals = service.get_assigned_animals(vet_id, status=status)
    return {
        "success": True,
        "count": len(animals),
        "animals": [a.to_json() for a in animals],
    }
