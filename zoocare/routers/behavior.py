from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from zoocare.config import Settings
from zoocare.dependencies import get_settings
from zoocare.models import Eating, Mood, Movement
from zoocare.notifier import alert_needs_attention
from zoocare.schemas import BehaviorCreateRequest
from zoocare.services.behavior import BehaviorLogService

router = APIRouter(prefix="/behavior")


def behavior_service(request: Request) -> BehaviorLogService:
    return BehaviorLogService(
        request.app.state.database,
        request.app.state.now_fn,
        notify=alert_needs_attention,
    )


Service = Annotated[BehaviorLogService, Depends(behavior_service)]


@router.post("/add", status_code=201)
async def add_behavior(body: BehaviorCreateRequest, service: Service) -> dict:
    result = await service.record_behavior(body)
    return {
        "success": True,
        "message": "Behavior log saved successfully.",
        "behavior": result.log.to_json(),
        "needsAttention": result.needs_attention,
        "statusUpdated": result.status_updated,
    }


@router.get("/singlebehavior/{animal_id}")
async def behaviors_for_animal(animal_id: str, service: Service) -> dict:
    behaviors = service.list_for_animal(animal_id)
    return {
        "success": True,
        "count": len(behaviors),
        "behaviors": [service.present(b) for b in behaviors],
    }


@router.get("/getAll")
async def all_behaviors(service: Service) -> dict:
    behaviors = service.list_all()
    return {
        "success": True,
        "count": len(behaviors),
        "behaviors": [service.present(b, with_animal=True) for b in behaviors],
    }


@router.get("/getAll/filtered")
async def filtered_behaviors(
    service: Service,
    settings: Annotated[Settings, Depends(get_settings)],
    page: int = 1,
    limit: int | None = None,
    animal_id: Annotated[str | None, Query(alias="animalId")] = None,
    eating: Eating | None = None,
    movement: Movement | None = None,
    mood: Mood | None = None,
    start_date: Annotated[str | None, Query(alias="startDate")] = None,
    end_date: Annotated[str | None, Query(alias="endDate")] = None,
) -> dict:
    if limit is None:
        limit = settings.default_page_size
    limit = min(limit, settings.max_page_size)
    result = service.list_filtered(
        page=page,
        limit=limit,
        animal_id=animal_id,
        eating=eating,
        movement=movement,
        mood=mood,
        start_date=start_date,
        end_date=end_date,
    )
    return {
        "success": True,
        "count": len(result.logs),
        "total": result.total,
        "totalPages": result.total_pages,
        "currentPage": result.current_page,
        "behaviors": [service.present(b, with_animal=True) for b in result.logs],
    }
