from typing import Annotated

from fastapi import APIRouter, Depends, Query

from zoocare.dependencies import CurrentUser, medical_records
from zoocare.models import MedicalRecordStatus
from zoocare.schemas import MedicalRecordRequest
from zoocare.services.medical import POPULATABLE, MedicalRecordService

router = APIRouter(prefix="/medical-records")

Service = Annotated[MedicalRecordService, Depends(medical_records)]


def _populate(value: str | None) -> set[str]:
    if not value:
        return set()
    return {part.strip() for part in value.split(",")} & POPULATABLE


@router.get("")
async def list_records(
    service: Service,
    user: CurrentUser,
    record_type: Annotated[str | None, Query(alias="recordType")] = None,
    animal: str | None = None,
    status: MedicalRecordStatus | None = None,
    date_from: Annotated[str | None, Query(alias="dateFrom")] = None,
    date_to: Annotated[str | None, Query(alias="dateTo")] = None,
    populate: str | None = None,
) -> list[dict]:
    # bare list: the vet dashboard counts it directly
    records = service.list_records(
        record_type=record_type,
        animal=animal,
        status=status,
        date_from=date_from,
        date_to=date_to,
    )
    fields = _populate(populate)
    return [service.present(r, fields) for r in records]


@router.post("", status_code=201)
async def create_record(
    body: MedicalRecordRequest, service: Service, user: CurrentUser
) -> dict:
    record = service.create_record(body, user)
    return {
        "success": True,
        "message": "Medical record created.",
        "record": record.to_json(),
    }


@router.get("/{record_id}")
async def get_record(
    record_id: str,
    service: Service,
    user: CurrentUser,
    populate: str | None = None,
) -> dict:
    record = service.get(record_id)
    return {"success": True, "record": service.present(record, _populate(populate))}


@router.put("/{record_id}")
async def update_record(
    record_id: str, body: MedicalRecordRequest, service: Service, user: CurrentUser
) -> dict:
    record = service.update_record(record_id, body, user)
    return {
        "success": True,
        "message": "Medical record updated.",
        "record": record.to_json(),
    }


@router.delete("/{record_id}")
async def delete_record(record_id: str, service: Service, user: CurrentUser) -> dict:
    service.delete_record(record_id, user)
    return {"success": True, "message": "Medical record deleted."}
