"""
Medical records written by veterinarians.

Every record belongs to one animal and one author. Only vets and admins may
write; any authenticated user may read.
"""

from typing import Any

from loguru import logger

from zoocare.errors import Forbidden, NotFound, ValidationError, check_identifier
from zoocare.models import MedicalRecord, MedicalRecordStatus, User, UserType
from zoocare.schemas import MedicalRecordRequest
from zoocare.services.animals import AnimalRegistry
from zoocare.services.base import (
    BaseService,
    Database,
    NowFn,
    as_utc,
    new_id,
    parse_bound,
)
from zoocare.services.users import UserDirectory

REQUIRED_MESSAGE = "Animal and description are required"
WRITERS = {UserType.VET, UserType.ADMIN}
POPULATABLE = {"animal", "veterinarian"}


def medical_key(record_id: str) -> str:
    return f"medical:{record_id}"


class MedicalRecordService(BaseService):
    def __init__(self, db: Database, now_fn: NowFn) -> None:
        super().__init__(db, now_fn)
        self.animals = AnimalRegistry(db, now_fn)
        self.users = UserDirectory(db, now_fn)

    def get(self, record_id: str) -> MedicalRecord:
        check_identifier(record_id, "recordId")
        record = self.db.get(medical_key(record_id))
        if not isinstance(record, MedicalRecord):
            raise NotFound("Medical record not found.")
        return record

    def _check_writer(self, user: User) -> None:
        if user.user_type not in WRITERS:
            raise Forbidden("Only veterinarians can manage medical records.")

    def _clean(self, data: dict[str, Any]) -> dict[str, Any]:
        for attr in ("animal", "description"):
            if not data.get(attr):
                raise ValidationError(REQUIRED_MESSAGE, field=attr)
        check_identifier(data["animal"], "animal")
        self.animals.get(data["animal"])

        follow_up = data.get("follow_up_date")
        return {
            "animal": data["animal"],
            "record_type": data.get("record_type") or "checkup",
            "date": as_utc(data.get("date") or self.now()),
            "description": data["description"].strip(),
            "diagnosis": data.get("diagnosis"),
            "treatment": data.get("treatment"),
            "weight": data.get("weight"),
            "temperature": data.get("temperature"),
            "notes": data.get("notes"),
            "follow_up_date": as_utc(follow_up) if follow_up else None,
            "is_critical": bool(data.get("is_critical")),
            "status": data.get("status") or MedicalRecordStatus.ACTIVE,
        }

    def create_record(
        self, request: MedicalRecordRequest, author: User
    ) -> MedicalRecord:
        self._check_writer(author)
        fields = self._clean(request.model_dump())

        now = self.now()
        record = MedicalRecord(
            id=new_id(),
            veterinarian=author.id,
            **fields,
            created_at=now,
            updated_at=now,
        )
        self.db.put(medical_key(record.id), record)
        logger.info(
            f"Medical record {record.id} ({record.record_type}) created for "
            f"animal {record.animal} by {author.id}"
        )
        if record.is_critical:
            logger.warning(f"Critical medical record {record.id} for {record.animal}")
        return record

    def update_record(
        self, record_id: str, request: MedicalRecordRequest, author: User
    ) -> MedicalRecord:
        self._check_writer(author)
        existing = self.get(record_id)
        merged = existing.model_dump() | request.model_dump(exclude_unset=True)
        fields = self._clean(merged)

        record = existing.model_copy(update={**fields, "updated_at": self.now()})
        self.db.put(medical_key(record.id), record)
        logger.info(f"Medical record {record.id} updated by {author.id}")
        return record

    def delete_record(self, record_id: str, author: User) -> None:
        self._check_writer(author)
        record = self.get(record_id)
        self.db.delete(medical_key(record.id))
        logger.info(f"Medical record {record.id} deleted by {author.id}")

    def list_records(
        self,
        *,
        record_type: str | None = None,
        animal: str | None = None,
        status: MedicalRecordStatus | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[MedicalRecord]:
        """
        List records newest first.

        Args:
            record_type: Exact record type, e.g. ``checkup``
            animal: Animal id
            status: Record status
            date_from: Inclusive ISO 8601 lower bound on ``date``
            date_to: Inclusive ISO 8601 upper bound on ``date``
        """
        start = parse_bound(date_from, "dateFrom")
        end = parse_bound(date_to, "dateTo")
        records = [
            r
            for r in self.db.all()
            if isinstance(r, MedicalRecord)
            and (record_type is None or r.record_type == record_type)
            and (animal is None or r.animal == animal)
            and (status is None or r.status == status)
            and (start is None or r.date >= start)
            and (end is None or r.date <= end)
        ]
        return sorted(records, key=lambda r: r.date, reverse=True)

    def present(self, record: MedicalRecord, populate: set[str]) -> dict:
        body = record.to_json()
        if "animal" in populate:
            animal = self.animals.find(record.animal)
            body["animal"] = (
                {
                    "id": animal.id,
                    "name": animal.name,
                    "species": animal.species,
                    "status": animal.status,
                }
                if animal
                else None
            )
        if "veterinarian" in populate:
            vet = self.users.find(record.veterinarian)
            body["veterinarian"] = vet.public() if vet else None
        return body
