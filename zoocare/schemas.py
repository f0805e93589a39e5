"""
Request bodies accepted by the REST surface.

Blank strings from the mobile forms are treated as missing values so that the
services report them with their own messages instead of enum/type errors.
"""

from datetime import datetime

from pydantic import Field, field_validator

from zoocare.models import (
    AnimalStatus,
    CamelModel,
    Eating,
    MedicalRecordStatus,
    Mood,
    Movement,
    RecurrencePattern,
    TaskStatus,
    TaskType,
)


class FormModel(CamelModel):
    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class BehaviorCreateRequest(FormModel):
    animal_id: str
    eating: Eating
    movement: Movement
    mood: Mood
    recorded_by: str
    notes: str | None = None


class AssignVetRequest(FormModel):
    animal_id: str | None = None
    vet_id: str | None = None
    reason: str | None = None


class TaskRequest(FormModel):
    type: TaskType | None = None
    animal_id: str | None = None
    assigned_to: str | None = None
    schedule_date: str | None = None
    schedule_times: list[str] | None = None
    status: TaskStatus | None = None
    is_recurring: bool | None = None
    recurrence_pattern: RecurrencePattern | None = None
    end_date: str | None = None
    completed_at: datetime | None = None
    image_proof: str | None = None
    notes: str | None = None


class TaskCompleteRequest(FormModel):
    completed_at: datetime | None = None
    image_proof: str | None = None


class AnimalCreateRequest(FormModel):
    name: str
    species: str
    breed: str | None = None
    age: int | None = Field(default=None, ge=0)
    status: AnimalStatus = AnimalStatus.HEALTHY
    photo: str | None = None


class AnimalUpdateRequest(FormModel):
    name: str | None = None
    species: str | None = None
    breed: str | None = None
    age: int | None = Field(default=None, ge=0)
    status: AnimalStatus | None = None
    photo: str | None = None


class AnimalAssignVetRequest(FormModel):
    vet_id: str | None = None
    reason: str | None = None


class MedicalRecordRequest(FormModel):
    animal: str | None = None
    record_type: str | None = None
    date: datetime | None = None
    description: str | None = None
    diagnosis: str | None = None
    treatment: str | None = None
    weight: float | None = Field(default=None, gt=0)
    temperature: float | None = Field(default=None, gt=0)
    notes: str | None = None
    follow_up_date: datetime | None = None
    is_critical: bool | None = None
    status: MedicalRecordStatus | None = None
