"""
Domain models stored in the key/value database.

Attributes are snake_case in Python and camelCase on the wire.
"""

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class AnimalStatus(StrEnum):
    HEALTHY = "healthy"
    NEEDS_ATTENTION = "needs_attention"
    UNDER_TREATMENT = "under_treatment"
    RECOVERING = "recovering"


class Eating(StrEnum):
    NORMAL = "Normal"
    INCREASED = "Increased"
    REDUCED = "Reduced"
    NONE = "None"


class Movement(StrEnum):
    NORMAL = "Normal"
    SLOW = "Slow"
    LIMPING = "Limping"
    RESTLESS = "Restless"
    IMMOBILE = "Immobile"


class Mood(StrEnum):
    CALM = "Calm"
    PLAYFUL = "Playful"
    ANXIOUS = "Anxious"
    LETHARGIC = "Lethargic"
    AGGRESSIVE = "Aggressive"


class TaskType(StrEnum):
    FEEDING = "Feeding"
    CLEANING = "Cleaning"
    HEALTH_CHECK = "Health Check"
    MEDICATION = "Medication"
    OBSERVATION = "Observation"
    WEIGHT_MONITORING = "Weight Monitoring"


class TaskStatus(StrEnum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class RecurrencePattern(StrEnum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"


class UserType(StrEnum):
    ADMIN = "admin"
    VET = "vet"
    USER = "user"


class MedicalRecordStatus(StrEnum):
    ACTIVE = "active"
    RESOLVED = "resolved"
    FOLLOW_UP = "follow_up"


class Animal(CamelModel):
    id: str
    name: str
    species: str
    breed: str | None = None
    age: int | None = Field(default=None, ge=0)
    status: AnimalStatus = AnimalStatus.HEALTHY
    photo: str | None = None  # URI, storage is external
    vet_id: str | None = None  # weak reference to User
    assignment_reason: str | None = None
    assigned_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class BehaviorLog(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    animal_id: str
    eating: Eating
    movement: Movement
    mood: Mood
    notes: str | None = None
    recorded_by: str
    created_at: datetime


class Task(CamelModel):
    id: str
    type: TaskType
    animal_id: str
    assigned_to: str
    schedule_date: date
    schedule_times: list[str]
    status: TaskStatus = TaskStatus.PENDING
    is_recurring: bool = False
    recurrence_pattern: RecurrencePattern | None = None
    end_date: date | None = None
    completed_at: datetime | None = None
    completion_verified: bool = False
    image_proof: str | None = None  # URI
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class MedicalRecord(CamelModel):
    id: str
    animal: str  # weak reference to Animal
    veterinarian: str  # user who wrote the record
    record_type: str = "checkup"
    date: datetime
    description: str
    diagnosis: str | None = None
    treatment: str | None = None
    weight: float | None = None  # kg
    temperature: float | None = None  # degrees Celsius
    notes: str | None = None
    follow_up_date: datetime | None = None
    is_critical: bool = False
    status: MedicalRecordStatus = MedicalRecordStatus.ACTIVE
    created_at: datetime
    updated_at: datetime


class User(CamelModel):
    id: str
    name: str
    email: str
    user_type: UserType = UserType.USER
    # vet-only
    specialization: str | None = None
    location: str | None = None
    experience: int | None = None
    phone: str | None = None

    def public(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email}


class Session(CamelModel):
    token: str
    user_id: str


Record = Animal | BehaviorLog | Task | MedicalRecord | User | Session
