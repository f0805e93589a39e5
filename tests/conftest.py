from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import zoocare.routers.behavior as behavior_routes
from zoocare.api import create_app
from zoocare.config import Settings
from zoocare.database import InMemoryKeyValueDatabase
from zoocare.models import (
    Animal,
    AnimalStatus,
    BehaviorLog,
    Record,
    Session,
    Task,
    User,
    UserType,
)

SEEDED_AT = datetime(2025, 7, 1, 9, 0, 0, tzinfo=UTC)


def _p(msg: str) -> None:
    # pytest captures stdout unless you run with -s
    print(msg, flush=True)


def _banner(name: str) -> None:
    _p("\n" + "=" * 88)
    _p(f"test: {name}")
    _p("=" * 88)


def _dump_db(app) -> None:
    db: InMemoryKeyValueDatabase[str, Record] = app.state.database
    animals = [a for a in db.all() if isinstance(a, Animal)]
    logs = [b for b in db.all() if isinstance(b, BehaviorLog)]
    tasks = [t for t in db.all() if isinstance(t, Task)]

    _p("db animals:")
    for a in sorted(animals, key=lambda x: x.id):
        _p(
            f"  - {a.id} | {a.name} | status={a.status} | vet_id={a.vet_id} "
            f"assigned_at={a.assigned_at}"
        )
    _p(f"db behavior logs: {len(logs)}")
    for b in sorted(logs, key=lambda x: x.created_at):
        _p(
            f"  - {b.id} | animal={b.animal_id} eating={b.eating} "
            f"movement={b.movement} mood={b.mood}"
        )
    _p(f"db tasks: {len(tasks)}")
    for t in tasks:
        _p(f"  - {t.id} | {t.type} | status={t.status} times={t.schedule_times}")


def make_settings(**overrides) -> Settings:
    values = {"environment": "testing", "log_level": "WARNING"} | overrides
    return Settings(_env_file=None, **values)


def seed(db: InMemoryKeyValueDatabase[str, Record]) -> None:
    leo = Animal(
        id="A1",
        name="Leo",
        species="Lion",
        breed="Barbary",
        age=6,
        created_at=SEEDED_AT,
        updated_at=SEEDED_AT,
    )
    ellie = Animal(
        id="A2",
        name="Ellie",
        species="Elephant",
        breed="African bush",
        age=12,
        status=AnimalStatus.RECOVERING,
        created_at=SEEDED_AT,
        updated_at=SEEDED_AT,
    )
    ada = User(
        id="V1",
        name="Dr. Ada Okafor",
        email="ada@zoo.test",
        user_type=UserType.VET,
        specialization="Large mammals",
        experience=11,
    )
    ben = User(
        id="V2",
        name="Dr. Ben Ruiz",
        email="ben@zoo.test",
        user_type=UserType.VET,
        specialization="Exotic birds",
    )
    sam = User(id="U1", name="Sam Keeper", email="sam@zoo.test")
    kim = User(id="U2", name="Kim Keeper", email="kim@zoo.test")
    root = User(
        id="ADM1", name="Admin", email="admin@zoo.test", user_type=UserType.ADMIN
    )

    for animal in (leo, ellie):
        db.put(f"animal:{animal.id}", animal)
    for user in (ada, ben, sam, kim, root):
        db.put(f"user:{user.id}", user)
    db.put("session:token-u1", Session(token="token-u1", user_id="U1"))
    db.put("session:token-v1", Session(token="token-v1", user_id="V1"))


@pytest.fixture(autouse=True)
def notifier_mock(monkeypatch):
    """
    Patch the router-level import (routers/behavior.py does
    `from zoocare.notifier import alert_needs_attention`).
    """
    alert = AsyncMock(return_value=None)
    monkeypatch.setattr(behavior_routes, "alert_needs_attention", alert)
    return alert


@pytest_asyncio.fixture
async def client():
    app = create_app(make_settings())
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as async_client:
        yield async_client


@pytest_asyncio.fixture
async def setup_test_data(client: AsyncClient):
    app = client._transport.app
    seed(app.state.database)
