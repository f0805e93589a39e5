import asyncio
from datetime import timedelta

import pytest
from freezegun import freeze_time
from httpx import AsyncClient

from conftest import _banner, _dump_db, _p
from zoocare.models import Animal, AnimalStatus, BehaviorLog
from zoocare.services.animals import AnimalRegistry


def _log(
    animal_id="A1", eating="Normal", movement="Normal", mood="Calm", recorded_by="U1"
):
    return {
        "animalId": animal_id,
        "eating": eating,
        "movement": movement,
        "mood": mood,
        "recordedBy": recorded_by,
    }


def _animal(app, animal_id: str) -> Animal:
    animal = app.state.database.get(f"animal:{animal_id}")
    assert isinstance(animal, Animal)
    return animal


def _logs(app) -> list[BehaviorLog]:
    return [b for b in app.state.database.all() if isinstance(b, BehaviorLog)]


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    _banner("health_check returns ok")
    resp = await client.get("/health")
    _p(f"GET /health -> status={resp.status_code}, body={resp.json()}")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_no_food_flags_animal_for_attention(
    client: AsyncClient, setup_test_data
) -> None:
    _banner("eating=None -> 201 and animal shows needs_attention")
    resp = await client.post("/behavior/add", json=_log(eating="None"))
    _p(f"POST /behavior/add -> status={resp.status_code}, body={resp.json()}")
    assert resp.status_code == 201
    assert resp.json()["message"] == "Behavior log saved successfully."
    assert resp.json()["needsAttention"] is True
    assert resp.json()["statusUpdated"] is True

    animal = await client.get("/animal/A1")
    _p(f"GET /animal/A1 -> {animal.json()}")
    assert animal.json()["animal"]["status"] == "needs_attention"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"eating": "None"},
        {"movement": "Limping"},
        {"mood": "Aggressive"},
        {"eating": "None", "movement": "Limping", "mood": "Aggressive"},
    ],
)
async def test_each_critical_observation_flags_regardless_of_prior_status(
    client: AsyncClient, setup_test_data, overrides
) -> None:
    _banner(f"critical observation {overrides} flags a recovering animal")
    app = client._transport.app
    assert _animal(app, "A2").status == AnimalStatus.RECOVERING

    resp = await client.post("/behavior/add", json=_log(animal_id="A2", **overrides))
    _p(f"POST /behavior/add -> status={resp.status_code}, body={resp.json()}")
    _dump_db(app)

    assert resp.status_code == 201
    assert _animal(app, "A2").status == AnimalStatus.NEEDS_ATTENTION


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {},
        {"eating": "Reduced", "movement": "Slow", "mood": "Anxious"},
        {"eating": "Increased", "movement": "Restless", "mood": "Lethargic"},
    ],
)
async def test_non_critical_observation_leaves_status_unchanged(
    client: AsyncClient, setup_test_data, notifier_mock, overrides
) -> None:
    _banner(f"non-critical observation {overrides} does not touch status")
    app = client._transport.app

    resp = await client.post("/behavior/add", json=_log(animal_id="A2", **overrides))
    _p(f"POST /behavior/add -> status={resp.status_code}, body={resp.json()}")

    assert resp.status_code == 201
    assert resp.json()["needsAttention"] is False
    assert _animal(app, "A2").status == AnimalStatus.RECOVERING
    assert notifier_mock.await_count == 0


@pytest.mark.asyncio
async def test_flag_is_never_cleared_by_later_normal_logs(
    client: AsyncClient, setup_test_data
) -> None:
    _banner("needs_attention is one-way: a normal log afterwards keeps the flag")
    app = client._transport.app

    await client.post("/behavior/add", json=_log(mood="Aggressive"))
    await client.post("/behavior/add", json=_log())
    _dump_db(app)

    assert _animal(app, "A1").status == AnimalStatus.NEEDS_ATTENTION
    assert len(_logs(app)) == 2


@pytest.mark.asyncio
async def test_notifier_receives_flagged_animal(
    client: AsyncClient, setup_test_data, notifier_mock
) -> None:
    _banner("flagging an animal awaits the notifier once with animal + log")
    await client.post("/behavior/add", json=_log(movement="Limping"))

    _p(f"notifier await_count: {notifier_mock.await_count}")
    assert notifier_mock.await_count == 1
    (animal, log), _ = notifier_mock.await_args
    assert animal.id == "A1"
    assert animal.status == AnimalStatus.NEEDS_ATTENTION
    assert log.movement == "Limping"


@pytest.mark.asyncio
async def test_log_is_kept_when_status_update_fails(
    client: AsyncClient, setup_test_data, notifier_mock, monkeypatch
) -> None:
    _banner("status update failure does not roll back or fail the log write")
    app = client._transport.app

    def broken_set_status(self, animal_id, status):
        raise RuntimeError("datastore unavailable")

    monkeypatch.setattr(AnimalRegistry, "set_status", broken_set_status)

    resp = await client.post("/behavior/add", json=_log(eating="None"))
    _p(f"POST /behavior/add -> status={resp.status_code}, body={resp.json()}")
    _dump_db(app)

    assert resp.status_code == 201
    assert resp.json()["needsAttention"] is True
    assert resp.json()["statusUpdated"] is False
    assert len(_logs(app)) == 1
    assert _animal(app, "A1").status == AnimalStatus.HEALTHY
    assert notifier_mock.await_count == 0


@pytest.mark.asyncio
async def test_log_for_unknown_animal_is_kept_without_status_update(
    client: AsyncClient, setup_test_data
) -> None:
    _banner("critical log for an unknown animal is saved, nothing is flagged")
    app = client._transport.app

    resp = await client.post(
        "/behavior/add", json=_log(animal_id="ghost", eating="None")
    )
    _p(f"POST /behavior/add -> status={resp.status_code}, body={resp.json()}")

    assert resp.status_code == 201
    assert resp.json()["statusUpdated"] is False
    assert [b.animal_id for b in _logs(app)] == ["ghost"]


@pytest.mark.asyncio
async def test_notifier_failure_does_not_fail_the_request(
    client: AsyncClient, setup_test_data, notifier_mock
) -> None:
    _banner("alert delivery failure is logged, request still succeeds")
    app = client._transport.app
    notifier_mock.side_effect = RuntimeError("smtp down")

    resp = await client.post("/behavior/add", json=_log(mood="Aggressive"))
    _p(f"POST /behavior/add -> status={resp.status_code}, body={resp.json()}")

    assert resp.status_code == 201
    assert resp.json()["statusUpdated"] is True
    assert _animal(app, "A1").status == AnimalStatus.NEEDS_ATTENTION


@pytest.mark.asyncio
async def test_concurrent_logs_for_same_animal_race_on_status(
    client: AsyncClient, setup_test_data
) -> None:
    _banner("known race: concurrent logs both persist, status write is last-wins")
    app = client._transport.app

    r1, r2 = await asyncio.gather(
        client.post("/behavior/add", json=_log(eating="None")),
        client.post("/behavior/add", json=_log(mood="Aggressive")),
    )
    _p(f"responses: {r1.status_code} {r2.status_code}")
    _dump_db(app)

    assert r1.status_code == r2.status_code == 201
    assert len(_logs(app)) == 2
    # both writers set the same value, so last-wins still ends flagged
    assert _animal(app, "A1").status == AnimalStatus.NEEDS_ATTENTION


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"eating": "Starving"}, {"movement": "limping"}, {"mood": ""}],
)
async def test_unknown_vocabulary_is_rejected(
    client: AsyncClient, setup_test_data, overrides
) -> None:
    _banner(f"closed vocabulary: {overrides} is rejected before persistence")
    app = client._transport.app

    resp = await client.post("/behavior/add", json=_log(**overrides))
    _p(f"POST /behavior/add -> status={resp.status_code}, body={resp.json()}")

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert _logs(app) == []


@pytest.mark.asyncio
async def test_single_animal_history_is_newest_first_with_recorder(
    client: AsyncClient, setup_test_data
) -> None:
    _banner("singlebehavior returns only that animal's logs, newest first")
    with freeze_time("2025-07-02 08:00:00", real_asyncio=True) as frozen:
        await client.post("/behavior/add", json=_log(mood="Calm"))
        frozen.tick(delta=timedelta(minutes=5))
        await client.post("/behavior/add", json=_log(animal_id="A2"))
        frozen.tick(delta=timedelta(minutes=5))
        await client.post("/behavior/add", json=_log(mood="Playful"))

    resp = await client.get("/behavior/singlebehavior/A1")
    body = resp.json()
    _p(f"GET /behavior/singlebehavior/A1 -> {body}")

    assert resp.status_code == 200
    assert body["success"] is True
    assert body["count"] == 2
    assert [b["mood"] for b in body["behaviors"]] == ["Playful", "Calm"]
    assert body["behaviors"][0]["recordedBy"] == {
        "id": "U1",
        "name": "Sam Keeper",
        "email": "sam@zoo.test",
    }


@pytest.mark.asyncio
async def test_get_all_populates_animal_details(
    client: AsyncClient, setup_test_data
) -> None:
    _banner("getAll populates animal name/species/breed")
    await client.post("/behavior/add", json=_log(animal_id="A2"))

    body = (await client.get("/behavior/getAll")).json()
    _p(f"GET /behavior/getAll -> {body}")

    assert body["count"] == 1
    assert body["behaviors"][0]["animalId"] == {
        "id": "A2",
        "name": "Ellie",
        "species": "Elephant",
        "breed": "African bush",
    }


@pytest.mark.asyncio
async def test_filtered_listing_paginates(
    client: AsyncClient, setup_test_data
) -> None:
    _banner("getAll/filtered paginates with total/totalPages/currentPage")
    with freeze_time("2025-07-02 08:00:00", real_asyncio=True) as frozen:
        for _ in range(25):
            await client.post("/behavior/add", json=_log())
            frozen.tick(delta=timedelta(minutes=1))

    resp = await client.get(
        "/behavior/getAll/filtered", params={"page": 2, "limit": 10}
    )
    body = resp.json()
    _p(
        f"page 2 -> count={body['count']} total={body['total']} "
        f"totalPages={body['totalPages']} currentPage={body['currentPage']}"
    )

    assert resp.status_code == 200
    assert body["count"] == 10
    assert body["total"] == 25
    assert body["totalPages"] == 3
    assert body["currentPage"] == 2

    last = (
        await client.get("/behavior/getAll/filtered", params={"page": 3, "limit": 10})
    ).json()
    assert last["count"] == 5


@pytest.mark.asyncio
async def test_filtered_listing_by_field_and_date_range(
    client: AsyncClient, setup_test_data
) -> None:
    _banner("getAll/filtered narrows by animal, mood and createdAt range")
    with freeze_time("2025-07-01 10:00:00", real_asyncio=True) as frozen:
        await client.post("/behavior/add", json=_log(mood="Anxious"))
        frozen.tick(delta=timedelta(days=1))
        await client.post("/behavior/add", json=_log(mood="Anxious"))
        await client.post("/behavior/add", json=_log(animal_id="A2", mood="Anxious"))
        await client.post("/behavior/add", json=_log(mood="Calm"))
        frozen.tick(delta=timedelta(days=1))
        await client.post("/behavior/add", json=_log(mood="Anxious"))

    resp = await client.get(
        "/behavior/getAll/filtered",
        params={
            "animalId": "A1",
            "mood": "Anxious",
            "startDate": "2025-07-02T00:00:00Z",
            "endDate": "2025-07-02T23:59:59Z",
        },
    )
    body = resp.json()
    _p(f"filtered -> {body}")

    assert body["total"] == 1
    assert body["behaviors"][0]["mood"] == "Anxious"
    assert body["behaviors"][0]["createdAt"].startswith("2025-07-02")


@pytest.mark.asyncio
async def test_filtered_listing_rejects_bad_paging_and_dates(
    client: AsyncClient, setup_test_data
) -> None:
    _banner("getAll/filtered rejects non-positive paging and unparseable dates")
    bad_page = await client.get("/behavior/getAll/filtered", params={"page": 0})
    bad_date = await client.get(
        "/behavior/getAll/filtered", params={"startDate": "yesterday"}
    )
    _p(f"page=0 -> {bad_page.json()}; startDate=yesterday -> {bad_date.json()}")

    assert bad_page.status_code == 400
    assert bad_date.status_code == 400
    assert bad_date.json()["field"] == "startDate"


@pytest.mark.asyncio
async def test_malformed_animal_id_is_rejected(
    client: AsyncClient, setup_test_data
) -> None:
    _banner("malformed animal id -> 400")
    resp = await client.get("/behavior/singlebehavior/not$an$id")
    _p(f"GET singlebehavior/not$an$id -> status={resp.status_code}, body={resp.json()}")
    assert resp.status_code == 400
    assert resp.json()["success"] is False
