"""
Async client for the ZooCare REST API.

Every call is bounded by ``Settings.request_timeout``; the server defines no
timeouts of its own. Failures are raised as ``ApiError`` without retrying.
"""

from typing import Any

import httpx
from loguru import logger

from zoocare.config import Settings, get_settings


class ApiError(Exception):
    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ZooCareClient:
    """Thin wrapper over the REST surface used by the mobile app."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        base_url: str | None = None,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.timeout = settings.request_timeout
        headers = {"Authorization": f"Bearer {token}"} if token else None
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=self.timeout,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "ZooCareClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning(f"{method} {url} timed out after {self.timeout}s")
            raise ApiError(None, f"Request timed out after {self.timeout}s") from exc

        if response.is_error:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            raise ApiError(response.status_code, message)
        return response.json()

    async def record_behavior(
        self,
        animal_id: str,
        eating: str,
        movement: str,
        mood: str,
        recorded_by: str,
        notes: str | None = None,
    ) -> dict:
        payload = {
            "animalId": animal_id,
            "eating": eating,
            "movement": movement,
            "mood": mood,
            "recordedBy": recorded_by,
        }
        if notes:
            payload["notes"] = notes
        return await self._request("POST", "/behavior/add", json=payload)

    async def assign_vet(
        self, animal_id: str, vet_id: str, reason: str | None = None
    ) -> dict:
        body = await self._request(
            "POST",
            "/behavior/assign-vet",
            json={"animalId": animal_id, "vetId": vet_id, "reason": reason},
        )
        return body["assignment"]

    async def get_animal(self, animal_id: str) -> dict:
        body = await self._request("GET", f"/animal/{animal_id}")
        return body["animal"]

    async def animals_needing_attention(self, vet_id: str) -> list[dict]:
        body = await self._request(
            "GET",
            f"/behavior/vet/{vet_id}/assigned-animals",
            params={"status": "needs_attention"},
        )
        return body["animals"]

    async def create_task(self, payload: dict) -> dict:
        body = await self._request("POST", "/tasks/add", json=payload)
        return body["task"]

    async def update_task(self, task_id: str, payload: dict) -> dict:
        body = await self._request("PUT", f"/tasks/edit/{task_id}", json=payload)
        return body["task"]

    async def list_tasks(self, **filters: str) -> list[dict]:
        return await self._request("GET", "/tasks/getAll", params=filters)

    async def count_tasks(self, status: str) -> int:
        body = await self._request("GET", f"/tasks/count/{status.lower()}")
        return body["count"]

    async def profile(self) -> dict:
        body = await self._request("GET", "/user/profile")
        return body["user"]

    async def my_tasks(self) -> list[dict]:
        return await self._request("GET", "/tasks")

    async def create_medical_record(self, payload: dict) -> dict:
        body = await self._request("POST", "/medical-records", json=payload)
        return body["record"]

    async def checkups_for(self, animal_id: str) -> list[dict]:
        return await self._request(
            "GET",
            "/medical-records",
            params={
                "recordType": "checkup",
                "animal": animal_id,
                "populate": "animal,veterinarian",
            },
        )
