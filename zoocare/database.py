from collections.abc import MutableMapping
from datetime import datetime
from typing import Generic, Protocol, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class KeyValueDatabase(Protocol[K, V]):
    def put(self, key: K, value: V) -> None: ...

    def get(self, key: K) -> V | None: ...

    def delete(self, key: K) -> None: ...

    def all(self) -> list[V]: ...

    def assign_vet_if_not_assigned(
        self,
        key: K,
        vet_id: str,
        reason: str | None,
        assigned_at: datetime,
    ) -> bool: ...


class InMemoryKeyValueDatabase(Generic[K, V]):
    """
    Simple in-memory key/value database.
    """

    def __init__(self) -> None:
        self._store: MutableMapping[K, V] = {}

    def put(self, key: K, value: V) -> None:
        self._store[key] = value

    def get(self, key: K) -> V | None:
        return self._store.get(key)

    def delete(self, key: K) -> None:
        self._store.pop(key, None)

    def all(self) -> list[V]:
        return list(self._store.values())

    def assign_vet_if_not_assigned(
        self,
        key: K,
        vet_id: str,
        reason: str | None,
        assigned_at: datetime,
    ) -> bool:
        """
        Atomically point a record at a vet unless it already points at that vet.
        Returns True if the record was updated, False if missing or already assigned.
        """
        value = self._store.get(key)
        if value is None or not hasattr(value, "vet_id"):
            return False
        if value.vet_id == vet_id:
            return False
        # no await between the check and the write
        self._store[key] = value.model_copy(
            update={
                "vet_id": vet_id,
                "assignment_reason": reason,
                "assigned_at": assigned_at,
                "updated_at": assigned_at,
            }
        )
        return True
