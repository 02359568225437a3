"""
Storage - Explicit key-value storage interface for service records.

Services never touch a bare dict; they go through a ``Store`` so that a real
database backend can replace ``InMemoryStore`` without changing call sites.

Capabilities:
- get(key)                 -> record or None
- put(key, record)         -> stores/replaces
- delete(key)              -> True if something was removed
- list(where=predicate)    -> records matching the filter, insertion order

The in-memory backend stores records by reference, so mutations to a
returned record are visible immediately. Serialized backends require an
explicit put() after modification; services always call put() after a
mutation so both behave the same.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

Predicate = Callable[[T], bool]


class Store(ABC, Generic[T]):
    """Abstract record store keyed by string identifiers."""

    @abstractmethod
    async def get(self, key: str) -> Optional[T]:
        ...

    @abstractmethod
    async def put(self, key: str, record: T) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    async def list(self, where: Optional[Predicate] = None) -> list[T]:
        ...

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def count(self, where: Optional[Predicate] = None) -> int:
        return len(await self.list(where))


class InMemoryStore(Store[T]):
    """Dict-backed store. Not persisted; lost on restart."""

    def __init__(self, name: str = "records", initial: Optional[dict[str, T]] = None) -> None:
        self.name = name
        self._records: dict[str, T] = dict(initial or {})

    async def get(self, key: str) -> Optional[T]:
        return self._records.get(key)

    async def put(self, key: str, record: T) -> None:
        self._records[key] = record

    async def delete(self, key: str) -> bool:
        return self._records.pop(key, None) is not None

    async def list(self, where: Optional[Predicate] = None) -> list[T]:
        if where is None:
            return list(self._records.values())
        return [record for record in self._records.values() if where(record)]

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"InMemoryStore({self.name!r}, {len(self._records)} records)"
