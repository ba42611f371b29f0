"""DocumentStore protocol - operations depend on this, not on pymongo."""

from typing import Any, Optional, Protocol


class DocumentStore(Protocol):
    async def find_one(self, filter: dict[str, Any]) -> Optional[dict]: ...

    async def find(
        self,
        filter: dict[str, Any],
        sort: Optional[list[tuple[str, int]]] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> list[dict]: ...

    async def count(self, filter: dict[str, Any]) -> int: ...

    async def insert(self, doc: dict) -> dict: ...

    async def save(self, doc: dict) -> dict: ...

    async def delete(self, filter: dict[str, Any]) -> Optional[dict]: ...

    def to_json(self, doc: dict, virtuals: bool = True) -> dict: ...
