"""
Collection registry.

A Collection pairs its declarative config with the DocumentStore that
persists it. The registry is built once in create_app() and handed to
operations through the RequestContext; nothing looks it up globally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from errors import NotFoundError
from infrastructure.store.mongo import MongoDocumentStore
from infrastructure.store.protocol import DocumentStore
from schemas.collection import CollectionConfig
from shared.logging import get_logger

log = get_logger(__name__)


@dataclass
class Collection:
    config: CollectionConfig
    store: DocumentStore

    @property
    def slug(self) -> str:
        return self.config.slug


class CollectionRegistry:
    def __init__(self, collections: Iterable[Collection] = ()) -> None:
        self._collections: dict[str, Collection] = {}
        for collection in collections:
            self.register(collection)

    @classmethod
    def from_configs(cls, db, configs: Iterable[CollectionConfig]) -> "CollectionRegistry":
        """Build a registry backed by one MongoDB collection per slug."""
        return cls(
            Collection(
                config=config,
                store=MongoDocumentStore(db[config.slug], config.hidden_fields),
            )
            for config in configs
        )

    def register(self, collection: Collection) -> None:
        if collection.slug in self._collections:
            raise ValueError(f"Collection {collection.slug!r} is already registered")
        self._collections[collection.slug] = collection

    def get(self, slug: str) -> Collection:
        try:
            return self._collections[slug]
        except KeyError:
            raise NotFoundError(f"Collection {slug!r} not found.") from None

    def __contains__(self, slug: object) -> bool:
        return slug in self._collections

    def __iter__(self) -> Iterator[Collection]:
        return iter(self._collections.values())

    def __len__(self) -> int:
        return len(self._collections)

    async def ensure_indexes(self) -> None:
        for collection in self:
            ensure = getattr(collection.store, "ensure_indexes", None)
            if ensure is not None:
                await ensure(unique_email=collection.config.is_auth)
        log.info("collections_ready", slugs=[c.slug for c in self])
