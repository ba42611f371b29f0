"""
Test helpers: an awaitable mongomock facade, a recording email provider and
factories for settings, collections and seeded users.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import mongomock

from config import AppSettings, AuthSettings, DatabaseSettings, EmailSettings, JWTSettings
from errors import EmailDeliveryError
from infrastructure.email.protocol import EmailMessage
from infrastructure.store.mongo import MongoDocumentStore
from schemas.collection import CollectionConfig
from services.collections import Collection
from shared.crypto import hash_password

USER_EMAIL = "user@example.com"
USER_PASSWORD = "Sup3r-secret!"
JWT_SECRET = "test-secret-key-0123456789abcdef0123456789"


# ── mongomock async facade ────────────────────────────────────────────────────


class AsyncMongomockCursor:
    def __init__(self, cursor) -> None:
        self._cursor = cursor

    def sort(self, keys):
        self._cursor = self._cursor.sort(keys)
        return self

    def skip(self, n: int):
        self._cursor = self._cursor.skip(n)
        return self

    def limit(self, n: int):
        self._cursor = self._cursor.limit(n)
        return self

    async def to_list(self, length: Optional[int] = None) -> list[dict]:
        docs = list(self._cursor)
        return docs if length is None else docs[:length]


class AsyncMongomockCollection:
    def __init__(self, collection) -> None:
        self.sync = collection

    @property
    def name(self) -> str:
        return self.sync.name

    async def find_one(self, filter):
        return self.sync.find_one(filter)

    def find(self, filter):
        return AsyncMongomockCursor(self.sync.find(filter))

    async def count_documents(self, filter):
        return self.sync.count_documents(filter)

    async def insert_one(self, doc):
        return self.sync.insert_one(doc)

    async def replace_one(self, filter, doc):
        return self.sync.replace_one(filter, doc)

    async def find_one_and_delete(self, filter):
        return self.sync.find_one_and_delete(filter)

    async def create_index(self, keys, **kwargs):
        return self.sync.create_index(keys, **kwargs)


class AsyncMongomockDatabase:
    def __init__(self) -> None:
        self.sync = mongomock.MongoClient().db

    def __getitem__(self, name: str) -> AsyncMongomockCollection:
        return AsyncMongomockCollection(self.sync[name])


# ── email ─────────────────────────────────────────────────────────────────────


class RecordingEmailProvider:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[EmailMessage] = []
        self.fail = fail

    async def send(self, message: EmailMessage) -> None:
        if self.fail:
            raise EmailDeliveryError("transport down")
        self.sent.append(message)


# ── helpers ───────────────────────────────────────────────────────────────────


def make_settings(**overrides: Any) -> AppSettings:
    values: dict[str, Any] = dict(
        server_url="http://localhost:3000",
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/"),
        jwt=JWTSettings(jwt_secret=JWT_SECRET),
        email=EmailSettings(email_from_name="Quire", email_from_address="noreply@quire.test"),
        auth=AuthSettings(),
    )
    values.update(overrides)
    return AppSettings(**values)


def make_collection(db: AsyncMongomockDatabase, config: CollectionConfig) -> Collection:
    return Collection(
        config=config, store=MongoDocumentStore(db[config.slug], config.hidden_fields)
    )


def seed_user(db: AsyncMongomockDatabase, email: str = USER_EMAIL, **fields: Any) -> dict:
    now = datetime.now(timezone.utc)
    doc = {
        "email": email,
        "hash": hash_password(USER_PASSWORD),
        "name": "Test User",
        "createdAt": now,
        "updatedAt": now,
        **fields,
    }
    db.sync["users"].insert_one(doc)
    return doc


