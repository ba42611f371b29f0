"""
Auth user document model.

Maps to any collection with auth enabled (``users`` by default).

Stored keys are camelCase (``resetPasswordToken``, ``loginAttempts``...) so
the REST payloads match the admin UI; Python code uses snake_case names.
Collection-specific fields (name, roles, ...) are kept as extras and
round-trip untouched through to_mongo().
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from schemas.models.base import MongoBaseModel
from shared.datetime_utils import ensure_utc


class AuthUserDoc(MongoBaseModel):
    """
    Document model for auth-enabled collections.

    reset_password_token is set by forgot-password and cleared by
    reset-password; a token is only usable while reset_password_expiration
    is in the future.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    email: str
    hash: Optional[str] = None
    reset_password_token: Optional[str] = Field(
        default=None, alias="resetPasswordToken"
    )
    reset_password_expiration: Optional[datetime] = Field(
        default=None, alias="resetPasswordExpiration"
    )
    login_attempts: int = Field(default=0, ge=0, alias="loginAttempts")
    lock_until: Optional[datetime] = Field(default=None, alias="lockUntil")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    def is_locked(self, now: datetime) -> bool:
        lock_until = ensure_utc(self.lock_until)
        return lock_until is not None and lock_until > now

    def reset_token_valid(self, token: str, now: datetime) -> bool:
        expiration = ensure_utc(self.reset_password_expiration)
        return (
            self.reset_password_token is not None
            and self.reset_password_token == token
            and expiration is not None
            and expiration > now
        )
