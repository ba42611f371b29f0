"""
Request DTOs for auth endpoints of auth-enabled collections.

LoginRequest           - POST /api/{slug}/login
ForgotPasswordRequest  - POST /api/{slug}/forgot-password
ResetPasswordRequest   - POST /api/{slug}/reset-password

Required values are declared Optional on purpose: the operations report a
missing email/password/token as a 400 ``validation_error`` rather than
FastAPI's generic 422.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Request body for POST /api/{slug}/login."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    """Request body for POST /api/{slug}/forgot-password.

    Extra keys are kept so before_operation hooks can read them.
    ``disableEmail`` is only honoured when AuthSettings.expose_reset_token is on.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    email: Optional[str] = None
    disable_email: bool = Field(default=False, alias="disableEmail")

    def to_data(self) -> dict:
        """Return the operation ``data`` dict, keeping only keys the caller sent."""
        return self.model_dump(exclude_unset=True, exclude={"disable_email"})


class ResetPasswordRequest(BaseModel):
    """Request body for POST /api/{slug}/reset-password."""

    model_config = ConfigDict(populate_by_name=True)

    token: Optional[str] = None
    password: Optional[str] = None
