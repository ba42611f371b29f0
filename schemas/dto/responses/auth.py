"""
Response DTOs for auth endpoints.

ForgotPasswordResponse - POST /api/{slug}/forgot-password  (200)
LoginResponse          - POST /api/{slug}/login  (200)
ResetPasswordResponse  - POST /api/{slug}/reset-password  (200)
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ForgotPasswordResponse(BaseModel):
    """Same body for known and unknown emails; ``token`` only in exposed mode."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    token: Optional[str] = None


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    user: dict[str, Any]
    token: str
    exp: int


class ResetPasswordResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    user: dict[str, Any]
    token: str
