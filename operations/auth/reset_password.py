"""
resetPassword - consume a reset token and set a new password.

The token must match the stored resetPasswordToken and its expiration must
still be in the future. On success the reset fields and any login lockout
are cleared, and the user is logged in (a fresh access token is returned).
"""

from __future__ import annotations

from typing import Any

from errors import AuthenticationError, ValidationError
from hooks.runner import run_after_operation, run_before_operation
from operations.args import OperationArgs
from schemas.models.user import AuthUserDoc
from services.tokens import issue_access_token
from shared.crypto import hash_password
from shared.datetime_utils import utc_now
from shared.logging import get_logger

OPERATION = "resetPassword"

log = get_logger(__name__)


async def reset_password(incoming_args: OperationArgs) -> dict[str, Any]:
    if "token" not in incoming_args.data:
        raise ValidationError(incoming_args.req.t("error:missingToken"), field="token")
    if "password" not in incoming_args.data:
        raise ValidationError(
            incoming_args.req.t("error:missingPassword"), field="password"
        )

    args = await run_before_operation(
        incoming_args.collection.config.hooks.before_operation, incoming_args, OPERATION
    )

    collection = args.collection
    req = args.req
    token = args.data.get("token")
    password = args.data.get("password")
    if not token:
        raise ValidationError(req.t("error:missingToken"), field="token")
    if not password:
        raise ValidationError(req.t("error:missingPassword"), field="password")

    now = utc_now()
    raw_user = await collection.store.find_one({"resetPasswordToken": token})
    user = AuthUserDoc.from_mongo(raw_user)
    if user is None or not user.reset_token_valid(token, now):
        log.warning("reset_password_token_rejected", collection=collection.slug)
        raise AuthenticationError(req.t("error:tokenInvalidOrExpired"), field="token")

    user.hash = hash_password(password)
    user.reset_password_token = None
    user.reset_password_expiration = None
    user.login_attempts = 0
    user.lock_until = None
    user.updated_at = now

    saved = await collection.store.save(user.to_mongo())
    user_json = collection.store.to_json(saved)

    auth = collection.config.auth
    access_token, _ = issue_access_token(
        user_json,
        collection.slug,
        req.settings.jwt,
        ttl_seconds=auth.token_expiration_seconds if auth else None,
    )
    log.info("reset_password_success", collection=collection.slug, user_id=user_json["id"])

    result = {"user": user_json, "token": access_token}
    return await run_after_operation(
        collection.config.hooks.after_operation, args, OPERATION, result
    )
