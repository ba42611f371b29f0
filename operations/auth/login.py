"""
login - verify credentials and issue an access token.

Unknown emails and wrong passwords share one error message. Failed
attempts are counted on the user; reaching the collection's
max_login_attempts locks the account for lock_time_ms (423 while locked).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from errors import AuthenticationError, LockedError, ValidationError
from hooks.runner import run_after_operation, run_before_operation, run_hooks
from operations.args import OperationArgs
from schemas.models.user import AuthUserDoc
from services.collections import Collection
from services.tokens import issue_access_token
from shared.crypto import verify_password
from shared.datetime_utils import after_ms, utc_now
from shared.logging import get_logger

OPERATION = "login"

log = get_logger(__name__)


async def login(incoming_args: OperationArgs) -> dict[str, Any]:
    req = incoming_args.req
    if "email" not in incoming_args.data:
        raise ValidationError(req.t("error:missingEmail"), field="email")
    if "password" not in incoming_args.data:
        raise ValidationError(req.t("error:missingPassword"), field="password")

    args = await run_before_operation(
        incoming_args.collection.config.hooks.before_operation, incoming_args, OPERATION
    )

    collection = args.collection
    req = args.req
    email = args.data.get("email")
    password = args.data.get("password")
    if not email:
        raise ValidationError(req.t("error:missingEmail"), field="email")
    if not password:
        raise ValidationError(req.t("error:missingPassword"), field="password")

    raw_user = await collection.store.find_one({"email": str(email).lower()})
    if raw_user is None:
        log.info("login_failed", collection=collection.slug, reason="unknown_email")
        raise AuthenticationError(req.t("authentication:emailOrPasswordIncorrect"))

    user = AuthUserDoc.from_mongo(raw_user)
    now = utc_now()

    if user.is_locked(now):
        log.warning("login_locked", collection=collection.slug, user_id=str(user.id))
        raise LockedError(req.t("error:userLocked"))

    if not verify_password(password, user.hash):
        await _register_failed_attempt(collection, user, args, now)
        log.info("login_failed", collection=collection.slug, reason="bad_password")
        raise AuthenticationError(req.t("authentication:emailOrPasswordIncorrect"))

    if user.login_attempts or user.lock_until is not None:
        user.login_attempts = 0
        user.lock_until = None
        raw_user = await collection.store.save(user.to_mongo())

    user_json = collection.store.to_json(raw_user)
    auth = collection.config.auth
    token, exp = issue_access_token(
        user_json,
        collection.slug,
        req.settings.jwt,
        ttl_seconds=auth.token_expiration_seconds if auth else None,
    )
    log.info("login_success", collection=collection.slug, user_id=user_json["id"])

    await run_hooks(
        collection.config.hooks.after_login,
        args=args,
        user=user_json,
        token=token,
        context=req.context,
    )

    result = {"user": user_json, "token": token, "exp": exp}
    return await run_after_operation(
        collection.config.hooks.after_operation, args, OPERATION, result
    )


async def _register_failed_attempt(
    collection: Collection, user: AuthUserDoc, args: OperationArgs, now: datetime
) -> None:
    auth_settings = args.req.settings.auth
    auth = collection.config.auth
    max_attempts = (
        auth.max_login_attempts
        if auth and auth.max_login_attempts is not None
        else auth_settings.max_login_attempts
    )
    lock_time_ms = (
        auth.lock_time_ms
        if auth and auth.lock_time_ms is not None
        else auth_settings.lock_time_ms
    )
    if not max_attempts:
        return

    if user.lock_until is not None:
        # previous lock has expired; start counting again
        user.login_attempts = 1
        user.lock_until = None
    else:
        user.login_attempts += 1

    if user.login_attempts >= max_attempts:
        user.lock_until = after_ms(lock_time_ms, now)
        log.warning(
            "login_user_locked",
            collection=collection.slug,
            user_id=str(user.id),
            attempts=user.login_attempts,
        )

    await collection.store.save(user.to_mongo())
