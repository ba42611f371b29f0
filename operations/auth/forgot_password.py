"""
forgotPassword - issue a reset token for an auth-enabled collection.

Flow:
  1. Reject a payload without an ``email`` key before anything runs.
  2. before_operation hooks (may replace the args).
  3. Reject an empty email or an unparseable expiration.
  4. Look the user up by lower-cased email; unknown emails return None so
     callers cannot tell registered addresses apart.
  5. Store a fresh 40-hex-char token and its expiration on the user.
  6. Email the reset link unless disable_email is set.
  7. after_forgot_password hooks, then after_operation hooks, which may
     replace the returned token.
"""

from __future__ import annotations

from typing import Optional

from errors import ValidationError
from hooks.runner import call_hook, run_after_operation, run_before_operation, run_hooks
from infrastructure.email.protocol import EmailMessage
from operations.args import OperationArgs
from operations.auth.emails import render_forgot_password_html
from schemas.collection import AuthOptions
from schemas.models.user import AuthUserDoc
from shared.datetime_utils import after_ms, parse_datetime
from shared.generators import generate_reset_token
from shared.logging import get_logger, log_with_context

OPERATION = "forgotPassword"

log = get_logger(__name__)


async def forgot_password(incoming_args: OperationArgs) -> Optional[str]:
    if "email" not in incoming_args.data:
        raise ValidationError(incoming_args.req.t("error:missingEmail"), field="email")

    args = await run_before_operation(
        incoming_args.collection.config.hooks.before_operation, incoming_args, OPERATION
    )

    collection = args.collection
    collection_config = collection.config
    req = args.req
    data = args.data
    op_log = log_with_context(log, collection=collection.slug, operation=OPERATION)

    email = data.get("email")
    if not email:
        raise ValidationError(req.t("error:missingEmail"), field="email")

    # 0, "" and None all mean "use the configured TTL"
    expiration = None
    if args.expiration:
        expiration = parse_datetime(args.expiration)
        if expiration is None:
            raise ValidationError(req.t("error:invalidExpiration"), field="expiration")

    raw_user = await collection.store.find_one({"email": str(email).lower()})
    if raw_user is None:
        op_log.info("forgot_password_unknown_email")
        return None

    token = generate_reset_token()

    user = AuthUserDoc.from_mongo(raw_user)
    user.reset_password_token = token
    user.reset_password_expiration = expiration or after_ms(
        req.settings.auth.reset_password_ttl_ms
    )

    saved = await collection.store.save(user.to_mongo())
    user_json = collection.store.to_json(saved, virtuals=True)
    op_log.info(
        "forgot_password_token_issued",
        user_id=user_json.get("id"),
        email_disabled=args.disable_email,
    )

    if not args.disable_email:
        await _send_reset_email(args, token, user_json)

    await run_hooks(
        collection_config.hooks.after_forgot_password, args=args, context=req.context
    )

    return await run_after_operation(
        collection_config.hooks.after_operation, args, OPERATION, token
    )


async def _send_reset_email(args: OperationArgs, token: str, user_json: dict) -> None:
    req = args.req
    settings = req.settings
    options = (args.collection.config.auth or AuthOptions()).forgot_password

    reset_url = f"{req.server_url()}{settings.admin_route.rstrip('/')}/reset/{token}"

    if options.generate_email_html is not None:
        html = await call_hook(
            options.generate_email_html, req=req, token=token, user=user_json
        )
    else:
        html = render_forgot_password_html(req.translator, reset_url)

    if options.generate_email_subject is not None:
        subject = await call_hook(
            options.generate_email_subject, req=req, token=token, user=user_json
        )
    else:
        subject = req.t("authentication:resetYourPassword")

    await req.email.send(
        EmailMessage(
            from_=f'"{settings.email.email_from_name}" <{settings.email.email_from_address}>',
            to=args.data["email"],
            subject=subject,
            html=html,
        )
    )
