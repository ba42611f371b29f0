"""Unit tests for the login and resetPassword operations."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from errors import AuthenticationError, LockedError, ValidationError
from operations.auth.forgot_password import forgot_password
from operations.auth.login import login
from operations.auth.reset_password import reset_password
from shared.crypto import verify_password
from tests.helpers import JWT_SECRET, USER_EMAIL, USER_PASSWORD, seed_user


def _stored(db, email=USER_EMAIL):
    return db.sync["users"].find_one({"email": email})


def _claims(token):
    return jwt.decode(token, JWT_SECRET, algorithms=["HS256"], audience="quire.api")


# ── login ─────────────────────────────────────────────────────────────────────


class TestLogin:
    async def test_success_returns_user_and_token(self, db, users, make_args):
        seed_user(db)
        result = await login(
            make_args(users, data={"email": USER_EMAIL, "password": USER_PASSWORD})
        )

        assert result["user"]["email"] == USER_EMAIL
        assert "hash" not in result["user"]
        claims = _claims(result["token"])
        assert claims["sub"] == result["user"]["id"]
        assert claims["collection"] == "users"
        assert result["exp"] == claims["exp"]

    async def test_email_is_case_insensitive(self, db, users, make_args):
        seed_user(db)
        result = await login(
            make_args(users, data={"email": "USER@example.com", "password": USER_PASSWORD})
        )
        assert result["user"]["email"] == USER_EMAIL

    @pytest.mark.parametrize(
        "data, field",
        [({"password": "x"}, "email"), ({"email": USER_EMAIL}, "password")],
        ids=["no_email", "no_password"],
    )
    async def test_missing_credentials(self, users, make_args, data, field):
        with pytest.raises(ValidationError) as exc:
            await login(make_args(users, data=data))
        assert exc.value.field == field

    async def test_unknown_email_and_wrong_password_share_message(
        self, db, users, make_args
    ):
        seed_user(db)
        with pytest.raises(AuthenticationError) as unknown:
            await login(make_args(users, data={"email": "x@example.com", "password": "p"}))
        with pytest.raises(AuthenticationError) as wrong:
            await login(make_args(users, data={"email": USER_EMAIL, "password": "bad"}))
        assert unknown.value.message == wrong.value.message

    async def test_failed_attempts_lock_user(self, db, users, make_args):
        seed_user(db)
        users.config.auth.max_login_attempts = 2
        bad = {"email": USER_EMAIL, "password": "wrong"}

        for _ in range(2):
            with pytest.raises(AuthenticationError):
                await login(make_args(users, data=bad))

        assert _stored(db)["loginAttempts"] == 2
        assert _stored(db)["lockUntil"] is not None

        # even the right password is refused while locked
        with pytest.raises(LockedError):
            await login(
                make_args(users, data={"email": USER_EMAIL, "password": USER_PASSWORD})
            )

    async def test_expired_lock_allows_login_and_resets(self, db, users, make_args):
        past = datetime.now(timezone.utc) - timedelta(minutes=1)
        seed_user(db, loginAttempts=5, lockUntil=past)

        await login(make_args(users, data={"email": USER_EMAIL, "password": USER_PASSWORD}))

        stored = _stored(db)
        assert stored["loginAttempts"] == 0
        assert stored["lockUntil"] is None

    async def test_lockout_disabled(self, db, users, make_args):
        seed_user(db)
        users.config.auth.max_login_attempts = 0
        for _ in range(3):
            with pytest.raises(AuthenticationError):
                await login(make_args(users, data={"email": USER_EMAIL, "password": "no"}))
        assert "loginAttempts" not in _stored(db)

    async def test_hooks(self, db, users, make_args):
        seed_user(db)
        seen = {}

        def after_login(args, user, token, context):
            seen["user"] = user["email"]
            seen["token"] = token

        users.config.hooks.after_login.append(after_login)
        users.config.hooks.after_operation.append(
            lambda result, args, operation: {**result, "extra": operation}
        )

        result = await login(
            make_args(users, data={"email": USER_EMAIL, "password": USER_PASSWORD})
        )
        assert seen == {"user": USER_EMAIL, "token": result["token"]}
        assert result["extra"] == "login"


# ── resetPassword ─────────────────────────────────────────────────────────────


class TestResetPassword:
    async def _token(self, users, make_args):
        return await forgot_password(
            make_args(users, data={"email": USER_EMAIL}, disable_email=True)
        )

    async def test_sets_password_and_clears_token(self, db, users, make_args):
        seed_user(db, loginAttempts=3)
        token = await self._token(users, make_args)

        result = await reset_password(
            make_args(users, data={"token": token, "password": "N3w-password"})
        )

        stored = _stored(db)
        assert verify_password("N3w-password", stored["hash"])
        assert stored["resetPasswordToken"] is None
        assert stored["resetPasswordExpiration"] is None
        assert stored["loginAttempts"] == 0
        assert result["user"]["email"] == USER_EMAIL
        assert _claims(result["token"])["sub"] == result["user"]["id"]

    async def test_token_is_single_use(self, db, users, make_args):
        seed_user(db)
        token = await self._token(users, make_args)
        data = {"token": token, "password": "N3w-password"}

        await reset_password(make_args(users, data=data))
        with pytest.raises(AuthenticationError):
            await reset_password(make_args(users, data=data))

    async def test_expired_token_rejected(self, db, users, make_args):
        seed_user(db)
        past = datetime.now(timezone.utc) - timedelta(seconds=1)
        token = await forgot_password(
            make_args(users, data={"email": USER_EMAIL}, disable_email=True, expiration=past)
        )
        with pytest.raises(AuthenticationError):
            await reset_password(
                make_args(users, data={"token": token, "password": "N3w-password"})
            )

    async def test_unknown_token_rejected(self, db, users, make_args):
        seed_user(db)
        with pytest.raises(AuthenticationError) as exc:
            await reset_password(
                make_args(users, data={"token": "0" * 40, "password": "N3w-password"})
            )
        assert exc.value.status_code == 401

    @pytest.mark.parametrize(
        "data, field",
        [({"password": "x"}, "token"), ({"token": "abc"}, "password")],
        ids=["no_token", "no_password"],
    )
    async def test_missing_fields(self, users, make_args, data, field):
        with pytest.raises(ValidationError) as exc:
            await reset_password(make_args(users, data=data))
        assert exc.value.field == field

    async def test_before_operation_can_rewrite_password(self, db, users, make_args):
        seed_user(db)
        token = await self._token(users, make_args)
        users.config.hooks.before_operation.append(
            lambda args, operation, context: replace(
                args, data={**args.data, "password": "From-hook-1"}
            )
        )
        await reset_password(make_args(users, data={"token": token, "password": "ignored"}))
        assert verify_password("From-hook-1", _stored(db)["hash"])
