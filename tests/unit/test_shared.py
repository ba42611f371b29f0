"""
Unit tests for the shared/ utility modules.

Covers:
- shared.generators      (generate_reset_token)
- shared.datetime_utils  (ensure_utc, after_ms, parse_datetime, bson_now)
- shared.crypto          (hash_password, verify_password)
- shared.i18n            (Translator, negotiate_locale)
- shared.logging_config  (redact_sensitive_fields)
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

import pytest

from shared.crypto import hash_password, verify_password
from shared.datetime_utils import after_ms, bson_now, ensure_utc, parse_datetime
from shared.generators import generate_reset_token
from shared.i18n import Translator, negotiate_locale, translator_for
from shared.logging_config import redact_sensitive_fields


# ---------------------------------------------------------------------------
# shared.generators
# ---------------------------------------------------------------------------


class TestGenerateResetToken:
    def test_default_is_40_hex_chars(self):
        assert re.fullmatch(r"[0-9a-f]{40}", generate_reset_token())

    def test_custom_length(self):
        assert len(generate_reset_token(8)) == 16

    def test_unique(self):
        assert len({generate_reset_token() for _ in range(50)}) == 50


# ---------------------------------------------------------------------------
# shared.datetime_utils
# ---------------------------------------------------------------------------


class TestEnsureUtc:
    def test_none(self):
        assert ensure_utc(None) is None

    def test_naive_assumed_utc(self):
        result = ensure_utc(datetime(2030, 1, 1, 12, 0))
        assert result == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_other_offset_converted(self):
        plus_two = timezone(timedelta(hours=2))
        result = ensure_utc(datetime(2030, 1, 1, 12, 0, tzinfo=plus_two))
        assert result.hour == 10
        assert result.tzinfo == timezone.utc


def test_after_ms_adds_milliseconds():
    start = datetime(2030, 1, 1, tzinfo=timezone.utc)
    assert after_ms(3_600_000, start) == start + timedelta(hours=1)


class TestParseDatetime:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, None),
            (True, None),
            ("not-a-date", None),
            ("2030-01-01T00:00:00Z", datetime(2030, 1, 1, tzinfo=timezone.utc)),
            ("2030-01-01T02:00:00+02:00", datetime(2030, 1, 1, tzinfo=timezone.utc)),
            (1_893_456_000_000, datetime(2030, 1, 1, tzinfo=timezone.utc)),
        ],
        ids=["none", "bool", "garbage", "iso_z", "iso_offset", "epoch_ms"],
    )
    def test_parse(self, value, expected):
        assert parse_datetime(value) == expected

    def test_datetime_passthrough(self):
        dt = datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert parse_datetime(dt) == dt


def test_bson_now_has_millisecond_precision():
    assert bson_now().microsecond % 1000 == 0


# ---------------------------------------------------------------------------
# shared.crypto
# ---------------------------------------------------------------------------


class TestHashPassword:
    def test_returns_string(self):
        assert isinstance(hash_password("secret"), str)

    def test_differs_from_input(self):
        assert hash_password("secret") != "secret"

    def test_unique_salts(self):
        # argon2 produces a new salt each call
        assert hash_password("same") != hash_password("same")


class TestVerifyPassword:
    @pytest.mark.parametrize(
        "candidate, expected",
        [("correct_password", True), ("wrong_password", False)],
        ids=["correct", "wrong"],
    )
    def test_verify(self, candidate, expected):
        h = hash_password("correct_password")
        assert verify_password(candidate, h) is expected

    @pytest.mark.parametrize("h", [None, "", "not-a-valid-hash"], ids=["none", "empty", "bad"])
    def test_missing_or_invalid_hash_returns_false(self, h):
        assert verify_password("any", h) is False


# ---------------------------------------------------------------------------
# shared.i18n
# ---------------------------------------------------------------------------


class TestTranslator:
    def test_english(self):
        assert Translator("en").t("error:missingEmail") == "Missing email."

    def test_spanish(self):
        t = Translator("es")
        assert t.t("authentication:resetYourPassword") == "Restablecer tu contraseña"

    def test_unknown_locale_falls_back(self):
        t = Translator("fr")
        assert t.locale == "en"
        assert t.t("general:success") == "Success"

    def test_unknown_key_returned_unchanged(self):
        assert Translator().t("general:nope") == "general:nope"


class TestNegotiateLocale:
    @pytest.mark.parametrize(
        "header, expected",
        [
            (None, "en"),
            ("es", "es"),
            ("es-MX,es;q=0.9", "es"),
            ("fr,es;q=0.5", "es"),
            ("es;q=0.2,en;q=0.8", "en"),
            ("fr,de", "en"),
            ("es;q=0", "en"),
        ],
        ids=["missing", "plain", "region", "skip_unsupported", "q_values", "none_supported", "q_zero"],
    )
    def test_negotiate(self, header, expected):
        assert negotiate_locale(header) == expected

    def test_default_used_when_nothing_matches(self):
        assert negotiate_locale("fr", default="es") == "es"

    def test_translator_for(self):
        assert translator_for("es-ES").locale == "es"


# ---------------------------------------------------------------------------
# shared.logging_config
# ---------------------------------------------------------------------------


class TestRedactSensitiveFields:
    def test_redacts_secrets(self):
        event = {
            "event": "x",
            "password": "p",
            "reset_token": "t",
            "hash": "h",
            "email": "a@b.c",
        }
        out = redact_sensitive_fields(None, "info", dict(event))
        assert out["password"] != "p"
        assert out["reset_token"] != "t"
        assert out["hash"] != "h"
        assert out["email"] == "a@b.c"
