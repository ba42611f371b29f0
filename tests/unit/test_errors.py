"""Unit tests for AppError hierarchy."""

import pytest

from errors import (
    AppError,
    AuthenticationError,
    ConflictError,
    EmailDeliveryError,
    ForbiddenError,
    LockedError,
    NotFoundError,
    ValidationError,
)


@pytest.mark.parametrize(
    "cls, status, code",
    [
        (ValidationError, 400, "validation_error"),
        (AuthenticationError, 401, "authentication_error"),
        (ForbiddenError, 403, "forbidden"),
        (NotFoundError, 404, "not_found"),
        (ConflictError, 409, "conflict"),
        (LockedError, 423, "locked"),
        (EmailDeliveryError, 502, "email_delivery_failed"),
    ],
)
def test_status_and_code(cls, status, code):
    e = cls("message")
    assert isinstance(e, AppError)
    assert e.status_code == status
    assert e.error_code == code
    assert e.message == "message"


class TestAppErrorToDict:
    def test_basic(self):
        e = ValidationError("Missing email.")
        assert e.to_dict() == {"error": "Missing email.", "code": "validation_error"}

    @pytest.mark.parametrize(
        "kwargs, key, value",
        [
            ({"field": "email"}, "field", "email"),
            ({"details": {"status_code": 500}}, "details", {"status_code": 500}),
        ],
        ids=["with_field", "with_details"],
    )
    def test_optional_key_present(self, kwargs, key, value):
        e = ValidationError("invalid", **kwargs)
        assert e.to_dict()[key] == value

    def test_no_optional_keys_when_absent(self):
        d = NotFoundError("missing").to_dict()
        assert "field" not in d
        assert "details" not in d
