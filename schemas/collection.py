"""
Declarative collection configuration.

A collection is declared once at startup with its slug, optional auth
options and ordered hook lists. Hooks are plain or async callables invoked
with keyword arguments; see hooks/runner.py for the calling contract.

    users = CollectionConfig(
        slug="users",
        auth=AuthOptions(
            forgot_password=ForgotPasswordOptions(generate_email_subject=subject),
        ),
        hooks=CollectionHooks(before_operation=[audit]),
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

Hook = Callable[..., Union[Any, Awaitable[Any]]]
EmailGenerator = Callable[..., Union[str, Awaitable[str]]]
AccessFn = Callable[..., Union[Any, Awaitable[Any]]]


@dataclass
class CollectionHooks:
    """Ordered hook lists. Keyword arguments each hook receives:

    before_operation       args, operation, context
    before_change          data, req, operation, original_doc
    after_read             doc, req
    after_operation        result, args, operation
    after_change           doc, previous_doc, operation, req
    after_delete           doc, id, req
    after_login            args, user, token, context
    after_forgot_password  args, context
    """

    # threaded hooks: a non-empty return value replaces args / data / doc / result
    before_operation: list[Hook] = field(default_factory=list)
    before_change: list[Hook] = field(default_factory=list)
    after_read: list[Hook] = field(default_factory=list)
    after_operation: list[Hook] = field(default_factory=list)

    # side-effect hooks: return values are ignored
    after_change: list[Hook] = field(default_factory=list)
    after_delete: list[Hook] = field(default_factory=list)
    after_login: list[Hook] = field(default_factory=list)
    after_forgot_password: list[Hook] = field(default_factory=list)


@dataclass
class CollectionAccess:
    """Access functions per action; each receives ``req``, ``id`` and ``data``.

    A falsy return denies the request (403). True allows it. A where dict
    allows it but limits read, update and delete to the matching documents,
    e.g. ``lambda req, **kw: req.user is not None and {"owner": req.user["sub"]}``.
    None leaves the action open.
    """

    create: Optional[AccessFn] = None
    read: Optional[AccessFn] = None
    update: Optional[AccessFn] = None
    delete: Optional[AccessFn] = None


@dataclass
class ForgotPasswordOptions:
    """Overrides for the reset email; each receives ``req``, ``token`` and ``user``."""

    generate_email_html: Optional[EmailGenerator] = None
    generate_email_subject: Optional[EmailGenerator] = None


@dataclass
class AuthOptions:
    forgot_password: ForgotPasswordOptions = field(
        default_factory=ForgotPasswordOptions
    )
    # None falls back to AuthSettings / JWTSettings
    token_expiration_seconds: Optional[int] = None
    max_login_attempts: Optional[int] = None
    lock_time_ms: Optional[int] = None


@dataclass
class CollectionConfig:
    slug: str
    auth: Optional[AuthOptions] = None
    hooks: CollectionHooks = field(default_factory=CollectionHooks)
    access: CollectionAccess = field(default_factory=CollectionAccess)
    hidden_fields: list[str] = field(default_factory=list)
    default_limit: int = 10

    def __post_init__(self) -> None:
        if self.auth is not None and "hash" not in self.hidden_fields:
            self.hidden_fields = [*self.hidden_fields, "hash"]

    @property
    def is_auth(self) -> bool:
        return self.auth is not None
