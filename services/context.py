"""
Per-request context handed to every operation and hook.

Carries what the operations would otherwise reach for globally: settings,
the translator, the email dispatcher and the collection registry. Hooks
share state through ``context`` for the lifetime of one request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from config import AppSettings
from infrastructure.email.dispatcher import EmailDispatcher
from services.collections import CollectionRegistry
from shared.i18n import Translator


@dataclass
class RequestContext:
    settings: AppSettings
    email: EmailDispatcher
    translator: Translator = field(default_factory=Translator)
    registry: Optional[CollectionRegistry] = None
    context: dict[str, Any] = field(default_factory=dict)
    protocol: str = "http"
    host: str = "localhost"
    user: Optional[dict] = None

    def t(self, key: str) -> str:
        return self.translator.t(key)

    @property
    def locale(self) -> str:
        return self.translator.locale

    def server_url(self) -> str:
        """Configured server URL, else the scheme and host of this request."""
        if self.settings.server_url:
            return self.settings.server_url.rstrip("/")
        return f"{self.protocol}://{self.host}"
