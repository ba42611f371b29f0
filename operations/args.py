"""
Arguments threaded through an operation and its hooks.

OperationArgs is frozen: a before_operation hook that wants different
arguments returns a new instance, usually via ``dataclasses.replace``::

    def force_lowercase(args, operation, context):
        return replace(args, data={**args.data, "email": args.data["email"].lower()})
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union

from services.collections import Collection
from services.context import RequestContext


@dataclass(frozen=True)
class OperationArgs:
    collection: Collection
    req: RequestContext
    data: dict[str, Any] = field(default_factory=dict)

    # forgotPassword
    disable_email: bool = False
    # datetime, epoch milliseconds or ISO-8601 string; falsy means the configured TTL
    expiration: Optional[Union[datetime, int, str]] = None

    # findByID / updateByID / deleteByID
    id: Optional[str] = None

    # find and bulk update / delete
    where: Optional[dict[str, Any]] = None
    sort: Optional[str] = None
    limit: Optional[int] = None
    page: int = 1
