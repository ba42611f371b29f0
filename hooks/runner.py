"""
Sequential hook chains for collection operations.

Every chain awaits its hooks one at a time, in registration order. A hook
raising aborts the rest of the chain and the exception reaches the caller
unchanged. Hooks may be plain functions or coroutine functions.

Chain shapes used by the operations:

- run_before_operation - threads the operation args; a hook returning a
  non-empty value replaces them for the next hook and for the operation.
- run_after_operation  - threads the operation result the same way.
- run_hooks            - side effects only; return values are ignored.
- run_threaded         - generic threading over any keyword (data, doc).
"""

from __future__ import annotations

import inspect
from typing import Any, Iterable

from schemas.collection import Hook


async def call_hook(hook: Hook, **kwargs: Any) -> Any:
    result = hook(**kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


async def run_threaded(
    hooks: Iterable[Hook], key: str, value: Any, **kwargs: Any
) -> Any:
    """Invoke *hooks* in order passing ``key=value``; the latest non-empty return wins."""
    for hook in hooks:
        result = await call_hook(hook, **{key: value}, **kwargs)
        if result:
            value = result
    return value


async def run_hooks(hooks: Iterable[Hook], **kwargs: Any) -> None:
    for hook in hooks:
        await call_hook(hook, **kwargs)


async def run_before_operation(hooks: Iterable[Hook], args, operation: str):
    """Run before_operation hooks; each receives ``args``, ``operation`` and ``context``."""
    for hook in hooks:
        result = await call_hook(
            hook, args=args, operation=operation, context=args.req.context
        )
        if result:
            args = result
    return args


async def run_after_operation(hooks: Iterable[Hook], args, operation: str, result: Any):
    """Run after_operation hooks; a non-empty return value replaces *result*."""
    return await run_threaded(
        hooks, "result", result, args=args, operation=operation
    )
