"""Unit tests for the sequential hook chains."""

from types import SimpleNamespace

import pytest

from hooks.runner import (
    call_hook,
    run_after_operation,
    run_before_operation,
    run_hooks,
    run_threaded,
)


def _args(**data):
    return SimpleNamespace(data=data, req=SimpleNamespace(context={}))


class TestCallHook:
    async def test_sync_hook(self):
        assert await call_hook(lambda x: x * 2, x=2) == 4

    async def test_async_hook(self):
        async def hook(x):
            return x + 1

        assert await call_hook(hook, x=1) == 2


class TestRunBeforeOperation:
    async def test_hooks_run_in_order(self):
        order = []

        async def first(args, operation, context):
            order.append("first")

        def second(args, operation, context):
            order.append("second")

        await run_before_operation([first, second], _args(), "find")
        assert order == ["first", "second"]

    async def test_latest_non_empty_result_wins(self):
        a, b = _args(email="a"), _args(email="b")
        seen = []

        def replace_with_a(args, operation, context):
            return a

        def observe(args, operation, context):
            seen.append(args)
            return None

        def replace_with_b(args, operation, context):
            return b

        result = await run_before_operation(
            [replace_with_a, observe, replace_with_b], _args(email="x"), "login"
        )
        assert seen == [a]
        assert result is b

    async def test_passes_operation_and_context(self):
        args = _args()
        captured = {}

        def hook(args, operation, context):
            captured.update(operation=operation, context=context)

        await run_before_operation([hook], args, "forgotPassword")
        assert captured["operation"] == "forgotPassword"
        assert captured["context"] is args.req.context

    async def test_error_aborts_remaining_hooks(self):
        calls = []

        def boom(**kwargs):
            raise ValueError("nope")

        def never(**kwargs):
            calls.append("never")

        with pytest.raises(ValueError, match="nope"):
            await run_before_operation([boom, never], _args(), "create")
        assert calls == []

    async def test_no_hooks_returns_args(self):
        args = _args()
        assert await run_before_operation([], args, "find") is args


class TestRunAfterOperation:
    async def test_replaces_result(self):
        result = await run_after_operation(
            [lambda result, args, operation: result.upper()], _args(), "x", "token"
        )
        assert result == "TOKEN"

    @pytest.mark.parametrize("empty", [None, "", {}, 0], ids=["none", "str", "dict", "zero"])
    async def test_empty_return_keeps_result(self, empty):
        result = await run_after_operation(
            [lambda **kwargs: empty], _args(), "x", "token"
        )
        assert result == "token"


class TestRunHooks:
    async def test_return_values_ignored(self):
        calls = []

        async def hook(value):
            calls.append(value)
            return "ignored"

        assert await run_hooks([hook, hook], value=1) is None
        assert calls == [1, 1]


class TestRunThreaded:
    async def test_threads_named_value(self):
        hooks = [lambda doc, req: {**doc, "a": 1}, lambda doc, req: {**doc, "b": 2}]
        assert await run_threaded(hooks, "doc", {}, req=None) == {"a": 1, "b": 2}
