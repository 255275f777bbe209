import pytest

from notekeeper.core.services.compensation import CompensationStack


@pytest.mark.asyncio
async def test_success_discards_actions():
    ran = []

    async def undo():
        ran.append("undo")

    async with CompensationStack("op") as stack:
        stack.push("undo", undo)

    assert ran == []
    assert stack.pending == []


@pytest.mark.asyncio
async def test_failure_unwinds_lifo_and_reraises():
    ran = []

    def action(name):
        async def _run():
            ran.append(name)
        return _run

    with pytest.raises(RuntimeError, match="boom"):
        async with CompensationStack("op", user_id="u1") as stack:
            stack.push("first", action("first"))
            stack.push("second", action("second"))
            raise RuntimeError("boom")

    assert ran == ["second", "first"]


@pytest.mark.asyncio
async def test_failing_action_is_skipped_not_retried():
    calls = {"broken": 0, "after": 0}

    async def broken():
        calls["broken"] += 1
        raise ValueError("undo failed")

    async def after():
        calls["after"] += 1

    with pytest.raises(KeyError):
        async with CompensationStack("op") as stack:
            stack.push("after", after)
            stack.push("broken", broken)
            raise KeyError("original")

    assert calls == {"broken": 1, "after": 1}
