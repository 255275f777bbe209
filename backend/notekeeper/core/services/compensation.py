from __future__ import annotations

from typing import TYPE_CHECKING, Any

from notekeeper.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

logger = get_logger(__name__)


class CompensationStack:
    """Undo log for a multi-step write that has no transaction behind it.

    Each completed step pushes the action that would reverse it. If the block
    raises, the actions run newest first; an action that itself fails is
    logged and skipped, never retried. The original exception always
    propagates. A block that completes discards the log.

        async with CompensationStack("prepopulate", user_id=uid) as undo:
            category = await categories.create(...)
            undo.push("remove category", partial(categories.remove, category.id))
    """

    def __init__(self, operation: str, **context: Any) -> None:
        self.operation = operation
        self.context = {k: str(v) for k, v in context.items()}
        self._actions: list[tuple[str, Callable[[], Awaitable[Any]]]] = []

    def push(self, description: str, action: Callable[[], Awaitable[Any]]) -> None:
        self._actions.append((description, action))

    @property
    def pending(self) -> list[str]:
        return [description for description, _ in self._actions]

    async def __aenter__(self) -> CompensationStack:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc is None:
            self._actions.clear()
            return False
        if isinstance(exc, Exception):
            logger.error(
                "%s failed, compensating %d step(s): %s",
                self.operation,
                len(self._actions),
                exc,
                extra=self.context,
            )
            await self.unwind()
        return False

    async def unwind(self) -> None:
        while self._actions:
            description, action = self._actions.pop()
            try:
                await action()
            except Exception as err:
                logger.warning(
                    "Compensation step '%s' of %s failed: %s",
                    description,
                    self.operation,
                    err,
                    extra=self.context,
                )
