"""Exception hierarchy shared by the ledgers, the orchestrator and the API.

    NotekeeperError
    ├── ValidationFailure  malformed or missing input, raised before any store call
    ├── NotFound           referenced entity missing or owned by someone else
    └── StoreFailure       the document store call itself failed

Ledgers report "not found" as ``None``; ``NotFound`` is only raised where a
caller cannot continue without the entity (prepopulation needs its user).
"""

from __future__ import annotations

from typing import Any


class NotekeeperError(Exception):
    """Base class for application errors.

    ``message`` is safe to log; ``context`` carries ids and other debug
    details that never reach the HTTP response.
    """

    def __init__(self, message: str = "Unexpected error", context: dict[str, Any] | None = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(message)


class ValidationFailure(NotekeeperError):
    pass


class NotFound(NotekeeperError):
    pass


class StoreFailure(NotekeeperError):
    """A document store round-trip failed (connectivity, constraint, driver error)."""

    def __init__(
        self,
        message: str = "Document store call failed",
        *,
        collection: str | None = None,
        operation: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if collection:
            ctx["collection"] = collection
        if operation:
            ctx["operation"] = operation
        super().__init__(message, ctx)
        self.collection = collection
        self.operation = operation
