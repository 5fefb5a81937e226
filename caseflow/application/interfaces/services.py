"""Service interfaces (ports) for the application layer.

Protocols define contracts for transaction control, outbound notification
delivery and caching (DIP).
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from caseflow.application.dtos.notification import NotificationResult


class IUnitOfWork(Protocol):
    """Transaction control for multi-step and batch operations."""

    def savepoint(self) -> AbstractAsyncContextManager[None]:
        """Nested transaction; an exception inside rolls back only the block."""

    async def lock(self, name: str) -> None:
        """Take a transaction-scoped named lock (no-op where unsupported)."""


class INotificationSink(Protocol):
    """Outbound delivery for persisted notifications (email, push, log)."""

    async def deliver(self, notification: "NotificationResult") -> None:
        """Deliver one notification. Must not raise for delivery failures."""


class ICacheService(Protocol):
    """Minimal cache protocol for analytics caching (DIP)."""

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL. Returns True on success."""
