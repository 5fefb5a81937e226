"""Outbound notification delivery: log-only sink."""

from __future__ import annotations

import logging

from caseflow.application.dtos.notification import NotificationResult
from caseflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class LogOnlyNotificationSink:
    """INotificationSink implementation that logs instead of delivering.

    Use when no email/push channel is configured. Production can swap in a
    queue-based implementation; the notification is already persisted.
    """

    async def deliver(self, notification: NotificationResult) -> None:
        """Log the notification; nothing is sent."""
        logger.info(
            "Notification %s: would deliver %s to user %s (priority=%s, task=%s)",
            notification.id,
            notification.type,
            notification.user_id,
            notification.priority,
            notification.task_id or "-",
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Notification %s title=%r message (first 500 chars): %s",
                notification.id,
                notification.title[:80],
                notification.message[:500],
            )
