"""Failure notifications."""

import logging
from typing import Optional

from routewatch.config import Settings, get_settings

logger = logging.getLogger(__name__)


class LogNotifier:
    """Default notifier: alerts only go to the log."""

    async def notify(self, message: str) -> bool:
        logger.warning(f"Notification: {message}")
        return True


def create_notifier(settings: Optional[Settings] = None):
    """Telegram notifier when enabled and configured, else a log-only notifier."""
    settings = settings or get_settings()

    if settings.notifications_enabled:
        if settings.telegram_bot_token and settings.telegram_chat_id:
            from routewatch.notifications.telegram import TelegramNotifier

            return TelegramNotifier(chat_id=settings.telegram_chat_id)
        logger.warning("NOTIFICATIONS_ENABLED set but Telegram is not configured - logging only")

    return LogNotifier()


__all__ = ["LogNotifier", "create_notifier"]
