"""Telegram delivery for endpoint failure alerts.

All alerts go to one operator chat through a shared bot instance.
"""

import asyncio
import logging
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError

from routewatch.config import get_settings

logger = logging.getLogger(__name__)

# Telegram rejects messages longer than this
MAX_MESSAGE_LENGTH = 4096

# Singleton bot instance
_bot_instance: Optional[Bot] = None
_bot_lock = asyncio.Lock()


async def get_bot() -> Optional[Bot]:
    """Shared bot, created on first use from TELEGRAM_BOT_TOKEN."""
    global _bot_instance

    if _bot_instance is not None:
        return _bot_instance

    async with _bot_lock:
        # Double-check after acquiring lock
        if _bot_instance is not None:
            return _bot_instance

        settings = get_settings()
        if not settings.telegram_bot_token:
            logger.warning("Telegram bot token not configured - notifications disabled")
            return None

        _bot_instance = Bot(token=settings.telegram_bot_token)
        return _bot_instance


async def close_bot() -> None:
    """Close the shared bot session on shutdown."""
    global _bot_instance
    if _bot_instance is not None:
        await _bot_instance.session.close()
        _bot_instance = None


class TelegramNotifier:
    """Posts failure alerts to the configured Telegram chat."""

    def __init__(self, chat_id: str, bot: Optional[Bot] = None):
        """Without an explicit bot the shared one from get_bot() is used."""
        self.chat_id = chat_id
        self._bot = bot

    async def _get_bot(self) -> Optional[Bot]:
        if self._bot:
            return self._bot
        return await get_bot()

    async def notify(self, message: str) -> bool:
        """Send an alert. Delivery problems are logged, never raised.

        Returns:
            True if message was sent successfully
        """
        bot = await self._get_bot()
        if not bot:
            logger.warning("Cannot send notification - bot not initialized")
            return False

        if len(message) > MAX_MESSAGE_LENGTH:
            message = message[: MAX_MESSAGE_LENGTH - 3] + "..."

        try:
            await bot.send_message(chat_id=self.chat_id, text=message)
            return True
        except TelegramForbiddenError:
            logger.warning(f"Chat {self.chat_id} has blocked the bot")
            return False
        except TelegramBadRequest as e:
            logger.error(f"Bad request sending to {self.chat_id}: {e}")
            return False
        except Exception as e:
            logger.error(f"Failed to send notification to {self.chat_id}: {e}")
            return False
