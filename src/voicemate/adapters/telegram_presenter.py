"""Telegram notification presenter."""

import asyncio
import logging

import telegramify_markdown
from telegram import Bot
from telegram.error import (
    BadRequest,
    Forbidden,
    InvalidToken,
    NetworkError,
    TelegramError,
    TimedOut,
)

from voicemate.ports.presenter import PresentationUnavailable, TransientPresentationError

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4000


def format_message(title: str, body: str | None = None) -> str:
    """Render a notification as Telegram MarkdownV2."""
    text = f"**{title}**"
    if body:
        text += f"\n\n{body}"
    return telegramify_markdown.markdownify(text)


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """
    Split rendered MarkdownV2 into chunks Telegram accepts.

    Cuts at the last newline before `limit` when there is one, and never
    between a backslash and the character it escapes.
    """
    chunks = []
    while len(text) > limit:
        cut = text.rfind("\n", 0, limit) + 1
        if cut == 0:
            cut = limit
            backslashes = len(text[:cut]) - len(text[:cut].rstrip("\\"))
            if backslashes % 2 and cut > 1:
                cut -= 1
        chunks.append(text[:cut])
        text = text[cut:]
    if text:
        chunks.append(text)
    return chunks


class TelegramPresenter:
    """
    Sends notifications as Telegram messages.

    Implements NotificationPresenter protocol. Without a bot token or chat
    ids, presenting is unavailable (the equivalent of denied permission).
    Notifications that do not require interaction are sent silently.
    """

    def __init__(self, token: str, chat_ids: list[int]):
        self.token = token
        self.chat_ids = chat_ids

    def request_permission(self) -> bool:
        """Check the bot token works and there is someone to notify."""
        if not self.token or not self.chat_ids:
            return False
        try:
            asyncio.run(self._check())
            return True
        except TelegramError as e:
            logger.warning(f"Telegram permission check failed: {e}")
            return False

    def present(
        self,
        title: str,
        body: str | None = None,
        tag: str | None = None,
        require_interaction: bool = False,
    ) -> None:
        if not self.token:
            raise PresentationUnavailable("TELEGRAM_BOT_TOKEN not configured")
        if not self.chat_ids:
            raise PresentationUnavailable("TELEGRAM_CHAT_IDS not configured")

        chunks = split_message(format_message(title, body))

        try:
            asyncio.run(self._send(chunks, silent=not require_interaction))
        except BadRequest:
            # A subclass of NetworkError, but resending the same message fails the same way
            raise
        except (TimedOut, NetworkError) as e:
            raise TransientPresentationError(f"Telegram unreachable: {e}") from e
        except (Forbidden, InvalidToken) as e:
            raise PresentationUnavailable(f"Telegram refused delivery: {e}") from e

    async def _check(self) -> None:
        async with Bot(self.token) as bot:
            await bot.get_me()

    async def _send(self, chunks: list[str], silent: bool = False) -> None:
        async with Bot(self.token) as bot:
            for chat_id in self.chat_ids:
                for chunk in chunks:
                    await bot.send_message(
                        chat_id=chat_id,
                        text=chunk,
                        parse_mode="MarkdownV2",
                        disable_notification=silent,
                    )
