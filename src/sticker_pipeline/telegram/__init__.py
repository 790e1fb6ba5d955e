"""Telegram Bot API integration: sticker set resolution and file lookups."""

from sticker_pipeline.telegram.api_client import TelegramApiError, TelegramBotClient
from sticker_pipeline.telegram.resolver import TelegramFileLocator, TelegramPackResolver

__all__ = [
    "TelegramApiError",
    "TelegramBotClient",
    "TelegramFileLocator",
    "TelegramPackResolver",
]
