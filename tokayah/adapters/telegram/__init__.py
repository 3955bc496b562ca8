"""Telegram adapter — python-telegram-bot transport."""

from tokayah.adapters.telegram.adapter import (
    TelegramBotAdapter,
    TelegramReplyAdapter,
    to_inbound,
)

__all__ = ["TelegramBotAdapter", "TelegramReplyAdapter", "to_inbound"]
