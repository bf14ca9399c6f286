from __future__ import annotations

from typing import Optional

from aiogram import types
from loguru import logger

from santa_sorter.services.rate_limit import rate_limiter

SLOW_DOWN = "You're doing that too often. Please slow down."
GENERIC_ERROR = "Something went wrong. Please try again later."
PRIVATE_ONLY = "Send me this in a private chat. The list and the pairs live there, so they stay secret."


def check_rate_limit(user_id: int, action: str) -> bool:
    return rate_limiter.check(user_id, action)


def command_args(message: types.Message) -> Optional[str]:
    parts = (message.text or "").split(maxsplit=1)
    if len(parts) < 2:
        return None
    return parts[1].strip() or None


def is_private(message: types.Message) -> bool:
    return message.chat.type == "private"


def log_handler_exception(action: str, user_id: int | None, chat_id: int | None, error: Exception) -> None:
    logger.bind(action=action, user_id=user_id, chat_id=chat_id).exception(
        "Handler error: {error}", error=str(error)
    )
