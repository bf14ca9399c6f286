from __future__ import annotations

import html
from pathlib import Path

from aiogram import Router, types
from aiogram.filters import Command
from aiogram.types import FSInputFile
from loguru import logger

from santa_sorter.bot.utils import (
    GENERIC_ERROR,
    PRIVATE_ONLY,
    SLOW_DOWN,
    check_rate_limit,
    is_private,
    log_handler_exception,
)
from santa_sorter.core.config import load_settings
from santa_sorter.db import get_session
from santa_sorter.services import directory, draw, export
from santa_sorter.services.matching import AssignmentError, InfeasibleError

router = Router()

settings = load_settings()


@router.message(Command("draw"))
async def draw_command_handler(message: types.Message) -> None:
    if not check_rate_limit(message.from_user.id, "draw"):
        await message.answer(SLOW_DOWN)
        return

    if not is_private(message):
        await message.answer(PRIVATE_ONLY)
        return

    try:
        with get_session() as session:
            roster = directory.get_roster(session, message.chat.id, message.chat.title)
            result = draw.draw_roster(
                session,
                roster,
                max_attempts=settings.match_max_attempts,
                fallback=settings.match_fallback,
            )
            text = draw.format_pairs(result.pairs)

        await message.answer("Secret Santa assignments:\n" + html.escape(text))
    except InfeasibleError as exc:
        await message.answer(html.escape(draw.describe_failure(exc)))
    except AssignmentError as exc:
        await message.answer(html.escape(str(exc)))
    except Exception as exc:
        log_handler_exception("draw", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("export"))
async def export_command_handler(message: types.Message) -> None:
    if not check_rate_limit(message.from_user.id, "export"):
        await message.answer(SLOW_DOWN)
        return

    if not is_private(message):
        await message.answer(PRIVATE_ONLY)
        return

    try:
        with get_session() as session:
            roster = directory.get_roster(session, message.chat.id, message.chat.title)
            result = draw.redraw_last(
                session,
                roster,
                max_attempts=settings.match_max_attempts,
                fallback=settings.match_fallback,
            )

        with export.temporary_export(result.pairs, Path(settings.export_dir) / str(message.chat.id)) as exported:
            for path in exported.files:
                try:
                    await message.answer_document(FSInputFile(path))
                except Exception as exc:  # pragma: no cover - network dependent
                    logger.bind(chat_id=message.chat.id, path=str(path)).warning(
                        "Failed to send export file: {error}", error=str(exc)
                    )

        await message.answer(f"Exported {len(exported.files)} assignments.")
    except InfeasibleError as exc:
        await message.answer(html.escape(draw.describe_failure(exc)))
    except AssignmentError as exc:
        await message.answer(html.escape(str(exc)))
    except Exception as exc:
        log_handler_exception("export", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)
