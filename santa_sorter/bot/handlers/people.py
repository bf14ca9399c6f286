from __future__ import annotations

import html

from aiogram import Router, types
from aiogram.filters import Command

from santa_sorter.bot.keyboards import (
    CANCEL,
    CONFIRM_CLEAR,
    REMOVE_PREFIX,
    confirm_clear_keyboard,
    pick_person_keyboard,
)
from santa_sorter.bot.utils import (
    GENERIC_ERROR,
    PRIVATE_ONLY,
    SLOW_DOWN,
    check_rate_limit,
    command_args,
    is_private,
    log_handler_exception,
)
from santa_sorter.db import get_session, repo
from santa_sorter.services import directory, draw

router = Router()


def _removed_text(name: str, result: directory.RemoveResult) -> str:
    return f"Removed {html.escape(name)}; scrubbed {result.scrubbed} references."


@router.message(Command("add"))
async def add_command_handler(message: types.Message) -> None:
    if not check_rate_limit(message.from_user.id, "add"):
        await message.answer(SLOW_DOWN)
        return

    if not is_private(message):
        await message.answer(PRIVATE_ONLY)
        return

    name = command_args(message)
    if not name:
        await message.answer("Usage: /add &lt;name&gt;")
        return

    try:
        with get_session() as session:
            roster = directory.get_roster(session, message.chat.id, message.chat.title)
            existed = directory.person_exists(session, roster, name)
            person = directory.create_or_get(session, roster, name)
            label = html.escape(person.name)

        if existed:
            await message.answer(f"{label} is already on the list.")
        else:
            await message.answer(f"Added {label}.")
    except Exception as exc:
        log_handler_exception("add", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("remove"))
async def remove_command_handler(message: types.Message) -> None:
    if not check_rate_limit(message.from_user.id, "remove"):
        await message.answer(SLOW_DOWN)
        return

    if not is_private(message):
        await message.answer(PRIVATE_ONLY)
        return

    name = command_args(message)
    try:
        with get_session() as session:
            roster = directory.get_roster(session, message.chat.id, message.chat.title)
            if not name:
                people = directory.list_people(session, roster)
                if not people:
                    await message.answer("No people available.")
                    return
                await message.answer("Pick the person to remove.", reply_markup=pick_person_keyboard(people))
                return

            person = directory.get_person(session, roster, name)
            if person is None:
                await message.answer(f"{html.escape(name)} is not on the list.")
                return
            label = person.name
            result = directory.remove_person(session, roster, person)

        await message.answer(_removed_text(label, result))
    except Exception as exc:
        log_handler_exception("remove", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.callback_query(lambda c: c.data is not None and c.data.startswith(REMOVE_PREFIX))
async def remove_pick_callback_handler(query: types.CallbackQuery) -> None:
    if not check_rate_limit(query.from_user.id, "remove"):
        await query.answer(SLOW_DOWN, show_alert=True)
        return

    try:
        person_id = int(query.data[len(REMOVE_PREFIX):])
        with get_session() as session:
            roster = directory.get_roster(session, query.message.chat.id)
            person = repo.get_person_by_id(session, roster.id, person_id)
            if person is None:
                await query.answer("That person is no longer on the list.", show_alert=True)
                return
            label = person.name
            result = directory.remove_person(session, roster, person)

        await query.message.edit_text(_removed_text(label, result))
        await query.answer()
    except Exception as exc:
        log_handler_exception("remove_pick", query.from_user.id, query.message.chat.id, exc)
        await query.answer(GENERIC_ERROR, show_alert=True)


@router.message(Command("list"))
async def list_command_handler(message: types.Message) -> None:
    if not check_rate_limit(message.from_user.id, "list"):
        await message.answer(SLOW_DOWN)
        return

    if not is_private(message):
        await message.answer(PRIVATE_ONLY)
        return

    try:
        with get_session() as session:
            roster = directory.get_roster(session, message.chat.id, message.chat.title)
            people = directory.list_people(session, roster)
            if not people:
                await message.answer("Nobody has been added yet. Use /add &lt;name&gt;.")
                return
            text = draw.format_restrictions(people)

        await message.answer(f"People ({len(people)}):\n" + html.escape(text))
    except Exception as exc:
        log_handler_exception("list", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("clearall"))
async def clear_all_command_handler(message: types.Message) -> None:
    if not check_rate_limit(message.from_user.id, "clearall"):
        await message.answer(SLOW_DOWN)
        return

    if not is_private(message):
        await message.answer(PRIVATE_ONLY)
        return

    try:
        with get_session() as session:
            roster = directory.get_roster(session, message.chat.id, message.chat.title)
            count = directory.count_people(session, roster)

        if not count:
            await message.answer("No people to clear.")
            return

        await message.answer(
            "This will remove ALL people and their restrictions. Continue?",
            reply_markup=confirm_clear_keyboard(),
        )
    except Exception as exc:
        log_handler_exception("clearall", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.callback_query(lambda c: c.data == CONFIRM_CLEAR)
async def confirm_clear_callback_handler(query: types.CallbackQuery) -> None:
    if not check_rate_limit(query.from_user.id, "confirm_clear"):
        await query.answer(SLOW_DOWN, show_alert=True)
        return

    try:
        with get_session() as session:
            roster = directory.get_roster(session, query.message.chat.id)
            count = directory.clear_roster(session, roster)

        await query.message.edit_text(f"Cleared all data ({count} people).")
        await query.answer()
    except Exception as exc:
        log_handler_exception("confirm_clear", query.from_user.id, query.message.chat.id, exc)
        await query.answer(GENERIC_ERROR, show_alert=True)


@router.callback_query(lambda c: c.data == CANCEL)
async def cancel_callback_handler(query: types.CallbackQuery) -> None:
    await query.message.edit_text("Cancelled.")
    await query.answer()
