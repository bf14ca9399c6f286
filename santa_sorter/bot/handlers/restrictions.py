from __future__ import annotations

import html
from typing import Callable, Dict, NamedTuple

from aiogram import Router, types
from aiogram.filters import Command, CommandObject

from santa_sorter.bot.utils import (
    GENERIC_ERROR,
    PRIVATE_ONLY,
    SLOW_DOWN,
    check_rate_limit,
    command_args,
    is_private,
    log_handler_exception,
)
from santa_sorter.db import get_session
from santa_sorter.services import directory

router = Router()


class PairAction(NamedTuple):
    apply: Callable[..., bool]
    changed: str
    unchanged: str


PAIR_ACTIONS: Dict[str, PairAction] = {
    "restrict": PairAction(
        directory.add_restriction_by_name,
        "Added restriction: {a} → {b}",
        "No change (already exists): {a} → {b}",
    ),
    "mutual": PairAction(
        directory.add_mutual_restriction_by_name,
        "Added mutual restriction: {a} ↔ {b}",
        "No change (already exists): {a} ↔ {b}",
    ),
    "unrestrict": PairAction(
        directory.remove_restriction_by_name,
        "Removed restriction: {a} → {b}",
        "No change (not found): {a} → {b}",
    ),
    "unmutual": PairAction(
        directory.remove_mutual_restriction_by_name,
        "Removed mutual restriction: {a} ↔ {b}",
        "No mutual restriction to remove: {a} ↔ {b}",
    ),
}


@router.message(Command(*PAIR_ACTIONS))
async def pair_command_handler(message: types.Message, command: CommandObject) -> None:
    name = command.command.lower()
    action = PAIR_ACTIONS[name]

    if not check_rate_limit(message.from_user.id, name):
        await message.answer(SLOW_DOWN)
        return

    if not is_private(message):
        await message.answer(PRIVATE_ONLY)
        return

    try:
        first, second = directory.parse_name_pair(command.args)
    except ValueError as exc:
        await message.answer(f"{html.escape(str(exc))}\nUsage: /{name} A, B")
        return

    try:
        with get_session() as session:
            roster = directory.get_roster(session, message.chat.id, message.chat.title)
            changed = action.apply(session, roster, first, second)

        template = action.changed if changed else action.unchanged
        await message.answer(template.format(a=html.escape(first), b=html.escape(second)))
    except Exception as exc:
        log_handler_exception(name, message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("clearout"))
async def clear_outgoing_command_handler(message: types.Message) -> None:
    if not check_rate_limit(message.from_user.id, "clearout"):
        await message.answer(SLOW_DOWN)
        return

    if not is_private(message):
        await message.answer(PRIVATE_ONLY)
        return

    name = command_args(message)
    if not name:
        await message.answer("Usage: /clearout &lt;name&gt;")
        return

    try:
        with get_session() as session:
            roster = directory.get_roster(session, message.chat.id, message.chat.title)
            person = directory.get_person(session, roster, name)
            if person is None:
                await message.answer(f"{html.escape(name)} is not on the list.")
                return
            label = html.escape(person.name)
            removed = directory.clear_restrictions(session, person)

        await message.answer(f"Cleared {removed} outgoing restrictions for {label}.")
    except Exception as exc:
        log_handler_exception("clearout", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("clearlinks"))
async def clear_links_command_handler(message: types.Message) -> None:
    if not check_rate_limit(message.from_user.id, "clearlinks"):
        await message.answer(SLOW_DOWN)
        return

    if not is_private(message):
        await message.answer(PRIVATE_ONLY)
        return

    name = command_args(message)
    if not name:
        await message.answer("Usage: /clearlinks &lt;name&gt;")
        return

    try:
        with get_session() as session:
            roster = directory.get_roster(session, message.chat.id, message.chat.title)
            person = directory.get_person(session, roster, name)
            if person is None:
                await message.answer(f"{html.escape(name)} is not on the list.")
                return
            label = html.escape(person.name)
            outgoing, incoming = directory.clear_all_restriction_links(session, person)

        await message.answer(f"Cleared restrictions for {label}: outgoing={outgoing}, incoming={incoming}")
    except Exception as exc:
        log_handler_exception("clearlinks", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)
