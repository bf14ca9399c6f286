from aiogram import Router, types
from aiogram.filters import Command, CommandStart

from santa_sorter.bot.utils import GENERIC_ERROR, SLOW_DOWN, check_rate_limit, log_handler_exception
from santa_sorter.db import get_session
from santa_sorter.services import directory

router = Router()

HELP_TEXT = (
    "I sort out who buys a present for whom.\n"
    "Talk to me in a private chat: the list and the pairs stay there.\n\n"
    "People:\n"
    "/add &lt;name&gt; - add a person\n"
    "/remove [name] - remove a person and every restriction pointing at them\n"
    "/list - show people and their restrictions\n"
    "/clearall - remove everyone\n\n"
    "Restrictions (names separated by a comma):\n"
    "/restrict A, B - A may not give to B\n"
    "/mutual A, B - neither may give to the other\n"
    "/unrestrict A, B - drop a one-way restriction\n"
    "/unmutual A, B - drop both directions\n"
    "/clearout &lt;name&gt; - drop everything this person may not give to\n"
    "/clearlinks &lt;name&gt; - drop restrictions in both directions\n\n"
    "Drawing:\n"
    "/draw - draw pairs\n"
    "/export - save the last draw as one file per giver"
)


@router.message(CommandStart())
async def command_start_handler(message: types.Message) -> None:
    if not check_rate_limit(message.from_user.id, "start"):
        await message.answer(SLOW_DOWN)
        return

    try:
        with get_session() as session:
            directory.get_roster(session, message.chat.id, message.chat.title)
        await message.answer("Hello! I'm your Secret Santa sorter.\n\n" + HELP_TEXT)
    except Exception as exc:
        log_handler_exception("start", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("help"))
async def command_help_handler(message: types.Message) -> None:
    await message.answer(HELP_TEXT)
