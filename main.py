from __future__ import annotations

import asyncio

import uvloop
from aiogram.types import BotCommand, BotCommandScopeDefault
from loguru import logger

from santa_sorter.bot import bot, dp, settings
from santa_sorter.core.logging import setup_logging
from santa_sorter.db import init_engine


USERS_COMMANDS: dict[str, str] = {
    "start": "start",
    "help": "show commands",
    "add": "add a person",
    "remove": "remove a person",
    "list": "list people and restrictions",
    "clearall": "remove everyone",
    "restrict": "A may not give to B",
    "mutual": "A and B may not give to each other",
    "unrestrict": "drop a one-way restriction",
    "unmutual": "drop a mutual restriction",
    "clearout": "clear a person's restrictions",
    "clearlinks": "clear restrictions in both directions",
    "draw": "draw pairs",
    "export": "export the last draw",
}


async def set_default_commands() -> None:
    await bot.set_my_commands(
        [
            BotCommand(command=command, description=description)
            for command, description in USERS_COMMANDS.items()
        ],
        scope=BotCommandScopeDefault(),
    )


async def on_startup() -> None:
    logger.info("bot starting...")

    await set_default_commands()

    bot_info = await bot.get_me()

    logger.info("Name     - {name}", name=bot_info.full_name)
    logger.info("Username - @{username}", username=bot_info.username)
    logger.info("ID       - {id}", id=bot_info.id)
    logger.info(
        "Matching - max_attempts={attempts}, fallback={fallback}",
        attempts=settings.match_max_attempts,
        fallback=settings.match_fallback,
    )

    logger.info("bot started")


async def on_shutdown() -> None:
    logger.info("bot stopping...")

    await dp.storage.close()

    await bot.session.close()

    logger.info("bot stopped")


async def main() -> None:
    setup_logging(settings.log_level, settings.log_path)
    init_engine(settings.database_url, create_schema=settings.create_schema)

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())


if __name__ == "__main__":
    if not getattr(asyncio, "debug", False):
        uvloop.install()

    asyncio.run(main())
