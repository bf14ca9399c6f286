from aiogram import Router

from santa_sorter.bot.handlers import draw, people, restrictions, start

router = Router()
router.include_router(start.router)
router.include_router(people.router)
router.include_router(restrictions.router)
router.include_router(draw.router)
