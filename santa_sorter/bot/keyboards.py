from typing import Iterable

from aiogram.utils.keyboard import InlineKeyboardBuilder

from santa_sorter.db import Person

REMOVE_PREFIX = "remove:"
CONFIRM_CLEAR = "confirm_clear"
CANCEL = "cancel"


def pick_person_keyboard(people: Iterable[Person], prefix: str = REMOVE_PREFIX):
    keyboard = InlineKeyboardBuilder()
    for person in people:
        keyboard.button(text=person.name, callback_data=f"{prefix}{person.id}")
    keyboard.button(text="Cancel", callback_data=CANCEL)
    keyboard.adjust(2)
    return keyboard.as_markup()


def confirm_clear_keyboard():
    keyboard = InlineKeyboardBuilder()
    keyboard.button(text="Yes, remove everyone", callback_data=CONFIRM_CLEAR)
    keyboard.button(text="Cancel", callback_data=CANCEL)
    return keyboard.as_markup()
