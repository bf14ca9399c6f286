from santa_sorter.db.models import Base, Person, Roster, person_restrictions
from santa_sorter.db.session import SessionLocal, get_session, init_engine

__all__ = [
    "Base",
    "Person",
    "Roster",
    "person_restrictions",
    "SessionLocal",
    "get_session",
    "init_engine",
]
