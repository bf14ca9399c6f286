from __future__ import annotations

import datetime
from typing import List, Optional

from sqlalchemy import and_, func, select

from santa_sorter.db.models import Person, Roster


def get_roster_by_chat_id(session, chat_id: int) -> Optional[Roster]:
    return session.scalar(select(Roster).where(Roster.chat_id == chat_id))


def create_roster(session, chat_id: int, title: Optional[str]) -> Roster:
    roster = Roster(chat_id=chat_id, title=title)
    session.add(roster)
    session.flush()
    return roster


def get_or_create_roster(session, chat_id: int, title: Optional[str] = None) -> Roster:
    roster = get_roster_by_chat_id(session, chat_id)
    if roster:
        if title and roster.title != title:
            roster.title = title
        return roster
    return create_roster(session, chat_id, title)


def get_person_by_key(session, roster_id: int, name_key: str) -> Optional[Person]:
    return session.scalar(
        select(Person).where(and_(Person.roster_id == roster_id, Person.name_key == name_key))
    )


def get_person_by_id(session, roster_id: int, person_id: int) -> Optional[Person]:
    return session.scalar(
        select(Person).where(and_(Person.roster_id == roster_id, Person.id == person_id))
    )


def list_people(session, roster_id: int) -> List[Person]:
    return list(
        session.scalars(select(Person).where(Person.roster_id == roster_id).order_by(Person.id)).all()
    )


def count_people(session, roster_id: int) -> int:
    return session.scalar(select(func.count()).select_from(Person).where(Person.roster_id == roster_id))


def create_person(session, roster_id: int, name: str, name_key: str) -> Person:
    person = Person(roster_id=roster_id, name=name, name_key=name_key)
    session.add(person)
    session.flush()
    return person


def delete_person(session, person: Person) -> None:
    session.delete(person)
    session.flush()


def add_restriction(session, person: Person, restricted: Person) -> bool:
    if restricted in person.restrictions:
        return False
    person.restrictions.append(restricted)
    session.flush()
    return True


def remove_restriction(session, person: Person, restricted: Person) -> bool:
    if restricted not in person.restrictions:
        return False
    person.restrictions.remove(restricted)
    session.flush()
    return True


def clear_restrictions(session, person: Person) -> int:
    count = len(person.restrictions)
    person.restrictions.clear()
    session.flush()
    return count


def scrub_incoming_restrictions(session, person: Person) -> int:
    count = len(person.restricted_by)
    person.restricted_by.clear()
    session.flush()
    return count


def update_roster_draw(
    session,
    roster: Roster,
    seed: Optional[int],
    drawn_at: Optional[datetime.datetime] = None,
) -> None:
    roster.last_draw_seed = seed
    roster.last_drawn_at = drawn_at
