from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

from loguru import logger

from santa_sorter.db import Person, Roster, repo
from santa_sorter.services.participants import Participant, name_key, normalize_name

_PAIR_SEPARATORS = (",", ">")


@dataclass(frozen=True)
class RemoveResult:
    removed: bool
    scrubbed: int


def get_roster(session, chat_id: int, title: Optional[str] = None) -> Roster:
    return repo.get_or_create_roster(session, chat_id, title)


def get_person(session, roster: Roster, name: str) -> Optional[Person]:
    return repo.get_person_by_key(session, roster.id, name_key(name))


def person_exists(session, roster: Roster, name: str) -> bool:
    return get_person(session, roster, name) is not None


def create_or_get(session, roster: Roster, name: str) -> Person:
    display = normalize_name(name)
    existing = repo.get_person_by_key(session, roster.id, display.casefold())
    if existing:
        return existing
    person = repo.create_person(session, roster.id, display, display.casefold())
    _forget_draw(session, roster)
    logger.bind(roster_id=roster.id).info("Created person {name}", name=display)
    return person


def _forget_draw(session, roster: Roster) -> None:
    # A stored seed only reproduces the draw for the roster it was drawn from.
    if roster.last_draw_seed is not None:
        repo.update_roster_draw(session, roster, None)


def _changed(session, person: Person, changed):
    if changed:
        _forget_draw(session, person.roster)
    return changed


def list_people(session, roster: Roster) -> List[Person]:
    return repo.list_people(session, roster.id)


def count_people(session, roster: Roster) -> int:
    return repo.count_people(session, roster.id)


def all_names(session, roster: Roster) -> List[str]:
    names: Dict[str, str] = {}
    for person in repo.list_people(session, roster.id):
        names.setdefault(person.name_key, person.name)
    return sorted(names.values(), key=str.casefold)


def restriction_names(person: Person) -> List[str]:
    return sorted((other.name for other in person.restrictions), key=str.casefold)


def remove_person(session, roster: Roster, person: Optional[Person]) -> RemoveResult:
    """Delete ``person`` and drop every restriction other people hold against them."""
    if person is None or person.roster_id != roster.id:
        return RemoveResult(False, 0)
    name = person.name
    scrubbed = repo.scrub_incoming_restrictions(session, person)
    # Keeps the other people's restricted_by collections in step with the table.
    repo.clear_restrictions(session, person)
    repo.delete_person(session, person)
    _forget_draw(session, roster)
    logger.bind(roster_id=roster.id).info("Removed {name}; scrubbed {count} references", name=name, count=scrubbed)
    return RemoveResult(True, scrubbed)


def remove_person_by_name(session, roster: Roster, name: str) -> RemoveResult:
    return remove_person(session, roster, get_person(session, roster, name))


def clear_roster(session, roster: Roster) -> int:
    people = repo.list_people(session, roster.id)
    for person in people:
        repo.clear_restrictions(session, person)
    for person in people:
        repo.delete_person(session, person)
    repo.update_roster_draw(session, roster, None)
    logger.bind(roster_id=roster.id).info("Cleared all data ({count} people)", count=len(people))
    return len(people)


def add_restriction(session, person: Person, restricted: Person) -> bool:
    if person is restricted:
        return False
    return _changed(session, person, repo.add_restriction(session, person, restricted))


def add_mutual_restriction(session, first: Person, second: Person) -> bool:
    if not add_restriction(session, first, second):
        return False
    if not add_restriction(session, second, first):
        repo.remove_restriction(session, first, second)
        return False
    return True


def add_restriction_by_name(session, roster: Roster, name: str, restricted_name: str) -> bool:
    person = create_or_get(session, roster, name)
    restricted = create_or_get(session, roster, restricted_name)
    return add_restriction(session, person, restricted)


def add_mutual_restriction_by_name(session, roster: Roster, first_name: str, second_name: str) -> bool:
    first = create_or_get(session, roster, first_name)
    second = create_or_get(session, roster, second_name)
    return add_mutual_restriction(session, first, second)


def remove_restriction(session, person: Person, restricted: Person) -> bool:
    return _changed(session, person, repo.remove_restriction(session, person, restricted))


def remove_mutual_restriction(session, first: Person, second: Person) -> bool:
    changed = repo.remove_restriction(session, first, second)
    changed |= repo.remove_restriction(session, second, first)
    return _changed(session, first, changed)


def remove_restriction_by_name(session, roster: Roster, name: str, restricted_name: str) -> bool:
    person = get_person(session, roster, name)
    restricted = get_person(session, roster, restricted_name)
    if person is None or restricted is None:
        return False
    return remove_restriction(session, person, restricted)


def remove_mutual_restriction_by_name(session, roster: Roster, first_name: str, second_name: str) -> bool:
    first = get_person(session, roster, first_name)
    second = get_person(session, roster, second_name)
    if first is None or second is None:
        return False
    return remove_mutual_restriction(session, first, second)


def clear_restrictions(session, person: Optional[Person]) -> int:
    if person is None:
        return 0
    return _changed(session, person, repo.clear_restrictions(session, person))


def scrub_incoming_restrictions(session, person: Optional[Person]) -> int:
    if person is None:
        return 0
    return _changed(session, person, repo.scrub_incoming_restrictions(session, person))


def clear_all_restriction_links(session, person: Optional[Person]) -> Tuple[int, int]:
    return clear_restrictions(session, person), scrub_incoming_restrictions(session, person)


def to_participant(person: Person) -> Participant:
    return Participant(key=person.name_key, name=person.name)


def snapshot(session, roster: Roster) -> Tuple[List[Participant], Dict[Participant, FrozenSet[Participant]]]:
    """Copy the roster out of the ORM as matching input, in insertion order."""
    people = repo.list_people(session, roster.id)
    participants = {person.id: to_participant(person) for person in people}
    forbidden = {
        participants[person.id]: frozenset(
            participants[other.id] for other in person.restrictions if other.id in participants
        )
        for person in people
    }
    return list(participants.values()), forbidden


def parse_name_pair(text: Optional[str]) -> Tuple[str, str]:
    if not text:
        raise ValueError("Two names are required, e.g. 'Alice, Bob'.")
    for separator in _PAIR_SEPARATORS:
        if separator in text:
            first, second = text.split(separator, 1)
            break
    else:
        raise ValueError("Separate the two names with a comma, e.g. 'Alice, Bob'.")

    first = normalize_name(first)
    second = normalize_name(second)
    if first.casefold() == second.casefold():
        raise ValueError("Pick a different person as the second participant.")
    return first, second
