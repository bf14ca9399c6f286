from __future__ import annotations

import datetime
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from santa_sorter.db import Person, Roster, repo
from santa_sorter.services import directory
from santa_sorter.services.matching import DEFAULT_MAX_ATTEMPTS, AssignmentError, InfeasibleError, solve
from santa_sorter.services.participants import Participant

PAIR_ARROW = " -> "
RESTRICTION_ARROW = " ->! "

Pair = Tuple[Participant, Participant]


@dataclass(frozen=True)
class DrawResult:
    pairs: List[Pair]
    seed: int
    roster: Roster


def draw_roster(
    session,
    roster: Roster,
    seed: Optional[int] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    fallback: bool = True,
) -> DrawResult:
    participants, forbidden = directory.snapshot(session, roster)
    if len(participants) < 2:
        raise AssignmentError("Need at least two people to draw.")

    if seed is None:
        seed = random.randint(1, 2**31 - 1)

    log = logger.bind(roster_id=roster.id, seed=seed)
    try:
        assignments = solve(
            participants,
            forbidden,
            rng=random.Random(seed),
            max_attempts=max_attempts,
            fallback=fallback,
        )
    except InfeasibleError as exc:
        log.warning("Draw failed ({reason}): {error}", reason=exc.reason, error=str(exc))
        raise

    repo.update_roster_draw(session, roster, seed, drawn_at=datetime.datetime.utcnow())
    log.info("Assignments generated")

    return DrawResult(pairs=list(assignments.items()), seed=seed, roster=roster)


def redraw_last(
    session,
    roster: Roster,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    fallback: bool = True,
) -> DrawResult:
    """Repeat the previous draw.

    Any change to the roster forgets the stored seed, so the pairs returned here
    are always the ones last shown by /draw.
    """
    if roster.last_draw_seed is None:
        raise AssignmentError("No draw for the current list. Use /draw first.")
    return draw_roster(session, roster, seed=roster.last_draw_seed, max_attempts=max_attempts, fallback=fallback)


def describe_failure(error: InfeasibleError) -> str:
    if error.reason == InfeasibleError.NO_OPTIONS:
        names = ", ".join(str(participant) for participant in error.participants)
        hint = "Fix your restrictions"
        if names:
            hint += f" (nobody left for: {names})"
        return f"{error}\n{hint}."
    if error.proven:
        return f"{error}\nRemove some restrictions and try again."
    return f"{error}\nTry again or raise MATCH_MAX_ATTEMPTS."


def format_pairs(pairs: Iterable[Pair]) -> str:
    return "\n".join(f"{giver}{PAIR_ARROW}{receiver}" for giver, receiver in pairs)


def format_restrictions(people: Iterable[Person]) -> str:
    lines = []
    for person in people:
        names = directory.restriction_names(person)
        if names:
            lines.append(f"{person.name}{RESTRICTION_ARROW}{', '.join(names)}")
        else:
            lines.append(person.name)
    return "\n".join(lines)
