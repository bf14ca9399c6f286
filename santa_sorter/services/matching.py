from __future__ import annotations

import random
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Set, TypeVar

from loguru import logger

DEFAULT_MAX_ATTEMPTS = 256

P = TypeVar("P", bound=Hashable)


class AssignmentError(RuntimeError):
    pass


class InfeasibleError(AssignmentError):
    """No assignment could be produced for the given restrictions.

    ``reason`` tells the two failure kinds apart: ``no-options`` means some giver
    has nobody left to give to, which no amount of retrying can fix, while
    ``exhausted`` means the randomized search ran out of attempts. An exhausted
    search only proves infeasibility when ``proven`` is set.
    """

    NO_OPTIONS = "no-options"
    EXHAUSTED = "exhausted"

    def __init__(
        self,
        reason: str,
        message: str,
        attempts: int = 0,
        proven: bool = False,
        participants: Iterable = (),
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.attempts = attempts
        self.proven = proven
        self.participants = tuple(participants)


def _unique_participants(participants: Iterable[P]) -> List[P]:
    people: List[P] = []
    seen: Set[P] = set()
    for person in participants:
        if person is None:
            raise ValueError("Participants must not contain None.")
        if person in seen:
            raise ValueError(f"Duplicate participant: {person!r}")
        seen.add(person)
        people.append(person)
    return people


def build_candidates(
    people: Sequence[P],
    forbidden: Optional[Mapping[P, Iterable[P]]] = None,
) -> Dict[P, List[P]]:
    forbidden = forbidden or {}
    candidates: Dict[P, List[P]] = {}
    for giver in people:
        blocked = set(forbidden.get(giver, ()))
        candidates[giver] = [receiver for receiver in people if receiver != giver and receiver not in blocked]
    return candidates


def order_givers(candidates: Mapping[P, Sequence[P]], rng: random.Random) -> List[P]:
    # Fewest options first, random tie-break so restarts explore different orders.
    tie_breaks = {giver: rng.random() for giver in candidates}
    return sorted(candidates, key=lambda giver: (len(candidates[giver]), tie_breaks[giver]))


def _search(order: Sequence[P], candidates: Mapping[P, Sequence[P]], rng: random.Random) -> Optional[Dict[P, P]]:
    used: Set[P] = set()
    assignment: Dict[P, P] = {}

    def backtrack(depth: int) -> bool:
        if depth == len(order):
            return True

        giver = order[depth]
        choices = [receiver for receiver in candidates[giver] if receiver not in used]
        rng.shuffle(choices)
        for receiver in choices:
            assignment[giver] = receiver
            used.add(receiver)
            if backtrack(depth + 1):
                return True
            used.discard(receiver)
            del assignment[giver]
        return False

    if backtrack(0):
        return assignment
    return None


def perfect_matching(
    candidates: Mapping[P, Sequence[P]],
    rng: Optional[random.Random] = None,
) -> Optional[Dict[P, P]]:
    """Find a giver -> receiver perfect matching with augmenting paths.

    Unlike the randomized search this is exhaustive: ``None`` means Hall's
    condition fails somewhere and no valid assignment exists at all.
    """
    givers = list(candidates)
    if rng is not None:
        rng.shuffle(givers)
    owner: Dict[P, P] = {}

    def augment(giver: P, visited: Set[P]) -> bool:
        for receiver in candidates[giver]:
            if receiver in visited:
                continue
            visited.add(receiver)
            if receiver not in owner or augment(owner[receiver], visited):
                owner[receiver] = giver
                return True
        return False

    for giver in givers:
        if not augment(giver, set()):
            return None
    return {giver: receiver for receiver, giver in owner.items()}


def solve(
    participants: Iterable[P],
    forbidden: Optional[Mapping[P, Iterable[P]]] = None,
    rng: Optional[random.Random] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    fallback: bool = False,
) -> Dict[P, P]:
    """Assign every participant exactly one other participant to give to.

    ``forbidden`` maps a giver to the receivers they must not draw; it is read
    but never modified. The result is ordered like ``participants``. Raises
    :class:`InfeasibleError` when no assignment is found.

    The randomized search is not exhaustive: an ``exhausted`` error after
    ``max_attempts`` restarts does not prove that no assignment exists unless
    ``fallback`` is enabled, in which case a bipartite matching either finds
    one or proves there is none.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1.")

    people = _unique_participants(participants)
    if len(people) < 2:
        return {}

    rng = rng or random.Random()
    candidates = build_candidates(people, forbidden)

    stuck = [giver for giver, receivers in candidates.items() if not receivers]
    if stuck:
        raise InfeasibleError(
            InfeasibleError.NO_OPTIONS,
            "No valid assignment: at least one participant has no permissible recipients.",
            participants=stuck,
        )

    log = logger.bind(participants=len(people), max_attempts=max_attempts)
    for attempt in range(1, max_attempts + 1):
        for receivers in candidates.values():
            rng.shuffle(receivers)
        order = order_givers(candidates, rng)
        found = _search(order, candidates, rng)
        if found is not None:
            log.debug("Assignment found on attempt {attempt}", attempt=attempt)
            return {giver: found[giver] for giver in people}

    log.debug("Randomized search exhausted")
    if fallback:
        found = perfect_matching(candidates, rng)
        if found is not None:
            log.debug("Assignment recovered by exhaustive matching")
            return {giver: found[giver] for giver in people}
        raise InfeasibleError(
            InfeasibleError.EXHAUSTED,
            "No valid assignment exists under the given restrictions.",
            attempts=max_attempts,
            proven=True,
        )

    raise InfeasibleError(
        InfeasibleError.EXHAUSTED,
        "No valid assignment found under the given restrictions after exhausting randomized attempts.",
        attempts=max_attempts,
    )
