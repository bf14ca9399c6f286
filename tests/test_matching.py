import random
from collections import Counter

import pytest

from santa_sorter.services.matching import (
    AssignmentError,
    InfeasibleError,
    build_candidates,
    order_givers,
    perfect_matching,
    solve,
)
from santa_sorter.services.participants import Participant


class NoSearchRandom(random.Random):
    def shuffle(self, x):
        raise AssertionError("search should not start")


def assert_valid(assignment, participants, forbidden=None):
    forbidden = forbidden or {}
    assert set(assignment) == set(participants)
    assert Counter(assignment.values()) == Counter(participants)
    for giver, receiver in assignment.items():
        assert giver != receiver
        assert receiver not in forbidden.get(giver, ())


def test_empty_and_single_participant_give_empty_assignment():
    assert solve([]) == {}
    assert solve(["alice"]) == {}


def test_two_people_swap():
    assert solve(["A", "B"], rng=random.Random(1)) == {"A": "B", "B": "A"}


def test_bijection_without_restrictions():
    participants = [1, 2, 3, 4, 5, 6]
    assignment = solve(participants, rng=random.Random(77))
    assert_valid(assignment, participants)


def test_result_follows_participant_order():
    participants = ["d", "b", "a", "c"]
    assignment = solve(participants, rng=random.Random(3))
    assert list(assignment) == participants


def test_restriction_always_respected():
    forbidden = {"A": {"B"}}
    for seed in range(200):
        assignment = solve(["A", "B", "C"], forbidden, rng=random.Random(seed))
        assert assignment == {"A": "C", "B": "A", "C": "B"}


def test_couples_restrictions_respected():
    participants = ["ann", "bob", "cat", "dan", "eve", "fay", "gus", "hal"]
    forbidden = {
        "ann": {"bob"},
        "bob": {"ann"},
        "cat": {"dan"},
        "dan": {"cat", "ann"},
        "eve": {"fay"},
        "fay": {"eve"},
        "gus": {"hal", "ann", "bob"},
    }
    for seed in range(50):
        assignment = solve(participants, forbidden, rng=random.Random(seed))
        assert_valid(assignment, participants, forbidden)


def test_mutual_pair_has_no_options():
    with pytest.raises(InfeasibleError) as excinfo:
        solve(["A", "B"], {"A": {"B"}, "B": {"A"}})
    assert excinfo.value.reason == InfeasibleError.NO_OPTIONS
    assert set(excinfo.value.participants) == {"A", "B"}


def test_no_options_detected_before_search():
    forbidden = {"A": {"B", "C"}}
    with pytest.raises(InfeasibleError) as excinfo:
        solve(["A", "B", "C"], forbidden, rng=NoSearchRandom(0), max_attempts=10)
    assert excinfo.value.reason == InfeasibleError.NO_OPTIONS
    assert excinfo.value.attempts == 0
    assert excinfo.value.participants == ("A",)


def test_exhausted_after_attempt_bound():
    # Both A and B can only give to C.
    forbidden = {"A": {"B"}, "B": {"A"}}
    with pytest.raises(InfeasibleError) as excinfo:
        solve(["A", "B", "C"], forbidden, rng=random.Random(5), max_attempts=3)
    assert excinfo.value.reason == InfeasibleError.EXHAUSTED
    assert excinfo.value.attempts == 3
    assert not excinfo.value.proven


def test_exhausted_with_single_attempt():
    forbidden = {"A": {"B"}, "B": {"A"}, "C": {"D"}, "D": {"C"}}
    participants = ["A", "B", "C", "D"]
    try:
        assignment = solve(participants, forbidden, max_attempts=1)
    except InfeasibleError as exc:
        assert exc.reason == InfeasibleError.EXHAUSTED
    else:
        assert_valid(assignment, participants, forbidden)


def test_fallback_proves_infeasibility():
    forbidden = {"A": {"B"}, "B": {"A"}}
    with pytest.raises(InfeasibleError) as excinfo:
        solve(["A", "B", "C"], forbidden, rng=random.Random(5), max_attempts=1, fallback=True)
    assert excinfo.value.reason == InfeasibleError.EXHAUSTED
    assert excinfo.value.proven


def test_fallback_is_not_used_when_search_succeeds():
    participants = ["A", "B", "C", "D"]
    first = solve(participants, rng=random.Random(11), fallback=True)
    second = solve(participants, rng=random.Random(11))
    assert first == second


def test_infeasible_error_is_assignment_error():
    with pytest.raises(AssignmentError):
        solve(["A", "B"], {"A": ["B"]})


def test_randomized_across_runs():
    participants = ["A", "B", "C", "D", "E"]
    seen = {tuple(solve(participants).items()) for _ in range(100)}
    assert len(seen) > 1


def test_seed_is_deterministic():
    participants = [Participant.from_name(name) for name in ["Ann", "Bob", "Cat", "Dan", "Eve"]]
    forbidden = {participants[0]: {participants[1]}}
    first = solve(participants, forbidden, rng=random.Random(123))
    second = solve(participants, forbidden, rng=random.Random(123))
    assert first == second
    assert [receiver.name for receiver in first.values()] == [receiver.name for receiver in second.values()]


def test_participants_compare_by_normalized_name():
    alice = Participant.from_name("  Alice ")
    assert alice == Participant.from_name("ALICE")
    assert alice.name == "Alice"
    assert len({alice, Participant.from_name("alice")}) == 1
    with pytest.raises(InfeasibleError):
        solve([alice, Participant.from_name("bob")], {alice: {Participant.from_name("Bob")}})


def test_forbidden_matches_case_insensitively():
    alice, bob, cat = (Participant.from_name(name) for name in ("Alice", "Bob", "Cat"))
    forbidden = {Participant.from_name("alice"): {Participant.from_name("BOB")}}
    assignment = solve([alice, bob, cat], forbidden, rng=random.Random(2))
    assert assignment[alice] == cat


def test_duplicate_participants_rejected():
    with pytest.raises(ValueError):
        solve([Participant.from_name("Alice"), Participant.from_name("alice"), Participant.from_name("Bob")])


def test_none_participant_rejected():
    with pytest.raises(ValueError):
        solve(["A", None, "B"])


def test_attempt_bound_must_be_positive():
    with pytest.raises(ValueError):
        solve(["A", "B"], max_attempts=0)


def test_forbidden_relation_not_mutated():
    forbidden = {"A": {"B"}, "C": {"A"}}
    solve(["A", "B", "C", "D"], forbidden, rng=random.Random(4))
    assert forbidden == {"A": {"B"}, "C": {"A"}}


def test_unknown_forbidden_references_ignored():
    assignment = solve(["A", "B"], {"A": {"Z"}, "Z": {"A"}}, rng=random.Random(0))
    assert assignment == {"A": "B", "B": "A"}


def test_candidates_exclude_self_and_forbidden():
    candidates = build_candidates(["A", "B", "C"], {"A": {"C"}})
    assert candidates == {"A": ["B"], "B": ["A", "C"], "C": ["A", "B"]}


def test_givers_ordered_by_fewest_options():
    candidates = {"A": ["B", "C", "D"], "B": ["A"], "C": ["A", "B"], "D": ["A", "B", "C"]}
    for seed in range(20):
        order = order_givers(candidates, random.Random(seed))
        assert order[:2] == ["B", "C"]
        assert set(order[2:]) == {"A", "D"}


def test_tie_break_varies_order():
    candidates = {name: ["x"] for name in "ABCDEF"}
    orders = {tuple(order_givers(candidates, random.Random(seed))) for seed in range(30)}
    assert len(orders) > 1


def test_perfect_matching_finds_valid_assignment():
    candidates = {"A": ["B"], "B": ["C", "A"], "C": ["A", "B"]}
    matching = perfect_matching(candidates, random.Random(8))
    assert matching is not None
    assert matching["A"] == "B"
    assert_valid(matching, ["A", "B", "C"])


def test_perfect_matching_detects_hall_violation():
    candidates = {"A": ["C"], "B": ["C"], "C": ["A", "B"]}
    assert perfect_matching(candidates) is None


def test_participant_key_is_normalized_by_constructor():
    direct = Participant(key="  Alice ", name="Alice")
    assert direct.key == "alice"
    assert direct == Participant.from_name(" alice ")
    assert {direct: 1}[Participant.from_name("ALICE")] == 1

    with pytest.raises(ValueError):
        Participant(key="   ", name="Nobody")
