import pytest

from santa_sorter.services import directory
from santa_sorter.services.participants import Participant


def make_roster(session, chat_id=1):
    return directory.get_roster(session, chat_id, "Family")


def test_create_or_get_is_case_insensitive(session):
    roster = make_roster(session)
    alice = directory.create_or_get(session, roster, "  Alice ")
    again = directory.create_or_get(session, roster, "ALICE")
    assert alice is again
    assert alice.name == "Alice"
    assert directory.count_people(session, roster) == 1
    assert directory.person_exists(session, roster, "alice")
    assert not directory.person_exists(session, roster, "Bob")


def test_blank_name_rejected(session):
    roster = make_roster(session)
    with pytest.raises(ValueError):
        directory.create_or_get(session, roster, "   ")


def test_rosters_are_isolated(session):
    first = make_roster(session, chat_id=1)
    second = make_roster(session, chat_id=2)
    directory.create_or_get(session, first, "Alice")
    assert directory.count_people(session, second) == 0
    assert directory.get_roster(session, 1) is first


def test_all_names_sorted_case_insensitive(session):
    roster = make_roster(session)
    for name in ["bob", "Carol", "alice"]:
        directory.create_or_get(session, roster, name)
    assert directory.all_names(session, roster) == ["alice", "bob", "Carol"]
    assert [person.name for person in directory.list_people(session, roster)] == ["bob", "Carol", "alice"]


def test_add_restriction_guards_self_and_duplicates(session):
    roster = make_roster(session)
    alice = directory.create_or_get(session, roster, "Alice")
    bob = directory.create_or_get(session, roster, "Bob")
    assert not directory.add_restriction(session, alice, alice)
    assert directory.add_restriction(session, alice, bob)
    assert not directory.add_restriction(session, alice, bob)
    assert directory.restriction_names(alice) == ["Bob"]
    assert directory.restriction_names(bob) == []


def test_add_restriction_by_name_creates_people(session):
    roster = make_roster(session)
    assert directory.add_restriction_by_name(session, roster, "alice", "bob")
    assert directory.count_people(session, roster) == 2


def test_add_mutual_restriction(session):
    roster = make_roster(session)
    assert directory.add_mutual_restriction_by_name(session, roster, "Alice", "Bob")
    alice = directory.get_person(session, roster, "alice")
    bob = directory.get_person(session, roster, "bob")
    assert directory.restriction_names(alice) == ["Bob"]
    assert directory.restriction_names(bob) == ["Alice"]
    assert not directory.add_mutual_restriction(session, alice, bob)


def test_add_mutual_rolls_back_partial_change(session):
    roster = make_roster(session)
    alice = directory.create_or_get(session, roster, "Alice")
    bob = directory.create_or_get(session, roster, "Bob")
    directory.add_restriction(session, bob, alice)

    assert not directory.add_mutual_restriction(session, alice, bob)
    assert directory.restriction_names(alice) == []
    assert directory.restriction_names(bob) == ["Alice"]


def test_remove_restrictions(session):
    roster = make_roster(session)
    directory.add_mutual_restriction_by_name(session, roster, "Alice", "Bob")

    assert directory.remove_restriction_by_name(session, roster, "alice", "bob")
    assert not directory.remove_restriction_by_name(session, roster, "alice", "bob")
    assert directory.remove_mutual_restriction_by_name(session, roster, "Alice", "Bob")
    assert not directory.remove_mutual_restriction_by_name(session, roster, "Alice", "Bob")
    assert not directory.remove_mutual_restriction_by_name(session, roster, "Alice", "Zed")


def test_remove_person_scrubs_incoming_restrictions(session):
    roster = make_roster(session)
    directory.add_restriction_by_name(session, roster, "Bob", "Alice")
    directory.add_restriction_by_name(session, roster, "Carol", "Alice")
    directory.add_restriction_by_name(session, roster, "Alice", "Carol")

    result = directory.remove_person_by_name(session, roster, "ALICE")

    assert result.removed
    assert result.scrubbed == 2
    assert not directory.person_exists(session, roster, "Alice")
    assert directory.restriction_names(directory.get_person(session, roster, "Bob")) == []
    assert directory.restriction_names(directory.get_person(session, roster, "Carol")) == []


def test_remove_person_drops_outgoing_restrictions(session):
    roster = make_roster(session)
    directory.add_restriction_by_name(session, roster, "Alice", "Carol")
    carol = directory.get_person(session, roster, "Carol")
    assert [person.name for person in carol.restricted_by] == ["Alice"]

    directory.remove_person_by_name(session, roster, "Alice")

    assert carol.restricted_by == []
    assert directory.clear_all_restriction_links(session, carol) == (0, 0)


def test_remove_unknown_person(session):
    roster = make_roster(session)
    result = directory.remove_person_by_name(session, roster, "Nobody")
    assert not result.removed
    assert result.scrubbed == 0


def test_clear_restriction_links(session):
    roster = make_roster(session)
    directory.add_restriction_by_name(session, roster, "Alice", "Bob")
    directory.add_restriction_by_name(session, roster, "Alice", "Carol")
    directory.add_restriction_by_name(session, roster, "Bob", "Alice")
    alice = directory.get_person(session, roster, "Alice")

    assert directory.clear_restrictions(session, alice) == 2
    assert directory.clear_restrictions(session, alice) == 0
    directory.add_restriction(session, alice, directory.get_person(session, roster, "Carol"))

    assert directory.clear_all_restriction_links(session, alice) == (1, 1)
    assert directory.restriction_names(directory.get_person(session, roster, "Bob")) == []
    assert directory.clear_all_restriction_links(session, None) == (0, 0)


def test_clear_roster(session):
    roster = make_roster(session)
    directory.add_mutual_restriction_by_name(session, roster, "Alice", "Bob")
    directory.create_or_get(session, roster, "Carol")

    assert directory.clear_roster(session, roster) == 3
    assert directory.count_people(session, roster) == 0


def test_snapshot_copies_roster(session):
    roster = make_roster(session)
    directory.add_restriction_by_name(session, roster, "Alice", "Bob")
    directory.create_or_get(session, roster, "Carol")

    participants, forbidden = directory.snapshot(session, roster)

    alice, bob, carol = (Participant.from_name(name) for name in ("alice", "bob", "carol"))
    assert participants == [alice, bob, carol]
    assert [participant.name for participant in participants] == ["Alice", "Bob", "Carol"]
    assert forbidden == {alice: frozenset({bob}), bob: frozenset(), carol: frozenset()}


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Alice, Bob", ("Alice", "Bob")),
        ("  Mary Ann ,Bob Jr ", ("Mary Ann", "Bob Jr")),
        ("Alice > Bob", ("Alice", "Bob")),
    ],
)
def test_parse_name_pair(text, expected):
    assert directory.parse_name_pair(text) == expected


@pytest.mark.parametrize("text", [None, "", "Alice Bob", "Alice,", ", Bob", "alice, ALICE"])
def test_parse_name_pair_rejects_bad_input(text):
    with pytest.raises(ValueError):
        directory.parse_name_pair(text)
