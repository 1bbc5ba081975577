from __future__ import annotations

import pytest

from hgsim.core.events import EventLists, EventTemplate, EventTemplateError, calculate_tributes_involved
from hgsim.core.tags import TagRegistry


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("%0 and %2 fight", 3),
        ("no placeholders", 0),
        ("%N0 hides behind %G4 tree", 5),
        ("%0 cr%y0 and %w1 sad", 2),
        ("100%Q7 sure", 0),
    ],
)
def test_calculate_tributes_involved(message: str, expected: int) -> None:
    assert calculate_tributes_involved(message) == expected


def test_template_is_trimmed_and_counts_players() -> None:
    e = EventTemplate("  %0 kills %1.  ", [1], [0], "CUSTOM")
    assert e.message == "%0 kills %1."
    assert e.players_involved == 2
    assert e.fatalities == [1]
    assert e.killers == [0]
    assert e.type == "CUSTOM"
    assert e.enabled
    assert e.is_fatal


@pytest.mark.parametrize("message", ["", "   ", "no placeholders", "%9 is one too many"])
def test_ill_formed_templates_are_rejected(message: str) -> None:
    with pytest.raises(EventTemplateError):
        EventTemplate(message)


@pytest.mark.parametrize(
    ("fatalities", "killers"),
    [([2], []), ([], [2]), ([-1], []), ([0, 0], [])],
)
def test_slot_lists_are_bounds_checked(fatalities: list[int], killers: list[int]) -> None:
    with pytest.raises(EventTemplateError):
        EventTemplate("%0 and %1", fatalities, killers)


def test_event_ids_increase() -> None:
    a = EventTemplate("%0 a")
    b = EventTemplate("%0 b")
    assert b.id > a.id


def test_require_is_fluent_bounds_checked_and_deduplicated(registry: TagRegistry) -> None:
    tag = registry.get_or_create("armed")
    e = EventTemplate("%0 shoots %1", [1], [0])

    assert e.require(tag, 0).require(tag, 0) is e
    assert len(e.requirements) == 1
    e.require(tag, 1)
    assert [(r.tag, r.player_index) for r in e.requirements] == [(tag, 0), (tag, 1)]

    with pytest.raises(EventTemplateError) as err:
        e.require(tag, 2)
    assert "only involves 2 players" in str(err.value)


def test_event_lists_enabled_for_includes_all_and_skips_disabled() -> None:
    shared = EventTemplate("%0 thinks about home.")
    day = EventTemplate("%0 goes hunting.")
    disabled = EventTemplate("%0 naps.", enabled=False)
    lists = EventLists(day=[day, disabled], all=[shared])

    assert lists.enabled_for("day") == [shared, day]
    assert lists.enabled_for("night") == [shared]

    with pytest.raises(KeyError):
        lists.get("dusk")
