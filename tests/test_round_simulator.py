from __future__ import annotations

import logging
import random
from collections.abc import Callable

import pytest

from hgsim.core.events import EventTemplate
from hgsim.core.rounds import GameRound, GameStage
from hgsim.core.tags import TagRegistry
from hgsim.core.tributes import Tribute
from hgsim.turn_processing.simulator import RoundSimulator, draw_budget
from hgsim.turn_processing.validators import pipeline_for_policy


def _simulator(
    pool: list[EventTemplate],
    rng: random.Random,
    *,
    required: int | None = None,
    reroll_rate: float = 0.0,
) -> RoundSimulator:
    return RoundSimulator(
        pools={GameStage.DAY: pool},
        pipeline=pipeline_for_policy(required_fatalities=required, fatality_reroll_rate=reroll_rate),
        rng=rng,
    )


def _kill() -> EventTemplate:
    return EventTemplate("%0 kills %1.", [1], [0])


def _rest() -> EventTemplate:
    return EventTemplate("%0 rests.")


def test_draw_budget() -> None:
    assert draw_budget(0) == 100
    assert draw_budget(3) == 100
    assert draw_budget(25) == 250


def test_quota_forces_exact_number_of_deaths(roster: Callable[[int], list[Tribute]], rng: random.Random) -> None:
    tributes = roster(6)
    alive = list(tributes)
    round_ = GameRound(stage=GameStage.DAY, index=1)

    survivors = _simulator([_kill(), _rest()], rng, required=2).run(round_=round_, alive=alive)

    assert len(round_.died_this_round) == 2
    assert len(survivors) == 4
    assert all(t.died_in_round is round_ for t in round_.died_this_round)
    assert sum(t.kills for t in tributes) == 2

    involved = [t for ev in round_.game_events for t in ev.players_involved]
    assert len(involved) == 6
    assert {id(t) for t in involved} == {id(t) for t in tributes}


def test_rerolled_fatal_events_truncate_the_round(
    roster: Callable[[int], list[Tribute]], rng: random.Random, caplog: pytest.LogCaptureFixture
) -> None:
    alive = roster(4)
    round_ = GameRound(stage=GameStage.DAY, index=0)

    with caplog.at_level(logging.WARNING, logger="hgsim.turn_processing.simulator"):
        survivors = _simulator([_kill()], rng, reroll_rate=1.0).run(round_=round_, alive=alive)

    assert round_.game_events == []
    assert round_.died_this_round == []
    assert len(survivors) == 4
    assert "no eligible event" in caplog.text


def test_round_stops_when_one_tribute_is_left(roster: Callable[[int], list[Tribute]], rng: random.Random) -> None:
    alive = roster(3)
    round_ = GameRound(stage=GameStage.DAY, index=0)
    massacre = EventTemplate("%0 blows up %1 and %2.", [1, 2], [0])

    survivors = _simulator([massacre], rng).run(round_=round_, alive=alive)

    assert len(survivors) == 1
    assert len(round_.game_events) == 1
    assert survivors[0].kills == 2


def test_tag_requirements_gate_events(
    roster: Callable[[int], list[Tribute]], registry: TagRegistry, rng: random.Random
) -> None:
    archer = registry.get_or_create("archer")
    tributes = roster(5)
    tributes[2].tag(archer)
    shoot = EventTemplate("%0 practices archery.").require(archer, 0)

    for index in range(10):
        round_ = GameRound(stage=GameStage.DAY, index=index)
        _simulator([shoot, _rest()], rng).run(round_=round_, alive=list(tributes))
        for ev in round_.game_events:
            if ev.event is shoot:
                assert ev.players_involved[0] is tributes[2]


def test_empty_pool_returns_everyone(roster: Callable[[int], list[Tribute]], rng: random.Random) -> None:
    alive = roster(3)
    round_ = GameRound(stage=GameStage.NIGHT, index=2)

    survivors = _simulator([_rest()], rng).run(round_=round_, alive=alive)

    assert sorted(t.raw_name for t in survivors) == ["T0", "T1", "T2"]
    assert survivors is not alive
    assert round_.game_events == []
