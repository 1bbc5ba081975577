from __future__ import annotations

from collections.abc import Callable

from hgsim.core.events import EventTemplate
from hgsim.core.rounds import GameEvent, GameRound, GameStage
from hgsim.core.tributes import Tribute
from hgsim.fsm import RenderState
from hgsim.game import GameSnapshot
from hgsim.models import GreyscaleSettings
from hgsim.snapshot_text import snapshot_to_text


def _snapshot(
    state: RenderState,
    title: str,
    rounds: list[GameRound],
    died: list[Tribute],
    alive: list[Tribute],
) -> GameSnapshot:
    return GameSnapshot(
        state=state,
        game_title=title,
        rounds=tuple(rounds),
        tributes_died=tuple(died),
        tributes_alive=tuple(alive),
        greyscale_settings=GreyscaleSettings(),
    )


def _played_round(make_tribute: Callable[..., Tribute]) -> tuple[GameRound, Tribute, Tribute]:
    alice, bob = make_tribute("Alice"), make_tribute("Bob")
    round_ = GameRound(stage=GameStage.BLOODBATH, index=0)
    kill = EventTemplate("%0 kills %1.", [1], [0])
    bob.mark_dead(round_)
    alice.kills = 1
    round_.died_this_round.append(bob)
    round_.game_events.append(GameEvent.bind(kill, [alice, bob]))
    return round_, alice, bob


def test_round_events_and_deaths(make_tribute: Callable[..., Tribute]) -> None:
    round_, alice, bob = _played_round(make_tribute)

    events = snapshot_to_text(_snapshot(RenderState.ROUND_EVENTS, "Bloodbath", [round_], [bob], [alice]))
    assert events == "== Bloodbath ==\n- Alice kills Bob."

    deaths = snapshot_to_text(_snapshot(RenderState.ROUND_DEATHS, "The Fallen", [round_], [bob], [alice]))
    assert deaths == "== The Fallen ==\n1 cannon shot can be heard in the distance.\n- Bob"

    quiet = snapshot_to_text(_snapshot(RenderState.ROUND_DEATHS, "The Fallen", [round_], [], [alice]))
    assert quiet == "== The Fallen ==\nNo cannon shots can be heard in the distance."


def test_end_screens(make_tribute: Callable[..., Tribute]) -> None:
    round_, alice, bob = _played_round(make_tribute)

    assert snapshot_to_text(_snapshot(RenderState.WINNERS, "The Games Have Ended", [round_], [], [alice])) == (
        "== The Games Have Ended ==\nThe winner is Alice!"
    )
    assert snapshot_to_text(_snapshot(RenderState.GAME_DEATHS, "Deaths", [round_], [bob], [alice])) == (
        "== Deaths ==\nRound 1 (bloodbath): Bob"
    )
    assert snapshot_to_text(_snapshot(RenderState.STATS, "Winners", [round_], [], [alice])) == (
        "== Winners ==\n- Alice: 1 kill, alive\n- Bob: 0 kills, died in round 1"
    )
    assert snapshot_to_text(_snapshot(RenderState.GAME_OVER, "Winners", [round_], [], [alice])) == ""


def test_no_survivors_and_no_deaths(make_tribute: Callable[..., Tribute]) -> None:
    a, b = make_tribute("A"), make_tribute("B")
    empty_round = GameRound(stage=GameStage.DAY, index=0)

    assert "There are no survivors." in snapshot_to_text(_snapshot(RenderState.WINNERS, "", [], [], []))
    assert snapshot_to_text(_snapshot(RenderState.WINNERS, "x", [], [], [a, b])).endswith("The winners are A, B!")
    assert snapshot_to_text(_snapshot(RenderState.GAME_DEATHS, "Deaths", [empty_round], [], [a, b])).endswith(
        "No one died."
    )
    assert snapshot_to_text(_snapshot(RenderState.ROUND_EVENTS, "Day 1", [empty_round], [], [a, b])).endswith(
        "Nothing happened."
    )
