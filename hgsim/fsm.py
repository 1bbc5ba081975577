from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from statemachine import State, StateMachine

if TYPE_CHECKING:
    from hgsim.game import Game


class GameState(StrEnum):
    NEW_ROUND = "NEW_ROUND"
    IN_ROUND = "IN_ROUND"
    THE_FALLEN = "THE_FALLEN"
    END_RESULTS = "END_RESULTS"
    END_WINNER = "END_WINNER"
    END_SUMMARY_FATALITIES = "END_SUMMARY_FATALITIES"
    END_SUMMARY_STATS = "END_SUMMARY_STATS"
    END = "END"
    DEAD = "DEAD"


class RenderState(StrEnum):
    """What a snapshot asks the renderer to show."""

    GAME_OVER = "GAME_OVER"
    ROUND_EVENTS = "ROUND_EVENTS"
    ROUND_DEATHS = "ROUND_DEATHS"
    WINNERS = "WINNERS"
    GAME_DEATHS = "GAME_DEATHS"
    STATS = "STATS"


# Display kind of a tick, keyed by the state *before* the tick runs.
RENDER_STATE_BY_STATE: dict[GameState, RenderState] = {
    GameState.NEW_ROUND: RenderState.ROUND_EVENTS,
    GameState.IN_ROUND: RenderState.ROUND_EVENTS,
    GameState.THE_FALLEN: RenderState.ROUND_DEATHS,
    GameState.END_RESULTS: RenderState.ROUND_DEATHS,
    GameState.END_WINNER: RenderState.WINNERS,
    GameState.END_SUMMARY_FATALITIES: RenderState.GAME_DEATHS,
    GameState.END_SUMMARY_STATS: RenderState.STATS,
    GameState.END: RenderState.GAME_OVER,
    GameState.DEAD: RenderState.GAME_OVER,
}


def render_state_for(state: GameState | str) -> RenderState:
    try:
        return RENDER_STATE_BY_STATE[GameState(state)]
    except ValueError:
        return RenderState.GAME_OVER


class GameFSM(StateMachine):
    """FSM wrapper around a Game.

    - rounds: new round -> in round (repeated) -> the fallen -> new round ...
    - end: end results -> winner -> fatalities summary -> stats -> end
    - any live state may fail into dead.

    Round simulation is done by the Game; the FSM only guards transitions.
    """

    new_round = State(GameState.NEW_ROUND.value, value=GameState.NEW_ROUND.value, initial=True)
    in_round = State(GameState.IN_ROUND.value, value=GameState.IN_ROUND.value)
    the_fallen = State(GameState.THE_FALLEN.value, value=GameState.THE_FALLEN.value)
    end_results = State(GameState.END_RESULTS.value, value=GameState.END_RESULTS.value)
    end_winner = State(GameState.END_WINNER.value, value=GameState.END_WINNER.value)
    end_summary_fatalities = State(
        GameState.END_SUMMARY_FATALITIES.value,
        value=GameState.END_SUMMARY_FATALITIES.value,
    )
    end_summary_stats = State(GameState.END_SUMMARY_STATS.value, value=GameState.END_SUMMARY_STATS.value)
    end = State(GameState.END.value, value=GameState.END.value, final=True)
    dead = State(GameState.DEAD.value, value=GameState.DEAD.value, final=True)

    round_played = new_round.to(in_round) | in_round.to(in_round)
    night_ended = new_round.to(the_fallen) | in_round.to(the_fallen)
    game_ended = new_round.to(end_results) | in_round.to(end_results)
    fallen_shown = the_fallen.to(new_round)
    results_shown = end_results.to(end_winner)
    winners_shown = end_winner.to(end_summary_fatalities)
    deaths_shown = end_summary_fatalities.to(end_summary_stats)
    stats_shown = end_summary_stats.to(end)
    fail = (
        new_round.to(dead)
        | in_round.to(dead)
        | the_fallen.to(dead)
        | end_results.to(dead)
        | end_winner.to(dead)
        | end_summary_fatalities.to(dead)
        | end_summary_stats.to(dead)
    )

    def __init__(self, game: Game):
        self.game = game
        super().__init__()

    @property
    def game_state(self) -> GameState:
        return GameState(str(self.current_state.value))

    def sync_state_to_model(self) -> None:
        self.game.state = self.game_state
