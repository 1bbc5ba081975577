from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass

from hgsim.core.events import EventLists, EventTemplate
from hgsim.core.rounds import GameRound, GameStage, StageClock
from hgsim.core.tributes import Tribute
from hgsim.fsm import GameFSM, GameState, RenderState, render_state_for
from hgsim.models import GameOptions, GreyscaleSettings
from hgsim.turn_processing.simulator import RoundSimulator
from hgsim.turn_processing.validators import pipeline_for_policy

logger = logging.getLogger(__name__)

DEFAULT_FATALITY_REROLL_RATE = 0.6

TITLE_THE_FALLEN = "The Fallen"
TITLE_GAMES_ENDED = "The Games Have Ended"
TITLE_DEATHS = "Deaths"
TITLE_WINNERS = "Winners"


class InternalStateError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """What one tick of the game wants rendered."""

    state: RenderState
    game_title: str
    rounds: tuple[GameRound, ...]
    tributes_died: tuple[Tribute, ...]
    tributes_alive: tuple[Tribute, ...]
    greyscale_settings: GreyscaleSettings

    @property
    def deaths(self) -> int:
        return len(self.tributes_died)

    @property
    def has_alive(self) -> bool:
        return len(self.tributes_alive) > 0

    @property
    def has_deaths(self) -> bool:
        return self.deaths > 0

    @property
    def round(self) -> GameRound | None:
        return self.rounds[-1] if self.rounds else None

    def is_any(self, *states: RenderState) -> bool:
        return self.state in states


@dataclass(frozen=True, slots=True)
class TickResult:
    """Result of `Game.advance()`: a snapshot, or the error that killed the game."""

    snapshot: GameSnapshot | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> GameSnapshot:
        if self.error is not None:
            raise self.error
        assert self.snapshot is not None
        return self.snapshot


class Game:
    """A running game.

    Each `advance()` performs exactly one state-machine step and returns a
    snapshot describing what to show for it.
    """

    def __init__(
        self,
        tributes: Sequence[Tribute],
        events: EventLists,
        fatality_reroll_rate: float = DEFAULT_FATALITY_REROLL_RATE,
        *,
        options: GameOptions | None = None,
        rng: random.Random | None = None,
    ) -> None:
        opts = options or GameOptions()

        # Our own copies; callers keep theirs.
        self.tributes: list[Tribute] = list(tributes)
        # Tributes that already died (e.g. reused from an earlier game) never get a turn.
        self.tributes_alive: list[Tribute] = [t for t in tributes if t.is_alive]
        self._tributes_died: list[Tribute] = []

        self.fatality_reroll_rate = fatality_reroll_rate
        self.required_fatalities = opts.required_fatalities_target(len(self.tributes))
        self.greyscale_settings = opts.greyscale_settings
        self.rng = rng or random.SystemRandom()

        self.clock = StageClock.starting_at(opts.starting_day)
        self.rounds: list[GameRound] = []
        self.all_won = False
        self.game_title = ""

        self.event_pools: dict[GameStage, list[EventTemplate]] = {
            stage: events.enabled_for(stage.value) for stage in GameStage
        }
        self._simulator = RoundSimulator(
            pools=self.event_pools,
            pipeline=pipeline_for_policy(
                required_fatalities=self.required_fatalities,
                fatality_reroll_rate=fatality_reroll_rate,
            ),
            rng=self.rng,
        )

        self.state = GameState.NEW_ROUND
        self._fsm = GameFSM(self)

    @property
    def stage(self) -> GameStage:
        return self.clock.stage

    @property
    def days_passed(self) -> int:
        return self.clock.days_passed

    @property
    def nights_passed(self) -> int:
        return self.clock.nights_passed

    @property
    def last_feast(self) -> int:
        return self.clock.last_feast

    @property
    def last_round(self) -> GameRound | None:
        return self.rounds[-1] if self.rounds else None

    @property
    def tributes_died(self) -> tuple[Tribute, ...]:
        """Tributes that died since the last time deaths were shown."""

        return tuple(self._tributes_died)

    def declare_all_winners(self) -> None:
        """End the game after the next round with every living tribute as a winner."""

        self.all_won = True

    def advance(self) -> TickResult:
        """Step the game once. Never raises; a failure is returned and is permanent."""

        try:
            return TickResult(snapshot=self._advance())
        except Exception as e:
            if not self._fsm.current_state.final:
                self._fsm.fail()
            self._fsm.sync_state_to_model()
            logger.error("Game failed; state is now %s: %s", self.state.value, e)
            return TickResult(error=e)

    def _advance(self) -> GameSnapshot:
        pre_state = self._fsm.game_state
        render_state = render_state_for(pre_state)

        if pre_state == GameState.NEW_ROUND:
            self._tributes_died = []
            self._play_round()
        elif pre_state == GameState.IN_ROUND:
            self._play_round()
        elif pre_state == GameState.THE_FALLEN:
            self.game_title = TITLE_THE_FALLEN
            self._fsm.fallen_shown()
        elif pre_state == GameState.END_RESULTS:
            self.game_title = TITLE_THE_FALLEN
            self._fsm.results_shown()
        elif pre_state == GameState.END_WINNER:
            self.game_title = TITLE_GAMES_ENDED
            self._fsm.winners_shown()
        elif pre_state == GameState.END_SUMMARY_FATALITIES:
            self.game_title = TITLE_DEATHS
            self._fsm.deaths_shown()
        elif pre_state == GameState.END_SUMMARY_STATS:
            self.game_title = TITLE_WINNERS if self.tributes_alive else TITLE_THE_FALLEN
            self._fsm.stats_shown()
        elif pre_state == GameState.END:
            pass
        else:
            raise InternalStateError(f"An internal error has occurred; Game.state was {pre_state.value}")

        self._fsm.sync_state_to_model()
        logger.debug("Tick: %s -> %s", pre_state.value, self.state.value)

        if self.state == GameState.END_RESULTS:
            # The end-of-game recap covers every death, not only the ones since the last fallen screen.
            died = tuple(t for t in self.tributes if t.died_in_round is not None and t.died_in_round in self.rounds)
        else:
            died = tuple(self._tributes_died)

        return GameSnapshot(
            state=render_state,
            game_title=self.game_title,
            rounds=tuple(self.rounds),
            tributes_died=died,
            tributes_alive=tuple(self.tributes_alive),
            greyscale_settings=self.greyscale_settings,
        )

    def _should_end(self) -> bool:
        return len(self.tributes_alive) < 2 or self.all_won

    def _play_round(self) -> None:
        stage = self.clock.advance(rounds_played=len(self.rounds), rng=self.rng)
        self.game_title = self.clock.title

        round_ = GameRound(stage=stage, index=len(self.rounds))
        self.rounds.append(round_)

        try:
            self.tributes_alive = self._simulator.run(round_=round_, alive=self.tributes_alive)
        except Exception as e:
            raise InternalStateError(f"Round {round_.index} ({stage.value}) failed: {e}") from e
        self._tributes_died.extend(round_.died_this_round)

        if self._should_end():
            logger.info(
                "Game over after %d round(s); winners: %s",
                len(self.rounds),
                ", ".join(t.raw_name for t in self.tributes_alive) or "none",
            )
            self._fsm.game_ended()
        elif stage == GameStage.NIGHT:
            self._fsm.night_ended()
        else:
            self._fsm.round_played()
