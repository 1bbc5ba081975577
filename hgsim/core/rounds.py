from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from hgsim.core.events import EventTemplate
from hgsim.core.messages import MessageSegment, compose_message
from hgsim.core.tributes import Tribute

logger = logging.getLogger(__name__)

# A feast may replace a day once this many rounds have passed since the last one.
FEAST_MIN_ROUNDS = 5


class GameStage(StrEnum):
    """Stages of the games; each one has its own event pool."""

    BLOODBATH = "bloodbath"
    DAY = "day"
    NIGHT = "night"
    FEAST = "feast"


@dataclass(frozen=True, slots=True)
class GameEvent:
    """An event template bound to the tributes that took part in it."""

    event: EventTemplate
    players_involved: tuple[Tribute, ...]
    message: tuple[MessageSegment, ...]

    @staticmethod
    def bind(event: EventTemplate, tributes: Sequence[Tribute]) -> "GameEvent":
        if len(tributes) != event.players_involved:
            raise ValueError(
                f"Event '{event.message}' involves {event.players_involved} tributes, got {len(tributes)}"
            )
        players = tuple(tributes)
        return GameEvent(event=event, players_involved=players, message=tuple(compose_message(event.message, players)))


@dataclass(slots=True, eq=False)
class GameRound:
    stage: GameStage
    index: int
    game_events: list[GameEvent] = field(default_factory=list)
    died_this_round: list[Tribute] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"GameRound(index={self.index}, stage={self.stage.value})"


def feast_probability(rounds_since_feast: int) -> float:
    """Chance that a feast replaces the day after a night.

    5 rounds: 25%, 6 rounds: 33% per extra round, 7+: 50% per extra round (capped by certainty).
    """

    if rounds_since_feast < FEAST_MIN_ROUNDS:
        return 0.0
    extra = rounds_since_feast - (FEAST_MIN_ROUNDS - 1)
    if rounds_since_feast >= 7:
        return 0.50 * extra
    if rounds_since_feast >= 6:
        return 0.33 * extra
    return 0.25 * extra


@dataclass(slots=True)
class StageClock:
    """Tracks the current stage and the day/night/feast counters of a game."""

    stage: GameStage = GameStage.BLOODBATH
    days_passed: int = 0
    nights_passed: int = 0
    last_feast: int = 0

    @staticmethod
    def starting_at(starting_day: int | float | None) -> "StageClock":
        clock = StageClock()
        if starting_day is not None:
            offset = max(0, math.floor(starting_day - 1))
            clock.days_passed = clock.nights_passed = offset
        return clock

    def advance(self, *, rounds_played: int, rng: random.Random) -> GameStage:
        """Move to the stage of the next round and return it."""

        self.stage = self._next_stage(rounds_played=rounds_played, rng=rng)
        return self.stage

    def _next_stage(self, *, rounds_played: int, rng: random.Random) -> GameStage:
        if rounds_played == 0:
            return GameStage.BLOODBATH

        if self.stage in (GameStage.FEAST, GameStage.BLOODBATH):
            self.days_passed += 1
            return GameStage.DAY

        if self.stage == GameStage.NIGHT:
            rounds_since_feast = rounds_played - self.last_feast
            if rounds_since_feast >= FEAST_MIN_ROUNDS and rng.random() <= feast_probability(rounds_since_feast):
                self.last_feast = rounds_played
                logger.info("Feast triggered after %d rounds", rounds_since_feast)
                return GameStage.FEAST

            self.days_passed += 1
            return GameStage.DAY

        self.nights_passed += 1
        return GameStage.NIGHT

    @property
    def title(self) -> str:
        if self.stage == GameStage.DAY:
            return f"Day {self.days_passed}"
        if self.stage == GameStage.NIGHT:
            return f"Night {self.nights_passed}"
        return self.stage.value.title()
