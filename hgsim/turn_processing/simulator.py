from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence

from hgsim.core.events import EventTemplate
from hgsim.core.rounds import GameEvent, GameRound, GameStage
from hgsim.core.tributes import Tribute
from hgsim.turn_processing.validators import SelectionContext, ValidatorPipeline

logger = logging.getLogger(__name__)

MIN_DRAW_ATTEMPTS = 100


def draw_budget(pool_size: int) -> int:
    return max(MIN_DRAW_ATTEMPTS, pool_size * 10)


class RoundSimulator:
    """Plays out one round: pairs the living tributes into events from the stage's pool.

    The roster is shuffled and walked left to right; each accepted event consumes
    the next `players_involved` tributes.
    """

    def __init__(
        self,
        *,
        pools: Mapping[GameStage, Sequence[EventTemplate]],
        pipeline: ValidatorPipeline,
        rng: random.Random,
    ) -> None:
        self.pools = pools
        self.pipeline = pipeline
        self.rng = rng

    def _draw(self, *, pool: Sequence[EventTemplate], ctx: SelectionContext) -> EventTemplate | None:
        for _ in range(draw_budget(len(pool))):
            event = pool[self.rng.randrange(len(pool))]
            if self.pipeline.accepts(ctx=ctx, event=event, rng=self.rng):
                return event
        return None

    def run(self, *, round_: GameRound, alive: list[Tribute]) -> list[Tribute]:
        """Simulate `round_` for the tributes in `alive`.

        `alive` is shuffled in place. Returns the tributes still alive afterwards.
        """

        self.rng.shuffle(alive)

        pool = self.pools.get(round_.stage, ())
        if not pool:
            logger.debug("Round %d (%s): empty event pool", round_.index, round_.stage.value)
            return list(alive)

        tributes_left = len(alive)
        living = len(alive)
        current = 0
        died_this_round = 0

        while tributes_left > 0:
            ctx = SelectionContext(
                roster=alive,
                window_start=current,
                tributes_left=tributes_left,
                died_this_round=died_this_round,
            )
            event = self._draw(pool=pool, ctx=ctx)
            if event is None:
                # Not an error: the rest of the roster simply doesn't act this round.
                logger.warning(
                    "Round %d (%s): no eligible event after %d draws; %d tribute(s) skipped",
                    round_.index,
                    round_.stage.value,
                    draw_budget(len(pool)),
                    tributes_left,
                )
                break

            for f in event.fatalities:
                victim = alive[current + f]
                victim.mark_dead(round_)
                round_.died_this_round.append(victim)
                living -= 1
                died_this_round += 1

            for k in event.killers:
                alive[current + k].kills += len(event.fatalities)

            involved = alive[current : current + event.players_involved]
            round_.game_events.append(GameEvent.bind(event, involved))
            current += event.players_involved
            tributes_left -= event.players_involved

            # One survivor left (or none): nothing more to pair up.
            if living < 2:
                break

        # Quota-forced deaths are drawn first; shuffle so they don't all display at the top.
        self.rng.shuffle(round_.game_events)

        logger.debug(
            "Round %d (%s): %d event(s), %d death(s)",
            round_.index,
            round_.stage.value,
            len(round_.game_events),
            len(round_.died_this_round),
        )
        return [t for t in alive if t.is_alive]
