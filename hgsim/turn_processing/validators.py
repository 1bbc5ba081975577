from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from hgsim.core.events import EventTemplate
from hgsim.core.tributes import Tribute


@dataclass(frozen=True, slots=True)
class SelectionContext:
    """Where the round is when an event is drawn.

    `window_start` is the roster slot the drawn event's slot 0 maps to.
    """

    roster: Sequence[Tribute]
    window_start: int
    tributes_left: int
    died_this_round: int


class EventValidator(ABC):
    """A small, composable eligibility check for a drawn event."""

    @abstractmethod
    def accepts(self, *, ctx: SelectionContext, event: EventTemplate, rng: random.Random) -> bool:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class CapacityValidator(EventValidator):
    """An event must not involve more tributes than are left in the round."""

    def accepts(self, *, ctx: SelectionContext, event: EventTemplate, rng: random.Random) -> bool:
        return event.players_involved <= ctx.tributes_left


@dataclass(frozen=True, slots=True)
class FatalityQuotaValidator(EventValidator):
    """Drive the round towards exactly `required` deaths.

    Non-fatal events are rejected until the quota is met, fatal ones afterwards.
    """

    required: int

    def accepts(self, *, ctx: SelectionContext, event: EventTemplate, rng: random.Random) -> bool:
        if ctx.died_this_round < self.required:
            return event.is_fatal
        return not event.is_fatal


@dataclass(frozen=True, slots=True)
class FatalityRerollValidator(EventValidator):
    """Reject a fatal event with probability `rate`."""

    rate: float

    def accepts(self, *, ctx: SelectionContext, event: EventTemplate, rng: random.Random) -> bool:
        if not event.is_fatal:
            return True
        return not rng.random() < self.rate


@dataclass(frozen=True, slots=True)
class TagRequirementValidator(EventValidator):
    """Every tag requirement must hold for the tribute in the required slot."""

    def accepts(self, *, ctx: SelectionContext, event: EventTemplate, rng: random.Random) -> bool:
        for req in event.requirements:
            if not ctx.roster[ctx.window_start + req.player_index].has(req.tag):
                return False
        return True


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[EventValidator, ...]

    def accepts(self, *, ctx: SelectionContext, event: EventTemplate, rng: random.Random) -> bool:
        # Ordered; the first rejection wins so later checks can rely on earlier ones.
        for v in self.validators:
            if not v.accepts(ctx=ctx, event=event, rng=rng):
                return False
        return True


def pipeline_for_policy(*, required_fatalities: int | None, fatality_reroll_rate: float) -> ValidatorPipeline:
    """Build the eligibility pipeline for a game's fatality policy.

    A quota of `None` or 0 means "no quota": fatal events are rerolled at `fatality_reroll_rate`.
    """

    fatality_check: EventValidator
    if required_fatalities:
        fatality_check = FatalityQuotaValidator(required=required_fatalities)
    else:
        fatality_check = FatalityRerollValidator(rate=fatality_reroll_rate)

    return ValidatorPipeline(
        validators=(
            CapacityValidator(),
            fatality_check,
            TagRequirementValidator(),
        )
    )
