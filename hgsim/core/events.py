from __future__ import annotations

import itertools
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Self

from hgsim.core.tags import Tag

MIN_PLAYERS = 1
MAX_PLAYERS = 9

# Any placeholder that refers to a tribute slot: %0, %N1, %s2, %!3 ...
_PLACEHOLDER_RE = re.compile(r"%[NAGRsyihe!w]?([0-9])")

_event_ids = itertools.count()


class EventTemplateError(ValueError):
    pass


def calculate_tributes_involved(message: str) -> int:
    """Number of tributes a template needs: 1 + the highest slot it references (0 if none)."""

    slots = [int(m.group(1)) for m in _PLACEHOLDER_RE.finditer(message)]
    if not slots:
        return 0
    return max(slots) + 1


@dataclass(frozen=True, slots=True)
class TagRequirement:
    tag: Tag
    player_index: int


class EventTemplate:
    """An entry in an event pool (for an event that happened in a game, see `GameEvent`)."""

    __slots__ = ("message", "players_involved", "fatalities", "killers", "enabled", "type", "requirements", "id")

    def __init__(
        self,
        message: str,
        fatalities: Iterable[int] = (),
        killers: Iterable[int] = (),
        type: str = "BUILTIN",
        *,
        enabled: bool = True,
    ) -> None:
        self.message = message.strip()
        if not self.message:
            raise EventTemplateError("Event message cannot be empty!")

        self.players_involved = calculate_tributes_involved(self.message)
        if not MIN_PLAYERS <= self.players_involved <= MAX_PLAYERS:
            raise EventTemplateError(
                f"Event '{self.message}' is ill-formed since it would involve '{self.players_involved}' players "
                f"(must be between {MIN_PLAYERS} and {MAX_PLAYERS})!"
            )

        self.fatalities = list(fatalities)
        self.killers = list(killers)
        self._check_slots("Deaths", self.fatalities)
        self._check_slots("Killers", self.killers)
        if len(set(self.fatalities)) != len(self.fatalities):
            raise EventTemplateError(f"Deaths '{self.fatalities}' are invalid: a tribute can only die once!")

        self.enabled = enabled
        self.type = type
        self.requirements: list[TagRequirement] = []
        self.id = next(_event_ids)

    def __repr__(self) -> str:
        return f"EventTemplate(id={self.id}, message={self.message!r})"

    def _check_slots(self, label: str, slots: list[int]) -> None:
        for s in slots:
            if not 0 <= s < self.players_involved:
                raise EventTemplateError(
                    f"{label} '{slots}' are invalid: the event only involves {self.players_involved} players!"
                )

    @property
    def is_fatal(self) -> bool:
        return bool(self.fatalities)

    def require(self, tag: Tag, player_index: int) -> Self:
        """Only allow this event if the tribute in slot `player_index` has `tag`."""

        if not 0 <= player_index < self.players_involved:
            raise EventTemplateError(
                f"Cannot add requirement for player {player_index} since the event only involves "
                f"{self.players_involved} players"
            )

        req = TagRequirement(tag=tag, player_index=player_index)
        if not any(r.tag is tag and r.player_index == player_index for r in self.requirements):
            self.requirements.append(req)
        return self


@dataclass(slots=True)
class EventLists:
    """Event templates per stage; `all` applies to every stage."""

    bloodbath: list[EventTemplate] = field(default_factory=list)
    day: list[EventTemplate] = field(default_factory=list)
    night: list[EventTemplate] = field(default_factory=list)
    feast: list[EventTemplate] = field(default_factory=list)
    all: list[EventTemplate] = field(default_factory=list)

    KEYS = ("bloodbath", "day", "night", "feast", "all")

    def get(self, key: str) -> list[EventTemplate]:
        if key not in self.KEYS:
            raise KeyError(key)
        return getattr(self, key)

    def items(self) -> Iterator[tuple[str, list[EventTemplate]]]:
        for key in self.KEYS:
            yield key, getattr(self, key)

    def clear(self) -> None:
        for key in self.KEYS:
            getattr(self, key).clear()

    def enabled_for(self, stage_key: str) -> list[EventTemplate]:
        """Enabled events usable in a stage (shared `all` events first)."""

        return [e for e in [*self.all, *self.get(stage_key)] if e.enabled]
