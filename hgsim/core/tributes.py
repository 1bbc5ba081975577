from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from hgsim.core.tags import Tag

if TYPE_CHECKING:
    from hgsim.core.rounds import GameRound


class TributeStateError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class NameRef:
    """A tribute's name inside a composed message.

    Kept apart from plain text so a renderer can style or escape names on their own.
    """

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TributePronouns:
    nominative: str
    accusative: str
    genitive: str
    reflexive: str


@dataclass(slots=True, eq=False)
class Tribute:
    """A participant in the games.

    Identity data (name, pronouns, number, portrait) is fixed at creation;
    `kills`, `died_in_round` and `tags` change while a game runs.
    """

    raw_name: str
    pronouns: TributePronouns | None = None
    uses_pronouns: bool = True
    plural: bool = False
    image_src: str = ""
    kills: int = 0
    died_in_round: GameRound | None = None
    tags: list[Tag] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.uses_pronouns and self.pronouns is None:
            raise ValueError(f"Tribute {self.raw_name!r} uses pronouns but none were given")
        if not self.uses_pronouns:
            self.pronouns = None
        initial = self.tags
        self.tags = []
        for t in initial:
            self.tag(t)

    def __repr__(self) -> str:
        return f"Tribute({self.raw_name!r})"

    @property
    def name(self) -> NameRef:
        return NameRef(self.raw_name)

    @property
    def is_alive(self) -> bool:
        return self.died_in_round is None

    def has(self, tag: Tag) -> bool:
        return any(t is tag for t in self.tags)

    def tag(self, tag: Tag) -> None:
        if not self.has(tag):
            self.tags.append(tag)

    def mark_dead(self, round_: GameRound) -> None:
        # died_in_round is set at most once.
        if self.died_in_round is not None:
            raise TributeStateError(
                f"Tribute {self.raw_name!r} already died in round {self.died_in_round.index}"
            )
        self.died_in_round = round_
