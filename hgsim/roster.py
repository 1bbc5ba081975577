from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from hgsim.core.tributes import Tribute, TributePronouns
from hgsim.models import CharacterSelection, PronounSetting

# Stand-in for an escaped '//' while splitting on '/'.
_ESCAPED_SLASH = "\x1f"

PRESET_PRONOUNS: dict[PronounSetting, tuple[str, bool]] = {
    PronounSetting.masculine: ("he/him/his/himself", False),
    PronounSetting.feminine: ("she/her/her/herself", False),
    PronounSetting.common: ("they/them/their/themself", True),
}


class CharacterError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class ParsedPronouns:
    pronouns: TributePronouns | None
    uses_pronouns: bool
    plural: bool


def parse_pronouns(selection: CharacterSelection) -> ParsedPronouns:
    """Resolve a character's pronoun option to a concrete pronoun set.

    Custom pronouns are written `nom/acc/gen/reflx`; a literal slash inside a
    pronoun is escaped as `//`.
    """

    option = selection.pronoun_option
    if option == PronounSetting.none:
        return ParsedPronouns(pronouns=None, uses_pronouns=False, plural=False)

    if option in PRESET_PRONOUNS:
        raw, plural = PRESET_PRONOUNS[option]
    elif option == PronounSetting.custom:
        raw = (selection.custom_pronouns or "").replace("//", _ESCAPED_SLASH)
        plural = False
        if raw.count("/") != 3:
            raise CharacterError(
                "Custom pronouns must be of the form 'nom/acc/gen/reflx'\nExample: 'they/them/their/themself'."
            )
    else:
        raise CharacterError("Game character pronoun selection has invalid state")

    parts = [p.replace(_ESCAPED_SLASH, "/").strip() for p in raw.split("/")]
    if any(not p for p in parts):
        raise CharacterError(
            "Custom pronouns may not be empty!\n"
            "You have to specify at least one non-whitespace character for each pronoun."
        )

    nominative, accusative, genitive, reflexive = parts
    return ParsedPronouns(
        pronouns=TributePronouns(
            nominative=nominative,
            accusative=accusative,
            genitive=genitive,
            reflexive=reflexive,
        ),
        uses_pronouns=True,
        plural=plural,
    )


def make_tribute(selection: CharacterSelection) -> Tribute:
    if not selection.name:
        raise CharacterError("Character name must not be empty!")
    parsed = parse_pronouns(selection)
    return Tribute(
        raw_name=selection.name,
        pronouns=parsed.pronouns,
        uses_pronouns=parsed.uses_pronouns,
        plural=parsed.plural,
        image_src=selection.image_url or "",
    )


@dataclass(frozen=True, slots=True)
class RosterResult:
    tributes: list[Tribute] | None = None
    error: CharacterError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> list[Tribute]:
        if self.error is not None:
            raise self.error
        return self.tributes or []


def build_tributes(selections: Sequence[CharacterSelection]) -> RosterResult:
    """Turn character-select entries into in-game tributes.

    Never raises for bad input; the first invalid character is reported in the result.
    """

    try:
        return RosterResult(tributes=[make_tribute(s) for s in selections])
    except CharacterError as e:
        return RosterResult(error=e)
