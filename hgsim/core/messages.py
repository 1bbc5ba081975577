from __future__ import annotations

from collections.abc import Sequence

from hgsim.core.tributes import NameRef, Tribute

DIGITS = "0123456789"

# (singular, plural) forms keyed by specifier letter.
AGREEMENT_SUFFIXES: dict[str, tuple[str, str]] = {
    "e": ("es", ""),
    "s": ("s", ""),
    "y": ("ies", "y"),
    "i": ("is", "are"),
    "h": ("has", "have"),
    "!": ("isn't", "aren't"),
    "w": ("was", "were"),
}

PRONOUN_SPECIFIERS = frozenset("NAGR")

POSSESSIVE_SUFFIX = "’s"

MessageSegment = str | NameRef


class MessageComposeError(ValueError):
    pass


def _check_bounds(template: str, index: int, involved: int) -> None:
    if index >= involved:
        plural = "s" if involved != 1 else ""
        raise MessageComposeError(
            f"Index out of bounds. Cannot substitute player '{index}' in event '{template}' "
            f"since it only involves {involved} player{plural}. "
            "Keep in mind that the first player's formatting code is '%0', not '%1'!"
        )


def _resolve_specifier(code: str, tribute: Tribute) -> str:
    if code in PRONOUN_SPECIFIERS:
        pronouns = tribute.pronouns
        if not tribute.uses_pronouns or pronouns is None:
            return tribute.raw_name + POSSESSIVE_SUFFIX if code == "G" else tribute.raw_name
        if code == "N":
            return pronouns.nominative
        if code == "A":
            return pronouns.accusative
        if code == "G":
            return pronouns.genitive
        return pronouns.reflexive

    singular, plural = AGREEMENT_SUFFIXES[code]
    return plural if tribute.plural else singular


def _append_literal(segments: list[MessageSegment], text: str) -> None:
    if text:
        segments.append(text)


def compose_message(template: str, tributes: Sequence[Tribute]) -> list[MessageSegment]:
    """Expand an event template for the given tributes.

    Returns literal text and `NameRef`s in order, e.g.
    ``compose_message("%0 kills %1.", [a, b]) == [a.name, " kills ", b.name, "."]``.

    Formatting codes (`d` is a tribute slot 0-9):
    - `%d`: the tribute's name.
    - `%Nd` / `%Ad` / `%Gd` / `%Rd`: nominative / accusative / genitive / reflexive pronoun
      (the raw name, or name + possessive for `G`, if the tribute doesn't use pronouns).
    - `%ed %sd %yd %id %hd %!d %wd`: verb agreement with the tribute's grammatical number.

    Anything else after `%` is kept as literal text.
    """

    involved = len(tributes)
    segments: list[MessageSegment] = []
    literal_start = 0
    i = 0
    n = len(template)

    while True:
        i = template.find("%", i)
        if i == -1:
            i = n
        _append_literal(segments, template[literal_start:i])
        literal_start = i
        if i >= n:
            break

        i += 1
        if i >= n:
            break

        c = template[i]
        if c in DIGITS:
            index = int(c)
            _check_bounds(template, index, involved)
            segments.append(tributes[index].name)
            i += 1
        elif c in PRONOUN_SPECIFIERS or c in AGREEMENT_SUFFIXES:
            i += 1
            if i >= n or template[i] not in DIGITS:
                continue
            index = int(template[i])
            _check_bounds(template, index, involved)
            segments.append(_resolve_specifier(c, tributes[index]))
            i += 1
        else:
            continue

        literal_start = i

    _append_literal(segments, template[literal_start:])
    return segments


def message_to_text(segments: Sequence[MessageSegment]) -> str:
    return "".join(str(s) for s in segments)
