from __future__ import annotations

from collections.abc import Sequence

from hgsim.core.messages import message_to_text
from hgsim.core.tributes import Tribute
from hgsim.fsm import RenderState
from hgsim.game import GameSnapshot


def _names(tributes: Sequence[Tribute]) -> str:
    return ", ".join(t.raw_name for t in tributes)


def _cannon_line(count: int) -> str:
    if count == 0:
        return "No cannon shots can be heard in the distance."
    if count == 1:
        return "1 cannon shot can be heard in the distance."
    return f"{count} cannon shots can be heard in the distance."


def _round_events(snapshot: GameSnapshot) -> list[str]:
    round_ = snapshot.round
    if round_ is None or not round_.game_events:
        return ["Nothing happened."]
    return [f"- {message_to_text(ev.message)}" for ev in round_.game_events]


def _round_deaths(snapshot: GameSnapshot) -> list[str]:
    lines = [_cannon_line(snapshot.deaths)]
    lines.extend(f"- {t.raw_name}" for t in snapshot.tributes_died)
    return lines


def _winners(snapshot: GameSnapshot) -> list[str]:
    alive = snapshot.tributes_alive
    if not alive:
        return ["There are no survivors."]
    if len(alive) == 1:
        return [f"The winner is {alive[0].raw_name}!"]
    return [f"The winners are {_names(alive)}!"]


def _game_deaths(snapshot: GameSnapshot) -> list[str]:
    lines: list[str] = []
    for round_ in snapshot.rounds:
        if not round_.died_this_round:
            continue
        lines.append(f"Round {round_.index + 1} ({round_.stage.value}): {_names(round_.died_this_round)}")
    return lines or ["No one died."]


def _stats(snapshot: GameSnapshot) -> list[str]:
    seen: list[Tribute] = [*snapshot.tributes_alive]
    for round_ in snapshot.rounds:
        seen.extend(round_.died_this_round)

    lines: list[str] = []
    for t in sorted(seen, key=lambda t: (-t.kills, t.raw_name)):
        status = "alive" if t.is_alive else f"died in round {t.died_in_round.index + 1}"  # type: ignore[union-attr]
        lines.append(f"- {t.raw_name}: {t.kills} kill{'s' if t.kills != 1 else ''}, {status}")
    return lines


def snapshot_to_text(snapshot: GameSnapshot) -> str:
    """Deterministic plain-text rendering of one tick, for terminals and logs."""

    if snapshot.state == RenderState.ROUND_EVENTS:
        body = _round_events(snapshot)
    elif snapshot.state == RenderState.ROUND_DEATHS:
        body = _round_deaths(snapshot)
    elif snapshot.state == RenderState.WINNERS:
        body = _winners(snapshot)
    elif snapshot.state == RenderState.GAME_DEATHS:
        body = _game_deaths(snapshot)
    elif snapshot.state == RenderState.STATS:
        body = _stats(snapshot)
    else:
        return ""

    header = snapshot.game_title or snapshot.state.value
    return "\n".join([f"== {header} ==", *body]).strip()
