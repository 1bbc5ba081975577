from __future__ import annotations

import argparse
import logging
import random
import sys
from collections.abc import Sequence
from pathlib import Path

from dotenv import load_dotenv

from hgsim.configuration.loader import ConfigLoadError, load_character_file, load_default_event_lists, load_event_file
from hgsim.core.tags import TagRegistry
from hgsim.fsm import GameState
from hgsim.game import Game
from hgsim.roster import build_tributes
from hgsim.settings import SettingsError, fatality_reroll_rate_from_env, options_from_env
from hgsim.snapshot_text import snapshot_to_text

logger = logging.getLogger(__name__)

# A full game is a few ticks per round; this only guards against runaway loops.
DEFAULT_MAX_TICKS = 10_000


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hgsim", description="Run a simulated elimination contest in the terminal")
    parser.add_argument("--characters", type=Path, required=True, help="Character file (legacy or v1 JSON)")
    parser.add_argument("--events", type=Path, default=None, help="Event config file; built-in events if omitted")
    parser.add_argument("--reroll-rate", type=float, default=None, help="Fatality reroll rate (0-1)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible game")
    parser.add_argument("--max-ticks", type=int, default=DEFAULT_MAX_TICKS, help="Stop after this many ticks")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")
    return parser


def run(args: argparse.Namespace) -> int:
    registry = TagRegistry()
    try:
        options = options_from_env()
        reroll_rate = args.reroll_rate if args.reroll_rate is not None else fatality_reroll_rate_from_env()
        if args.events is not None:
            events = load_event_file(args.events, registry=registry)
        else:
            events = load_default_event_lists(registry)
        selections = load_character_file(args.characters)
    except (ConfigLoadError, SettingsError) as e:
        logger.error("Could not set up the game: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1

    roster = build_tributes(selections)
    if not roster.ok:
        print(f"error: {roster.error}", file=sys.stderr)
        return 1

    rng = random.Random(args.seed) if args.seed is not None else None
    game = Game(roster.unwrap(), events, reroll_rate, options=options, rng=rng)

    for _ in range(args.max_ticks):
        result = game.advance()
        if not result.ok:
            print(f"error: {result.error}", file=sys.stderr)
            return 1

        text = snapshot_to_text(result.unwrap())
        if text:
            print(text)
            print()

        if game.state == GameState.END:
            return 0

    logger.warning("Stopped after %d ticks without reaching the end of the game", args.max_ticks)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = get_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
