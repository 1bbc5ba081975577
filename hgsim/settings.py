from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import ValidationError

from hgsim.game import DEFAULT_FATALITY_REROLL_RATE
from hgsim.models import GameOptions, GreyscaleSettings

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class SettingsError(ValueError):
    pass


def _env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise SettingsError(f"{key} must be a boolean, got {raw!r}")


def options_from_env(env: Mapping[str, str] | None = None) -> GameOptions:
    """Build game options from `HGS_*` environment variables.

    Unset variables keep the defaults of `GameOptions`.
    """

    env = os.environ if env is None else env
    defaults = GreyscaleSettings()

    data: dict[str, object] = {
        "greyscale_settings": GreyscaleSettings(
            in_events=_env_bool(env, "HGS_GREYSCALE_IN_EVENTS", defaults.in_events),
            end_of_day_summary=_env_bool(env, "HGS_GREYSCALE_END_OF_DAY_SUMMARY", defaults.end_of_day_summary),
            end_of_game_summary=_env_bool(env, "HGS_GREYSCALE_END_OF_GAME_SUMMARY", defaults.end_of_game_summary),
        ),
    }
    if env.get("HGS_REQUIRED_FATALITIES_MODE"):
        data["required_fatalities_mode"] = env["HGS_REQUIRED_FATALITIES_MODE"].strip()
    if env.get("HGS_REQUIRED_FATALITIES"):
        data["required_fatalities"] = env["HGS_REQUIRED_FATALITIES"].strip()
    if env.get("HGS_STARTING_DAY"):
        data["starting_day"] = env["HGS_STARTING_DAY"].strip()

    try:
        return GameOptions.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid game settings: {e}") from e


def fatality_reroll_rate_from_env(env: Mapping[str, str] | None = None) -> float:
    env = os.environ if env is None else env
    raw = env.get("HGS_FATALITY_REROLL_RATE", "").strip()
    if not raw:
        return DEFAULT_FATALITY_REROLL_RATE
    try:
        rate = float(raw)
    except ValueError as e:
        raise SettingsError(f"HGS_FATALITY_REROLL_RATE must be a number, got {raw!r}") from e
    if not 0.0 <= rate <= 1.0:
        raise SettingsError("HGS_FATALITY_REROLL_RATE must be between 0 and 1")
    return rate
