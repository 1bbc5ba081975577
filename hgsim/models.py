from __future__ import annotations

import math
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class RequiredFatalitiesMode(StrEnum):
    disable = "Disable"
    percent = "Percent"
    absolute = "Absolute"


class GreyscaleSettings(BaseModel):
    """When portraits of dead tributes are rendered in greyscale.

    Passed through to snapshots untouched.
    """

    model_config = ConfigDict(frozen=True)

    in_events: bool = False
    end_of_day_summary: bool = True
    end_of_game_summary: bool = False


class GameOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    required_fatalities_mode: RequiredFatalitiesMode = RequiredFatalitiesMode.disable
    required_fatalities: float = 0

    # 1-based; day 1 means no offset.
    starting_day: float | None = None

    greyscale_settings: GreyscaleSettings = Field(default_factory=GreyscaleSettings)

    def required_fatalities_target(self, tribute_count: int) -> int | None:
        """Absolute number of deaths each round must reach, or None when disabled."""

        if self.required_fatalities_mode == RequiredFatalitiesMode.disable:
            return None
        if not math.isfinite(self.required_fatalities):
            return None

        if self.required_fatalities_mode == RequiredFatalitiesMode.percent:
            pct = min(max(self.required_fatalities, 0), 100)
            return math.ceil(pct / 100.0 * tribute_count)

        # The quota holds while fewer than `value` died, so a fractional value rounds up.
        return max(0, math.ceil(self.required_fatalities))


class PronounSetting(StrEnum):
    masculine = "m"
    feminine = "f"
    common = "c"
    none = "n"
    custom = "other"


class CharacterSelection(BaseModel):
    """A character as chosen on the character-select screen."""

    name: str
    pronoun_option: PronounSetting
    custom_pronouns: str | None = None
    image_url: str | None = None
