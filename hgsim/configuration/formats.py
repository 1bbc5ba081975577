"""On-disk schemas for event lists and character files.

Two format versions exist: the unversioned legacy format and version 1.
Each version has its own models; `is_legacy` and `config_version` tell them apart in raw JSON data.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

CURRENT_CONFIG_VERSION = 1

# Events of this type load disabled.
BIG_LANG_EVENT_TYPE = "BIG LANG"
CUSTOM_EVENT_TYPE = "CUSTOM"


class LegacyStoredEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str
    fatalities: list[int] = Field(default_factory=list)
    killers: list[int] = Field(default_factory=list)
    enabled: bool = True
    type: str = "BUILTIN"


class LegacyEventConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bloodbath: list[LegacyStoredEvent] | None = None
    day: list[LegacyStoredEvent] | None = None
    night: list[LegacyStoredEvent] | None = None
    feast: list[LegacyStoredEvent] | None = None
    all: list[LegacyStoredEvent] | None = None


class LegacyStoredCharacter(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    gender_select: str
    custom_pronouns: str | None = None
    image: Any = None


class LegacyCharacterConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    characters: list[LegacyStoredCharacter] = Field(default_factory=list)


class V1StoredTag(BaseModel):
    name: str


class V1StoredTagRequirement(BaseModel):
    name: str
    player_index: int


class V1StoredEvent(BaseModel):
    message: str
    fatalities: list[int] = Field(default_factory=list)
    killers: list[int] = Field(default_factory=list)
    enabled: bool = True
    type: str = "BUILTIN"
    tag_requirements: list[V1StoredTagRequirement] = Field(default_factory=list)


class V1StoredEventLists(BaseModel):
    bloodbath: list[V1StoredEvent] | None = None
    day: list[V1StoredEvent] | None = None
    night: list[V1StoredEvent] | None = None
    feast: list[V1StoredEvent] | None = None
    all: list[V1StoredEvent] | None = None


class V1EventConfig(BaseModel):
    version: Literal[1] = 1
    events: V1StoredEventLists = Field(default_factory=V1StoredEventLists)
    tags: list[V1StoredTag] = Field(default_factory=list)


class V1StoredImageURL(BaseModel):
    url: str


class V1StoredImageBlob(BaseModel):
    data: str


class V1StoredCharacter(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    gender_select: str
    pronoun_str: str = ""
    image: V1StoredImageURL | V1StoredImageBlob | None = None
    tags: list[str] = Field(default_factory=list)


class V1CharacterConfig(BaseModel):
    version: Literal[1] = 1
    characters: list[V1StoredCharacter] = Field(default_factory=list)


EventConfig = LegacyEventConfig | V1EventConfig
CharacterConfig = LegacyCharacterConfig | V1CharacterConfig


def is_legacy(data: object) -> bool:
    """Legacy files are the ones without a `version` key."""

    return not data or (isinstance(data, dict) and "version" not in data)


def config_version(data: object) -> object:
    if isinstance(data, dict):
        return data.get("version")
    return None
