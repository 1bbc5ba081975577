from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

from pydantic import ValidationError

from hgsim.configuration.formats import (
    BIG_LANG_EVENT_TYPE,
    CURRENT_CONFIG_VERSION,
    LegacyCharacterConfig,
    LegacyEventConfig,
    LegacyStoredEvent,
    V1CharacterConfig,
    V1EventConfig,
    V1StoredEvent,
    V1StoredImageURL,
    config_version,
    is_legacy,
)
from hgsim.core.events import EventLists, EventTemplate, EventTemplateError, TagRequirement
from hgsim.core.tags import TagRegistry
from hgsim.models import CharacterSelection

logger = logging.getLogger(__name__)

S = TypeVar("S", LegacyStoredEvent, V1StoredEvent)


class ConfigLoadError(RuntimeError):
    pass


def _usable_image_url(url: str | None) -> str | None:
    # Blob URLs don't survive a reload; old versions wrote '[object%20Object]' URLs.
    if not isinstance(url, str) or not url:
        return None
    if url.startswith("blob:") or url.endswith("[object%20Object]"):
        return None
    return url


def _legacy_events_equal(stored: LegacyStoredEvent, event: EventTemplate) -> bool:
    return stored.message == event.message


def _v1_events_equal(stored: V1StoredEvent, event: EventTemplate) -> bool:
    if stored.message != event.message:
        return False
    if len(stored.tag_requirements) != len(event.requirements):
        return False
    return all(
        s.name == e.tag.name and s.player_index == e.player_index
        for s, e in zip(stored.tag_requirements, event.requirements, strict=True)
    )


def _legacy_event(stored: LegacyStoredEvent, registry: TagRegistry) -> EventTemplate:
    return EventTemplate(stored.message, stored.fatalities, stored.killers, stored.type, enabled=stored.enabled)


def _v1_event(stored: V1StoredEvent, registry: TagRegistry) -> EventTemplate:
    event = EventTemplate(
        stored.message,
        stored.fatalities,
        stored.killers,
        stored.type,
        enabled=stored.enabled and stored.type != BIG_LANG_EVENT_TYPE,
    )
    for req in stored.tag_requirements:
        event.require(registry.get_or_create(req.name), req.player_index)
    return event


def _stage_events(
    *,
    existing: EventLists,
    stored_lists: Any,
    equal: Callable[[S, EventTemplate], bool],
    decode: Callable[[S, TagRegistry], EventTemplate],
) -> EventLists:
    """Decode every stored event before anything is committed.

    Tag requirements are resolved against a scratch registry; `_commit_events`
    rebinds them to the real one.
    """

    scratch = TagRegistry()
    staged = EventLists()
    for key in EventLists.KEYS:
        known = existing.get(key)
        target = staged.get(key)
        for stored in getattr(stored_lists, key) or []:
            if any(equal(stored, e) for e in known) or any(equal(stored, e) for e in target):
                continue
            try:
                target.append(decode(stored, scratch))
            except EventTemplateError as e:
                raise ConfigLoadError(f"Invalid event in '{key}' list: {e}") from e
    return staged


def _commit_events(into: EventLists, staged: EventLists, registry: TagRegistry) -> int:
    added = 0
    for key, events in staged.items():
        for event in events:
            event.requirements = [
                TagRequirement(tag=registry.get_or_create(r.tag.name), player_index=r.player_index)
                for r in event.requirements
            ]
        into.get(key).extend(events)
        added += len(events)
    return added


def load_event_config(
    into: EventLists,
    data: object,
    *,
    registry: TagRegistry,
    overwrite: bool = False,
    from_local_storage: bool = False,
) -> None:
    """Merge a stored event configuration into `into`.

    Events that already exist (per the file version's notion of equality) are skipped.
    With `overwrite`, the lists (and for V1 files, the tag registry) are cleared first.
    An unknown version is an error, unless the data came from local storage, where it is ignored.
    Nothing is changed if any stored event is invalid.
    """

    baseline = EventLists() if overwrite else into
    try:
        if is_legacy(data):
            legacy = LegacyEventConfig.model_validate(data or {})
            staged = _stage_events(
                existing=baseline,
                stored_lists=legacy,
                equal=_legacy_events_equal,
                decode=_legacy_event,
            )
            if overwrite:
                into.clear()
            added = _commit_events(into, staged, registry)
            logger.info("Loaded %d event(s) from legacy config", added)
            return

        if config_version(data) == 1:
            v1 = V1EventConfig.model_validate(data)
            staged = _stage_events(
                existing=baseline,
                stored_lists=v1.events,
                equal=_v1_events_equal,
                decode=_v1_event,
            )
            if overwrite:
                into.clear()
                registry.clear()
            for t in v1.tags:
                registry.get_or_create(t.name)
            added = _commit_events(into, staged, registry)
            logger.info("Loaded %d event(s) and %d tag(s) from v1 config", added, len(v1.tags))
            return
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid config: {e}") from e

    if from_local_storage:
        logger.warning("Ignoring stored config with unknown version %r", config_version(data))
        return
    raise ConfigLoadError(f"Invalid config version {config_version(data)}")


def save_event_config(lists: EventLists, registry: TagRegistry) -> dict[str, Any]:
    """Serialize event lists and tags as a current-version (V1) document."""

    events: dict[str, list[dict[str, Any]]] = {}
    for key, templates in lists.items():
        events[key] = [
            V1StoredEvent(
                message=e.message,
                fatalities=list(e.fatalities),
                killers=list(e.killers),
                enabled=e.enabled,
                type=e.type,
                tag_requirements=[{"name": r.tag.name, "player_index": r.player_index} for r in e.requirements],
            ).model_dump()
            for e in templates
        ]

    return {
        "version": CURRENT_CONFIG_VERSION,
        "events": events,
        "tags": [{"name": t.name} for t in registry],
    }


def _read_json(path: Path) -> object:
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise ConfigLoadError(f"Config file not found: {path}") from e
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Invalid JSON in {path}: {e}") from e


def load_event_file(
    path: Path,
    *,
    registry: TagRegistry,
    into: EventLists | None = None,
    overwrite: bool = False,
) -> EventLists:
    lists = into if into is not None else EventLists()
    load_event_config(lists, _read_json(path), registry=registry, overwrite=overwrite)
    return lists


def load_characters(data: object) -> list[CharacterSelection]:
    """Decode a stored character file (legacy or V1) into character-select entries."""

    try:
        if is_legacy(data):
            legacy = LegacyCharacterConfig.model_validate(data or {})
            return [
                CharacterSelection(
                    name=c.name,
                    pronoun_option=c.gender_select,
                    custom_pronouns=c.custom_pronouns,
                    image_url=_usable_image_url(c.image),
                )
                for c in legacy.characters
            ]

        if config_version(data) == 1:
            v1 = V1CharacterConfig.model_validate(data)
            out: list[CharacterSelection] = []
            for c in v1.characters:
                image_url = None
                if isinstance(c.image, V1StoredImageURL):
                    image_url = _usable_image_url(c.image.url)
                elif c.image is not None:
                    logger.debug("Dropping embedded image data for character %r", c.name)
                out.append(
                    CharacterSelection(
                        name=c.name,
                        pronoun_option=c.gender_select,
                        custom_pronouns=c.pronoun_str,
                        image_url=image_url,
                    )
                )
            return out
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid character configuration file: {e}") from e

    raise ConfigLoadError("Invalid character configuration file")


def load_character_file(path: Path) -> list[CharacterSelection]:
    return load_characters(_read_json(path))


def save_characters(selections: Sequence[CharacterSelection]) -> dict[str, Any]:
    characters = []
    for s in selections:
        url = _usable_image_url(s.image_url)
        characters.append(
            {
                "name": s.name,
                "gender_select": s.pronoun_option.value,
                "pronoun_str": s.custom_pronouns or "",
                "image": {"url": url} if url else None,
                "tags": [],
            }
        )
    return V1CharacterConfig.model_validate(
        {"version": CURRENT_CONFIG_VERSION, "characters": characters}
    ).model_dump(exclude_none=True)


def _stored(message: str, fatalities: list[int] | None = None, killers: list[int] | None = None) -> dict[str, Any]:
    return {
        "message": message,
        "fatalities": fatalities or [],
        "killers": killers or [],
        "enabled": True,
        "type": "BUILTIN",
        "tag_requirements": [],
    }


def builtin_default_config() -> dict[str, Any]:
    """Small built-in event set so a game can run without any config file."""

    return {
        "version": CURRENT_CONFIG_VERSION,
        "tags": [],
        "events": {
            "bloodbath": [
                _stored("%0 run%s0 away from the Cornucopia."),
                _stored("%0 grab%s0 a shovel."),
                _stored("%0 and %1 fight for a bag. %0 give%s0 up and retreat%s0."),
                _stored("%0 snatch%e0 a bottle of alcohol and a rag."),
                _stored("%0 kill%s0 %1 with %G0 spear.", [1], [0]),
                _stored("%0 and %1 work together to drown %2.", [2], [0, 1]),
            ],
            "day": [
                _stored("%0 go%e0 hunting."),
                _stored("%0 practice%s0 %G0 archery."),
                _stored("%0 search%e0 for a water source."),
                _stored("%0 and %1 split up to search for resources."),
                _stored("%0 sneak%s0 up on %1 and kill%s0 %A1.", [1], [0]),
                _stored("%0 fall%s0 into a pit and die%s0.", [0]),
            ],
            "night": [
                _stored("%0 start%s0 a fire."),
                _stored("%0 cr%y0 %R0 to sleep."),
                _stored("%0 and %1 tell stories about themselves to each other."),
                _stored("%0 look%s0 at the night sky."),
                _stored("%0 set%s0 an explosive off, killing %1.", [1], [0]),
                _stored("%0 freeze%s0 to death.", [0]),
            ],
            "feast": [
                _stored("%0 gather%s0 as much food as %N0 can."),
                _stored("%0 decide%s0 not to go to the feast."),
                _stored("%0 and %1 get into a fight. %0 triumphantly kill%s0 %A1.", [1], [0]),
                _stored("%0 destroy%s0 %G1 memoirs out of spite."),
            ],
            "all": [
                _stored("%0 think%s0 about home."),
            ],
        },
    }


def load_default_event_lists(registry: TagRegistry) -> EventLists:
    lists = EventLists()
    load_event_config(lists, builtin_default_config(), registry=registry)
    return lists
