from __future__ import annotations

import pytest

from hgsim.core.tags import TagNameError, TagRegistry
from hgsim.core.tributes import Tribute


def test_get_or_create_returns_same_tag_for_same_name(registry: TagRegistry) -> None:
    a = registry.get_or_create("Career")
    b = registry.get_or_create("Career")
    c = registry.get_or_create("career")

    assert a is b
    assert c is not a  # names are case-sensitive
    assert [t.id for t in registry] == [0, 1]
    assert registry.by_id(1) is c
    assert registry.by_id(5) is None


def test_rename_rejects_collision(registry: TagRegistry) -> None:
    a = registry.get_or_create("a")
    registry.get_or_create("b")

    with pytest.raises(TagNameError) as e:
        registry.rename(a, "b")
    assert "already exists" in str(e.value)

    registry.rename(a, "c")
    assert a.name == "c"
    assert registry.get("c") is a
    assert registry.get("a") is None


def test_clear_resets_arena_and_old_tags_do_not_match(registry: TagRegistry) -> None:
    old = registry.get_or_create("District 12")
    tribute = Tribute(raw_name="Kai", uses_pronouns=False, tags=[old])

    registry.clear()
    assert len(registry) == 0
    assert old not in registry

    new = registry.get_or_create("District 12")
    assert new.id == old.id == 0
    assert new is not old
    assert tribute.has(old)
    assert not tribute.has(new)


def test_tribute_tags_are_deduplicated(registry: TagRegistry) -> None:
    t = registry.get_or_create("x")
    tribute = Tribute(raw_name="Kai", uses_pronouns=False, tags=[t, t])
    tribute.tag(t)
    assert tribute.tags == [t]
