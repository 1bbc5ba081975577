from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


class TagNameError(ValueError):
    pass


@dataclass(slots=True, eq=False)
class Tag:
    """A named label attached to tributes and used to gate events.

    Tags compare by identity: a registry hands out exactly one `Tag` per id,
    and a cleared registry never matches tags from before the reset.
    """

    id: int
    name: str

    def __repr__(self) -> str:
        return f"Tag(id={self.id}, name={self.name!r})"


class TagRegistry:
    """Arena of tags owned by the application session.

    The id of a tag is its slot index in the arena.
    """

    def __init__(self) -> None:
        self._tags: list[Tag] = []
        self._by_name: dict[str, Tag] = {}

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._tags)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Tag):
            return item.id < len(self._tags) and self._tags[item.id] is item
        return isinstance(item, str) and item in self._by_name

    def get(self, name: str) -> Tag | None:
        return self._by_name.get(name)

    def by_id(self, id: int) -> Tag | None:
        if 0 <= id < len(self._tags):
            return self._tags[id]
        return None

    def get_or_create(self, name: str) -> Tag:
        existing = self._by_name.get(name)
        if existing is not None:
            return existing
        tag = Tag(id=len(self._tags), name=name)
        self._tags.append(tag)
        self._by_name[name] = tag
        return tag

    def rename(self, tag: Tag, name: str) -> None:
        if tag not in self:
            raise TagNameError(f"Tag {tag.name!r} is not registered")
        if name == tag.name:
            return
        if name in self._by_name:
            raise TagNameError(f"A tag with the name {name} already exists")
        del self._by_name[tag.name]
        tag.name = name
        self._by_name[name] = tag

    def names(self) -> list[str]:
        return [t.name for t in self._tags]

    def clear(self) -> None:
        # Fresh containers; old Tag objects stay valid Python objects but are no longer members.
        self._tags = []
        self._by_name = {}
