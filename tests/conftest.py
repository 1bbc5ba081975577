from __future__ import annotations

import os
import random
from collections.abc import Callable

import pytest

from hgsim.core.tags import TagRegistry
from hgsim.core.tributes import Tribute, TributePronouns

HE = TributePronouns(nominative="he", accusative="him", genitive="his", reflexive="himself")
SHE = TributePronouns(nominative="she", accusative="her", genitive="her", reflexive="herself")
THEY = TributePronouns(nominative="they", accusative="them", genitive="their", reflexive="themself")


class ScriptedRandom:
    """Stand-in RNG whose `random()` returns queued values (then 0.0)."""

    def __init__(self, values: list[float]):
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0) if self._values else 0.0


@pytest.fixture(autouse=True)
def _hermetic_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's `HGS_*` environment (or `.env`) from leaking into tests."""

    for key in list(os.environ):
        if key.startswith("HGS_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr("hgsim.main.load_dotenv", lambda *a, **kw: False)


@pytest.fixture()
def scripted_rng() -> Callable[[list[float]], ScriptedRandom]:
    return ScriptedRandom


@pytest.fixture()
def pronouns() -> dict[str, TributePronouns]:
    return {"he": HE, "she": SHE, "they": THEY}


@pytest.fixture()
def registry() -> TagRegistry:
    return TagRegistry()


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def make_tribute() -> Callable[..., Tribute]:
    def _make(name: str, pronouns: TributePronouns | None = HE, *, plural: bool = False) -> Tribute:
        return Tribute(
            raw_name=name,
            pronouns=pronouns,
            uses_pronouns=pronouns is not None,
            plural=plural,
        )

    return _make


@pytest.fixture()
def roster(make_tribute: Callable[..., Tribute]) -> Callable[[int], list[Tribute]]:
    def _roster(n: int) -> list[Tribute]:
        return [make_tribute(f"T{i}") for i in range(n)]

    return _roster
