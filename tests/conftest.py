from __future__ import annotations

import pytest

from urlguard.reference import ReferenceData
from urlguard.storage import JsonStore
from urlguard.typosquat import TyposquatDetector


@pytest.fixture
def store(tmp_path) -> JsonStore:
    return JsonStore(tmp_path / "state.json")


@pytest.fixture
def detector() -> TyposquatDetector:
    return TyposquatDetector()


@pytest.fixture
def small_reference() -> ReferenceData:
    return ReferenceData.build(
        ["acme", "globex"],
        suspicious_tlds=["xyz"],
    )


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
