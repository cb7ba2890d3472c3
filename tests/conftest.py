import sys
from pathlib import Path

# Ensure the project root is on sys.path so `lintab` is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from lintab.variables import external, slack


class RecordingSink:
    def __init__(self) -> None:
        self.calls = []

    def register(self, variable, subject) -> None:
        self.calls.append(("register", variable, subject))

    def unregister(self, variable, subject) -> None:
        self.calls.append(("unregister", variable, subject))

    def resync(self, variable) -> None:
        self.calls.append(("resync", variable))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def x():
    return external("x", 3.0)


@pytest.fixture
def y():
    return external("y", 4.0)


@pytest.fixture
def s():
    return slack()
