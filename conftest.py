import shutil
from pathlib import Path

import pytest

from random_tables.config import Settings, build_services
from random_tables.rng import pick_weighted
from random_tables.storage import InMemoryTableRepository, InMemoryTemplateRepository

TEST_DATA_DIR = Path("data-tests")


class ScriptedRandom:
    """Random source that replays queued uniform values in order."""

    def __init__(self, *values: float) -> None:
        self._values = list(values)
        self.calls = 0

    def push(self, *values: float) -> None:
        self._values.extend(values)

    @property
    def remaining(self) -> int:
        return len(self._values)

    def uniform(self) -> float:
        if not self._values:
            raise AssertionError("ScriptedRandom ran out of values")
        self.calls += 1
        return self._values.pop(0)

    def weighted_index(self, weights) -> int:
        return pick_weighted(self.uniform(), weights)


@pytest.fixture(autouse=True)
def clean_test_data():
    """Wipe data-tests/ before every test."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    yield
    # leave data-tests around after tests for inspection; CI can ignore it


@pytest.fixture
def data_dir() -> Path:
    return TEST_DATA_DIR


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def table_repo() -> InMemoryTableRepository:
    return InMemoryTableRepository()


@pytest.fixture
def template_repo() -> InMemoryTemplateRepository:
    return InMemoryTemplateRepository()


@pytest.fixture
def services(rng):
    """In-memory services driven by the scripted random source."""
    return build_services(Settings(storage_backend="memory"), rng=rng)


COLORS = ["Red", "Blue", "Green", "Yellow", "Purple"]


@pytest.fixture
def colors(services):
    """The "Colors" table (id "colors"): five equally weighted colors."""
    return services.tables.create_table(
        "Colors", "Five colors", [{"content": c, "id": c.lower()} for c in COLORS]
    )
