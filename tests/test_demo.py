"""Demo data seeds a consistent set of cross-referencing tables."""

import pytest

from random_tables.config import Settings, build_services
from random_tables.demo import DEMO_TABLES, create_demo_data
from random_tables.rng import DefaultRandomSource


@pytest.mark.parametrize("backend", ["memory", "file"])
def test_demo_data_resolves_fully(backend, data_dir):
    services = build_services(
        Settings(storage_backend=backend, data_dir=data_dir), rng=DefaultRandomSource(5)
    )
    create_demo_data(services)
    assert len(services.tables.list_tables()) == len(DEMO_TABLES)

    for evaluation in services.rolls.evaluate_template("travel-day", 10):
        assert "{{" not in evaluation.evaluated_template
        assert evaluation.evaluated_template.startswith("Weather: ")

    for result in services.rolls.roll("encounters", 10):
        assert "{{" not in result.text


def test_demo_resets_file_storage(data_dir):
    services = build_services(Settings(data_dir=data_dir), rng=DefaultRandomSource(5))
    services.tables.create_table("Leftover")
    create_demo_data(services)
    create_demo_data(services)
    ids = [t.id for t in services.tables.list_tables()]
    assert "leftover" not in ids
    assert "colors-2" not in ids
