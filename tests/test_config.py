"""Tests for environment configuration and service wiring."""

from pathlib import Path

import pytest

from random_tables.config import DEFAULT_DATA_DIR, Settings, build_random_source, build_services
from random_tables.errors import ConfigError
from random_tables.rng import DefaultRandomSource, SystemRandomSource
from random_tables.storage import FileTableRepository, InMemoryTableRepository


def test_defaults():
    settings = Settings.from_env({})
    assert settings.data_dir == DEFAULT_DATA_DIR
    assert settings.storage_backend == "file"
    assert settings.can_use_resource is False
    assert settings.rng == "system"
    assert settings.rng_seed is None
    assert settings.log_level == "INFO"
    assert settings.port == 13013


def test_values_from_env():
    settings = Settings.from_env({
        "DATA_DIR": "/tmp/tables",
        "STORAGE_BACKEND": "Memory",
        "CAN_USE_RESOURCE": "true",
        "RNG": "default",
        "RNG_SEED": "42",
        "LOG_LEVEL": "debug",
        "PORT": "8080",
    })
    assert settings.data_dir == Path("/tmp/tables")
    assert settings.storage_backend == "memory"
    assert settings.can_use_resource is True
    assert settings.rng == "default"
    assert settings.rng_seed == 42
    assert settings.log_level == "DEBUG"
    assert settings.port == 8080


@pytest.mark.parametrize("value", ["1", "yes", "ON"])
def test_truthy_resource_flag(value):
    assert Settings.from_env({"CAN_USE_RESOURCE": value}).can_use_resource is True


@pytest.mark.parametrize("env", [
    {"STORAGE_BACKEND": "sqlite"},
    {"RNG": "quantum"},
    {"RNG_SEED": "abc"},
    {"PORT": "http"},
])
def test_invalid_values_raise_config_error(env):
    with pytest.raises(ConfigError):
        Settings.from_env(env)


def test_random_source_selection():
    assert type(build_random_source(Settings())) is SystemRandomSource
    assert type(build_random_source(Settings(rng="default"))) is DefaultRandomSource
    seeded = build_random_source(Settings(rng_seed=3))
    assert seeded.uniform() == DefaultRandomSource(3).uniform()


def test_build_memory_services():
    services = build_services(Settings(storage_backend="memory"))
    assert isinstance(services.tables.repository, InMemoryTableRepository)
    table = services.tables.create_table("Colors", entries=[{"content": "Red"}])
    [result] = services.rolls.roll(table.id)
    assert result.content == "Red"


def test_build_file_services(data_dir):
    services = build_services(Settings(data_dir=data_dir), rng=DefaultRandomSource(1))
    assert isinstance(services.tables.repository, FileTableRepository)
    services.tables.create_table("Colors", entries=[{"content": "Red"}])
    assert (data_dir / "tables" / "colors.json").is_file()
    # the roll service reads through the same repository
    assert services.rolls.roll("colors")[0].content == "Red"
