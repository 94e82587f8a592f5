"""Environment configuration and service wiring.

Variables (a .env file in the project root is loaded first):

    DATA_DIR          storage root                     ./data
    STORAGE_BACKEND   "file" | "memory"                file
    CAN_USE_RESOURCE  expose tables as MCP resources   false
    RNG               "system" | "default"             system
    RNG_SEED          integer seed (implies default)   unset
    LOG_LEVEL         logging level name               INFO
    HOST, PORT        HTTP API bind address            127.0.0.1, 13013
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, NamedTuple

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

from .errors import ConfigError
from .rng import DefaultRandomSource, RandomSource, SystemRandomSource
from .rolling import RollService
from .services import TableService, TemplateService
from .storage import (
    FileTableRepository,
    FileTemplateRepository,
    InMemoryTableRepository,
    InMemoryTemplateRepository,
)

ROOT = Path(__file__).parent.parent
DEFAULT_DATA_DIR = ROOT / "data"

_TRUE = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    data_dir: Path = DEFAULT_DATA_DIR
    storage_backend: Literal["file", "memory"] = "file"
    can_use_resource: bool = False
    rng: Literal["system", "default"] = "system"
    rng_seed: int | None = None
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 13013

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> Settings:
        """Read settings from `env` (os.environ after loading .env by default)."""
        if env is None:
            load_dotenv(ROOT / ".env")
            env = dict(os.environ)
        raw: dict[str, object] = {
            "data_dir": env.get("DATA_DIR", str(DEFAULT_DATA_DIR)),
            "storage_backend": env.get("STORAGE_BACKEND", "file").lower(),
            "can_use_resource": env.get("CAN_USE_RESOURCE", "").lower() in _TRUE,
            "rng": env.get("RNG", "system").lower(),
            "rng_seed": env.get("RNG_SEED") or None,
            "log_level": env.get("LOG_LEVEL", "INFO").upper(),
            "host": env.get("HOST", "127.0.0.1"),
            "port": env.get("PORT", "13013"),
        }
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


class Services(NamedTuple):
    tables: TableService
    templates: TemplateService
    rolls: RollService


def build_random_source(settings: Settings) -> RandomSource:
    if settings.rng_seed is not None:
        return DefaultRandomSource(settings.rng_seed)
    if settings.rng == "default":
        return DefaultRandomSource()
    return SystemRandomSource()


def build_services(settings: Settings, rng: RandomSource | None = None) -> Services:
    if settings.storage_backend == "memory":
        table_repo = InMemoryTableRepository()
        template_repo = InMemoryTemplateRepository()
    else:
        table_repo = FileTableRepository(settings.data_dir)
        template_repo = FileTemplateRepository(settings.data_dir)
    return Services(
        tables=TableService(table_repo),
        templates=TemplateService(template_repo),
        rolls=RollService(table_repo, template_repo, rng or build_random_source(settings)),
    )
