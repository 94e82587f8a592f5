"""Table and template repositories.

Two backends share one contract:

    File*Repository      — one JSON file per object under a base directory
    InMemory*Repository  — dict-backed, used in tests and STORAGE_BACKEND=memory

Directory layout of the file backend:

    {data_dir}/
      tables/
        {table_id}.json
      templates/
        {template_id}.json

list() accepts an optional filter dict. Every key must match; dotted keys
walk into nested fields and a final "length" segment compares list sizes,
e.g. {"name": "Colors"} or {"entries.length": 5}.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from pathlib import Path
from typing import Any, ClassVar, Protocol

from pydantic import BaseModel, ValidationError

from .errors import NotFoundError
from .models import RandomTable, SavedTemplate

logger = logging.getLogger(__name__)

_MISSING = object()


def slugify(title: str) -> str:
    """Convert a name to a filesystem-safe id.

    "Dragon's Hoard" → "dragons-hoard"
    """
    text = unicodedata.normalize("NFKD", title)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"['\"]", "", text)  # strip apostrophes/quotes before hyphenation
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")
    return text or "untitled"


def unique_id(name: str, taken) -> str:
    """Slugify `name`, adding -2, -3, ... while `taken(candidate)` is true."""
    base = slugify(name)
    candidate = base
    counter = 2
    while taken(candidate):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate


class TableRepository(Protocol):
    def save(self, table: RandomTable) -> str: ...
    def get_by_id(self, table_id: str) -> RandomTable | None: ...
    def update(self, table: RandomTable) -> None: ...
    def list(self, filter: dict[str, Any] | None = None) -> list[RandomTable]: ...
    def delete(self, table_id: str) -> None: ...


class TemplateRepository(Protocol):
    def save(self, template: SavedTemplate) -> str: ...
    def get_by_id(self, template_id: str) -> SavedTemplate | None: ...
    def update(self, template: SavedTemplate) -> None: ...
    def list(self, filter: dict[str, Any] | None = None) -> list[SavedTemplate]: ...
    def delete(self, template_id: str) -> None: ...


def matches_filter(data: dict[str, Any], criteria: dict[str, Any]) -> bool:
    """True if `data` satisfies every key of `criteria`."""
    for key, expected in criteria.items():
        *path, last = key.split(".")
        current: Any = data
        for part in path:
            if not isinstance(current, dict) or part not in current:
                return False
            current = current[part]
        if last == "length" and isinstance(current, list):
            if len(current) != expected:
                return False
            continue
        if not isinstance(current, dict) or current.get(last, _MISSING) != expected:
            return False
    return True


def _apply_filter(items: list, criteria: dict[str, Any] | None) -> list:
    if not criteria:
        return items
    return [item for item in items if matches_filter(item.model_dump(mode="json"), criteria)]


# ---------------------------------------------------------------------------
# JSON files
# ---------------------------------------------------------------------------

class _FileRepository:
    model: ClassVar[type[BaseModel]]
    kind: ClassVar[str]
    subdir: ClassVar[str]

    def __init__(self, data_dir: Path) -> None:
        self._root = Path(data_dir) / self.subdir

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, obj_id: str) -> Path | None:
        # Anything that is not a bare file name never maps to a stored object.
        if not obj_id or obj_id in {".", ".."} or Path(obj_id).name != obj_id:
            return None
        return self._root / f"{obj_id}.json"

    def _write(self, obj: Any) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        path = self._path(obj.id)
        if path is None:
            raise ValueError(f"Invalid {self.kind} ID: {obj.id!r}")
        path.write_text(obj.model_dump_json(indent=2, exclude_none=True))

    def save(self, obj: Any) -> str:
        self._write(obj)
        return obj.id

    def get_by_id(self, obj_id: str) -> Any:
        path = self._path(obj_id)
        if path is None or not path.is_file():
            return None
        try:
            return self.model.model_validate_json(path.read_text())
        except (OSError, ValidationError) as e:
            logger.warning("unreadable %s file %s: %s", self.kind, path.name, e)
            return None

    def exists(self, obj_id: str) -> bool:
        path = self._path(obj_id)
        return path is not None and path.is_file()

    def update(self, obj: Any) -> None:
        if not self.exists(obj.id):
            raise NotFoundError(f"{self.kind.capitalize()} with ID {obj.id} does not exist")
        self._write(obj)

    def list(self, filter: dict[str, Any] | None = None) -> list:
        if not self._root.is_dir():
            return []
        items = []
        for path in sorted(self._root.glob("*.json")):
            try:
                items.append(self.model.model_validate_json(path.read_text()))
            except (OSError, ValidationError) as e:
                logger.warning("skipping unreadable %s file %s: %s", self.kind, path.name, e)
        return _apply_filter(items, filter)

    def delete(self, obj_id: str) -> None:
        if not self.exists(obj_id):
            raise NotFoundError(f"{self.kind.capitalize()} with ID {obj_id} does not exist")
        self._path(obj_id).unlink()


class FileTableRepository(_FileRepository):
    model = RandomTable
    kind = "table"
    subdir = "tables"


class FileTemplateRepository(_FileRepository):
    model = SavedTemplate
    kind = "template"
    subdir = "templates"


# ---------------------------------------------------------------------------
# In memory
# ---------------------------------------------------------------------------

class _MemoryRepository:
    kind: ClassVar[str]

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}

    def save(self, obj: Any) -> str:
        self._items[obj.id] = obj.model_copy(deep=True)
        return obj.id

    def get_by_id(self, obj_id: str) -> Any:
        obj = self._items.get(obj_id)
        return obj.model_copy(deep=True) if obj is not None else None

    def exists(self, obj_id: str) -> bool:
        return obj_id in self._items

    def update(self, obj: Any) -> None:
        if obj.id not in self._items:
            raise NotFoundError(f"{self.kind.capitalize()} with ID {obj.id} does not exist")
        self._items[obj.id] = obj.model_copy(deep=True)

    def list(self, filter: dict[str, Any] | None = None) -> list:
        items = [obj.model_copy(deep=True) for obj in self._items.values()]
        return _apply_filter(items, filter)

    def delete(self, obj_id: str) -> None:
        if obj_id not in self._items:
            raise NotFoundError(f"{self.kind.capitalize()} with ID {obj_id} does not exist")
        del self._items[obj_id]


class InMemoryTableRepository(_MemoryRepository):
    kind = "table"


class InMemoryTemplateRepository(_MemoryRepository):
    kind = "template"
