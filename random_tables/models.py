"""Core domain models.

Tables, entries and roll results are Pydantic models so the same types are
validated at every data boundary (JSON files, MCP tool arguments, HTTP
bodies). Range, TableEntry and RollResult are frozen value types: "updating"
one returns a new instance. RandomTable is the only mutable aggregate.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import EmptyTableError, InvalidArgumentError, NotFoundError
from .templating import RollTemplate

logger = logging.getLogger(__name__)

RandomFn = Callable[[], float]


class Range(BaseModel):
    """Closed interval of roll values, e.g. 1-5 on a d20."""

    model_config = ConfigDict(frozen=True)

    min: int
    max: int

    @model_validator(mode="after")
    def _check_bounds(self) -> Range:
        if self.min > self.max:
            raise ValueError("Minimum value cannot be greater than maximum value")
        return self

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    @classmethod
    def from_string(cls, text: str) -> Range:
        """Parse "min-max"."""
        parts = text.split("-")
        if len(parts) != 2:
            raise InvalidArgumentError('Invalid range format. Expected "min-max"')
        try:
            low, high = int(parts[0]), int(parts[1])
        except ValueError:
            raise InvalidArgumentError("Invalid range values. Expected numbers")
        return cls(min=low, max=high)

    def __str__(self) -> str:
        return f"{self.min}-{self.max}"


class TableEntry(BaseModel):
    """One weighted (and optionally ranged) item in a table."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    weight: float = Field(default=1, gt=0)
    range: Range | None = None

    def in_range(self, value: float) -> bool:
        """False for entries without a range."""
        return self.range is not None and self.range.contains(value)

    def is_template(self) -> bool:
        return RollTemplate.is_template(self.content)

    def update(
        self,
        content: str | None = None,
        weight: float | None = None,
        range: Range | None = None,
    ) -> TableEntry:
        """Return a copy with the given fields replaced; id is kept."""
        return TableEntry(
            id=self.id,
            content=self.content if content is None else content,
            weight=self.weight if weight is None else weight,
            range=self.range if range is None else range,
        )


class RollResult(BaseModel):
    """Outcome of one roll on a table."""

    model_config = ConfigDict(frozen=True)

    table_id: str
    entry_id: str
    content: str
    is_template: bool = False
    resolved_content: str | None = None  # set only once references were processed
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def with_resolved_content(self, resolved_content: str) -> RollResult:
        return self.model_copy(update={"resolved_content": resolved_content})

    @property
    def text(self) -> str:
        """Resolved content when available, raw content otherwise."""
        return self.resolved_content if self.resolved_content is not None else self.content

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class RandomTable(BaseModel):
    """A named collection of entries that can be rolled on.

    Entries keep insertion order; entry ids are unique within a table.
    """

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    entries: list[TableEntry] = Field(default_factory=list)

    @field_validator("entries")
    @classmethod
    def _unique_entry_ids(cls, entries: list[TableEntry]) -> list[TableEntry]:
        seen: set[str] = set()
        for entry in entries:
            if entry.id in seen:
                raise ValueError(f"Entry with ID {entry.id} already exists")
            seen.add(entry.id)
        return entries

    @property
    def total_weight(self) -> float:
        return sum(entry.weight for entry in self.entries)

    def get_entry(self, entry_id: str) -> TableEntry | None:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def _index_of(self, entry_id: str) -> int:
        for i, entry in enumerate(self.entries):
            if entry.id == entry_id:
                return i
        raise NotFoundError(f"Entry with ID {entry_id} does not exist")

    def add_entry(self, entry: TableEntry) -> None:
        if self.get_entry(entry.id) is not None:
            raise InvalidArgumentError(f"Entry with ID {entry.id} already exists")
        self.entries.append(entry)

    def remove_entry(self, entry_id: str) -> None:
        del self.entries[self._index_of(entry_id)]

    def update_entry(
        self,
        entry_id: str,
        content: str | None = None,
        weight: float | None = None,
        range: Range | None = None,
    ) -> TableEntry:
        index = self._index_of(entry_id)
        updated = self.entries[index].update(content=content, weight=weight, range=range)
        self.entries[index] = updated
        return updated

    def roll(self, rng: RandomFn = random.random) -> RollResult:
        """Select one entry.

        If any entry declares a range, a value in [1, M] is drawn (M being the
        largest range max) and the first entry containing it wins. Tables
        without ranges, and range rolls that land in a gap, use weighted
        selection over all entries instead.
        """
        if not self.entries:
            raise EmptyTableError(f"Cannot roll on an empty table ({self.id})")

        ranged = [entry for entry in self.entries if entry.range is not None]
        if ranged:
            upper = max(entry.range.max for entry in ranged)
            value = math.floor(rng() * upper) + 1
            for entry in self.entries:
                if entry.in_range(value):
                    return self._result(entry)
            logger.debug("table=%s range roll %d matched no entry, using weights", self.id, value)

        remaining = rng() * self.total_weight
        for entry in self.entries:
            remaining -= entry.weight
            if remaining <= 0:
                return self._result(entry)

        # Accumulated float error: first entry is the deterministic fallback.
        return self._result(self.entries[0])

    def _result(self, entry: TableEntry) -> RollResult:
        return RollResult(
            table_id=self.id,
            entry_id=entry.id,
            content=entry.content,
            is_template=entry.is_template(),
        )

    def summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "entry_count": len(self.entries),
        }


class SavedTemplate(BaseModel):
    """A named, persisted template string."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    template: str

    def as_roll_template(self) -> RollTemplate:
        return RollTemplate(self.template)

    def summary(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}


class TemplateEvaluation(BaseModel):
    original_template: str
    evaluated_template: str
