"""Rolling and template resolution.

Resolution flow for one template string:
  1. Extract references left to right.
  2. For each reference with a table id or name:
     a. Look the table up by id, then by exact name over all tables.
        Unknown tables leave the reference text in place.
     b. If the table is already part of the current chain (by id or name),
        substitute "[Circular reference detected: <name>]" instead.
     c. Otherwise roll it roll_count times. A roll whose entry is itself a
        template is resolved recursively with depth - 1 and a chain extended
        by this table. Sibling references never see each other's tables.
     d. Join the rolls with the separator and replace the first occurrence
        of the reference.
  3. If references remain and depth allows, run another pass on the result.

Depth starts at MAX_RESOLUTION_DEPTH; at depth 0 the text is returned as is,
so every call chain terminates even on unresolvable or self-referencing data.

Each roll draws a single uniform value from the random source and reuses it
for both phases of RandomTable.roll(), so a scripted source maps one value to
one roll.
"""

from __future__ import annotations

import logging
from collections.abc import Set

from .errors import InvalidArgumentError, NotFoundError
from .models import RandomTable, RollResult, TemplateEvaluation
from .rng import RandomSource
from .storage import TableRepository, TemplateRepository
from .templating import MAX_RESOLUTION_DEPTH, RollTemplate, TemplateReference

logger = logging.getLogger(__name__)


def circular_marker(table: RandomTable) -> str:
    return f"[Circular reference detected: {table.name or table.id}]"


def _table_keys(table: RandomTable) -> set[str]:
    keys = {table.id}
    if table.name:
        keys.add(table.name)
    return keys


class TemplateResolver:
    """Replaces references with rolls on the tables they point at."""

    def __init__(self, tables: TableRepository, rng: RandomSource) -> None:
        self._tables = tables
        self._rng = rng

    def find_table(self, reference: TemplateReference) -> RandomTable | None:
        if reference.table_id:
            table = self._tables.get_by_id(reference.table_id)
            if table is not None:
                return table
        if reference.table_name:
            for table in self._tables.list():
                if table.name == reference.table_name:
                    return table
        return None

    def roll_once(self, table: RandomTable) -> RollResult:
        value = self._rng.uniform()
        result = table.roll(lambda: value)
        logger.debug("roll table=%s value=%.6f entry=%s", table.id, value, result.entry_id)
        return result

    def resolve(
        self,
        template: RollTemplate | str,
        depth: int = MAX_RESOLUTION_DEPTH,
        visited: Set[str] = frozenset(),
    ) -> str:
        """Return `template` with its references rolled and substituted.

        `visited` holds the ids and names of the tables entered by the
        enclosing chain; it is never mutated.
        """
        if not isinstance(template, RollTemplate):
            template = RollTemplate(template)
        if depth <= 0:
            return str(template)

        references = template.extract_references()
        if not references:
            return str(template)

        current = template
        for reference in references:
            if not reference.is_resolvable:
                continue

            table = self.find_table(reference)
            if table is None:
                logger.debug("no table for reference %s, leaving it in place", reference)
                continue

            if table.id in visited or (table.name and table.name in visited):
                logger.warning("circular reference to table %s", table.id)
                current = current.replace_reference(reference, circular_marker(table))
                continue

            chain = frozenset(visited) | _table_keys(table)
            rolls = [
                self._resolve_roll(table, depth - 1, chain)
                for _ in range(reference.roll_count)
            ]
            current = current.replace_reference(reference, reference.separator.join(rolls))

        if current.has_unresolved_references() and depth > 1:
            return self.resolve(current, depth - 1, visited)
        return str(current)

    def _resolve_roll(self, table: RandomTable, depth: int, visited: Set[str]) -> str:
        result = self.roll_once(table)
        if result.is_template:
            return self.resolve(result.content, depth, visited)
        return result.content

    def resolve_result(self, result: RollResult, table: RandomTable | None = None) -> RollResult:
        """Resolve a template roll; plain results are returned untouched.

        The table rolled on (when given) counts as already visited.
        """
        if not result.is_template:
            return result
        visited = _table_keys(table) if table is not None else {result.table_id}
        return result.with_resolved_content(self.resolve(result.content, visited=visited))


def _check_request(obj_id: str, count: int, label: str) -> None:
    if not obj_id:
        raise InvalidArgumentError(f"{label} ID is required")
    if count < 1:
        raise InvalidArgumentError("Count must be at least 1")


class RollService:
    """Top-level entry points: ad-hoc rolls and saved-template evaluation."""

    def __init__(
        self,
        tables: TableRepository,
        templates: TemplateRepository,
        rng: RandomSource,
    ) -> None:
        self._tables = tables
        self._templates = templates
        self.resolver = TemplateResolver(tables, rng)

    def roll(self, table_id: str, count: int = 1) -> list[RollResult]:
        """Roll `count` times on a table, resolving template results."""
        _check_request(table_id, count, "Table")
        table = self._tables.get_by_id(table_id)
        if table is None:
            raise NotFoundError(f"Table with ID {table_id} not found")

        results: list[RollResult] = []
        for _ in range(count):
            result = self.resolver.roll_once(table)
            results.append(self.resolver.resolve_result(result, table))
        return results

    def evaluate_template(self, template_id: str, count: int = 1) -> list[TemplateEvaluation]:
        """Evaluate a saved template `count` times, each with a fresh chain."""
        _check_request(template_id, count, "Template")
        saved = self._templates.get_by_id(template_id)
        if saved is None:
            raise NotFoundError(f"Template with ID {template_id} not found")

        return [
            TemplateEvaluation(
                original_template=saved.template,
                evaluated_template=self.resolver.resolve(saved.as_roll_template()),
            )
            for _ in range(count)
        ]
