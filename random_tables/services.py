"""Table and template management use cases.

Ids are derived from names ("Dragon's Hoard" → "dragons-hoard") and stay
fixed afterwards, since references in other tables point at them. Renaming a
table therefore never changes its id.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from .errors import InvalidArgumentError, NotFoundError
from .models import RandomTable, Range, SavedTemplate, TableEntry
from .storage import TableRepository, TemplateRepository, unique_id

logger = logging.getLogger(__name__)


def new_entry_id() -> str:
    return str(uuid.uuid4())


def build_entry(data: dict[str, Any]) -> TableEntry:
    """Create an entry from plain data, generating an id when missing."""
    fields = dict(data)
    if not fields.get("id"):
        fields["id"] = new_entry_id()
    if fields.get("range") is None:
        fields.pop("range", None)
    if fields.get("weight") is None:
        fields.pop("weight", None)
    return TableEntry.model_validate(fields)


class TableService:
    def __init__(self, repository: TableRepository) -> None:
        self._repository = repository

    @property
    def repository(self):
        return self._repository

    def create_table(
        self,
        name: str,
        description: str = "",
        entries: list[TableEntry | dict[str, Any]] | None = None,
    ) -> RandomTable:
        if not name:
            raise InvalidArgumentError("Table name is required")
        table_id = unique_id(name, lambda c: self._repository.get_by_id(c) is not None)
        table = RandomTable(
            id=table_id,
            name=name,
            description=description,
            entries=[e if isinstance(e, TableEntry) else build_entry(e) for e in entries or []],
        )
        self._repository.save(table)
        logger.info("created table %s (%d entries)", table.id, len(table.entries))
        return table

    def get_table(self, table_id: str) -> RandomTable:
        if not table_id:
            raise InvalidArgumentError("Table ID is required")
        table = self._repository.get_by_id(table_id)
        if table is None:
            raise NotFoundError(f"Table with ID {table_id} not found")
        return table

    def list_tables(self, filter: dict[str, Any] | None = None) -> list[RandomTable]:
        return self._repository.list(filter)

    def update_table(
        self,
        table_id: str,
        name: str | None = None,
        description: str | None = None,
        add: list[TableEntry | dict[str, Any]] | None = None,
        update: list[dict[str, Any]] | None = None,
        remove: list[str] | None = None,
    ) -> RandomTable:
        """Apply name/description, then added, updated and removed entries.

        `update` items are {"id": ..., "content"?, "weight"?, "range"?}.
        Nothing is persisted if any step fails.
        """
        table = self.get_table(table_id)

        if name is not None or description is not None:
            table = RandomTable(
                id=table.id,
                name=table.name if name is None else name,
                description=table.description if description is None else description,
                entries=table.entries,
            )
        for entry in add or []:
            table.add_entry(entry if isinstance(entry, TableEntry) else build_entry(entry))
        for change in update or []:
            entry_range = change.get("range")
            if isinstance(entry_range, dict):
                entry_range = Range.model_validate(entry_range)
            table.update_entry(
                change["id"],
                content=change.get("content"),
                weight=change.get("weight"),
                range=entry_range,
            )
        for entry_id in remove or []:
            table.remove_entry(entry_id)

        self._repository.update(table)
        logger.info("updated table %s", table.id)
        return table

    def delete_table(self, table_id: str) -> None:
        if not table_id:
            raise InvalidArgumentError("Table ID is required")
        self._repository.delete(table_id)
        logger.info("deleted table %s", table_id)


class TemplateService:
    def __init__(self, repository: TemplateRepository) -> None:
        self._repository = repository

    @property
    def repository(self):
        return self._repository

    def create_template(self, name: str, template: str, description: str = "") -> SavedTemplate:
        if not name:
            raise InvalidArgumentError("Template name is required")
        template_id = unique_id(name, lambda c: self._repository.get_by_id(c) is not None)
        saved = SavedTemplate(id=template_id, name=name, description=description, template=template)
        self._repository.save(saved)
        logger.info("created template %s", saved.id)
        return saved

    def get_template(self, template_id: str) -> SavedTemplate:
        if not template_id:
            raise InvalidArgumentError("Template ID is required")
        saved = self._repository.get_by_id(template_id)
        if saved is None:
            raise NotFoundError(f"Template with ID {template_id} not found")
        return saved

    def list_templates(self, filter: dict[str, Any] | None = None) -> list[SavedTemplate]:
        return self._repository.list(filter)

    def update_template(
        self,
        template_id: str,
        name: str | None = None,
        description: str | None = None,
        template: str | None = None,
    ) -> SavedTemplate:
        existing = self.get_template(template_id)
        updated = SavedTemplate(
            id=existing.id,
            name=existing.name if name is None else name,
            description=existing.description if description is None else description,
            template=existing.template if template is None else template,
        )
        self._repository.update(updated)
        logger.info("updated template %s", updated.id)
        return updated

    def delete_template(self, template_id: str) -> None:
        if not template_id:
            raise InvalidArgumentError("Template ID is required")
        self._repository.delete(template_id)
        logger.info("deleted template %s", template_id)
