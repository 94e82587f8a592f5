"""FastMCP server exposing random tables and templates.

Tools:
  - create_table / update_table / list_tables   — table management
  - get_table                                   — only when resources are disabled
  - roll_on_table(table_id, count)              — roll and resolve references
  - create_template / get_template / list_templates / update_template /
    delete_template                             — saved template management
  - evaluate_template(template_id, count)       — resolve a saved template

Resources:
  - random-tables://tables      table summaries
  - random-tables://templates   template summaries
  - template://{template_id}    one saved template
  - table://{table_id}          one table (only when CAN_USE_RESOURCE=true)

Errors raised by the services propagate; FastMCP reports them as tool
results with isError set.

Usage:
    python main.py mcp
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import Services, Settings, build_services
from .schemas import EntryInput, EntryUpdate, entry_dicts, update_dicts

logger = logging.getLogger(__name__)

SERVER_NAME = "random-tables"

REFERENCE_HELP = (
    "Entries can reference other tables with "
    "{{reference-title::table-id::table-name::roll-count::separator}}; "
    "roll-count (default 1) and separator (default ', ') are optional."
)


def _dump(model: Any) -> dict:
    return model.model_dump(mode="json", exclude_none=True)


def create_server(services: Services, can_use_resource: bool = False) -> FastMCP:
    """Build a FastMCP instance bound to `services`."""
    mcp = FastMCP(SERVER_NAME)

    # ── Tables ───────────────────────────────────────────

    @mcp.tool(description=f"Create a new random table. {REFERENCE_HELP}")
    def create_table(
        name: str,
        description: str = "",
        entries: list[EntryInput] | None = None,
    ) -> dict:
        table = services.tables.create_table(name, description, entry_dicts(entries))
        return {"table_id": table.id}

    @mcp.tool()
    def list_tables(filter: dict[str, Any] | None = None) -> dict:
        """List available random tables, optionally filtered (e.g. {"name": "Colors"})."""
        return {"tables": [t.summary() for t in services.tables.list_tables(filter)]}

    @mcp.tool(description=f"Update a table's name, description or entries. {REFERENCE_HELP}")
    def update_table(
        table_id: str,
        name: str | None = None,
        description: str | None = None,
        add: list[EntryInput] | None = None,
        update: list[EntryUpdate] | None = None,
        remove: list[str] | None = None,
    ) -> dict:
        table = services.tables.update_table(
            table_id,
            name=name,
            description=description,
            add=entry_dicts(add),
            update=update_dicts(update),
            remove=remove,
        )
        return {"table": _dump(table)}

    @mcp.tool()
    def roll_on_table(table_id: str, count: int = 1) -> dict:
        """Roll on a table; template entries come back with resolved_content."""
        results = services.rolls.roll(table_id, count)
        return {"results": [r.to_dict() for r in results]}

    if can_use_resource:
        @mcp.resource("table://{table_id}", mime_type="application/json")
        def table_resource(table_id: str) -> str:
            """A single random table with all of its entries."""
            return json.dumps(_dump(services.tables.get_table(table_id)), indent=2)
    else:
        @mcp.tool()
        def get_table(table_id: str) -> dict:
            """Get a table with all of its entries."""
            return {"table": _dump(services.tables.get_table(table_id))}

    @mcp.resource("random-tables://tables", mime_type="application/json")
    def tables_resource() -> str:
        """Summaries of all random tables."""
        return json.dumps({"tables": [t.summary() for t in services.tables.list_tables()]}, indent=2)

    # ── Templates ────────────────────────────────────────

    @mcp.tool(description=f"Save a named template string. {REFERENCE_HELP}")
    def create_template(name: str, template: str, description: str = "") -> dict:
        saved = services.templates.create_template(name, template, description)
        return {"template_id": saved.id}

    @mcp.tool()
    def get_template(template_id: str) -> dict:
        """Get a saved template."""
        return {"template": _dump(services.templates.get_template(template_id))}

    @mcp.tool()
    def list_templates(filter: dict[str, Any] | None = None) -> dict:
        """List saved templates."""
        return {"templates": [t.summary() for t in services.templates.list_templates(filter)]}

    @mcp.tool()
    def update_template(
        template_id: str,
        name: str | None = None,
        description: str | None = None,
        template: str | None = None,
    ) -> dict:
        """Update a saved template's name, description or text."""
        saved = services.templates.update_template(
            template_id, name=name, description=description, template=template,
        )
        return {"template": _dump(saved)}

    @mcp.tool()
    def delete_template(template_id: str) -> dict:
        """Delete a saved template."""
        services.templates.delete_template(template_id)
        return {"ok": True}

    @mcp.tool()
    def evaluate_template(template_id: str, count: int = 1) -> dict:
        """Evaluate a saved template `count` times, rolling every reference."""
        evaluations = services.rolls.evaluate_template(template_id, count)
        return {"results": [_dump(e) for e in evaluations]}

    @mcp.resource("random-tables://templates", mime_type="application/json")
    def templates_resource() -> str:
        """Summaries of all saved templates."""
        return json.dumps(
            {"templates": [t.summary() for t in services.templates.list_templates()]}, indent=2
        )

    @mcp.resource("template://{template_id}", mime_type="application/json")
    def template_resource(template_id: str) -> str:
        """A single saved template."""
        return json.dumps(_dump(services.templates.get_template(template_id)), indent=2)

    return mcp


def run(settings: Settings, services: Services | None = None) -> None:
    """Serve over stdio until the client disconnects."""
    logger.info(
        "starting MCP server (storage=%s, data_dir=%s, resources=%s)",
        settings.storage_backend, settings.data_dir, settings.can_use_resource,
    )
    create_server(services or build_services(settings), settings.can_use_resource).run()


if __name__ == "__main__":
    import sys

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, stream=sys.stderr)
    run(settings)
