"""Table CRUD + roll endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from random_tables.config import Services
from random_tables.errors import EmptyTableError, NotFoundError
from random_tables.schemas import CountBody, CreateTable, UpdateTable, entry_dicts, update_dicts

from .deps import get_services

router = APIRouter()


@router.get("/tables")
async def list_tables(name: str | None = None, services: Services = Depends(get_services)):
    """List table summaries, optionally only those with an exact name."""
    tables = services.tables.list_tables({"name": name} if name else None)
    return [t.summary() for t in tables]


@router.post("/tables", status_code=201)
async def create_table(body: CreateTable, services: Services = Depends(get_services)):
    """Create a new table; its id is derived from the name."""
    try:
        table = services.tables.create_table(body.name, body.description, entry_dicts(body.entries))
    except ValueError as e:
        raise HTTPException(400, str(e))
    return table.model_dump(mode="json", exclude_none=True)


@router.get("/tables/{table_id}")
async def get_table(table_id: str, services: Services = Depends(get_services)):
    """Get a table with all of its entries."""
    try:
        table = services.tables.get_table(table_id)
    except NotFoundError:
        raise HTTPException(404, "Table not found")
    return table.model_dump(mode="json", exclude_none=True)


@router.patch("/tables/{table_id}")
async def update_table(table_id: str, body: UpdateTable, services: Services = Depends(get_services)):
    """Rename/describe a table and add, update or remove entries."""
    try:
        table = services.tables.update_table(
            table_id,
            name=body.name,
            description=body.description,
            add=entry_dicts(body.add),
            update=update_dicts(body.update),
            remove=body.remove,
        )
    except NotFoundError as e:
        raise HTTPException(404, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))
    return table.model_dump(mode="json", exclude_none=True)


@router.delete("/tables/{table_id}")
async def delete_table(table_id: str, services: Services = Depends(get_services)):
    """Delete a table."""
    try:
        services.tables.delete_table(table_id)
    except NotFoundError:
        raise HTTPException(404, "Table not found")
    return {"ok": True}


@router.post("/tables/{table_id}/roll")
async def roll_table(table_id: str, body: CountBody | None = None, services: Services = Depends(get_services)):
    """Roll on a table, resolving references in template entries."""
    count = body.count if body else 1
    try:
        results = services.rolls.roll(table_id, count)
    except NotFoundError:
        raise HTTPException(404, "Table not found")
    except (ValueError, EmptyTableError) as e:
        raise HTTPException(400, str(e))
    return {"results": [r.to_dict() for r in results]}
