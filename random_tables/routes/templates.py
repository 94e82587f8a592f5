"""Saved template CRUD + evaluate endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from random_tables.config import Services
from random_tables.errors import EmptyTableError, NotFoundError
from random_tables.schemas import CountBody, CreateTemplate, UpdateTemplate

from .deps import get_services

router = APIRouter()


@router.get("/templates")
async def list_templates(services: Services = Depends(get_services)):
    """List saved template summaries."""
    return [t.summary() for t in services.templates.list_templates()]


@router.post("/templates", status_code=201)
async def create_template(body: CreateTemplate, services: Services = Depends(get_services)):
    """Save a new template string."""
    try:
        saved = services.templates.create_template(body.name, body.template, body.description)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return saved.model_dump()


@router.get("/templates/{template_id}")
async def get_template(template_id: str, services: Services = Depends(get_services)):
    """Get a single saved template."""
    try:
        return services.templates.get_template(template_id).model_dump()
    except NotFoundError:
        raise HTTPException(404, "Template not found")


@router.patch("/templates/{template_id}")
async def update_template(
    template_id: str, body: UpdateTemplate, services: Services = Depends(get_services)
):
    """Update template fields (name, description, template)."""
    fields = body.model_dump(exclude_none=True)
    try:
        saved = services.templates.update_template(template_id, **fields)
    except NotFoundError:
        raise HTTPException(404, "Template not found")
    except ValueError as e:
        raise HTTPException(400, str(e))
    return saved.model_dump()


@router.delete("/templates/{template_id}")
async def delete_template(template_id: str, services: Services = Depends(get_services)):
    """Delete a saved template."""
    try:
        services.templates.delete_template(template_id)
    except NotFoundError:
        raise HTTPException(404, "Template not found")
    return {"ok": True}


@router.post("/templates/{template_id}/evaluate")
async def evaluate_template(
    template_id: str, body: CountBody | None = None, services: Services = Depends(get_services)
):
    """Evaluate a saved template `count` times."""
    count = body.count if body else 1
    try:
        evaluations = services.rolls.evaluate_template(template_id, count)
    except NotFoundError:
        raise HTTPException(404, "Template not found")
    except (ValueError, EmptyTableError) as e:
        raise HTTPException(400, str(e))
    return {"results": [e.model_dump() for e in evaluations]}
