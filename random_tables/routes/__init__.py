"""FastAPI API endpoints under /api.

Endpoint groups: tables (CRUD + roll), templates (CRUD + evaluate), health.
Every handler reads the wired services from app.state.services.
"""

from fastapi import APIRouter

from .tables import router as tables_router
from .templates import router as templates_router

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


router.include_router(tables_router)
router.include_router(templates_router)
