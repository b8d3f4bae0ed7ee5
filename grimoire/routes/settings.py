"""Health check and settings endpoints."""

from fastapi import APIRouter, Depends

from grimoire.config import get_config
from grimoire.storage import ScriptRepository

from .deps import get_repository

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(repository: ScriptRepository = Depends(get_repository)):
    """Get app settings (defaults merged with the data dir's config.json)."""
    return get_config(repository.base_path)
