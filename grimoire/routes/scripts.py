"""Script listing and stateless lineup endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from grimoire.catalog import CharacterCatalog
from grimoire.lineup import detect_script_issues, resolve_lineup, validate_setup
from grimoire.models import Script
from grimoire.storage import DataError, ScriptNotFound, ScriptRepository

from .deps import get_repository
from .models import LineupBody

logger = logging.getLogger(__name__)

router = APIRouter()


def load_snapshot(repository: ScriptRepository, script_id: str) -> tuple[Script, CharacterCatalog]:
    """Script + catalog, or the matching HTTP error."""
    try:
        return repository.snapshot(script_id)
    except ScriptNotFound:
        raise HTTPException(404, "Script not found")
    except DataError as e:
        logger.error(f"Cannot load script {script_id}: {e}")
        raise HTTPException(500, "Script data is invalid")


@router.get("/scripts")
async def list_scripts(repository: ScriptRepository = Depends(get_repository)):
    """List available scripts (id + name)."""
    return repository.list_scripts()


@router.get("/scripts/{script_id}")
async def get_script(script_id: str, repository: ScriptRepository = Depends(get_repository)):
    """Get a script with its pool expanded to full character records."""
    script, catalog = load_snapshot(repository, script_id)
    data = script.model_dump(by_alias=True, exclude_none=True)
    data["roles"] = [c.model_dump() for c in map(catalog.get, script.characters) if c]
    return data


@router.get("/scripts/{script_id}/issues")
async def get_script_issues(script_id: str, repository: ScriptRepository = Depends(get_repository)):
    """Advisory lint findings for a script."""
    script, catalog = load_snapshot(repository, script_id)
    return {"issues": detect_script_issues(script, catalog)}


@router.post("/scripts/{script_id}/resolve")
async def resolve_script_lineup(
    script_id: str, body: LineupBody, repository: ScriptRepository = Depends(get_repository)
):
    """Auto-fill a partial selection into a full lineup."""
    script, catalog = load_snapshot(repository, script_id)
    result = resolve_lineup(script, catalog, body.player_count, body.selection)
    return result.model_dump(by_alias=True)


@router.post("/scripts/{script_id}/validate")
async def validate_script_lineup(
    script_id: str, body: LineupBody, repository: ScriptRepository = Depends(get_repository)
):
    """Validate a finished selection."""
    script, catalog = load_snapshot(repository, script_id)
    result = validate_setup(script, catalog, body.player_count, body.selection)
    return result.model_dump(by_alias=True)
