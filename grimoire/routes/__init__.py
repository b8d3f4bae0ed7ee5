"""FastAPI API endpoints under /api.

Endpoint groups: health + settings, scripts (listing, lint, stateless
resolve/validate), games (setup flow for the lobby). The script repository
and game registry live on app.state and reach handlers through the
dependencies in deps.py.
"""

from fastapi import APIRouter

from .games import router as games_router
from .scripts import router as scripts_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(scripts_router)
router.include_router(games_router)
