from pathlib import Path

from fastapi import FastAPI

from grimoire import config
from grimoire.games import GameRegistry
from grimoire.routes import router
from grimoire.storage import ScriptRepository


def create_app(data_dir: Path | None = None) -> FastAPI:
    resolved = data_dir or config.data_dir()
    repository = ScriptRepository(resolved)

    app = FastAPI(title="Grimoire Setup")
    app.state.repository = repository
    app.state.games = GameRegistry(repository)
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses DATA_DIR env var or the presets)
app = create_app()
