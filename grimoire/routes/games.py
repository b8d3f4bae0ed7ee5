"""Game setup endpoints used by the lobby."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from grimoire.games import Game, GameRegistry, SetupError
from grimoire.storage import DataError, ScriptNotFound

from .deps import get_games
from .models import CreateGame, SetupCharactersBody

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_game(games: GameRegistry, game_id: str) -> Game:
    game = games.get_game(game_id)
    if not game:
        raise HTTPException(404, "Game not found")
    return game


@router.post("/games", status_code=201)
async def create_game(body: CreateGame, games: GameRegistry = Depends(get_games)):
    """Register a game for a script and player count."""
    try:
        game = games.create_game(body.script_id, body.player_count, body.storyteller_seat_id)
    except ScriptNotFound:
        raise HTTPException(404, "Script not found")
    except DataError as e:
        logger.error(f"Cannot load script {body.script_id}: {e}")
        raise HTTPException(500, "Script data is invalid")
    return game


@router.get("/games/{game_id}/setup")
async def get_setup(game_id: str, games: GameRegistry = Depends(get_games)):
    """Setup state with expected distribution and available characters."""
    game = _get_game(games, game_id)
    try:
        return games.setup_state(game)
    except DataError:
        logger.exception(f"Error getting setup state for game {game_id}")
        raise HTTPException(500, "Script data is invalid")


@router.post("/games/{game_id}/setup/characters")
async def select_characters(
    game_id: str, body: SetupCharactersBody, games: GameRegistry = Depends(get_games)
):
    """Resolve the storyteller's selection into the game's lineup."""
    game = _get_game(games, game_id)
    try:
        games.select_characters(game, body.storyteller_seat_id, body.character_ids)
    except SetupError as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=400)
    except DataError:
        logger.exception(f"Error selecting setup characters for game {game_id}")
        return JSONResponse({"success": False, "error": "Script data is invalid"}, status_code=500)
    return {"success": True}


@router.post("/games/{game_id}/setup/validate")
async def validate_setup(
    game_id: str, body: SetupCharactersBody, games: GameRegistry = Depends(get_games)
):
    """Validate the storyteller's selection as a finished lineup."""
    game = _get_game(games, game_id)
    try:
        result = games.validate_selection(game, body.storyteller_seat_id, body.character_ids)
    except SetupError as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=400)
    except DataError:
        logger.exception(f"Error validating setup for game {game_id}")
        return JSONResponse({"success": False, "error": "Script data is invalid"}, status_code=500)
    return {"success": True, "valid": result.is_valid, "details": result.messages()}
