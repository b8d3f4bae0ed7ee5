"""Request dependencies: the repository and game registry owned by the app."""

from fastapi import Request

from grimoire.games import GameRegistry
from grimoire.storage import ScriptRepository


def get_repository(request: Request) -> ScriptRepository:
    return request.app.state.repository


def get_games(request: Request) -> GameRegistry:
    return request.app.state.games
