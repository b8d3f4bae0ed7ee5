"""Setup state for games in the lobby.

A game records its script, player count, storyteller seat and the lineup
chosen so far. Games are held in memory by a GameRegistry owned by the app;
they do not survive a restart.

Setup flow (storyteller only):
  select_characters  — resolve the submitted ids into a full lineup and store it
  validate_selection — check the submitted ids as a finished lineup
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from pydantic import BaseModel, Field

from grimoire.lineup import expected_distribution, resolve_lineup, validate_setup
from grimoire.storage import ScriptRepository

logger = logging.getLogger(__name__)


class Game(BaseModel):
    id: str
    script_id: str
    player_count: int
    storyteller_seat_id: str
    selected_characters: list[str] = Field(default_factory=list)
    applied_modifiers: list[str] = Field(default_factory=list)


class SetupError(Exception):
    """Raised for a setup request the game cannot accept."""


class GameRegistry:
    def __init__(self, repository: ScriptRepository) -> None:
        self._repository = repository
        self._games: dict[str, Game] = {}

    @property
    def repository(self) -> ScriptRepository:
        return self._repository

    def create_game(self, script_id: str, player_count: int, storyteller_seat_id: str) -> Game:
        """Register a game. Raises ScriptNotFound for an unknown script.

        When the script has a composition table the lineup starts out
        resolved for the player count.
        """
        script, catalog = self._repository.snapshot(script_id)
        game = Game(
            id=uuid.uuid4().hex,
            script_id=script_id,
            player_count=player_count,
            storyteller_seat_id=storyteller_seat_id,
        )
        if script.composition:
            result = resolve_lineup(script, catalog, player_count)
            game.selected_characters = result.selection
            game.applied_modifiers = result.applied_modifiers
            logger.info(f"Seeded setup from composition: {'; '.join(result.applied_modifiers)}")
        self._games[game.id] = game
        logger.info(f"Created game {game.id} ({script_id}, {player_count} players)")
        return game

    def get_game(self, game_id: str) -> Game | None:
        return self._games.get(game_id)

    def _check_request(self, game: Game, storyteller_seat_id: str, character_ids: list[str]) -> None:
        if storyteller_seat_id != game.storyteller_seat_id:
            raise SetupError("Only the storyteller can change the setup")
        script = self._repository.load_script(game.script_id)
        in_pool = set(script.characters)
        invalid = [c for c in character_ids if c not in in_pool]
        if invalid:
            raise SetupError(f"Invalid characters: {', '.join(invalid)}")

    def select_characters(
        self, game: Game, storyteller_seat_id: str, character_ids: list[str]
    ) -> Game:
        """Resolve the submitted ids into a full lineup and store it on the game."""
        self._check_request(game, storyteller_seat_id, character_ids)
        script, catalog = self._repository.snapshot(game.script_id)
        result = resolve_lineup(script, catalog, game.player_count, character_ids)
        game.selected_characters = result.selection
        game.applied_modifiers = result.applied_modifiers
        logger.info(
            f"Storyteller {storyteller_seat_id} selected characters: {', '.join(result.selection)}"
        )
        return game

    def validate_selection(self, game: Game, storyteller_seat_id: str, character_ids: list[str]):
        """Validate the submitted ids as the game's finished lineup."""
        self._check_request(game, storyteller_seat_id, character_ids)
        script, catalog = self._repository.snapshot(game.script_id)
        result = validate_setup(script, catalog, game.player_count, character_ids)
        if not result.is_valid:
            logger.warning(f"Setup validation failed for game {game.id}: {'; '.join(result.messages())}")
        return result

    def setup_state(self, game: Game) -> dict[str, Any]:
        """Game setup enriched with the expected distribution and available characters."""
        script, catalog = self._repository.snapshot(game.script_id)
        available = []
        for char_id in script.characters:
            char = catalog.get(char_id)
            available.append({
                "id": char_id,
                "name": char.name if char else char_id,
                "team": char.team if char else "unknown",
                "ability": char.ability if char else "",
            })
        expected = expected_distribution(script, game.player_count, game.selected_characters)
        return {
            **game.model_dump(),
            "script_name": script.name or script.id,
            "expected_distribution": expected.model_dump(),
            "available_characters": available,
        }
