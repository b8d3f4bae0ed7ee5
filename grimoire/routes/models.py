"""Pydantic request models for API endpoints.

Bodies use the camelCase field names the lobby client sends.
"""

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LineupBody(_Body):
    player_count: int = Field(alias="playerCount", ge=1)
    selection: list[str] = Field(default_factory=list)


class CreateGame(_Body):
    script_id: str = Field(alias="scriptId")
    player_count: int = Field(alias="playerCount", ge=1)
    storyteller_seat_id: str = Field(alias="storytellerSeatId")


class SetupCharactersBody(_Body):
    storyteller_seat_id: str = Field(alias="storytellerSeatId", min_length=1)
    character_ids: list[str] = Field(alias="characterIds")
