import json
from pathlib import Path

import pytest

from grimoire.catalog import CharacterCatalog
from grimoire.models import Character, Script

PRESETS_DIR = Path(__file__).parent / "presets"

# a* townsfolk, b* outsiders, c*/x1 minions, d1 demon, t1 traveller
TEST_CHARACTERS = [
    {"id": "a1", "team": "townsfolk"},
    {"id": "a2", "team": "townsfolk"},
    {"id": "a3", "team": "townsfolk"},
    {"id": "a4", "team": "townsfolk"},
    {"id": "b1", "team": "outsider"},
    {"id": "b2", "team": "outsider"},
    {"id": "b3", "team": "outsider"},
    {"id": "c1", "team": "minion"},
    {"id": "c2", "team": "minion"},
    {"id": "x1", "team": "minion"},
    {"id": "d1", "team": "demon"},
    {"id": "t1", "team": "traveller"},
]

SIX_PLAYER_COMPOSITION = {"5-6": {"townsfolk": 3, "outsiders": 1, "minions": 1, "demons": 1}}


@pytest.fixture
def catalog() -> CharacterCatalog:
    return CharacterCatalog(Character.model_validate(c) for c in TEST_CHARACTERS)


@pytest.fixture
def make_script():
    """Build a Script from JSON-shaped fields (camelCase modifiers)."""

    def _make(characters: list[str], **fields) -> Script:
        return Script.model_validate({"id": "test", "characters": characters, **fields})

    return _make


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A throwaway data dir holding TEST_CHARACTERS and one script, "test"."""
    (tmp_path / "characters.json").write_text(json.dumps(TEST_CHARACTERS))
    scripts = tmp_path / "scripts"
    scripts.mkdir()
    (scripts / "test.json").write_text(json.dumps({
        "id": "test",
        "name": "Test Script",
        "characters": ["a1", "a2", "a3", "b1", "b2", "b3", "c1", "x1", "d1"],
        "composition": SIX_PLAYER_COMPOSITION,
        "modifiers": [
            {"type": "adjustCounts", "whenCharacter": "x1", "delta": {"townsfolk": -2, "outsiders": 2}},
        ],
    }))
    return tmp_path
