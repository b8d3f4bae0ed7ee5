"""JSON file storage for scripts and characters.

Scripts and characters live in flat JSON files under a configurable base
directory. The repository reads them once and hands out the same parsed
objects afterwards; nothing here writes.

Directory layout:

    {base}/
      characters.json        ← list of Character records
      scripts/
        {id}.json            ← one Script record per file
      config.json            ← optional settings (see grimoire.config)
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from grimoire.catalog import CharacterCatalog
from grimoire.models import Character, Script

logger = logging.getLogger(__name__)

_SCRIPT_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


class StorageError(Exception):
    """Base class for load failures."""


class ScriptNotFound(StorageError):
    """Raised when no script file exists for an id."""


class DataError(StorageError):
    """Raised when a data file is unreadable or does not match its schema."""


class ScriptRepository:
    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        self._scripts_dir = self._base / "scripts"
        self._scripts: dict[str, Script] = {}
        self._catalog: CharacterCatalog | None = None

    @property
    def base_path(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _script_file(self, script_id: str) -> Path:
        return self._scripts_dir / f"{script_id}.json"

    def _characters_file(self) -> Path:
        return self._base / "characters.json"

    def _read_json(self, path: Path) -> Any:
        try:
            return json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise DataError(f"Cannot read {path.name}: {e}") from e

    # ------------------------------------------------------------------
    # Scripts
    # ------------------------------------------------------------------

    def list_scripts(self) -> list[dict[str, str]]:
        """Id and name of every script on disk, sorted by id."""
        if not self._scripts_dir.is_dir():
            return []
        result = []
        for path in sorted(self._scripts_dir.glob("*.json")):
            try:
                script = self.load_script(path.stem)
            except DataError as e:
                logger.warning(f"Skipping script {path.stem}: {e}")
                continue
            result.append({"id": script.id, "name": script.name or script.id})
        return result

    def load_script(self, script_id: str) -> Script:
        """Load and cache a script by id.

        The file name is authoritative: a record without an `id` gets the
        file stem.
        """
        if script_id in self._scripts:
            return self._scripts[script_id]
        if not _SCRIPT_ID_RE.match(script_id):
            raise ScriptNotFound(script_id)
        path = self._script_file(script_id)
        if not path.is_file():
            raise ScriptNotFound(script_id)
        data = self._read_json(path)
        if not isinstance(data, dict):
            raise DataError(f"{path.name} must contain a JSON object")
        data.setdefault("id", script_id)
        try:
            script = Script.model_validate(data)
        except ValidationError as e:
            raise DataError(f"Invalid script {script_id}: {e}") from e
        self._scripts[script_id] = script
        logger.info(f"Loaded script {script_id} ({len(script.characters)} characters)")
        return script

    # ------------------------------------------------------------------
    # Characters
    # ------------------------------------------------------------------

    def load_catalog(self) -> CharacterCatalog:
        """Load and cache the character catalog."""
        if self._catalog is not None:
            return self._catalog
        path = self._characters_file()
        if not path.is_file():
            raise DataError(f"Missing {path.name} in {self._base}")
        data = self._read_json(path)
        if not isinstance(data, list):
            raise DataError(f"{path.name} must contain a JSON list")
        try:
            catalog = CharacterCatalog(Character.model_validate(c) for c in data)
        except (ValidationError, ValueError) as e:
            raise DataError(f"Invalid character data: {e}") from e
        self._catalog = catalog
        logger.info(f"Loaded {len(catalog)} characters")
        return catalog

    def snapshot(self, script_id: str) -> tuple[Script, CharacterCatalog]:
        """Script and catalog together, as handed to the lineup engine."""
        return self.load_script(script_id), self.load_catalog()
