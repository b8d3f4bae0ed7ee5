"""Read-only character lookup shared by the resolver and the validator."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from grimoire.models import COUNT_KEYS, TEAM_TO_COUNT_KEY, Character, Distribution


class CharacterCatalog:
    """Maps character id → Character.

    Built once from loaded records and never mutated afterwards. Ids that are
    not in the catalog have no team and are left out of every tally.
    """

    def __init__(self, characters: Iterable[Character]) -> None:
        self._by_id: dict[str, Character] = {}
        for char in characters:
            if char.id in self._by_id:
                raise ValueError(f"Duplicate character id: {char.id}")
            self._by_id[char.id] = char

    def __contains__(self, char_id: object) -> bool:
        return char_id in self._by_id

    def __iter__(self) -> Iterator[Character]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, char_id: str) -> Character | None:
        return self._by_id.get(char_id)

    def team_of(self, char_id: str) -> str | None:
        char = self._by_id.get(char_id)
        return char.team if char else None

    def count_key_of(self, char_id: str) -> str | None:
        """Distribution field the character counts toward, or None."""
        team = self.team_of(char_id)
        return TEAM_TO_COUNT_KEY.get(team) if team else None

    def tally(self, ids: Iterable[str]) -> Distribution:
        """Count ids per team. Unknown ids, travellers and fabled are skipped."""
        counts = dict.fromkeys(COUNT_KEYS, 0)
        for char_id in ids:
            key = self.count_key_of(char_id)
            if key:
                counts[key] += 1
        return Distribution(**counts)

    def members_of(self, ids: Iterable[str], count_key: str) -> list[str]:
        """Ids (in the given order) that count toward one team."""
        return [char_id for char_id in ids if self.count_key_of(char_id) == count_key]
