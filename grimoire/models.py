"""Core domain models.

Scripts and characters are loaded from JSON through these types, and the
lineup engine returns its results as these types. Pydantic validates every
record at the storage boundary; JSON keeps the camelCase field names used by
the lobby client (`whenCharacter`, `requireCharacters`, `appliedModifiers`).
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

Team = Literal["townsfolk", "outsider", "minion", "demon", "traveller", "fabled"]

# Distribution field for each team that counts toward the lineup.
TEAM_TO_COUNT_KEY: dict[str, str] = {
    "townsfolk": "townsfolk",
    "outsider": "outsiders",
    "minion": "minions",
    "demon": "demons",
}

COUNT_KEY_TO_TEAM: dict[str, str] = {v: k for k, v in TEAM_TO_COUNT_KEY.items()}

# Fixed order for every per-team loop (seeding, filling, reporting).
COUNT_KEYS: tuple[str, ...] = ("townsfolk", "outsiders", "minions", "demons")

IssueKind = Literal[
    "distribution",
    "requires",
    "mutuallyExclusive",
    "atLeastOneOf",
    "noScript",
]


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Character(_Record):
    """A character from the catalog."""

    id: str
    name: str = ""
    team: Team
    ability: str = ""

    @field_validator("team", mode="before")
    @classmethod
    def _lowercase_team(cls, value):
        return value.lower() if isinstance(value, str) else value


class Distribution(BaseModel):
    """Per-team character counts."""

    townsfolk: int = Field(default=0, ge=0)
    outsiders: int = Field(default=0, ge=0)
    minions: int = Field(default=0, ge=0)
    demons: int = Field(default=0, ge=0)

    @classmethod
    def clamped(cls, **counts: int) -> Distribution:
        """Build a distribution, raising negative counts to zero."""
        return cls(**{key: max(0, counts.get(key, 0)) for key in COUNT_KEYS})

    def get(self, key: str) -> int:
        return getattr(self, key)

    def total(self) -> int:
        return sum(self.get(key) for key in COUNT_KEYS)


# ── Modifier rules ───────────────────────────────────────


class RequiresRule(_Record):
    type: Literal["requires"] = "requires"
    when_character: str = Field(alias="whenCharacter")
    require_characters: list[str] = Field(alias="requireCharacters", default_factory=list)


class MutuallyExclusiveRule(_Record):
    type: Literal["mutuallyExclusive"] = "mutuallyExclusive"
    characters: list[str] = Field(default_factory=list)


class AtLeastOneOfRule(_Record):
    type: Literal["atLeastOneOf"] = "atLeastOneOf"
    characters: list[str] = Field(default_factory=list)


class AdjustCountsRule(_Record):
    type: Literal["adjustCounts"] = "adjustCounts"
    when_character: str = Field(alias="whenCharacter")
    delta: dict[str, int] = Field(default_factory=dict)  # keys outside COUNT_KEYS are ignored


ModifierRule = Annotated[
    Union[RequiresRule, MutuallyExclusiveRule, AtLeastOneOfRule, AdjustCountsRule],
    Field(discriminator="type"),
]


class Script(_Record):
    """A ruleset: the character pool, composition overrides, and modifiers.

    `characters` is the pool. Its order decides which characters are picked
    first when filling and is part of the script, not an accident of storage.
    """

    id: str
    name: str = ""
    characters: list[str] = Field(default_factory=list)
    # team values stay raw; lineup.distribution falls back per team on bad ones
    composition: dict[str, dict[str, Any]] | None = None
    modifiers: list[ModifierRule] = Field(default_factory=list)

    @property
    def pool(self) -> list[str]:
        return list(self.characters)

    def rules_of(self, rule_type: type[BaseModel]) -> list:
        """Modifiers of one type, in declaration order."""
        return [m for m in self.modifiers if isinstance(m, rule_type)]


# ── Results ──────────────────────────────────────────────


class ResolutionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selection: list[str]
    counts: Distribution
    applied_modifiers: list[str] = Field(alias="appliedModifiers", default_factory=list)


class ValidationIssue(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: IssueKind
    message: str
    related_character_ids: list[str] = Field(
        alias="relatedCharacterIds", default_factory=list
    )


class ValidationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    issues: list[ValidationIssue] = Field(default_factory=list)

    @computed_field(alias="isValid")
    @property
    def is_valid(self) -> bool:
        return not self.issues

    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]
