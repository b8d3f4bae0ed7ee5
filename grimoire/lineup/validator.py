"""Validate a manually completed selection."""

from __future__ import annotations

from collections.abc import Sequence

from grimoire.catalog import CharacterCatalog
from grimoire.models import Distribution, Script, ValidationIssue, ValidationResult

from .distribution import target_distribution
from .modifiers import adjusted_distribution, distribution_issues, evaluate_modifiers


def expected_distribution(
    script: Script, player_count: int, selection: Sequence[str] = ()
) -> Distribution:
    """Target counts plus the adjustCounts deltas the selection triggers."""
    return adjusted_distribution(target_distribution(script, player_count), script, selection)


def validate_setup(
    script: Script | None,
    catalog: CharacterCatalog,
    player_count: int,
    selection: Sequence[str],
) -> ValidationResult:
    """Report every distribution and modifier violation in `selection`.

    The selection is read, never changed. A missing script yields a single
    noScript issue.
    """
    if script is None:
        return ValidationResult(issues=[ValidationIssue(kind="noScript", message="No script selected")])

    selection = list(selection)
    expected = expected_distribution(script, player_count, selection)
    issues = distribution_issues(catalog, selection, expected)
    issues += evaluate_modifiers(script, selection)
    return ValidationResult(issues=issues)
