"""Auto-fill a partial selection into a complete lineup."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from grimoire.catalog import CharacterCatalog
from grimoire.models import MutuallyExclusiveRule, ResolutionResult, Script

from .distribution import target_distribution
from .modifiers import apply_modifiers, seed_to_target

logger = logging.getLogger(__name__)


def _clean_selection(script: Script, selection: Iterable[str]) -> tuple[list[str], list[str]]:
    """Drop duplicates and ids outside the pool, keeping first-seen order."""
    in_pool = set(script.characters)
    kept: list[str] = []
    notes: list[str] = []
    for char_id in selection:
        if char_id in kept:
            continue
        if char_id not in in_pool:
            notes.append(f"selection: ignored '{char_id}' (not in script pool)")
            continue
        kept.append(char_id)
    return kept, notes


def resolve_lineup(
    script: Script,
    catalog: CharacterCatalog,
    player_count: int,
    selection: Iterable[str] = (),
) -> ResolutionResult:
    """Resolve a legal lineup for `player_count` players.

    Target counts come from the base table, replaced by the script's
    composition entry when one matches. The selection is seeded up to the
    target in pool order, then the script's modifiers are applied.
    """
    working, notes = _clean_selection(script, selection)
    target = target_distribution(script, player_count)
    notes += seed_to_target(
        working, target, script.pool, catalog, script.rules_of(MutuallyExclusiveRule)
    )
    working, modifier_notes = apply_modifiers(script, catalog, working)
    notes += modifier_notes

    counts = catalog.tally(working)
    logger.debug(
        f"Resolved {script.id} for {player_count} players: "
        f"{len(working)} characters, {len(notes)} notes"
    )
    return ResolutionResult(selection=working, counts=counts, applied_modifiers=notes)
