"""Modifier rules: fill mode (mutate a working selection) and validate mode.

Fill mode runs after seeding and applies rule types in a fixed order:
  1. mutuallyExclusive — drop the later-listed member until one remains
  2. requires          — add missing required ids (required ids are protected)
  3. atLeastOneOf      — add the first pool candidate when none present (protected)
  4. adjustCounts      — shift team targets; fill shortfalls, then trim
                         surpluses from the end of the selection, skipping
                         protected ids

Fills never pick a candidate whose mutuallyExclusive partner is already
selected.

Every change appends an audit note. Unknown ids, empty candidate lists and
unreachable targets become notes; nothing here raises.

Validate mode never mutates the selection and reports ValidationIssues
instead. requires / mutuallyExclusive / atLeastOneOf never change totals;
only adjustCounts deltas shift the expected distribution.

Sets are used for membership tests only. Every loop walks the pool, the
selection or a rule's own list so results are reproducible.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence

from grimoire.catalog import CharacterCatalog
from grimoire.models import (
    COUNT_KEYS,
    AdjustCountsRule,
    AtLeastOneOfRule,
    Distribution,
    MutuallyExclusiveRule,
    RequiresRule,
    Script,
    ValidationIssue,
)


# ── Shared helpers ───────────────────────────────────────


def active_adjustments(
    rules: Iterable[AdjustCountsRule], selection: Iterable[str]
) -> tuple[dict[str, int], list[AdjustCountsRule]]:
    """Summed per-team delta of every rule whose trigger is selected."""
    present = set(selection)
    total = dict.fromkeys(COUNT_KEYS, 0)
    active = []
    for rule in rules:
        if rule.when_character not in present:
            continue
        active.append(rule)
        for key, value in rule.delta.items():
            if key in total:
                total[key] += value
    return total, active


def _excluded_by(
    char_id: str, taken: set[str], exclusive: Iterable[MutuallyExclusiveRule]
) -> bool:
    """True when a mutuallyExclusive partner of `char_id` is already taken."""
    for rule in exclusive:
        if char_id in rule.characters and any(
            c != char_id and c in taken for c in rule.characters
        ):
            return True
    return False


def _next_candidate(
    pool: Sequence[str],
    catalog: CharacterCatalog,
    count_key: str,
    taken: set[str],
    exclusive: Sequence[MutuallyExclusiveRule] = (),
) -> str | None:
    for char_id in pool:
        if char_id in taken or catalog.count_key_of(char_id) != count_key:
            continue
        if _excluded_by(char_id, taken, exclusive):
            continue
        return char_id
    return None


# ── Fill mode ────────────────────────────────────────────


def seed_to_target(
    selection: list[str],
    target: Distribution,
    pool: Sequence[str],
    catalog: CharacterCatalog,
    exclusive: Sequence[MutuallyExclusiveRule] = (),
) -> list[str]:
    """Add pool members, team by team in pool order, until `target` is met.

    Candidates whose mutuallyExclusive partner is already selected are
    skipped. Mutates `selection`. Surpluses are left alone. Returns audit
    notes.
    """
    notes: list[str] = []
    taken = set(selection)
    counts = catalog.tally(selection)
    for key in COUNT_KEYS:
        have = counts.get(key)
        want = target.get(key)
        while have < want:
            candidate = _next_candidate(pool, catalog, key, taken, exclusive)
            if candidate is None:
                notes.append(f"seed: pool exhausted for {key} ({have}/{want})")
                break
            selection.append(candidate)
            taken.add(candidate)
            have += 1
            notes.append(f"seed: added '{candidate}' to reach base {key}")
    return notes


def apply_mutually_exclusive(
    selection: list[str], rules: Iterable[MutuallyExclusiveRule]
) -> list[str]:
    notes: list[str] = []
    for rule in rules:
        present = [c for c in rule.characters if c in selection]
        while len(present) > 1:
            drop = present[-1]
            selection.remove(drop)
            notes.append(f"mutuallyExclusive: removed '{drop}' ({', '.join(rule.characters)})")
            present = present[:-1]
    return notes


def apply_requires(
    selection: list[str],
    rules: Iterable[RequiresRule],
    pool: Sequence[str],
    protected: set[str],
) -> list[str]:
    notes: list[str] = []
    in_pool = set(pool)
    for rule in rules:
        if rule.when_character not in selection:
            continue
        for req in rule.require_characters:
            if req in selection:
                protected.add(req)
                continue
            if req not in in_pool:
                notes.append(f"requires: '{req}' needed by '{rule.when_character}' is not in the script pool")
                continue
            selection.append(req)
            protected.add(req)
            notes.append(f"requires: added '{req}' due to '{rule.when_character}'")
    return notes


def apply_at_least_one_of(
    selection: list[str],
    rules: Iterable[AtLeastOneOfRule],
    pool: Sequence[str],
    protected: set[str],
) -> list[str]:
    notes: list[str] = []
    for rule in rules:
        if any(c in selection for c in rule.characters):
            continue
        wanted = set(rule.characters)
        pick = next((c for c in pool if c in wanted), None)
        if pick is None:
            notes.append(f"atLeastOneOf: no candidate in pool from [{', '.join(rule.characters)}]")
            continue
        selection.append(pick)
        protected.add(pick)
        notes.append(f"atLeastOneOf: added '{pick}' from [{', '.join(rule.characters)}]")
    return notes


def apply_adjust_counts(
    selection: list[str],
    rules: Iterable[AdjustCountsRule],
    pool: Sequence[str],
    catalog: CharacterCatalog,
    protected: set[str],
    exclusive: Sequence[MutuallyExclusiveRule] = (),
) -> list[str]:
    notes: list[str] = []
    delta, active = active_adjustments(rules, selection)
    for rule in active:
        notes.append(f"adjustCounts: {rule.when_character} => {json.dumps(rule.delta)}")
    if all(v == 0 for v in delta.values()):
        return notes

    current = catalog.tally(selection)
    target = {key: max(0, current.get(key) + delta[key]) for key in COUNT_KEYS}

    taken = set(selection)
    for key in COUNT_KEYS:
        have = current.get(key)
        while have < target[key]:
            candidate = _next_candidate(pool, catalog, key, taken, exclusive)
            if candidate is None:
                notes.append(f"adjustCounts: unable to fill {key} ({have}/{target[key]})")
                break
            selection.append(candidate)
            taken.add(candidate)
            have += 1
            notes.append(f"adjustCounts: added '{candidate}' to meet {key} target")

    for key in COUNT_KEYS:
        have = catalog.tally(selection).get(key)
        while have > target[key]:
            idx = next(
                (
                    i
                    for i in range(len(selection) - 1, -1, -1)
                    if selection[i] not in protected
                    and catalog.count_key_of(selection[i]) == key
                ),
                None,
            )
            if idx is None:
                notes.append(f"adjustCounts: unable to reduce {key} ({have}/{target[key]})")
                break
            removed = selection.pop(idx)
            have -= 1
            notes.append(f"adjustCounts: removed '{removed}' to meet {key} target")
    return notes


def apply_modifiers(
    script: Script, catalog: CharacterCatalog, selection: Sequence[str]
) -> tuple[list[str], list[str]]:
    """Run fill mode over a copy of `selection`. Returns (selection, notes)."""
    working = list(selection)
    pool = script.pool
    protected: set[str] = set()
    notes: list[str] = []
    notes += apply_mutually_exclusive(working, script.rules_of(MutuallyExclusiveRule))
    notes += apply_requires(working, script.rules_of(RequiresRule), pool, protected)
    notes += apply_at_least_one_of(working, script.rules_of(AtLeastOneOfRule), pool, protected)
    notes += apply_adjust_counts(
        working,
        script.rules_of(AdjustCountsRule),
        pool,
        catalog,
        protected,
        script.rules_of(MutuallyExclusiveRule),
    )
    return working, notes


# ── Validate mode ────────────────────────────────────────


def adjusted_distribution(
    target: Distribution, script: Script, selection: Iterable[str]
) -> Distribution:
    """`target` shifted by the adjustCounts rules the selection triggers.

    Active rules apply in declaration order and each team is clamped at 0
    after every rule. Fill mode sums the deltas first and clamps once.
    """
    _, active = active_adjustments(script.rules_of(AdjustCountsRule), selection)
    counts = {key: target.get(key) for key in COUNT_KEYS}
    for rule in active:
        for key, value in rule.delta.items():
            if key in counts:
                counts[key] = max(0, counts[key] + value)
    return Distribution.clamped(**counts)


def distribution_issues(
    catalog: CharacterCatalog, selection: Sequence[str], expected: Distribution
) -> list[ValidationIssue]:
    issues = []
    tally = catalog.tally(selection)
    for key in COUNT_KEYS:
        got, want = tally.get(key), expected.get(key)
        if got != want:
            issues.append(ValidationIssue(
                kind="distribution",
                message=f"{key} count {got} / {want}",
                related_character_ids=catalog.members_of(selection, key),
            ))
    return issues


def evaluate_modifiers(script: Script, selection: Sequence[str]) -> list[ValidationIssue]:
    """Rule violations for a fixed selection, in modifier declaration order."""
    present = set(selection)
    issues: list[ValidationIssue] = []
    for rule in script.modifiers:
        if isinstance(rule, RequiresRule):
            if rule.when_character not in present:
                continue
            for req in rule.require_characters:
                if req not in present:
                    issues.append(ValidationIssue(
                        kind="requires",
                        message=f"{rule.when_character} requires {req}",
                        related_character_ids=[rule.when_character, req],
                    ))
        elif isinstance(rule, MutuallyExclusiveRule):
            together = [c for c in rule.characters if c in present]
            if len(together) > 1:
                issues.append(ValidationIssue(
                    kind="mutuallyExclusive",
                    message=f"Exclusive characters together: {', '.join(together)}",
                    related_character_ids=together,
                ))
        elif isinstance(rule, AtLeastOneOfRule):
            if not any(c in present for c in rule.characters):
                issues.append(ValidationIssue(
                    kind="atLeastOneOf",
                    message=f"Need at least one of: {', '.join(rule.characters)}",
                    related_character_ids=list(rule.characters),
                ))
    return issues
