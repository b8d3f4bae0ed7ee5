"""Advisory checks on a loaded script."""

from __future__ import annotations

from grimoire.catalog import CharacterCatalog
from grimoire.models import COUNT_KEYS, AdjustCountsRule, RequiresRule, Script

from .distribution import ExpressionError, parse_count_expr, parse_count_key

SMALL_POOL = 10


def _rule_references(rule) -> list[str]:
    if isinstance(rule, RequiresRule):
        return [rule.when_character, *rule.require_characters]
    if isinstance(rule, AdjustCountsRule):
        return [rule.when_character]
    return list(rule.characters)


def detect_script_issues(script: Script, catalog: CharacterCatalog) -> list[str]:
    """Describe problems that would make resolution degrade. Never raises."""
    issues: list[str] = []
    if not script.characters:
        issues.append("Script has no characters")
    elif len(script.characters) < SMALL_POOL:
        issues.append("Very small character list, may be unbalanced")

    seen: set[str] = set()
    for char_id in script.characters:
        if char_id in seen:
            issues.append(f"Duplicate character id: {char_id}")
        seen.add(char_id)
        if char_id not in catalog:
            issues.append(f"Character '{char_id}' is not in the catalog")

    for i, rule in enumerate(script.modifiers):
        for char_id in _rule_references(rule):
            if char_id not in seen:
                issues.append(f"Modifier {i} ({rule.type}) references '{char_id}' outside the pool")
        if isinstance(rule, AdjustCountsRule):
            for key in rule.delta:
                if key not in COUNT_KEYS:
                    issues.append(f"Modifier {i} (adjustCounts) has unknown team '{key}'")

    for key, entry in (script.composition or {}).items():
        if parse_count_key(key) is None:
            issues.append(f"Composition key '{key}' is not N or A-B")
            continue
        for team, value in entry.items():
            if team not in COUNT_KEYS:
                issues.append(f"Composition '{key}' has unknown team '{team}'")
                continue
            try:
                parse_count_expr(value)
            except ExpressionError as e:
                issues.append(f"Composition '{key}' {team}: {e}")
    return issues
