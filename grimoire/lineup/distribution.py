"""Team-count targets: the base table and per-script composition overrides.

Base table (inclusive player-count brackets):
  5-6   → 3 / 1 / 1 / 1
  7-9   → p-3 / 0 / 2 / 1
  10-12 → p-4 / 1 / 2 / 1
  13-15 → p-5 / 2 / 2 / 1
  other → max(2, p-3) / clamp(p-6, 0, 2) / clamp(p // 4, 1, 2) / 1

Composition keys are "N" or "A-B". Values are integers or count expressions
from a closed grammar: INT | p | p+INT | p-INT. Expressions are parsed into
CountLiteral / PlayerOffset values and evaluated directly; strings are never
executed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Union

from grimoire.models import COUNT_KEYS, Distribution, Script

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+)\s*)?$")
_INT_RE = re.compile(r"^[+-]?\d+$")
_OFFSET_RE = re.compile(r"^p(?:([+-])(\d+))?$", re.IGNORECASE)


class ExpressionError(ValueError):
    """Raised when a composition count value is outside the grammar."""


@dataclass(frozen=True)
class CountLiteral:
    value: int


@dataclass(frozen=True)
class PlayerOffset:
    offset: int = 0


CountExpr = Union[CountLiteral, PlayerOffset]


def base_distribution(player_count: int) -> Distribution:
    """Standard distribution for a player count. Never fails."""
    p = player_count
    if 5 <= p <= 6:
        # 5 and 6 share a row; left as found.
        return Distribution(townsfolk=3, outsiders=1, minions=1, demons=1)
    if 7 <= p <= 9:
        return Distribution(townsfolk=p - 3, outsiders=0, minions=2, demons=1)
    if 10 <= p <= 12:
        return Distribution(townsfolk=p - 4, outsiders=1, minions=2, demons=1)
    if 13 <= p <= 15:
        return Distribution(townsfolk=p - 5, outsiders=2, minions=2, demons=1)
    return Distribution(
        townsfolk=max(2, p - 3),
        outsiders=max(0, min(2, p - 6)),
        minions=min(2, max(1, p // 4)),
        demons=1,
    )


def parse_count_key(key: str) -> tuple[int, int] | None:
    """Parse "N" or "A-B" into an inclusive (low, high) range. None if malformed."""
    m = _KEY_RE.match(key)
    if not m:
        return None
    low = int(m.group(1))
    high = int(m.group(2)) if m.group(2) else low
    return low, high


def parse_count_expr(value: int | str) -> CountExpr:
    """Parse a composition count value into a CountExpr.

    Accepts an int, or a string: "3", "p", "p+1", "p - 4" (case-insensitive,
    whitespace ignored).
    """
    if isinstance(value, bool):
        raise ExpressionError(f"Not a count: {value!r}")
    if isinstance(value, int):
        return CountLiteral(value)
    if not isinstance(value, str):
        raise ExpressionError(f"Not a count: {value!r}")
    text = re.sub(r"\s+", "", value)
    if _INT_RE.match(text):
        return CountLiteral(int(text))
    m = _OFFSET_RE.match(text)
    if not m:
        raise ExpressionError(f"Unsupported count expression: {value!r}")
    if m.group(1) is None:
        return PlayerOffset(0)
    n = int(m.group(2))
    return PlayerOffset(-n if m.group(1) == "-" else n)


def evaluate_count_expr(expr: CountExpr, player_count: int) -> int:
    if isinstance(expr, CountLiteral):
        return expr.value
    return player_count + expr.offset


def find_composition_entry(
    composition: dict[str, dict] | None, player_count: int
) -> tuple[str, dict] | None:
    """First (key, entry) whose range contains player_count, in declaration order."""
    for key, entry in (composition or {}).items():
        bounds = parse_count_key(key)
        if bounds is None:
            logger.debug(f"Skipping malformed composition key {key!r}")
            continue
        low, high = bounds
        if low <= player_count <= high:
            return key, entry
    return None


def apply_composition(
    composition: dict[str, dict] | None, player_count: int, base: Distribution
) -> Distribution:
    """Replace `base` with the first matching composition entry.

    A team value that is missing, unparseable or negative keeps the base
    value for that team. No composition or no matching key → `base`.
    """
    match = find_composition_entry(composition, player_count)
    if match is None:
        return base
    key, entry = match
    counts: dict[str, int] = {}
    for team in COUNT_KEYS:
        fallback = base.get(team)
        if team not in entry:
            counts[team] = fallback
            continue
        try:
            value = evaluate_count_expr(parse_count_expr(entry[team]), player_count)
        except ExpressionError as e:
            logger.warning(f"Composition {key!r} {team}: {e}; using {fallback}")
            value = fallback
        if value < 0:
            logger.warning(f"Composition {key!r} {team} evaluates to {value}; using {fallback}")
            value = fallback
        counts[team] = value
    return Distribution(**counts)


def target_distribution(script: Script, player_count: int) -> Distribution:
    """Base table for the player count, overridden by the script's composition."""
    return apply_composition(script.composition, player_count, base_distribution(player_count))
