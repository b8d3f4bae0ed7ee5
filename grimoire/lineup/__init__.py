"""Lineup resolution and validation.

Two pure entry points over (script, catalog, player_count, selection):

  resolve_lineup  — seed a partial selection to the target distribution, then
                    apply the script's modifiers (fill mode). Returns the
                    selection, its team counts and an audit trail.
  validate_setup  — compare a finished selection against the expected
                    distribution and the modifiers (validate mode). Returns
                    typed issues; valid when there are none.

Target distribution:
  1. base table by player count (distribution.base_distribution)
  2. replaced by the first matching composition entry, if any
  3. validate mode only: shifted by active adjustCounts deltas

Modifier types: requires, mutuallyExclusive, atLeastOneOf, adjustCounts.
In fill mode ids added by requires / atLeastOneOf are protected from later
adjustCounts removal.

Audit note format: "<stage>: <what happened>", e.g.
  seed: added 'chef' to reach base townsfolk
  adjustCounts: removed 'monk' to meet townsfolk target
"""

from .distribution import (  # noqa: F401
    ExpressionError,
    apply_composition,
    base_distribution,
    evaluate_count_expr,
    parse_count_expr,
    parse_count_key,
    target_distribution,
)
from .lint import detect_script_issues  # noqa: F401
from .modifiers import (  # noqa: F401
    apply_modifiers,
    evaluate_modifiers,
    seed_to_target,
)
from .resolver import resolve_lineup  # noqa: F401
from .validator import expected_distribution, validate_setup  # noqa: F401
