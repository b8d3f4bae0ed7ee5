"""Tests for fill-mode and validate-mode modifier handling."""

from grimoire.lineup.modifiers import (
    active_adjustments,
    adjusted_distribution,
    apply_adjust_counts,
    apply_at_least_one_of,
    apply_modifiers,
    apply_mutually_exclusive,
    apply_requires,
    evaluate_modifiers,
    seed_to_target,
)
from grimoire.models import (
    AdjustCountsRule,
    AtLeastOneOfRule,
    Distribution,
    MutuallyExclusiveRule,
    RequiresRule,
)


def _adjust(when: str, **delta: int) -> AdjustCountsRule:
    return AdjustCountsRule(when_character=when, delta=delta)


# ── seed_to_target ──────────────────────────────────────────


def test_seed_fills_in_pool_order(catalog):
    selection: list[str] = []
    target = Distribution(townsfolk=2, outsiders=1, minions=1, demons=1)
    notes = seed_to_target(selection, target, ["d1", "a2", "a1", "b1", "c1"], catalog)
    assert selection == ["a2", "a1", "b1", "c1", "d1"]
    assert notes[0] == "seed: added 'a2' to reach base townsfolk"
    assert len(notes) == 5


def test_seed_counts_existing_selection(catalog):
    selection = ["a3"]
    target = Distribution(townsfolk=2, outsiders=0, minions=0, demons=0)
    seed_to_target(selection, target, ["a1", "a2", "a3"], catalog)
    assert selection == ["a3", "a1"]


def test_seed_pool_exhausted_is_a_note(catalog):
    selection: list[str] = []
    target = Distribution(townsfolk=1, outsiders=2, minions=0, demons=0)
    notes = seed_to_target(selection, target, ["a1", "b1"], catalog)
    assert selection == ["a1", "b1"]
    assert notes[-1] == "seed: pool exhausted for outsiders (1/2)"


def test_seed_leaves_surplus_alone(catalog):
    selection = ["a1", "a2", "a3"]
    seed_to_target(selection, Distribution(townsfolk=1), ["a1", "a2", "a3"], catalog)
    assert selection == ["a1", "a2", "a3"]


def test_seed_skips_mutually_exclusive_partner(catalog):
    selection = ["b1"]
    exclusive = [MutuallyExclusiveRule(characters=["b1", "b2"])]
    seed_to_target(selection, Distribution(outsiders=2), ["b1", "b2", "b3"], catalog, exclusive)
    assert selection == ["b1", "b3"]


# ── mutuallyExclusive ───────────────────────────────────────


def test_mutually_exclusive_drops_later_listed_member():
    selection = ["c1", "a1", "c2"]
    notes = apply_mutually_exclusive(selection, [MutuallyExclusiveRule(characters=["c2", "c1"])])
    # c1 comes later in the rule, even though it was selected first
    assert selection == ["a1", "c2"]
    assert notes == ["mutuallyExclusive: removed 'c1' (c2, c1)"]


def test_mutually_exclusive_keeps_one_of_three():
    selection = ["a1", "a2", "a3"]
    apply_mutually_exclusive(selection, [MutuallyExclusiveRule(characters=["a1", "a2", "a3"])])
    assert selection == ["a1"]


def test_mutually_exclusive_single_member_untouched():
    selection = ["a1", "b1"]
    notes = apply_mutually_exclusive(selection, [MutuallyExclusiveRule(characters=["a1", "a2"])])
    assert selection == ["a1", "b1"]
    assert notes == []


# ── requires ────────────────────────────────────────────────


def test_requires_adds_and_protects():
    selection = ["x1"]
    protected: set[str] = set()
    rule = RequiresRule(when_character="x1", require_characters=["b2", "a1"])
    notes = apply_requires(selection, [rule], ["a1", "b2", "x1"], protected)
    assert selection == ["x1", "b2", "a1"]
    assert protected == {"b2", "a1"}
    assert notes == [
        "requires: added 'b2' due to 'x1'",
        "requires: added 'a1' due to 'x1'",
    ]


def test_requires_protects_already_selected():
    selection = ["x1", "a1"]
    protected: set[str] = set()
    rule = RequiresRule(when_character="x1", require_characters=["a1"])
    assert apply_requires(selection, [rule], ["a1", "x1"], protected) == []
    assert protected == {"a1"}


def test_requires_inactive_without_trigger():
    selection = ["a1"]
    rule = RequiresRule(when_character="x1", require_characters=["b2"])
    assert apply_requires(selection, [rule], ["a1", "b2", "x1"], set()) == []
    assert selection == ["a1"]


def test_requires_missing_from_pool_is_a_note():
    selection = ["x1"]
    rule = RequiresRule(when_character="x1", require_characters=["ghost"])
    notes = apply_requires(selection, [rule], ["x1"], set())
    assert selection == ["x1"]
    assert notes == ["requires: 'ghost' needed by 'x1' is not in the script pool"]


# ── atLeastOneOf ────────────────────────────────────────────


def test_at_least_one_of_picks_first_in_pool_order():
    selection = ["d1"]
    protected: set[str] = set()
    rule = AtLeastOneOfRule(characters=["a3", "a1"])
    notes = apply_at_least_one_of(selection, [rule], ["a1", "a2", "a3", "d1"], protected)
    assert selection == ["d1", "a1"]
    assert protected == {"a1"}
    assert notes == ["atLeastOneOf: added 'a1' from [a3, a1]"]


def test_at_least_one_of_satisfied_is_noop():
    selection = ["a3"]
    rule = AtLeastOneOfRule(characters=["a1", "a3"])
    assert apply_at_least_one_of(selection, [rule], ["a1", "a3"], set()) == []
    assert selection == ["a3"]


def test_at_least_one_of_without_candidates_skips():
    selection = ["a1"]
    rule = AtLeastOneOfRule(characters=["ghost"])
    notes = apply_at_least_one_of(selection, [rule], ["a1"], set())
    assert selection == ["a1"]
    assert notes == ["atLeastOneOf: no candidate in pool from [ghost]"]


# ── adjustCounts ────────────────────────────────────────────


def test_adjust_counts_noop_without_trigger(catalog):
    selection = ["a1", "a2", "b1", "c1", "d1"]
    notes = apply_adjust_counts(
        selection, [_adjust("x1", townsfolk=-1, outsiders=1)], ["a1", "a2", "b1", "b2"], catalog, set()
    )
    assert selection == ["a1", "a2", "b1", "c1", "d1"]
    assert notes == []


def test_adjust_counts_zero_delta_only_notes(catalog):
    selection = ["x1", "a1"]
    notes = apply_adjust_counts(selection, [_adjust("x1", townsfolk=0)], ["a1", "a2", "x1"], catalog, set())
    assert selection == ["x1", "a1"]
    assert notes == ['adjustCounts: x1 => {"townsfolk": 0}']


def test_adjust_counts_fills_then_trims_from_end(catalog):
    pool = ["a1", "a2", "a3", "b1", "b2", "b3", "x1", "d1"]
    selection = ["x1", "a1", "a2", "a3", "b1", "d1"]
    notes = apply_adjust_counts(selection, [_adjust("x1", townsfolk=-2, outsiders=2)], pool, catalog, set())
    assert selection == ["x1", "a1", "b1", "d1", "b2", "b3"]
    assert notes == [
        'adjustCounts: x1 => {"townsfolk": -2, "outsiders": 2}',
        "adjustCounts: added 'b2' to meet outsiders target",
        "adjustCounts: added 'b3' to meet outsiders target",
        "adjustCounts: removed 'a3' to meet townsfolk target",
        "adjustCounts: removed 'a2' to meet townsfolk target",
    ]


def test_adjust_counts_never_removes_protected(catalog):
    selection = ["x1", "a1", "a2"]
    notes = apply_adjust_counts(
        selection, [_adjust("x1", townsfolk=-2)], ["a1", "a2", "x1"], catalog, {"a1", "a2"}
    )
    assert selection == ["x1", "a1", "a2"]
    assert notes[-1] == "adjustCounts: unable to reduce townsfolk (2/0)"


def test_adjust_counts_sums_active_rules(catalog):
    selection = ["x1", "c1", "a1", "a2", "a3"]
    rules = [_adjust("x1", townsfolk=-1), _adjust("c1", townsfolk=-1), _adjust("d1", townsfolk=5)]
    apply_adjust_counts(selection, rules, ["a1", "a2", "a3", "c1", "x1"], catalog, set())
    assert selection == ["x1", "c1", "a1"]


def test_adjust_counts_fill_skips_exclusive_partner(catalog):
    selection = ["x1", "b1"]
    exclusive = [MutuallyExclusiveRule(characters=["b2", "b1"])]
    notes = apply_adjust_counts(
        selection, [_adjust("x1", outsiders=1)], ["b1", "b2", "b3", "x1"], catalog, set(), exclusive
    )
    assert selection == ["x1", "b1", "b3"]
    assert notes[-1] == "adjustCounts: added 'b3' to meet outsiders target"


def test_adjust_counts_unable_to_fill(catalog):
    selection = ["x1"]
    notes = apply_adjust_counts(selection, [_adjust("x1", outsiders=2)], ["b1", "x1"], catalog, set())
    assert selection == ["x1", "b1"]
    assert notes[-1] == "adjustCounts: unable to fill outsiders (1/2)"


def test_active_adjustments_ignores_unknown_teams():
    delta, active = active_adjustments([_adjust("x1", townsfolk=-2, wizards=3)], ["x1"])
    assert delta == {"townsfolk": -2, "outsiders": 0, "minions": 0, "demons": 0}
    assert len(active) == 1


# ── apply_modifiers (fill mode, all stages) ─────────────────


def test_apply_modifiers_does_not_mutate_input(catalog, make_script):
    script = make_script(
        ["a1", "a2", "c1", "c2"],
        modifiers=[{"type": "mutuallyExclusive", "characters": ["c1", "c2"]}],
    )
    original = ["c1", "c2", "a1"]
    result, _ = apply_modifiers(script, catalog, original)
    assert original == ["c1", "c2", "a1"]
    assert result == ["c1", "a1"]


def test_apply_modifiers_stage_order(catalog, make_script):
    """mutuallyExclusive → requires → atLeastOneOf → adjustCounts."""
    script = make_script(
        ["a1", "a2", "a3", "a4", "b1", "b2", "b3", "c1", "c2", "x1", "d1"],
        modifiers=[
            {"type": "adjustCounts", "whenCharacter": "x1", "delta": {"townsfolk": -2, "outsiders": 2}},
            {"type": "atLeastOneOf", "characters": ["b3"]},
            {"type": "requires", "whenCharacter": "x1", "requireCharacters": ["a4"]},
            {"type": "mutuallyExclusive", "characters": ["x1", "c2"]},
        ],
    )
    selection = ["x1", "c2", "a1", "a2", "a3", "b1", "d1"]
    result, notes = apply_modifiers(script, catalog, selection)
    assert [n.split(":")[0] for n in notes] == [
        "mutuallyExclusive",
        "requires",
        "atLeastOneOf",
        "adjustCounts",
        "adjustCounts",
        "adjustCounts",
        "adjustCounts",
        "adjustCounts",
    ]
    # a4 and b3 were added by rules and survive the townsfolk cut
    assert "c2" not in result
    assert {"a4", "b3"} <= set(result)
    assert catalog.tally(result).townsfolk == 2
    # only three outsiders exist, so the +2 falls one short
    assert catalog.tally(result).outsiders == 3
    assert "adjustCounts: unable to fill outsiders (3/4)" in notes


# ── validate mode ───────────────────────────────────────────


def test_adjusted_distribution_clamps_at_zero(make_script):
    script = make_script(
        ["x1"], modifiers=[{"type": "adjustCounts", "whenCharacter": "x1", "delta": {"outsiders": -3}}]
    )
    base = Distribution(townsfolk=3, outsiders=1, minions=1, demons=1)
    assert adjusted_distribution(base, script, ["x1"]).outsiders == 0
    assert adjusted_distribution(base, script, []).outsiders == 1


def test_evaluate_modifiers_reports_in_declaration_order(make_script):
    script = make_script(
        ["a1", "a2", "b1", "c1", "c2"],
        modifiers=[
            {"type": "atLeastOneOf", "characters": ["b1", "a2"]},
            {"type": "mutuallyExclusive", "characters": ["c2", "c1", "a1"]},
            {"type": "requires", "whenCharacter": "c1", "requireCharacters": ["a1", "b1", "a2"]},
        ],
    )
    issues = evaluate_modifiers(script, ["c1", "c2", "a1"])
    assert [i.kind for i in issues] == ["atLeastOneOf", "mutuallyExclusive", "requires", "requires"]
    assert issues[0].message == "Need at least one of: b1, a2"
    assert issues[0].related_character_ids == ["b1", "a2"]
    assert issues[1].message == "Exclusive characters together: c2, c1, a1"
    assert issues[2].related_character_ids == ["c1", "b1"]
    assert issues[3].message == "c1 requires a2"


def test_adjusted_distribution_clamps_after_each_rule(make_script):
    script = make_script(
        ["x1", "c1"],
        modifiers=[
            {"type": "adjustCounts", "whenCharacter": "x1", "delta": {"outsiders": -3}},
            {"type": "adjustCounts", "whenCharacter": "c1", "delta": {"outsiders": 1}},
        ],
    )
    base = Distribution(townsfolk=3, outsiders=1, minions=1, demons=1)
    # 1 - 3 clamps to 0 before the +1 applies
    assert adjusted_distribution(base, script, ["x1", "c1"]).outsiders == 1
