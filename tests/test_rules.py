"""Rule evaluator, ranking and the avoid list."""
import pytest

from matchup_engines.core.models import ArsenalEntry, ZoneStat
from matchup_engines.core.output import Adjustment, Recommendation
from matchup_engines.core.ranking import build_avoid_list, rank_candidates
from matchup_engines.core.rules import NO_EFFECT, Rule, base_score, effect, evaluate_rules, note
from matchup_engines.core.zones import classify_zones

from conftest import fastball, slider


def _rec(name, confidence):
    return Recommendation(pitch_name=name, confidence=confidence, target="Low-Away")


class TestEvaluateRules:

    def test_records_nonzero_deltas_and_all_reasons(self):
        rules = [
            Rule("Boost", lambda ctx, c: effect(5, "boosted")),
            Rule("Note", lambda ctx, c: note("just a note")),
            Rule("Nothing", lambda ctx, c: NO_EFFECT),
            Rule("Penalty", lambda ctx, c: effect(-3, label="Relabelled")),
        ]
        card = evaluate_rules(rules, None, None, 50.0)
        assert card.adjustments == (Adjustment("Boost", 5), Adjustment("Relabelled", -3))
        assert card.rationale == ("boosted", "just a note")
        assert card.total == 52.0
        assert card.confidence == 52

    def test_zero_delta_with_reason_is_not_an_adjustment(self):
        card = evaluate_rules([Rule("Zero", lambda ctx, c: effect(0, "said something"))], None, None, 40.0)
        assert card.adjustments == ()
        assert card.rationale == ("said something",)

    def test_confidence_clamped(self):
        up = evaluate_rules([Rule("Up", lambda ctx, c: effect(20))], None, None, 95.0)
        down = evaluate_rules([Rule("Down", lambda ctx, c: effect(-20))], None, None, 5.0)
        assert up.total == 115.0 and up.confidence == 100
        assert down.total == -15.0 and down.confidence == 0

    def test_deltas_are_order_independent(self):
        a = Rule("A", lambda ctx, c: effect(7, "a"))
        b = Rule("B", lambda ctx, c: effect(-4, "b"))
        assert evaluate_rules([a, b], None, None, 50).total == evaluate_rules([b, a], None, None, 50).total

    def test_rule_sees_context_and_candidate(self):
        rule = Rule("Match", lambda ctx, c: effect(10) if c.pitch_name == ctx else NO_EFFECT)
        assert evaluate_rules([rule], "Slider", slider(), 0).total == 10
        assert evaluate_rules([rule], "Slider", fastball(), 0).total == 0


class TestBaseScore:

    def test_formula(self):
        # 40*0.4 + (100 - 50/1.5)*0.3 + 30*0.3
        assert base_score(40.0, 50.0, 30.0) == pytest.approx(45.0)

    def test_missing_whiff_counts_as_zero(self):
        assert base_score(None, 150.0, 0.0) == pytest.approx(0.0)

    def test_clamped(self):
        assert base_score(100.0, 0.0, 100.0) == 100.0
        assert base_score(0.0, 300.0, 0.0) == 0.0


class TestRankCandidates:

    def test_descending_with_stable_ties(self):
        ranked = rank_candidates([_rec("A", 60), _rec("B", 70), _rec("C", 60)])
        assert [r.pitch_name for r in ranked.candidates] == ["B", "A", "C"]
        assert ranked.primary.pitch_name == "B"
        assert ranked.secondary.pitch_name == "A"

    def test_single_candidate_is_its_own_secondary(self):
        ranked = rank_candidates([_rec("A", 60)])
        assert ranked.secondary is ranked.primary
        assert ranked.single_option

    def test_empty(self):
        ranked = rank_candidates([])
        assert ranked.primary.pitch_name == "N/A"
        assert ranked.primary.confidence == 0
        assert ranked.candidates == ()


class TestAvoidList:

    def test_danger_zone_with_loud_contact(self, arsenal, zones):
        avoid = build_avoid_list(arsenal, zones, classify_zones(zones))
        assert len(avoid) == 1
        assert avoid[0].pitch_name == "4-Seam Fastball"
        assert avoid[0].zone == "Middle"
        assert avoid[0].reason == "EV: 95.0, Barrel: 15%"

    def test_danger_zone_with_soft_contact_skipped(self, arsenal):
        soft = [ZoneStat(zone=z, avg_ev=88.0, barrel_pct=20.0, xwoba=0.500) for z in (1, 2)]
        assert build_avoid_list(arsenal, soft, classify_zones(soft)) == ()

    def test_one_entry_per_zone_capped_at_four(self, arsenal):
        hot = [ZoneStat(zone=z, avg_ev=95.0, barrel_pct=15.0, xwoba=0.450) for z in (1, 2, 3, 4, 5, 6)]
        avoid = build_avoid_list(arsenal, hot, classify_zones(hot))
        assert len(avoid) == 4
        assert len({a.zone for a in avoid}) == 4
        assert all(a.pitch_name == "4-Seam Fastball" for a in avoid)

    def test_no_arsenal(self, zones):
        assert build_avoid_list((), zones, classify_zones(zones)) == ()

    def test_unknown_zone_label(self):
        z = [ZoneStat(zone=20, avg_ev=99.0)]
        avoid = build_avoid_list([ArsenalEntry("Cutter")], z, classify_zones(z))
        assert avoid[0].zone == "Zone 20"
        assert avoid[0].reason == "EV: 99.0, Barrel: -%"
