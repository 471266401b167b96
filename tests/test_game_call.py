"""CGCIE: sequence-aware next-pitch call and the insight generator."""
from matchup_engines.core.history import group_at_bats, pitches_at_number
from matchup_engines.core.models import H2HRecord, MatchupData, TransitionRow
from matchup_engines.recommenders.game_call import recommend_game_call, speed_diff_delta, transition_whiff_delta
from matchup_engines.recommenders.insights import InsightLevel, InsightType, generate_sequence_insights

from conftest import at_bat, changeup, fastball, slider, state

FF = "4-Seam Fastball"


def _by_name(out):
    return {r.pitch_name: r for r in out.all_pitches}


def _adj(rec):
    return {a.rule: a.delta for a in rec.adjustments}


class TestSequenceRules:

    def test_back_to_back_sliders(self, matchup):
        out = recommend_game_call(matchup, state(1, 1, seq=["Slider", "Slider"]))
        recs = _by_name(out)
        assert _adj(recs["Slider"]) == {"Repetition": -12, "Double repetition": -25, "Recency": -10}
        assert recs["Slider"].confidence == 0
        assert "3rd consecutive — highly predictable" in recs["Slider"].rationale

    def test_fastball_off_sliders(self, matchup):
        recs = _by_name(recommend_game_call(matchup, state(1, 1, seq=["Slider", "Slider"])))
        # 10 mph gap -> round(8 + 2 * 1.75) = 12; high vs low break -> tunnel
        assert _adj(recs[FF]) == {"Speed diff": 12, "Tunnel": 8}
        assert recs[FF].rationale == ("10 mph gap from Slider", "Different break trajectory from Slider")
        assert recs[FF].confidence == 62

    def test_half_mph_gap_rounds_up_in_text(self):
        m = MatchupData(arsenal=(fastball(), changeup(avg_velo=84.5)))
        recs = _by_name(recommend_game_call(m, state(seq=[FF])))
        # 10.5 mph -> round(8 + 2.5 * 1.75) = 12
        assert _adj(recs["Changeup"])["Speed diff"] == 12
        assert f"11 mph gap from {FF}" in recs["Changeup"].rationale

    def test_transition_whiff_keeps_fraction(self):
        m = MatchupData(
            arsenal=(fastball(), slider(), changeup()),
            transitions=(TransitionRow("Slider", "Changeup", freq=10, whiff_pct=38.5),),
        )
        recs = _by_name(recommend_game_call(m, state(seq=["Slider"])))
        assert "Slider → Changeup has 38.5% whiff rate" in recs["Changeup"].rationale

    def test_same_tunnel_group_no_bonus(self, matchup):
        recs = _by_name(recommend_game_call(matchup, state(1, 1, seq=["Slider", "Slider"])))
        assert _adj(recs["Changeup"]) == {}

    def test_ranking_after_repetition(self, matchup):
        out = recommend_game_call(matchup, state(1, 1, seq=["Slider", "Slider"]))
        assert [r.pitch_name for r in out.all_pitches] == [FF, "Changeup", "Slider"]
        assert out.recommended.pitch_name == FF
        assert out.secondary.pitch_name == "Changeup"

    def test_recency_without_back_to_back(self, matchup):
        recs = _by_name(recommend_game_call(matchup, state(1, 1, seq=["Slider", FF, "Slider"])))
        assert _adj(recs["Slider"]) == {"Repetition": -12, "Recency": -10}
        assert _adj(recs[FF])["Recency"] == -5

    def test_target_is_coldest_zone(self, matchup):
        out = recommend_game_call(matchup, state())
        assert out.recommended.target == "Low-Away"

    def test_target_default(self, arsenal):
        assert recommend_game_call(MatchupData(arsenal=arsenal), state()).recommended.target == "Down and away"


class TestSpeedAndTransitions:

    def test_speed_diff_scale(self):
        assert speed_diff_delta(8.0) == 0
        assert speed_diff_delta(9.0) == 10
        assert speed_diff_delta(10.0) == 12
        assert speed_diff_delta(12.0) == 15
        assert speed_diff_delta(20.0) == 15

    def test_transition_whiff_scale(self):
        assert transition_whiff_delta(40.0) == 10
        assert transition_whiff_delta(60.0) == 12

    def test_transition_rules(self, arsenal, zones):
        transitions = (
            TransitionRow("Slider", "Changeup", freq=12, whiff_pct=40.0, xwoba=0.200),
            TransitionRow("Slider", FF, freq=8, whiff_pct=10.0, xwoba=0.420),
        )
        m = MatchupData(arsenal=arsenal, batter_zones=zones, transitions=transitions)
        recs = _by_name(recommend_game_call(m, state(0, 1, seq=["Slider"])))
        assert _adj(recs["Changeup"]) == {"Transition whiff": 10}
        assert "Slider → Changeup has 40% whiff rate" in recs["Changeup"].rationale
        assert _adj(recs[FF])["Transition damage"] == -10

    def test_transition_whiff_threshold(self, arsenal):
        m = MatchupData(arsenal=arsenal, transitions=(TransitionRow("Slider", "Changeup", whiff_pct=25.0),))
        recs = _by_name(recommend_game_call(m, state(seq=["Slider"])))
        assert "Transition whiff" not in _adj(recs["Changeup"])


class TestPatterns:

    def test_first_pitch_pattern_break(self, arsenal):
        recent = at_bat(1, 1, FF, "Slider") + at_bat(1, 2, FF, "Changeup") + at_bat(2, 1, FF)
        m = MatchupData(arsenal=arsenal, recent_pitches=recent)
        recs = _by_name(recommend_game_call(m, state()))
        assert _adj(recs["Slider"]) == {"Pattern break": 8}
        assert _adj(recs["Changeup"]) == {"Pattern break": 8}
        assert "Pattern break" not in _adj(recs[FF])
        assert f"Breaks pattern — usually {FF} here" in recs["Slider"].rationale

    def test_pattern_share_inclusive(self, arsenal):
        recent = (
            at_bat(1, 1, FF) + at_bat(1, 2, FF) + at_bat(1, 3, FF)
            + at_bat(2, 1, "Slider") + at_bat(2, 2, "Slider")
        )
        recs = _by_name(recommend_game_call(MatchupData(arsenal=arsenal, recent_pitches=recent), state()))
        assert _adj(recs["Changeup"]) == {"Pattern break": 8}

    def test_pattern_needs_three_at_bats(self, arsenal):
        recent = at_bat(1, 1, FF) + at_bat(1, 2, FF)
        recs = _by_name(recommend_game_call(MatchupData(arsenal=arsenal, recent_pitches=recent), state()))
        assert all("Pattern break" not in _adj(r) for r in recs.values())

    def test_second_pitch_pattern(self, arsenal):
        recent = at_bat(1, 1, FF, "Slider") + at_bat(1, 2, "Changeup", "Slider") + at_bat(1, 3, FF, "Slider")
        recs = _by_name(recommend_game_call(MatchupData(arsenal=arsenal, recent_pitches=recent), state(seq=[FF])))
        assert _adj(recs["Changeup"]).get("Pattern break") == 8
        assert "Pattern break" not in _adj(recs["Slider"])

    def test_pattern_ignored_after_third_pitch(self, arsenal):
        recent = sum((at_bat(1, n, FF, FF, FF, FF) for n in (1, 2, 3)), ())
        seq = ["Slider", "Changeup", "Slider"]
        recs = _by_name(recommend_game_call(MatchupData(arsenal=arsenal, recent_pitches=recent), state(seq=seq)))
        assert all("Pattern break" not in _adj(r) for r in recs.values())

    def test_predictable_opener(self, zones):
        m = MatchupData(arsenal=(fastball(usage_pct=65.0), slider(usage_pct=35.0)), batter_zones=zones)
        recs = _by_name(recommend_game_call(m, state()))
        assert _adj(recs[FF]) == {"1st pitch predictable": -8}
        assert "65% usage — too predictable as opener" in recs[FF].rationale
        recs = _by_name(recommend_game_call(m, state(0, 1, seq=["Slider"])))
        assert "1st pitch predictable" not in _adj(recs[FF])


class TestCountAndHistory:

    def test_h2h(self, arsenal):
        h2h = (
            H2HRecord("Slider", pitch_count=20, xwoba=0.400),
            H2HRecord("Changeup", pitch_count=15, whiff_pct=35.0),
        )
        recs = _by_name(recommend_game_call(MatchupData(arsenal=arsenal, h2h=h2h), state()))
        assert _adj(recs["Slider"]) == {"H2H damage": -12}
        assert _adj(recs["Changeup"]) == {"H2H whiff": 8}

    def test_putaway(self, matchup):
        recs = _by_name(recommend_game_call(matchup, state(0, 2)))
        assert _adj(recs["Slider"]) == {"Put-away count": 10}
        assert _adj(recs["Changeup"]) == {}

    def test_hitter_count_fastballs_only(self, matchup):
        recs = _by_name(recommend_game_call(matchup, state(3, 1)))
        assert _adj(recs[FF]) == {"Hitter count": -8}
        assert _adj(recs["Slider"]) == {}

    def test_empty_arsenal(self, zones):
        out = recommend_game_call(MatchupData(batter_zones=zones), state(seq=["Slider"]))
        assert out.recommended.pitch_name == "N/A"
        assert out.secondary.pitch_name == "N/A"
        assert out.all_pitches == ()
        assert out.insights == ()


class TestInsights:

    def test_consecutive_repetition_and_tunnel(self, arsenal):
        out = generate_sequence_insights(arsenal, ("Slider", "Slider"), (), ())
        assert [i.type for i in out] == [InsightType.REPETITION, InsightType.TUNNEL]
        assert out[0].level == InsightLevel.WARNING
        assert out[0].message == "Repetition warning: 2 consecutive Sliders — batter timing likely adjusted"
        assert out[1].message == f"Tunnel opportunity: {FF} after Slider exploits similar release trajectory"

    def test_repeat_not_consecutive_is_info(self, arsenal):
        out = generate_sequence_insights(arsenal, ("Slider", FF, "Slider"), (), ())
        assert out[0].level == InsightLevel.INFO
        assert out[0].message == "Slider thrown 2x this AB"

    def test_speed_differential(self):
        arsenal = (fastball(), slider(), changeup(avg_velo=84.0))
        out = generate_sequence_insights(arsenal, (FF,), (), ())
        speed = [i for i in out if i.type == InsightType.SPEED_DIFF]
        assert speed[0].message == f"Speed differential: 11 mph gap from {FF} (95) → Changeup (84)"

    def test_best_transition(self, arsenal):
        transitions = (
            TransitionRow("Slider", "Changeup", freq=12, whiff_pct=40.0),
            TransitionRow("Slider", FF, freq=9, whiff_pct=33.0),
        )
        out = generate_sequence_insights(arsenal, ("Slider",), transitions, ())
        trans = [i for i in out if i.type == InsightType.TRANSITION]
        assert trans[0].message == "Strong transition: Slider → Changeup generates 40% whiff rate (12 occurrences)"

    def test_first_pitch_pattern_only_before_first_pitch(self, arsenal):
        recent = at_bat(1, 1, FF) + at_bat(1, 2, FF) + at_bat(1, 3, "Slider") + at_bat(2, 1, FF)
        at_bats = group_at_bats(recent)
        out = generate_sequence_insights(arsenal, (), (), at_bats)
        assert [i.type for i in out] == [InsightType.PATTERN]
        assert out[0].message == f"Pattern alert: First-pitch {FF} in 3 of last 4 ABs vs this batter"
        after = generate_sequence_insights(arsenal, (FF,), (), at_bats)
        assert InsightType.PATTERN not in [i.type for i in after]

    def test_pattern_needs_four_at_bats(self, arsenal):
        at_bats = group_at_bats(at_bat(1, 1, FF) + at_bat(1, 2, FF) + at_bat(1, 3, FF))
        assert generate_sequence_insights(arsenal, (), (), at_bats) == ()


class TestAtBatGrouping:

    def test_groups_in_first_seen_order_sorted_by_pitch(self):
        rows = at_bat(7, 3, FF, "Slider")[::-1] + at_bat(5, 1, "Changeup")
        grouped = group_at_bats(rows)
        assert [(g.game_pk, g.at_bat_number) for g in grouped] == [(7, 3), (5, 1)]
        assert [p.pitch_name for p in grouped[0].pitches] == [FF, "Slider"]
        assert [p.pitch_number for p in grouped[0].pitches] == [1, 2]

    def test_pitches_at_number_skips_short_at_bats(self):
        grouped = group_at_bats(at_bat(1, 1, FF, "Slider") + at_bat(1, 2, "Changeup"))
        assert pitches_at_number(grouped, 2) == ["Slider"]
