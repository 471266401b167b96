"""Percentile classifier: zone damage scores, cut points and perspective labels."""
import pytest

from matchup_engines.config import EngineConfig
from matchup_engines.core.models import ZoneStat
from matchup_engines.core.stats import percentile, round_half_up
from matchup_engines.core.zones import (
    Perspective,
    ZoneTier,
    classify_zones,
    mean_zone_score,
    score_zone,
    zone_thresholds,
)

from conftest import COLD_ZONE, HOT_ZONE, MID_ZONE


class TestPercentile:

    def test_interpolates_between_order_statistics(self):
        # idx = 0.7 * 3 = 2.1 -> 3 + 0.1 * (4 - 3)
        assert percentile([4, 1, 3, 2], 70) == pytest.approx(3.1)

    def test_single_value(self):
        assert percentile([5.0], 30) == 5.0

    def test_endpoints(self):
        assert percentile([10, 20, 30], 0) == 10
        assert percentile([10, 20, 30], 100) == 30

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            percentile([], 50)


class TestRoundHalfUp:

    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(72.5) == 73
        assert round_half_up(-0.5) == 0

    def test_non_halves(self):
        assert round_half_up(41.667) == 42
        assert round_half_up(37.467) == 37


class TestScoreZone:

    def test_formula(self):
        assert score_zone(HOT_ZONE) == pytest.approx(75.0)
        assert score_zone(MID_ZONE) == pytest.approx(54.5)
        assert score_zone(COLD_ZONE) == pytest.approx(40.5)

    def test_missing_stats_use_defaults(self):
        # ev 80, barrel 0, xwoba .250
        assert score_zone(ZoneStat(zone=5)) == pytest.approx(46.5)

    def test_mean_of_no_zones_is_fifty(self):
        assert mean_zone_score(()) == 50.0


class TestClassifyZones:

    def test_three_tiers(self, zones):
        out = classify_zones(zones)
        assert [c.tier for c in out] == [ZoneTier.HIGH, ZoneTier.NEUTRAL, ZoneTier.LOW]
        assert [c.zone for c in out] == [5, 2, 9]

    def test_thresholds(self, zones):
        high, low = zone_thresholds([score_zone(z) for z in zones])
        assert high == pytest.approx(62.7)
        assert low == pytest.approx(48.9)

    def test_pitcher_labels(self, zones):
        assert [c.label for c in classify_zones(zones, Perspective.PITCHER)] == ["danger", "neutral", "cold"]

    def test_hitter_labels(self, zones):
        assert [c.label for c in classify_zones(zones, Perspective.HITTER)] == ["attack", "neutral", "avoid"]

    def test_same_tier_regardless_of_perspective(self, zones):
        pitcher = classify_zones(zones, Perspective.PITCHER)
        hitter = classify_zones(zones, Perspective.HITTER)
        assert [c.tier for c in pitcher] == [c.tier for c in hitter]

    def test_equal_scores_all_high(self):
        same = [ZoneStat(zone=z, avg_ev=88.0, barrel_pct=6.0, xwoba=0.320) for z in (1, 2, 3, 4)]
        assert all(c.tier == ZoneTier.HIGH for c in classify_zones(same))

    def test_single_zone_is_high(self):
        assert classify_zones([COLD_ZONE])[0].tier == ZoneTier.HIGH

    def test_empty(self):
        assert classify_zones([]) == ()

    def test_empty_thresholds_fall_back(self):
        assert zone_thresholds([]) == (50.0, 30.0)

    def test_config_percentiles(self, zones):
        # With 90/10 cut points only the hot zone clears the high bar and only
        # the cold zone falls under the low one.
        cfg = EngineConfig(danger_pctl=90.0, cold_pctl=10.0)
        out = classify_zones(zones, cfg=cfg)
        assert [c.tier for c in out] == [ZoneTier.HIGH, ZoneTier.NEUTRAL, ZoneTier.LOW]
        # Raising the low cut above the neutral zone pulls it into LOW.
        cfg = EngineConfig(danger_pctl=90.0, cold_pctl=60.0)
        assert classify_zones(zones, cfg=cfg)[1].tier == ZoneTier.LOW
