"""Shared snapshot builders for the engine tests.

The default matchup is a three-pitch right-hander (4-Seam / Slider / Changeup)
against a batter with one hot zone (5, Middle), one neutral zone (2) and one
cold zone (9, Low-Away).  Zone scores are 75.0 / 54.5 / 40.5, so the 70th and
30th percentiles land at 62.7 and 48.9.
"""
from datetime import date, timedelta

import pytest

from matchup_engines.core.models import (
    ArsenalEntry,
    ChaseRegion,
    GameLogRow,
    MatchupData,
    RecentPitch,
    VeloTrendPoint,
    ZoneStat,
)
from matchup_engines.core.state import AtBatState, Count


def fastball(**kw):
    base = dict(pitch_name="4-Seam Fastball", usage_pct=50.0, avg_velo=95.0, whiff_pct=20.0)
    base.update(kw)
    return ArsenalEntry(**base)


def slider(**kw):
    base = dict(pitch_name="Slider", usage_pct=30.0, avg_velo=85.0, whiff_pct=38.0)
    base.update(kw)
    return ArsenalEntry(**base)


def changeup(**kw):
    base = dict(pitch_name="Changeup", usage_pct=20.0, avg_velo=86.0, whiff_pct=32.0)
    base.update(kw)
    return ArsenalEntry(**base)


HOT_ZONE = ZoneStat(zone=5, avg_ev=95.0, barrel_pct=15.0, xwoba=0.450, pitch_count=40)
MID_ZONE = ZoneStat(zone=2, avg_ev=85.0, barrel_pct=5.0, xwoba=0.300, pitch_count=40)
COLD_ZONE = ZoneStat(zone=9, avg_ev=75.0, barrel_pct=0.0, xwoba=0.200, pitch_count=40)


def velo_trend(*velos, start=date(2024, 4, 1)):
    return tuple(
        VeloTrendPoint(game_date=start + timedelta(days=5 * i), avg_velo=v, pitch_count=90)
        for i, v in enumerate(velos)
    )


def at_bat(game_pk, ab_number, *pitch_names, game_date=date(2024, 5, 1)):
    return tuple(
        RecentPitch(
            game_date=game_date,
            game_pk=game_pk,
            at_bat_number=ab_number,
            pitch_number=i + 1,
            pitch_name=name,
        )
        for i, name in enumerate(pitch_names)
    )


def state(balls=0, strikes=0, tto=1, seq=()):
    return AtBatState(count=Count(balls, strikes), tto=tto, current_sequence=tuple(seq))


def game(d, pitches, velo=None, **kw):
    return GameLogRow(game_date=d, game_pk=d.toordinal(), pitches=pitches, avg_fb_velo=velo, **kw)


@pytest.fixture
def arsenal():
    return (fastball(), slider(), changeup())


@pytest.fixture
def zones():
    return (HOT_ZONE, MID_ZONE, COLD_ZONE)


@pytest.fixture
def matchup(arsenal, zones):
    return MatchupData(arsenal=arsenal, batter_zones=zones)


@pytest.fixture
def chase_down_right():
    return (ChaseRegion(quadrant="down-right", swing_pct=40.0, whiff_pct=45.0, pitch_count=30),)
