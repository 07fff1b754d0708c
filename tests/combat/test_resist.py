"""
Tests for resist and spell mitigation.
"""

import itertools

import pytest

from skirmish.combat.resist import ResistCalculator, apply_resist
from skirmish.core.config import CombatConfig
from skirmish.entities.mob import MobInstance
from skirmish.entities.stats import MobStatBlock, PlayerStatTotals, ResistProfile

BASES = [0, 1, 10, 55, 300]
RESISTS = [0, 1, 5, 20, 80, 400]
PERCENTS = [0, 5, 25, 50, 99, 100]


def make_mob(level=5, **stats):
    return MobInstance(
        id="m",
        name="a gnoll",
        level=level,
        hp=50,
        mana=0,
        endurance=0,
        damage=5,
        xp=10,
        ac=0,
        delay=3,
        movespeed=1,
        melee_range=10,
        aggro_range=10,
        stats=MobStatBlock(**stats),
    )


def test_apply_resist_applies_flat_then_percent():
    result = apply_resist(100, 20, 25)
    assert result.final == 60
    assert result.resist_reduced == 20
    assert result.total_reduced == 20


@pytest.mark.parametrize("base", BASES)
def test_apply_resist_is_monotonic_and_non_negative(base):
    """
    More resist or more percent reduction never lets more damage through.
    """
    for resist, pct in itertools.product(RESISTS, PERCENTS):
        final = apply_resist(base, resist, pct).final
        assert final >= 0
        for higher in RESISTS:
            if higher >= resist:
                assert apply_resist(base, higher, pct).final <= final
        for higher in PERCENTS:
            if higher >= pct:
                assert apply_resist(base, resist, higher).final <= final


@pytest.fixture
def state():
    return {
        "totals": PlayerStatTotals(resists=ResistProfile(fire=10), total_resist=10),
        "mob": make_mob(level=5, resists=ResistProfile(cold=15), total_resist=5, charisma=47),
        "level": 5,
    }


@pytest.fixture
def calculator(state):
    return ResistCalculator(
        player_totals=lambda: state["totals"],
        current_mob=lambda: state["mob"],
        player_level=lambda: state["level"],
    )


def test_player_resist_same_level(calculator):
    # (50 - 10) * 0.9 = 36
    assert calculator.mitigate_spell_damage(50, "fire").final == 36


def test_level_gap_shifts_player_resist(calculator, state):
    """
    Each level the mob has over the player adds one point of player resist.
    """
    state["mob"] = make_mob(level=8)
    state["totals"] = PlayerStatTotals(resists=ResistProfile(fire=10))
    assert calculator.mitigate_spell_damage(50, "fire").final == 37


def test_level_adjustment_is_clamped(calculator, state):
    state["level"] = 1
    state["mob"] = make_mob(level=60)
    state["totals"] = PlayerStatTotals(resists=ResistProfile(fire=30))
    assert calculator.mitigate_spell_damage(50, "fire").final == 10


def test_effective_resist_never_goes_negative(calculator, state):
    state["level"] = 30
    state["mob"] = make_mob(level=1)
    state["totals"] = PlayerStatTotals()
    assert calculator.mitigate_spell_damage(50, "magic").final == 50


def test_mob_percent_reduction_includes_charisma(calculator):
    # total_resist 5 + floor(47 / 10) = 9
    assert calculator.mob_total_resist() == 9
    # (40 - 15) * 0.91 = 22.75 -> 22
    assert calculator.mitigate_spell_damage_vs_mob(40, "cold").final == 22


def test_player_out_levelling_mob_cuts_its_resist(calculator, state):
    state["level"] = 9
    # resist 15 - 4 = 11; (40 - 11) * 0.91 = 26.39 -> 26
    assert calculator.mitigate_spell_damage_vs_mob(40, "cold").final == 26


def test_unknown_school_is_not_resisted(calculator):
    assert calculator.resist_value("physical") == 0
    assert calculator.mob_resist_value("physical") == 0


def test_values_are_read_fresh_on_every_call(calculator, state):
    assert calculator.resist_value("fire") == 10
    state["totals"] = PlayerStatTotals(resists=ResistProfile(fire=25))
    assert calculator.resist_value("fire") == 25


def test_no_mob_means_no_mob_resists(calculator, state):
    state["mob"] = None
    assert calculator.mob_total_resist() == 0
    assert calculator.mob_spell_damage_mod() == 0
    assert calculator.mitigate_spell_damage_vs_mob(12, "cold").final == 12


def test_mob_spell_and_heal_mods():
    calc = ResistCalculator(
        player_totals=PlayerStatTotals,
        current_mob=lambda: make_mob(intelligence=57, wisdom=31),
        player_level=lambda: 1,
    )
    assert calc.mob_spell_damage_mod() == 5
    assert calc.mob_heal_mod() == 3


def test_level_scaling_follows_config(state):
    calc = ResistCalculator(
        player_totals=lambda: PlayerStatTotals(resists=ResistProfile(fire=10)),
        current_mob=lambda: make_mob(level=1),
        player_level=lambda: 4,
        config=CombatConfig(resist_per_level=2, level_resist_clamp=4),
    )
    # mob 3 levels under: adjustment clamp(-6, -4, 4) = -4, resist 6
    assert calc.mitigate_spell_damage(20, "fire").final == 14
