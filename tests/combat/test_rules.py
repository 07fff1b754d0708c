"""
Tests for the pure chance and multiplier formulas.
"""

import math

import pytest

from skirmish.combat.rules import (
    adjust_dodge_for_level,
    compute_dodge_chance,
    compute_flee_success_chance,
    compute_hit_chance,
    con_color,
    level_damage_multiplier,
)
from skirmish.core.errors import ContractViolationError


def test_flee_base_chances():
    assert compute_flee_success_chance(True) == pytest.approx(0.65)
    assert compute_flee_success_chance(False) == pytest.approx(0.95)


def test_flee_speed_adjustment_is_clamped():
    assert compute_flee_success_chance(True, 2.0, 1.0) == pytest.approx(0.75)
    assert compute_flee_success_chance(True, 10.0, 1.0) == pytest.approx(0.95)
    assert compute_flee_success_chance(True, 0.0, 10.0) == pytest.approx(0.35)


def test_flee_chance_floor():
    assert compute_flee_success_chance(True, 0.0, 100.0) >= 0.2


def test_dodge_chance_is_capped():
    assert compute_dodge_chance(50) == pytest.approx(0.1)
    assert compute_dodge_chance(1000) == pytest.approx(0.3)


def test_hit_chance_penalizes_under_levelled_attackers():
    assert compute_hit_chance(5, 5) == pytest.approx(0.9)
    assert compute_hit_chance(5, 8) == pytest.approx(0.81)
    assert compute_hit_chance(8, 5) == pytest.approx(0.93)
    assert compute_hit_chance(1, 60) == pytest.approx(0.05)
    assert compute_hit_chance(60, 1) == pytest.approx(0.98)


def test_dodge_adjusted_by_level():
    assert adjust_dodge_for_level(0.1, 5, 5) == pytest.approx(0.1)
    assert adjust_dodge_for_level(0.1, 8, 5) == pytest.approx(0.07)
    assert adjust_dodge_for_level(0.1, 5, 9) == pytest.approx(0.12)
    assert adjust_dodge_for_level(0.05, 20, 1) == 0.0
    assert adjust_dodge_for_level(0.3, 1, 200) == pytest.approx(0.5)


def test_level_damage_multiplier():
    assert level_damage_multiplier(5, 5) == pytest.approx(1.0)
    assert level_damage_multiplier(7, 5) == pytest.approx(1.04)
    assert level_damage_multiplier(50, 1) == pytest.approx(1.3)
    assert level_damage_multiplier(1, 50) == pytest.approx(0.7)


@pytest.mark.parametrize(
    "call",
    [
        lambda: compute_flee_success_chance(True, math.nan, 1.0),
        lambda: compute_flee_success_chance(True, 1.0, math.inf),
        lambda: compute_dodge_chance(math.nan),
        lambda: compute_hit_chance(math.nan, 1),
        lambda: level_damage_multiplier(1, math.inf),
    ],
)
def test_non_finite_inputs_raise(call):
    with pytest.raises(ContractViolationError):
        call()


@pytest.mark.parametrize(
    "mob_level, player_level, label",
    [
        (20, 10, "Maroon"),
        (14, 10, "Red"),
        (11, 10, "Yellow"),
        (10, 10, "White"),
        (7, 10, "Blue"),
        (5, 10, "L. Blue"),
        (2, 10, "Green"),
        (1, 10, "Dark Gray"),
    ],
)
def test_con_color_follows_level_difference(mob_level, player_level, label):
    assert con_color(mob_level, player_level)[0] == label


def test_con_color_of_invalid_levels():
    assert con_color(math.nan, 3) is None
    assert con_color(3, None) is None
