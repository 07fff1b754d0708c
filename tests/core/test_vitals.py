"""
Tests for the clamped vitals of a combatant.
"""

import math

import pytest

from skirmish.core.errors import ContractViolationError
from skirmish.entities.vitals import VitalMaxima, Vitals


@pytest.fixture
def vitals():
    return Vitals.fixed(100, mana=50, endurance=30)


def test_vitals_start_full(vitals):
    assert (vitals.hp, vitals.mana, vitals.endurance) == (100, 50, 30)
    assert vitals.is_alive()


def test_set_clamps_into_range(vitals):
    assert vitals.set_hp(150) == 100
    assert vitals.set_hp(-20) == 0
    assert not vitals.is_alive()


def test_set_rejects_non_finite_values(vitals):
    with pytest.raises(ContractViolationError):
        vitals.set_hp(math.nan)


def test_adjust_returns_the_actual_change(vitals):
    vitals.set_hp(95)
    assert vitals.adjust_hp(10) == 5
    assert vitals.adjust_hp(-200) == -100
    assert vitals.hp == 0


def test_adjust_respects_floor(vitals):
    """
    A negative delta stops at the floor and never raises a pool under it.
    """
    vitals.set_hp(5)
    assert vitals.adjust_hp(-10, floor=1) == -4
    assert vitals.hp == 1

    vitals.set_hp(0)
    assert vitals.adjust_hp(-3, floor=1) == 0
    assert vitals.hp == 0


def test_update_reads_current_value(vitals):
    vitals.set("mana", 10)
    vitals.update("mana", lambda mana: mana * 3)
    assert vitals.mana == 30


def test_maxima_are_read_live():
    maxima = {"hp": 50}
    vitals = Vitals(lambda: VitalMaxima(hp=maxima["hp"]))
    assert vitals.hp == 50

    maxima["hp"] = 80
    vitals.restore_full()
    assert vitals.hp == 80

    maxima["hp"] = 20
    vitals.adjust_hp(0)
    assert vitals.hp == 20


def test_zero_and_unknown_pool(vitals):
    vitals.zero()
    assert (vitals.hp, vitals.mana, vitals.endurance) == (0, 0, 0)
    with pytest.raises(KeyError):
        vitals.set("rage", 1)
