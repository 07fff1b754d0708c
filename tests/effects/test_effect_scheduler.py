"""
Tests for the effect scheduler: naming, removal, persistence and contracts.
"""

import math

import pytest

from skirmish.core.config import CombatConfig
from skirmish.core.constants import CombatTarget
from skirmish.core.errors import ContractViolationError
from skirmish.effects import (
    DamageOverTimeEffect,
    EffectSerializer,
    HealingOverTimeEffect,
    IncapacitatingEffect,
    ModifierEffect,
    RuneEffect,
)
from skirmish.effects.effect_scheduler import EffectScheduler


def test_same_name_replaces_previous_effect(arena):
    """
    Adding a second "Poison" to the same target leaves exactly one.
    """
    first = arena.scheduler.add_effect(
        CombatTarget.MOB, DamageOverTimeEffect(name="Poison", duration=10, tick_damage=2)
    )
    second = arena.scheduler.add_effect(
        CombatTarget.MOB, DamageOverTimeEffect(name="Poison", duration=20, tick_damage=4)
    )

    poisons = [e for e in arena.scheduler.effects_for(CombatTarget.MOB) if e.name == "Poison"]
    assert len(poisons) == 1
    assert poisons[0].id == second.id != first.id
    assert poisons[0].effect.tick_damage == 4


def test_same_name_on_other_target_is_independent(arena):
    poison = DamageOverTimeEffect(name="Poison", duration=10, tick_damage=2)
    arena.scheduler.add_effect(CombatTarget.MOB, poison)
    arena.scheduler.add_effect(CombatTarget.PLAYER, poison)

    assert arena.scheduler.has_effect(CombatTarget.MOB, "Poison")
    assert arena.scheduler.has_effect(CombatTarget.PLAYER, "Poison")


def test_remove_and_clear(arena):
    active = arena.scheduler.add_effect(
        CombatTarget.PLAYER, ModifierEffect(name="Haste", duration=10, stat_mods={"agi": 5})
    )
    arena.scheduler.add_effect(
        CombatTarget.PLAYER, RuneEffect(name="Rune", duration=10, rune=5)
    )

    assert arena.scheduler.remove_effect(CombatTarget.PLAYER, active.id)
    assert not arena.scheduler.remove_effect(CombatTarget.PLAYER, active.id)
    assert arena.scheduler.remove_effects_named(CombatTarget.PLAYER, "Rune") == 1

    arena.scheduler.add_effect(
        CombatTarget.PLAYER, RuneEffect(name="Rune", duration=10, rune=5)
    )
    arena.scheduler.clear_effects(CombatTarget.PLAYER)
    assert arena.scheduler.effects_for(CombatTarget.PLAYER) == []


def test_tick_without_a_mob_clears_mob_effects(arena):
    arena.scheduler.add_effect(
        CombatTarget.MOB, DamageOverTimeEffect(name="Poison", duration=10, tick_damage=2)
    )
    arena.mob_present = False

    arena.tick_at(2.0)

    assert arena.scheduler.effects_for(CombatTarget.MOB) == []
    assert arena.mob_deaths == 0


def test_fire_now_runs_the_first_tick_immediately(arena):
    arena.player.set_hp(50)
    active = arena.scheduler.add_effect(
        CombatTarget.PLAYER, HealingOverTimeEffect(name="Renew", duration=10, tick_heal=10)
    )

    arena.scheduler.fire_now(active)
    assert arena.player.hp == 60

    arena.tick_at(1.0)
    assert arena.player.hp == 60
    arena.tick_at(2.0)
    assert arena.player.hp == 70


def test_fire_now_reports_a_mob_kill(arena):
    arena.mob.set_hp(3)
    active = arena.scheduler.add_effect(
        CombatTarget.MOB, DamageOverTimeEffect(name="Scorch", duration=10, tick_damage=9)
    )
    arena.scheduler.fire_now(active)

    assert arena.mob_deaths == 1
    assert arena.scheduler.effects_for(CombatTarget.MOB) == []


def test_add_effect_contracts(arena):
    with pytest.raises(ContractViolationError):
        arena.scheduler.add_effect(CombatTarget.PLAYER, {"name": "Poison"})
    with pytest.raises(ContractViolationError):
        arena.scheduler.add_effect(
            CombatTarget.PLAYER, RuneEffect(name="Rune", duration=5, rune=5), now=math.nan
        )
    with pytest.raises(ContractViolationError):
        arena.scheduler.consume_rune(CombatTarget.PLAYER, math.inf)


def test_player_effects_round_trip_through_persistence(arena):
    arena.scheduler.add_effect(
        CombatTarget.PLAYER, RuneEffect(name="Rune", duration=30, rune=20)
    )
    arena.scheduler.add_effect(
        CombatTarget.PLAYER,
        IncapacitatingEffect(name="Stun", duration=4, incapacitation="stun"),
    )
    arena.scheduler.add_effect(
        CombatTarget.MOB, DamageOverTimeEffect(name="Poison", duration=30, tick_damage=2)
    )
    arena.scheduler.consume_rune(CombatTarget.PLAYER, 6)
    arena.timers.advance(10)

    records = arena.scheduler.serialize_player_effects()

    assert [r["effect"]["name"] for r in records] == ["Rune"]
    assert records[0]["remaining"] == 20
    assert records[0]["rune_remaining"] == 14

    arena.scheduler.clear_effects(CombatTarget.PLAYER)
    restored = arena.scheduler.restore_player_effects(records, now=100.0)

    assert len(restored) == 1
    assert isinstance(restored[0].effect, RuneEffect)
    assert restored[0].expires_at == 120.0
    assert restored[0].rune_remaining == 14


def test_restore_skips_invalid_and_expired_records(arena, mocker):
    warn = mocker.patch("skirmish.effects.effect_serializer.log_warning")
    good = EffectSerializer.serialize(RuneEffect(name="Rune", duration=30, rune=20))
    records = [
        {"effect": good, "remaining": 0},
        {"effect": {"effect_type": "Nonsense", "name": "?"}, "remaining": 10},
        {"effect": good, "remaining": 5, "since_last_tick": 1.0},
    ]

    restored = arena.scheduler.restore_player_effects(records, now=0.0)

    assert len(restored) == 1
    assert restored[0].last_tick == -1.0
    warn.assert_called_once()


def test_serializer_keeps_the_effect_kind():
    dot = DamageOverTimeEffect(name="Poison", duration=10, tick_damage=3, tap=True, school="poison")
    data = EffectSerializer.serialize(dot)

    assert data["effect_type"] == "DamageOverTimeEffect"
    assert EffectSerializer.deserialize(data) == dot


def test_restore_skips_records_with_bad_tick_offsets(arena):
    good = EffectSerializer.serialize(RuneEffect(name="Rune", duration=30, rune=20))
    records = [
        {"effect": good, "remaining": 5, "since_last_tick": "soon"},
        {"effect": good, "remaining": 5, "since_last_tick": math.nan},
        {"effect": good, "remaining": math.inf},
        {"effect": good, "remaining": 5},
    ]

    restored = arena.scheduler.restore_player_effects(records, now=10.0)

    assert len(restored) == 1
    assert restored[0].last_tick == 10.0


def test_effects_without_interval_use_configured_default(log, timers):
    scheduler = EffectScheduler(
        vitals_for=lambda target: None,
        name_for=lambda target: "x",
        log=log,
        clock=lambda: timers.now,
        config=CombatConfig(default_tick_interval=5.0),
    )

    implicit = scheduler.add_effect(
        CombatTarget.PLAYER, HealingOverTimeEffect(name="Regrowth", duration=30, tick_heal=2)
    )
    explicit = scheduler.add_effect(
        CombatTarget.PLAYER,
        HealingOverTimeEffect(name="Mend", duration=30, tick_heal=2, tick_interval=1.0),
    )

    assert implicit.effect.tick_interval == 5.0
    assert explicit.effect.tick_interval == 1.0
    assert not implicit.is_due(4.0)
    assert implicit.is_due(5.0)
