"""
Tests for mana and endurance restore and drain effects.
"""

from skirmish.core.constants import CombatTarget, LogKind, ResourceType
from skirmish.effects.resource_effect import ResourceDrainEffect, ResourceRestoreEffect


def test_restore_is_bounded_by_max(arena):
    arena.player.set("mana", 45)
    arena.scheduler.add_effect(
        CombatTarget.PLAYER,
        ResourceRestoreEffect(name="Clarity", duration=10, resource=ResourceType.MANA, amount=8),
    )
    arena.tick_at(2.0)

    assert arena.player.mana == 50
    assert "Clarity restores 5 mana." in arena.log.messages(LogKind.HEAL)


def test_drain_floors_at_zero(arena):
    arena.mob.set("endurance", 3)
    arena.scheduler.add_effect(
        CombatTarget.MOB,
        ResourceDrainEffect(
            name="Exhaust", duration=10, resource=ResourceType.ENDURANCE, amount=5
        ),
    )
    arena.tick_at(2.0)

    assert arena.mob.endurance == 0
    assert "Exhaust drains 3 endurance from a rat." in arena.log.messages(LogKind.DAMAGE)


def test_tap_drain_feeds_the_opponent(arena):
    arena.player.set("mana", 10)
    arena.scheduler.add_effect(
        CombatTarget.MOB,
        ResourceDrainEffect(
            name="Mana Siphon", duration=10, resource="mana", amount=6, tap=True
        ),
    )
    arena.tick_at(2.0)

    assert arena.mob.mana == 24
    assert arena.player.mana == 16
    assert "Mana Siphon gives you 6 mana." in arena.log.messages(LogKind.HEAL)


def test_player_drained_by_mob_tap(arena):
    arena.mob.set("mana", 28)
    arena.scheduler.add_effect(
        CombatTarget.PLAYER,
        ResourceDrainEffect(
            name="Leech", duration=10, resource=ResourceType.MANA, amount=5, tap=True
        ),
    )
    arena.tick_at(2.0)

    assert arena.player.mana == 45
    assert arena.mob.mana == 30
    assert "Leech drains 5 mana from you." in arena.log.messages()
    assert "Leech gives a rat 2 mana." in arena.log.messages()
