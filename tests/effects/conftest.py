"""
Fixtures for the effect tests: a scheduler wired to two fixed combatants.
"""

import random

import pytest

from skirmish.core.constants import CombatTarget
from skirmish.effects.effect_scheduler import EffectScheduler
from skirmish.entities.vitals import Vitals


class Arena:
    """A player, a mob and the scheduler that ticks their effects."""

    def __init__(self, log, timers, rng):
        self.log = log
        self.timers = timers
        self.player = Vitals.fixed(100, mana=50, endurance=50)
        self.mob = Vitals.fixed(40, mana=30, endurance=30)
        self.mob_present = True
        self.mob_deaths = 0
        self.scheduler = EffectScheduler(
            vitals_for=self.vitals_for,
            name_for=lambda target: "Hero" if target == CombatTarget.PLAYER else "a rat",
            log=log,
            clock=lambda: timers.now,
            on_mob_death=self._on_mob_death,
            rng=rng,
        )

    def vitals_for(self, target):
        if target == CombatTarget.PLAYER:
            return self.player
        return self.mob if self.mob_present else None

    def _on_mob_death(self):
        self.mob_deaths += 1

    def tick_at(self, when):
        self.timers.advance_to(when)
        self.scheduler.tick(self.timers.now)


@pytest.fixture
def arena(log, timers):
    # A random source whose rolls never break roots unless a test says so.
    rng = random.Random(0)
    rng.random = lambda: 0.99
    return Arena(log, timers, rng)
