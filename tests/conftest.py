"""
Shared fixtures for the combat core tests.
"""

import random

import pytest
from factories import make_static

from skirmish.core.interfaces import CombatLog, MemorySaveScheduler
from skirmish.core.timers import TimerQueue


@pytest.fixture
def static():
    return make_static()


@pytest.fixture
def log():
    return CombatLog()


@pytest.fixture
def save():
    return MemorySaveScheduler()


@pytest.fixture
def timers():
    return TimerQueue()


@pytest.fixture
def rng():
    return random.Random(1234)
