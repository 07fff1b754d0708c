"""
Core system module for the Skirmish combat core.

This module contains the fundamental pieces every other module builds on:
constants, configuration, errors, logging, the timer queue, the collaborator
interfaces and the static content loader.
"""

from .config import DEFAULT_CONFIG, CombatConfig
from .constants import (
    CombatTarget,
    DamageSchool,
    GameMode,
    IncapacitationType,
    LogKind,
    ResourceType,
)
from .errors import ConfigurationError, ContractViolationError, SkirmishError
from .interfaces import CombatLog, MemorySaveScheduler
from .timers import TimerHandle, TimerQueue

__all__ = [
    # Import from config.py
    "CombatConfig",
    "DEFAULT_CONFIG",
    # Import from constants.py
    "CombatTarget",
    "DamageSchool",
    "GameMode",
    "IncapacitationType",
    "LogKind",
    "ResourceType",
    # Import from errors.py
    "SkirmishError",
    "ConfigurationError",
    "ContractViolationError",
    # Import from interfaces.py
    "CombatLog",
    "MemorySaveScheduler",
    # Import from timers.py
    "TimerHandle",
    "TimerQueue",
]
