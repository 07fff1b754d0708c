"""
Character system module for the Skirmish combat core.

This module handles the persistent state of the player character, leveling
from experience, and the consequences of death.
"""

from .leveling import LevelingProcessor, LevelingResult, process_xp
from .progression import DeathResult, ProgressionHandler, death_xp_loss
from .state import BaseVitals, CharacterState

__all__ = [
    # Import from leveling.py
    "LevelingProcessor",
    "LevelingResult",
    "process_xp",
    # Import from progression.py
    "DeathResult",
    "ProgressionHandler",
    "death_xp_loss",
    # Import from state.py
    "BaseVitals",
    "CharacterState",
]
