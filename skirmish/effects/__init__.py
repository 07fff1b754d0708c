"""
Effects system module for the combat core.

This module contains every timed effect kind (damage and healing over time,
resource restore and drain, roots, runes, damage shields, stat modifiers and
incapacitation) together with the scheduler that ticks them.
"""

# Import base classes
from .base_effect import ActiveEffect, Effect, TickContext

# Import damage effects
from .damage_over_time_effect import DamageOverTimeEffect

# Import defensive effects
from .defensive_effect import DamageShieldEffect, RuneEffect

# Import the scheduler and serialization
from .effect_scheduler import Defenses, EffectScheduler
from .effect_serializer import AnyEffect, EffectSerializer

# Import healing effects
from .healing_over_time_effect import HealingOverTimeEffect

# Import incapacitating effects
from .incapacitating_effect import IncapacitatingEffect

# Import modifier-based effects
from .modifier_effect import ModifierEffect

# Import resource effects
from .resource_effect import ResourceDrainEffect, ResourceRestoreEffect

# Import control effects
from .root_effect import RootEffect

__all__ = [
    # Base classes
    "Effect",
    "ActiveEffect",
    "TickContext",
    # Damage effects
    "DamageOverTimeEffect",
    # Healing effects
    "HealingOverTimeEffect",
    # Resource effects
    "ResourceRestoreEffect",
    "ResourceDrainEffect",
    # Control effects
    "RootEffect",
    "IncapacitatingEffect",
    # Defensive effects
    "RuneEffect",
    "DamageShieldEffect",
    # Modifier-based effects
    "ModifierEffect",
    # Scheduling and serialization
    "AnyEffect",
    "EffectSerializer",
    "EffectScheduler",
    "Defenses",
]
