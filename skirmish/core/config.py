"""
Tunable constants of the combat core.

All values can be overridden per session by passing a CombatConfig; the
defaults reproduce the reference game balance.
"""

from pydantic import BaseModel, ConfigDict, Field


class CombatConfig(BaseModel):
    """Immutable configuration for one combat session."""

    model_config = ConfigDict(frozen=True)

    # Leveling: XP needed to leave level N is xp_base * N.
    xp_base: int = Field(default=200, gt=0)

    # Timing (seconds).
    effect_tick_seconds: float = Field(default=3.0, gt=0)
    default_tick_interval: float = Field(default=2.0, gt=0)
    kill_dedupe_seconds: float = Field(default=1.0, ge=0)
    hardcore_return_delay: float = Field(default=2.0, ge=0)
    death_respawn_delay: float = Field(default=2.0, ge=0)
    flee_exhaust_seconds: float = Field(default=60.0, ge=0)

    # Resists.
    resist_per_level: int = 1
    level_resist_clamp: int = 10

    # Roots.
    root_break_base: float = 0.15
    root_break_cha_divisor: float = 1000.0
    root_break_on_hit: float = 0.15

    # Mob regeneration per effect tick.
    mob_hp_regen_in_combat: int = 1
    mob_hp_regen_out_of_combat: int = 3
    mob_resource_regen_in_combat: int = 1
    mob_resource_regen_out_of_combat: int = 5


DEFAULT_CONFIG = CombatConfig()
