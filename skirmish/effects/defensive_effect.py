"""
Defensive effect module for the combat core.

Defines absorption runes and damage shields. Neither acts on a tick: the
damage resolution reads them through the scheduler's defense summary.
"""

from typing import Literal

from pydantic import Field

from .base_effect import Effect


class RuneEffect(Effect):
    """An absorption shield consumed point for point by incoming damage."""

    effect_type: Literal["RuneEffect"] = "RuneEffect"

    rune: int = Field(
        gt=0,
        description="Total damage the rune can absorb.",
    )

    @property
    def color(self) -> str:
        return "bold cyan"

    @property
    def emoji(self) -> str:
        return "🔰"


class DamageShieldEffect(Effect):
    """Reflects a fixed amount of damage to whoever strikes the carrier in melee."""

    effect_type: Literal["DamageShieldEffect"] = "DamageShieldEffect"

    damage_shield: int = Field(
        gt=0,
        description="Damage returned to a melee attacker on every hit.",
    )

    @property
    def color(self) -> str:
        return "bold red"

    @property
    def emoji(self) -> str:
        return "🔥"
