"""
Healing over time effect module for the combat core.

Defines effects that restore HP over several ticks, such as regeneration
spells.
"""

from typing import Literal

from pydantic import Field

from skirmish.core.constants import LogKind

from .base_effect import Effect, TickContext


class HealingOverTimeEffect(Effect):
    """
    Heal over Time effect that heals the target each tick, up to its max HP.
    """

    effect_type: Literal["HealingOverTimeEffect"] = "HealingOverTimeEffect"

    tick_heal: int = Field(
        gt=0,
        description="HP restored each tick.",
    )

    @property
    def color(self) -> str:
        """Returns the color string for healing over time effects."""
        return "bold green"

    @property
    def emoji(self) -> str:
        """Returns the emoji for healing over time effects."""
        return "💚"

    def on_tick(self, ctx: TickContext) -> None:
        healed = ctx.vitals.adjust_hp(self.tick_heal)
        ctx.add_log(f"{self.name} heals {ctx.victim} for {healed}.", LogKind.HEAL)
