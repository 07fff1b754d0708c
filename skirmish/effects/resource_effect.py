"""
Resource effect module for the combat core.

Defines effects that restore or drain mana and endurance over time.
"""

from typing import Literal

from pydantic import Field

from skirmish.core.constants import LogKind, ResourceType

from .base_effect import Effect, TickContext


class ResourceRestoreEffect(Effect):
    """Restores a fixed amount of mana or endurance each tick."""

    effect_type: Literal["ResourceRestoreEffect"] = "ResourceRestoreEffect"

    resource: ResourceType = Field(
        description="The pool being restored.",
    )
    amount: int = Field(
        gt=0,
        description="Amount restored each tick.",
    )

    @property
    def color(self) -> str:
        return "bold blue" if self.resource == ResourceType.MANA else "bold yellow"

    @property
    def emoji(self) -> str:
        return "🔷"

    def on_tick(self, ctx: TickContext) -> None:
        gained = ctx.vitals.adjust(self.resource.value, self.amount)
        if ctx.is_player:
            message = f"{self.name} restores {gained} {self.resource.value}."
        else:
            message = (
                f"{self.name} restores {gained} {self.resource.value} "
                f"to {ctx.target_name}."
            )
        ctx.add_log(message, LogKind.HEAL)


class ResourceDrainEffect(Effect):
    """
    Drains a fixed amount of mana or endurance each tick.

    With `tap`, the drained amount is given to the opposing combatant's same
    pool, bounded by its maximum.
    """

    effect_type: Literal["ResourceDrainEffect"] = "ResourceDrainEffect"

    resource: ResourceType = Field(
        description="The pool being drained.",
    )
    amount: int = Field(
        ge=0,
        description="Amount drained each tick.",
    )
    tap: bool = Field(
        default=False,
        description="Whether the drained amount goes to the opposing combatant.",
    )

    @property
    def color(self) -> str:
        return "magenta"

    @property
    def emoji(self) -> str:
        return "🩸"

    def on_tick(self, ctx: TickContext) -> None:
        if self.amount <= 0:
            return
        pool = self.resource.value
        drained = -ctx.vitals.adjust(pool, -self.amount)
        ctx.add_log(
            f"{self.name} drains {drained} {pool} from {ctx.victim}.", LogKind.DAMAGE
        )
        if self.tap and drained > 0 and ctx.opponent_vitals is not None:
            gained = ctx.opponent_vitals.adjust(pool, drained)
            if gained > 0:
                ctx.add_log(
                    f"{self.name} gives {ctx.beneficiary} {gained} {pool}.",
                    LogKind.HEAL,
                )
