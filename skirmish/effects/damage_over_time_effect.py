"""
Damage over time effect module for the combat core.

Defines periodic damage such as poisons and disease, optionally tapping the
damage dealt back into the opposing combatant's HP.
"""

from typing import Literal

from pydantic import Field

from skirmish.core.constants import LogKind

from .base_effect import Effect, TickContext


class DamageOverTimeEffect(Effect):
    """
    Damage over Time effect that deals a fixed amount of damage each tick.

    On the player a tick never takes HP below 1: only direct hits and damage
    shield reflection can kill the player. On the mob HP floors at 0 and the
    tick that takes it from positive to zero flags the death.
    """

    effect_type: Literal["DamageOverTimeEffect"] = "DamageOverTimeEffect"

    tick_damage: int = Field(
        ge=0,
        description="Damage dealt each tick, after resists were applied at cast time.",
    )
    tap: bool = Field(
        default=False,
        description="Whether the damage dealt heals the opposing combatant.",
    )
    school: str | None = Field(
        default=None,
        description="Spell school resisted when the effect is cast, if any.",
    )

    @property
    def color(self) -> str:
        """Returns the color string for damage over time effects."""
        return "bold magenta"

    @property
    def emoji(self) -> str:
        """Returns the emoji for damage over time effects."""
        return "❣️"

    def on_tick(self, ctx: TickContext) -> None:
        if self.tick_damage <= 0:
            if ctx.is_player:
                ctx.add_log(f"{self.name} was resisted.", LogKind.SYSTEM)
            else:
                ctx.add_log(f"{ctx.target_name} resists {self.name}.", LogKind.SYSTEM)
            return

        hp_before = ctx.vitals.hp
        dealt = -ctx.vitals.adjust_hp(-self.tick_damage, floor=1 if ctx.is_player else 0)
        ctx.add_log(f"{self.name} deals {dealt} damage to {ctx.victim}.", LogKind.DAMAGE)

        if not ctx.is_player and hp_before > 0 and ctx.vitals.hp == 0:
            ctx.mob_died = True

        if self.tap and dealt > 0 and ctx.opponent_vitals is not None:
            healed = ctx.opponent_vitals.adjust_hp(dealt)
            if healed > 0:
                ctx.add_log(
                    f"{self.name} heals {ctx.beneficiary} for {healed}.", LogKind.HEAL
                )
