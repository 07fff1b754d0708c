"""
Base effect module for the combat core.

Defines the base class shared by every effect kind, the per-target active
instance wrapper, and the context handed to an effect when it ticks.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from skirmish.core.constants import CombatTarget, LogKind
from skirmish.entities.vitals import Vitals


@dataclass
class TickContext:
    """
    Everything an effect may touch while it ticks on one target.

    Attributes:
        target (CombatTarget): Who carries the effect.
        target_name (str): Display name of the target.
        vitals (Vitals): Vitals of the target.
        opponent_vitals (Vitals | None): Vitals of the opposing combatant.
        opponent_name (str): Display name of the opposing combatant.
        add_log (Callable[[str, LogKind], None]): Combat log sink.
        mob_died (bool): Set when a tick takes the mob from positive HP to 0.

    """

    target: CombatTarget
    target_name: str
    vitals: Vitals
    opponent_vitals: Vitals | None
    opponent_name: str
    add_log: Callable[[str, LogKind], None]
    mob_died: bool = False

    @property
    def is_player(self) -> bool:
        return self.target == CombatTarget.PLAYER

    @property
    def victim(self) -> str:
        """How the target is named at the end of a log sentence."""
        return "you" if self.is_player else self.target_name

    @property
    def beneficiary(self) -> str:
        """How the opposing combatant is named at the end of a log sentence."""
        return self.opponent_name if self.is_player else "you"


class Effect(BaseModel):
    """
    Base class for all timed effects that can be applied to a combatant.

    Every effect has a positive duration in seconds, a tick interval that
    throttles its periodic action, optional additive stat modifiers, and an
    optional message logged when it expires.
    """

    name: str = Field(
        description="The name of the effect. Adding an effect replaces any other with the same name.",
    )
    description: str = Field(
        "",
        description="A brief description of the effect.",
    )
    duration: float = Field(
        gt=0,
        description="The duration of the effect in seconds.",
    )
    tick_interval: float = Field(
        default=2.0,
        gt=0,
        description="Minimum number of seconds between two periodic actions.",
    )
    on_expire: str | None = Field(
        default=None,
        description="Message logged when the effect expires.",
    )
    stat_mods: dict[str, float] = Field(
        default_factory=dict,
        description="Additive stat modifiers granted while the effect is active.",
    )
    caster_cha: float = Field(
        default=0,
        ge=0,
        description="Charisma of the caster when the effect was applied.",
    )

    @property
    def color(self) -> str:
        """Returns the color string associated with this effect type."""
        return "dim white"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this effect type."""
        return "❔"

    @property
    def colored_name(self) -> str:
        """Returns the effect name with color formatting applied."""
        return self.colorize(self.name)

    def colorize(self, message: str) -> str:
        """Applies effect color formatting to a message."""
        return f"[{self.color}]{message}[/]"

    def on_tick(self, ctx: TickContext) -> None:
        """
        Performs the periodic action of the effect.

        Called by the scheduler when `last_tick + tick_interval <= now`. The
        base effect has no periodic action.

        Args:
            ctx (TickContext):
                The target and its collaborators.

        """
        return None


class ActiveEffect(BaseModel):
    """
    An effect applied to one combatant, with its timing state.
    """

    id: str = Field(
        default_factory=lambda: uuid.uuid4().hex,
        description="Unique id of this application.",
    )
    target: CombatTarget = Field(
        description="The combatant carrying the effect.",
    )
    effect: Effect = Field(
        description="The effect being applied.",
    )
    expires_at: float = Field(
        description="Time at which the effect expires.",
    )
    last_tick: float = Field(
        description="Time of the last periodic action (the application time at first).",
    )
    rune_remaining: int = Field(
        default=0,
        ge=0,
        description="Absorption left on a rune.",
    )

    @property
    def name(self) -> str:
        return self.effect.name

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now

    def is_due(self, now: float) -> bool:
        """True when the periodic action may fire at `now`."""
        return self.last_tick + self.effect.tick_interval <= now

    def remaining(self, now: float) -> float:
        return max(0.0, self.expires_at - now)

    def model_post_init(self, _: Any) -> None:
        if not isinstance(self.effect, Effect):
            raise TypeError("effect must be an Effect instance.")
