"""
Root effect module for the combat core.
"""

from typing import Literal

from .base_effect import Effect


class RootEffect(Effect):
    """
    Holds the target in place.

    A root may break on every scheduler tick, with a chance that shrinks as
    the caster's charisma grows, and when its target is struck.
    """

    effect_type: Literal["RootEffect"] = "RootEffect"

    @property
    def color(self) -> str:
        return "green"

    @property
    def emoji(self) -> str:
        return "🌿"

    def break_chance(self, base: float = 0.15, cha_divisor: float = 1000.0) -> float:
        """
        Chance for the root to break on a scheduler tick.

        Args:
            base (float):
                Break chance with a zero-charisma caster.
            cha_divisor (float):
                Charisma needed to remove one unit of chance. The default
                of 1000 makes every 10 charisma worth 1%.

        Returns:
            float:
                `max(0, base - caster_cha / cha_divisor)`.

        """
        return max(0.0, base - max(0.0, self.caster_cha) / cha_divisor)
