"""
Incapacitating effect module for the combat core.

Defines effects that prevent a combatant from attacking, such as mez and
stun.
"""

from typing import Literal

from pydantic import Field

from skirmish.core.constants import IncapacitationType

from .base_effect import Effect


class IncapacitatingEffect(Effect):
    """
    Effect that prevents a combatant from attacking while it is active.

    A mez is broken by any direct hit on its target; a stun lasts until it
    expires.
    """

    effect_type: Literal["IncapacitatingEffect"] = "IncapacitatingEffect"

    incapacitation: IncapacitationType = Field(
        description="Type of incapacitation.",
    )

    @property
    def color(self) -> str:
        return "bold purple"

    @property
    def emoji(self) -> str:
        return self.incapacitation.emoji

    def breaks_on_damage(self) -> bool:
        """
        Check if taking a direct hit should break this incapacitation.

        Returns:
            bool:
                True for a mez, False otherwise.

        """
        return self.incapacitation == IncapacitationType.MEZ
