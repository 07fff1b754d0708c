"""
Modifier effect module for the combat core.

Defines timed buffs and debuffs whose only action is to grant additive stat
modifiers while they are active.
"""

from typing import Any, Literal

from .base_effect import Effect


class ModifierEffect(Effect):
    """
    A timed stat modifier, e.g. `{"str": 10, "ac": 5}` or `{"mod_damage": -20}`.

    Positive values make a buff, negative values a debuff.
    """

    effect_type: Literal["ModifierEffect"] = "ModifierEffect"

    @property
    def is_buff(self) -> bool:
        return sum(self.stat_mods.values()) >= 0

    @property
    def color(self) -> str:
        return "bold cyan" if self.is_buff else "bold red"

    @property
    def emoji(self) -> str:
        return "🛡️" if self.is_buff else "⚠️"

    def model_post_init(self, _: Any) -> None:
        if not self.stat_mods:
            raise ValueError(f"ModifierEffect '{self.name}' must modify at least one stat.")
