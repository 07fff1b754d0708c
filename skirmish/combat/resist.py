"""
Resist module for the combat core.

Computes spell mitigation in both directions: flat school resists first,
then a percent reduction. Every value is read fresh from the providers on
each call; nothing is cached between hits.
"""

import math
from collections.abc import Callable

from pydantic import BaseModel, Field

from skirmish.core.config import DEFAULT_CONFIG, CombatConfig
from skirmish.core.constants import DamageSchool
from skirmish.core.utils import clamp
from skirmish.entities.mob import MobInstance
from skirmish.entities.stats import PlayerStatTotals


class ResistResult(BaseModel):
    """Outcome of one resist computation."""

    final: int = Field(
        description="Damage left after flat and percent reduction.",
    )
    resist_reduced: float = Field(
        description="Damage removed by the flat resist.",
    )
    total_reduced: float = Field(
        description="Damage removed by the percent reduction.",
    )


def apply_resist(base: float, resist_val: float = 0, total_pct: float = 0) -> ResistResult:
    """
    Applies a flat resist, then a percent reduction, to `base`.

    Args:
        base (float):
            Incoming damage.
        resist_val (float):
            Flat resist subtracted first.
        total_pct (float):
            Percent reduction applied to what is left, rounded down.

    Returns:
        ResistResult:
            The final damage and the amount each stage removed.

    """
    after_flat = max(0, base - resist_val)
    after_pct = max(0, math.floor(after_flat * (1 - total_pct / 100)))
    return ResistResult(
        final=after_pct,
        resist_reduced=base - after_flat,
        total_reduced=after_flat - after_pct,
    )


class ResistCalculator:
    """
    Spell mitigation between the player and the current mob.

    Args:
        player_totals (Callable[[], PlayerStatTotals]):
            Live provider of the player's stat totals.
        current_mob (Callable[[], MobInstance | None]):
            Live provider of the active mob.
        player_level (Callable[[], int]):
            Live provider of the player's level.
        config (CombatConfig):
            Level scaling of resists.

    """

    def __init__(
        self,
        player_totals: Callable[[], PlayerStatTotals],
        current_mob: Callable[[], MobInstance | None],
        player_level: Callable[[], int],
        config: CombatConfig = DEFAULT_CONFIG,
    ) -> None:
        self.player_totals = player_totals
        self.current_mob = current_mob
        self.player_level = player_level
        self.config = config

    def _level_adjust(self, diff: int) -> float:
        limit = self.config.level_resist_clamp
        return clamp(diff * self.config.resist_per_level, -limit, limit)

    def _mob_level(self) -> int:
        mob = self.current_mob()
        return mob.level if mob is not None else 0

    def resist_value(self, school: str | DamageSchool | None = "magic") -> float:
        """The player's flat resist for `school` (0 for unknown schools)."""
        return self.player_totals().resists.value_for(school)

    def mob_resist_value(self, school: str | DamageSchool | None = "magic") -> float:
        """The mob's flat resist for `school` (0 without a mob)."""
        mob = self.current_mob()
        if mob is None:
            return 0
        return mob.stats.resists.value_for(school)

    def mob_total_resist(self) -> float:
        """The mob's percent reduction: total resist plus a tenth of its charisma."""
        mob = self.current_mob()
        if mob is None:
            return 0
        return mob.stats.total_resist + math.floor(mob.stats.charisma / 10)

    def mob_spell_damage_mod(self) -> int:
        """Bonus spell damage percent from the mob's intelligence."""
        mob = self.current_mob()
        if mob is None:
            return 0
        return math.floor(mob.stats.intelligence / 10)

    def mob_heal_mod(self) -> int:
        """Bonus healing percent from the mob's wisdom."""
        mob = self.current_mob()
        if mob is None:
            return 0
        return math.floor(mob.stats.wisdom / 10)

    def mitigate_spell_damage(
        self, base: float, school: str | DamageSchool | None = "magic"
    ) -> ResistResult:
        """
        Mitigates a mob spell hitting the player.

        Each level the mob has over the player adds one point of effective
        player resist (and each level under removes one), within +/- 10.
        """
        level_adj = self._level_adjust(self._mob_level() - self.player_level())
        effective = max(0, self.resist_value(school) + level_adj)
        return apply_resist(base, effective, self.player_totals().total_resist)

    def mitigate_spell_damage_vs_mob(
        self, base: float, school: str | DamageSchool | None = "magic"
    ) -> ResistResult:
        """Mitigates a player spell hitting the mob."""
        level_adj = self._level_adjust(self.player_level() - self._mob_level())
        effective = max(0, self.mob_resist_value(school) - level_adj)
        return apply_resist(base, effective, self.mob_total_resist())
