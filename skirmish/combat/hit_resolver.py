"""
Hit resolution for the combat core.

A pure function that turns raw damage into final damage through mitigation,
spell resists and rune absorption, and reports any damage shield reflection.
It never mutates vitals itself.
"""

import math
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field

from skirmish.core.errors import ContractViolationError, require_callable, require_finite

from .resist import ResistResult


class HitOutcome(BaseModel):
    """Result of applying one hit."""

    resisted: bool = Field(
        description="True when a spell was fully resisted.",
    )
    final_damage: int = Field(
        description="Damage that reached HP after runes.",
    )
    new_hp: int = Field(
        description="HP of the target after the hit.",
    )
    damage_shield_reflected: int = Field(
        default=0,
        description="Damage to send back to a melee attacker.",
    )


def apply_hit(
    raw_damage: float,
    is_spell: bool = False,
    school: str | None = "magic",
    mitigation: float = 0,
    current_hp: float | None = None,
    damage_shield: float = 0,
    consume_rune: Callable[[float], float] | None = None,
    mitigate_spell_damage: Callable[[float, Any], ResistResult] | None = None,
    on_death: Callable[[], None] | None = None,
) -> HitOutcome:
    """
    Applies a hit to a target.

    Args:
        raw_damage (float):
            Damage before any mitigation.
        is_spell (bool):
            Spells go through `mitigate_spell_damage`; other hits subtract
            `mitigation` and always deal at least 1.
        school (str | None):
            Spell school passed to the mitigation function.
        mitigation (float):
            Flat reduction of non-spell hits.
        current_hp (float):
            HP of the target before the hit.
        damage_shield (float):
            Damage shield of the target, reflected on non-spell hits.
        consume_rune (Callable[[float], float]):
            Absorbs damage with the target's runes, returning the absorbed part.
        mitigate_spell_damage (Callable[[float, Any], ResistResult]):
            Resist function for spell hits.
        on_death (Callable[[], None] | None):
            Called once, before returning, when the hit leaves the target at 0 HP.

    Returns:
        HitOutcome:
            The resolved hit.

    Raises:
        ContractViolationError:
            If a number is not finite or a required callback is missing.

    """
    require_finite(raw_damage, "raw_damage")
    require_finite(current_hp, "current_hp")
    require_callable(consume_rune, "consume_rune")
    require_callable(mitigate_spell_damage, "mitigate_spell_damage")

    if is_spell:
        mitigated = mitigate_spell_damage(raw_damage, school).final
    else:
        mitigated = max(1, raw_damage - mitigation)

    if not isinstance(mitigated, (int, float)) or not math.isfinite(mitigated):
        raise ContractViolationError(
            "apply_hit produced non-finite mitigated damage", {"mitigated": mitigated}
        )

    if is_spell and mitigated <= 0:
        return HitOutcome(
            resisted=True,
            final_damage=0,
            new_hp=int(current_hp),
            damage_shield_reflected=0,
        )

    absorbed = consume_rune(mitigated)
    final_damage = max(0, int(mitigated - absorbed))
    new_hp = max(0, int(current_hp - final_damage))

    if new_hp == 0 and on_death is not None:
        on_death()

    return HitOutcome(
        resisted=False,
        final_damage=final_damage,
        new_hp=new_hp,
        damage_shield_reflected=0 if is_spell else max(0, int(damage_shield)),
    )
