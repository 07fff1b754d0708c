"""
Stat snapshots consumed by the resist and mitigation formulas.

Static data has used several field names for the same stat over time
(`mr`, `magic_resist`, `magicResist`, ...). The alias chains are resolved
here, once, when raw records are ingested, so the combat formulas only ever
see the canonical fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from skirmish.core.constants import DamageSchool
from skirmish.core.utils import to_finite_number

RESIST_ALIASES: dict[DamageSchool, tuple[str, ...]] = {
    DamageSchool.POISON: ("pr", "poison_resist", "poisonResist"),
    DamageSchool.DISEASE: ("dr", "disease_resist", "diseaseResist"),
    DamageSchool.FIRE: ("fr", "fire_resist", "fireResist"),
    DamageSchool.COLD: ("cr", "cold_resist", "coldResist"),
    DamageSchool.MAGIC: ("mr", "magic_resist", "magicResist"),
}

CHARISMA_ALIASES = ("cha", "charisma")
INTELLIGENCE_ALIASES = ("int", "intelligence")
WISDOM_ALIASES = ("wis", "wisdom")
AGILITY_ALIASES = ("agi", "agility")
TOTAL_RESIST_ALIASES = ("total_resist", "totalResist")


def resolve_alias(raw: Mapping[str, Any], aliases: tuple[str, ...]) -> float:
    """
    Returns the first non-zero numeric value found under any alias.

    Args:
        raw (Mapping[str, Any]):
            The raw record.
        aliases (tuple[str, ...]):
            Field names to try, in priority order.

    Returns:
        float:
            The resolved value, or 0 when no alias carries a usable number.

    """
    for key in aliases:
        number = to_finite_number(raw.get(key))
        if number:
            return number
    return 0


class Attributes(BaseModel):
    """The seven primary attributes, addressable by their short keys."""

    model_config = ConfigDict(populate_by_name=True)

    strength: int = Field(default=0, alias="str")
    stamina: int = Field(default=0, alias="sta")
    agility: int = Field(default=0, alias="agi")
    dexterity: int = Field(default=0, alias="dex")
    intelligence: int = Field(default=0, alias="int")
    wisdom: int = Field(default=0, alias="wis")
    charisma: int = Field(default=0, alias="cha")

    def plus(self, other: Attributes, times: int = 1) -> Attributes:
        """Returns a copy with `other * times` added to every attribute."""
        return Attributes(
            **{
                name: getattr(self, name) + getattr(other, name) * times
                for name in type(self).model_fields
            }
        )

    def to_short_dict(self) -> dict[str, int]:
        """Returns the attributes keyed by their short names (`str`, `sta`, ...)."""
        return self.model_dump(by_alias=True)


class ResistProfile(BaseModel):
    """Canonical resist value per damage school."""

    poison: float = 0
    disease: float = 0
    fire: float = 0
    cold: float = 0
    magic: float = 0

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> ResistProfile:
        """Builds a profile from a raw record, walking every alias chain."""
        return cls(
            **{
                school.value: resolve_alias(raw, aliases)
                for school, aliases in RESIST_ALIASES.items()
            }
        )

    def value_for(self, school: str | DamageSchool | None) -> float:
        """
        Returns the resist for `school`.

        Args:
            school (str | DamageSchool | None):
                The school. Names that are not resist schools resolve to 0.

        Returns:
            float:
                The resist value.

        """
        parsed = DamageSchool.parse(school)
        if parsed is None:
            return 0
        return getattr(self, parsed.value)


class MobStatBlock(BaseModel):
    """Stats of a mob that feed the resist formulas and derived modifiers."""

    resists: ResistProfile = Field(default_factory=ResistProfile)
    total_resist: float = 0
    charisma: float = 0
    intelligence: float = 0
    wisdom: float = 0
    agility: float = 0

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> MobStatBlock:
        """Builds the block from a raw mob record, resolving all aliases."""
        return cls(
            resists=ResistProfile.from_raw(raw),
            total_resist=resolve_alias(raw, TOTAL_RESIST_ALIASES),
            charisma=resolve_alias(raw, CHARISMA_ALIASES),
            intelligence=resolve_alias(raw, INTELLIGENCE_ALIASES),
            wisdom=resolve_alias(raw, WISDOM_ALIASES),
            agility=resolve_alias(raw, AGILITY_ALIASES),
        )


class PlayerStatTotals(BaseModel):
    """
    Gear, buff and base stat totals of the player, as computed by the host.

    The combat core reads a fresh snapshot on every hit and never caches it.
    """

    attributes: Attributes = Field(default_factory=Attributes)
    resists: ResistProfile = Field(default_factory=ResistProfile)
    total_resist: float = Field(
        default=0,
        description="Percent reduction applied after flat resists.",
    )
    ac: int = 0
    xp_bonus: float = Field(default=0, description="Bonus XP in percent.")
    min_damage: int = Field(default=1, ge=0)
    max_damage: int = Field(default=1, ge=0)
    movespeed: float = Field(default=1.0, ge=0)
