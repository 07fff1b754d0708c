"""
Read-only static definitions: camps, loot tables, items and class growth.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skirmish.entities.stats import Attributes


class CampMember(BaseModel):
    """One weighted entry of a camp's mob pool."""

    mob_id: str
    # Kept raw: an invalid weight is reported when the pool is drawn from.
    weight: Any = None

    @field_validator("mob_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)


class CampDefinition(BaseModel):
    """A static location grouping a weighted mob pool and a respawn timer."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    zone_id: str | None = None
    # Kept raw: a missing respawn time is reported when a kill needs it.
    spawn_time: Any = Field(default=None, alias="spawnTime")
    camp_area: float = Field(default=0, ge=0, alias="campArea")
    content_flags: list[str] = Field(default_factory=list, alias="contentFlags")
    target_zone_id: str | None = Field(default=None, alias="targetZoneId")
    connected: list[str] = Field(default_factory=list)
    xp_mod: float = Field(default=1.0, alias="xpMod")
    members: list[CampMember] = Field(default_factory=list)

    @field_validator("id", "zone_id", "target_zone_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return None if value is None else str(value)


class LootEntry(BaseModel):
    """One independently rolled line of a loot table."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(alias="itemId")
    drop_chance: float | None = Field(default=None, alias="dropChance")
    min_qty: int | None = Field(default=None, alias="minQty")
    max_qty: int | None = Field(default=None, alias="maxQty")

    @field_validator("item_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)


class ItemDefinition(BaseModel):
    """Minimal item definition needed to grant loot."""

    id: str
    name: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)


class ClassGrowth(BaseModel):
    """Per-level growth of a character class."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    stat_growth: Attributes = Field(default_factory=Attributes, alias="statGrowth")
    hp_per_level: int = Field(default=0, alias="hpPerLevel")
    mana_per_level: int = Field(default=0, alias="manaPerLevel")
    endurance_per_level: int = Field(default=0, alias="endurancePerLevel")
