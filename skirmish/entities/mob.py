"""
Mob templates and mob instances.

A MobTemplate is the read-only static record of a creature. A MobInstance is
the ephemeral, validated entity created from it for one encounter: every
combat-relevant number is required, and a missing one is a configuration
error rather than a value to guess.
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skirmish.core.constants import INTERACTION_TAGS
from skirmish.core.errors import raise_configuration_error
from skirmish.core.utils import to_finite_number
from skirmish.entities.stats import MobStatBlock

REQUIRED_NUMERIC_FIELDS = (
    "level",
    "hp",
    "mana",
    "endurance",
    "damage",
    "xp",
    "ac",
    "delay",
    "movespeed",
)

DEFAULT_RANGE = 10


class MobTemplate(BaseModel):
    """
    Static definition of a creature as loaded from data.

    Numeric fields are kept as optional raw numbers so that a broken record
    is reported when a mob is spawned from it, naming the missing field.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = "Unknown"
    level: float | None = None
    max_level: float | None = Field(default=None, alias="maxLevel")
    hp: float | None = None
    mana: float | None = None
    endurance: float | None = None
    damage: float | None = None
    xp: float | None = None
    ac: float | None = None
    delay: float | None = None
    movespeed: float | None = None
    melee_range: float | None = Field(default=None, alias="meleeRange")
    aggro_range: float | None = Field(default=None, alias="aggroRange")
    tags: list[str] = Field(default_factory=list)
    race_id: int | None = Field(default=None, alias="raceId")
    gender: int = 0
    texture_id: int = Field(default=1, alias="textureId")
    loot_table_id: str | None = Field(default=None, alias="lootTableId")
    damage_type: str = Field(default="melee", alias="damageType")
    damage_school: str = Field(default="magic", alias="damageSchool")
    stats: MobStatBlock = Field(default_factory=MobStatBlock)

    @field_validator(
        "level",
        "max_level",
        "hp",
        "mana",
        "endurance",
        "damage",
        "xp",
        "ac",
        "delay",
        "movespeed",
        "melee_range",
        "aggro_range",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, value: Any) -> float | None:
        return to_finite_number(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        # Older records store tags as {"Merchant": true, ...}.
        if value is None:
            return []
        if isinstance(value, Mapping):
            return [str(tag) for tag, enabled in value.items() if enabled]
        return [str(tag) for tag in value]

    @field_validator("id", "loot_table_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> MobTemplate:
        """Ingests a raw record, resolving the stat alias chains."""
        data = dict(raw)
        data.setdefault("stats", MobStatBlock.from_raw(raw))
        if "tags" not in data and "tagsObj" in data:
            data["tags"] = data["tagsObj"]
        return cls.model_validate(data)


class MobInstance(BaseModel):
    """A live, normalized mob for one encounter."""

    id: str
    name: str
    level: int
    max_level: int | None = None
    hp: int
    mana: int
    endurance: int
    damage: int
    xp: int
    ac: int
    delay: float
    movespeed: float
    melee_range: float
    aggro_range: float
    tags: list[str] = Field(default_factory=list)
    race_id: int | None = None
    gender: int = 0
    texture_id: int = 1
    loot_table_id: str | None = None
    damage_type: str = "melee"
    damage_school: str = "magic"
    stats: MobStatBlock = Field(default_factory=MobStatBlock)
    distance: float = 0.0

    @property
    def key(self) -> str:
        """Identity used by the kill dedupe guard."""
        return self.id or self.name or "mob"

    @property
    def is_interaction(self) -> bool:
        """True for merchants and bankers, which never enter combat."""
        return any(tag in INTERACTION_TAGS for tag in self.tags)

    @property
    def is_neutral(self) -> bool:
        return "Neutral" in self.tags

    @property
    def casts_spells(self) -> bool:
        return self.damage_type == "spell"

    @classmethod
    def from_template(
        cls, template: MobTemplate, rng: random.Random | None = None
    ) -> MobInstance:
        """
        Validates a template and rolls a fresh instance from it.

        Args:
            template (MobTemplate):
                The static record.
            rng (random.Random | None):
                Random source for the level roll.

        Returns:
            MobInstance:
                The normalized mob, distance 0.

        Raises:
            ConfigurationError:
                If any required numeric field is missing or not finite.

        """
        rng = rng or random.Random()
        values: dict[str, float] = {}
        for field in REQUIRED_NUMERIC_FIELDS:
            value = getattr(template, field)
            if value is None:
                raise_configuration_error(
                    f"Mob {template.name} missing required numeric field: {field}",
                    {"mob_id": template.id, "field": field},
                )
            values[field] = value
        base_level = int(values["level"])
        max_level = None if template.max_level is None else int(template.max_level)
        level = base_level
        if max_level is not None and max_level > base_level:
            level = rng.randint(base_level, max_level)
        return cls(
            id=template.id,
            name=template.name,
            level=level,
            max_level=max_level,
            hp=int(values["hp"]),
            mana=int(values["mana"]),
            endurance=int(values["endurance"]),
            damage=int(values["damage"]),
            xp=int(values["xp"]),
            ac=int(values["ac"]),
            delay=values["delay"],
            movespeed=values["movespeed"],
            melee_range=template.melee_range or DEFAULT_RANGE,
            aggro_range=template.aggro_range or DEFAULT_RANGE,
            tags=list(template.tags),
            race_id=template.race_id,
            gender=template.gender,
            texture_id=template.texture_id,
            loot_table_id=template.loot_table_id,
            damage_type=template.damage_type,
            damage_school=template.damage_school,
            stats=template.stats,
        )
