"""
Builders for raw records and static data shared by the tests.
"""

from skirmish.core.content import StaticData
from skirmish.entities.definitions import (
    CampDefinition,
    ClassGrowth,
    ItemDefinition,
    LootEntry,
)
from skirmish.entities.mob import MobTemplate


def mob_record(mob_id: str = "1", name: str = "a rat", **overrides) -> dict:
    """A raw mob record with every required numeric field present."""
    record = {
        "id": mob_id,
        "name": name,
        "level": 1,
        "hp": 20,
        "mana": 10,
        "endurance": 10,
        "damage": 4,
        "xp": 10,
        "ac": 0,
        "delay": 3.0,
        "movespeed": 1.0,
    }
    record.update(overrides)
    return record


def make_static(mobs=None, camps=None, loot_tables=None, items=None, classes=None):
    """Builds a StaticData registry from raw records."""
    mobs = mobs if mobs is not None else [mob_record()]
    camps = (
        camps
        if camps is not None
        else [
            {
                "id": "yard",
                "name": "The Yard",
                "zone_id": "field",
                "spawnTime": 10,
                "campArea": 0,
                "members": [{"mob_id": m["id"], "weight": 1} for m in mobs],
            }
        ]
    )
    return StaticData(
        mobs={str(m["id"]): MobTemplate.from_raw(m) for m in mobs},
        camps={str(c["id"]): CampDefinition.model_validate(c) for c in camps},
        loot_tables={
            table_id: [LootEntry.model_validate(e) for e in entries]
            for table_id, entries in (loot_tables or {}).items()
        },
        items={i["id"]: ItemDefinition.model_validate(i) for i in (items or [])},
        classes={
            c["name"]: ClassGrowth.model_validate(c)
            for c in (
                classes
                if classes is not None
                else [
                    {
                        "name": "Warrior",
                        "statGrowth": {"str": 2, "sta": 1},
                        "hpPerLevel": 10,
                        "endurancePerLevel": 5,
                    }
                ]
            )
        },
    )
