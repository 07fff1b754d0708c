"""
Static data loading.

Collects mob templates, camps, loot tables, items and class growth tables
into one read-only registry. Raw records are ingested through the pydantic
models, which resolves every historical field alias up front.
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catchery import log_warning

from skirmish.core.utils import cprint
from skirmish.entities.definitions import (
    CampDefinition,
    ClassGrowth,
    ItemDefinition,
    LootEntry,
)
from skirmish.entities.mob import MobTemplate

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class StaticData:
    """
    Registry of every static record the combat core reads.

    Attributes:
        mobs (dict[str, MobTemplate]): Mob templates keyed by id.
        camps (dict[str, CampDefinition]): Camps keyed by id.
        loot_tables (dict[str, list[LootEntry]]): Loot tables keyed by id.
        items (dict[str, ItemDefinition]): Item definitions keyed by id.
        classes (dict[str, ClassGrowth]): Class growth tables keyed by name.

    """

    def __init__(
        self,
        mobs: dict[str, MobTemplate] | None = None,
        camps: dict[str, CampDefinition] | None = None,
        loot_tables: dict[str, list[LootEntry]] | None = None,
        items: dict[str, ItemDefinition] | None = None,
        classes: dict[str, ClassGrowth] | None = None,
    ) -> None:
        self.mobs = mobs or {}
        self.camps = camps or {}
        self.loot_tables = loot_tables or {}
        self.items = items or {}
        self.classes = classes or {}

    @classmethod
    def load(cls, root: Path = DEFAULT_DATA_DIR) -> "StaticData":
        """
        Loads every data file found in `root`.

        Args:
            root (Path):
                Directory holding mobs.json, camps.json, loot_tables.json,
                items.json and classes.json.

        Returns:
            StaticData:
                The populated registry.

        """
        return cls(
            mobs=_load_json_file(root / "mobs.json", cls._load_mobs, "mob templates"),
            camps=_load_json_file(root / "camps.json", cls._load_camps, "camps"),
            loot_tables=_load_json_file(
                root / "loot_tables.json", cls._load_loot_tables, "loot tables"
            ),
            items=_load_json_file(root / "items.json", cls._load_items, "items"),
            classes=_load_json_file(
                root / "classes.json", cls._load_classes, "class growth tables"
            ),
        )

    def get_camp(self, camp_id: str) -> CampDefinition | None:
        """Get a camp by id, or None if not found."""
        return self._get_from_collection("camps", camp_id)

    def get_loot_table(self, loot_table_id: str | None) -> list[LootEntry]:
        """Get a loot table by id. Unknown or missing ids yield no entries."""
        if not loot_table_id:
            return []
        return self.loot_tables.get(loot_table_id, [])

    def get_item(self, item_id: str) -> ItemDefinition | None:
        """Get an item definition by id, or None if not found."""
        return self.items.get(item_id)

    def get_class(self, name: str) -> ClassGrowth | None:
        """Get a class growth table by name, or None if not found."""
        return self._get_from_collection("classes", name)

    def camp_pool(self, camp_id: str) -> list[tuple[MobTemplate, Any]]:
        """
        Resolves a camp's members into (template, weight) pairs.

        Members pointing at unknown mob templates are skipped with a warning.
        """
        camp = self.camps.get(camp_id)
        if camp is None:
            return []
        pool: list[tuple[MobTemplate, Any]] = []
        for member in camp.members:
            template = self.mobs.get(member.mob_id)
            if template is None:
                log_warning(
                    f"Camp '{camp_id}' references unknown mob '{member.mob_id}'.",
                    {"camp_id": camp_id, "mob_id": member.mob_id},
                )
                continue
            pool.append((template, member.weight))
        return pool

    def _get_from_collection(self, collection_name: str, key: str) -> Any | None:
        collection = getattr(self, collection_name)
        entry = collection.get(key)
        if entry is None:
            log_warning(
                f"No entry '{key}' in collection '{collection_name}'.",
                {"collection_name": collection_name, "key": key},
            )
        return entry

    @staticmethod
    def _load_mobs(data: list[dict]) -> dict[str, MobTemplate]:
        mobs: dict[str, MobTemplate] = {}
        for raw in data:
            template = MobTemplate.from_raw(raw)
            if template.id in mobs:
                raise ValueError(f"Duplicate mob id: {template.id}")
            mobs[template.id] = template
        return mobs

    @staticmethod
    def _load_camps(data: list[dict]) -> dict[str, CampDefinition]:
        camps: dict[str, CampDefinition] = {}
        for raw in data:
            camp = CampDefinition.model_validate(raw)
            if camp.id in camps:
                raise ValueError(f"Duplicate camp id: {camp.id}")
            camps[camp.id] = camp
        return camps

    @staticmethod
    def _load_loot_tables(data: list[dict]) -> dict[str, list[LootEntry]]:
        return {
            str(raw["id"]): [LootEntry.model_validate(e) for e in raw.get("entries", [])]
            for raw in data
        }

    @staticmethod
    def _load_items(data: list[dict]) -> dict[str, ItemDefinition]:
        items = [ItemDefinition.model_validate(raw) for raw in data]
        return {item.id: item for item in items}

    @staticmethod
    def _load_classes(data: list[dict]) -> dict[str, ClassGrowth]:
        classes: dict[str, ClassGrowth] = {}
        for raw in data:
            growth = ClassGrowth.model_validate(raw)
            if growth.name in classes:
                raise ValueError(f"Duplicate class name: {growth.name}")
            classes[growth.name] = growth
        return classes


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[list[dict]], dict[str, Any]],
    description: str,
) -> dict[str, Any]:
    """Helper to load and validate JSON files"""
    try:
        cprint(f"  Loading {description}...", style="bold green")
        if not filepath.is_file():
            raise FileNotFoundError(f"File not found: {filepath}")
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected list in {filepath}, got {type(data).__name__}")
        return loader_func(data)
    except (json.JSONDecodeError, FileNotFoundError, ValueError) as e:
        raise ValueError(f"File {filepath} raised an error: {e}") from e
