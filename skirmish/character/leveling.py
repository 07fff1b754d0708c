"""
Leveling module for the combat core.

Turns accumulated experience into levels. Each level costs `xp_base * level`
experience; every level gained adds the class's per-level growth to the base
attributes and base vitals. Levels are never lost.
"""

from pydantic import BaseModel, Field

from skirmish.core.config import DEFAULT_CONFIG, CombatConfig
from skirmish.core.constants import LogKind
from skirmish.core.content import StaticData
from skirmish.core.errors import ContractViolationError
from skirmish.core.interfaces import CombatLogSink, SaveScheduler
from skirmish.entities.definitions import ClassGrowth
from skirmish.entities.stats import Attributes

from .state import BaseVitals, CharacterState


class LevelingResult(BaseModel):
    """Outcome of processing an experience change."""

    level: int
    xp: int
    level_ups: int = 0
    base_stats: Attributes
    base_vitals: BaseVitals
    messages: list[str] = Field(default_factory=list)


def level_up_message(level: int) -> str:
    return f"You have gained a level! You are now level {level}!"


def process_xp(
    xp: int,
    level: int,
    xp_base: int,
    growth: ClassGrowth | None,
    base_stats: Attributes,
    base_vitals: BaseVitals,
) -> LevelingResult:
    """
    Resolves every level threshold crossed by `xp`.

    Args:
        xp (int):
            Experience accumulated towards the next level.
        level (int):
            Current level.
        xp_base (int):
            Experience per level step; leaving level N costs `xp_base * N`.
        growth (ClassGrowth | None):
            Per-level growth of the class, or None for no growth.
        base_stats (Attributes):
            Attributes before the level-ups.
        base_vitals (BaseVitals):
            Vital maxima before the level-ups.

    Returns:
        LevelingResult:
            The new level, the remaining experience, the number of levels
            gained, the grown base values and one message per level.

    """
    if xp_base <= 0:
        raise ContractViolationError("xp_base must be positive", {"xp_base": xp_base})

    messages: list[str] = []
    level_ups = 0
    while xp >= xp_base * level:
        xp -= xp_base * level
        level += 1
        level_ups += 1
        messages.append(level_up_message(level))

    if level_ups and growth is not None:
        base_stats = base_stats.plus(growth.stat_growth, level_ups)
        base_vitals = BaseVitals(
            hp=base_vitals.hp + growth.hp_per_level * level_ups,
            mana=base_vitals.mana + growth.mana_per_level * level_ups,
            endurance=base_vitals.endurance + growth.endurance_per_level * level_ups,
        )

    return LevelingResult(
        level=level,
        xp=xp,
        level_ups=level_ups,
        base_stats=base_stats,
        base_vitals=base_vitals,
        messages=messages,
    )


class LevelingProcessor:
    """
    Applies `process_xp` to the character whenever its experience changes.

    All level-ups of one change are persisted together in a single immediate
    save. Nothing is saved when no level is gained.
    """

    def __init__(
        self,
        character: CharacterState,
        static: StaticData,
        log: CombatLogSink,
        save: SaveScheduler,
        config: CombatConfig = DEFAULT_CONFIG,
    ) -> None:
        self.character = character
        self.static = static
        self.log = log
        self.save = save
        self.config = config

    def growth(self) -> ClassGrowth | None:
        """The class growth table, or None (with a warning) for an unknown class."""
        return self.static.get_class(self.character.class_name)

    def on_xp_changed(self) -> LevelingResult | None:
        """Levels the character up as far as its experience allows."""
        character = self.character
        if character.xp < self.config.xp_base * character.level:
            return None

        result = process_xp(
            character.xp,
            character.level,
            self.config.xp_base,
            self.growth(),
            character.base_stats,
            character.base_vitals,
        )
        for message in result.messages:
            self.log.add_log(message, LogKind.LEVELUP)

        character.level = result.level
        character.xp = result.xp
        character.base_stats = result.base_stats
        character.base_vitals = result.base_vitals

        stats = {f"{key}_base": value for key, value in result.base_stats.to_short_dict().items()}
        self.save.schedule_save(
            {
                "character": {
                    "level": result.level,
                    "xp": result.xp,
                    **stats,
                    "base_hp": result.base_vitals.hp,
                    "base_mana": result.base_vitals.mana,
                    "base_endurance": result.base_vitals.endurance,
                },
                "inventory": True,
            },
            immediate=True,
        )
        return result
