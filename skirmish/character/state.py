"""
Persistent state of the player character.

This is the part of the character the combat core reads and updates:
level and experience, base attributes and vitals, location and the
hardcore death stamp. Everything else about a character belongs to the host.
"""

from pydantic import BaseModel, Field

from skirmish.core.constants import GameMode
from skirmish.entities.stats import Attributes


class BaseVitals(BaseModel):
    """Base maxima of the vital pools, before gear and buffs."""

    hp: int = Field(default=100, ge=0)
    mana: int = Field(default=0, ge=0)
    endurance: int = Field(default=0, ge=0)


class CharacterState(BaseModel):
    """
    Progression state of the player character.

    Attributes:
        name (str): Character name.
        class_name (str): Name of the class growth table.
        level (int): Current level, starting at 1.
        xp (int): Experience accumulated towards the next level.
        base_stats (Attributes): Attributes before gear and buffs.
        base_vitals (BaseVitals): Vital maxima before gear and buffs.
        zone_id (str | None): Current zone.
        bind_zone_id (str | None): Zone the character returns to on death.
        mode (GameMode): Normal or hardcore.
        killed_at (str | None): ISO-8601 time of a hardcore death.

    """

    name: str = "Adventurer"
    class_name: str = "Warrior"
    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)
    base_stats: Attributes = Field(default_factory=Attributes)
    base_vitals: BaseVitals = Field(default_factory=BaseVitals)
    zone_id: str | None = None
    bind_zone_id: str | None = None
    mode: GameMode = GameMode.NORMAL
    killed_at: str | None = None

    @property
    def is_hardcore(self) -> bool:
        return self.mode == GameMode.HARDCORE

    @property
    def is_permanently_dead(self) -> bool:
        return self.is_hardcore and self.killed_at is not None
