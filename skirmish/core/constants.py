"""
Constants and enumerations for the combat core.

Defines the combat targets, log kinds, damage schools, game modes and the
other enumerations shared by every component of the combat core.
"""

from enum import Enum


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().capitalize()


class CombatTarget(NiceEnum):
    """Which of the two combatants an operation applies to."""

    PLAYER = "player"
    MOB = "mob"

    @property
    def opponent(self) -> "CombatTarget":
        """Returns the opposing combatant."""
        if self == CombatTarget.PLAYER:
            return CombatTarget.MOB
        return CombatTarget.PLAYER


class LogKind(NiceEnum):
    """Categories of combat log entries handed to the log collaborator."""

    DAMAGE = "damage"
    KILL = "kill"
    XP = "xp"
    LOOT = "loot"
    LEVELUP = "levelup"
    MOBATTACK = "mobattack"
    SPAWN = "spawn"
    SYSTEM = "system"
    FLEE = "flee"
    ERROR = "error"
    NORMAL = "normal"
    HEAL = "heal"

    @property
    def color(self) -> str:
        """Returns the color string associated with this log kind."""
        return {
            LogKind.DAMAGE: "bold yellow",
            LogKind.KILL: "bold red",
            LogKind.XP: "bold magenta",
            LogKind.LOOT: "bold green",
            LogKind.LEVELUP: "bold cyan",
            LogKind.MOBATTACK: "red",
            LogKind.SPAWN: "blue",
            LogKind.SYSTEM: "dim white",
            LogKind.FLEE: "yellow",
            LogKind.ERROR: "bold white on red",
            LogKind.HEAL: "green",
        }.get(self, "white")

    def colorize(self, message: str) -> str:
        """Applies log kind color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class DamageSchool(NiceEnum):
    """Spell schools that a resist value can be attached to."""

    POISON = "poison"
    DISEASE = "disease"
    FIRE = "fire"
    COLD = "cold"
    MAGIC = "magic"

    @classmethod
    def parse(cls, value: "str | DamageSchool | None") -> "DamageSchool | None":
        """
        Converts a school name into a DamageSchool.

        Args:
            value (str | DamageSchool | None):
                The school name, e.g. "fire". Unknown names (such as
                "physical") map to None.

        Returns:
            DamageSchool | None:
                The matching school, or None if the name is not a resist school.

        """
        if isinstance(value, DamageSchool):
            return value
        if not value:
            return None
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


class GameMode(NiceEnum):
    """Session modes that decide what happens when the player dies."""

    NORMAL = "normal"
    HARDCORE = "hardcore"


class ResourceType(NiceEnum):
    """Secondary resource pools that effects can restore or drain."""

    MANA = "mana"
    ENDURANCE = "endurance"


class IncapacitationType(NiceEnum):
    """Defines the types of incapacitation an effect can apply."""

    MEZ = "mez"
    STUN = "stun"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this incapacitation type."""
        return {
            IncapacitationType.MEZ: "😵",
            IncapacitationType.STUN: "💫",
        }.get(self, "❔")


# Stat keys accepted in `stat_mods` dictionaries.
ATTRIBUTE_KEYS = ("str", "sta", "agi", "dex", "int", "wis", "cha")

# Tags that turn a spawned template into a non-combat interaction.
INTERACTION_TAGS = frozenset({"Merchant", "Banker"})
