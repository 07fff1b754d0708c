"""
Pure combat rules.

Chance and multiplier formulas with no state: flee, dodge, hit chance and
level scaling of damage, plus the con colour shown next to a mob. The
formulas reject non-finite input.
"""

from skirmish.core.errors import require_finite
from skirmish.core.utils import clamp, to_finite_number

FLEE_BASE_ENGAGED = 0.65
FLEE_BASE_UNENGAGED = 1.0
FLEE_SPEED_FACTOR = 0.1
FLEE_SPEED_CLAMP = 0.3
FLEE_MIN = 0.2
FLEE_MAX = 0.95

DODGE_PER_AGILITY = 0.002
DODGE_MAX = 0.3


def compute_flee_success_chance(
    engaged: bool, player_speed: float = 1.0, mob_speed: float = 1.0
) -> float:
    """
    Chance for the player to escape the current mob.

    Args:
        engaged (bool):
            Whether the mob is already fighting the player.
        player_speed (float):
            Movement speed of the player.
        mob_speed (float):
            Movement speed of the mob.

    Returns:
        float:
            A base of 0.65 when engaged (1.0 otherwise), shifted by a tenth
            of the speed difference (at most 0.3 either way), within
            `[0.2, 0.95]`.

    """
    require_finite(player_speed, "player_speed")
    require_finite(mob_speed, "mob_speed")
    base = FLEE_BASE_ENGAGED if engaged else FLEE_BASE_UNENGAGED
    speed_adj = clamp(
        (player_speed - mob_speed) * FLEE_SPEED_FACTOR, -FLEE_SPEED_CLAMP, FLEE_SPEED_CLAMP
    )
    return clamp(base + speed_adj, FLEE_MIN, FLEE_MAX)


def compute_dodge_chance(agility: float = 0) -> float:
    """Dodge chance from agility: 0.2% per point, capped at 30%."""
    require_finite(agility, "agility")
    return min(DODGE_MAX, agility * DODGE_PER_AGILITY)


def compute_hit_chance(attacker_level: int, defender_level: int) -> float:
    """
    Chance for an attack to land, from the level gap.

    Starts at 90%. Each level the defender has over the attacker removes 3%;
    each level the attacker has over the defender adds 1%. Clamped to
    `[0.05, 0.98]`.
    """
    require_finite(attacker_level, "attacker_level")
    require_finite(defender_level, "defender_level")
    diff = attacker_level - defender_level
    if diff < 0:
        chance = 0.9 + diff * 0.03
    else:
        chance = 0.9 + diff * 0.01
    return clamp(chance, 0.05, 0.98)


def adjust_dodge_for_level(
    dodge: float, attacker_level: int, defender_level: int
) -> float:
    """
    Scales a dodge chance by the level gap.

    The defender dodges 1% less per level the attacker has over it, and 0.5%
    more per level the attacker is under it. Clamped to `[0, 0.5]`.
    """
    require_finite(dodge, "dodge")
    require_finite(attacker_level, "attacker_level")
    require_finite(defender_level, "defender_level")
    diff = attacker_level - defender_level
    if diff > 0:
        adjusted = dodge - diff * 0.01
    else:
        adjusted = dodge - diff * 0.005
    return clamp(adjusted, 0.0, 0.5)


def level_damage_multiplier(attacker_level: int, defender_level: int) -> float:
    """Damage multiplier of 2% per level of difference, within +/- 30%."""
    require_finite(attacker_level, "attacker_level")
    require_finite(defender_level, "defender_level")
    return 1 + clamp((attacker_level - defender_level) * 0.02, -0.3, 0.3)


CON_COLORS = (
    (8, "Maroon", "#4a041b"),
    (4, "Red", "#b91c1c"),
    (1, "Yellow", "#f59e0b"),
    (0, "White", "#e5e7eb"),
    (-3, "Blue", "#3b82f6"),
    (-5, "L. Blue", "#60a5fa"),
    (-8, "Green", "#10b981"),
)


def con_color(mob_level: float, player_level: float) -> tuple[str, str] | None:
    """
    Risk indicator of a mob, for display only.

    Args:
        mob_level (float):
            Level of the mob.
        player_level (float):
            Level of the player.

    Returns:
        tuple[str, str] | None:
            The label and its hex colour, or None for non-finite levels.

    """
    mob = to_finite_number(mob_level)
    player = to_finite_number(player_level)
    if mob is None or player is None:
        return None
    diff = mob - player
    for threshold, label, color in CON_COLORS:
        if diff >= threshold:
            return label, color
    return "Dark Gray", "#6b7280"
