"""
Progression module for the combat core.

Decides what happens when the player dies. In hardcore mode the death is
permanent: it is stamped, saved, and the host is sent back to character
selection after a short delay. In normal mode the character loses
experience and wakes up in its bind zone with full vitals.
"""

import math
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from skirmish.core.config import DEFAULT_CONFIG, CombatConfig
from skirmish.core.constants import CombatTarget, LogKind
from skirmish.core.errors import raise_configuration_error
from skirmish.core.interfaces import CombatLogSink, SaveScheduler
from skirmish.core.logging import log_debug
from skirmish.core.timers import TimerQueue
from skirmish.effects.effect_scheduler import EffectScheduler
from skirmish.entities.vitals import Vitals

from .state import CharacterState


class DeathResult(BaseModel):
    """Outcome of a player death."""

    killer_name: str
    should_respawn: bool
    is_hardcore_dead: bool = False
    killed_at: str | None = None
    xp_loss: int = 0
    return_zone: str | None = None


def death_xp_loss(level: int, xp_base: int) -> int:
    """`ceil(xp_base * level * min(1, level / 100))`."""
    return math.ceil(xp_base * level * min(1, level / 100))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProgressionHandler:
    """
    Handles player deaths.

    Args:
        character (CharacterState):
            The player character.
        player_vitals (Vitals):
            Restored in normal mode.
        timers (TimerQueue):
            Schedules the hardcore return to character select.
        save (SaveScheduler):
            Persistence collaborator.
        log (CombatLogSink):
            Player-facing combat log.
        effects (EffectScheduler | None):
            Player effects are cleared on death.
        on_return_to_character_select (Callable[[], Any] | None):
            Called after a hardcore death, once the delay has passed.
        config (CombatConfig):
            Tunable constants.
        utc_now (Callable[[], datetime]):
            Wall clock used for the hardcore death stamp.

    """

    def __init__(
        self,
        character: CharacterState,
        player_vitals: Vitals,
        timers: TimerQueue,
        save: SaveScheduler,
        log: CombatLogSink,
        effects: EffectScheduler | None = None,
        on_return_to_character_select: Callable[[], Any] | None = None,
        config: CombatConfig = DEFAULT_CONFIG,
        utc_now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.character = character
        self.player_vitals = player_vitals
        self.timers = timers
        self.save = save
        self.log = log
        self.effects = effects
        self.on_return_to_character_select = on_return_to_character_select
        self.config = config
        self.utc_now = utc_now

    def handle_player_death(self, killer_name: str = "an enemy") -> DeathResult:
        """
        Applies the consequences of the player's death.

        Args:
            killer_name (str):
                Who dealt the killing blow.

        Returns:
            DeathResult:
                What happened to the character.

        Raises:
            ConfigurationError:
                In normal mode, if the character has no bind zone.

        """
        if self.character.is_hardcore:
            return self._hardcore_death(killer_name)
        return self._normal_death(killer_name)

    def _hardcore_death(self, killer_name: str) -> DeathResult:
        character = self.character
        if character.killed_at is not None:
            log_debug("Hardcore character is already dead", {"killed_at": character.killed_at})
            return DeathResult(
                killer_name=killer_name,
                should_respawn=False,
                is_hardcore_dead=True,
                killed_at=character.killed_at,
            )

        character.killed_at = self.utc_now().isoformat()
        self.log.add_log(f"You have been slain by {killer_name}!", LogKind.KILL)
        if self.effects is not None:
            self.effects.clear_effects(CombatTarget.PLAYER)
        self.save.schedule_save(
            {"character": {"killed_at": character.killed_at}, "inventory": True},
            immediate=True,
        )
        self.timers.call_later(
            self.config.hardcore_return_delay,
            self._return_to_character_select,
            label="hardcore-return",
        )
        return DeathResult(
            killer_name=killer_name,
            should_respawn=False,
            is_hardcore_dead=True,
            killed_at=character.killed_at,
        )

    def _return_to_character_select(self) -> None:
        if self.on_return_to_character_select is not None:
            self.on_return_to_character_select()

    def _normal_death(self, killer_name: str) -> DeathResult:
        character = self.character
        bind_zone = character.bind_zone_id
        if not bind_zone:
            self.log.add_log("You have no bind point.", LogKind.ERROR)
            raise_configuration_error(
                "bind_zone_id missing for death handling.",
                {"character": character.name},
            )

        xp_loss = death_xp_loss(character.level, self.config.xp_base)
        character.xp = max(0, character.xp - xp_loss)
        self.log.add_log(f"You have been slain by {killer_name}!", LogKind.KILL)

        if self.effects is not None:
            self.effects.clear_effects(CombatTarget.PLAYER)
        self.player_vitals.restore_full()
        character.zone_id = bind_zone

        self.save.schedule_save(
            {
                "character": {
                    "level": character.level,
                    "xp": character.xp,
                    "zone_id": bind_zone,
                },
                "inventory": True,
            },
            immediate=True,
        )
        self.log.add_log(
            f"You lose {xp_loss} experience and return to {bind_zone}.", LogKind.SYSTEM
        )
        return DeathResult(
            killer_name=killer_name,
            should_respawn=True,
            xp_loss=xp_loss,
            return_zone=bind_zone,
        )
