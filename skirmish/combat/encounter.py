"""
Encounter controller for the combat core.

Owns the active mob of a session: draws it from the current camp's weighted
pool, spawns it, and handles its death (experience, loot and respawn).
Changing camp or zone bumps an epoch so that respawn timers scheduled for
the previous context are discarded when they fire.
"""

import math
import random
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field

from skirmish.character.state import CharacterState
from skirmish.core.config import DEFAULT_CONFIG, CombatConfig
from skirmish.core.constants import CombatTarget, LogKind
from skirmish.core.content import StaticData
from skirmish.core.errors import raise_configuration_error
from skirmish.core.interfaces import CombatLogSink, Inventory, SaveScheduler
from skirmish.core.logging import log_debug
from skirmish.core.timers import TimerHandle, TimerQueue
from skirmish.core.utils import to_finite_number
from skirmish.effects.effect_scheduler import EffectScheduler
from skirmish.entities.definitions import CampDefinition
from skirmish.entities.mob import MobInstance, MobTemplate
from skirmish.entities.vitals import Vitals


class XpContext(BaseModel):
    """Multipliers applied to the experience of a kill."""

    xp_rate: float = 1.0
    character_mod: float = 1.0
    zone_mod: float = 1.0
    camp_mod: float = 1.0
    xp_bonus_pct: float = Field(default=0, description="Bonus XP in percent.")

    def award(self, base_xp: float) -> int:
        """`floor(base * (1 + bonus/100) * rate * character * zone * camp)`."""
        multiplier = self.xp_rate * self.character_mod * self.zone_mod * self.camp_mod
        return math.floor(base_xp * (1 + self.xp_bonus_pct / 100) * multiplier)


class KillRecord(BaseModel):
    """Last kill seen, used to drop duplicate death signals."""

    mob_key: str
    ts: float


class LootDrop(BaseModel):
    item_id: str
    name: str
    qty: int


class KillResult(BaseModel):
    """What a handled kill granted."""

    mob_name: str
    xp_gained: int
    bonus_xp: int
    loot: list[LootDrop] = Field(default_factory=list)
    respawn_in: float


class EncounterController:
    """
    Spawns the mobs of the current camp and resolves their deaths.

    Args:
        static (StaticData):
            Mob templates, camps, loot tables and items.
        character (CharacterState):
            The player character. Its experience is updated on kills.
        mob_vitals (Vitals):
            Vitals of the active mob; their maxima follow `active_mob`.
        effects (EffectScheduler):
            Mob effects are cleared whenever the active mob changes.
        timers (TimerQueue):
            Clock and respawn scheduling.
        log (CombatLogSink):
            Player-facing combat log.
        save (SaveScheduler):
            Persistence collaborator.
        inventory (Inventory | None):
            Receives loot. Without one, drops are logged but not granted.
        xp_context (Callable[[], XpContext] | None):
            Live provider of the experience multipliers.
        on_xp_changed (Callable[[], Any] | None):
            Called after a kill changed the character's experience.
        on_interaction (Callable[[MobInstance], Any] | None):
            Receives merchants and bankers, which never enter combat.
        config (CombatConfig):
            Tunable constants.
        rng (random.Random | None):
            Random source for selection, distance and loot.

    """

    def __init__(
        self,
        static: StaticData,
        character: CharacterState,
        mob_vitals: Vitals,
        effects: EffectScheduler,
        timers: TimerQueue,
        log: CombatLogSink,
        save: SaveScheduler,
        inventory: Inventory | None = None,
        xp_context: Callable[[], XpContext] | None = None,
        on_xp_changed: Callable[[], Any] | None = None,
        on_interaction: Callable[[MobInstance], Any] | None = None,
        config: CombatConfig = DEFAULT_CONFIG,
        rng: random.Random | None = None,
    ) -> None:
        self.static = static
        self.character = character
        self.mob_vitals = mob_vitals
        self.effects = effects
        self.timers = timers
        self.log = log
        self.save = save
        self.inventory = inventory
        self.xp_context = xp_context or XpContext
        self.on_xp_changed = on_xp_changed
        self.on_interaction = on_interaction
        self.config = config
        self.rng = rng or random.Random()

        self.active_mob: MobInstance | None = None
        self.camp_id: str | None = None
        self.epoch = 0
        self.last_kill: KillRecord | None = None
        self._respawn_handle: TimerHandle | None = None

    # === Context ===

    @property
    def current_camp(self) -> CampDefinition | None:
        if self.camp_id is None:
            return None
        return self.static.get_camp(self.camp_id)

    def _require_camp(self, camp_id: str | None) -> CampDefinition:
        camp_id = camp_id or self.camp_id
        camp = self.static.camps.get(camp_id) if camp_id else None
        if camp is None:
            raise_configuration_error(
                f"Camp {camp_id or 'unknown'} is not configured.", {"camp_id": camp_id}
            )
        return camp

    def change_camp(self, camp_id: str) -> None:
        """
        Moves the encounter to another camp.

        Bumps the epoch (invalidating pending respawns), clears the active
        mob and its effects.
        """
        camp = self._require_camp(camp_id)
        self._bump_epoch()
        self.camp_id = camp.id
        log_debug(f"Camp changed to '{camp.id}'", {"epoch": self.epoch})

    def change_zone(self, zone_id: str, camp_id: str | None = None) -> None:
        """Moves the character to another zone, optionally into one of its camps."""
        self._bump_epoch()
        self.character.zone_id = zone_id
        self.camp_id = None
        if camp_id is not None:
            self.camp_id = self._require_camp(camp_id).id
        log_debug(f"Zone changed to '{zone_id}'", {"epoch": self.epoch})

    def _bump_epoch(self) -> None:
        self.epoch += 1
        self.timers.cancel(self._respawn_handle)
        self._respawn_handle = None
        self.clear_active_mob()

    # === Spawning ===

    def select_mob_for_camp(self, camp_id: str | None = None) -> MobTemplate:
        """
        Draws a mob template from the camp's weighted pool.

        Raises:
            ConfigurationError:
                If the pool is empty or any weight is not a positive number.

        """
        camp_id = camp_id or self.camp_id
        pool = self.static.camp_pool(camp_id) if camp_id else []
        if not pool:
            self.log.add_log("No mobs available in this zone.", LogKind.ERROR)
            raise_configuration_error(
                f"No mobs configured for camp {camp_id}", {"camp_id": camp_id}
            )

        weights: list[float] = []
        for template, raw_weight in pool:
            weight = to_finite_number(raw_weight)
            if weight is None or weight <= 0:
                raise_configuration_error(
                    f"Invalid weight for mob {template.id} in camp {camp_id}",
                    {"camp_id": camp_id, "mob_id": template.id, "weight": raw_weight},
                )
            weights.append(weight)

        draw = self.rng.random() * sum(weights)
        cumulative = 0.0
        for (template, _), weight in zip(pool, weights):
            cumulative += weight
            if draw < cumulative:
                return template
        return pool[-1][0]

    def normalize_mob(self, template: MobTemplate) -> MobInstance:
        """Validates a template and rolls a fresh instance from it."""
        return MobInstance.from_template(template, self.rng)

    def spawn_mob(self, camp_id: str | None = None) -> MobInstance | None:
        """
        Spawns a mob from the current (or given) camp.

        Merchants and bankers never become the active mob: the mob vitals are
        zeroed and the instance is handed to `on_interaction`.

        Returns:
            MobInstance | None:
                The new active mob, or None for an interaction spawn.

        """
        camp = self._require_camp(camp_id)
        template = self.select_mob_for_camp(camp.id)
        mob = self.normalize_mob(template)
        mob.distance = max(0.0, self.rng.random() * camp.camp_area)

        if mob.is_interaction:
            self.clear_active_mob()
            log_debug(f"Interaction spawn '{mob.name}'", {"camp_id": camp.id})
            if self.on_interaction is not None:
                self.on_interaction(mob)
            return None

        self.effects.clear_effects(CombatTarget.MOB)
        self.active_mob = mob
        self.mob_vitals.restore_full()
        self.log.add_log(f"{mob.name} spawns!", LogKind.SPAWN)
        return mob

    def clear_active_mob(self) -> None:
        """Removes the active mob, zeroing its vitals and clearing its effects."""
        self.active_mob = None
        self.mob_vitals.zero()
        self.effects.clear_effects(CombatTarget.MOB)

    # === Kills ===

    def handle_mob_killed(self, mob: MobInstance | None = None) -> KillResult | None:
        """
        Grants experience and loot for a dead mob and schedules the respawn.

        A second kill signal for the same mob within the dedupe window is
        ignored, which covers a damage tick and a direct attack reporting the
        same death.

        Args:
            mob (MobInstance | None):
                The dead mob. Defaults to the active mob.

        Returns:
            KillResult | None:
                What was granted, or None for an ignored signal.

        Raises:
            ConfigurationError:
                If the camp has no positive, finite respawn time.

        """
        mob = mob or self.active_mob
        if mob is None:
            return None
        now = self.timers.now
        if (
            self.last_kill is not None
            and self.last_kill.mob_key == mob.key
            and now - self.last_kill.ts < self.config.kill_dedupe_seconds
        ):
            log_debug(f"Ignoring duplicate kill of '{mob.key}'", {"ts": now})
            return None
        self.last_kill = KillRecord(mob_key=mob.key, ts=now)

        self.log.add_log(f"{mob.name} has been slain!", LogKind.KILL)
        xp_gained, bonus = self._award_xp(mob)
        loot = self._roll_loot(mob)
        if mob is self.active_mob:
            self.clear_active_mob()
        if self.on_xp_changed is not None:
            self.on_xp_changed()

        camp = self._require_camp(None)
        respawn_in = to_finite_number(camp.spawn_time)
        if respawn_in is None or respawn_in <= 0:
            self.log.add_log("Camp respawn time is not configured.", LogKind.ERROR)
            raise_configuration_error(
                f"Camp {camp.id} missing spawn_time",
                {"camp_id": camp.id, "spawn_time": camp.spawn_time},
            )
        self.schedule_respawn(respawn_in)
        return KillResult(
            mob_name=mob.name,
            xp_gained=xp_gained,
            bonus_xp=bonus,
            loot=loot,
            respawn_in=respawn_in,
        )

    def _award_xp(self, mob: MobInstance) -> tuple[int, int]:
        xp_gained = self.xp_context().award(mob.xp)
        bonus = xp_gained - mob.xp
        self.character.xp += xp_gained
        self.save.schedule_save(
            {
                "character": {
                    "level": self.character.level,
                    "xp": self.character.xp,
                    "zone_id": self.character.zone_id,
                },
                "inventory": True,
            },
            immediate=True,
        )
        if bonus > 0:
            self.log.add_log(
                f"You gain {xp_gained} experience! (+{bonus} bonus)", LogKind.XP
            )
        else:
            self.log.add_log(f"You gain {xp_gained} experience!", LogKind.XP)
        return xp_gained, bonus

    def _roll_loot(self, mob: MobInstance) -> list[LootDrop]:
        drops: list[LootDrop] = []
        for entry in self.static.get_loot_table(mob.loot_table_id):
            if entry.drop_chance is None:
                continue
            item = self.static.get_item(entry.item_id)
            if item is None:
                continue
            if self.rng.random() > entry.drop_chance:
                continue
            min_qty = entry.min_qty or 1
            max_qty = entry.max_qty or min_qty
            qty = max(min_qty, math.ceil(self.rng.random() * max_qty))
            if self.inventory is not None:
                instance = self.inventory.create_item_instance(item.id)
                self.inventory.add_item_to_inventory(instance, qty)
            suffix = f" x{qty}" if qty > 1 else ""
            self.log.add_log(f"You receive: {item.name}{suffix}", LogKind.LOOT)
            drops.append(LootDrop(item_id=item.id, name=item.name, qty=qty))
        return drops

    # === Respawn ===

    @property
    def respawn_pending(self) -> bool:
        return self._respawn_handle is not None and not self._respawn_handle.cancelled

    def schedule_respawn(self, delay: float) -> TimerHandle:
        """Spawns a new mob after `delay` seconds unless the epoch changes first."""
        epoch = self.epoch
        self.timers.cancel(self._respawn_handle)
        self._respawn_handle = self.timers.call_later(
            delay, lambda: self._respawn(epoch), label="respawn"
        )
        return self._respawn_handle

    def _respawn(self, epoch: int) -> None:
        self._respawn_handle = None
        if epoch != self.epoch:
            log_debug(
                "Discarding stale respawn", {"epoch": epoch, "current_epoch": self.epoch}
            )
            return
        self.spawn_mob()
