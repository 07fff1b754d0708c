"""
Combat session.

Wires the combat core together for one player: the timer queue, both sets
of vitals, the effect scheduler, resists, damage resolution, the encounter
controller, leveling and death handling. A host drives it by calling the
action methods and advancing the clock.
"""

import math
import random
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from skirmish.character.leveling import LevelingProcessor
from skirmish.character.progression import DeathResult, ProgressionHandler
from skirmish.character.state import CharacterState
from skirmish.combat.damage_resolution import DamageReport, DamageResolver
from skirmish.combat.encounter import EncounterController, XpContext
from skirmish.combat.resist import ResistCalculator
from skirmish.combat.rules import (
    adjust_dodge_for_level,
    compute_dodge_chance,
    compute_flee_success_chance,
    compute_hit_chance,
    level_damage_multiplier,
)
from skirmish.core.config import DEFAULT_CONFIG, CombatConfig
from skirmish.core.constants import ATTRIBUTE_KEYS, CombatTarget, LogKind, NiceEnum
from skirmish.core.content import StaticData
from skirmish.core.interfaces import (
    CombatLog,
    CombatLogSink,
    Inventory,
    MemorySaveScheduler,
    SaveScheduler,
)
from skirmish.core.timers import TimerHandle, TimerQueue
from skirmish.effects.base_effect import ActiveEffect, Effect
from skirmish.effects.damage_over_time_effect import DamageOverTimeEffect
from skirmish.effects.effect_scheduler import EffectScheduler
from skirmish.effects.healing_over_time_effect import HealingOverTimeEffect
from skirmish.entities.mob import MobInstance
from skirmish.entities.stats import Attributes, PlayerStatTotals
from skirmish.entities.vitals import VitalMaxima, Vitals


class AttackOutcome(NiceEnum):
    """How an attack attempt ended."""

    HIT = "hit"
    MISS = "miss"
    DODGE = "dodge"
    RESISTED = "resisted"
    BLOCKED = "blocked"


class FleeOutcome(NiceEnum):
    """How a flee attempt ended."""

    ESCAPED = "escaped"
    FAILED = "failed"
    BLOCKED = "blocked"


class AttackResult(BaseModel):
    outcome: AttackOutcome
    damage: int = 0
    killed: bool = False


class CombatSession:
    """
    One player fighting the mobs of one camp.

    Args:
        static (StaticData):
            Static game data.
        character (CharacterState | None):
            The player character.
        player_totals (Callable[[], PlayerStatTotals] | None):
            Live gear and base stat totals computed by the host. Defaults to
            the character's base attributes with no gear.
        log (CombatLogSink | None):
            Player-facing combat log.
        save (SaveScheduler | None):
            Persistence collaborator.
        inventory (Inventory | None):
            Receives loot.
        config (CombatConfig):
            Tunable constants.
        rng (random.Random | None):
            Random source shared by every roll of the session.
        timers (TimerQueue | None):
            Clock and timers.
        xp_rate (float):
            Server-wide experience rate.
        character_xp_mod (float):
            Race, class and deity experience modifier.
        zone_xp_mod (float):
            Experience modifier of the current zone.
        bind_camp_id (str | None):
            Camp the character fights in after waking up in its bind zone.
        on_interaction (Callable[[MobInstance], Any] | None):
            Receives merchant and banker spawns.
        on_return_to_character_select (Callable[[], Any] | None):
            Called after a hardcore death.

    """

    def __init__(
        self,
        static: StaticData,
        character: CharacterState | None = None,
        player_totals: Callable[[], PlayerStatTotals] | None = None,
        log: CombatLogSink | None = None,
        save: SaveScheduler | None = None,
        inventory: Inventory | None = None,
        config: CombatConfig = DEFAULT_CONFIG,
        rng: random.Random | None = None,
        timers: TimerQueue | None = None,
        xp_rate: float = 1.0,
        character_xp_mod: float = 1.0,
        zone_xp_mod: float = 1.0,
        bind_camp_id: str | None = None,
        on_interaction: Callable[[MobInstance], Any] | None = None,
        on_return_to_character_select: Callable[[], Any] | None = None,
    ) -> None:
        self.static = static
        self.character = character or CharacterState()
        self.player_totals = player_totals or (
            lambda: PlayerStatTotals(attributes=self.character.base_stats)
        )
        self.log = log or CombatLog()
        self.save = save or MemorySaveScheduler()
        self.config = config
        self.rng = rng or random.Random()
        self.timers = timers or TimerQueue()
        self.xp_rate = xp_rate
        self.character_xp_mod = character_xp_mod
        self.zone_xp_mod = zone_xp_mod
        self.bind_camp_id = bind_camp_id

        self.in_combat = False
        self.flee_exhausted_until = -math.inf
        self._tick_handle: TimerHandle | None = None
        self.encounter: EncounterController | None = None

        self.effects = EffectScheduler(
            vitals_for=self.vitals_for,
            name_for=self.name_for,
            log=self.log,
            clock=lambda: self.timers.now,
            on_mob_death=self._on_mob_death,
            config=config,
            rng=self.rng,
        )
        self.player_vitals = Vitals(self._player_maxima)
        self.mob_vitals = Vitals(self._mob_maxima, hp=0, mana=0, endurance=0)

        self.resist = ResistCalculator(
            player_totals=self.stat_totals,
            current_mob=lambda: self.mob,
            player_level=lambda: self.character.level,
            config=config,
        )
        self.leveling = LevelingProcessor(
            self.character, static, self.log, self.save, config
        )
        self.progression = ProgressionHandler(
            character=self.character,
            player_vitals=self.player_vitals,
            timers=self.timers,
            save=self.save,
            log=self.log,
            effects=self.effects,
            on_return_to_character_select=on_return_to_character_select,
            config=config,
        )
        self.encounter = EncounterController(
            static=static,
            character=self.character,
            mob_vitals=self.mob_vitals,
            effects=self.effects,
            timers=self.timers,
            log=self.log,
            save=self.save,
            inventory=inventory,
            xp_context=self.xp_context,
            on_xp_changed=self.leveling.on_xp_changed,
            on_interaction=on_interaction,
            config=config,
            rng=self.rng,
        )
        self.damage = DamageResolver(
            log=self.log,
            resist=self.resist,
            effects=self.effects,
            vitals_for=self.vitals_for,
            mob_name=lambda: self.name_for(CombatTarget.MOB),
            timers=self.timers,
            on_player_death=self._on_player_death,
            on_mob_death=self._on_mob_death,
        )

    # === State ===

    @property
    def mob(self) -> MobInstance | None:
        """The active mob."""
        return self.encounter.active_mob if self.encounter is not None else None

    def vitals_for(self, target: CombatTarget) -> Vitals | None:
        if target == CombatTarget.PLAYER:
            return self.player_vitals
        return self.mob_vitals if self.mob is not None else None

    def name_for(self, target: CombatTarget) -> str:
        if target == CombatTarget.PLAYER:
            return self.character.name
        return self.mob.name if self.mob is not None else "the target"

    def _player_maxima(self) -> VitalMaxima:
        base = self.character.base_vitals
        mods = self.effects.get_stat_modifiers(CombatTarget.PLAYER)
        return VitalMaxima(
            hp=int(base.hp + mods.get("hp", 0)),
            mana=int(base.mana + mods.get("mana", 0)),
            endurance=int(base.endurance + mods.get("endurance", 0)),
        )

    def _mob_maxima(self) -> VitalMaxima:
        mob = self.mob
        if mob is None:
            return VitalMaxima(hp=0)
        return VitalMaxima(hp=mob.hp, mana=mob.mana, endurance=mob.endurance)

    def stat_totals(self) -> PlayerStatTotals:
        """Host totals plus the stat modifiers of the player's active effects."""
        totals = self.player_totals()
        mods = self.effects.get_stat_modifiers(CombatTarget.PLAYER)
        if not mods:
            return totals
        attributes = totals.attributes.to_short_dict()
        for key in ATTRIBUTE_KEYS:
            attributes[key] += int(mods.get(key, 0))
        return totals.model_copy(
            update={
                "attributes": Attributes.model_validate(attributes),
                "ac": totals.ac + int(mods.get("ac", 0)),
                "total_resist": totals.total_resist + mods.get("total_resist", 0),
                "xp_bonus": totals.xp_bonus + mods.get("xp_bonus", 0),
            }
        )

    def xp_context(self) -> XpContext:
        camp = self.encounter.current_camp
        return XpContext(
            xp_rate=self.xp_rate,
            character_mod=self.character_xp_mod,
            zone_mod=self.zone_xp_mod,
            camp_mod=camp.xp_mod if camp is not None else 1.0,
            xp_bonus_pct=self.stat_totals().xp_bonus,
        )

    # === Lifecycle ===

    def start(self, camp_id: str | None = None) -> MobInstance | None:
        """Arms the effect tick and spawns the first mob of `camp_id`."""
        if self._tick_handle is None:
            self._tick_handle = self.timers.call_every(
                self.config.effect_tick_seconds, self._on_effect_tick, label="effect-tick"
            )
        if camp_id is not None:
            self.encounter.change_camp(camp_id)
        if self.encounter.camp_id is None:
            return None
        return self.encounter.spawn_mob()

    def stop(self) -> None:
        self.timers.cancel(self._tick_handle)
        self._tick_handle = None

    def advance(self, seconds: float) -> int:
        """Moves the clock forward, running every timer that comes due."""
        return self.timers.advance(seconds)

    def _on_effect_tick(self) -> None:
        self.effects.tick(self.timers.now)
        self._regen_mob()

    def _regen_mob(self) -> None:
        if self.mob is None or not self.mob_vitals.is_alive():
            return
        if self.in_combat:
            hp = self.config.mob_hp_regen_in_combat
            resource = self.config.mob_resource_regen_in_combat
        else:
            hp = self.config.mob_hp_regen_out_of_combat
            resource = self.config.mob_resource_regen_out_of_combat
        self.mob_vitals.adjust("hp", hp)
        self.mob_vitals.adjust("mana", resource)
        self.mob_vitals.adjust("endurance", resource)

    # === Deaths ===

    def _on_mob_death(self) -> None:
        mob = self.mob
        if mob is None:
            return
        self.in_combat = False
        self.encounter.handle_mob_killed(mob)

    def _on_player_death(self, killer_name: str) -> DeathResult | None:
        if self.character.is_permanently_dead:
            return None
        self.in_combat = False
        result = self.progression.handle_player_death(killer_name)
        if result.is_hardcore_dead:
            self.encounter.clear_active_mob()
        elif result.return_zone is not None:
            self.encounter.change_zone(result.return_zone, self.bind_camp_id)
            if self.encounter.camp_id is not None:
                self.encounter.schedule_respawn(self.config.death_respawn_delay)
        return result

    def _blocked_by_death(self, action: str) -> bool:
        if self.character.is_permanently_dead:
            self.log.add_log(f"You cannot {action} while dead.", LogKind.ERROR)
            return True
        return False

    # === Actions ===

    def attack_mob(self) -> AttackResult:
        """
        Swings at the active mob.

        Refused without a living mob in melee range, while the player is
        incapacitated, or while the mob is mesmerized.
        """
        if self._blocked_by_death("attack"):
            return AttackResult(outcome=AttackOutcome.BLOCKED)
        mob = self.mob
        if mob is None or not self.mob_vitals.is_alive():
            return AttackResult(outcome=AttackOutcome.BLOCKED)
        if not self.effects.can_act(CombatTarget.PLAYER):
            self.log.add_log("You are unable to act!", LogKind.SYSTEM)
            return AttackResult(outcome=AttackOutcome.BLOCKED)
        if mob.distance > mob.melee_range:
            self.log.add_log("You are too far away for melee.", LogKind.ERROR)
            return AttackResult(outcome=AttackOutcome.BLOCKED)
        if self.effects.is_mezzed(CombatTarget.MOB):
            self.log.add_log(f"{mob.name} is mesmerized.", LogKind.SYSTEM)
            return AttackResult(outcome=AttackOutcome.BLOCKED)

        self.in_combat = True
        level = self.character.level
        if self.rng.random() > compute_hit_chance(level, mob.level):
            self.log.add_log(f"You miss {mob.name}.", LogKind.SYSTEM)
            return AttackResult(outcome=AttackOutcome.MISS)

        dodge = adjust_dodge_for_level(
            compute_dodge_chance(mob.stats.agility), level, mob.level
        )
        if self.rng.random() < dodge:
            self.log.add_log(f"{mob.name} dodges your attack!", LogKind.SYSTEM)
            return AttackResult(outcome=AttackOutcome.DODGE)

        totals = self.stat_totals()
        mods = self.effects.get_stat_modifiers(CombatTarget.PLAYER)
        spread = totals.max_damage - totals.min_damage + 1
        base = math.floor(
            (totals.min_damage + self.rng.random() * spread)
            * (1 + mods.get("mod_damage", 0) / 100)
        )
        mitigation = min(base - 1, math.floor(mob.ac / 10))
        raw = max(1, math.floor(base * level_damage_multiplier(level, mob.level)) - mitigation)

        report = self.damage.apply_hit_to_target(
            raw, is_spell=False, school="physical", target=CombatTarget.MOB,
            attacker_name="You",
        )
        if not report.killed:
            self.effects.break_mez(CombatTarget.MOB)
            self.effects.break_root_on_hit(CombatTarget.MOB)
        return AttackResult(
            outcome=AttackOutcome.HIT, damage=report.final_damage, killed=report.killed
        )

    def mob_attack(self) -> AttackResult:
        """
        The active mob strikes back at the player.

        Refused when the mob is incapacitated, out of melee range, or neutral
        and not yet fighting.
        """
        mob = self.mob
        if self.character.is_permanently_dead or mob is None:
            return AttackResult(outcome=AttackOutcome.BLOCKED)
        if not self.mob_vitals.is_alive() or not self.effects.can_act(CombatTarget.MOB):
            return AttackResult(outcome=AttackOutcome.BLOCKED)
        if mob.distance > mob.melee_range:
            return AttackResult(outcome=AttackOutcome.BLOCKED)
        if mob.is_neutral and not self.in_combat:
            return AttackResult(outcome=AttackOutcome.BLOCKED)

        self.in_combat = True
        level = self.character.level
        mob_mods = self.effects.get_stat_modifiers(CombatTarget.MOB)
        base = max(
            1,
            math.floor(
                mob.damage
                * (1 + self.resist.mob_spell_damage_mod() / 100)
                * (1 + mob_mods.get("mod_damage", 0) / 100)
            ),
        )
        damage = max(1, math.floor(base * level_damage_multiplier(mob.level, level)))

        if self.rng.random() > compute_hit_chance(mob.level, level):
            self.log.add_log(f"{mob.name} misses you!", LogKind.SYSTEM)
            return AttackResult(outcome=AttackOutcome.MISS)

        totals = self.stat_totals()
        dodge = adjust_dodge_for_level(
            compute_dodge_chance(totals.attributes.agility), mob.level, level
        )
        if self.rng.random() < dodge:
            self.log.add_log(f"You dodge {mob.name}'s attack!", LogKind.SYSTEM)
            return AttackResult(outcome=AttackOutcome.DODGE)

        is_spell = mob.casts_spells
        mitigation = 0 if is_spell else min(damage - 1, math.floor(totals.ac / 10))
        report = self.damage.apply_hit_to_target(
            damage,
            is_spell=is_spell,
            school=mob.damage_school,
            mitigation=mitigation,
            target=CombatTarget.PLAYER,
            attacker_name=mob.name,
        )
        if report.resisted:
            return AttackResult(outcome=AttackOutcome.RESISTED)
        if self.player_vitals.is_alive():
            self.effects.break_mez(CombatTarget.PLAYER)
            self.effects.break_root_on_hit(CombatTarget.PLAYER)
        return AttackResult(outcome=AttackOutcome.HIT, damage=report.final_damage)

    def cast_spell(self, raw_damage: float, school: str = "magic") -> DamageReport | None:
        """Lands a direct damage spell on the active mob."""
        if self._blocked_by_death("cast"):
            return None
        if self.mob is None or not self.mob_vitals.is_alive():
            return None
        self.in_combat = True
        report = self.damage.apply_hit_to_target(
            raw_damage, is_spell=True, school=school, target=CombatTarget.MOB,
            attacker_name="You",
        )
        if not report.resisted and not report.killed:
            self.effects.break_mez(CombatTarget.MOB)
            self.effects.break_root_on_hit(CombatTarget.MOB)
        return report

    def cast_effect(self, target: CombatTarget, effect: Effect) -> ActiveEffect | None:
        """
        Applies a spell effect to `target`.

        Damage over time with a school is resisted once, here, by the target's
        resists. Damage and healing over time tick once immediately.
        """
        if self.vitals_for(target) is None:
            return None
        if isinstance(effect, DamageOverTimeEffect) and effect.school:
            if target == CombatTarget.MOB:
                mitigated = self.resist.mitigate_spell_damage_vs_mob(
                    effect.tick_damage, effect.school
                )
            else:
                mitigated = self.resist.mitigate_spell_damage(
                    effect.tick_damage, effect.school
                )
            effect = effect.model_copy(update={"tick_damage": mitigated.final})
        active = self.effects.add_effect(target, effect)
        if isinstance(effect, (DamageOverTimeEffect, HealingOverTimeEffect)):
            self.effects.fire_now(active)
        return active

    def flee(self) -> FleeOutcome:
        """
        Tries to run from the active mob.

        A failed attempt while engaged gives the mob a free hit. Either way
        the player is exhausted and cannot flee again for a while.
        """
        if self._blocked_by_death("flee"):
            return FleeOutcome.BLOCKED
        mob = self.mob
        if mob is None:
            return FleeOutcome.BLOCKED
        now = self.timers.now
        if now < self.flee_exhausted_until:
            self.log.add_log("You are too exhausted to flee again yet.", LogKind.ERROR)
            return FleeOutcome.BLOCKED

        engaged = self.in_combat or self.mob_vitals.hp < self.mob_vitals.max_hp
        player_mods = self.effects.get_stat_modifiers(CombatTarget.PLAYER)
        mob_mods = self.effects.get_stat_modifiers(CombatTarget.MOB)
        player_speed = max(
            0.0, self.stat_totals().movespeed * (1 + player_mods.get("mod_move", 0) / 100)
        )
        mob_speed = max(0.0, mob.movespeed * (1 + mob_mods.get("mod_move", 0) / 100))
        chance = compute_flee_success_chance(engaged, player_speed, mob_speed)

        if engaged and self.rng.random() > chance:
            self.log.add_log(f"You fail to escape {mob.name}!", LogKind.ERROR)
            self._exhaust_flee()
            self.player_vitals.update_hp(lambda hp: hp - mob.damage)
            self.log.add_log(
                f"{mob.name} strikes you as you flee for {mob.damage} damage!",
                LogKind.MOBATTACK,
            )
            if not self.player_vitals.is_alive():
                self.timers.call_soon(
                    lambda: self._on_player_death(mob.name), label="deferred-player-death"
                )
            return FleeOutcome.FAILED

        self.log.add_log(f"You flee from {mob.name}!", LogKind.FLEE)
        self.in_combat = False
        self.encounter.clear_active_mob()
        self._exhaust_flee()
        self.encounter.spawn_mob()
        return FleeOutcome.ESCAPED

    def _exhaust_flee(self) -> None:
        seconds = self.config.flee_exhaust_seconds
        self.flee_exhausted_until = self.timers.now + seconds
        self.log.add_log(
            f"You feel exhausted from fleeing. You can attempt again in {seconds:g} seconds.",
            LogKind.SYSTEM,
        )

    # === Persistence ===

    def save_effects(self) -> None:
        """Persists the player's active effects."""
        self.save.schedule_save(
            {"character": {"active_effects": self.effects.serialize_player_effects()}}
        )
