"""
Effect scheduler for the combat core.

Keeps the named effects active on the player and on the mob, advances them
on the session's repeating tick, and answers the questions the rest of the
combat core asks about them (stat modifiers, runes, damage shields, roots and
incapacitation).
"""

import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from skirmish.core.config import DEFAULT_CONFIG, CombatConfig
from skirmish.core.constants import CombatTarget, IncapacitationType, LogKind
from skirmish.core.errors import ContractViolationError, require_finite
from skirmish.core.interfaces import CombatLogSink
from skirmish.core.logging import log_debug
from skirmish.core.utils import to_finite_number
from skirmish.entities.vitals import Vitals

from .base_effect import ActiveEffect, Effect, TickContext
from .defensive_effect import DamageShieldEffect, RuneEffect
from .effect_serializer import EffectSerializer
from .incapacitating_effect import IncapacitatingEffect
from .root_effect import RootEffect


@dataclass(frozen=True)
class Defenses:
    """Absorption and reflection currently carried by one combatant."""

    rune: int = 0
    damage_shield: int = 0


class EffectScheduler:
    """
    Owns the active effects of both combatants.

    Args:
        vitals_for (Callable[[CombatTarget], Vitals | None]):
            Returns the live vitals of a combatant, or None when there is no
            active mob.
        name_for (Callable[[CombatTarget], str]):
            Returns the display name of a combatant.
        log (CombatLogSink):
            Player-facing combat log.
        clock (Callable[[], float]):
            Current time in seconds.
        on_mob_death (Callable[[], None] | None):
            Called once after a tick pass in which an effect killed the mob.
        config (CombatConfig):
            Tunable constants.
        rng (random.Random | None):
            Random source for root breaks.

    """

    def __init__(
        self,
        vitals_for: Callable[[CombatTarget], Vitals | None],
        name_for: Callable[[CombatTarget], str],
        log: CombatLogSink,
        clock: Callable[[], float],
        on_mob_death: Callable[[], None] | None = None,
        config: CombatConfig = DEFAULT_CONFIG,
        rng: random.Random | None = None,
    ) -> None:
        self.vitals_for = vitals_for
        self.name_for = name_for
        self.log = log
        self.clock = clock
        self.on_mob_death = on_mob_death
        self.config = config
        self.rng = rng or random.Random()
        self._effects: dict[CombatTarget, list[ActiveEffect]] = {
            CombatTarget.PLAYER: [],
            CombatTarget.MOB: [],
        }

    # === Effect Management ===

    def add_effect(
        self, target: CombatTarget, effect: Effect, now: float | None = None
    ) -> ActiveEffect:
        """
        Applies `effect` to `target`, replacing any effect with the same name.

        Args:
            target (CombatTarget):
                The combatant receiving the effect.
            effect (Effect):
                The effect to apply. Without an explicit `tick_interval` it
                ticks at the configured default interval.
            now (float | None):
                Application time. Defaults to the scheduler clock.

        Returns:
            ActiveEffect:
                The new active instance. Its first periodic action is due one
                tick interval after `now`.

        """
        if not isinstance(effect, Effect):
            raise ContractViolationError(
                "add_effect expects an Effect instance", {"effect": effect}
            )
        now = self.clock() if now is None else require_finite(now, "now")
        if "tick_interval" not in effect.model_fields_set:
            effect = effect.model_copy(
                update={"tick_interval": self.config.default_tick_interval}
            )
        active = ActiveEffect(
            target=target,
            effect=effect,
            expires_at=now + effect.duration,
            last_tick=now,
            rune_remaining=effect.rune if isinstance(effect, RuneEffect) else 0,
        )
        self._insert(active)
        return active

    def _insert(self, active: ActiveEffect) -> None:
        effects = self._effects[active.target]
        replaced = [e for e in effects if e.name == active.name]
        if replaced:
            log_debug(
                f"Effect '{active.name}' replaces an existing one",
                {"target": active.target.value},
            )
        effects[:] = [e for e in effects if e.name != active.name]
        effects.append(active)
        log_debug(
            f"Applied effect '{active.name}'",
            {"target": active.target.value, "expires_at": active.expires_at},
        )

    def remove_effect(self, target: CombatTarget, effect_id: str) -> bool:
        """Removes the effect with `effect_id`. Returns True if one was removed."""
        effects = self._effects[target]
        kept = [e for e in effects if e.id != effect_id]
        removed = len(kept) != len(effects)
        effects[:] = kept
        return removed

    def remove_effects_named(self, target: CombatTarget, name: str) -> int:
        """Removes every effect called `name`. Returns how many were removed."""
        effects = self._effects[target]
        kept = [e for e in effects if e.name != name]
        removed = len(effects) - len(kept)
        effects[:] = kept
        return removed

    def clear_effects(self, target: CombatTarget) -> None:
        """Wipes every effect of `target`."""
        if self._effects[target]:
            log_debug(f"Clearing {len(self._effects[target])} {target.value} effect(s)")
        self._effects[target].clear()

    def effects_for(self, target: CombatTarget) -> list[ActiveEffect]:
        """Returns a copy of the active effects of `target`, in insertion order."""
        return list(self._effects[target])

    def has_effect(self, target: CombatTarget, name: str) -> bool:
        return any(e.name == name for e in self._effects[target])

    # === Queries ===

    def _live(self, target: CombatTarget) -> list[ActiveEffect]:
        now = self.clock()
        return [e for e in self._effects[target] if not e.is_expired(now)]

    def get_stat_modifiers(self, target: CombatTarget) -> dict[str, float]:
        """
        Sums the `stat_mods` of every live effect of `target`.

        Computed on every call; nothing is cached.
        """
        totals: dict[str, float] = {}
        for active in self._live(target):
            for stat, value in active.effect.stat_mods.items():
                totals[stat] = totals.get(stat, 0) + value
        return totals

    def sum_defenses(self, target: CombatTarget) -> Defenses:
        """Returns the remaining rune and the total damage shield of `target`."""
        rune = 0
        damage_shield = 0
        for active in self._live(target):
            if isinstance(active.effect, RuneEffect):
                rune += active.rune_remaining
            elif isinstance(active.effect, DamageShieldEffect):
                damage_shield += active.effect.damage_shield
        return Defenses(rune=rune, damage_shield=damage_shield)

    def consume_rune(self, target: CombatTarget, amount: float) -> int:
        """
        Absorbs up to `amount` damage with the runes of `target`.

        Runes are drained in the order they were applied.

        Returns:
            int:
                The damage absorbed.

        """
        require_finite(amount, "amount")
        remaining = max(0, int(amount))
        absorbed = 0
        for active in self._live(target):
            if remaining <= 0:
                break
            if not isinstance(active.effect, RuneEffect) or active.rune_remaining <= 0:
                continue
            taken = min(active.rune_remaining, remaining)
            active.rune_remaining -= taken
            remaining -= taken
            absorbed += taken
        if absorbed:
            log_debug(f"Rune absorbed {absorbed} damage", {"target": target.value})
        return absorbed

    def _incapacitations(self, target: CombatTarget) -> list[IncapacitationType]:
        return [
            e.effect.incapacitation
            for e in self._live(target)
            if isinstance(e.effect, IncapacitatingEffect)
        ]

    def is_rooted(self, target: CombatTarget) -> bool:
        return any(isinstance(e.effect, RootEffect) for e in self._live(target))

    def is_mezzed(self, target: CombatTarget) -> bool:
        return IncapacitationType.MEZ in self._incapacitations(target)

    def is_stunned(self, target: CombatTarget) -> bool:
        return IncapacitationType.STUN in self._incapacitations(target)

    def can_act(self, target: CombatTarget) -> bool:
        """True unless `target` is mezzed or stunned."""
        return not self._incapacitations(target)

    # === Breaks ===

    def break_mez(self, target: CombatTarget) -> bool:
        """Removes every mez on `target`, as a direct hit does."""
        effects = self._effects[target]
        broken = [
            e
            for e in effects
            if isinstance(e.effect, IncapacitatingEffect) and e.effect.breaks_on_damage()
        ]
        if not broken:
            return False
        effects[:] = [e for e in effects if e not in broken]
        for active in broken:
            if target == CombatTarget.PLAYER:
                self.log.add_log(f"You are no longer affected by {active.name}.", LogKind.SYSTEM)
            else:
                self.log.add_log(
                    f"{self.name_for(target)} wakes from {active.name}.", LogKind.SYSTEM
                )
        return True

    def break_root_on_hit(self, target: CombatTarget) -> bool:
        """Rolls the flat on-hit break chance for the roots of `target`."""
        if not self.is_rooted(target):
            return False
        if self.rng.random() >= self.config.root_break_on_hit:
            return False
        effects = self._effects[target]
        effects[:] = [e for e in effects if not isinstance(e.effect, RootEffect)]
        self._log_root_break(target)
        return True

    def _log_root_break(self, target: CombatTarget) -> None:
        if target == CombatTarget.PLAYER:
            self.log.add_log("Roots binding you snap! You break free.", LogKind.SYSTEM)
        else:
            self.log.add_log(f"The root on {self.name_for(target)} breaks!", LogKind.SYSTEM)

    # === Tick ===

    def tick(self, now: float | None = None) -> None:
        """
        Advances every effect of both combatants to `now`.

        Per effect, in order: an expired effect is dropped (logging its
        expiry message), a root may break, and a due periodic action fires.
        When a damage tick kills the mob, the mob-death callback runs once
        after the whole pass.

        Args:
            now (float | None):
                The tick time. Defaults to the scheduler clock.

        """
        now = self.clock() if now is None else require_finite(now, "now")
        for target in (CombatTarget.PLAYER, CombatTarget.MOB):
            ctx = self._context_for(target)
            if ctx is None:
                self.clear_effects(target)
                continue
            if target == CombatTarget.MOB and not ctx.vitals.is_alive():
                self.clear_effects(target)
                continue
            self._tick_target(target, ctx, now)
            if ctx.mob_died:
                self.clear_effects(CombatTarget.MOB)
                if self.on_mob_death is not None:
                    self.on_mob_death()

    def fire_now(self, active: ActiveEffect, now: float | None = None) -> None:
        """
        Runs the periodic action of `active` immediately, outside the tick.

        Used when a spell lands so that its first tick is not delayed by a
        whole interval.
        """
        now = self.clock() if now is None else require_finite(now, "now")
        ctx = self._context_for(active.target)
        if ctx is None:
            return
        active.effect.on_tick(ctx)
        active.last_tick = now
        if ctx.mob_died:
            self.clear_effects(CombatTarget.MOB)
            if self.on_mob_death is not None:
                self.on_mob_death()

    def _context_for(self, target: CombatTarget) -> TickContext | None:
        vitals = self.vitals_for(target)
        if vitals is None:
            return None
        return TickContext(
            target=target,
            target_name=self.name_for(target),
            vitals=vitals,
            opponent_vitals=self.vitals_for(target.opponent),
            opponent_name=self.name_for(target.opponent),
            add_log=self.log.add_log,
        )

    def _tick_target(self, target: CombatTarget, ctx: TickContext, now: float) -> None:
        kept: list[ActiveEffect] = []
        for active in list(self._effects[target]):
            effect = active.effect
            if active.is_expired(now):
                if effect.on_expire:
                    self.log.add_log(effect.on_expire, LogKind.SYSTEM)
                log_debug(f"Effect '{effect.name}' expired", {"target": target.value})
                continue
            if isinstance(effect, RootEffect):
                chance = effect.break_chance(
                    self.config.root_break_base, self.config.root_break_cha_divisor
                )
                if self.rng.random() < chance:
                    self._log_root_break(target)
                    continue
            if active.is_due(now):
                effect.on_tick(ctx)
                active.last_tick = now
            kept.append(active)
        self._effects[target] = kept

    # === Persistence ===

    def serialize_player_effects(self, now: float | None = None) -> list[dict[str, Any]]:
        """
        Returns the non-expired player effects as plain dicts.

        Times are stored relative to `now`, so the records can be restored
        on another clock. Mob effects are never persisted.
        """
        now = self.clock() if now is None else now
        return [
            {
                "id": active.id,
                "effect": EffectSerializer.serialize(active.effect),
                "remaining": active.expires_at - now,
                "since_last_tick": now - active.last_tick,
                "rune_remaining": active.rune_remaining,
            }
            for active in self._effects[CombatTarget.PLAYER]
            if not active.is_expired(now)
        ]

    def restore_player_effects(
        self, records: list[dict[str, Any]], now: float | None = None
    ) -> list[ActiveEffect]:
        """
        Rebuilds player effects from `serialize_player_effects` records.

        Expired and invalid records are skipped.
        """
        now = self.clock() if now is None else now
        restored: list[ActiveEffect] = []
        for record in records:
            remaining = to_finite_number(record.get("remaining"))
            if remaining is None or remaining <= 0:
                continue
            since_last_tick = to_finite_number(record.get("since_last_tick", 0.0))
            if since_last_tick is None:
                continue
            effect = EffectSerializer.deserialize(record.get("effect", {}))
            if effect is None:
                continue
            rune = record.get("rune_remaining")
            if not isinstance(rune, int) or rune < 0:
                rune = effect.rune if isinstance(effect, RuneEffect) else 0
            active = ActiveEffect(
                target=CombatTarget.PLAYER,
                effect=effect,
                expires_at=now + remaining,
                last_tick=now - max(0.0, since_last_tick),
                rune_remaining=rune,
            )
            self._insert(active)
            restored.append(active)
        return restored
