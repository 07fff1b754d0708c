"""
Damage resolution for the combat core.

Wraps the hit resolver for both directions of combat: picks the vitals and
the resist function of the target, reads runes and damage shields from the
effect scheduler, writes the new HP, and fires the log and death hooks.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from skirmish.core.constants import CombatTarget, LogKind
from skirmish.core.errors import ContractViolationError
from skirmish.core.interfaces import CombatLogSink
from skirmish.core.logging import log_debug
from skirmish.core.timers import TimerQueue
from skirmish.effects.effect_scheduler import EffectScheduler
from skirmish.entities.vitals import Vitals

from .hit_resolver import apply_hit
from .resist import ResistCalculator


class DamageReport(BaseModel):
    """What a resolved hit did to its target."""

    resisted: bool = False
    new_hp: int | None = None
    killed: bool = False
    final_damage: int = 0
    reflected: int = 0


class DamageResolver:
    """
    Applies hits to the player or to the mob.

    Args:
        log (CombatLogSink):
            Player-facing combat log.
        resist (ResistCalculator):
            Spell mitigation in both directions.
        effects (EffectScheduler):
            Source of runes and damage shields.
        vitals_for (Callable[[CombatTarget], Vitals | None]):
            Live vitals of a combatant (None when there is no mob).
        mob_name (Callable[[], str]):
            Display name of the active mob.
        timers (TimerQueue):
            Queue used to defer a player death caused by damage shield
            reflection until the current resolution has finished.
        on_player_death (Callable[[str], Any]):
            Player death handler, given the killer's name.
        on_mob_death (Callable[[], Any] | None):
            Mob death handler.

    """

    def __init__(
        self,
        log: CombatLogSink,
        resist: ResistCalculator,
        effects: EffectScheduler,
        vitals_for: Callable[[CombatTarget], Vitals | None],
        mob_name: Callable[[], str],
        timers: TimerQueue,
        on_player_death: Callable[[str], Any],
        on_mob_death: Callable[[], Any] | None = None,
    ) -> None:
        self.log = log
        self.resist = resist
        self.effects = effects
        self.vitals_for = vitals_for
        self.mob_name = mob_name
        self.timers = timers
        self.on_player_death = on_player_death
        self.on_mob_death = on_mob_death

    def _vitals(self, target: CombatTarget) -> Vitals:
        vitals = self.vitals_for(target)
        if vitals is None:
            raise ContractViolationError(
                f"No vitals for {target.value}", {"target": target.value}
            )
        return vitals

    def apply_hit_to_target(
        self,
        raw_damage: float,
        is_spell: bool = False,
        school: str = "magic",
        mitigation: float = 0,
        target: CombatTarget = CombatTarget.PLAYER,
        attacker_name: str = "an enemy",
    ) -> DamageReport:
        """
        Resolves one hit against `target` and applies its consequences.

        Args:
            raw_damage (float):
                Damage before mitigation.
            is_spell (bool):
                Whether the hit is a spell (resisted by school).
            school (str):
                Spell school.
            mitigation (float):
                Flat reduction for non-spell hits.
            target (CombatTarget):
                Who is hit.
            attacker_name (str):
                Name of the attacker, used in logs and as the killer's name.

        Returns:
            DamageReport:
                The outcome. `killed` is only ever true for the mob.

        """
        vitals = self._vitals(target)
        defenses = self.effects.sum_defenses(target)
        if target == CombatTarget.PLAYER:
            mitigate = self.resist.mitigate_spell_damage
        else:
            mitigate = self.resist.mitigate_spell_damage_vs_mob

        # The player's death handler restores vitals in normal mode, so it
        # must only run after the new HP is written.
        player_died: list[bool] = []

        outcome = apply_hit(
            raw_damage=raw_damage,
            is_spell=is_spell,
            school=school,
            mitigation=mitigation,
            current_hp=vitals.hp,
            damage_shield=defenses.damage_shield,
            consume_rune=lambda amount: self.effects.consume_rune(target, amount),
            mitigate_spell_damage=mitigate,
            on_death=(lambda: player_died.append(True))
            if target == CombatTarget.PLAYER
            else None,
        )

        spell_part = f"{school} " if is_spell else ""

        if outcome.resisted:
            if target == CombatTarget.PLAYER:
                message = f"You resist {attacker_name}'s {school} spell!"
            else:
                message = f"{self.mob_name()} resists your {school} spell!"
            self.log.add_log(message, LogKind.SYSTEM)
            return DamageReport(resisted=True, new_hp=vitals.hp)

        if target == CombatTarget.PLAYER:
            return self._resolve_on_player(
                vitals, outcome.new_hp, outcome.final_damage,
                outcome.damage_shield_reflected, spell_part, attacker_name,
                bool(player_died),
            )
        return self._resolve_on_mob(
            vitals, outcome.new_hp, outcome.final_damage,
            outcome.damage_shield_reflected, spell_part,
        )

    def _resolve_on_player(
        self,
        vitals: Vitals,
        new_hp: int,
        final_damage: int,
        reflected: int,
        spell_part: str,
        attacker_name: str,
        died: bool,
    ) -> DamageReport:
        vitals.set_hp(new_hp)
        self.log.add_log(
            f"{attacker_name} hits YOU for {final_damage} {spell_part}damage!",
            LogKind.MOBATTACK,
        )
        if reflected > 0:
            mob_vitals = self.vitals_for(CombatTarget.MOB)
            if mob_vitals is not None:
                hp_before = mob_vitals.hp
                mob_vitals.adjust_hp(-reflected)
                self.log.add_log(
                    f"Your damage shield hits {attacker_name} for {reflected}.",
                    LogKind.DAMAGE,
                )
                if hp_before > 0 and mob_vitals.hp == 0 and self.on_mob_death:
                    self.on_mob_death()
        if died:
            self.on_player_death(attacker_name)
        return DamageReport(
            new_hp=new_hp, final_damage=final_damage, reflected=reflected
        )

    def _resolve_on_mob(
        self,
        vitals: Vitals,
        new_hp: int,
        final_damage: int,
        reflected: int,
        spell_part: str,
    ) -> DamageReport:
        mob_name = self.mob_name()
        vitals.set_hp(new_hp)
        self.log.add_log(
            f"You hit {mob_name} for {final_damage} {spell_part}damage!", LogKind.DAMAGE
        )
        if reflected > 0:
            player_vitals = self._vitals(CombatTarget.PLAYER)
            hp_before = player_vitals.hp
            player_vitals.adjust_hp(-reflected)
            self.log.add_log(
                f"{mob_name}'s damage shield hits you for {reflected}.", LogKind.DAMAGE
            )
            if hp_before > 0 and player_vitals.hp == 0:
                log_debug("Deferring player death caused by a damage shield")
                self.timers.call_soon(
                    lambda: self.on_player_death(mob_name or "an enemy"),
                    label="deferred-player-death",
                )
        killed = new_hp <= 0
        if killed and self.on_mob_death is not None:
            self.on_mob_death()
        return DamageReport(
            new_hp=new_hp, killed=killed, final_damage=final_damage, reflected=reflected
        )
