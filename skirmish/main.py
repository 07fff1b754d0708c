"""
Main entry point for the Skirmish combat core.

This script loads the static data, creates a character and runs an automated
fight in one camp, printing the combat log as it happens. It demonstrates:
- Weighted spawns, merchants included
- Melee swings, direct damage spells and damage over time
- Mob counter attacks, runes and damage shields
- Experience, loot, level-ups and respawns
"""

import logging
import random
from collections import Counter
from typing import Any

from skirmish.character.state import BaseVitals, CharacterState
from skirmish.combat.rules import con_color
from skirmish.core.constants import CombatTarget
from skirmish.core.content import StaticData
from skirmish.core.interfaces import CombatLog
from skirmish.core.logging import log_info, setup_logging
from skirmish.core.utils import cprint, crule, make_bar
from skirmish.effects import DamageOverTimeEffect, DamageShieldEffect, RuneEffect
from skirmish.entities.mob import MobInstance
from skirmish.entities.stats import Attributes, PlayerStatTotals
from skirmish.session import CombatSession

ROUNDS = 40
ROUND_SECONDS = 3.0


class DemoInventory:
    """Counts granted items by id."""

    def __init__(self) -> None:
        self.items: Counter[str] = Counter()

    def create_item_instance(self, item_def_id: str) -> str:
        return item_def_id

    def add_item_to_inventory(self, item: Any, qty: int) -> None:
        self.items[item] += qty


def print_status(session: CombatSession) -> None:
    """Prints the vitals of both combatants as bars, and their active effects."""
    player = session.player_vitals
    cprint(
        f"  [bold]{session.character.name}[/] (lvl {session.character.level}, "
        f"{session.character.xp} xp) "
        f"HP {make_bar(player.hp, player.max_hp, color='green')} {player.hp}/{player.max_hp}"
    )
    mob = session.mob
    if mob is not None:
        vitals = session.mob_vitals
        label, color = con_color(mob.level, session.character.level) or ("?", "white")
        cprint(
            f"  [bold {color}]{mob.name}[/] (lvl {mob.level}, {label}) "
            f"HP {make_bar(vitals.hp, vitals.max_hp, color='red')} {vitals.hp}/{vitals.max_hp}"
        )
    for target in CombatTarget:
        active = session.effects.effects_for(target)
        if active:
            names = ", ".join(f"{e.effect.emoji} {e.effect.colored_name}" for e in active)
            cprint(f"    [dim]{session.name_for(target)}:[/] {names}")


def on_interaction(mob: MobInstance) -> None:
    cprint(f"  [yellow]{mob.name} offers you their wares.[/]")


def main(seed: int | None = None) -> None:
    setup_logging(logging.INFO)
    crule("Skirmish", style="bold green")

    static = StaticData.load()
    character = CharacterState(
        name="Aldric",
        class_name="Warrior",
        base_stats=Attributes(strength=75, stamina=70, agility=60, dexterity=55),
        base_vitals=BaseVitals(hp=120, endurance=40),
        zone_id="greenfields",
        bind_zone_id="greenfields",
    )
    inventory = DemoInventory()

    def totals() -> PlayerStatTotals:
        return PlayerStatTotals(
            attributes=character.base_stats,
            ac=20 + character.level * 2,
            min_damage=3 + character.level,
            max_damage=8 + character.level * 2,
        )

    session = CombatSession(
        static,
        character,
        player_totals=totals,
        log=CombatLog(echo=True),
        inventory=inventory,
        rng=random.Random(seed),
        bind_camp_id="newbie_yard",
        on_interaction=on_interaction,
    )

    crule(":crossed_swords:  Combat Started", style="bold green")
    session.start("newbie_yard")
    session.cast_effect(
        CombatTarget.PLAYER, RuneEffect(name="Minor Shielding", duration=60, rune=15)
    )
    session.cast_effect(
        CombatTarget.PLAYER,
        DamageShieldEffect(name="Thorny Skin", duration=60, damage_shield=2),
    )

    try:
        for round_number in range(1, ROUNDS + 1):
            crule(f"Round {round_number} ({session.timers.now:.0f}s)", characters="-")
            if session.mob is None:
                cprint("  [dim]Waiting for a spawn...[/]")
                encounter = session.encounter
                if encounter.camp_id is not None and not encounter.respawn_pending:
                    encounter.spawn_mob()
            else:
                if round_number % 5 == 0:
                    session.cast_effect(
                        CombatTarget.MOB,
                        DamageOverTimeEffect(
                            name="Flame Lick", duration=12, tick_damage=3, school="fire"
                        ),
                    )
                if round_number % 3 == 0:
                    session.cast_spell(6, "cold")
                else:
                    session.attack_mob()
                session.mob_attack()
                print_status(session)
            session.advance(ROUND_SECONDS)
    except KeyboardInterrupt:
        cprint("")
        crule(":crossed_swords:  Combat Interrupted", style="bold red")
        return

    crule(":crossed_swords:  Combat Finished", style="bold green")
    session.stop()
    log_info(
        "Final state",
        {"level": character.level, "xp": character.xp, "saves": len(session.save.saves)},
    )
    for item_id, qty in sorted(inventory.items.items()):
        cprint(f"  {item_id}: {qty}")


if __name__ == "__main__":
    main()
