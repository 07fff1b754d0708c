"""
Tests for the encounter controller: selection, spawning, kills and respawns.
"""

import random
from collections import Counter

import pytest
from factories import make_static, mob_record

from skirmish.character.state import CharacterState
from skirmish.combat.encounter import EncounterController, XpContext
from skirmish.core.constants import CombatTarget, LogKind
from skirmish.core.errors import ConfigurationError
from skirmish.effects import DamageOverTimeEffect
from skirmish.effects.effect_scheduler import EffectScheduler
from skirmish.entities.vitals import VitalMaxima, Vitals


class FakeInventory:
    def __init__(self):
        self.added = []

    def create_item_instance(self, item_def_id):
        return {"item": item_def_id}

    def add_item_to_inventory(self, item, qty):
        self.added.append((item["item"], qty))


def build(static, log, save, timers, rng, **kwargs):
    """Wires an encounter controller whose mob vitals follow its active mob."""
    holder = {}
    character = kwargs.pop("character", CharacterState(zone_id="field"))

    def maxima():
        controller = holder.get("controller")
        mob = controller.active_mob if controller is not None else None
        if mob is None:
            return VitalMaxima(hp=0)
        return VitalMaxima(hp=mob.hp, mana=mob.mana, endurance=mob.endurance)

    mob_vitals = Vitals(maxima)
    player_vitals = Vitals.fixed(100)
    effects = EffectScheduler(
        vitals_for=lambda t: player_vitals if t == CombatTarget.PLAYER else mob_vitals,
        name_for=lambda t: "mob",
        log=log,
        clock=lambda: timers.now,
    )
    controller = EncounterController(
        static=static,
        character=character,
        mob_vitals=mob_vitals,
        effects=effects,
        timers=timers,
        log=log,
        save=save,
        rng=rng,
        **kwargs,
    )
    holder["controller"] = controller
    return controller


@pytest.fixture
def controller(static, log, save, timers, rng):
    encounter = build(static, log, save, timers, rng)
    encounter.change_camp("yard")
    return encounter


def test_weighted_selection_converges(log, save, timers):
    """
    With weights [1, 1, 2] the third candidate is drawn about half the time.
    """
    static = make_static(
        mobs=[mob_record("a"), mob_record("b"), mob_record("c")],
        camps=[
            {
                "id": "yard",
                "spawnTime": 5,
                "members": [
                    {"mob_id": "a", "weight": 1},
                    {"mob_id": "b", "weight": 1},
                    {"mob_id": "c", "weight": 2},
                ],
            }
        ],
    )
    encounter = build(static, log, save, timers, random.Random(42))
    draws = Counter(encounter.select_mob_for_camp("yard").id for _ in range(20000))

    assert draws["c"] / 20000 == pytest.approx(0.5, abs=0.02)
    assert draws["a"] / 20000 == pytest.approx(0.25, abs=0.02)


@pytest.mark.parametrize("weight", [0, -1, "heavy", None, float("nan")])
def test_invalid_weight_is_a_configuration_error(log, save, timers, rng, weight):
    static = make_static(
        camps=[{"id": "yard", "spawnTime": 5, "members": [{"mob_id": "1", "weight": weight}]}]
    )
    encounter = build(static, log, save, timers, rng)
    with pytest.raises(ConfigurationError):
        encounter.select_mob_for_camp("yard")


def test_empty_pool_is_a_configuration_error(log, save, timers, rng):
    static = make_static(camps=[{"id": "yard", "spawnTime": 5, "members": []}])
    encounter = build(static, log, save, timers, rng)
    with pytest.raises(ConfigurationError):
        encounter.select_mob_for_camp("yard")
    assert "No mobs available in this zone." in log.messages(LogKind.ERROR)


def test_unknown_camp_is_a_configuration_error(controller):
    with pytest.raises(ConfigurationError):
        controller.change_camp("nowhere")


def test_spawn_sets_active_mob_with_full_vitals(controller, log):
    mob = controller.spawn_mob()

    assert controller.active_mob is mob
    assert controller.mob_vitals.hp == mob.hp == 20
    assert controller.mob_vitals.mana == 10
    assert log.messages(LogKind.SPAWN) == ["a rat spawns!"]


def test_spawn_distance_is_within_camp_area(log, save, timers):
    static = make_static(
        camps=[
            {"id": "yard", "spawnTime": 5, "campArea": 12, "members": [{"mob_id": "1", "weight": 1}]}
        ]
    )
    encounter = build(static, log, save, timers, random.Random(3))
    encounter.change_camp("yard")
    for _ in range(20):
        mob = encounter.spawn_mob()
        assert 0 <= mob.distance <= 12


def test_merchant_never_becomes_active(log, save, timers, rng, mocker):
    """
    A merchant spawn goes to the interaction callback and leaves no mob HP.
    """
    static = make_static(
        mobs=[mob_record("m", "Pegleg", tags=["Merchant"], hp=500)],
    )
    on_interaction = mocker.Mock()
    encounter = build(static, log, save, timers, rng, on_interaction=on_interaction)
    encounter.change_camp("yard")

    assert encounter.spawn_mob() is None

    assert encounter.active_mob is None
    assert encounter.mob_vitals.hp == 0
    on_interaction.assert_called_once()
    assert on_interaction.call_args.args[0].name == "Pegleg"


def test_new_spawn_clears_mob_effects(controller):
    controller.spawn_mob()
    controller.effects.add_effect(
        CombatTarget.MOB, DamageOverTimeEffect(name="Poison", duration=30, tick_damage=1)
    )
    controller.spawn_mob()
    assert controller.effects.effects_for(CombatTarget.MOB) == []


def test_kill_awards_xp_saves_and_schedules_respawn(controller, save, log, timers):
    mob = controller.spawn_mob()

    result = controller.handle_mob_killed(mob)

    assert result.xp_gained == 10
    assert controller.character.xp == 10
    assert controller.active_mob is None
    assert log.messages(LogKind.KILL) == ["a rat has been slain!"]
    assert log.messages(LogKind.XP) == ["You gain 10 experience!"]
    assert save.saves[-1] == (
        {"character": {"level": 1, "xp": 10, "zone_id": "field"}, "inventory": True},
        True,
    )
    assert controller.respawn_pending

    timers.advance(9.9)
    assert controller.active_mob is None
    timers.advance(0.1)
    assert controller.active_mob is not None


def test_xp_multipliers_and_bonus(log, save, timers, rng):
    static = make_static(mobs=[mob_record(xp=40)])
    encounter = build(
        static,
        log,
        save,
        timers,
        rng,
        xp_context=lambda: XpContext(xp_rate=1.5, camp_mod=1.1, xp_bonus_pct=10),
    )
    encounter.change_camp("yard")
    result = encounter.handle_mob_killed(encounter.spawn_mob())

    # floor(40 * 1.1 * 1.5 * 1.1) = 72
    assert result.xp_gained == 72
    assert result.bonus_xp == 32
    assert "You gain 72 experience! (+32 bonus)" in log.messages(LogKind.XP)


def test_duplicate_kill_signal_is_ignored(controller, timers, mocker):
    on_xp = mocker.Mock()
    controller.on_xp_changed = on_xp
    mob = controller.spawn_mob()

    assert controller.handle_mob_killed(mob) is not None
    timers.advance(0.5)
    assert controller.handle_mob_killed(mob) is None
    assert controller.character.xp == 10
    on_xp.assert_called_once_with()


def test_loot_rolls_each_entry_independently(log, save, timers):
    static = make_static(
        mobs=[mob_record(lootTableId="rat")],
        loot_tables={
            "rat": [
                {"itemId": "tail", "dropChance": 1.0},
                {"itemId": "coin", "dropChance": 1.0, "minQty": 2, "maxQty": 5},
                {"itemId": "gem", "dropChance": 0.0},
                {"itemId": "ghost", "dropChance": 1.0},
                {"itemId": "tail"},
            ]
        },
        items=[
            {"id": "tail", "name": "Rat Tail"},
            {"id": "coin", "name": "Copper Coin"},
            {"id": "gem", "name": "Gem"},
        ],
    )
    rng = random.Random(0)
    inventory = FakeInventory()
    encounter = build(static, log, save, timers, rng, inventory=inventory)
    encounter.change_camp("yard")
    mob = encounter.spawn_mob()
    rng.random = lambda: 0.5

    result = encounter.handle_mob_killed(mob)

    # qty = max(2, ceil(0.5 * 5)) = 3
    assert [(drop.item_id, drop.qty) for drop in result.loot] == [("tail", 1), ("coin", 3)]
    assert inventory.added == [("tail", 1), ("coin", 3)]
    assert log.messages(LogKind.LOOT) == ["You receive: Rat Tail", "You receive: Copper Coin x3"]


@pytest.mark.parametrize("spawn_time", [None, 0, -5, "soon"])
def test_missing_spawn_time_is_a_configuration_error(log, save, timers, rng, spawn_time):
    static = make_static(
        camps=[{"id": "yard", "spawnTime": spawn_time, "members": [{"mob_id": "1", "weight": 1}]}]
    )
    encounter = build(static, log, save, timers, rng)
    encounter.change_camp("yard")
    mob = encounter.spawn_mob()

    with pytest.raises(ConfigurationError):
        encounter.handle_mob_killed(mob)
    assert "Camp respawn time is not configured." in log.messages(LogKind.ERROR)


def test_camp_change_discards_pending_respawn(log, save, timers, rng):
    """
    A respawn scheduled before a camp change never fires into the new camp.
    """
    static = make_static(
        mobs=[mob_record("1", "a rat"), mob_record("2", "a bat")],
        camps=[
            {"id": "yard", "spawnTime": 10, "members": [{"mob_id": "1", "weight": 1}]},
            {"id": "cave", "spawnTime": 10, "members": [{"mob_id": "2", "weight": 1}]},
        ],
    )
    encounter = build(static, log, save, timers, rng)
    encounter.change_camp("yard")
    encounter.handle_mob_killed(encounter.spawn_mob())

    encounter.change_camp("cave")
    timers.advance(30)

    assert encounter.active_mob is None
    assert not encounter.respawn_pending


def test_stale_epoch_respawn_is_dropped(controller, timers):
    controller.spawn_mob()
    controller.schedule_respawn(5)
    controller.epoch += 1
    controller.clear_active_mob()

    timers.advance(5)

    assert controller.active_mob is None


def test_zone_change_moves_the_character(controller):
    controller.spawn_mob()
    controller.change_zone("town", "yard")

    assert controller.character.zone_id == "town"
    assert controller.camp_id == "yard"
    assert controller.active_mob is None
    assert controller.mob_vitals.hp == 0
