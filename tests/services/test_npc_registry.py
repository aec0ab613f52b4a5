"""NPCRegistry 테스트"""

from src.core.event_types import EventTypes
from src.core.npc.factory import create_static_npc, state
from src.core.npc.states import ProximityTrigger
from src.core.world.models import Direction, Position


def _npc(npc_id, x, y, radius=1.5, **extra):
    return create_static_npc(
        id=npc_id,
        name=npc_id.title(),
        position=(x, y),
        sprite=f"{npc_id}.png",
        interaction_radius=radius,
        **extra,
    )


def _possum(x=0, y=0):
    return _npc(
        "possum",
        x,
        y,
        states={
            "sleeping": state(
                ["sleep.png"],
                500,
                proximity_trigger=ProximityTrigger(radius=2.0, trigger_state="playing_dead"),
            ),
            "playing_dead": state(["dead.png"], 500),
        },
        initial_state="sleeping",
    )


def _cat():
    return _npc(
        "cat",
        5,
        5,
        states={
            "sleeping": state(["s.png"], transitions_to={"interact": "angry"}),
            "angry": state(["a_down.png"], directional_sprites={Direction.LEFT: ["a_left.png"]}),
        },
        initial_state="sleeping",
    )


class TestRegistration:
    def test_register_and_lookup(self, registry):
        registry.register_all("farm", [_npc("cow", 0, 0), _npc("goat", 3, 0)])
        assert len(registry) == 2
        assert registry.get_npc("cow").name == "Cow"
        assert registry.map_of("goat") == "farm"
        assert [n.id for n in registry.npcs_on("farm")] == ["cow", "goat"]

    def test_reregister_moves_map(self, registry):
        registry.register("farm", _npc("cow", 0, 0))
        registry.register("village", _npc("cow", 1, 1))
        assert registry.npcs_on("farm") == []
        assert registry.map_of("cow") == "village"
        assert len(registry) == 1

    def test_unregister_and_clear(self, registry):
        registry.register_all("farm", [_npc("cow", 0, 0), _npc("goat", 3, 0)])
        assert registry.unregister("cow") is True
        assert registry.unregister("cow") is False
        assert registry.clear_map("farm") == 1
        assert registry.get_npc("goat") is None


class TestNpcAt:
    def test_within_radius(self, registry):
        registry.register("farm", _npc("cow", 0, 0))
        assert registry.npc_at("farm", Position(1.5, 0)).id == "cow"
        assert registry.npc_at("farm", Position(1.6, 0)) is None
        assert registry.npc_at("village", Position(0, 0)) is None

    def test_nearest_wins(self, registry):
        registry.register_all("farm", [_npc("cow", 0, 0), _npc("goat", 2, 0)])
        assert registry.npc_at("farm", Position(1.2, 0)).id == "goat"

    def test_tie_goes_to_first_registered(self, registry):
        registry.register_all("farm", [_npc("cow", 0, 0), _npc("goat", 2, 0)])
        assert registry.npc_at("farm", Position(1, 0)).id == "cow"

    def test_own_radius(self, registry):
        registry.register_all("farm", [_npc("cow", 0, 0, radius=0.5), _npc("horse", 3, 0, radius=3)])
        assert registry.npc_at("farm", Position(0.8, 0)).id == "horse"


class TestUpdate:
    def test_proximity_triggers_state_change(self, registry, recorded):
        registry.register("farm", _possum())
        registry.set_current_map("farm")
        assert registry.update(0, Position(10, 10)) == []
        assert registry.update(16, Position(1, 0)) == ["possum"]
        assert registry.current_sprite("possum") == "dead.png"
        assert recorded == [
            (
                EventTypes.NPC_STATE_CHANGED,
                {"npc_id": "possum", "from_state": "sleeping", "to_state": "playing_dead"},
            )
        ]

    def test_only_current_map(self, registry):
        registry.register("farm", _possum())
        registry.set_current_map("village")
        assert registry.update(0, Position(0, 0)) == []
        assert registry.update(0, Position(0, 0), map_id="farm") == ["possum"]

    def test_no_map(self, registry):
        registry.register("farm", _possum())
        assert registry.update(0, Position(0, 0)) == []

    def test_repeated_changes_all_emitted(self, registry, event_bus, recorded):
        registry.register("farm", _cat())
        registry.set_current_map("farm")
        registry.trigger_npc_event("cat", "interact")
        registry.get_npc("cat").animated_states.force_state("sleeping", 0)
        registry.trigger_npc_event("cat", "interact")
        assert len(recorded) == 2


class TestEventsAndSprites:
    def test_trigger_event(self, registry):
        registry.register("farm", _cat())
        assert registry.trigger_npc_event("cat", "interact") is True
        assert registry.trigger_npc_event("cat", "interact") is False
        assert registry.trigger_npc_event("ghost", "interact") is False

    def test_event_uses_last_update_time(self, registry):
        registry.register("farm", _cat())
        registry.set_current_map("farm")
        registry.update(1234)
        registry.trigger_npc_event("cat", "interact")
        assert registry.get_npc("cat").animated_states.last_state_change == 1234

    def test_current_sprite(self, registry):
        registry.register("farm", _cat())
        registry.register("farm", _npc("sign", 9, 9))
        assert registry.current_sprite("sign") == "sign.png"
        registry.trigger_npc_event("cat", "interact")
        assert registry.current_sprite("cat", Direction.LEFT) == "a_left.png"
        assert registry.current_sprite("ghost") is None
