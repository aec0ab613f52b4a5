"""NPC 팩토리 테스트"""

import json

import pytest

from src.config import settings
from src.core.dialogue.loader import DialogueSchemaError
from src.core.dialogue.models import DialogueNode
from src.core.npc.factory import (
    create_static_npc,
    create_wandering_npc,
    load_npcs_json,
    npc_from_config,
    state,
)
from src.core.npc.models import DailyResourceConfig, FriendshipConfig, NPCBehavior, TierReward
from src.core.npc.states import NPCConfigError
from src.core.world.models import Direction, FriendshipTier, Position


def _cat(**overrides):
    config = dict(
        id="cat",
        name="Cat",
        position=(5, 7),
        sprite="cat.png",
        states={
            "sleeping": state(["cat_sleep.png"], transitions_to={"interact": "angry"}),
            "angry": state(["cat_angry.png"], duration=10000, next_state="sleeping"),
        },
        initial_state="sleeping",
    )
    config.update(overrides)
    return create_static_npc(**config)


class TestCreateStatic:
    def test_defaults(self):
        npc = _cat()
        assert npc.behavior == NPCBehavior.STATIC
        assert npc.position == Position(5.0, 7.0)
        assert npc.scale == settings.DEFAULT_NPC_SCALE
        assert npc.interaction_radius == settings.DEFAULT_INTERACTION_RADIUS
        assert npc.animated_states.current_state == "sleeping"
        assert npc.current_sprite == "cat_sleep.png"

    def test_without_states(self):
        npc = create_static_npc(id="sign", name="Sign", position=(0, 0), sprite="sign.png")
        assert npc.animated_states is None
        assert npc.current_sprite == "sign.png"

    def test_dialogue_table_built(self):
        npc = _cat(dialogue=[DialogueNode(id="greeting", text="Mrrp.")])
        assert npc.dialogue_table.has_id("greeting")
        assert npc.dialogue_table.owner == "cat"

    def test_unknown_initial_state(self):
        with pytest.raises(NPCConfigError, match="cat"):
            _cat(initial_state="dancing")

    def test_bad_radius(self):
        with pytest.raises(NPCConfigError):
            _cat(interaction_radius=0)

    def test_bad_daily_resource(self):
        with pytest.raises(NPCConfigError):
            _cat(daily_resource=DailyResourceConfig(item_id="milk", max_per_day=0))

    def test_can_befriend(self):
        assert not _cat().can_befriend
        assert _cat(friendship_config=FriendshipConfig()).can_befriend
        assert not _cat(friendship_config=FriendshipConfig(can_befriend=False)).can_befriend

    def test_expression_sprite(self):
        npc = _cat(portrait_sprite="cat_face.png", dialogue_expressions={"hiss": "cat_hiss.png"})
        assert npc.expression_sprite("hiss") == "cat_hiss.png"
        assert npc.expression_sprite("unknown") == "cat_face.png"
        assert npc.expression_sprite(None) == "cat_face.png"


class TestCreateWandering:
    def test_default_states(self):
        npc = create_wandering_npc(id="cow", name="Daisy", position=(1, 1), sprite="cow.png")
        assert npc.behavior == NPCBehavior.WANDER
        machine = npc.animated_states
        assert set(machine.states) == {"idle", "walking"}
        assert machine.current_state == "idle"
        machine.tick(3000)
        assert machine.current_state == "walking"

    def test_custom_states_kept(self):
        npc = create_wandering_npc(
            id="bird",
            name="Bird",
            position=(1, 1),
            sprite="bird.png",
            states={"hop": state(["hop.png"])},
            initial_state="hop",
        )
        assert set(npc.animated_states.states) == {"hop"}


class TestFromConfig:
    def test_camel_case_config(self):
        npc = npc_from_config(
            {
                "id": "possum",
                "name": "Possum",
                "position": {"x": 3, "y": 4},
                "sprite": "possum.png",
                "direction": "left",
                "interactionRadius": 2.5,
                "initialState": "sleeping",
                "states": {
                    "sleeping": {
                        "sprites": ["sleep.png"],
                        "animationSpeed": 800,
                        "proximityTrigger": {"radius": 2, "triggerState": "dead"},
                    },
                    "dead": {"sprites": ["dead.png"]},
                },
                "friendshipConfig": {"startingPoints": 300, "likedFoodTypes": ["fruit"]},
                "dailyResource": {"itemId": "fur", "maxPerDay": 2},
                "dialogue": [{"id": "greeting", "text": "..."}],
            }
        )
        assert npc.position == Position(3, 4)
        assert npc.direction == Direction.LEFT
        assert npc.interaction_radius == 2.5
        assert npc.friendship_config.starting_points == 300
        assert npc.friendship_config.liked_categories == ("fruit",)
        assert npc.daily_resource.max_per_day == 2
        trigger = npc.animated_states.states["sleeping"].proximity_trigger
        assert trigger.trigger_state == "dead"
        assert trigger.effective_recovery_radius(settings.PROXIMITY_RECOVERY_MARGIN) == 3.5

    def test_tier_rewards(self):
        npc = npc_from_config(
            {
                "id": "elder",
                "position": [0, 0],
                "sprite": "elder.png",
                "friendshipConfig": {
                    "tierRewards": {
                        "acquaintance": [
                            {"itemId": "seed_sunflower", "quantity": 3},
                            {"itemId": "seed_pea"},
                        ],
                        "good_friend": [],
                    }
                },
            }
        )
        config = npc.friendship_config
        assert config.rewards_for(FriendshipTier.ACQUAINTANCE) == (
            TierReward(FriendshipTier.ACQUAINTANCE, "seed_sunflower", 3),
            TierReward(FriendshipTier.ACQUAINTANCE, "seed_pea", 1),
        )
        assert config.rewards_for(FriendshipTier.GOOD_FRIEND) == ()

    @pytest.mark.parametrize(
        "rewards",
        [
            {"best_friend": [{"itemId": "cake"}]},
            {"acquaintance": [{"quantity": 2}]},
            {"acquaintance": [{"itemId": "cake", "quantity": 0}]},
        ],
    )
    def test_bad_tier_rewards(self, rewards):
        with pytest.raises(NPCConfigError, match="tierRewards"):
            npc_from_config(
                {
                    "id": "elder",
                    "position": [0, 0],
                    "sprite": "elder.png",
                    "friendshipConfig": {"tierRewards": rewards},
                }
            )

    def test_wander_behavior(self):
        npc = npc_from_config(
            {"id": "cow", "position": [0, 0], "sprite": "cow.png", "behavior": "wander"}
        )
        assert npc.behavior == NPCBehavior.WANDER
        assert npc.name == "cow"

    def test_missing_sprite(self):
        with pytest.raises(NPCConfigError):
            npc_from_config({"id": "ghost", "position": [0, 0]})

    def test_unknown_state_reference(self):
        with pytest.raises(NPCConfigError):
            npc_from_config(
                {
                    "id": "cat",
                    "position": [0, 0],
                    "sprite": "cat.png",
                    "initialState": "idle",
                    "states": {"idle": {"sprites": ["i.png"], "transitionsTo": {"poke": "mad"}}},
                }
            )

    def test_dialogue_error_propagates_unchanged(self):
        with pytest.raises(DialogueSchemaError):
            npc_from_config(
                {"id": "cat", "position": [0, 0], "sprite": "c.png", "dialogue": [{"id": "x"}]}
            )


class TestLoadNpcsJson:
    def test_load(self, tmp_path):
        path = tmp_path / "npcs.json"
        path.write_text(
            json.dumps(
                {
                    "farm": [{"id": "cow", "position": [1, 2], "sprite": "cow.png"}],
                    "town": [{"id": "cat", "position": [3, 4], "sprite": "cat.png"}],
                }
            ),
            encoding="utf-8",
        )
        loaded = load_npcs_json(path)
        assert [n.id for n in loaded["farm"]] == ["cow"]
        assert [n.id for n in loaded["town"]] == ["cat"]

    def test_bundled_content_loads(self):
        loaded = load_npcs_json(settings.NPC_DATA_PATH)
        assert {n.id for npcs in loaded.values() for n in npcs} >= {"cow", "possum", "witch"}
