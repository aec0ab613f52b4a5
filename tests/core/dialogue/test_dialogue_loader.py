"""대화 데이터 로더 테스트"""

import json

import pytest

from src.core.dialogue.loader import (
    DialogueSchemaError,
    load_dialogue_json,
    parse_actions,
    parse_conditions,
    parse_dialogue,
    parse_node,
)
from src.core.dialogue.models import ActionKind, GlobalEventRequirement, ResponseAction
from src.core.world.models import FriendshipTier, Season, TimeOfDay, Weather


class TestParseConditions:
    def test_all_gate_kinds(self):
        cond = parse_conditions(
            {
                "requiredQuest": "cobwebs",
                "requiredQuestStage": 2,
                "maxQuestStage": 3,
                "requiredFriendshipTier": "acquaintance",
                "requiredSpecialFriend": True,
                "hiddenIfHasEasel": True,
                "requiredGlobalEventCount": {"type": "lantern", "min": 4},
                "requiredRecipeMastered": "pie",
            }
        )
        assert cond.required_quest == "cobwebs"
        assert cond.required_quest_stage == 2
        assert cond.max_quest_stage == 3
        assert cond.required_friendship_tier == FriendshipTier.ACQUAINTANCE
        assert cond.required_special_friend is True
        assert cond.hidden_if_has_easel is True
        assert cond.required_global_event_count == GlobalEventRequirement("lantern", 4)
        assert cond.required_recipe_mastered == "pie"

    def test_cooking_domain_gates(self):
        cond = parse_conditions(
            {
                "requiredDomainStarted": "baking",
                "requiredDomainMastered": "savoury",
                "hiddenIfDomainStarted": "dessert",
                "hiddenIfDomainMastered": "baking",
                "hiddenIfAnyDomainStarted": True,
            }
        )
        assert cond.required_domain_started == "baking"
        assert cond.required_domain_mastered == "savoury"
        assert cond.hidden_if_domain_started == "dessert"
        assert cond.hidden_if_domain_mastered == "baking"
        assert cond.hidden_if_any_domain_started is True

    def test_empty_is_unconstrained(self):
        assert parse_conditions({"text": "hi", "unknownKey": 1}).is_unconstrained()

    def test_bad_tier(self):
        with pytest.raises(DialogueSchemaError):
            parse_conditions({"requiredFriendshipTier": "best_friend"})

    def test_stage_must_be_int(self):
        with pytest.raises(DialogueSchemaError):
            parse_conditions({"requiredQuest": "q", "requiredQuestStage": "2"})


class TestParseActions:
    def test_order_and_kinds(self):
        actions = parse_actions(
            {
                "grantsEasel": True,
                "givesItems": [{"itemId": "seed", "quantity": 3}],
                "startsQuest": "chores",
                "setsQuestStage": {"questId": "cobwebs", "stage": 4},
            }
        )
        assert [a.kind for a in actions] == [
            ActionKind.START_QUEST,
            ActionKind.SET_QUEST_STAGE,
            ActionKind.GIVE_ITEM,
            ActionKind.GRANT_UNLOCK,
        ]
        assert actions[2] == ResponseAction.give_item("seed", 3)
        assert actions[3].unlock == "easel"

    def test_zero_quantity_rejected(self):
        with pytest.raises(DialogueSchemaError):
            parse_actions({"givesItems": [{"itemId": "seed", "quantity": 0}]})

    def test_negative_stage_rejected(self):
        """음수 단계는 적용 시점이 아니라 로드 시점에 거부"""
        with pytest.raises(DialogueSchemaError, match="setsQuestStage"):
            parse_actions(
                {
                    "startsQuest": "a",
                    "setsQuestStage": {"questId": "b", "stage": -1},
                    "grantsUnlock": "x",
                },
                "witch.quest_offer",
            )

    def test_stage_zero_allowed(self):
        actions = parse_actions({"setsQuestStage": {"questId": "b", "stage": 0}})
        assert actions == (ResponseAction.set_quest_stage("b", 0),)

    def test_missing_quest_id(self):
        with pytest.raises(DialogueSchemaError):
            parse_actions({"setsQuestStage": {"stage": 2}})


class TestParseNode:
    def test_text_maps_keyed_by_enum(self):
        node = parse_node(
            {
                "id": "greeting",
                "text": "Hi",
                "seasonalText": {"autumn": "Leaves"},
                "timeOfDayText": {"night": "Late"},
                "weatherText": {"cherry_blossoms": "Petals"},
                "transformationText": {"fairy": "Tiny!"},
                "expression": "smile",
                "responses": [{"text": "Bye"}, {"text": "More", "nextId": "more"}],
            }
        )
        assert node.seasonal_text == {Season.AUTUMN: "Leaves"}
        assert node.time_of_day_text == {TimeOfDay.NIGHT: "Late"}
        assert node.weather_text == {Weather.CHERRY_BLOSSOMS: "Petals"}
        assert node.transformation_text == {"fairy": "Tiny!"}
        assert node.expression == "smile"
        assert node.responses[0].next_id is None
        assert node.response_targets() == ("more",)

    def test_unknown_season_key(self):
        with pytest.raises(DialogueSchemaError):
            parse_node({"id": "greeting", "text": "Hi", "seasonalText": {"monsoon": "?"}})

    def test_missing_id_or_text(self):
        with pytest.raises(DialogueSchemaError):
            parse_node({"text": "Hi"})
        with pytest.raises(DialogueSchemaError):
            parse_node({"id": "greeting"})

    def test_declaration_order_kept(self):
        nodes = parse_dialogue(
            [{"id": "greeting", "text": "a"}, {"id": "greeting", "text": "b"}]
        )
        assert [n.text for n in nodes] == ["a", "b"]


class TestLoadDialogueJson:
    def test_load_file(self, tmp_path):
        path = tmp_path / "dialogue.json"
        path.write_text(
            json.dumps({"cow": [{"id": "greeting", "text": "Moo."}]}), encoding="utf-8"
        )
        loaded = load_dialogue_json(path)
        assert list(loaded) == ["cow"]
        assert loaded["cow"][0].text == "Moo."

    def test_error_names_npc(self, tmp_path):
        path = tmp_path / "dialogue.json"
        path.write_text(json.dumps({"cow": [{"id": "greeting"}]}), encoding="utf-8")
        with pytest.raises(DialogueSchemaError, match="cow"):
            load_dialogue_json(path)
