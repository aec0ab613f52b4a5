"""대화 데이터 로더 - 콘텐츠 작성용 camelCase dict/JSON → DialogueNode

콘텐츠 스키마 예:
    {
      "id": "greeting",
      "text": "Hello.",
      "seasonalText": {"autumn": "Leaves are falling."},
      "requiredFriendshipTier": "good_friend",
      "responses": [
        {"text": "Any work?", "nextId": "work", "startsQuest": "chores",
         "givesItems": [{"itemId": "seed", "quantity": 3}]}
      ]
    }

잘못된 항목은 DialogueSchemaError. 모르는 키는 무시한다.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple, Type, TypeVar

from src.core.dialogue.models import (
    DialogueConditions,
    DialogueNode,
    DialogueResponse,
    GlobalEventRequirement,
    ResponseAction,
)
from src.core.world.models import FriendshipTier, Season, TimeOfDay, Weather

logger = logging.getLogger(__name__)

E = TypeVar("E", Season, TimeOfDay, Weather, FriendshipTier)


class DialogueSchemaError(ValueError):
    """대화 데이터 형식 오류"""


# camelCase 키 → DialogueConditions 필드 (문자열 값)
_STRING_GATES: Dict[str, str] = {
    "requiredQuest": "required_quest",
    "hiddenIfQuestStarted": "hidden_if_quest_started",
    "hiddenIfQuestCompleted": "hidden_if_quest_completed",
    "requiredTransformation": "required_transformation",
    "hiddenIfTransformed": "hidden_if_transformed",
    "requiredPotionEffect": "required_potion_effect",
    "hiddenWithPotionEffect": "hidden_with_potion_effect",
    "requiredGlobalEvent": "required_global_event",
    "hiddenIfGlobalEvent": "hidden_if_global_event",
    "requiredUnlock": "required_unlock",
    "hiddenIfUnlocked": "hidden_if_unlocked",
    "requiredRecipeUnlocked": "required_recipe_unlocked",
    "requiredRecipeMastered": "required_recipe_mastered",
    "hiddenIfRecipeUnlocked": "hidden_if_recipe_unlocked",
    "hiddenIfRecipeMastered": "hidden_if_recipe_mastered",
    "requiredDomainStarted": "required_domain_started",
    "requiredDomainMastered": "required_domain_mastered",
    "hiddenIfDomainStarted": "hidden_if_domain_started",
    "hiddenIfDomainMastered": "hidden_if_domain_mastered",
}

_INT_GATES: Dict[str, str] = {
    "requiredQuestStage": "required_quest_stage",
    "maxQuestStage": "max_quest_stage",
}

_BOOL_GATES: Dict[str, str] = {
    "requiredSpecialFriend": "required_special_friend",
    "hiddenIfAnyTransformation": "hidden_if_any_transformation",
    "hiddenIfHasEasel": "hidden_if_has_easel",
    "hiddenIfAnyDomainStarted": "hidden_if_any_domain_started",
}

_TIER_GATES: Dict[str, str] = {
    "requiredFriendshipTier": "required_friendship_tier",
    "maxFriendshipTier": "max_friendship_tier",
}


def _enum_value(enum_cls: Type[E], value: Any, where: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        raise DialogueSchemaError(f"{where}: 알 수 없는 값 {value!r}") from None


def _require_str(raw: Mapping[str, Any], key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        raise DialogueSchemaError(f"{where}: '{key}' 누락 또는 문자열 아님")
    return value


def _int_value(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DialogueSchemaError(f"{where}: 정수 필요 ({value!r})")
    return value


def parse_conditions(raw: Mapping[str, Any], where: str = "") -> DialogueConditions:
    kwargs: Dict[str, Any] = {}
    for key, field_name in _STRING_GATES.items():
        if raw.get(key):
            kwargs[field_name] = str(raw[key])
    for key, field_name in _INT_GATES.items():
        if raw.get(key) is not None:
            kwargs[field_name] = _int_value(raw[key], f"{where}.{key}")
    for key, field_name in _BOOL_GATES.items():
        if key in raw:
            kwargs[field_name] = bool(raw[key])
    for key, field_name in _TIER_GATES.items():
        if raw.get(key) is not None:
            kwargs[field_name] = _enum_value(FriendshipTier, raw[key], f"{where}.{key}")

    count = raw.get("requiredGlobalEventCount")
    if count is not None:
        if not isinstance(count, Mapping) or "type" not in count:
            raise DialogueSchemaError(f"{where}.requiredGlobalEventCount: type 누락")
        kwargs["required_global_event_count"] = GlobalEventRequirement(
            event_type=str(count["type"]),
            min_count=_int_value(count.get("min", 1), f"{where}.requiredGlobalEventCount"),
        )
    return DialogueConditions(**kwargs)


def parse_actions(raw: Mapping[str, Any], where: str = "") -> Tuple[ResponseAction, ...]:
    """응답의 부수 효과 필드 → ResponseAction 목록 (퀘스트 → 아이템 → 해금)"""
    actions: List[ResponseAction] = []
    if raw.get("startsQuest"):
        actions.append(ResponseAction.start_quest(str(raw["startsQuest"])))
    if raw.get("advancesQuest"):
        actions.append(ResponseAction.advance_quest(str(raw["advancesQuest"])))
    if raw.get("completesQuest"):
        actions.append(ResponseAction.complete_quest(str(raw["completesQuest"])))
    stage_set = raw.get("setsQuestStage")
    if stage_set is not None:
        if not isinstance(stage_set, Mapping) or "questId" not in stage_set:
            raise DialogueSchemaError(f"{where}.setsQuestStage: questId 누락")
        stage = _int_value(stage_set.get("stage"), f"{where}.setsQuestStage.stage")
        if stage < 0:
            raise DialogueSchemaError(f"{where}.setsQuestStage: stage는 0 이상")
        actions.append(ResponseAction.set_quest_stage(str(stage_set["questId"]), stage))
    for i, gift in enumerate(raw.get("givesItems") or ()):
        if not isinstance(gift, Mapping) or "itemId" not in gift:
            raise DialogueSchemaError(f"{where}.givesItems[{i}]: itemId 누락")
        quantity = _int_value(gift.get("quantity", 1), f"{where}.givesItems[{i}].quantity")
        if quantity < 1:
            raise DialogueSchemaError(f"{where}.givesItems[{i}]: quantity는 1 이상")
        actions.append(ResponseAction.give_item(str(gift["itemId"]), quantity))
    if raw.get("grantsEasel"):
        actions.append(ResponseAction.grant_unlock("easel"))
    if raw.get("grantsUnlock"):
        actions.append(ResponseAction.grant_unlock(str(raw["grantsUnlock"])))
    return tuple(actions)


def parse_response(raw: Mapping[str, Any], where: str = "response") -> DialogueResponse:
    if not isinstance(raw, Mapping):
        raise DialogueSchemaError(f"{where}: 객체가 아님")
    next_id = raw.get("nextId")
    return DialogueResponse(
        text=_require_str(raw, "text", where),
        next_id=str(next_id) if next_id else None,
        conditions=parse_conditions(raw, where),
        actions=parse_actions(raw, where),
    )


def _text_map(
    raw: Mapping[str, Any], key: str, convert: Callable[[Any, str], Any], where: str
) -> Dict[Any, str]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise DialogueSchemaError(f"{where}.{key}: 객체가 아님")
    return {convert(k, f"{where}.{key}"): str(v) for k, v in value.items()}


def parse_node(raw: Mapping[str, Any], where: str = "node") -> DialogueNode:
    if not isinstance(raw, Mapping):
        raise DialogueSchemaError(f"{where}: 객체가 아님")
    node_id = _require_str(raw, "id", where)
    where = f"{where}({node_id})"
    if not isinstance(raw.get("text"), str):
        raise DialogueSchemaError(f"{where}: 'text' 누락")

    return DialogueNode(
        id=node_id,
        text=raw["text"],
        seasonal_text=_text_map(
            raw, "seasonalText", lambda k, w: _enum_value(Season, k, w), where
        ),
        time_of_day_text=_text_map(
            raw, "timeOfDayText", lambda k, w: _enum_value(TimeOfDay, k, w), where
        ),
        weather_text=_text_map(
            raw, "weatherText", lambda k, w: _enum_value(Weather, k, w), where
        ),
        transformation_text=_text_map(raw, "transformationText", lambda k, w: str(k), where),
        potion_effect_text=_text_map(raw, "potionEffectText", lambda k, w: str(k), where),
        responses=tuple(
            parse_response(r, f"{where}.responses[{i}]")
            for i, r in enumerate(raw.get("responses") or ())
        ),
        conditions=parse_conditions(raw, where),
        expression=raw.get("expression"),
    )


def parse_dialogue(raw_nodes: Iterable[Mapping[str, Any]]) -> Tuple[DialogueNode, ...]:
    """노드 배열 → DialogueNode 튜플 (선언 순서 유지)"""
    return tuple(parse_node(raw, f"dialogue[{i}]") for i, raw in enumerate(raw_nodes))


def load_dialogue_json(path: str | Path) -> Dict[str, Tuple[DialogueNode, ...]]:
    """{npc_id: [노드...]} 형태 JSON 파일 로드"""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw: Dict[str, list] = json.load(f)
    if not isinstance(raw, dict):
        raise DialogueSchemaError(f"{path}: 최상위는 npc_id → 노드 배열 객체여야 함")

    result: Dict[str, Tuple[DialogueNode, ...]] = {}
    for npc_id, nodes in raw.items():
        try:
            result[npc_id] = parse_dialogue(nodes)
        except DialogueSchemaError as e:
            raise DialogueSchemaError(f"{path} [{npc_id}] {e}") from e
    logger.info("Loaded dialogue for %d NPCs from %s", len(result), path)
    return result
