"""대화 도메인 모델 (DB 무관)

하나의 NPC 대화는 DialogueNode 목록이다. id는 유일하지 않다:
같은 id를 가진 여러 노드가 서로 다른 적용 조건(DialogueConditions)을 갖고,
선언 순서가 우선순위가 된다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Tuple

from src.core.world.models import FriendshipTier, Season, TimeOfDay, Weather


@dataclass(frozen=True)
class GlobalEventRequirement:
    """공유 이벤트 최소 개수 조건"""

    event_type: str
    min_count: int = 1


@dataclass(frozen=True)
class DialogueConditions:
    """노드/응답 공통 적용 조건. 모든 필드는 선택이며, 비어 있으면 제약 없음."""

    # 퀘스트
    required_quest: Optional[str] = None
    required_quest_stage: Optional[int] = None  # None이면 1 이상 (= 시작됨)
    max_quest_stage: Optional[int] = None
    hidden_if_quest_started: Optional[str] = None
    hidden_if_quest_completed: Optional[str] = None

    # 우정
    required_friendship_tier: Optional[FriendshipTier] = None
    max_friendship_tier: Optional[FriendshipTier] = None
    required_special_friend: bool = False

    # 변신 / 물약
    required_transformation: Optional[str] = None
    hidden_if_transformed: Optional[str] = None
    hidden_if_any_transformation: bool = False
    required_potion_effect: Optional[str] = None
    hidden_with_potion_effect: Optional[str] = None

    # 공유 이벤트
    required_global_event: Optional[str] = None
    required_global_event_count: Optional[GlobalEventRequirement] = None
    hidden_if_global_event: Optional[str] = None

    # 해금 / 장식
    hidden_if_has_easel: bool = False
    required_unlock: Optional[str] = None
    hidden_if_unlocked: Optional[str] = None

    # 요리
    required_recipe_unlocked: Optional[str] = None
    required_recipe_mastered: Optional[str] = None
    hidden_if_recipe_unlocked: Optional[str] = None
    hidden_if_recipe_mastered: Optional[str] = None
    required_domain_started: Optional[str] = None
    required_domain_mastered: Optional[str] = None
    hidden_if_domain_started: Optional[str] = None
    hidden_if_domain_mastered: Optional[str] = None
    hidden_if_any_domain_started: bool = False

    def is_unconstrained(self) -> bool:
        return self == NO_CONDITIONS


NO_CONDITIONS = DialogueConditions()


class ActionKind(str, Enum):
    """응답 선택 시 부수 효과 유형"""

    START_QUEST = "start_quest"
    ADVANCE_QUEST = "advance_quest"
    COMPLETE_QUEST = "complete_quest"
    SET_QUEST_STAGE = "set_quest_stage"
    GIVE_ITEM = "give_item"
    GRANT_UNLOCK = "grant_unlock"


# 적용 순서: 퀘스트 → 아이템 → 해금
ACTION_PHASE = {
    ActionKind.START_QUEST: 0,
    ActionKind.ADVANCE_QUEST: 0,
    ActionKind.COMPLETE_QUEST: 0,
    ActionKind.SET_QUEST_STAGE: 0,
    ActionKind.GIVE_ITEM: 1,
    ActionKind.GRANT_UNLOCK: 2,
}


@dataclass(frozen=True)
class ResponseAction:
    """부수 효과 1건"""

    kind: ActionKind
    quest_id: Optional[str] = None
    stage: Optional[int] = None
    item_id: Optional[str] = None
    quantity: int = 1
    unlock: Optional[str] = None

    @classmethod
    def start_quest(cls, quest_id: str) -> "ResponseAction":
        return cls(ActionKind.START_QUEST, quest_id=quest_id)

    @classmethod
    def advance_quest(cls, quest_id: str) -> "ResponseAction":
        return cls(ActionKind.ADVANCE_QUEST, quest_id=quest_id)

    @classmethod
    def complete_quest(cls, quest_id: str) -> "ResponseAction":
        return cls(ActionKind.COMPLETE_QUEST, quest_id=quest_id)

    @classmethod
    def set_quest_stage(cls, quest_id: str, stage: int) -> "ResponseAction":
        return cls(ActionKind.SET_QUEST_STAGE, quest_id=quest_id, stage=stage)

    @classmethod
    def give_item(cls, item_id: str, quantity: int = 1) -> "ResponseAction":
        return cls(ActionKind.GIVE_ITEM, item_id=item_id, quantity=quantity)

    @classmethod
    def grant_unlock(cls, unlock: str) -> "ResponseAction":
        return cls(ActionKind.GRANT_UNLOCK, unlock=unlock)


@dataclass(frozen=True)
class DialogueResponse:
    """플레이어 응답 선택지. next_id가 없으면 선택 시 대화 종료."""

    text: str
    next_id: Optional[str] = None
    conditions: DialogueConditions = NO_CONDITIONS
    actions: Tuple[ResponseAction, ...] = ()

    def ordered_actions(self) -> Tuple[ResponseAction, ...]:
        """퀘스트 → 아이템 → 해금 순서로 정렬 (같은 단계는 선언 순서 유지)"""
        return tuple(sorted(self.actions, key=lambda a: ACTION_PHASE[a.kind]))


@dataclass(frozen=True)
class DialogueNode:
    """NPC 대사 1턴 + 응답 목록"""

    id: str
    text: str
    seasonal_text: Mapping[Season, str] = field(default_factory=dict)
    time_of_day_text: Mapping[TimeOfDay, str] = field(default_factory=dict)
    weather_text: Mapping[Weather, str] = field(default_factory=dict)
    transformation_text: Mapping[str, str] = field(default_factory=dict)
    potion_effect_text: Mapping[str, str] = field(default_factory=dict)
    responses: Tuple[DialogueResponse, ...] = ()
    conditions: DialogueConditions = NO_CONDITIONS
    expression: Optional[str] = None

    def response_targets(self) -> Tuple[str, ...]:
        return tuple(r.next_id for r in self.responses if r.next_id)
