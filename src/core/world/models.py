"""월드 컨텍스트 도메인 모델

대화/상호작용 판정 1회마다 새로 조립되는 읽기 전용 스냅샷.
DB 무관 순수 데이터 클래스.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Mapping, Optional


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"


class TimeOfDay(str, Enum):
    DAY = "day"
    NIGHT = "night"


class Weather(str, Enum):
    CLEAR = "clear"
    RAIN = "rain"
    SNOW = "snow"
    FOG = "fog"
    MIST = "mist"
    STORM = "storm"
    CHERRY_BLOSSOMS = "cherry_blossoms"


class FriendshipTier(str, Enum):
    """우정 단계 (stranger < acquaintance < good_friend)"""

    STRANGER = "stranger"
    ACQUAINTANCE = "acquaintance"
    GOOD_FRIEND = "good_friend"


# 요리 분야 전체. 모두 숙달하면 "분야 진행 중" 상태가 끝난다.
COOKING_DOMAINS = ("savoury", "dessert", "baking")


FRIENDSHIP_TIER_ORDER = (
    FriendshipTier.STRANGER,
    FriendshipTier.ACQUAINTANCE,
    FriendshipTier.GOOD_FRIEND,
)


def tier_rank(tier: FriendshipTier) -> int:
    return FRIENDSHIP_TIER_ORDER.index(FriendshipTier(tier))


def tier_at_least(current: FriendshipTier, required: FriendshipTier) -> bool:
    return tier_rank(current) >= tier_rank(required)


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Position:
    """월드 좌표 (타일 단위, 소수 허용)"""

    x: float
    y: float

    def distance_to(self, other: "Position") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def tile(self) -> "Position":
        """소수점 이하를 버린 타일 좌표"""
        return Position(math.floor(self.x), math.floor(self.y))


@dataclass(frozen=True)
class WorldContext:
    """판정용 월드 스냅샷

    퀘스트는 시작되면 단계 1 이상을 가진다 (0 = 시작 전).
    완료된 퀘스트도 마지막 단계를 유지한다.
    """

    season: Season = Season.SPRING
    time_of_day: TimeOfDay = TimeOfDay.DAY
    weather: Weather = Weather.CLEAR

    transformation: Optional[str] = None
    potion_effects: FrozenSet[str] = frozenset()

    friendship_tiers: Mapping[str, FriendshipTier] = field(default_factory=dict)
    special_friends: FrozenSet[str] = frozenset()

    quest_stages: Mapping[str, int] = field(default_factory=dict)
    completed_quests: FrozenSet[str] = frozenset()

    # 공유 월드 이벤트: 유형 → 개수
    global_events: Mapping[str, int] = field(default_factory=dict)

    # 일회성 해금 플래그 (예: "easel")
    unlocks: FrozenSet[str] = frozenset()
    unlocked_recipes: FrozenSet[str] = frozenset()
    mastered_recipes: FrozenSet[str] = frozenset()
    # 요리 분야 (예: "baking"): 시작 / 숙달
    started_domains: FrozenSet[str] = frozenset()
    mastered_domains: FrozenSet[str] = frozenset()

    # ── 조회 헬퍼 ──

    def friendship_tier(self, npc_id: str) -> FriendshipTier:
        return self.friendship_tiers.get(npc_id, FriendshipTier.STRANGER)

    def is_special_friend(self, npc_id: str) -> bool:
        return npc_id in self.special_friends

    def quest_stage(self, quest_id: str) -> int:
        return self.quest_stages.get(quest_id, 0)

    def is_quest_started(self, quest_id: str) -> bool:
        return self.quest_stage(quest_id) >= 1 or quest_id in self.completed_quests

    def is_quest_completed(self, quest_id: str) -> bool:
        return quest_id in self.completed_quests

    def has_potion_effect(self, effect: str) -> bool:
        return effect in self.potion_effects

    def global_event_count(self, event_type: str) -> int:
        return self.global_events.get(event_type, 0)

    @property
    def all_domains_mastered(self) -> bool:
        return set(COOKING_DOMAINS) <= self.mastered_domains

    @property
    def has_easel(self) -> bool:
        return "easel" in self.unlocks

    def with_changes(self, **changes) -> "WorldContext":
        """일부 필드만 바꾼 사본"""
        return replace(self, **changes)
