"""우정 포인트/단계 계산

포인트 0 ~ 900, 100점마다 1레벨.
단계: acquaintance 300+, good_friend 600+.
순수 함수 + 저장소가 들고 있는 기록 데이터 클래스.
"""

from dataclasses import dataclass, field
from typing import List

from src.core.world.models import FriendshipTier

POINTS_PER_LEVEL = 100
MIN_POINTS = 0
MAX_POINTS = 900
MAX_LEVEL = 9

ACQUAINTANCE_THRESHOLD = 300
GOOD_FRIEND_THRESHOLD = 600

DAILY_TALK_POINTS = 100  # 하루 첫 대화
GIFT_POINTS = 100
LIKED_GIFT_POINTS = 300  # 좋아하는 분류의 선물
QUEST_POINTS = 300  # 퀘스트 완료


def clamp_points(value: int) -> int:
    """0 ~ 900 클램프."""
    return max(MIN_POINTS, min(MAX_POINTS, value))


def points_to_level(points: int) -> int:
    """1 ~ 9"""
    return min(MAX_LEVEL, clamp_points(points) // POINTS_PER_LEVEL + 1)


def points_to_tier(points: int) -> FriendshipTier:
    if points >= GOOD_FRIEND_THRESHOLD:
        return FriendshipTier.GOOD_FRIEND
    if points >= ACQUAINTANCE_THRESHOLD:
        return FriendshipTier.ACQUAINTANCE
    return FriendshipTier.STRANGER


def gift_points(item_category: str, liked_categories) -> int:
    """선물 포인트. 좋아하는 분류면 300, 아니면 100."""
    if item_category and item_category in liked_categories:
        return LIKED_GIFT_POINTS
    return GIFT_POINTS


@dataclass
class FriendshipRecord:
    """NPC 1명과의 우정 기록 (저장소 소유)"""

    npc_id: str
    points: int = 0
    last_talked_day: int = -1  # -1 = 대화한 적 없음
    is_special_friend: bool = False
    rewards_received: List[str] = field(default_factory=list)

    @property
    def level(self) -> int:
        return points_to_level(self.points)

    @property
    def tier(self) -> FriendshipTier:
        return points_to_tier(self.points)

    def add_points(self, amount: int) -> int:
        """포인트 가감 후 실제 변화량 반환"""
        before = self.points
        self.points = clamp_points(self.points + amount)
        return self.points - before

    def talked_on(self, day: int) -> bool:
        return self.last_talked_day == day
