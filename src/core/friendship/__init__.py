"""우정 시스템 Core 패키지 - 공개 API"""

from src.core.friendship.models import (
    ACQUAINTANCE_THRESHOLD,
    DAILY_TALK_POINTS,
    GIFT_POINTS,
    GOOD_FRIEND_THRESHOLD,
    LIKED_GIFT_POINTS,
    MAX_POINTS,
    QUEST_POINTS,
    FriendshipRecord,
    clamp_points,
    gift_points,
    points_to_level,
    points_to_tier,
)

__all__ = [
    "ACQUAINTANCE_THRESHOLD",
    "DAILY_TALK_POINTS",
    "GIFT_POINTS",
    "GOOD_FRIEND_THRESHOLD",
    "LIKED_GIFT_POINTS",
    "MAX_POINTS",
    "QUEST_POINTS",
    "FriendshipRecord",
    "clamp_points",
    "gift_points",
    "points_to_level",
    "points_to_tier",
]
