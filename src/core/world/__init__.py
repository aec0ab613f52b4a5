"""월드 컨텍스트 Core 패키지"""

from src.core.world.models import (
    COOKING_DOMAINS,
    FRIENDSHIP_TIER_ORDER,
    Direction,
    FriendshipTier,
    Position,
    Season,
    TimeOfDay,
    Weather,
    WorldContext,
    tier_at_least,
    tier_rank,
)

__all__ = [
    "COOKING_DOMAINS",
    "FRIENDSHIP_TIER_ORDER",
    "Direction",
    "FriendshipTier",
    "Position",
    "Season",
    "TimeOfDay",
    "Weather",
    "WorldContext",
    "tier_at_least",
    "tier_rank",
]
