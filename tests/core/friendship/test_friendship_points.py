"""우정 포인트/단계 계산 테스트"""

import pytest

from src.core.friendship.models import (
    GIFT_POINTS,
    LIKED_GIFT_POINTS,
    MAX_POINTS,
    FriendshipRecord,
    clamp_points,
    gift_points,
    points_to_level,
    points_to_tier,
)
from src.core.world.models import FriendshipTier


class TestLevels:
    @pytest.mark.parametrize(
        "points,level", [(0, 1), (99, 1), (100, 2), (450, 5), (899, 9), (900, 9), (5000, 9)]
    )
    def test_points_to_level(self, points, level):
        assert points_to_level(points) == level

    def test_clamp(self):
        assert clamp_points(-10) == 0
        assert clamp_points(1200) == MAX_POINTS


class TestTiers:
    @pytest.mark.parametrize(
        "points,tier",
        [
            (0, FriendshipTier.STRANGER),
            (299, FriendshipTier.STRANGER),
            (300, FriendshipTier.ACQUAINTANCE),
            (599, FriendshipTier.ACQUAINTANCE),
            (600, FriendshipTier.GOOD_FRIEND),
        ],
    )
    def test_thresholds(self, points, tier):
        assert points_to_tier(points) == tier


class TestGiftPoints:
    def test_liked_category(self):
        assert gift_points("grain", ("grain", "fruit")) == LIKED_GIFT_POINTS

    def test_other_category(self):
        assert gift_points("fish", ("grain",)) == GIFT_POINTS
        assert gift_points("", ()) == GIFT_POINTS


class TestFriendshipRecord:
    def test_add_points_returns_actual_delta(self):
        record = FriendshipRecord(npc_id="cow", points=850)
        assert record.add_points(100) == 50
        assert record.points == MAX_POINTS
        assert record.add_points(-1000) == -MAX_POINTS

    def test_level_and_tier(self):
        record = FriendshipRecord(npc_id="cow", points=300)
        assert record.level == 4
        assert record.tier == FriendshipTier.ACQUAINTANCE

    def test_talked_on(self):
        record = FriendshipRecord(npc_id="cow")
        assert not record.talked_on(0)
        record.last_talked_day = 3
        assert record.talked_on(3)
