"""NPC Core 도메인 모델

DB 무관 순수 데이터 클래스.
우정/퀘스트 같은 변하는 데이터는 NPC 객체가 아니라
외부 상태 저장소(GameStateStore)에 NPC id로 보관된다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Tuple

from src.core.dialogue.models import DialogueNode
from src.core.dialogue.resolver import DialogueTable
from src.core.npc.states import AnimatedNPCStates
from src.core.world.models import Direction, FriendshipTier, Position


class NPCBehavior(str, Enum):
    """이동 방식"""

    STATIC = "static"
    WANDER = "wander"
    PATROL = "patrol"


@dataclass(frozen=True)
class TierReward:
    """우정 단계 도달 시 NPC가 주는 아이템"""

    tier: FriendshipTier
    item_id: str
    quantity: int = 1


@dataclass(frozen=True)
class FriendshipConfig:
    """우정 시스템 설정"""

    can_befriend: bool = True
    starting_points: int = 0  # 0 = 낯선 사람, 900 = 가족
    liked_categories: Tuple[str, ...] = ()
    crisis_id: Optional[str] = None  # 특별한 친구 이벤트
    tier_rewards: Tuple[TierReward, ...] = ()

    def rewards_for(self, tier: FriendshipTier) -> Tuple[TierReward, ...]:
        return tuple(r for r in self.tier_rewards if r.tier == tier)


@dataclass(frozen=True)
class DailyResourceConfig:
    """하루 단위 수집 자원 (예: 소의 우유)"""

    item_id: str
    max_per_day: int
    collect_message: str = ""
    empty_message: str = ""


@dataclass(frozen=True)
class NPC:
    """맵 로드 시 팩토리가 한 번 만드는 NPC 값

    animated_states만 프레임마다 바뀌는 커서를 가진다 (NPC 1명 전용).
    """

    id: str
    name: str
    position: Position
    sprite: str
    direction: Direction = Direction.DOWN
    behavior: NPCBehavior = NPCBehavior.STATIC
    portrait_sprite: Optional[str] = None
    scale: float = 3.0
    interaction_radius: float = 1.5
    collision_radius: float = 0.0
    animated_states: Optional[AnimatedNPCStates] = field(default=None, compare=False)
    friendship_config: Optional[FriendshipConfig] = None
    daily_resource: Optional[DailyResourceConfig] = None
    dialogue: Tuple[DialogueNode, ...] = ()
    dialogue_expressions: Mapping[str, str] = field(default_factory=dict)

    dialogue_table: DialogueTable = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dialogue_table", DialogueTable(self.dialogue, owner=self.id))

    @property
    def can_befriend(self) -> bool:
        return self.friendship_config is not None and self.friendship_config.can_befriend

    @property
    def current_sprite(self) -> str:
        """렌더링용 스프라이트 (상태 기계가 없으면 기본 sprite)"""
        if self.animated_states is None:
            return self.sprite
        return self.animated_states.current_sprite(self.direction)

    def expression_sprite(self, expression: Optional[str]) -> Optional[str]:
        """대화 표정 스프라이트. 없으면 portrait."""
        if expression and expression in self.dialogue_expressions:
            return self.dialogue_expressions[expression]
        return self.portrait_sprite

    def distance_to(self, position: Position) -> float:
        return self.position.distance_to(position)
