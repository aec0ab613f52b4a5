"""상호작용 도메인 모델

Interaction은 인자 없는 실행 함수가 묶인 완성된 행동이다.
호출자는 execute()가 무엇을 바꾸는지 모른다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, Optional

from src.core.world.models import Position


class InteractionType(str, Enum):
    """상호작용 유형"""

    NPC = "npc"  # 대화
    GIVE_GIFT = "give_gift"
    COLLECT_RESOURCE = "collect_resource"
    PICKUP_ITEM = "pickup_item"
    EAT_ITEM = "eat_item"
    TASTE_ITEM = "taste_item"
    FARM_ACTION = "farm_action"
    FORAGE = "forage"
    TRANSITION = "transition"
    COLLECT_WATER = "collect_water"
    REFILL_WATER_CAN = "refill_water_can"
    CLEAN_COBWEB = "clean_cobweb"


# 근접 메뉴에 남기는 NPC 관련 유형
NPC_INTERACTION_TYPES: FrozenSet[InteractionType] = frozenset(
    {InteractionType.NPC, InteractionType.GIVE_GIFT, InteractionType.COLLECT_RESOURCE}
)


@dataclass(frozen=True)
class Interaction:
    """집계기 출력 1건"""

    type: InteractionType
    label: str
    execute: Callable[[], None] = field(compare=False, repr=False)
    icon: Optional[str] = None
    color: Optional[str] = None


# ── 도메인 결과 (콜백에 전달) ──


@dataclass(frozen=True)
class TransitionResult:
    success: bool
    map_id: Optional[str] = None
    map_name: Optional[str] = None
    spawn_position: Optional[Position] = None
    has_door: bool = False


@dataclass(frozen=True)
class FarmActionResult:
    handled: bool
    action: Optional[str] = None  # till / plant / water / harvest / clear
    message: str = ""
    message_type: str = "info"


@dataclass(frozen=True)
class ForageResult:
    found: bool
    item_id: Optional[str] = None
    item_name: Optional[str] = None
    message: str = ""


@dataclass(frozen=True)
class PlacedItemAction:
    action: str  # pickup / eat / taste
    placed_item_id: str
    item_id: str
    image_url: Optional[str] = None


@dataclass(frozen=True)
class ResourceResult:
    """물 긷기, 일일 자원 수집, 거미줄 청소 공통 결과"""

    success: bool
    message: str = ""


# ── 호스트 콜백 ──


@dataclass
class InteractionCallbacks:
    """호스트 게임 루프가 넘기는 콜백 묶음

    비어 있는 콜백에 해당하는 상호작용은 제공되지 않는다.
    실행된 상호작용 1건은 콜백을 최대 1개만 부른다.
    """

    on_npc: Optional[Callable[[str], None]] = None
    on_give_gift: Optional[Callable[[str], None]] = None
    on_collect_resource: Optional[Callable[[ResourceResult], None]] = None
    on_placed_item_action: Optional[Callable[[PlacedItemAction], None]] = None
    on_farm_action: Optional[Callable[[FarmActionResult], None]] = None
    on_forage: Optional[Callable[[ForageResult], None]] = None
    on_transition: Optional[Callable[[TransitionResult], None]] = None
    on_collect_water: Optional[Callable[[ResourceResult], None]] = None
    on_refill_water_can: Optional[Callable[[ResourceResult], None]] = None
    on_clean_cobweb: Optional[Callable[[ResourceResult], None]] = None


DEFAULT_TOOL = "hand"


@dataclass(frozen=True)
class InteractionRequest:
    """집계 요청 (월드 위치 + 맵 + 도구 + 콜백)"""

    position: Position
    map_id: str
    tool: str = DEFAULT_TOOL
    callbacks: InteractionCallbacks = field(default_factory=InteractionCallbacks, compare=False)

    @property
    def tile(self) -> Position:
        return self.position.tile()


# ── 프레젠터 → UI ──


@dataclass(frozen=True)
class ScreenPoint:
    x: float
    y: float


@dataclass(frozen=True)
class RadialMenuOption:
    """Interaction의 UI 투영"""

    id: str
    label: str
    on_select: Callable[[], None] = field(compare=False, repr=False)
    icon: Optional[str] = None
    color: Optional[str] = None
