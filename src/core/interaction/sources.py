"""도메인별 상호작용 공급원

집계기는 등록된 공급원을 등록 순서대로 돌며 상호작용을 모은다.
각 공급원은 코어 밖 협력자(농장, 채집표, 맵 전환표 등)를 주입받아
전제 조건을 확인하고, 협력자 호출과 호스트 콜백을 묶은 Interaction을 만든다.

규칙:
- 공급원은 다른 공급원을 알지 않는다
- 콜백이 비어 있으면 해당 상호작용을 내지 않는다
- 실행 1회에 콜백 1개만 호출
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from src.core.interaction.models import (
    FarmActionResult,
    ForageResult,
    Interaction,
    InteractionRequest,
    InteractionType,
    PlacedItemAction,
    ResourceResult,
    TransitionResult,
)
from src.core.logging import get_logger
from src.core.npc.models import NPC, DailyResourceConfig
from src.core.world.models import Position, WorldContext

logger = get_logger(__name__)

TOOL_HAND = "hand"
TOOL_HOE = "hoe"
TOOL_SEEDS = "seeds"
TOOL_WATERING_CAN = "watering_can"
TOOL_FEATHER_DUSTER = "feather_duster"

NPC_INTERACT_EVENT = "interact"


class InteractionSource(ABC):
    """상호작용 공급원 기반 인터페이스"""

    @property
    @abstractmethod
    def name(self) -> str:
        """공급원 고유 이름 (예: 'npc', 'farm')"""
        ...

    @abstractmethod
    def collect(self, request: InteractionRequest) -> List[Interaction]:
        """요청 위치에서 전제 조건을 만족하는 상호작용 목록"""
        ...


# ── NPC ──


class NPCLocator(ABC):
    """NPC 위치 조회 협력자 (NPCRegistry가 구현)"""

    @abstractmethod
    def npc_at(self, map_id: str, position: Position) -> Optional[NPC]:
        """position이 상호작용 반경 안에 드는 가장 가까운 NPC"""
        ...

    @abstractmethod
    def trigger_npc_event(self, npc_id: str, event: str) -> bool:
        ...


class DailyResourceLedger(ABC):
    """NPC 일일 자원 수집 기록 (GameStateStore가 구현)"""

    @abstractmethod
    def collect_daily_resource(self, npc_id: str, config: DailyResourceConfig) -> ResourceResult:
        ...


class NPCInteractionSource(InteractionSource):
    """대화 / 선물 / 일일 자원"""

    def __init__(
        self, locator: NPCLocator, ledger: Optional[DailyResourceLedger] = None
    ) -> None:
        self._locator = locator
        self._ledger = ledger

    @property
    def name(self) -> str:
        return "npc"

    def collect(self, request: InteractionRequest) -> List[Interaction]:
        npc = self._locator.npc_at(request.map_id, request.position)
        if npc is None:
            return []
        cb = request.callbacks
        result: List[Interaction] = []

        machine = npc.animated_states
        reacts = machine is not None and machine.accepts_event(NPC_INTERACT_EVENT)
        if cb.on_npc and (npc.dialogue or reacts):
            result.append(
                Interaction(
                    type=InteractionType.NPC,
                    label=f"Talk to {npc.name}",
                    icon="talk",
                    color="#4A90D9",
                    execute=self._talk(npc, cb.on_npc),
                )
            )
        if cb.on_give_gift and npc.can_befriend:
            on_give_gift = cb.on_give_gift
            result.append(
                Interaction(
                    type=InteractionType.GIVE_GIFT,
                    label="Give Gift",
                    icon="gift",
                    color="#E91E63",
                    execute=lambda: on_give_gift(npc.id),
                )
            )
        if cb.on_collect_resource and npc.daily_resource and self._ledger is not None:
            result.append(
                Interaction(
                    type=InteractionType.COLLECT_RESOURCE,
                    label=f"Collect {npc.daily_resource.item_id.replace('_', ' ')}",
                    icon="collect",
                    color="#8BC34A",
                    execute=self._collect(npc, cb.on_collect_resource),
                )
            )
        return result

    def _talk(self, npc: NPC, on_npc: Callable[[str], None]) -> Callable[[], None]:
        def execute() -> None:
            self._locator.trigger_npc_event(npc.id, NPC_INTERACT_EVENT)
            if npc.dialogue:
                on_npc(npc.id)

        return execute

    def _collect(
        self, npc: NPC, on_collect: Callable[[ResourceResult], None]
    ) -> Callable[[], None]:
        ledger = self._ledger
        config = npc.daily_resource

        def execute() -> None:
            on_collect(ledger.collect_daily_resource(npc.id, config))

        return execute


# ── 놓인 아이템 ──


@dataclass(frozen=True)
class PlacedItem:
    id: str
    item_id: str
    position: Position
    image_url: Optional[str] = None
    edible: bool = False


class PlacedItemProvider(ABC):
    @abstractmethod
    def placed_items_at(self, map_id: str, position: Position) -> Sequence[PlacedItem]:
        ...


class PlacedItemSource(InteractionSource):
    """줍기 / 먹기 / 맛보기"""

    def __init__(self, provider: PlacedItemProvider) -> None:
        self._provider = provider

    @property
    def name(self) -> str:
        return "placed_item"

    def collect(self, request: InteractionRequest) -> List[Interaction]:
        on_action = request.callbacks.on_placed_item_action
        if on_action is None:
            return []
        result: List[Interaction] = []
        for item in self._provider.placed_items_at(request.map_id, request.position):
            result.append(self._make(item, "pickup", InteractionType.PICKUP_ITEM, "Pick up", on_action))
            if item.edible:
                result.append(self._make(item, "eat", InteractionType.EAT_ITEM, "Eat", on_action))
                result.append(self._make(item, "taste", InteractionType.TASTE_ITEM, "Taste", on_action))
        return result

    @staticmethod
    def _make(
        item: PlacedItem,
        action: str,
        itype: InteractionType,
        label: str,
        on_action: Callable[[PlacedItemAction], None],
    ) -> Interaction:
        payload = PlacedItemAction(
            action=action,
            placed_item_id=item.id,
            item_id=item.item_id,
            image_url=item.image_url,
        )
        return Interaction(
            type=itype,
            label=label,
            icon=action,
            color="#FF9800",
            execute=lambda: on_action(payload),
        )


# ── 농장 ──


class PlotState(str, Enum):
    FALLOW = "fallow"
    TILLED = "tilled"
    PLANTED = "planted"
    WATERED = "watered"
    WILTING = "wilting"
    READY = "ready"
    DEAD = "dead"


class FarmAction(str, Enum):
    TILL = "till"
    PLANT = "plant"
    WATER = "water"
    HARVEST = "harvest"
    CLEAR = "clear"


_WATERABLE = frozenset({PlotState.PLANTED, PlotState.WATERED, PlotState.WILTING, PlotState.READY})

_FARM_LABELS = {
    FarmAction.TILL: "Till Soil",
    FarmAction.PLANT: "Plant Seeds",
    FarmAction.WATER: "Water",
    FarmAction.HARVEST: "Harvest",
    FarmAction.CLEAR: "Clear Dead Crop",
}


def farm_action_for(state: Optional[PlotState], tool: str) -> Optional[FarmAction]:
    """밭 상태 + 도구 → 가능한 농사 행동 (최대 1개)"""
    if state is None:
        return None
    if tool == TOOL_HOE and state == PlotState.FALLOW:
        return FarmAction.TILL
    if tool == TOOL_SEEDS and state == PlotState.TILLED:
        return FarmAction.PLANT
    if tool == TOOL_WATERING_CAN and state in _WATERABLE:
        return FarmAction.WATER
    if state == PlotState.READY:
        return FarmAction.HARVEST  # 도구 무관
    if tool == TOOL_HAND and state == PlotState.DEAD:
        return FarmAction.CLEAR
    return None


class FarmPlots(ABC):
    """농장 시뮬레이션 협력자"""

    @abstractmethod
    def plot_state(self, map_id: str, tile: Position) -> Optional[PlotState]:
        ...

    @abstractmethod
    def perform(self, map_id: str, tile: Position, action: FarmAction, tool: str) -> FarmActionResult:
        ...


class FarmSource(InteractionSource):
    def __init__(self, plots: FarmPlots) -> None:
        self._plots = plots

    @property
    def name(self) -> str:
        return "farm"

    def collect(self, request: InteractionRequest) -> List[Interaction]:
        on_farm = request.callbacks.on_farm_action
        if on_farm is None:
            return []
        tile = request.tile
        action = farm_action_for(self._plots.plot_state(request.map_id, tile), request.tool)
        if action is None:
            return []
        plots, map_id, tool = self._plots, request.map_id, request.tool
        return [
            Interaction(
                type=InteractionType.FARM_ACTION,
                label=_FARM_LABELS[action],
                icon=action.value,
                color="#795548",
                execute=lambda: on_farm(plots.perform(map_id, tile, action, tool)),
            )
        ]


# ── 맵 전환 ──


@dataclass(frozen=True)
class MapTransition:
    to_map_id: str
    to_position: Position
    label: str = ""
    required_quest: Optional[str] = None
    required_quest_stage: int = 1
    has_door: bool = False


class TransitionTable(ABC):
    @abstractmethod
    def transition_at(self, map_id: str, position: Position) -> Optional[MapTransition]:
        ...

    @abstractmethod
    def perform(self, map_id: str, transition: MapTransition) -> TransitionResult:
        ...


class TransitionSource(InteractionSource):
    """맵 전환 (퀘스트 게이트 포함)"""

    def __init__(
        self,
        table: TransitionTable,
        context_provider: Optional[Callable[[], WorldContext]] = None,
    ) -> None:
        self._table = table
        self._context_provider = context_provider

    @property
    def name(self) -> str:
        return "transition"

    def _gate_open(self, transition: MapTransition) -> bool:
        if not transition.required_quest:
            return True
        if self._context_provider is None:
            return False
        ctx = self._context_provider()
        return (
            ctx.is_quest_started(transition.required_quest)
            and ctx.quest_stage(transition.required_quest) >= transition.required_quest_stage
        )

    def collect(self, request: InteractionRequest) -> List[Interaction]:
        on_transition = request.callbacks.on_transition
        if on_transition is None:
            return []
        transition = self._table.transition_at(request.map_id, request.position)
        if transition is None or not self._gate_open(transition):
            return []
        table, map_id = self._table, request.map_id
        label = transition.label or f"Go to {transition.to_map_id.replace('_', ' ')}"
        return [
            Interaction(
                type=InteractionType.TRANSITION,
                label=label,
                icon="door" if transition.has_door else "exit",
                color="#9C27B0",
                execute=lambda: on_transition(table.perform(map_id, transition)),
            )
        ]


# ── 채집 ──


@dataclass(frozen=True)
class Forageable:
    item_id: str
    label: str = ""


class ForageTable(ABC):
    @abstractmethod
    def forageable_at(self, map_id: str, tile: Position) -> Optional[Forageable]:
        ...

    @abstractmethod
    def is_collected(self, map_id: str, tile: Position) -> bool:
        ...

    @abstractmethod
    def forage(self, map_id: str, tile: Position) -> ForageResult:
        ...


class ForageSource(InteractionSource):
    def __init__(self, table: ForageTable) -> None:
        self._table = table

    @property
    def name(self) -> str:
        return "forage"

    def collect(self, request: InteractionRequest) -> List[Interaction]:
        on_forage = request.callbacks.on_forage
        if on_forage is None:
            return []
        tile = request.tile
        found = self._table.forageable_at(request.map_id, tile)
        if found is None or self._table.is_collected(request.map_id, tile):
            return []
        table, map_id = self._table, request.map_id
        return [
            Interaction(
                type=InteractionType.FORAGE,
                label=found.label or "Forage",
                icon="forage",
                color="#4CAF50",
                execute=lambda: on_forage(table.forage(map_id, tile)),
            )
        ]


# ── 물 ──


class WaterSources(ABC):
    @abstractmethod
    def water_source_at(self, map_id: str, tile: Position) -> bool:
        ...

    @abstractmethod
    def collect_water(self, map_id: str, tile: Position) -> ResourceResult:
        ...

    @abstractmethod
    def refill_water_can(self, map_id: str, tile: Position) -> ResourceResult:
        ...


class WaterSource(InteractionSource):
    """물뿌리개 채우기 (물뿌리개 장착) / 물 긷기 (그 외)"""

    def __init__(self, sources: WaterSources) -> None:
        self._sources = sources

    @property
    def name(self) -> str:
        return "water"

    def collect(self, request: InteractionRequest) -> List[Interaction]:
        tile = request.tile
        if not self._sources.water_source_at(request.map_id, tile):
            return []
        cb, sources, map_id = request.callbacks, self._sources, request.map_id
        if request.tool == TOOL_WATERING_CAN:
            if cb.on_refill_water_can is None:
                return []
            on_refill = cb.on_refill_water_can
            return [
                Interaction(
                    type=InteractionType.REFILL_WATER_CAN,
                    label="Refill Watering Can",
                    icon="water",
                    color="#03A9F4",
                    execute=lambda: on_refill(sources.refill_water_can(map_id, tile)),
                )
            ]
        if cb.on_collect_water is None:
            return []
        on_collect = cb.on_collect_water
        return [
            Interaction(
                type=InteractionType.COLLECT_WATER,
                label="Collect Water",
                icon="water",
                color="#03A9F4",
                execute=lambda: on_collect(sources.collect_water(map_id, tile)),
            )
        ]


# ── 거미줄 퀘스트 오버레이 ──


class CobwebOverlay(ABC):
    @abstractmethod
    def can_clean(self, map_id: str, tool: str) -> bool:
        """퀘스트 진행 중 + 청소 구역 + 먼지떨이 장착"""
        ...

    @abstractmethod
    def cobweb_at(self, map_id: str, position: Position) -> Optional[int]:
        ...

    @abstractmethod
    def is_cleaned(self, index: int) -> bool:
        ...

    @abstractmethod
    def clean(self, index: int) -> ResourceResult:
        ...


class CobwebSource(InteractionSource):
    def __init__(self, overlay: CobwebOverlay) -> None:
        self._overlay = overlay

    @property
    def name(self) -> str:
        return "cobweb"

    def collect(self, request: InteractionRequest) -> List[Interaction]:
        on_clean = request.callbacks.on_clean_cobweb
        if on_clean is None or not self._overlay.can_clean(request.map_id, request.tool):
            return []
        index = self._overlay.cobweb_at(request.map_id, request.position)
        if index is None or self._overlay.is_cleaned(index):
            return []
        overlay = self._overlay
        return [
            Interaction(
                type=InteractionType.CLEAN_COBWEB,
                label="Clean Cobweb",
                icon="duster",
                color="#9E9E9E",
                execute=lambda: on_clean(overlay.clean(index)),
            )
        ]
