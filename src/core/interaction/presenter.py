"""Interaction Presenter

집계 결과를 자동 실행할지 라디얼 메뉴로 보여줄지 결정하고,
메뉴의 호버/클릭 선택 프로토콜을 스케줄러 작업으로 구동한다.

상태: idle → menu_open → idle
- 클릭: UI 차단 중이면 무시 → 집계 → 0건 무시 → 사거리 밖 무시
        → 1건 즉시 실행 → 2건 이상 클릭 위치에 메뉴
- 근접: 가장 가까운 NPC 기준. 같은 NPC면 아무것도 안 함 (깜빡임 방지)
- 메뉴 닫기: 항상 idle로, NPC 근접 메뉴였으면 기준 NPC 기억도 지운다
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from src.config import settings
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.interaction.aggregator import InteractionAggregator
from src.core.interaction.models import (
    DEFAULT_TOOL,
    NPC_INTERACTION_TYPES,
    Interaction,
    InteractionCallbacks,
    InteractionRequest,
    RadialMenuOption,
    ScreenPoint,
)
from src.core.interaction.sources import NPCLocator
from src.core.logging import get_logger
from src.core.scheduler import Scheduler, TaskHandle
from src.core.world.models import Position

logger = get_logger(__name__)

ESCAPE_KEY = "Escape"


class PresenterState(str, Enum):
    IDLE = "idle"
    MENU_OPEN = "menu_open"


class MenuKind(str, Enum):
    CLICK = "click"
    NPC_PROXIMITY = "npc_proximity"


class ClickOutcome(str, Enum):
    BLOCKED = "blocked"
    NO_INTERACTIONS = "no_interactions"
    OUT_OF_RANGE = "out_of_range"
    EXECUTED = "executed"
    MENU_OPENED = "menu_opened"


class ProximityOutcome(str, Enum):
    BLOCKED = "blocked"
    NONE_NEARBY = "none_nearby"
    CLOSED = "closed"
    UNCHANGED = "unchanged"
    NO_NPC_INTERACTIONS = "no_npc_interactions"
    MENU_OPENED = "menu_opened"


@dataclass(frozen=True)
class UIBlockers:
    """클릭/근접 처리를 막는 UI 상태"""

    dialogue_active: bool = False
    cutscene_playing: bool = False
    modal_open: bool = False

    @property
    def blocking(self) -> bool:
        return self.dialogue_active or self.cutscene_playing or self.modal_open


NOT_BLOCKED = UIBlockers()


@dataclass(frozen=True)
class MenuView:
    """UI에 넘기는 메뉴 (옵션 + 화면 기준점)"""

    kind: MenuKind
    options: Tuple[RadialMenuOption, ...]
    anchor: ScreenPoint
    npc_id: Optional[str] = None


def project_to_screen(
    target: Position,
    player: Position,
    *,
    tile_size: Optional[int] = None,
    viewport_width: Optional[int] = None,
    viewport_height: Optional[int] = None,
    offset_y: Optional[int] = None,
) -> ScreenPoint:
    """월드 좌표 → 화면 좌표 (플레이어가 뷰포트 중앙)"""
    tile = settings.TILE_SIZE if tile_size is None else tile_size
    width = settings.VIEWPORT_WIDTH if viewport_width is None else viewport_width
    height = settings.VIEWPORT_HEIGHT if viewport_height is None else viewport_height
    lift = settings.NPC_MENU_OFFSET_Y if offset_y is None else offset_y
    return ScreenPoint(
        x=width / 2 + (target.x - player.x) * tile,
        y=height / 2 + (target.y - player.y) * tile - lift,
    )


class RadialMenuController:
    """라디얼 메뉴 옵션 선택 프로토콜

    호버 → hover_delay 후 선택 표시 → hover_confirm 후 on_select + 닫기.
    클릭 → 선택 표시 → click_confirm 후 on_select + 닫기.
    대기 중인 호버 타이머는 하나뿐이며 새 호버가 이전 것을 취소한다.
    닫힌 뒤에는 어떤 예약 작업도 효과가 없다.
    """

    def __init__(
        self,
        options: Sequence[RadialMenuOption],
        scheduler: Scheduler,
        on_close: Optional[Callable[[], None]] = None,
        *,
        hover_delay_ms: Optional[float] = None,
        hover_confirm_ms: Optional[float] = None,
        click_confirm_ms: Optional[float] = None,
    ) -> None:
        self.options: Tuple[RadialMenuOption, ...] = tuple(options)
        self._scheduler = scheduler
        self._on_close = on_close
        self.hover_delay_ms = (
            settings.HOVER_SELECT_DELAY_MS if hover_delay_ms is None else hover_delay_ms
        )
        self.hover_confirm_ms = (
            settings.HOVER_CONFIRM_DELAY_MS if hover_confirm_ms is None else hover_confirm_ms
        )
        self.click_confirm_ms = (
            settings.CLICK_CONFIRM_DELAY_MS if click_confirm_ms is None else click_confirm_ms
        )

        self.hovered_id: Optional[str] = None
        self.selected_id: Optional[str] = None
        self.closed = False
        self._hover_task: Optional[TaskHandle] = None

    def _option(self, option_id: str) -> Optional[RadialMenuOption]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    @property
    def hover_pending(self) -> bool:
        return self._hover_task is not None and self._hover_task.active

    def _cancel_hover(self) -> None:
        if self._hover_task is not None:
            self._hover_task.cancel()
            self._hover_task = None

    def hover_start(self, option_id: str) -> bool:
        if self.closed or self.selected_id is not None or self._option(option_id) is None:
            return False
        self._cancel_hover()
        self.hovered_id = option_id
        self._hover_task = self._scheduler.schedule(
            self.hover_delay_ms,
            lambda: self._hover_elapsed(option_id),
            owner=self,
            label=f"hover:{option_id}",
        )
        return True

    def hover_end(self, option_id: str) -> None:
        """포인터가 옵션을 벗어남. 선택 전이면 타이머 취소."""
        if self.hovered_id != option_id:
            return
        self.hovered_id = None
        self._cancel_hover()

    def click(self, option_id: str) -> bool:
        if self.closed or self.selected_id is not None or self._option(option_id) is None:
            return False
        self._cancel_hover()
        self._mark_selected(option_id, self.click_confirm_ms)
        return True

    def _hover_elapsed(self, option_id: str) -> None:
        self._hover_task = None
        if self.closed or self.selected_id is not None:
            return
        self._mark_selected(option_id, self.hover_confirm_ms)

    def _mark_selected(self, option_id: str, delay_ms: float) -> None:
        self.selected_id = option_id
        logger.debug(f"메뉴 옵션 선택: {option_id}")
        self._scheduler.schedule(
            delay_ms,
            lambda: self._fire(option_id),
            owner=self,
            label=f"select:{option_id}",
        )

    def _fire(self, option_id: str) -> None:
        if self.closed:
            return
        option = self._option(option_id)
        try:
            if option is not None:
                option.on_select()
        finally:
            self.close()

    def close(self, notify: bool = True) -> None:
        """메뉴 해제. 대기 작업 전부 취소."""
        if self.closed:
            return
        self.closed = True
        self._hover_task = None
        self._scheduler.cancel_owner(self)
        if notify and self._on_close is not None:
            self._on_close()


class InteractionPresenter:
    """클릭/근접 트리거 → 자동 실행 또는 메뉴"""

    def __init__(
        self,
        aggregator: InteractionAggregator,
        npc_locator: NPCLocator,
        scheduler: Scheduler,
        *,
        event_bus: Optional[EventBus] = None,
        interaction_range: Optional[float] = None,
        on_menu_change: Optional[Callable[[Optional[MenuView]], None]] = None,
    ) -> None:
        self._aggregator = aggregator
        self._npc_locator = npc_locator
        self._scheduler = scheduler
        self._event_bus = event_bus
        self.interaction_range = (
            settings.INTERACTION_RANGE if interaction_range is None else interaction_range
        )
        self._on_menu_change = on_menu_change

        self.state = PresenterState.IDLE
        self.menu: Optional[MenuView] = None
        self.menu_controller: Optional[RadialMenuController] = None
        self.anchor_npc_id: Optional[str] = None
        self._emit_seq = 0

    # ── 실행 ──

    def _emit(self, event_type: str, data: dict) -> None:
        if self._event_bus is None:
            return
        # 한 패스에 메뉴가 여러 번 열리고 닫힐 수 있으므로 발행마다 구분
        self._emit_seq += 1
        self._event_bus.emit(
            GameEvent(
                event_type=event_type,
                data=data,
                source="interaction_presenter",
                dedupe_key=str(self._emit_seq),
            )
        )

    def _end_pass(self) -> None:
        if self._event_bus is not None:
            self._event_bus.reset_chain()

    def execute(self, interaction: Interaction) -> bool:
        """실행 성공이면 True. 예외는 기록하고 False (메뉴 상태는 호출자가 정리)."""
        try:
            interaction.execute()
        except Exception:
            logger.exception(f"상호작용 실행 실패: {interaction.type.value} ({interaction.label})")
            return False
        self._emit(
            EventTypes.INTERACTION_EXECUTED,
            {"type": interaction.type.value, "label": interaction.label},
        )
        return True

    def _to_options(self, interactions: Sequence[Interaction]) -> List[RadialMenuOption]:
        return [
            RadialMenuOption(
                id=f"{interaction.type.value}_{index}",
                label=interaction.label,
                icon=interaction.icon,
                color=interaction.color,
                on_select=(lambda i=interaction: self.execute(i)),
            )
            for index, interaction in enumerate(interactions)
        ]

    # ── 메뉴 ──

    def _open_menu(
        self,
        kind: MenuKind,
        interactions: Sequence[Interaction],
        anchor: ScreenPoint,
        npc_id: Optional[str] = None,
    ) -> MenuView:
        if self.menu_controller is not None:
            self.menu_controller.close(notify=False)
        options = self._to_options(interactions)
        self.menu = MenuView(kind=kind, options=tuple(options), anchor=anchor, npc_id=npc_id)
        self.menu_controller = RadialMenuController(options, self._scheduler, on_close=self.close)
        self.state = PresenterState.MENU_OPEN
        self.anchor_npc_id = npc_id if kind == MenuKind.NPC_PROXIMITY else None
        logger.info(f"메뉴 열림: {kind.value} 옵션 {len(options)}개")
        self._emit(
            EventTypes.MENU_OPENED,
            {"kind": kind.value, "npc_id": npc_id, "options": [o.id for o in options]},
        )
        if self._on_menu_change is not None:
            self._on_menu_change(self.menu)
        return self.menu

    def close(self) -> bool:
        """메뉴 닫기. 열린 메뉴가 없었으면 False."""
        if self.state == PresenterState.IDLE:
            return False
        kind = self.menu.kind if self.menu else None
        self.state = PresenterState.IDLE
        self.menu = None
        self.anchor_npc_id = None
        controller, self.menu_controller = self.menu_controller, None
        if controller is not None:
            controller.close(notify=False)
        logger.info("메뉴 닫힘")
        self._emit(EventTypes.MENU_CLOSED, {"kind": kind.value if kind else None})
        if self._on_menu_change is not None:
            self._on_menu_change(None)
        return True

    def select(self, option_id: str) -> bool:
        """옵션 즉시 실행 후 닫기 (지연 없이)"""
        if self.menu is None:
            return False
        for option in self.menu.options:
            if option.id == option_id:
                try:
                    option.on_select()
                finally:
                    self.close()
                return True
        return False

    def handle_key(self, key: str) -> bool:
        if key == ESCAPE_KEY:
            return self.close()
        return False

    def teardown(self) -> None:
        """호스트 종료 시: 메뉴 닫고 예약 작업 정리"""
        self.close()

    # ── 트리거 ──

    def handle_click(
        self,
        position: Position,
        map_id: str,
        player_position: Position,
        screen_point: ScreenPoint,
        *,
        tool: Optional[str] = None,
        callbacks: Optional[InteractionCallbacks] = None,
        blockers: UIBlockers = NOT_BLOCKED,
    ) -> ClickOutcome:
        """클릭 1회 처리. 처리 후 이벤트 체인 초기화."""
        try:
            return self._click(
                position,
                map_id,
                player_position,
                screen_point,
                tool=tool,
                callbacks=callbacks,
                blockers=blockers,
            )
        finally:
            self._end_pass()

    def handle_proximity(
        self,
        map_id: str,
        player_position: Position,
        *,
        tool: Optional[str] = None,
        callbacks: Optional[InteractionCallbacks] = None,
        blockers: UIBlockers = NOT_BLOCKED,
    ) -> ProximityOutcome:
        """플레이어 이동마다 호출"""
        try:
            return self._proximity(
                map_id, player_position, tool=tool, callbacks=callbacks, blockers=blockers
            )
        finally:
            self._end_pass()

    def _click(
        self,
        position: Position,
        map_id: str,
        player_position: Position,
        screen_point: ScreenPoint,
        *,
        tool: Optional[str] = None,
        callbacks: Optional[InteractionCallbacks] = None,
        blockers: UIBlockers = NOT_BLOCKED,
    ) -> ClickOutcome:
        if blockers.blocking:
            return ClickOutcome.BLOCKED

        interactions = self._aggregator.get_available_interactions(
            InteractionRequest(
                position=position,
                map_id=map_id,
                tool=tool or DEFAULT_TOOL,
                callbacks=callbacks or InteractionCallbacks(),
            )
        )
        if not interactions:
            return ClickOutcome.NO_INTERACTIONS

        if player_position.distance_to(position) > self.interaction_range:
            return ClickOutcome.OUT_OF_RANGE

        if len(interactions) == 1:
            self.execute(interactions[0])
            return ClickOutcome.EXECUTED

        self._open_menu(MenuKind.CLICK, interactions, screen_point)
        return ClickOutcome.MENU_OPENED

    def _proximity(
        self,
        map_id: str,
        player_position: Position,
        *,
        tool: Optional[str] = None,
        callbacks: Optional[InteractionCallbacks] = None,
        blockers: UIBlockers = NOT_BLOCKED,
    ) -> ProximityOutcome:
        if blockers.blocking:
            return ProximityOutcome.BLOCKED

        npc = self._npc_locator.npc_at(map_id, player_position)
        if npc is None:
            if self.anchor_npc_id is not None:
                self.close()
                return ProximityOutcome.CLOSED
            return ProximityOutcome.NONE_NEARBY

        if self.anchor_npc_id == npc.id:
            return ProximityOutcome.UNCHANGED

        interactions = self._aggregator.get_available_interactions(
            InteractionRequest(
                position=npc.position,
                map_id=map_id,
                tool=tool or DEFAULT_TOOL,
                callbacks=callbacks or InteractionCallbacks(),
            )
        )
        npc_interactions = [i for i in interactions if i.type in NPC_INTERACTION_TYPES]
        if not npc_interactions:
            # 이전 NPC 메뉴는 새 NPC에게 넘어가지 않는다
            if self.anchor_npc_id is not None:
                self.close()
                return ProximityOutcome.CLOSED
            return ProximityOutcome.NO_NPC_INTERACTIONS

        anchor = project_to_screen(npc.position, player_position)
        self._open_menu(MenuKind.NPC_PROXIMITY, npc_interactions, anchor, npc_id=npc.id)
        return ProximityOutcome.MENU_OPENED
