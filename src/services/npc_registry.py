"""NPCRegistry - 맵별 NPC 등록, 근접 조회, 프레임 구동

상호작용 집계기와 프레젠터는 NPCLocator 인터페이스로만 접근한다.
"""

from typing import Dict, List, Optional

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.interaction.sources import NPCLocator
from src.core.logging import get_logger
from src.core.npc.models import NPC
from src.core.world.models import Direction, Position

logger = get_logger(__name__)

SOURCE = "npc_registry"


class NPCRegistry(NPCLocator):
    """맵 id → 등록 순서가 유지되는 NPC 목록"""

    def __init__(self, event_bus: Optional[EventBus] = None) -> None:
        self._bus = event_bus
        self._maps: Dict[str, Dict[str, NPC]] = {}
        self._map_of: Dict[str, str] = {}
        self.current_map_id: Optional[str] = None
        self._tick_seq = 0
        # 마지막 update() 시각 (ms). 이벤트 전이 시각으로 쓴다.
        self.now: float = 0.0

    # ── 등록 ─────────────────────────────────────────────────

    def register(self, map_id: str, npc: NPC) -> None:
        """NPC 등록. 같은 id가 이미 있으면 교체."""
        previous_map = self._map_of.get(npc.id)
        if previous_map is not None:
            logger.warning(f"NPC 재등록: {npc.id} ({previous_map} → {map_id})")
            self._maps[previous_map].pop(npc.id, None)
        self._maps.setdefault(map_id, {})[npc.id] = npc
        self._map_of[npc.id] = map_id
        logger.info(f"NPC 등록: {npc.id} @ {map_id}")

    def register_all(self, map_id: str, npcs: List[NPC]) -> None:
        for npc in npcs:
            self.register(map_id, npc)

    def unregister(self, npc_id: str) -> bool:
        map_id = self._map_of.pop(npc_id, None)
        if map_id is None:
            return False
        self._maps[map_id].pop(npc_id, None)
        return True

    def clear_map(self, map_id: str) -> int:
        npcs = self._maps.pop(map_id, {})
        for npc_id in npcs:
            self._map_of.pop(npc_id, None)
        return len(npcs)

    def set_current_map(self, map_id: str) -> None:
        self.current_map_id = map_id

    # ── 조회 ─────────────────────────────────────────────────

    def get_npc(self, npc_id: str) -> Optional[NPC]:
        map_id = self._map_of.get(npc_id)
        if map_id is None:
            return None
        return self._maps[map_id].get(npc_id)

    def map_of(self, npc_id: str) -> Optional[str]:
        return self._map_of.get(npc_id)

    def npcs_on(self, map_id: str) -> List[NPC]:
        return list(self._maps.get(map_id, {}).values())

    def __len__(self) -> int:
        return len(self._map_of)

    def npc_at(self, map_id: str, position: Position) -> Optional[NPC]:
        """position이 상호작용 반경 안에 드는 가장 가까운 NPC

        거리가 같으면 먼저 등록된 NPC.
        """
        best: Optional[NPC] = None
        best_distance = 0.0
        for npc in self._maps.get(map_id, {}).values():
            distance = npc.distance_to(position)
            if distance > npc.interaction_radius:
                continue
            if best is None or distance < best_distance:
                best, best_distance = npc, distance
        return best

    # ── 상태 기계 구동 ───────────────────────────────────────

    def trigger_npc_event(self, npc_id: str, event: str) -> bool:
        npc = self.get_npc(npc_id)
        if npc is None or npc.animated_states is None:
            return False
        machine = npc.animated_states
        before = machine.current_state
        if not machine.trigger_event(event, self.now):
            return False
        self._state_changed(npc, before)
        return True

    def update(
        self,
        now: float,
        player_position: Optional[Position] = None,
        map_id: Optional[str] = None,
    ) -> List[str]:
        """현재 맵의 상태 기계를 한 프레임 진행. 상태가 바뀐 NPC id 목록."""
        self.now = now
        target = map_id or self.current_map_id
        if target is None:
            return []
        changed: List[str] = []
        for npc in self._maps.get(target, {}).values():
            machine = npc.animated_states
            if machine is None:
                continue
            distance = npc.distance_to(player_position) if player_position is not None else None
            before = machine.current_state
            if machine.tick(now, player_distance=distance, direction=npc.direction):
                changed.append(npc.id)
                self._state_changed(npc, before)
        if self._bus is not None:
            self._bus.reset_chain()
        return changed

    def _state_changed(self, npc: NPC, before: str) -> None:
        after = npc.animated_states.current_state
        logger.debug(f"NPC 상태 변경: {npc.id} {before} → {after}")
        if self._bus is None:
            return
        self._tick_seq += 1
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.NPC_STATE_CHANGED,
                data={"npc_id": npc.id, "from_state": before, "to_state": after},
                source=SOURCE,
                dedupe_key=f"{npc.id}:{self._tick_seq}",
            )
        )

    def current_sprite(self, npc_id: str, direction: Optional[Direction] = None) -> Optional[str]:
        npc = self.get_npc(npc_id)
        if npc is None:
            return None
        if npc.animated_states is None:
            return npc.sprite
        return npc.animated_states.current_sprite(direction or npc.direction)
