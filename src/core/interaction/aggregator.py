"""Interaction Aggregator - 등록된 공급원에서 상호작용 수집

공급원은 등록 순서대로 조회되므로 같은 컨텍스트면 항상 같은 순서가 나온다
(메뉴 배치가 흔들리지 않음).
"""

from typing import Dict, List, Optional

from src.core.interaction.models import (
    DEFAULT_TOOL,
    Interaction,
    InteractionCallbacks,
    InteractionRequest,
)
from src.core.interaction.sources import InteractionSource
from src.core.logging import get_logger
from src.core.world.models import Position

logger = get_logger(__name__)


class InteractionAggregator:
    """공급원 등록/해제 + 위치별 상호작용 집계"""

    def __init__(self) -> None:
        self._sources: Dict[str, InteractionSource] = {}

    @property
    def sources(self) -> Dict[str, InteractionSource]:
        """등록된 공급원 (읽기 전용 접근)"""
        return dict(self._sources)

    def register(self, source: InteractionSource) -> None:
        """공급원 등록. 같은 이름이면 경고 후 교체 (순서 유지)."""
        if source.name in self._sources:
            logger.warning(f"공급원 덮어쓰기: {source.name}")
        self._sources[source.name] = source
        logger.info(f"공급원 등록: {source.name}")

    def unregister(self, name: str) -> bool:
        if self._sources.pop(name, None) is None:
            return False
        logger.info(f"공급원 해제: {name}")
        return True

    def get_available_interactions(self, request: InteractionRequest) -> List[Interaction]:
        """요청 위치에서 가능한 모든 상호작용. 없으면 빈 목록."""
        interactions: List[Interaction] = []
        for source in self._sources.values():
            interactions.extend(source.collect(request))
        logger.debug(
            f"상호작용 집계: map={request.map_id} pos=({request.position.x:.1f}, "
            f"{request.position.y:.1f}) tool={request.tool} → {len(interactions)}건"
        )
        return interactions

    def query(
        self,
        position: Position,
        map_id: str,
        tool: Optional[str] = None,
        callbacks: Optional[InteractionCallbacks] = None,
    ) -> List[Interaction]:
        return self.get_available_interactions(
            InteractionRequest(
                position=position,
                map_id=map_id,
                tool=tool or DEFAULT_TOOL,
                callbacks=callbacks or InteractionCallbacks(),
            )
        )
