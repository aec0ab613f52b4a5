"""Interaction API endpoints."""

from fastapi import APIRouter, Depends, Request

from src.api.schemas import InteractionInfo, InteractionQueryRequest, InteractionQueryResponse
from src.core.interaction.aggregator import InteractionAggregator
from src.core.interaction.models import InteractionCallbacks
from src.core.world.models import Position

router = APIRouter(prefix="/interactions", tags=["interactions"])


def _ignore(*_args) -> None:
    return None


# 조회 전용: 모든 콜백을 채워 공급원이 빠짐없이 후보를 내게 한다 (실행은 안 함)
LISTING_CALLBACKS = InteractionCallbacks(
    on_npc=_ignore,
    on_give_gift=_ignore,
    on_collect_resource=_ignore,
    on_placed_item_action=_ignore,
    on_farm_action=_ignore,
    on_forage=_ignore,
    on_transition=_ignore,
    on_collect_water=_ignore,
    on_refill_water_can=_ignore,
    on_clean_cobweb=_ignore,
)


def get_aggregator(request: Request) -> InteractionAggregator:
    """InteractionAggregator 인스턴스 반환 (의존성 주입)"""
    aggregator: InteractionAggregator = request.app.state.aggregator
    return aggregator


@router.post("/query", response_model=InteractionQueryResponse)
def query_interactions(
    body: InteractionQueryRequest,
    aggregator: InteractionAggregator = Depends(get_aggregator),
) -> InteractionQueryResponse:
    interactions = aggregator.query(
        Position(body.x, body.y),
        body.map_id,
        tool=body.tool,
        callbacks=LISTING_CALLBACKS,
    )
    return InteractionQueryResponse(
        interactions=[
            InteractionInfo(type=i.type.value, label=i.label, icon=i.icon, color=i.color)
            for i in interactions
        ]
    )
