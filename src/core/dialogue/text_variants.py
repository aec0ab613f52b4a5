"""노드 대사 변형 선택

가장 상황 의존적인 변형이 이긴다:
물약 효과 > 변신 > 날씨 > 시간대 > 계절 > 기본 text
노드가 선언한 범주만 보고, 현재 값에 해당하는 키가 없으면 다음 범주로 넘어간다.
"""

from __future__ import annotations

from typing import Optional

from src.core.dialogue.models import DialogueNode
from src.core.world.models import WorldContext


def _potion_text(node: DialogueNode, ctx: WorldContext) -> Optional[str]:
    # 여러 효과가 동시에 활성이면 노드에 선언된 키 순서가 우선
    for effect, text in node.potion_effect_text.items():
        if ctx.has_potion_effect(effect):
            return text
    return None


def _transformation_text(node: DialogueNode, ctx: WorldContext) -> Optional[str]:
    if not ctx.transformation:
        return None
    return node.transformation_text.get(ctx.transformation)


def _weather_text(node: DialogueNode, ctx: WorldContext) -> Optional[str]:
    return node.weather_text.get(ctx.weather)


def _time_of_day_text(node: DialogueNode, ctx: WorldContext) -> Optional[str]:
    return node.time_of_day_text.get(ctx.time_of_day)


def _seasonal_text(node: DialogueNode, ctx: WorldContext) -> Optional[str]:
    return node.seasonal_text.get(ctx.season)


_VARIANT_PRIORITY = (
    _potion_text,
    _transformation_text,
    _weather_text,
    _time_of_day_text,
    _seasonal_text,
)


def render_node_text(node: DialogueNode, ctx: WorldContext) -> str:
    for pick in _VARIANT_PRIORITY:
        text = pick(node, ctx)
        if text is not None:
            return text
    return node.text
