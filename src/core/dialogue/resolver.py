"""Dialogue Resolver

같은 id를 공유하는 노드들을 로드 시점에 id별 순서 있는 규칙 목록으로 묶는다.
해석 = 해당 id 목록에서 조건을 통과하는 첫 노드.
둘 이상 통과하면 첫 노드를 쓰고 작성 오류로 1회 경고한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from src.core.dialogue.conditions import is_node_visible, is_response_visible
from src.core.dialogue.models import DialogueNode, DialogueResponse
from src.core.dialogue.text_variants import render_node_text
from src.core.logging import get_logger, warn_once
from src.core.world.models import WorldContext

logger = get_logger(__name__)


class DialogueTable:
    """NPC 하나의 대화 노드 규칙표 (id → 선언 순서 노드 목록)"""

    def __init__(self, nodes: Iterable[DialogueNode], owner: str = "") -> None:
        self.owner = owner
        self._nodes: Tuple[DialogueNode, ...] = tuple(nodes)
        self._rules: Dict[str, List[DialogueNode]] = {}
        for node in self._nodes:
            self._rules.setdefault(node.id, []).append(node)

    @property
    def nodes(self) -> Tuple[DialogueNode, ...]:
        return self._nodes

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._rules)

    def has_id(self, node_id: str) -> bool:
        return node_id in self._rules

    def candidates(self, node_id: str) -> Tuple[DialogueNode, ...]:
        return tuple(self._rules.get(node_id, ()))

    def visible_candidates(
        self, node_id: str, ctx: WorldContext
    ) -> List[DialogueNode]:
        return [n for n in self._rules.get(node_id, ()) if is_node_visible(n, ctx, self.owner)]

    def __len__(self) -> int:
        return len(self._nodes)


def resolve_active_node(
    table: DialogueTable, node_id: str, ctx: WorldContext
) -> Optional[DialogueNode]:
    """현재 진입한 id에 대해 보이는 첫 노드. 없으면 None."""
    visible = [
        (pos, n)
        for pos, n in enumerate(table.candidates(node_id))
        if is_node_visible(n, ctx, table.owner)
    ]
    if not visible:
        return None
    if len(visible) > 1:
        positions = tuple(pos for pos, _ in visible)
        warn_once(
            logger,
            ("ambiguous_node", table.owner, node_id, positions),
            "대화 노드 중복 적용: npc=%s id=%s 후보=%s (첫 노드 사용)",
            table.owner,
            node_id,
            positions,
        )
    return visible[0][1]


def filter_responses(
    node: DialogueNode, ctx: WorldContext, npc_id: Optional[str] = None
) -> List[DialogueResponse]:
    """보이는 응답만, 선언 순서 유지"""
    return [r for r in node.responses if is_response_visible(r, ctx, npc_id)]


@dataclass(frozen=True)
class ResolvedDialogue:
    """화면에 보일 노드 1턴 (대사 변형 + 응답 필터 적용 결과)"""

    node: DialogueNode
    text: str
    responses: Tuple[DialogueResponse, ...]

    @property
    def node_id(self) -> str:
        return self.node.id

    @property
    def expression(self) -> Optional[str]:
        return self.node.expression


def resolve_view(
    table: DialogueTable, node_id: str, ctx: WorldContext
) -> Optional[ResolvedDialogue]:
    node = resolve_active_node(table, node_id, ctx)
    if node is None:
        return None
    return ResolvedDialogue(
        node=node,
        text=render_node_text(node, ctx),
        responses=tuple(filter_responses(node, ctx, table.owner)),
    )
