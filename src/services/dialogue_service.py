"""대화 세션 관리 Service - 노드 진입, 응답 선택, 부수 효과 적용

세션 1개는 NPC 1명과의 대화 1회이며 "현재 진입한 노드 id"를 소유한다.
노드 해석/조건 판정은 Core(dialogue.resolver)에 맡기고,
응답 액션은 GameStateStore를 통해서만 적용한다.

콘텐츠 오류(없는 nextId, 보이는 노드 없음)는 예외 대신 세션 종료로 처리한다.
종료된 세션은 즉시 세션 목록에서 빠지며, 이후 같은 id로의 요청은 DialogueSessionNotFound.
"""

import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from src.config import settings
from src.core.dialogue.models import DialogueResponse
from src.core.dialogue.resolver import ResolvedDialogue, resolve_view
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger, warn_once
from src.core.npc.models import NPC
from src.core.world.models import WorldContext
from src.services.game_state_store import GameStateStore

logger = get_logger(__name__)

SOURCE = "dialogue_service"

# (npc_id, node_id) → 대체 node_id 또는 None
RedirectHook = Callable[[str, str], Optional[str]]
NPCLookup = Callable[[str], Optional[NPC]]


class DialogueSessionNotFound(KeyError):
    pass


class InvalidResponseIndex(IndexError):
    pass


# 세션 종료 사유
END_NO_NEXT = "no_next"
END_UNKNOWN_NEXT = "unknown_next"
END_NO_VISIBLE_NODE = "no_visible_node"
END_BY_PLAYER = "ended"


@dataclass
class DialogueSession:
    session_id: str
    npc_id: str
    node_id: Optional[str] = None
    view: Optional[ResolvedDialogue] = None
    closed: bool = False
    end_reason: Optional[str] = None


class DialogueService:
    """대화 세션 관리"""

    def __init__(
        self,
        store: GameStateStore,
        npc_lookup: NPCLookup,
        event_bus: Optional[EventBus] = None,
        redirect: Optional[RedirectHook] = None,
        entry_node: Optional[str] = None,
    ) -> None:
        self._store = store
        self._npc_lookup = npc_lookup
        self._bus = event_bus
        self._redirect = redirect
        self.entry_node = entry_node or settings.DIALOGUE_ENTRY_NODE
        self._sessions: Dict[str, DialogueSession] = {}

    # === 공개 API ===

    def get_session(self, session_id: str) -> DialogueSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise DialogueSessionNotFound(session_id)
        return session

    @property
    def active_sessions(self) -> int:
        """보관 중인 세션 수 (종료된 세션은 보관하지 않음)"""
        return len(self._sessions)

    def start(self, npc_id: str) -> Optional[DialogueSession]:
        """대화 시작. NPC가 없으면 None.

        1. 우정 설정 등록 (처음이면 시작 포인트)
        2. dialogue_started 발행
        3. 진입 노드(greeting) 진입 → 하루 첫 대화 보너스
        """
        npc = self._npc_lookup(npc_id)
        if npc is None:
            logger.warning(f"대화 시작 실패: 알 수 없는 NPC {npc_id}")
            return None

        self._store.register_friendship(npc.id, npc.friendship_config)

        session = DialogueSession(session_id=str(uuid.uuid4()), npc_id=npc.id)
        self._sessions[session.session_id] = session
        logger.info(f"Dialogue started: {npc.id} ({session.session_id})")
        self._emit(
            EventTypes.DIALOGUE_STARTED,
            {"session_id": session.session_id, "npc_id": npc.id},
            session.session_id,
        )
        try:
            self._enter(session, npc, self.entry_node)
            if not session.closed and npc.can_befriend:
                self._store.record_daily_talk(npc.id)
                # 보너스로 단계가 바뀌었을 수 있으므로 다시 해석
                self._refresh(session, npc)
        finally:
            self._end_pass()
        return session

    def respond(self, session_id: str, response_index: int) -> DialogueSession:
        """현재 노드의 보이는 응답 중 response_index번 선택

        액션 적용 순서: 퀘스트 → 아이템 → 해금.
        그 뒤 nextId로 진입하거나, 없으면 대화 종료.
        """
        session = self.get_session(session_id)
        if session.closed or session.view is None:
            raise InvalidResponseIndex(f"session closed: {session_id}")
        responses = session.view.responses
        if not 0 <= response_index < len(responses):
            raise InvalidResponseIndex(
                f"response index {response_index} out of range (0..{len(responses) - 1})"
            )
        response = responses[response_index]
        npc = self._npc_lookup(session.npc_id)

        try:
            self._apply(session, response)
            if npc is None:
                self._close(session, END_NO_VISIBLE_NODE)
            elif response.next_id is None:
                self._close(session, END_NO_NEXT)
            else:
                self._enter(session, npc, response.next_id)
        finally:
            self._end_pass()
        return session

    def end(self, session_id: str) -> DialogueSession:
        session = self.get_session(session_id)
        try:
            self._close(session, END_BY_PLAYER)
        finally:
            self._end_pass()
        return session

    # === 내부 ===

    def _context(self) -> WorldContext:
        return self._store.build_context()

    def _apply(self, session: DialogueSession, response: DialogueResponse) -> None:
        for action in response.ordered_actions():
            self._store.apply_action(action, npc_id=session.npc_id)

    def _enter(self, session: DialogueSession, npc: NPC, node_id: str) -> None:
        target = node_id
        if self._redirect is not None:
            target = self._redirect(npc.id, node_id) or node_id

        if not npc.dialogue_table.has_id(target):
            warn_once(
                logger,
                ("unknown_next_id", npc.id, target),
                "없는 대화 노드: npc=%s id=%s (대화 종료)",
                npc.id,
                target,
            )
            self._close(session, END_UNKNOWN_NEXT)
            return

        view = resolve_view(npc.dialogue_table, target, self._context())
        if view is None:
            logger.info(f"보이는 노드 없음: {npc.id}/{target} (대화 종료)")
            self._close(session, END_NO_VISIBLE_NODE)
            return

        session.node_id = target
        session.view = view
        logger.debug(f"노드 진입: {npc.id}/{target} 응답 {len(view.responses)}개")
        self._emit(
            EventTypes.DIALOGUE_NODE_ENTERED,
            {"session_id": session.session_id, "npc_id": npc.id, "node_id": target},
            f"{session.session_id}:{target}",
        )

    def _refresh(self, session: DialogueSession, npc: NPC) -> None:
        """같은 노드 id를 현재 상태로 다시 해석 (이벤트 없음)"""
        if session.node_id is None:
            return
        view = resolve_view(npc.dialogue_table, session.node_id, self._context())
        if view is not None:
            session.view = view

    def _close(self, session: DialogueSession, reason: str) -> None:
        if session.closed:
            return
        session.closed = True
        session.end_reason = reason
        session.view = None
        # 종료된 세션은 보관하지 않는다
        self._sessions.pop(session.session_id, None)
        logger.info(f"Dialogue ended: {session.npc_id} ({reason})")
        self._emit(
            EventTypes.DIALOGUE_ENDED,
            {"session_id": session.session_id, "npc_id": session.npc_id, "reason": reason},
            session.session_id,
        )

    def _emit(self, event_type: str, data: dict, dedupe_key: str = "") -> None:
        if self._bus is None:
            return
        self._bus.emit(
            GameEvent(event_type=event_type, data=data, source=SOURCE, dedupe_key=dedupe_key)
        )

    def _end_pass(self) -> None:
        if self._bus is not None:
            self._bus.reset_chain()
