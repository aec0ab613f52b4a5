"""Dialogue API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    DialogueEndRequest,
    DialogueRespondRequest,
    DialogueStartRequest,
    DialogueView,
    ResponseOption,
)
from src.core.logging import get_logger
from src.services.dialogue_service import (
    DialogueService,
    DialogueSession,
    DialogueSessionNotFound,
    InvalidResponseIndex,
)
from src.services.npc_registry import NPCRegistry

logger = get_logger(__name__)

router = APIRouter(prefix="/dialogue", tags=["dialogue"])


def get_dialogue_service(request: Request) -> DialogueService:
    """DialogueService 인스턴스 반환 (의존성 주입)"""
    service: DialogueService = request.app.state.dialogue_service
    return service


def get_npc_registry(request: Request) -> NPCRegistry:
    registry: NPCRegistry = request.app.state.npc_registry
    return registry


def _build_view(session: DialogueSession, registry: NPCRegistry) -> DialogueView:
    """DialogueSession → DialogueView"""
    view = session.view
    if session.closed or view is None:
        return DialogueView(
            session_id=session.session_id,
            npc_id=session.npc_id,
            closed=True,
            end_reason=session.end_reason,
        )
    npc = registry.get_npc(session.npc_id)
    return DialogueView(
        session_id=session.session_id,
        npc_id=session.npc_id,
        node_id=view.node_id,
        text=view.text,
        expression=view.expression,
        portrait=npc.expression_sprite(view.expression) if npc else None,
        responses=[
            ResponseOption(index=i, text=r.text) for i, r in enumerate(view.responses)
        ],
    )


@router.post("/start", response_model=DialogueView)
def start_dialogue(
    body: DialogueStartRequest,
    service: DialogueService = Depends(get_dialogue_service),
    registry: NPCRegistry = Depends(get_npc_registry),
) -> DialogueView:
    if body.map_id is not None and registry.map_of(body.npc_id) != body.map_id:
        raise HTTPException(status_code=404, detail=f"NPC not on map {body.map_id}: {body.npc_id}")
    session = service.start(body.npc_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"NPC not found: {body.npc_id}")
    return _build_view(session, registry)


@router.post("/respond", response_model=DialogueView)
def respond(
    body: DialogueRespondRequest,
    service: DialogueService = Depends(get_dialogue_service),
    registry: NPCRegistry = Depends(get_npc_registry),
) -> DialogueView:
    try:
        session = service.respond(body.session_id, body.response_index)
    except DialogueSessionNotFound:
        raise HTTPException(status_code=404, detail=f"Session not found: {body.session_id}")
    except InvalidResponseIndex as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _build_view(session, registry)


@router.post("/end", response_model=DialogueView)
def end_dialogue(
    body: DialogueEndRequest,
    service: DialogueService = Depends(get_dialogue_service),
    registry: NPCRegistry = Depends(get_npc_registry),
) -> DialogueView:
    try:
        session = service.end(body.session_id)
    except DialogueSessionNotFound:
        raise HTTPException(status_code=404, detail=f"Session not found: {body.session_id}")
    return _build_view(session, registry)
