"""API request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field


# === Request Schemas ===


class DialogueStartRequest(BaseModel):
    """대화 시작 요청"""

    npc_id: str = Field(..., min_length=1, description="NPC ID")
    map_id: Optional[str] = Field(None, description="지정하면 해당 맵의 NPC만 허용")


class DialogueRespondRequest(BaseModel):
    """응답 선택 요청"""

    session_id: str = Field(..., description="대화 세션 ID")
    response_index: int = Field(..., ge=0, description="보이는 응답 중 순번 (0부터)")


class DialogueEndRequest(BaseModel):
    session_id: str


class InteractionQueryRequest(BaseModel):
    """위치별 상호작용 조회 요청"""

    map_id: str = Field(..., min_length=1)
    x: float
    y: float
    tool: Optional[str] = Field(None, description="장착 도구 (기본: hand)")


# === Response Schemas ===


class ResponseOption(BaseModel):
    index: int
    text: str


class DialogueView(BaseModel):
    """현재 대화 화면. closed면 나머지 필드는 비어 있다."""

    session_id: str
    npc_id: str
    closed: bool = False
    end_reason: Optional[str] = None
    node_id: Optional[str] = None
    text: Optional[str] = None
    expression: Optional[str] = None
    portrait: Optional[str] = None
    responses: list[ResponseOption] = []


class InteractionInfo(BaseModel):
    type: str
    label: str
    icon: Optional[str] = None
    color: Optional[str] = None


class InteractionQueryResponse(BaseModel):
    interactions: list[InteractionInfo] = []


class ErrorResponse(BaseModel):
    """에러 응답"""

    error: str
    detail: Optional[str] = None
