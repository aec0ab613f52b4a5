"""대화 시스템 Core 패키지

DB 무관 순수 Python 도메인 모델 + 조건 판정/노드 해석/작성 검증 로직.
"""

from src.core.dialogue.models import (
    NO_CONDITIONS,
    ActionKind,
    DialogueConditions,
    DialogueNode,
    DialogueResponse,
    GlobalEventRequirement,
    ResponseAction,
)
from src.core.dialogue.conditions import (
    conditions_pass,
    is_node_visible,
    is_response_visible,
)
from src.core.dialogue.text_variants import render_node_text
from src.core.dialogue.resolver import (
    DialogueTable,
    ResolvedDialogue,
    filter_responses,
    resolve_active_node,
    resolve_view,
)
from src.core.dialogue.validation import (
    DialogueIssue,
    sample_contexts,
    validate_dialogue,
)
from src.core.dialogue.loader import (
    DialogueSchemaError,
    load_dialogue_json,
    parse_dialogue,
    parse_node,
)

__all__ = [
    "NO_CONDITIONS",
    "ActionKind",
    "DialogueConditions",
    "DialogueNode",
    "DialogueResponse",
    "GlobalEventRequirement",
    "ResponseAction",
    "conditions_pass",
    "is_node_visible",
    "is_response_visible",
    "render_node_text",
    "DialogueTable",
    "ResolvedDialogue",
    "filter_responses",
    "resolve_active_node",
    "resolve_view",
    "DialogueIssue",
    "sample_contexts",
    "validate_dialogue",
    "DialogueSchemaError",
    "load_dialogue_json",
    "parse_dialogue",
    "parse_node",
]
