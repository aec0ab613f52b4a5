"""NPC Core 도메인 패키지

공개 API:
- 도메인 모델: NPC, NPCBehavior, FriendshipConfig, TierReward, DailyResourceConfig
- 상태 기계: AnimatedNPCStates, StateDefinition, ProximityTrigger
- 팩토리: create_npc, create_static_npc, create_wandering_npc, npc_from_config
"""

from src.core.npc.states import (
    AnimatedNPCStates,
    NPCConfigError,
    ProximityTrigger,
    StateDefinition,
    UnknownStateError,
    validate_states,
)
from src.core.npc.models import (
    NPC,
    DailyResourceConfig,
    FriendshipConfig,
    NPCBehavior,
    TierReward,
)
from src.core.npc.factory import (
    create_npc,
    create_static_npc,
    create_wandering_npc,
    load_npcs_json,
    npc_from_config,
    state,
    state_from_config,
)

__all__ = [
    # states
    "AnimatedNPCStates",
    "NPCConfigError",
    "ProximityTrigger",
    "StateDefinition",
    "UnknownStateError",
    "validate_states",
    # models
    "NPC",
    "DailyResourceConfig",
    "FriendshipConfig",
    "TierReward",
    "NPCBehavior",
    # factory
    "create_npc",
    "create_static_npc",
    "create_wandering_npc",
    "load_npcs_json",
    "npc_from_config",
    "state",
    "state_from_config",
]
