"""NPC 팩토리

원형(정적/배회)별 생성 함수. 모두 검증된 NPC를 반환하며,
상태 기계는 initial_state로 초기화된다.

    cat = create_static_npc(
        id="cat", name="Cat", position=Position(5, 7), sprite="cat.png",
        states={
            "sleeping": state(["cat_sleep_1.png"], transitions_to={"interact": "angry"}),
            "angry": state(["cat_angry.png"], duration=10000, next_state="sleeping"),
        },
        initial_state="sleeping",
    )
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from src.config import settings
from src.core.dialogue.loader import parse_dialogue
from src.core.dialogue.models import DialogueNode
from src.core.npc.models import (
    NPC,
    DailyResourceConfig,
    FriendshipConfig,
    NPCBehavior,
    TierReward,
)
from src.core.npc.states import (
    AnimatedNPCStates,
    NPCConfigError,
    ProximityTrigger,
    StateDefinition,
)
from src.core.world.models import Direction, FriendshipTier, Position

logger = logging.getLogger(__name__)

PositionLike = Union[Position, Tuple[float, float]]


def state(
    sprites: Sequence[str],
    animation_speed: Optional[float] = None,
    *,
    duration: Optional[float] = None,
    next_state: Optional[str] = None,
    transitions_to: Optional[Mapping[str, str]] = None,
    directional_sprites: Optional[Mapping[Union[Direction, str], Sequence[str]]] = None,
    proximity_trigger: Optional[ProximityTrigger] = None,
) -> StateDefinition:
    """StateDefinition 생성 헬퍼 (animation_speed 기본값 = NPC_FRAME_MS)"""
    return StateDefinition(
        sprites=tuple(sprites),
        animation_speed=settings.NPC_FRAME_MS if animation_speed is None else animation_speed,
        duration=duration,
        next_state=next_state,
        transitions_to=dict(transitions_to or {}),
        directional_sprites={
            Direction(d): tuple(s) for d, s in (directional_sprites or {}).items()
        },
        proximity_trigger=proximity_trigger,
    )


def _to_position(value: PositionLike) -> Position:
    if isinstance(value, Position):
        return value
    x, y = value
    return Position(float(x), float(y))


def create_npc(
    *,
    id: str,
    name: str,
    position: PositionLike,
    sprite: str,
    dialogue: Iterable[DialogueNode] = (),
    direction: Direction = Direction.DOWN,
    behavior: NPCBehavior = NPCBehavior.STATIC,
    portrait_sprite: Optional[str] = None,
    scale: Optional[float] = None,
    interaction_radius: Optional[float] = None,
    collision_radius: float = 0.0,
    states: Optional[Mapping[str, StateDefinition]] = None,
    initial_state: str = "idle",
    friendship_config: Optional[FriendshipConfig] = None,
    daily_resource: Optional[DailyResourceConfig] = None,
    dialogue_expressions: Optional[Mapping[str, str]] = None,
    now: float = 0.0,
) -> NPC:
    """공통 NPC 생성. 잘못된 설정이면 NPCConfigError."""
    if not id:
        raise NPCConfigError("id 필수")
    radius = settings.DEFAULT_INTERACTION_RADIUS if interaction_radius is None else interaction_radius
    if radius <= 0:
        raise NPCConfigError(f"{id}: interaction_radius는 양수여야 함")
    if collision_radius < 0:
        raise NPCConfigError(f"{id}: collision_radius 음수")
    if daily_resource is not None and daily_resource.max_per_day < 1:
        raise NPCConfigError(f"{id}: daily_resource.max_per_day는 1 이상")

    animated = None
    if states:
        try:
            animated = AnimatedNPCStates(
                states,
                initial_state,
                now=now,
                recovery_margin=settings.PROXIMITY_RECOVERY_MARGIN,
            )
        except NPCConfigError as e:
            raise NPCConfigError(f"{id}: {e}") from e

    npc = NPC(
        id=id,
        name=name,
        position=_to_position(position),
        sprite=sprite,
        direction=Direction(direction),
        behavior=NPCBehavior(behavior),
        portrait_sprite=portrait_sprite,
        scale=settings.DEFAULT_NPC_SCALE if scale is None else scale,
        interaction_radius=radius,
        collision_radius=collision_radius,
        animated_states=animated,
        friendship_config=friendship_config,
        daily_resource=daily_resource,
        dialogue=tuple(dialogue),
        dialogue_expressions=dict(dialogue_expressions or {}),
    )
    logger.debug(f"NPC 생성: {id} ({npc.behavior.value}, 노드 {len(npc.dialogue)}개)")
    return npc


def create_static_npc(**config: Any) -> NPC:
    """제자리 NPC"""
    config["behavior"] = NPCBehavior.STATIC
    return create_npc(**config)


def create_wandering_npc(**config: Any) -> NPC:
    """배회 NPC. 상태 기계가 없으면 idle/walk 두 상태를 만든다."""
    config["behavior"] = NPCBehavior.WANDER
    if not config.get("states"):
        sprite = config.get("sprite")
        if not sprite:
            raise NPCConfigError(f"{config.get('id')}: sprite 필수")
        config["states"] = {
            "idle": state([sprite], duration=3000, next_state="walking"),
            "walking": state([sprite], duration=2000, next_state="idle"),
        }
        config["initial_state"] = "idle"
    return create_npc(**config)


# ── camelCase 콘텐츠 dict 변환 ──


def _trigger_from_config(raw: Mapping[str, Any], where: str) -> ProximityTrigger:
    try:
        return ProximityTrigger(
            radius=float(raw["radius"]),
            trigger_state=str(raw["triggerState"]),
            recovery_radius=(
                float(raw["recoveryRadius"]) if raw.get("recoveryRadius") is not None else None
            ),
            recovery_state=raw.get("recoveryState"),
            recovery_delay=float(raw.get("recoveryDelay", 0)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise NPCConfigError(f"{where}.proximityTrigger: {e}") from e


def state_from_config(raw: Mapping[str, Any], where: str = "state") -> StateDefinition:
    """{"sprites": [...], "animationSpeed": 280, "duration": ..., ...} → StateDefinition"""
    sprites = raw.get("sprites")
    if not sprites:
        raise NPCConfigError(f"{where}: sprites 누락")
    try:
        directional = {Direction(d): s for d, s in (raw.get("directionalSprites") or {}).items()}
    except ValueError as e:
        raise NPCConfigError(f"{where}.directionalSprites: {e}") from e
    trigger_raw = raw.get("proximityTrigger")
    return state(
        sprites,
        raw.get("animationSpeed"),
        duration=raw.get("duration"),
        next_state=raw.get("nextState"),
        transitions_to=raw.get("transitionsTo"),
        directional_sprites=directional,
        proximity_trigger=_trigger_from_config(trigger_raw, where) if trigger_raw else None,
    )


def _tier_rewards_from_config(raw: Mapping[str, Any], where: str) -> Tuple[TierReward, ...]:
    """{"acquaintance": [{"itemId": ..., "quantity": 3}]} 형식"""
    rewards: List[TierReward] = []
    try:
        for tier, items in raw.items():
            for item in items:
                quantity = int(item.get("quantity", 1))
                if quantity <= 0:
                    raise ValueError(f"quantity must be positive: {quantity}")
                rewards.append(TierReward(FriendshipTier(tier), item["itemId"], quantity))
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise NPCConfigError(f"{where}.tierRewards: {e}") from e
    return tuple(rewards)


def npc_from_config(raw: Mapping[str, Any], now: float = 0.0) -> NPC:
    """콘텐츠 dict 하나 → NPC (behavior에 따라 정적/배회 팩토리 선택)"""
    npc_id = raw.get("id")
    if not npc_id:
        raise NPCConfigError("NPC 설정에 id 없음")
    dialogue = parse_dialogue(raw.get("dialogue") or ())
    try:
        position = raw["position"]
        pos = (position["x"], position["y"]) if isinstance(position, Mapping) else position
        config: Dict[str, Any] = {
            "id": npc_id,
            "name": raw.get("name", npc_id),
            "position": pos,
            "sprite": raw["sprite"],
            "dialogue": dialogue,
            "direction": Direction(raw.get("direction", Direction.DOWN.value)),
            "portrait_sprite": raw.get("portraitSprite"),
            "scale": raw.get("scale"),
            "interaction_radius": raw.get("interactionRadius"),
            "collision_radius": float(raw.get("collisionRadius", 0.0)),
            "initial_state": raw.get("initialState", "idle"),
            "dialogue_expressions": raw.get("dialogueExpressions"),
            "now": now,
        }
    except (KeyError, TypeError, ValueError) as e:
        raise NPCConfigError(f"{npc_id}: {e}") from e

    if raw.get("states"):
        config["states"] = {
            name: state_from_config(s, f"{npc_id}.states.{name}")
            for name, s in raw["states"].items()
        }
    friendship = raw.get("friendshipConfig")
    if friendship:
        config["friendship_config"] = FriendshipConfig(
            can_befriend=bool(friendship.get("canBefriend", True)),
            starting_points=int(friendship.get("startingPoints", 0)),
            liked_categories=tuple(friendship.get("likedFoodTypes") or ()),
            crisis_id=friendship.get("crisisId"),
            tier_rewards=_tier_rewards_from_config(
                friendship.get("tierRewards") or {}, f"{npc_id}.friendshipConfig"
            ),
        )
    resource = raw.get("dailyResource")
    if resource:
        try:
            config["daily_resource"] = DailyResourceConfig(
                item_id=resource["itemId"],
                max_per_day=int(resource["maxPerDay"]),
                collect_message=resource.get("collectMessage", ""),
                empty_message=resource.get("emptyMessage", ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise NPCConfigError(f"{npc_id}.dailyResource: {e}") from e

    if raw.get("behavior") == NPCBehavior.WANDER.value:
        return create_wandering_npc(**config)
    if raw.get("behavior") == NPCBehavior.PATROL.value:
        config["behavior"] = NPCBehavior.PATROL
        return create_npc(**config)
    return create_static_npc(**config)


def load_npcs_json(path: Union[str, Path], now: float = 0.0) -> Dict[str, List[NPC]]:
    """{map_id: [NPC 설정...]} 형태 JSON 파일 로드"""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw: Dict[str, list] = json.load(f)
    if not isinstance(raw, dict):
        raise NPCConfigError(f"{path}: 최상위는 map_id → NPC 배열 객체여야 함")

    result: Dict[str, List[NPC]] = {}
    for map_id, entries in raw.items():
        result[map_id] = [npc_from_config(entry, now=now) for entry in entries]
    logger.info(
        "Loaded %d NPCs on %d maps from %s",
        sum(len(v) for v in result.values()),
        len(result),
        path,
    )
    return result
