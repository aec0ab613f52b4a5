"""대화 노드/응답 가시성 판정

순수 함수. WorldContext 스냅샷만 읽고 아무 상태도 바꾸지 않는다.
검사 순서: 퀘스트 → 우정 → 변신/물약 → 공유 이벤트 → 해금/요리 → 요리 분야.
required 하나라도 실패하거나 hidden-if 하나라도 충족되면 보이지 않는다.
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from src.core.dialogue.models import DialogueConditions, DialogueNode, DialogueResponse
from src.core.world.models import FriendshipTier, WorldContext, tier_rank


def _quest_gates(cond: DialogueConditions, ctx: WorldContext, npc_id: Optional[str]) -> bool:
    if cond.required_quest:
        if not ctx.is_quest_started(cond.required_quest):
            return False
        stage = ctx.quest_stage(cond.required_quest)
        minimum = cond.required_quest_stage if cond.required_quest_stage is not None else 1
        if stage < minimum:
            return False
        if cond.max_quest_stage is not None and stage > cond.max_quest_stage:
            return False
    if cond.hidden_if_quest_started and ctx.is_quest_started(cond.hidden_if_quest_started):
        return False
    if cond.hidden_if_quest_completed and ctx.is_quest_completed(
        cond.hidden_if_quest_completed
    ):
        return False
    return True


def _friendship_gates(
    cond: DialogueConditions, ctx: WorldContext, npc_id: Optional[str]
) -> bool:
    tier = ctx.friendship_tier(npc_id) if npc_id else FriendshipTier.STRANGER
    if cond.required_friendship_tier is not None:
        if tier_rank(tier) < tier_rank(cond.required_friendship_tier):
            return False
    if cond.max_friendship_tier is not None:
        if tier_rank(tier) > tier_rank(cond.max_friendship_tier):
            return False
    if cond.required_special_friend:
        if not (npc_id and ctx.is_special_friend(npc_id)):
            return False
    return True


def _magic_gates(cond: DialogueConditions, ctx: WorldContext, npc_id: Optional[str]) -> bool:
    active = ctx.transformation
    if cond.required_transformation and active != cond.required_transformation:
        return False
    if cond.hidden_if_transformed and active == cond.hidden_if_transformed:
        return False
    if cond.hidden_if_any_transformation and active:
        return False
    if cond.required_potion_effect and not ctx.has_potion_effect(cond.required_potion_effect):
        return False
    if cond.hidden_with_potion_effect and ctx.has_potion_effect(cond.hidden_with_potion_effect):
        return False
    return True


def _global_event_gates(
    cond: DialogueConditions, ctx: WorldContext, npc_id: Optional[str]
) -> bool:
    if cond.required_global_event and ctx.global_event_count(cond.required_global_event) < 1:
        return False
    req = cond.required_global_event_count
    if req is not None and ctx.global_event_count(req.event_type) < req.min_count:
        return False
    if cond.hidden_if_global_event and ctx.global_event_count(cond.hidden_if_global_event) >= 1:
        return False
    return True


def _unlock_gates(cond: DialogueConditions, ctx: WorldContext, npc_id: Optional[str]) -> bool:
    if cond.hidden_if_has_easel and ctx.has_easel:
        return False
    if cond.required_unlock and cond.required_unlock not in ctx.unlocks:
        return False
    if cond.hidden_if_unlocked and cond.hidden_if_unlocked in ctx.unlocks:
        return False
    if cond.required_recipe_unlocked and cond.required_recipe_unlocked not in ctx.unlocked_recipes:
        return False
    if cond.required_recipe_mastered and cond.required_recipe_mastered not in ctx.mastered_recipes:
        return False
    if cond.hidden_if_recipe_unlocked and cond.hidden_if_recipe_unlocked in ctx.unlocked_recipes:
        return False
    if cond.hidden_if_recipe_mastered and cond.hidden_if_recipe_mastered in ctx.mastered_recipes:
        return False
    return True


def _domain_gates(cond: DialogueConditions, ctx: WorldContext, npc_id: Optional[str]) -> bool:
    # 숙달된 분야는 시작된 것으로도 본다
    started = ctx.started_domains | ctx.mastered_domains
    if cond.required_domain_started and cond.required_domain_started not in started:
        return False
    if cond.required_domain_mastered and cond.required_domain_mastered not in ctx.mastered_domains:
        return False
    if cond.hidden_if_domain_started and cond.hidden_if_domain_started in started:
        return False
    if cond.hidden_if_domain_mastered and cond.hidden_if_domain_mastered in ctx.mastered_domains:
        return False
    # 분야를 시작했지만 전부 숙달하지는 않은 동안만 숨김
    if cond.hidden_if_any_domain_started and started and not ctx.all_domains_mastered:
        return False
    return True


_GATES: Tuple[Callable[[DialogueConditions, WorldContext, Optional[str]], bool], ...] = (
    _quest_gates,
    _friendship_gates,
    _magic_gates,
    _global_event_gates,
    _unlock_gates,
    _domain_gates,
)


def conditions_pass(
    cond: DialogueConditions, ctx: WorldContext, npc_id: Optional[str] = None
) -> bool:
    """모든 게이트 통과 여부. 비어 있는 조건은 항상 통과."""
    return all(gate(cond, ctx, npc_id) for gate in _GATES)


def is_node_visible(node: DialogueNode, ctx: WorldContext, npc_id: Optional[str] = None) -> bool:
    return conditions_pass(node.conditions, ctx, npc_id)


def is_response_visible(
    response: DialogueResponse, ctx: WorldContext, npc_id: Optional[str] = None
) -> bool:
    """응답 가시성. npc_id 없이 호출하면 우정 등급은 stranger로 본다."""
    return conditions_pass(response.conditions, ctx, npc_id)
