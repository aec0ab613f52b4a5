"""대화 데이터 작성 검증

런타임 해석기는 내용 오류에도 멈추지 않는다 (첫 노드 사용 / 대화 종료).
대신 콘텐츠 작성 시점에 이 검증을 돌려 다음을 찾는다:
- dangling_next_id: 응답의 next_id가 가리키는 id가 아예 없음
- never_visible: 표본 컨텍스트 어디에서도 보이지 않는 id
- ambiguous: 어떤 표본 컨텍스트에서 같은 id 노드가 둘 이상 보임

계절/시간대/날씨는 가시성에 영향이 없으므로 표본 축에서 제외한다.
"""

import logging
from dataclasses import dataclass
from itertools import islice, product
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from src.core.dialogue.models import DialogueConditions, DialogueNode
from src.core.dialogue.resolver import DialogueTable
from src.core.dialogue.conditions import is_node_visible
from src.core.world.models import COOKING_DOMAINS, FRIENDSHIP_TIER_ORDER, WorldContext

logger = logging.getLogger(__name__)

MAX_SAMPLE_CONTEXTS = 4096

ISSUE_DANGLING_NEXT_ID = "dangling_next_id"
ISSUE_NEVER_VISIBLE = "never_visible"
ISSUE_AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class DialogueIssue:
    """검증 결과 1건"""

    npc_id: str
    kind: str
    node_id: str
    detail: str = ""


def _all_conditions(nodes: Sequence[DialogueNode]) -> Iterator[DialogueConditions]:
    for node in nodes:
        yield node.conditions
        for response in node.responses:
            yield response.conditions


def _quest_axis(quest_id: str, stages: Set[int]) -> List[Tuple[str, int, bool]]:
    """퀘스트 하나의 표본 상태: (id, 단계, 완료 여부)"""
    values = sorted(stages | {0, 1})
    top = values[-1]
    axis = [(quest_id, s, False) for s in values]
    axis.append((quest_id, top + 1, False))
    axis.append((quest_id, top, True))
    return axis


def sample_contexts(
    nodes: Sequence[DialogueNode],
    npc_id: str = "",
    limit: int = MAX_SAMPLE_CONTEXTS,
) -> List[WorldContext]:
    """노드들이 참조하는 게이트 값으로 표본 컨텍스트 격자 생성

    참조되지 않은 축은 기본값 하나만 쓴다. limit 초과분은 잘린다.
    """
    quests: Dict[str, Set[int]] = {}
    transformations: Set[str] = set()
    potions: Set[str] = set()
    events: Dict[str, Set[int]] = {}
    unlocks: Set[str] = set()
    recipes: Set[str] = set()
    domains: Set[str] = set()
    needs_special = False
    needs_any_transformation = False
    needs_any_domain = False

    for cond in _all_conditions(nodes):
        if cond.required_quest:
            stages = quests.setdefault(cond.required_quest, set())
            for s in (cond.required_quest_stage, cond.max_quest_stage):
                if s is not None:
                    stages.add(s)
        for qid in (cond.hidden_if_quest_started, cond.hidden_if_quest_completed):
            if qid:
                quests.setdefault(qid, set())
        for name in (cond.required_transformation, cond.hidden_if_transformed):
            if name:
                transformations.add(name)
        needs_any_transformation = needs_any_transformation or cond.hidden_if_any_transformation
        for effect in (cond.required_potion_effect, cond.hidden_with_potion_effect):
            if effect:
                potions.add(effect)
        for etype in (cond.required_global_event, cond.hidden_if_global_event):
            if etype:
                events.setdefault(etype, set()).add(1)
        if cond.required_global_event_count is not None:
            req = cond.required_global_event_count
            events.setdefault(req.event_type, set()).add(req.min_count)
        if cond.hidden_if_has_easel:
            unlocks.add("easel")
        for flag in (cond.required_unlock, cond.hidden_if_unlocked):
            if flag:
                unlocks.add(flag)
        for recipe in (
            cond.required_recipe_unlocked,
            cond.required_recipe_mastered,
            cond.hidden_if_recipe_unlocked,
            cond.hidden_if_recipe_mastered,
        ):
            if recipe:
                recipes.add(recipe)
        for domain in (
            cond.required_domain_started,
            cond.required_domain_mastered,
            cond.hidden_if_domain_started,
            cond.hidden_if_domain_mastered,
        ):
            if domain:
                domains.add(domain)
        needs_any_domain = needs_any_domain or cond.hidden_if_any_domain_started
        needs_special = needs_special or cond.required_special_friend

    for node in nodes:
        transformations.update(node.transformation_text)
        potions.update(node.potion_effect_text)
    if needs_any_transformation and not transformations:
        transformations.add("transformed")
    if needs_any_domain and not domains:
        domains.add(COOKING_DOMAINS[0])

    axes: List[list] = [
        list(FRIENDSHIP_TIER_ORDER),
        [False, True] if needs_special else [False],
        [None] + sorted(transformations),
        [frozenset()] + [frozenset({p}) for p in sorted(potions)],
    ]
    quest_ids = sorted(quests)
    axes.extend(_quest_axis(q, quests[q]) for q in quest_ids)
    event_ids = sorted(events)
    axes.extend([(e, c) for c in sorted(events[e] | {0})] for e in event_ids)
    flags = sorted(unlocks)
    axes.extend([(f, False), (f, True)] for f in flags)
    recipe_ids = sorted(recipes)
    # 요리: 없음 / 해금 / 숙련(해금 포함). 분야도 없음 / 시작 / 숙달
    axes.extend([(r, 0), (r, 1), (r, 2)] for r in recipe_ids)
    domain_ids = sorted(domains)
    axes.extend([(d, 0), (d, 1), (d, 2)] for d in domain_ids)

    contexts: List[WorldContext] = []
    for combo in islice(product(*axes), limit):
        tier, special, transformation, potion = combo[:4]
        rest = combo[4:]
        quest_part = rest[: len(quest_ids)]
        rest = rest[len(quest_ids):]
        event_part = rest[: len(event_ids)]
        rest = rest[len(event_ids):]
        flag_part = rest[: len(flags)]
        rest = rest[len(flags):]
        recipe_part = rest[: len(recipe_ids)]
        domain_part = rest[len(recipe_ids):]

        contexts.append(
            WorldContext(
                transformation=transformation,
                potion_effects=potion,
                friendship_tiers={npc_id: tier} if npc_id else {},
                special_friends=frozenset({npc_id}) if special and npc_id else frozenset(),
                quest_stages={q: s for q, s, _ in quest_part},
                completed_quests=frozenset(q for q, _, done in quest_part if done),
                global_events={e: c for e, c in event_part if c},
                unlocks=frozenset(f for f, on in flag_part if on),
                unlocked_recipes=frozenset(r for r, lvl in recipe_part if lvl >= 1),
                mastered_recipes=frozenset(r for r, lvl in recipe_part if lvl >= 2),
                started_domains=frozenset(d for d, lvl in domain_part if lvl == 1),
                mastered_domains=frozenset(d for d, lvl in domain_part if lvl >= 2),
            )
        )
    return contexts


def validate_dialogue(
    npc_id: str,
    nodes: Sequence[DialogueNode],
    contexts: Optional[Iterable[WorldContext]] = None,
) -> List[DialogueIssue]:
    """NPC 대화 데이터 검증. 문제 목록 반환 (비어 있으면 정상)."""
    table = DialogueTable(nodes, owner=npc_id)
    issues: List[DialogueIssue] = []

    for node in table.nodes:
        for target in node.response_targets():
            if not table.has_id(target):
                issues.append(
                    DialogueIssue(
                        npc_id, ISSUE_DANGLING_NEXT_ID, node.id, f"next_id={target}"
                    )
                )

    samples = list(contexts) if contexts is not None else sample_contexts(nodes, npc_id)
    seen_visible: Set[str] = set()
    ambiguous: Set[str] = set()
    for ctx in samples:
        for node_id in table.ids():
            visible = [n for n in table.candidates(node_id) if is_node_visible(n, ctx, npc_id)]
            if visible:
                seen_visible.add(node_id)
            if len(visible) > 1 and node_id not in ambiguous:
                ambiguous.add(node_id)
                issues.append(
                    DialogueIssue(
                        npc_id,
                        ISSUE_AMBIGUOUS,
                        node_id,
                        f"{len(visible)}개 노드 동시 적용",
                    )
                )

    for node_id in table.ids():
        if node_id not in seen_visible:
            issues.append(DialogueIssue(npc_id, ISSUE_NEVER_VISIBLE, node_id))

    for issue in issues:
        logger.info(f"대화 검증: {issue.npc_id}/{issue.node_id} {issue.kind} {issue.detail}")
    return issues
