"""대화 데이터 작성 검증 테스트"""

from src.core.dialogue.models import (
    DialogueConditions,
    DialogueNode,
    DialogueResponse,
    GlobalEventRequirement,
)
from src.core.dialogue.validation import (
    ISSUE_AMBIGUOUS,
    ISSUE_DANGLING_NEXT_ID,
    ISSUE_NEVER_VISIBLE,
    sample_contexts,
    validate_dialogue,
)
from src.core.world.models import FriendshipTier, WorldContext

NPC = "witch"


def _kinds(issues):
    return {(i.kind, i.node_id) for i in issues}


class TestValidateDialogue:
    def test_clean_dialogue_has_no_issues(self):
        nodes = [
            DialogueNode(
                id="greeting",
                text="Hi",
                responses=(DialogueResponse(text="Chat", next_id="chat"),),
            ),
            DialogueNode(
                id="chat",
                text="Good friend!",
                conditions=DialogueConditions(required_friendship_tier=FriendshipTier.GOOD_FRIEND),
            ),
            DialogueNode(
                id="chat",
                text="Hm.",
                conditions=DialogueConditions(max_friendship_tier=FriendshipTier.ACQUAINTANCE),
            ),
        ]
        assert validate_dialogue(NPC, nodes) == []

    def test_dangling_next_id(self):
        nodes = [
            DialogueNode(
                id="greeting",
                text="Hi",
                responses=(DialogueResponse(text="?", next_id="nowhere"),),
            )
        ]
        assert (ISSUE_DANGLING_NEXT_ID, "greeting") in _kinds(validate_dialogue(NPC, nodes))

    def test_overlapping_gates_are_ambiguous(self):
        """acquaintance 이상 + 조건 없음 → acquaintance에서 둘 다 보임"""
        nodes = [
            DialogueNode(
                id="greeting",
                text="Friend!",
                conditions=DialogueConditions(
                    required_friendship_tier=FriendshipTier.ACQUAINTANCE
                ),
            ),
            DialogueNode(id="greeting", text="Hello."),
        ]
        issues = validate_dialogue(NPC, nodes)
        assert _kinds(issues) == {(ISSUE_AMBIGUOUS, "greeting")}

    def test_never_visible(self):
        nodes = [
            DialogueNode(id="greeting", text="Hi"),
            DialogueNode(
                id="impossible",
                text="...",
                conditions=DialogueConditions(
                    required_friendship_tier=FriendshipTier.GOOD_FRIEND,
                    max_friendship_tier=FriendshipTier.STRANGER,
                ),
            ),
        ]
        assert (ISSUE_NEVER_VISIBLE, "impossible") in _kinds(validate_dialogue(NPC, nodes))

    def test_explicit_contexts(self):
        nodes = [
            DialogueNode(
                id="greeting",
                text="Friend!",
                conditions=DialogueConditions(required_friendship_tier=FriendshipTier.ACQUAINTANCE),
            ),
            DialogueNode(id="greeting", text="Hello."),
        ]
        # stranger만 보면 모호하지 않다
        assert validate_dialogue(NPC, nodes, contexts=[WorldContext()]) == []


class TestSampleContexts:
    def test_unconstrained_grid_covers_tiers(self):
        contexts = sample_contexts([DialogueNode(id="greeting", text="Hi")], NPC)
        assert {c.friendship_tier(NPC) for c in contexts} == set(FriendshipTier)

    def test_quest_axis_includes_boundaries(self):
        nodes = [
            DialogueNode(
                id="greeting",
                text="Hi",
                conditions=DialogueConditions(
                    required_quest="cobwebs", required_quest_stage=2, max_quest_stage=3
                ),
            )
        ]
        stages = {c.quest_stage("cobwebs") for c in sample_contexts(nodes, NPC)}
        assert {0, 1, 2, 3, 4} <= stages
        assert any(c.is_quest_completed("cobwebs") for c in sample_contexts(nodes, NPC))

    def test_global_event_counts(self):
        nodes = [
            DialogueNode(
                id="greeting",
                text="Hi",
                conditions=DialogueConditions(
                    required_global_event_count=GlobalEventRequirement("lantern", 3)
                ),
            )
        ]
        counts = {c.global_event_count("lantern") for c in sample_contexts(nodes, NPC)}
        assert counts == {0, 3}

    def test_any_transformation_gets_a_sample(self):
        nodes = [
            DialogueNode(
                id="greeting",
                text="Hi",
                conditions=DialogueConditions(hidden_if_any_transformation=True),
            )
        ]
        assert {c.transformation for c in sample_contexts(nodes, NPC)} == {None, "transformed"}

    def test_domain_axis(self):
        nodes = [
            DialogueNode(
                id="greeting",
                text="Hi",
                conditions=DialogueConditions(required_domain_mastered="baking"),
            )
        ]
        states = {
            (c.started_domains, c.mastered_domains) for c in sample_contexts(nodes, NPC)
        }
        assert states == {
            (frozenset(), frozenset()),
            (frozenset({"baking"}), frozenset()),
            (frozenset(), frozenset({"baking"})),
        }

    def test_limit(self):
        nodes = [
            DialogueNode(
                id="greeting",
                text="Hi",
                conditions=DialogueConditions(
                    required_unlock=f"u{i}", required_recipe_unlocked=f"r{i}"
                ),
            )
            for i in range(8)
        ]
        assert len(sample_contexts(nodes, NPC, limit=100)) == 100
