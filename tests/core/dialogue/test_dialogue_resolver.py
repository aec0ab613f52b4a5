"""대화 노드 해석 테스트"""

import logging

from src.core.dialogue.models import DialogueConditions, DialogueNode, DialogueResponse
from src.core.dialogue.resolver import (
    DialogueTable,
    filter_responses,
    resolve_active_node,
    resolve_view,
)
from src.core.world.models import FriendshipTier, Season, WorldContext

NPC = "cow"


def _table() -> DialogueTable:
    return DialogueTable(
        [
            DialogueNode(id="greeting", text="Moo."),
            DialogueNode(
                id="pat",
                text="Daisy looks content.",
                expression="happy",
                conditions=DialogueConditions(
                    required_friendship_tier=FriendshipTier.ACQUAINTANCE
                ),
            ),
            DialogueNode(
                id="pat",
                text="Daisy eyes you warily.",
                conditions=DialogueConditions(max_friendship_tier=FriendshipTier.STRANGER),
            ),
        ],
        owner=NPC,
    )


class TestDialogueTable:
    def test_groups_by_id_in_declaration_order(self):
        table = _table()
        assert table.ids() == ("greeting", "pat")
        assert [n.text for n in table.candidates("pat")] == [
            "Daisy looks content.",
            "Daisy eyes you warily.",
        ]
        assert len(table) == 3

    def test_unknown_id(self):
        table = _table()
        assert not table.has_id("missing")
        assert table.candidates("missing") == ()


class TestResolveActiveNode:
    def test_specific_variant_by_tier(self):
        table = _table()
        stranger = WorldContext()
        friend = WorldContext(friendship_tiers={NPC: FriendshipTier.ACQUAINTANCE})
        assert resolve_active_node(table, "pat", stranger).text == "Daisy eyes you warily."
        assert resolve_active_node(table, "pat", friend).text == "Daisy looks content."

    def test_deterministic(self):
        table = _table()
        ctx = WorldContext(season=Season.SUMMER)
        first = resolve_active_node(table, "greeting", ctx)
        for _ in range(10):
            assert resolve_active_node(table, "greeting", ctx) is first

    def test_none_when_nothing_visible(self):
        table = DialogueTable(
            [
                DialogueNode(
                    id="secret",
                    text="...",
                    conditions=DialogueConditions(required_special_friend=True),
                )
            ],
            owner=NPC,
        )
        assert resolve_active_node(table, "secret", WorldContext()) is None
        assert resolve_active_node(table, "missing", WorldContext()) is None

    def test_ambiguous_picks_first_and_warns_once(self, caplog):
        table = DialogueTable(
            [DialogueNode(id="greeting", text="one"), DialogueNode(id="greeting", text="two")],
            owner=NPC,
        )
        with caplog.at_level(logging.WARNING, logger="src.core.dialogue.resolver"):
            assert resolve_active_node(table, "greeting", WorldContext()).text == "one"
            assert resolve_active_node(table, "greeting", WorldContext()).text == "one"
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1

    def test_identical_nodes_do_not_confuse_positions(self):
        """동일한 값의 노드가 있어도 선언 순서 첫 노드"""
        node = DialogueNode(id="greeting", text="same")
        table = DialogueTable([node, node], owner=NPC)
        assert resolve_active_node(table, "greeting", WorldContext()) is node


class TestFilterResponses:
    def test_keeps_declared_order(self):
        node = DialogueNode(
            id="greeting",
            text="Hi.",
            responses=(
                DialogueResponse(text="a"),
                DialogueResponse(
                    text="hidden",
                    conditions=DialogueConditions(required_unlock="easel"),
                ),
                DialogueResponse(text="b"),
            ),
        )
        assert [r.text for r in filter_responses(node, WorldContext(), NPC)] == ["a", "b"]


class TestResolveView:
    def test_view_combines_text_and_responses(self):
        table = DialogueTable(
            [
                DialogueNode(
                    id="greeting",
                    text="Hello.",
                    seasonal_text={Season.AUTUMN: "Crisp air."},
                    expression="smile",
                    responses=(DialogueResponse(text="Hi", next_id="greeting"),),
                )
            ],
            owner=NPC,
        )
        view = resolve_view(table, "greeting", WorldContext(season=Season.AUTUMN))
        assert view.node_id == "greeting"
        assert view.text == "Crisp air."
        assert view.expression == "smile"
        assert [r.text for r in view.responses] == ["Hi"]

    def test_view_none_when_not_visible(self):
        assert resolve_view(_table(), "missing", WorldContext()) is None
