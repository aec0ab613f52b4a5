"""대사 변형 우선순위 테스트"""

from src.core.dialogue.models import DialogueNode
from src.core.dialogue.text_variants import render_node_text
from src.core.world.models import Season, TimeOfDay, Weather, WorldContext


def _full_node() -> DialogueNode:
    return DialogueNode(
        id="greeting",
        text="Hello.",
        seasonal_text={Season.WINTER: "Cold, isn't it?"},
        time_of_day_text={TimeOfDay.NIGHT: "It's late."},
        weather_text={Weather.SNOW: "Look at the snow!"},
        transformation_text={"fairy": "A fairy!"},
        potion_effect_text={"ghost": "Boo?"},
    )


class TestSeasonalFallback:
    def test_autumn_override(self):
        node = DialogueNode(id="greeting", text="Hi.", seasonal_text={Season.AUTUMN: "Leaves!"})
        assert render_node_text(node, WorldContext(season=Season.AUTUMN)) == "Leaves!"

    def test_missing_season_falls_back_to_default(self):
        node = DialogueNode(id="greeting", text="Hi.", seasonal_text={Season.AUTUMN: "Leaves!"})
        assert render_node_text(node, WorldContext(season=Season.SPRING)) == "Hi."


class TestPriority:
    def test_potion_beats_everything(self):
        ctx = WorldContext(
            season=Season.WINTER,
            time_of_day=TimeOfDay.NIGHT,
            weather=Weather.SNOW,
            transformation="fairy",
            potion_effects=frozenset({"ghost"}),
        )
        assert render_node_text(_full_node(), ctx) == "Boo?"

    def test_transformation_over_weather(self):
        ctx = WorldContext(
            season=Season.WINTER, time_of_day=TimeOfDay.NIGHT, weather=Weather.SNOW,
            transformation="fairy",
        )
        assert render_node_text(_full_node(), ctx) == "A fairy!"

    def test_weather_over_time_of_day(self):
        ctx = WorldContext(season=Season.WINTER, time_of_day=TimeOfDay.NIGHT, weather=Weather.SNOW)
        assert render_node_text(_full_node(), ctx) == "Look at the snow!"

    def test_time_of_day_over_season(self):
        ctx = WorldContext(season=Season.WINTER, time_of_day=TimeOfDay.NIGHT)
        assert render_node_text(_full_node(), ctx) == "It's late."

    def test_season_when_nothing_else_matches(self):
        ctx = WorldContext(season=Season.WINTER, time_of_day=TimeOfDay.DAY)
        assert render_node_text(_full_node(), ctx) == "Cold, isn't it?"

    def test_unmatched_key_falls_through(self):
        """선언된 범주라도 현재 값의 키가 없으면 다음 범주로"""
        ctx = WorldContext(
            season=Season.WINTER, weather=Weather.RAIN, transformation="cat",
            potion_effects=frozenset({"glow"}),
        )
        assert render_node_text(_full_node(), ctx) == "Cold, isn't it?"

    def test_no_overrides_returns_text(self):
        node = DialogueNode(id="greeting", text="Plain.")
        assert render_node_text(node, WorldContext(weather=Weather.STORM)) == "Plain."


class TestPotionOrder:
    def test_first_declared_active_effect_wins(self):
        node = DialogueNode(
            id="greeting",
            text="Hi.",
            potion_effect_text={"glow": "You're glowing!", "ghost": "Boo?"},
        )
        ctx = WorldContext(potion_effects=frozenset({"ghost", "glow"}))
        assert render_node_text(node, ctx) == "You're glowing!"
