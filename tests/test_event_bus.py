"""EventBus 테스트"""

from src.core.event_bus import MAX_DEPTH, EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.npc.models import FriendshipConfig


class TestSubscribeEmit:
    def test_basic_emit(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.MENU_OPENED, lambda e: received.append(e))
        bus.emit(
            GameEvent(event_type=EventTypes.MENU_OPENED, data={"npc_id": "cat"}, source="test")
        )
        assert len(received) == 1
        assert received[0].data["npc_id"] == "cat"

    def test_handlers_called_in_subscription_order(self):
        bus = EventBus()
        results = []
        bus.subscribe("evt", lambda e: results.append("a"))
        bus.subscribe("evt", lambda e: results.append("b"))
        bus.emit(GameEvent(event_type="evt", data={}, source="test"))
        assert results == ["a", "b"]

    def test_no_handlers(self):
        """구독자 없는 이벤트 발행 - 에러 없이 무시"""
        bus = EventBus()
        bus.emit(GameEvent(event_type="no_one_listens", data={}, source="test"))

    def test_unsubscribe_function(self):
        """subscribe가 돌려준 함수로 해제"""
        bus = EventBus()
        received = []
        unsubscribe = bus.subscribe("evt", lambda e: received.append(e))
        unsubscribe()
        bus.emit(GameEvent(event_type="evt", data={}, source="test"))
        assert received == []

    def test_unsubscribe_nonexistent(self):
        """미등록 핸들러 해제 - 경고만, 에러 없음"""
        bus = EventBus()
        bus.unsubscribe("evt", lambda e: None)


class TestDepthLimit:
    def test_max_depth_prevents_infinite_loop(self):
        bus = EventBus()
        call_count = 0

        def recursive_handler(event: GameEvent):
            nonlocal call_count
            call_count += 1
            # 다른 source로 발행해서 중복 체크를 우회
            bus.emit(GameEvent(event_type="chain", data={}, source=f"handler_{call_count}"))

        bus.subscribe("chain", recursive_handler)
        bus.emit(GameEvent(event_type="chain", data={}, source="origin"))

        assert call_count == MAX_DEPTH


class TestDuplicatePrevention:
    def test_same_source_same_event_blocked(self):
        bus = EventBus()
        count = 0

        def handler(event: GameEvent):
            nonlocal count
            count += 1
            bus.emit(GameEvent(event_type="evt", data={}, source="same_source"))

        bus.subscribe("evt", handler)
        bus.emit(GameEvent(event_type="evt", data={}, source="same_source"))
        assert count == 1

    def test_dedupe_key_distinguishes_targets(self):
        """같은 발행자라도 dedupe_key가 다르면 둘 다 전달"""
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.QUEST_STARTED, lambda e: received.append(e.data["quest_id"]))
        for quest_id in ("q1", "q2"):
            bus.emit(
                GameEvent(
                    event_type=EventTypes.QUEST_STARTED,
                    data={"quest_id": quest_id},
                    source="store",
                    dedupe_key=quest_id,
                )
            )
        assert received == ["q1", "q2"]


class TestResetChain:
    def test_reset_allows_re_emit(self):
        bus = EventBus()
        received = []
        bus.subscribe("re", lambda e: received.append(1))
        bus.emit(GameEvent(event_type="re", data={}, source="s"))
        bus.emit(GameEvent(event_type="re", data={}, source="s"))
        bus.reset_chain()
        bus.emit(GameEvent(event_type="re", data={}, source="s"))
        assert len(received) == 2


class TestHandlerError:
    def test_handler_exception_doesnt_stop_others(self):
        bus = EventBus()
        results = []

        def bad_handler(e):
            raise ValueError("boom")

        bus.subscribe("evt", bad_handler)
        bus.subscribe("evt", lambda e: results.append("ok"))
        bus.emit(GameEvent(event_type="evt", data={}, source="test"))
        assert results == ["ok"]


class TestClear:
    def test_clear_removes_all(self):
        bus = EventBus()
        bus.subscribe("a", lambda e: None)
        bus.subscribe("b", lambda e: None)
        assert bus.handler_count == 2
        bus.clear()
        assert bus.handler_count == 0


class TestStoreChain:
    def test_handler_reacts_within_same_pass(self, store, event_bus, recorded):
        """퀘스트 시작 구독자가 아이템을 지급하면 같은 패스에서 item_given까지 전파"""
        event_bus.subscribe(
            EventTypes.QUEST_STARTED, lambda e: store.give_item(f"{e.data['quest_id']}_map")
        )
        store.start_quest("cobwebs")
        assert [t for t, _ in recorded] == [EventTypes.QUEST_STARTED, EventTypes.ITEM_GIVEN]
        assert store.item_count("cobwebs_map") == 1

    def test_value_returning_changes_all_delivered(self, store, event_bus, recorded):
        """포인트가 같은 값으로 되돌아와도 변경마다 friendship_changed 전달"""
        store.register_friendship("cow", FriendshipConfig())
        store.add_friendship_points("cow", 100)
        store.add_friendship_points("cow", -100)
        store.add_friendship_points("cow", 100)
        changes = [d for t, d in recorded if t == EventTypes.FRIENDSHIP_CHANGED]
        assert [c["delta"] for c in changes] == [100, -100, 100]
        assert changes[-1]["points"] == 100

    def test_item_count_repeat_delivered(self, store, event_bus, recorded):
        store.register_friendship("cow", FriendshipConfig())
        store.give_item("wheat")
        store.give_gift("cow", "wheat")
        store.give_item("wheat")
        assert [t for t, _ in recorded].count(EventTypes.ITEM_GIVEN) == 2
