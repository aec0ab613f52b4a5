"""GameStateStore - 퀘스트/우정/인벤토리/해금 상태 저장소

대화와 상호작용 코어는 이 저장소를 읽어 WorldContext를 만들고,
응답 액션은 이 저장소를 통해서만 상태를 바꾼다.
변경은 모두 EventBus로 알린다 (데이터는 ID만).
세이브/로드는 범위 밖이라 메모리에만 보관한다.
"""

from typing import Dict, Iterable, List, Optional, Set

from src.core.dialogue.models import ActionKind, ResponseAction
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.friendship.models import (
    DAILY_TALK_POINTS,
    QUEST_POINTS,
    FriendshipRecord,
    clamp_points,
    gift_points,
)
from src.core.interaction.models import ResourceResult
from src.core.interaction.sources import DailyResourceLedger
from src.core.logging import get_logger
from src.core.npc.models import DailyResourceConfig, FriendshipConfig
from src.core.world.models import (
    FriendshipTier,
    Season,
    TimeOfDay,
    Weather,
    WorldContext,
)

logger = get_logger(__name__)

SOURCE = "game_state_store"


class GameStateStore(DailyResourceLedger):
    """게임 진행 상태 (메모리)"""

    def __init__(self, event_bus: Optional[EventBus] = None) -> None:
        self._bus = event_bus

        self.current_day: int = 0
        self.season: Season = Season.SPRING
        self.time_of_day: TimeOfDay = TimeOfDay.DAY
        self.weather: Weather = Weather.CLEAR

        self.transformation: Optional[str] = None
        self._potion_effects: Set[str] = set()

        self._quest_stages: Dict[str, int] = {}
        self._completed_quests: Set[str] = set()

        self._friendships: Dict[str, FriendshipRecord] = {}
        self._friendship_configs: Dict[str, FriendshipConfig] = {}

        self._inventory: Dict[str, int] = {}
        self._unlocks: Set[str] = set()
        self._unlocked_recipes: Set[str] = set()
        self._mastered_recipes: Set[str] = set()
        self._started_domains: Set[str] = set()
        self._mastered_domains: Set[str] = set()
        self._global_events: Dict[str, int] = {}

        # npc_id → 오늘 수집한 개수
        self._daily_collected: Dict[str, int] = {}

        # 값이 되돌아가는 변경(포인트, 아이템 개수)의 dedupe_key용 일련번호
        self._mutation_seq = 0

    def _next_seq(self) -> int:
        self._mutation_seq += 1
        return self._mutation_seq

    def _emit(self, event_type: str, data: dict, dedupe_key: str = "") -> None:
        if self._bus is None:
            return
        self._bus.emit(
            GameEvent(event_type=event_type, data=data, source=SOURCE, dedupe_key=dedupe_key)
        )

    # ── 컨텍스트 ─────────────────────────────────────────────

    def build_context(
        self,
        season: Optional[Season] = None,
        time_of_day: Optional[TimeOfDay] = None,
        weather: Optional[Weather] = None,
    ) -> WorldContext:
        """현재 상태의 읽기 전용 스냅샷. 인자를 주면 해당 값만 덮어쓴다."""
        return WorldContext(
            season=season or self.season,
            time_of_day=time_of_day or self.time_of_day,
            weather=weather or self.weather,
            transformation=self.transformation,
            potion_effects=frozenset(self._potion_effects),
            friendship_tiers={npc_id: r.tier for npc_id, r in self._friendships.items()},
            special_friends=frozenset(
                npc_id for npc_id, r in self._friendships.items() if r.is_special_friend
            ),
            quest_stages=dict(self._quest_stages),
            completed_quests=frozenset(self._completed_quests),
            global_events=dict(self._global_events),
            unlocks=frozenset(self._unlocks),
            unlocked_recipes=frozenset(self._unlocked_recipes),
            mastered_recipes=frozenset(self._mastered_recipes),
            started_domains=frozenset(self._started_domains),
            mastered_domains=frozenset(self._mastered_domains),
        )

    def advance_day(self) -> int:
        """하루 경과. 일일 자원 수집 기록 초기화."""
        self.current_day += 1
        self._daily_collected.clear()
        logger.info(f"Day advanced: {self.current_day}")
        return self.current_day

    # ── 변신 / 물약 ──────────────────────────────────────────

    def set_transformation(self, transformation: Optional[str]) -> None:
        self.transformation = transformation or None

    def add_potion_effect(self, effect: str) -> None:
        self._potion_effects.add(effect)

    def remove_potion_effect(self, effect: str) -> bool:
        if effect not in self._potion_effects:
            return False
        self._potion_effects.discard(effect)
        return True

    # ── 퀘스트 ───────────────────────────────────────────────

    def quest_stage(self, quest_id: str) -> int:
        return self._quest_stages.get(quest_id, 0)

    def is_quest_completed(self, quest_id: str) -> bool:
        return quest_id in self._completed_quests

    def start_quest(self, quest_id: str) -> bool:
        """단계 1로 시작. 이미 시작됐으면 False."""
        if self.quest_stage(quest_id) >= 1:
            return False
        self._quest_stages[quest_id] = 1
        logger.info(f"Quest started: {quest_id}")
        self._emit(EventTypes.QUEST_STARTED, {"quest_id": quest_id}, quest_id)
        return True

    def set_quest_stage(self, quest_id: str, stage: int) -> None:
        if stage < 0:
            raise ValueError(f"quest stage must be >= 0: {stage}")
        before = self.quest_stage(quest_id)
        if before == stage:
            return
        self._quest_stages[quest_id] = stage
        logger.info(f"Quest stage: {quest_id} {before} → {stage}")
        self._emit(
            EventTypes.QUEST_STAGE_CHANGED,
            {"quest_id": quest_id, "from_stage": before, "to_stage": stage},
            f"{quest_id}:{stage}",
        )

    def advance_quest(self, quest_id: str) -> int:
        """단계 +1. 시작 전이면 시작 처리."""
        if self.quest_stage(quest_id) < 1:
            self.start_quest(quest_id)
            return 1
        stage = self.quest_stage(quest_id) + 1
        self.set_quest_stage(quest_id, stage)
        return stage

    def complete_quest(self, quest_id: str, npc_id: Optional[str] = None) -> bool:
        """완료 처리. npc_id가 있으면 그 NPC에게 퀘스트 우정 포인트."""
        if quest_id in self._completed_quests:
            return False
        if self.quest_stage(quest_id) < 1:
            self._quest_stages[quest_id] = 1
        self._completed_quests.add(quest_id)
        logger.info(f"Quest completed: {quest_id}")
        self._emit(EventTypes.QUEST_COMPLETED, {"quest_id": quest_id}, quest_id)
        if npc_id and self.can_befriend(npc_id):
            self.add_friendship_points(npc_id, QUEST_POINTS)
        return True

    # ── 인벤토리 / 해금 ──────────────────────────────────────

    def item_count(self, item_id: str) -> int:
        return self._inventory.get(item_id, 0)

    def give_item(self, item_id: str, quantity: int = 1) -> int:
        if quantity <= 0:
            raise ValueError(f"quantity must be positive: {quantity}")
        self._inventory[item_id] = self.item_count(item_id) + quantity
        logger.info(f"Item given: {item_id} x{quantity}")
        self._emit(
            EventTypes.ITEM_GIVEN,
            {"item_id": item_id, "quantity": quantity},
            f"{item_id}:{self._next_seq()}",
        )
        return self._inventory[item_id]

    def has_unlock(self, unlock: str) -> bool:
        return unlock in self._unlocks

    def grant_unlock(self, unlock: str) -> bool:
        if unlock in self._unlocks:
            return False
        self._unlocks.add(unlock)
        logger.info(f"Unlocked: {unlock}")
        self._emit(EventTypes.FEATURE_UNLOCKED, {"unlock": unlock}, unlock)
        return True

    def unlock_recipe(self, recipe_id: str) -> None:
        self._unlocked_recipes.add(recipe_id)

    def master_recipe(self, recipe_id: str) -> None:
        self._unlocked_recipes.add(recipe_id)
        self._mastered_recipes.add(recipe_id)

    def start_domain(self, domain: str) -> None:
        """요리 분야 시작 (분야의 첫 레시피 해금)"""
        self._started_domains.add(domain)

    def master_domain(self, domain: str) -> None:
        self._started_domains.add(domain)
        self._mastered_domains.add(domain)

    # ── 공유 월드 이벤트 ─────────────────────────────────────

    def record_global_event(self, event_type: str) -> int:
        count = self._global_events.get(event_type, 0) + 1
        self._global_events[event_type] = count
        self._emit(
            EventTypes.GLOBAL_EVENT_RECORDED,
            {"event_type": event_type, "count": count},
            f"{event_type}:{count}",
        )
        return count

    # ── 우정 ─────────────────────────────────────────────────

    def register_friendship(self, npc_id: str, config: Optional[FriendshipConfig]) -> None:
        """NPC 우정 설정 등록. 처음이면 시작 포인트로 기록 생성."""
        if config is None:
            return
        self._friendship_configs[npc_id] = config
        if config.can_befriend and npc_id not in self._friendships:
            self._friendships[npc_id] = FriendshipRecord(
                npc_id=npc_id, points=clamp_points(config.starting_points)
            )

    def can_befriend(self, npc_id: str) -> bool:
        config = self._friendship_configs.get(npc_id)
        return config is not None and config.can_befriend

    def friendship(self, npc_id: str) -> Optional[FriendshipRecord]:
        return self._friendships.get(npc_id)

    def friendships(self) -> List[FriendshipRecord]:
        return list(self._friendships.values())

    def add_friendship_points(self, npc_id: str, amount: int) -> int:
        """포인트 가감. 실제 변화량 반환 (우정 불가 NPC면 0)."""
        record = self._friendships.get(npc_id)
        if record is None:
            return 0
        tier_before: FriendshipTier = record.tier
        delta = record.add_points(amount)
        if delta == 0:
            return 0
        self._emit(
            EventTypes.FRIENDSHIP_CHANGED,
            {"npc_id": npc_id, "delta": delta, "points": record.points},
            f"{npc_id}:{self._next_seq()}",
        )
        if record.tier != tier_before:
            logger.info(f"Friendship tier: {npc_id} {tier_before.value} → {record.tier.value}")
            self._emit(
                EventTypes.FRIENDSHIP_TIER_CHANGED,
                {"npc_id": npc_id, "from_tier": tier_before.value, "to_tier": record.tier.value},
                f"{npc_id}:{self._next_seq()}",
            )
            self._give_tier_reward(npc_id, record)
        return delta

    def _give_tier_reward(self, npc_id: str, record: FriendshipRecord) -> None:
        """새 단계의 보상 아이템 지급. NPC·단계별로 한 번만."""
        config = self._friendship_configs.get(npc_id)
        rewards = config.rewards_for(record.tier) if config else ()
        reward_key = f"{npc_id}_{record.tier.value}"
        if not rewards or reward_key in record.rewards_received:
            return
        record.rewards_received.append(reward_key)
        for reward in rewards:
            self.give_item(reward.item_id, reward.quantity)
        logger.info(f"Tier reward: {npc_id} {record.tier.value} ({len(rewards)} items)")

    def record_daily_talk(self, npc_id: str) -> int:
        """오늘 첫 대화면 보너스 포인트. 지급한 포인트 반환."""
        record = self._friendships.get(npc_id)
        if record is None or record.talked_on(self.current_day):
            return 0
        record.last_talked_day = self.current_day
        return self.add_friendship_points(npc_id, DAILY_TALK_POINTS)

    def give_gift(self, npc_id: str, item_id: str, item_category: str = "") -> int:
        """선물 1개 소모 + 포인트. 인벤토리에 없거나 우정 불가면 0."""
        if not self.can_befriend(npc_id) or self.item_count(item_id) <= 0:
            return 0
        self._inventory[item_id] -= 1
        if self._inventory[item_id] == 0:
            del self._inventory[item_id]
        liked: Iterable[str] = self._friendship_configs[npc_id].liked_categories
        return self.add_friendship_points(npc_id, gift_points(item_category, liked))

    def set_special_friend(self, npc_id: str, value: bool = True) -> bool:
        record = self._friendships.get(npc_id)
        if record is None:
            return False
        record.is_special_friend = value
        return True

    # ── 일일 자원 ────────────────────────────────────────────

    def daily_collected(self, npc_id: str) -> int:
        return self._daily_collected.get(npc_id, 0)

    def collect_daily_resource(self, npc_id: str, config: DailyResourceConfig) -> ResourceResult:
        collected = self.daily_collected(npc_id)
        if collected >= config.max_per_day:
            return ResourceResult(
                success=False,
                message=config.empty_message or "Nothing left today.",
            )
        self._daily_collected[npc_id] = collected + 1
        self.give_item(config.item_id, 1)
        return ResourceResult(
            success=True,
            message=config.collect_message or f"Collected {config.item_id.replace('_', ' ')}.",
        )

    # ── 응답 액션 ────────────────────────────────────────────

    def apply_action(self, action: ResponseAction, npc_id: Optional[str] = None) -> None:
        """응답 액션 1건 적용"""
        if action.kind == ActionKind.START_QUEST:
            self.start_quest(action.quest_id)
        elif action.kind == ActionKind.ADVANCE_QUEST:
            self.advance_quest(action.quest_id)
        elif action.kind == ActionKind.COMPLETE_QUEST:
            self.complete_quest(action.quest_id, npc_id=npc_id)
        elif action.kind == ActionKind.SET_QUEST_STAGE:
            self.set_quest_stage(action.quest_id, action.stage)
        elif action.kind == ActionKind.GIVE_ITEM:
            self.give_item(action.item_id, action.quantity)
        elif action.kind == ActionKind.GRANT_UNLOCK:
            self.grant_unlock(action.unlock)
        else:
            logger.warning(f"Unknown response action: {action.kind}")
