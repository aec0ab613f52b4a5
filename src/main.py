"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.dialogue import router as dialogue_router
from src.api.health import router as health_router
from src.api.interaction import router as interaction_router
from src.config import settings
from src.core.event_bus import EventBus
from src.core.interaction.aggregator import InteractionAggregator
from src.core.interaction.presenter import InteractionPresenter
from src.core.interaction.sources import NPCInteractionSource
from src.core.logging import get_logger, setup_logging
from src.core.npc.factory import load_npcs_json
from src.core.scheduler import MonotonicClock, Scheduler
from src.services.dialogue_service import DialogueService
from src.services.game_state_store import GameStateStore
from src.services.npc_registry import NPCRegistry

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    event_bus = EventBus()
    scheduler = Scheduler(MonotonicClock())
    app.state.event_bus = event_bus
    app.state.scheduler = scheduler

    # 상태 저장소 + NPC 레지스트리
    logger.info("Initializing GameStateStore and NPCRegistry...")
    store = GameStateStore(event_bus)
    registry = NPCRegistry(event_bus)
    if settings.NPC_DATA_PATH:
        for map_id, npcs in load_npcs_json(settings.NPC_DATA_PATH).items():
            registry.register_all(map_id, npcs)
            for npc in npcs:
                store.register_friendship(npc.id, npc.friendship_config)
    registry.set_current_map(settings.START_MAP_ID)
    app.state.store = store
    app.state.npc_registry = registry
    logger.info(f"NPCRegistry initialized ({len(registry)} NPCs).")

    # DialogueService 초기화
    app.state.dialogue_service = DialogueService(
        store=store,
        npc_lookup=registry.get_npc,
        event_bus=event_bus,
    )

    # 상호작용 집계기 + 프레젠터
    aggregator = InteractionAggregator()
    aggregator.register(NPCInteractionSource(registry, ledger=store))
    app.state.aggregator = aggregator
    presenter = InteractionPresenter(aggregator, registry, scheduler, event_bus=event_bus)
    app.state.presenter = presenter
    logger.info("Interaction core initialized.")

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    presenter.teardown()
    scheduler.clear()
    event_bus.clear()


app = FastAPI(title="Hearthwood Interaction Core", lifespan=lifespan)

app.include_router(health_router)
app.include_router(dialogue_router)
app.include_router(interaction_router)
