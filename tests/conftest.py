"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient

from src.core.event_bus import EventBus
from src.core.logging import reset_warnings
from src.core.scheduler import ManualClock, Scheduler
from src.main import app
from src.services.game_state_store import GameStateStore
from src.services.npc_registry import NPCRegistry


@pytest.fixture(autouse=True)
def _clear_warn_once():
    """warn_once 기록이 테스트 사이에 새지 않도록"""
    reset_warnings()
    yield
    reset_warnings()


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def scheduler(clock: ManualClock) -> Scheduler:
    return Scheduler(clock)


@pytest.fixture()
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def recorded(event_bus: EventBus) -> list:
    """모든 이벤트 유형을 기록하는 리스트 (유형, 데이터)"""
    from src.core.event_types import EventTypes

    events: list = []
    for name, value in vars(EventTypes).items():
        if name.isupper():
            event_bus.subscribe(value, lambda e: events.append((e.event_type, e.data)))
    return events


@pytest.fixture()
def store(event_bus: EventBus) -> GameStateStore:
    return GameStateStore(event_bus)


@pytest.fixture()
def registry(event_bus: EventBus) -> NPCRegistry:
    return NPCRegistry(event_bus)


@pytest.fixture()
def client() -> TestClient:
    """FastAPI TestClient (lifespan 실행 포함)"""
    with TestClient(app) as c:
        yield c
