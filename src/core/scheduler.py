"""취소 가능한 예약 작업 스케줄러

호버 선택 지연, 선택 후 시각 피드백 지연 등 "새 이벤트가 오면 취소되는"
타이머를 하나의 방식으로 다룬다. 백그라운드 스레드는 없다:
호스트의 프레임 루프가 run_due()를 호출할 때 기한이 지난 작업만 실행된다.

    scheduler = Scheduler(ManualClock())
    handle = scheduler.schedule(700, on_hover_elapsed, owner=menu)
    ...
    handle.cancel()              # 포인터가 벗어남
    scheduler.cancel_owner(menu) # 메뉴 해제
"""

from __future__ import annotations

import heapq
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from src.core.logging import get_logger

logger = get_logger(__name__)


class Clock:
    """밀리초 단위 현재 시각 제공자"""

    def now(self) -> float:
        raise NotImplementedError


class MonotonicClock(Clock):
    """프로세스 시작 기준 단조 증가 시계 (ms)"""

    def __init__(self) -> None:
        self._origin = time.monotonic()

    def now(self) -> float:
        return (time.monotonic() - self._origin) * 1000.0


class ManualClock(Clock):
    """테스트용 수동 시계"""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, ms: float) -> float:
        self._now += ms
        return self._now

    def set(self, value: float) -> None:
        self._now = value


@dataclass(order=True)
class _ScheduledTask:
    due: float
    _seq: int = field(compare=True, repr=False)
    callback: Callable[[], Any] = field(compare=False, default=lambda: None)
    owner: Any = field(compare=False, default=None)
    label: str = field(compare=False, default="")
    cancelled: bool = field(compare=False, default=False)
    fired: bool = field(compare=False, default=False)


class TaskHandle:
    """예약 작업 핸들. cancel()은 몇 번 호출해도 안전하다."""

    def __init__(self, task: _ScheduledTask) -> None:
        self._task = task

    @property
    def due(self) -> float:
        return self._task.due

    @property
    def label(self) -> str:
        return self._task.label

    @property
    def active(self) -> bool:
        """아직 실행도 취소도 되지 않았으면 True"""
        return not (self._task.cancelled or self._task.fired)

    def cancel(self) -> bool:
        """대기 중이던 작업을 취소했으면 True"""
        if not self.active:
            return False
        self._task.cancelled = True
        return True


class Scheduler:
    """단일 스레드 지연 실행 큐 (heapq, 기한 → 등록 순)"""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or MonotonicClock()
        self._queue: List[_ScheduledTask] = []
        self._seq = 0
        self._by_owner: Dict[int, List[_ScheduledTask]] = {}

    @property
    def clock(self) -> Clock:
        return self._clock

    def now(self) -> float:
        return self._clock.now()

    def schedule(
        self,
        delay_ms: float,
        callback: Callable[[], Any],
        *,
        owner: Any = None,
        label: str = "",
    ) -> TaskHandle:
        """delay_ms 뒤 callback 실행 예약"""
        self._seq += 1
        task = _ScheduledTask(
            due=self.now() + max(0.0, delay_ms),
            _seq=self._seq,
            callback=callback,
            owner=owner,
            label=label,
        )
        heapq.heappush(self._queue, task)
        if owner is not None:
            self._by_owner.setdefault(id(owner), []).append(task)
        logger.debug("작업 예약: %s (due=%.1f)", label or "<anon>", task.due)
        return TaskHandle(task)

    def cancel_owner(self, owner: Any) -> int:
        """owner가 소유한 대기 작업 전부 취소 (컴포넌트 해제 시). 취소 수 반환."""
        tasks = self._by_owner.pop(id(owner), [])
        count = 0
        for task in tasks:
            if not (task.cancelled or task.fired):
                task.cancelled = True
                count += 1
        if count:
            logger.debug("owner 작업 %d건 취소", count)
        return count

    def run_due(self, now: Optional[float] = None) -> int:
        """기한이 지난 작업 실행. 실행한 수 반환.

        콜백이 같은 패스에서 새로 예약한 작업도 기한이 지났으면 실행된다.
        콜백 예외는 기록만 하고 다음 작업으로 넘어간다.
        """
        current = self.now() if now is None else now
        executed = 0
        while self._queue and self._queue[0].due <= current:
            task = heapq.heappop(self._queue)
            self._forget(task)
            if task.cancelled:
                continue
            task.fired = True
            executed += 1
            try:
                task.callback()
            except Exception:
                logger.exception("예약 작업 실패: %s", task.label or "<anon>")
        return executed

    @property
    def pending_count(self) -> int:
        return sum(1 for t in self._queue if not t.cancelled)

    def clear(self) -> None:
        """전체 취소 (종료 시)"""
        for task in self._queue:
            task.cancelled = True
        self._queue.clear()
        self._by_owner.clear()

    def _forget(self, task: _ScheduledTask) -> None:
        if task.owner is None:
            return
        tasks = self._by_owner.get(id(task.owner))
        if not tasks:
            return
        try:
            tasks.remove(task)
        except ValueError:
            return
        if not tasks:
            del self._by_owner[id(task.owner)]
