"""NPC 행동 상태 기계 (AnimatedNPCStates)

매 프레임 외부 드라이버가 tick()을 호출한다. 블로킹 없음.
tick 1회의 전이 우선순위:
1. 근접 트리거 (현재 상태가 선언한 경우) / 트리거 상태에서의 복귀
2. duration 자동 전이
프레임 진행은 전이와 독립적으로 animation_speed 마다 일어난다.
이벤트 전이(trigger_event)는 호출 즉시 적용된다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from src.core.logging import get_logger
from src.core.world.models import Direction

logger = get_logger(__name__)

DEFAULT_RECOVERY_MARGIN = 1.5


class NPCConfigError(ValueError):
    """NPC/상태 정의가 잘못됨 (존재하지 않는 상태 참조 등)"""


class UnknownStateError(KeyError):
    """선언되지 않은 상태로 강제 전이 시도"""


@dataclass(frozen=True)
class ProximityTrigger:
    """플레이어 거리 기반 반응

    radius 이내로 들어오면 trigger_state로 즉시 전이.
    trigger_state에 있는 동안 recovery_radius 이상 멀어진 상태가
    recovery_delay(ms) 유지되면 recovery_state (없으면 직전 상태)로 복귀.
    """

    radius: float
    trigger_state: str
    recovery_radius: Optional[float] = None
    recovery_state: Optional[str] = None
    recovery_delay: float = 0.0

    def effective_recovery_radius(self, margin: float = DEFAULT_RECOVERY_MARGIN) -> float:
        if self.recovery_radius is not None:
            return self.recovery_radius
        return self.radius + margin


@dataclass(frozen=True)
class StateDefinition:
    """상태 하나의 선언 (스프라이트, 속도, 전이 규칙)"""

    sprites: Tuple[str, ...]
    animation_speed: float
    duration: Optional[float] = None
    next_state: Optional[str] = None
    transitions_to: Mapping[str, str] = field(default_factory=dict)
    directional_sprites: Mapping[Direction, Tuple[str, ...]] = field(default_factory=dict)
    proximity_trigger: Optional[ProximityTrigger] = None

    def sprites_for(self, direction: Optional[Direction]) -> Tuple[str, ...]:
        if direction is not None:
            override = self.directional_sprites.get(direction)
            if override:
                return override
        return self.sprites

    def referenced_states(self) -> Tuple[str, ...]:
        refs = list(self.transitions_to.values())
        if self.next_state:
            refs.append(self.next_state)
        trigger = self.proximity_trigger
        if trigger is not None:
            refs.append(trigger.trigger_state)
            if trigger.recovery_state:
                refs.append(trigger.recovery_state)
        return tuple(refs)


def validate_states(states: Mapping[str, StateDefinition], initial_state: str) -> None:
    """상태 표 검증. 문제가 있으면 NPCConfigError."""
    if not states:
        raise NPCConfigError("states가 비어 있음")
    if initial_state not in states:
        raise NPCConfigError(f"initial_state '{initial_state}' 미선언")
    for name, definition in states.items():
        if not definition.sprites:
            raise NPCConfigError(f"상태 '{name}': sprites 비어 있음")
        if definition.animation_speed <= 0:
            raise NPCConfigError(f"상태 '{name}': animation_speed는 양수여야 함")
        if definition.duration is not None:
            if definition.duration < 0:
                raise NPCConfigError(f"상태 '{name}': duration 음수")
            if not definition.next_state:
                raise NPCConfigError(f"상태 '{name}': duration에는 next_state 필요")
        for direction, sprites in definition.directional_sprites.items():
            if not sprites:
                raise NPCConfigError(f"상태 '{name}': {direction.value} 방향 sprites 비어 있음")
        trigger = definition.proximity_trigger
        if trigger is not None:
            if trigger.radius < 0 or trigger.recovery_delay < 0:
                raise NPCConfigError(f"상태 '{name}': proximity_trigger 값 음수")
            if trigger.effective_recovery_radius() < trigger.radius:
                raise NPCConfigError(f"상태 '{name}': recovery_radius < radius")
        for target in definition.referenced_states():
            if target not in states:
                raise NPCConfigError(f"상태 '{name}': 미선언 상태 '{target}' 참조")


class AnimatedNPCStates:
    """NPC 1명의 상태 기계 + 커서

    불변식: current_state는 항상 states의 키.
    시각은 모두 ms 단위이며 호출자가 넘긴다.
    """

    def __init__(
        self,
        states: Mapping[str, StateDefinition],
        initial_state: str,
        now: float = 0.0,
        recovery_margin: float = DEFAULT_RECOVERY_MARGIN,
    ) -> None:
        validate_states(states, initial_state)
        self._states: Dict[str, StateDefinition] = dict(states)
        self.recovery_margin = recovery_margin

        self.current_state: str = initial_state
        self.current_frame: int = 0
        self.last_state_change: float = now
        self.last_frame_change: float = now

        # 근접 반응 추적
        self.previous_state: Optional[str] = None
        self.recovery_started: Optional[float] = None
        self._active_trigger: Optional[ProximityTrigger] = None

    @property
    def states(self) -> Mapping[str, StateDefinition]:
        return self._states

    @property
    def definition(self) -> StateDefinition:
        return self._states[self.current_state]

    @property
    def recovery_pending(self) -> bool:
        return self.recovery_started is not None

    # ── 전이 ──

    def _enter(self, state: str, now: float) -> None:
        old = self.current_state
        self.current_state = state
        self.current_frame = 0
        self.last_state_change = now
        self.last_frame_change = now
        logger.debug(f"상태 전이: {old} → {state} (t={now:.0f})")

    def _clear_proximity(self) -> None:
        self.previous_state = None
        self.recovery_started = None
        self._active_trigger = None

    def force_state(self, state: str, now: float) -> None:
        """지정 상태로 즉시 전이. 미선언 상태면 UnknownStateError."""
        if state not in self._states:
            raise UnknownStateError(state)
        self._clear_proximity()
        self._enter(state, now)

    def trigger_event(self, event: str, now: float) -> bool:
        """현재 상태의 transitions_to[event]로 전이. 전이가 없으면 False."""
        target = self.definition.transitions_to.get(event)
        if target is None:
            return False
        self._clear_proximity()
        self._enter(target, now)
        return True

    def accepts_event(self, event: str) -> bool:
        return event in self.definition.transitions_to

    def _tick_proximity(self, now: float, distance: Optional[float]) -> bool:
        if distance is None:
            return False

        active = self._active_trigger
        if active is not None and self.current_state == active.trigger_state:
            if distance <= active.radius:
                self.recovery_started = None
                return False
            if distance >= active.effective_recovery_radius(self.recovery_margin):
                if self.recovery_started is None:
                    self.recovery_started = now
                if now - self.recovery_started >= active.recovery_delay:
                    target = active.recovery_state or self.previous_state
                    self._clear_proximity()
                    if target is not None:
                        self._enter(target, now)
                        return True
                return False
            self.recovery_started = None
            return False

        trigger = self.definition.proximity_trigger
        if trigger is not None and distance <= trigger.radius:
            previous = self.current_state
            self._enter(trigger.trigger_state, now)
            self.previous_state = previous
            self.recovery_started = None
            self._active_trigger = trigger
            return True
        return False

    def _tick_duration(self, now: float) -> bool:
        definition = self.definition
        if definition.duration is None or not definition.next_state:
            return False
        if now - self.last_state_change < definition.duration:
            return False
        self._clear_proximity()
        self._enter(definition.next_state, now)
        return True

    def _tick_frame(self, now: float, direction: Optional[Direction]) -> None:
        definition = self.definition
        if now - self.last_frame_change < definition.animation_speed:
            return
        count = len(definition.sprites_for(direction))
        self.current_frame = (self.current_frame + 1) % count
        self.last_frame_change = now

    def tick(
        self,
        now: float,
        player_distance: Optional[float] = None,
        direction: Optional[Direction] = None,
    ) -> bool:
        """한 프레임 진행. 상태가 바뀌었으면 True.

        player_distance가 None이면 근접 규칙은 건너뛴다.
        """
        changed = self._tick_proximity(now, player_distance)
        if not changed:
            changed = self._tick_duration(now)
        self._tick_frame(now, direction)
        return changed

    # ── 렌더링 ──

    def current_sprite(self, direction: Optional[Direction] = None) -> str:
        """현재 프레임 스프라이트. 방향별 목록 길이가 달라도 범위를 벗어나지 않는다."""
        sprites = self.definition.sprites_for(direction)
        return sprites[self.current_frame % len(sprites)]
