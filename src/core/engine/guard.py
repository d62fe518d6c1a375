"""
Stack-Visibility Guard — дисциплина видимости handles для сборщика

Сборщик находит живые числовые значения только через корни. Guard
размечает участок кода, выполняющий вызовы движка: пока guard активен,
handles этого участка зарегистрированы в его корневом фрейме.

Состояния guard:
- INACTIVE → ACTIVE: acquire (повторный acquire активного guard идемпотентен)
- ACTIVE → INACTIVE: release (при выходе из with — на любом пути выхода)

Корневые фреймы (RootRegistry):
- Новые handles и операнды каждого вызова движка регистрируются во
  внутреннем фрейме ДО вызова
- При release выжившие handles переходят в родительский фрейм
- Release внешнего фрейма (политика EXPLICIT) оставляет handles без корня:
  следующая сборка освободит их блоки

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Handle, который должен пережить вызов, способный запустить сборку,
   виден сборщику в момент этого вызова
2. Фреймы освобождаются строго в порядке LIFO
3. Неудачный acquire не пускает выполнение в защищённый блок
"""

import functools
import logging
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Optional

from src.core.engine.config import GuardPolicy
from src.core.engine.representation import Ref
from src.core.errors import GuardAcquisitionError, GuardError, GuardInactiveError

if TYPE_CHECKING:
    from src.core.engine.kernel import NumericEngine

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS / RESULTS
# =============================================================================


class GuardState(str, Enum):
    """Состояние Stack-Visibility Guard."""

    INACTIVE = "INACTIVE"
    ACTIVE = "ACTIVE"


@dataclass(frozen=True)
class GuardTransition:
    """Результат перехода состояния guard."""

    previous_state: GuardState
    new_state: GuardState
    depth: int

    transition_occurred: bool
    reason: str


# =============================================================================
# ROOT FRAMES
# =============================================================================


class RootFrame:
    """
    Корневой фрейм: слабые ссылки на handles одного guard-участка.

    Ключ — id(handle): равные по значению handles с разными блоками
    должны оставаться корнями независимо.
    """

    def __init__(self, owner: Optional["StackVisibilityGuard"]):
        self.owner = owner
        self._handles: Dict[int, weakref.ref] = {}

    def add(self, handle: Any) -> None:
        key = id(handle)
        existing = self._handles.get(key)
        if existing is not None and existing() is handle:
            return

        def _discard(wr: weakref.ref, key: int = key) -> None:
            if self._handles.get(key) is wr:
                del self._handles[key]

        self._handles[key] = weakref.ref(handle, _discard)

    def handles(self) -> List[Any]:
        """Живые handles фрейма."""
        alive = []
        for wr in list(self._handles.values()):
            handle = wr()
            if handle is not None:
                alive.append(handle)
        return alive

    def __len__(self) -> int:
        return len(self.handles())


class RootRegistry:
    """
    Стек корневых фреймов.

    При политике AMBIENT нижний фрейм существует всегда (весь стек виден).
    """

    def __init__(self, policy: GuardPolicy):
        self.policy = policy
        self._frames: List[RootFrame] = []
        if policy == GuardPolicy.AMBIENT:
            self._frames.append(RootFrame(owner=None))

    @property
    def depth(self) -> int:
        """Количество guard-фреймов (без ambient-фрейма)."""
        return sum(1 for frame in self._frames if frame.owner is not None)

    def is_visible(self) -> bool:
        """Есть ли активный фрейм, в котором регистрируются handles."""
        return bool(self._frames)

    def push(self, owner: "StackVisibilityGuard") -> RootFrame:
        frame = RootFrame(owner=owner)
        self._frames.append(frame)
        return frame

    def pop(self, frame: RootFrame) -> None:
        """
        Снятие внутреннего фрейма.

        Raises:
            GuardError: Если frame не внутренний (нарушен порядок LIFO)
        """
        if not self._frames or self._frames[-1] is not frame:
            raise GuardError(
                "StackVisibilityGuard.release",
                "guard released out of order (frames must be released LIFO)",
            )
        self._frames.pop()
        if self._frames:
            parent = self._frames[-1]
            for handle in frame.handles():
                parent.add(handle)

    def register(self, *handles: Any) -> None:
        """Регистрация handles во внутреннем фрейме (если он есть)."""
        if not self._frames:
            return
        frame = self._frames[-1]
        for handle in handles:
            frame.add(handle)

    def roots(self) -> Iterator[Ref]:
        """Ссылки всех зарегистрированных handles."""
        for frame in self._frames:
            for handle in frame.handles():
                yield handle._ref


# =============================================================================
# GUARD
# =============================================================================


class StackVisibilityGuard:
    """
    Scoped-маркер видимости стека.

    Usage:
        with stack_guard():
            total = Integer(2) ** 200 + 1
    """

    def __init__(self, engine: Optional["NumericEngine"]):
        self._engine = engine
        self._frame: Optional[RootFrame] = None
        self._depth = 0
        self.state = GuardState.INACTIVE

    @property
    def depth(self) -> int:
        return self._depth

    def acquire(self) -> GuardTransition:
        """
        Активация guard.

        Returns:
            GuardTransition

        Raises:
            GuardAcquisitionError: Движок недоступен, идёт сборка или
                превышена глубина вложенности
        """
        if self.state == GuardState.ACTIVE:
            self._depth += 1
            return GuardTransition(
                previous_state=GuardState.ACTIVE,
                new_state=GuardState.ACTIVE,
                depth=self._depth,
                transition_occurred=False,
                reason="nested_reacquire",
            )

        reason = self._acquisition_blocker()
        if reason is not None:
            logger.warning("stack guard acquisition failed: %s", reason)
            error = GuardAcquisitionError("StackVisibilityGuard.acquire", reason)
            if self._engine is not None:
                self._engine.report(error)
            raise error

        self._frame = self._engine.roots.push(self)
        self._depth = 1
        self.state = GuardState.ACTIVE
        return GuardTransition(
            previous_state=GuardState.INACTIVE,
            new_state=GuardState.ACTIVE,
            depth=self._depth,
            transition_occurred=True,
            reason="acquired",
        )

    def _acquisition_blocker(self) -> Optional[str]:
        engine = self._engine
        if engine is None:
            return "engine not initialized"
        if engine.closed:
            return "engine shut down"
        if engine.heap.collecting:
            return "collection in progress (incompatible scan mode)"
        if engine.roots.depth >= engine.config.max_guard_depth:
            return f"guard depth limit {engine.config.max_guard_depth} reached"
        return None

    def release(self) -> GuardTransition:
        """
        Деактивация guard.

        Raises:
            GuardError: Guard не активен или освобождается не в порядке LIFO
        """
        if self.state == GuardState.INACTIVE:
            raise GuardError("StackVisibilityGuard.release", "guard is not active")

        if self._depth > 1:
            self._depth -= 1
            return GuardTransition(
                previous_state=GuardState.ACTIVE,
                new_state=GuardState.ACTIVE,
                depth=self._depth,
                transition_occurred=False,
                reason="nested_release",
            )

        self._engine.roots.pop(self._frame)
        self._frame = None
        self._depth = 0
        self.state = GuardState.INACTIVE
        return GuardTransition(
            previous_state=GuardState.ACTIVE,
            new_state=GuardState.INACTIVE,
            depth=0,
            transition_occurred=True,
            reason="released",
        )

    def pin(self, *handles: Any) -> None:
        """
        Явная регистрация handles во фрейме этого guard.

        Raises:
            GuardInactiveError: Если guard не активен
        """
        if self.state != GuardState.ACTIVE:
            raise GuardInactiveError("StackVisibilityGuard.pin", "guard is not active")
        for handle in handles:
            self._frame.add(handle)

    def __enter__(self) -> "StackVisibilityGuard":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False


def stack_guard(engine: Optional["NumericEngine"] = None) -> StackVisibilityGuard:
    """
    Новый guard для движка (по умолчанию — процессного, см. runtime.init).

    Если движок не инициализирован, guard создаётся, но acquire завершится
    GuardAcquisitionError.
    """
    if engine is None:
        from src.core.engine.runtime import current_engine

        engine = current_engine()
    return StackVisibilityGuard(engine)


def guarded(func: Callable) -> Callable:
    """Декоратор: тело функции выполняется под stack_guard()."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with stack_guard():
            return func(*args, **kwargs)

    return wrapper


__all__ = [
    "GuardState",
    "GuardTransition",
    "RootFrame",
    "RootRegistry",
    "StackVisibilityGuard",
    "stack_guard",
    "guarded",
]
