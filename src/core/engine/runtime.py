"""
Runtime — Процессный числовой движок

init() вызывается один раз при старте процесса, до создания первого
значения. Обёртки Integer/Rational обращаются к движку через get_engine().

Usage:
    from src.core.engine.runtime import init, shutdown

    init(EngineConfig.from_env(), on_error=log_numeric_error)
    ...
    shutdown()
"""

import logging
from typing import Optional

from src.core.engine.config import EngineConfig
from src.core.engine.kernel import ErrorCallback, MarkRootsCallback, NumericEngine
from src.core.errors import EngineAlreadyInitializedError, EngineNotInitializedError

logger = logging.getLogger(__name__)

_ENGINE: Optional[NumericEngine] = None


def init(
    config: Optional[EngineConfig] = None,
    mark_roots: Optional[MarkRootsCallback] = None,
    on_error: Optional[ErrorCallback] = None,
) -> NumericEngine:
    """
    Инициализация процессного движка.

    Args:
        config: Конфигурация (по умолчанию EngineConfig())
        mark_roots: Callback дополнительных корней для каждой сборки
        on_error: Callback, получающий каждую NumericError движка

    Returns:
        Инициализированный NumericEngine

    Raises:
        EngineAlreadyInitializedError: Повторный init без shutdown
    """
    global _ENGINE
    if _ENGINE is not None:
        raise EngineAlreadyInitializedError("init", "engine already initialized")

    _ENGINE = NumericEngine(config=config, mark_roots=mark_roots, on_error=on_error)
    logger.info(
        "numeric engine initialized: limb_bits=%d immediate_bits=%d gc_threshold=%d policy=%s",
        _ENGINE.config.limb_bits,
        _ENGINE.config.immediate_bits,
        _ENGINE.config.gc_threshold,
        _ENGINE.config.guard_policy.value,
    )
    return _ENGINE


def current_engine() -> Optional[NumericEngine]:
    """Процессный движок или None до init()."""
    return _ENGINE


def get_engine() -> NumericEngine:
    """
    Процессный движок.

    Raises:
        EngineNotInitializedError: До init() или после shutdown()
    """
    if _ENGINE is None:
        raise EngineNotInitializedError("get_engine", "init() has not been called")
    return _ENGINE


def is_initialized() -> bool:
    return _ENGINE is not None


def shutdown() -> None:
    """
    Остановка процессного движка.

    Handles остановленного движка поднимают EngineNotInitializedError при
    использовании. Повторный shutdown — no-op.
    """
    global _ENGINE
    if _ENGINE is None:
        return
    stats = _ENGINE.stats()
    _ENGINE.closed = True
    _ENGINE = None
    logger.info(
        "numeric engine shut down: allocations=%d collections=%d live_bags=%d",
        stats.allocations_total,
        stats.collections,
        stats.live_bags,
    )


__all__ = [
    "init",
    "current_engine",
    "get_engine",
    "is_initialized",
    "shutdown",
]
