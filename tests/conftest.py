"""
Общие fixtures: процессный движок инициализируется заново для каждого теста.
"""

import pytest

from src.core.engine import runtime
from src.core.engine.config import EngineConfig, GuardPolicy


@pytest.fixture(autouse=True)
def engine():
    """Движок с конфигурацией по умолчанию (политика AMBIENT)."""
    runtime.shutdown()
    numeric_engine = runtime.init(EngineConfig())
    yield numeric_engine
    runtime.shutdown()


@pytest.fixture
def make_engine(engine):
    """
    Фабрика: переинициализация процессного движка с изменённой конфигурацией.

    Usage:
        small = make_engine(limb_bits=8, immediate_bits=8)
    """

    def _make(mark_roots=None, on_error=None, **overrides):
        runtime.shutdown()
        return runtime.init(
            EngineConfig(**overrides), mark_roots=mark_roots, on_error=on_error
        )

    return _make


@pytest.fixture
def small_engine(make_engine):
    """8-битные limbs и immediate: многословные значения уже с 128."""
    return make_engine(limb_bits=8, immediate_bits=8)


@pytest.fixture
def explicit_engine(make_engine):
    """Политика EXPLICIT, маленький порог сборки и узкий immediate."""
    return make_engine(
        limb_bits=8,
        immediate_bits=8,
        gc_threshold=2,
        guard_policy=GuardPolicy.EXPLICIT,
    )
