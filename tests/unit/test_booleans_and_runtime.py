"""
Тесты для маркеров Bool и процессного runtime

Проверяет:
1. Значения истинности TRUE/FALSE, отсутствие истинности у FAIL
2. init/get_engine/shutdown и повторную инициализацию
3. Использование handles остановленного движка
4. Логирование жизненного цикла
"""

import copy
import logging

import pytest

from src.core.engine import runtime
from src.core.engine.booleans import Bool
from src.core.engine.config import EngineConfig
from src.core.engine.kernel import NumericEngine
from src.core.errors import (
    EngineAlreadyInitializedError,
    EngineNotInitializedError,
    InvariantViolationError,
)
from src.core.numbers import Integer, Obj


class TestBool:
    """Тесты маркеров"""

    def test_truth_values(self) -> None:
        assert bool(Bool.TRUE) is True
        assert bool(Bool.FALSE) is False

    def test_fail_has_no_truth_value(self) -> None:
        with pytest.raises(ValueError, match="no truth value"):
            bool(Bool.FAIL)

    def test_of(self) -> None:
        assert Bool.of(True) is Bool.TRUE
        assert Bool.of(False) is Bool.FALSE

    def test_members_are_singletons(self) -> None:
        assert Bool("fail") is Bool.FAIL
        assert copy.deepcopy(Bool.TRUE) is Bool.TRUE


class TestRuntime:
    """Тесты жизненного цикла процессного движка"""

    def test_init_twice_rejected(self) -> None:
        with pytest.raises(EngineAlreadyInitializedError):
            runtime.init()

    def test_get_engine(self, engine) -> None:
        assert runtime.get_engine() is engine
        assert runtime.current_engine() is engine
        assert runtime.is_initialized()

    def test_get_engine_after_shutdown(self) -> None:
        runtime.shutdown()
        assert runtime.current_engine() is None
        with pytest.raises(EngineNotInitializedError):
            runtime.get_engine()
        with pytest.raises(EngineNotInitializedError):
            Integer(1)

    def test_shutdown_idempotent(self) -> None:
        runtime.shutdown()
        runtime.shutdown()
        assert not runtime.is_initialized()

    def test_handle_of_shut_down_engine(self, engine) -> None:
        value = Integer(2**100)
        runtime.shutdown()
        assert engine.closed
        with pytest.raises(EngineNotInitializedError):
            value.is_neg()

    def test_reinit_with_config(self) -> None:
        runtime.shutdown()
        engine = runtime.init(EngineConfig(limb_bits=16))
        assert Integer(2**70).size() == 5
        assert engine.config.limb_bits == 16

    def test_lifecycle_logged(self, caplog) -> None:
        caplog.set_level(logging.INFO, logger="src.core.engine.runtime")
        runtime.shutdown()
        runtime.init()
        assert "numeric engine shut down" in caplog.text
        assert "numeric engine initialized" in caplog.text


class TestObj:
    """Тесты базового handle"""

    def test_bare_obj_to_string_is_empty(self) -> None:
        assert Obj().to_string() == ""

    def test_copy_is_alias(self) -> None:
        value = Integer(2**100)
        assert copy.copy(value) is value
        assert copy.deepcopy(value) is value
        assert Integer(value) == value

    def test_handles_of_different_engines(self, engine) -> None:
        other = NumericEngine(EngineConfig())
        foreign = Integer._wrap(other, other.make_int(5))
        with pytest.raises(InvariantViolationError, match="different engines"):
            Integer(5) == foreign

    def test_handle_from_shut_down_engine(self, make_engine) -> None:
        stale = Integer(2**100)
        reported = []
        make_engine(on_error=reported.append)

        with pytest.raises(InvariantViolationError, match="different engines") as exc_info:
            Integer(5) + stale

        assert reported == [exc_info.value]
        assert exc_info.value.operands[1].startswith("Integer(BagRef(")
