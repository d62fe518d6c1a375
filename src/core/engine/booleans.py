"""
Bool — Процессные маркеры true/false/fail

Предикаты движка возвращают один из трёх неизменяемых маркеров.
FAIL сигнализирует о неудаче операции (например, необратимый элемент в
inverse_mod_int) и не имеет значения истинности.
"""

from enum import Enum


class Bool(str, Enum):
    """Маркеры, возвращаемые предикатами движка."""

    TRUE = "true"
    FALSE = "false"
    FAIL = "fail"

    @classmethod
    def of(cls, flag: bool) -> "Bool":
        """Bool.TRUE / Bool.FALSE для Python bool."""
        return cls.TRUE if flag else cls.FALSE

    def __bool__(self) -> bool:
        if self is Bool.FAIL:
            raise ValueError("fail has no truth value")
        return self is Bool.TRUE


__all__ = ["Bool"]
