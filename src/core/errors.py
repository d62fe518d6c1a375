"""
Numeric Errors — Таксономия ошибок числового слоя

Все ошибки, которые движок и обёртки Integer/Rational поднимают наружу.

Категории:
- Нарушение инварианта (фатальная): предикат движка вернул значение вне
  документированного диапазона. Локально не восстанавливается.
- Доменная ошибка (восстанавливаемая): математически неопределённый
  результат (деление на ноль, необратимый элемент).
- Ошибка диапазона (восстанавливаемая): сужающее преобразование к
  машинной ширине вне диапазона.
- Ошибки дисциплины видимости (guard, устаревшие ссылки, инициализация).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Ошибка несёт имя операции и (где возможно) операнды
2. Ни одна операция не подставляет значение по умолчанию вместо ошибки
"""

from fractions import Fraction
from typing import Any, Tuple

# Целые длиннее этого числа бит показываются сводкой, а не цифрами
OPERAND_DISPLAY_BITS = 256


def describe_operand(operand: Any) -> str:
    """
    Текст операнда для сообщения об ошибке.

    Не обращается к движку: handle показывается через свою ссылку, а
    большое целое сводкой по числу бит.

    Examples:
        >>> describe_operand(2**300)
        '<int: 301 bits>'
    """
    if isinstance(operand, bool):
        return str(operand)
    if isinstance(operand, int):
        if operand.bit_length() > OPERAND_DISPLAY_BITS:
            sign = "-" if operand < 0 else ""
            return f"<{sign}int: {operand.bit_length()} bits>"
        return str(operand)
    if isinstance(operand, Fraction):
        return f"{describe_operand(operand.numerator)}/{describe_operand(operand.denominator)}"
    ref = getattr(operand, "_ref", None)
    if ref is not None:
        return f"{type(operand).__name__}({ref!r})"
    return repr(operand)


# =============================================================================
# BASE
# =============================================================================


class NumericError(Exception):
    """
    Базовый класс всех ошибок числового слоя.

    Attributes:
        operation: Имя операции (например, "Integer.inv_mod")
        operands: Операнды в текстовом виде (для диагностики)
    """

    def __init__(self, operation: str, message: str, *operands: Any):
        self.operation = operation
        self.operands: Tuple[str, ...] = tuple(describe_operand(op) for op in operands)
        self.message = message
        super().__init__(self._format())

    def _format(self) -> str:
        if self.operands:
            return f"({self.operation}): {self.message} [{', '.join(self.operands)}]"
        return f"({self.operation}): {self.message}"


# =============================================================================
# FATAL
# =============================================================================


class InvariantViolationError(NumericError):
    """
    Нарушение внутреннего инварианта движка.

    Например, sign() вернул значение вне {-1, 0, 1}. Требует исправления
    движка, не обрабатывается вызывающим кодом.
    """
    pass


# =============================================================================
# DOMAIN / RANGE
# =============================================================================


class NumericDomainError(NumericError, ArithmeticError):
    """Результат операции математически не определён для данных операндов."""
    pass


class DivisionByZeroError(NumericDomainError, ZeroDivisionError):
    """Деление (или приведение по модулю) на ноль."""
    pass


class NotInvertibleError(NumericDomainError):
    """
    Элемент необратим по модулю.

    Поднимается inv_mod и Rational.mod, когда значение и модуль не взаимно
    просты.
    """
    pass


class NarrowingRangeError(NumericError, OverflowError):
    """Значение не помещается в запрошенную машинную ширину."""
    pass


# =============================================================================
# STACK VISIBILITY / LIFECYCLE
# =============================================================================


class GuardError(NumericError):
    """Нарушение протокола Stack-Visibility Guard (например, порядок release)."""
    pass


class GuardAcquisitionError(GuardError):
    """
    Guard не может быть активирован.

    Причины: движок не инициализирован или остановлен, идёт сборка мусора
    (несовместимый режим сканирования), превышена глубина вложенности.
    Защищённый блок не выполняется.
    """
    pass


class GuardInactiveError(GuardError):
    """Аллоцирующий вызов движка вне активного guard (политика EXPLICIT)."""
    pass


class StaleHandleError(NumericError):
    """
    Ссылка указывает на блок, освобождённый сборщиком.

    Use-after-free: handle не был виден сборщику как корень в момент
    сборки.
    """
    pass


class EngineNotInitializedError(NumericError, RuntimeError):
    """Операция ядра до вызова init() (или после shutdown())."""
    pass


class EngineAlreadyInitializedError(NumericError, RuntimeError):
    """Повторный init() без shutdown()."""
    pass


__all__ = [
    "OPERAND_DISPLAY_BITS",
    "describe_operand",
    "NumericError",
    "InvariantViolationError",
    "NumericDomainError",
    "DivisionByZeroError",
    "NotInvertibleError",
    "NarrowingRangeError",
    "GuardError",
    "GuardAcquisitionError",
    "GuardInactiveError",
    "StaleHandleError",
    "EngineNotInitializedError",
    "EngineAlreadyInitializedError",
]
