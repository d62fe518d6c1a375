"""
Приближения π точными рациональными рядами.

- Madhava / Gregory–Leibniz: 1 - 1/3 + 1/5 - 1/7 ... = π/4
  (медленная сходимость, ошибка ~1/N)
- Bailey–Borwein–Plouffe: каждый член даёт ~1.2 десятичного знака

Результат печатается через Rational.decimal_expansion (усечение).
"""

import logging

from src.core.engine.guard import guarded
from src.core.numbers.integer import Integer
from src.core.numbers.rational import Rational

logger = logging.getLogger(__name__)


@guarded
def series_mgl(terms: int) -> Rational:
    """4 * (1 - 1/3 + 1/5 - ...) по terms членам."""
    if terms < 1:
        raise ValueError(f"terms must be >= 1, got {terms}")
    total = Rational(1)
    for i in range(1, terms):
        term = Rational(1, 2 * i + 1)
        total = total + term if i % 2 == 0 else total - term
    return 4 * total


@guarded
def series_bbp(terms: int) -> Rational:
    """
    Сумма terms членов ряда BBP.

    Член i приведён к одной дроби:
    (120i² + 151i + 47) / (16^i · (512i⁴ + 1024i³ + 712i² + 194i + 15))
    """
    if terms < 0:
        raise ValueError(f"terms must be >= 0, got {terms}")
    total = Rational(0)
    for i in range(terms):
        k = Integer(i)
        numerator = 120 * k * k + 151 * k + 47
        denominator = k.pow(4) * 512 + k.pow(3) * 1024 + (712 * k * k + 194 * k + 15)
        total = total + Rational(1, Integer(16).pow(i)) * Rational(numerator, denominator)
    return total


def pi_digits(series: str, terms: int, precision: int) -> str:
    """
    Десятичная запись приближения π.

    Args:
        series: "mgl" или "bbp"
        terms: Число членов ряда
        precision: Число знаков после точки
    """
    if series == "mgl":
        value = series_mgl(terms)
    elif series == "bbp":
        value = series_bbp(terms)
    else:
        raise ValueError(f"unknown series {series!r} (expected 'mgl' or 'bbp')")
    digits = value.decimal_expansion(precision)
    logger.debug("pi via %s, %d terms: %s", series, terms, digits)
    return digits


__all__ = [
    "series_mgl",
    "series_bbp",
    "pi_digits",
]
