"""
Project Euler 1 и 6 на Integer.

Problem 1: сумма натуральных чисел меньше N, кратных 3 или 5
(N = 1000 → 233168).

Problem 6: разность квадрата суммы и суммы квадратов первых N
натуральных чисел (N = 100 → 25164150).

Каждое решение выполняется под stack_guard: промежуточные значения
видны сборщику на всём протяжении вычисления.
"""

from src.core.engine.guard import guarded
from src.core.numbers.integer import Integer


# =============================================================================
# PROBLEM 1
# =============================================================================


@guarded
def pe1_brute_force(limit: int) -> Integer:
    """Перебор: O(N)."""
    total = Integer(0)
    for i in range(1, limit):
        if i % 3 == 0 or i % 5 == 0:
            total = total + i
    return total


def sum_of_series(start: int, end: int) -> Integer:
    """
    start + (start+1) + ... + end.

    Делитель 2 применяется к чётному множителю, чтобы деление было точным.
    """
    if start > end:
        return Integer(0)
    diff = Integer(end - start)
    if (diff % 2).is_odd():
        return ((diff + 1) / 2) * (start + end)
    return (diff + 1) * (Integer(start + end) / 2)


@guarded
def pe1_series(limit: int) -> Integer:
    """Формула суммы арифметической прогрессии: O(1)."""
    return (
        3 * sum_of_series(1, (limit - 1) // 3)
        + 5 * sum_of_series(1, (limit - 1) // 5)
        - 15 * sum_of_series(1, (limit - 1) // 15)
    )


# =============================================================================
# PROBLEM 6
# =============================================================================


@guarded
def pe6_brute_force(limit: int) -> Integer:
    """Перебор: O(N)."""
    total = Integer(0)
    total_sq = Integer(0)
    for i in range(1, limit + 1):
        total = total + i
        total_sq = total_sq + Integer(i) * i
    return total * total - total_sq


@guarded
def pe6_closed_form(limit: int) -> Integer:
    """
    sum(i) = n(n+1)/2, sum(i^2) = n(n+1)(2n+1)/6; разность упрощается до
    n(n+1)(n-1)(3n+2)/12.
    """
    n = Integer(limit)
    return ((n * (n + 1) / 2) * (n - 1) / 3) * (3 * n + 2) / 2


__all__ = [
    "pe1_brute_force",
    "pe1_series",
    "sum_of_series",
    "pe6_brute_force",
    "pe6_closed_form",
]
