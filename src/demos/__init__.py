"""
Demo callers: Project Euler problems 1 and 6, π series.
"""

from src.demos.euler import (
    pe1_brute_force,
    pe1_series,
    pe6_brute_force,
    pe6_closed_form,
    sum_of_series,
)
from src.demos.pi_series import pi_digits, series_bbp, series_mgl

__all__ = [
    "pe1_brute_force",
    "pe1_series",
    "sum_of_series",
    "pe6_brute_force",
    "pe6_closed_form",
    "series_mgl",
    "series_bbp",
    "pi_digits",
]
