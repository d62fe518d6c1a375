"""
Numeric value handles: Obj, Integer, Rational and the true/false/fail
sentinels returned by engine predicates.
"""

from src.core.engine.booleans import Bool
from src.core.numbers.integer import INTEGER_CONTRACT_VERSION, Integer, IntegerLike
from src.core.numbers.obj import Obj
from src.core.numbers.rational import RATIONAL_CONTRACT_VERSION, Rational, RationalLike

__all__ = [
    "Bool",
    "Obj",
    # Integer
    "INTEGER_CONTRACT_VERSION",
    "IntegerLike",
    "Integer",
    # Rational
    "RATIONAL_CONTRACT_VERSION",
    "RationalLike",
    "Rational",
]
