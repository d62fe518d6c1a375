"""
Rational — Точное рациональное число

Строится из одного или двух целых: Rational(n) ≡ Rational(n, 1);
Rational(n, d) сразу сокращается (gcd, положительный знаменатель), а при
знаменателе 1 движок хранит голое целое.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. После каждой операции num/den взаимно просты и den > 0
2. Rational(r.num(), r.den()) == r (неподвижная точка)
3. mod(n) не возвращает мусор: необратимый знаменатель → NotInvertibleError

Examples:
    >>> Rational(1, 2) + Rational(1, 3)
    Rational(5, 6)
    >>> Rational(1, 5).mod(7)
    Integer(3)
"""

from typing import Any, Dict, Optional, Union

from src.core.engine.booleans import Bool
from src.core.errors import NotInvertibleError
from src.core.numbers.integer import _FORMAT_BASES, _PLAIN_FORMAT, Integer
from src.core.numbers.obj import Obj

RationalLike = Union["Rational", Integer, int]

RATIONAL_CONTRACT_VERSION = "1"


class Rational(Obj):
    """Неизменяемое рациональное число в сокращённой форме."""

    __slots__ = ()

    def __init__(self, n: RationalLike = 0, d: Optional[RationalLike] = None):
        numerator = self._operand(n)
        if numerator is None:
            raise TypeError(
                f"Rational numerator must be int, Integer or Rational, got {type(n).__name__}"
            )
        if d is None:
            self._engine = numerator._engine
            self._ref = numerator._ref
            self._root()
            return

        denominator = self._operand(d)
        if denominator is None:
            raise TypeError(
                f"Rational denominator must be int, Integer or Rational, got {type(d).__name__}"
            )
        self._engine = numerator._engine
        self._ref = self._call(self._engine, "make_rat", numerator, denominator)
        self._root()

    @staticmethod
    def _operand(value: Any) -> Optional[Obj]:
        if isinstance(value, (Rational, Integer)):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return Integer(value)
        return None

    @classmethod
    def _coerce(cls, other: Any) -> "Rational":
        operand = cls._operand(other)
        if operand is None:
            return NotImplemented
        return operand

    def _rat_result(self, method: str, *operands: Obj) -> "Rational":
        return Rational._wrap(self._engine, self._delegate(method, *operands))

    # =========================================================================
    # ЧИСЛИТЕЛЬ / ЗНАМЕНАТЕЛЬ
    # =========================================================================

    def num(self) -> Integer:
        """Числитель канонической формы."""
        return Integer._wrap(self._engine, self._delegate("num_rat"))

    def den(self) -> Integer:
        """Знаменатель канонической формы (1 для целого значения)."""
        return Integer._wrap(self._engine, self._delegate("den_rat"))

    def is_rat(self) -> bool:
        return bool(self._delegate("is_rat"))

    def is_integral(self) -> bool:
        return bool(self._delegate("is_int"))

    def is_neg(self) -> bool:
        return self.num().is_neg()

    def is_pos(self) -> bool:
        return self.num().is_pos()

    def sign(self) -> int:
        return self.num().sign()

    # =========================================================================
    # СРАВНЕНИЕ
    # =========================================================================

    def __eq__(self, other: Any) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return bool(self._delegate("eq_rat", other))

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other: Any) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return bool(self._delegate("lt_rat", other))

    def __gt__(self, other: Any) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return bool(other._delegate("lt_rat", self))

    def __le__(self, other: Any) -> bool:
        result = self.__gt__(other)
        if result is NotImplemented:
            return result
        return not result

    def __ge__(self, other: Any) -> bool:
        result = self.__lt__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        numerator, denominator = self._delegate("rat_parts")
        if denominator == 1:
            return hash(numerator)
        return hash((numerator, denominator))

    def __bool__(self) -> bool:
        return self.sign() != 0

    # =========================================================================
    # АРИФМЕТИКА
    # =========================================================================

    def __add__(self, other: Any) -> "Rational":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._rat_result("sum_rat", other)

    def __radd__(self, other: Any) -> "Rational":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return Rational(other)._rat_result("sum_rat", self)

    def __sub__(self, other: Any) -> "Rational":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._rat_result("diff_rat", other)

    def __rsub__(self, other: Any) -> "Rational":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return Rational(other)._rat_result("diff_rat", self)

    def __mul__(self, other: Any) -> "Rational":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._rat_result("prod_rat", other)

    def __rmul__(self, other: Any) -> "Rational":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return Rational(other)._rat_result("prod_rat", self)

    def __truediv__(self, other: Any) -> "Rational":
        """
        Точное частное.

        Raises:
            DivisionByZeroError: other == 0
        """
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._rat_result("quo_rat", other)

    def __rtruediv__(self, other: Any) -> "Rational":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return Rational(other)._rat_result("quo_rat", self)

    def __neg__(self) -> "Rational":
        return self._rat_result("ainv_rat")

    def __pos__(self) -> "Rational":
        return self

    def __abs__(self) -> "Rational":
        return self.abs()

    def __pow__(self, exponent: Any) -> "Rational":
        if isinstance(exponent, Rational) or self._coerce(exponent) is NotImplemented:
            return NotImplemented
        return self.pow(exponent)

    def pow(self, exponent: Union[Integer, int]) -> "Rational":
        """
        Точная целая степень (отрицательный показатель обращает).

        Raises:
            DivisionByZeroError: 0 в отрицательной степени
        """
        return self._rat_result("pow_rat", Integer(exponent))

    def abs(self) -> "Rational":
        return self._rat_result("abs_rat")

    def inv(self) -> "Rational":
        """
        Мультипликативный обратный.

        Raises:
            DivisionByZeroError: self == 0
        """
        return self._rat_result("inv_rat")

    def mod(self, modulus: Union[Integer, int]) -> Integer:
        """
        Остаток p/q по модулю n: k в [0, |n|), p ≡ k·q (mod n).

        Rational(1, s).mod(n) — обратный к s по модулю n.

        Raises:
            NotInvertibleError: Знаменатель необратим по модулю n
            DivisionByZeroError: modulus == 0
        """
        modulus = Integer(modulus)
        result = self._delegate("mod_rat", modulus)
        if result is Bool.FAIL:
            error = NotInvertibleError(
                "Rational.mod", "denominator is not invertible modulo modulus", self, modulus
            )
            self._engine.report(error)
            raise error
        return Integer._wrap(self._engine, result)

    # =========================================================================
    # СТРОКИ
    # =========================================================================

    def to_string(self, base: int = 10) -> str:
        """"<num> / <den>" в основании base."""
        return f"{self.num().to_string(base)} / {self.den().to_string(base)}"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Rational({self.num()}, {self.den()})"

    def __format__(self, format_spec: str) -> str:
        if format_spec and format_spec[-1] in _FORMAT_BASES:
            rest = format_spec[:-1]
            match = _PLAIN_FORMAT.match(rest)
            if match is None:
                raise ValueError(f"unsupported format spec for Rational: {format_spec!r}")
            text = self.to_string(_FORMAT_BASES[format_spec[-1]])
            if format_spec[-1] == "X":
                text = text.upper()
            return format(text, rest if match.group("align") else ">" + rest)
        return format(self.to_string(), format_spec)

    def decimal_expansion(self, precision: int) -> str:
        """
        Усечённое десятичное разложение ровно с precision знаками.

        Целая часть num/den, затем precision раз: остаток * 10, очередная
        цифра — частное, вычитание. Без округления и без поиска периода;
        усечённый ноль выводится без знака.

        Raises:
            ValueError: precision < 0

        Examples:
            >>> Rational(22, 7).decimal_expansion(5)
            '3.14285'
        """
        if precision < 0:
            raise ValueError(f"precision must be >= 0, got {precision}")

        numerator = self.num()
        denominator = self.den()
        negative = numerator.is_neg()
        magnitude = numerator.abs()

        whole = magnitude / denominator
        remainder = magnitude - whole * denominator
        digits = []
        for _ in range(precision):
            remainder = remainder * 10
            digit = remainder / denominator
            remainder = remainder - digit * denominator
            digits.append(digit.to_string())

        text = whole.to_string()
        if precision:
            text += "." + "".join(digits)
        # Усечённый ноль без знака
        if negative and text.strip("0.") != "":
            return "-" + text
        return text

    # =========================================================================
    # CONTRACT
    # =========================================================================

    def to_contract(self) -> Dict[str, Any]:
        """Сериализация в формат контракта rational_value."""
        return {
            "schema_version": RATIONAL_CONTRACT_VERSION,
            "numerator": self.num().to_contract(),
            "denominator": self.den().to_contract(),
        }

    @classmethod
    def from_contract(cls, data: Dict[str, Any]) -> "Rational":
        """
        Десериализация из контракта rational_value (с сокращением).

        Raises:
            jsonschema.ValidationError: Данные не соответствуют схеме
        """
        from src.core.contracts.validators import validate_rational_value

        validate_rational_value(data)
        return cls(
            Integer.from_contract(data["numerator"]),
            Integer.from_contract(data["denominator"]),
        )


__all__ = [
    "RATIONAL_CONTRACT_VERSION",
    "RationalLike",
    "Rational",
]
