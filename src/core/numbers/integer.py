"""
Integer — Целое произвольной точности

Handle, специализированный целочисленными операциями. Представление
(immediate или boxed) выбирает движок; обёртка его не меняет.

Соглашения деления:
- a / b — частное с усечением к нулю
- a % b — остаток со знаком делимого: a == (a / b) * b + a % b
- a.mod(m) — наименьший неотрицательный представитель, в [0, |m|)

Examples:
    >>> Integer(7).pow(Integer(3))
    Integer(343)
    >>> Integer(-7).mod(Integer(3)), Integer(-7) % Integer(3)
    (Integer(2), Integer(-1))
"""

import re
from typing import Any, Dict, Sequence, Tuple, Union

from src.core.engine.booleans import Bool
from src.core.engine.representation import Immediate
from src.core.engine.runtime import get_engine
from src.core.errors import InvariantViolationError, NotInvertibleError
from src.core.numbers.obj import Obj

IntegerLike = Union["Integer", int]

INTEGER_CONTRACT_VERSION = "1"

# Тип форматирования → основание, которое рендерит движок
_FORMAT_BASES = {"b": 2, "o": 8, "d": 10, "x": 16, "X": 16}

# fill/align/width без знаковых и прочих флагов
_PLAIN_FORMAT = re.compile(r"^(?P<align>.?[<>^])?(?:[1-9]\d*)?$")


class Integer(Obj):
    """Неизменяемое целое произвольной точности."""

    __slots__ = ()

    def __init__(self, value: IntegerLike = 0):
        if isinstance(value, Integer):
            self._engine = value._engine
            self._ref = value._ref
            self._root()
            return
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(
                f"Integer requires int or Integer, got {type(value).__name__}"
            )
        self._engine = get_engine()
        self._ref = self._engine.make_int(value)
        self._root()

    @classmethod
    def _coerce(cls, other: Any) -> "Integer":
        if isinstance(other, Integer):
            return other
        if isinstance(other, int) and not isinstance(other, bool):
            return cls(other)
        return NotImplemented

    def _int_result(self, method: str, *operands: "Integer") -> "Integer":
        return Integer._wrap(self._engine, self._delegate(method, *operands))

    # =========================================================================
    # КОНСТРУИРОВАНИЕ
    # =========================================================================

    @classmethod
    def from_limbs(cls, limbs: Sequence[int], size: int) -> "Integer":
        """
        Целое из limbs (младший первым).

        Args:
            limbs: Слова модуля шириной EngineConfig.limb_bits
            size: Число используемых limbs со знаком результата; 0 → 0

        Raises:
            ValueError: limbs короче |size| или limb вне диапазона
        """
        engine = get_engine()
        return cls._wrap(engine, engine.make_int_from_limbs(limbs, size))

    @classmethod
    def from_string(cls, text: str, base: int = 10) -> "Integer":
        """Разбор строки в основании base (2..36)."""
        engine = get_engine()
        return cls._wrap(engine, engine.int_from_string(text, base))

    # =========================================================================
    # ПРЕОБРАЗОВАНИЯ
    # =========================================================================

    def to_machine(self, bits: int, signed: bool = True) -> int:
        """
        Явное сужающее преобразование к машинной ширине.

        Raises:
            NarrowingRangeError: Значение вне диапазона
        """
        return self._delegate("int_to_machine", args=(bits, signed))

    def to_int64(self) -> int:
        return self.to_machine(64, signed=True)

    def to_uint64(self) -> int:
        return self.to_machine(64, signed=False)

    def to_int32(self) -> int:
        return self.to_machine(32, signed=True)

    def to_uint32(self) -> int:
        return self.to_machine(32, signed=False)

    def to_int8(self) -> int:
        return self.to_machine(8, signed=True)

    def to_uint8(self) -> int:
        return self.to_machine(8, signed=False)

    def __int__(self) -> int:
        return self._delegate("value_of")

    def __bool__(self) -> bool:
        return int(self) != 0

    def size(self) -> int:
        """Число limbs boxed-представления (для immediate — 1)."""
        return self._delegate("size_int")

    def to_string(self, base: int = 10) -> str:
        return self._delegate("string_int_base", args=(base,))

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Integer({self.to_string()})"

    def __format__(self, format_spec: str) -> str:
        if format_spec and format_spec[-1] in _FORMAT_BASES:
            rest = format_spec[:-1]
            match = _PLAIN_FORMAT.match(rest)
            if match:
                text = self.to_string(_FORMAT_BASES[format_spec[-1]])
                if format_spec[-1] == "X":
                    text = text.upper()
                # Числа по умолчанию выравниваются вправо
                return format(text, rest if match.group("align") else ">" + rest)
        if not format_spec:
            return self.to_string()
        return format(int(self), format_spec)

    # =========================================================================
    # ПРЕДИКАТЫ
    # =========================================================================

    def is_int(self) -> bool:
        return bool(self._delegate("is_int"))

    def is_rat(self) -> bool:
        return bool(self._delegate("is_rat"))

    def is_small_int(self) -> bool:
        return bool(self._delegate("is_small_int"))

    def is_large_int(self) -> bool:
        return bool(self._delegate("is_large_int"))

    def is_neg(self) -> bool:
        return bool(self._delegate("is_neg_int"))

    def is_pos(self) -> bool:
        return bool(self._delegate("is_pos_int"))

    def is_odd(self) -> bool:
        return bool(self._delegate("is_odd_int"))

    def is_even(self) -> bool:
        return not self.is_odd()

    # =========================================================================
    # СРАВНЕНИЕ
    # =========================================================================

    def __eq__(self, other: Any) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return bool(self._delegate("eq", other))

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other: Any) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return bool(self._delegate("lt", other))

    def __gt__(self, other: Any) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return bool(other._delegate("lt", self))

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
        return hash(int(self))

    # =========================================================================
    # АРИФМЕТИКА
    # =========================================================================

    def __add__(self, other: Any) -> "Integer":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._int_result("sum_int", other)

    def __radd__(self, other: Any) -> "Integer":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._int_result("sum_int", self)

    def __sub__(self, other: Any) -> "Integer":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._int_result("diff_int", other)

    def __rsub__(self, other: Any) -> "Integer":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._int_result("diff_int", self)

    def __mul__(self, other: Any) -> "Integer":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._int_result("prod_int", other)

    def __rmul__(self, other: Any) -> "Integer":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._int_result("prod_int", self)

    def __truediv__(self, other: Any) -> "Integer":
        """Частное с усечением к нулю."""
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._int_result("quo_int", other)

    def __rtruediv__(self, other: Any) -> "Integer":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._int_result("quo_int", self)

    def __mod__(self, other: Any) -> "Integer":
        """Остаток со знаком делимого (см. mod для неотрицательного)."""
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._int_result("rem_int", other)

    def __rmod__(self, other: Any) -> "Integer":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._int_result("rem_int", self)

    def __divmod__(self, other: Any) -> Tuple["Integer", "Integer"]:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._int_result("quo_int", other), self._int_result("rem_int", other)

    def __rdivmod__(self, other: Any) -> Tuple["Integer", "Integer"]:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return divmod(other, self)

    def __neg__(self) -> "Integer":
        return self._int_result("ainv_int")

    def __pos__(self) -> "Integer":
        return self

    def __abs__(self) -> "Integer":
        return self.abs()

    def __pow__(self, exponent: Any) -> "Integer":
        exponent = self._coerce(exponent)
        if exponent is NotImplemented:
            return NotImplemented
        return self._int_result("pow_int", exponent)

    def __rpow__(self, base: Any) -> "Integer":
        base = self._coerce(base)
        if base is NotImplemented:
            return NotImplemented
        return base._int_result("pow_int", self)

    def pow(self, exponent: IntegerLike) -> "Integer":
        """
        Точная степень.

        Raises:
            NumericDomainError: Отрицательный показатель при |self| > 1
            DivisionByZeroError: 0 в отрицательной степени
        """
        return self._int_result("pow_int", Integer(exponent))

    def abs(self) -> "Integer":
        return self._int_result("abs_int")

    def sign(self) -> int:
        """
        Знак: ровно одно из -1, 0, 1.

        Raises:
            InvariantViolationError: Движок вернул значение вне {-1, 0, 1}
        """
        result = self._delegate("sign_int")
        value = result.value if isinstance(result, Immediate) else result
        if value not in (-1, 0, 1):
            error = InvariantViolationError("Integer.sign", "bad sign", value)
            self._engine.report(error)
            raise error
        return value

    def mod(self, modulus: IntegerLike) -> "Integer":
        """
        Наименьший неотрицательный вычет: результат в [0, |modulus|).

        Raises:
            DivisionByZeroError: modulus == 0
        """
        return self._int_result("mod_int", Integer(modulus))

    def inv_mod(self, modulus: IntegerLike) -> "Integer":
        """
        Обратный элемент по модулю.

        Raises:
            NotInvertibleError: self и modulus не взаимно просты
            DivisionByZeroError: modulus == 0
        """
        modulus = Integer(modulus)
        result = self._delegate("inverse_mod_int", modulus)
        if result is Bool.FAIL:
            error = NotInvertibleError(
                "Integer.inv_mod", "value is not invertible modulo modulus", self, modulus
            )
            self._engine.report(error)
            raise error
        return Integer._wrap(self._engine, result)

    @staticmethod
    def gcd(a: IntegerLike, b: IntegerLike) -> "Integer":
        """Наибольший общий делитель (неотрицательный)."""
        return Integer(a)._int_result("gcd_int", Integer(b))

    @staticmethod
    def lcm(a: IntegerLike, b: IntegerLike) -> "Integer":
        """Наименьшее общее кратное (неотрицательное)."""
        return Integer(a)._int_result("lcm_int", Integer(b))

    @staticmethod
    def binomial(n: IntegerLike, k: IntegerLike) -> "Integer":
        """
        Биномиальный коэффициент C(n, k).

        0 при k < 0 и при 0 <= n < k; для n < 0 — (-1)**k * C(k - n - 1, k).
        """
        return Integer(n)._int_result("binomial_int", Integer(k))

    # =========================================================================
    # CONTRACT
    # =========================================================================

    def to_contract(self) -> Dict[str, Any]:
        """Сериализация в формат контракта integer_value."""
        sign, limbs = self._delegate("int_limbs")
        return {
            "schema_version": INTEGER_CONTRACT_VERSION,
            "sign": sign,
            "representation": "immediate" if self.is_small_int() else "boxed",
            "limb_bits": self._engine.config.limb_bits,
            "limbs": list(limbs),
        }

    @classmethod
    def from_contract(cls, data: Dict[str, Any]) -> "Integer":
        """
        Десериализация из контракта integer_value.

        Limbs пересобираются, если ширина limb отличается от текущего
        движка. Представление выбирает движок заново.

        Raises:
            jsonschema.ValidationError: Данные не соответствуют схеме
            ValueError: Знак не согласован с limbs
        """
        from src.core.contracts.validators import validate_integer_value
        from src.core.engine.representation import join_limbs

        validate_integer_value(data)
        sign, limbs = data["sign"], data["limbs"]
        if (sign == 0) != (not any(limbs)):
            raise ValueError(f"sign {sign} inconsistent with limbs {limbs}")
        if sign == 0:
            return cls(0)
        if data["limb_bits"] == get_engine().config.limb_bits:
            return cls.from_limbs(limbs, sign * len(limbs))
        return cls(sign * join_limbs(limbs, data["limb_bits"]))


__all__ = [
    "INTEGER_CONTRACT_VERSION",
    "IntegerLike",
    "Integer",
]
