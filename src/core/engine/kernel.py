"""
NumericEngine — Интерфейс вызовов числового движка

Узкий интерфейс, через который обёртки Integer/Rational обращаются к
движку. Арифметическое ядро — встроенный int произвольной точности и
fractions.Fraction (черный ящик); движок владеет представлением
(immediate/boxed) и хранением (куча под управлением сборщика).

Соглашения:
- quo_int усекает к нулю, rem_int имеет знак делимого:
  a == quo_int(a, b) * b + rem_int(a, b)
- mod_int всегда в [0, |m|)
- pow_int с отрицательным показателем определён только для оснований ±1
- binomial_int(n, k) = 0 при k < 0 и при 0 <= n < k;
  для n < 0: (-1)**k * C(k - n - 1, k)
- Предикаты возвращают Bool.TRUE / Bool.FALSE; inverse_mod_int и mod_rat
  возвращают Bool.FAIL для необратимого знаменателя

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Каждый результат в канонической форме (immediate, если помещается;
   сокращённая дробь; целое, если знаменатель 1)
2. Сборка мусора происходит только в safepoint перед первой аллокацией
   операции; операнды операции — дополнительные корни этой сборки
3. Ни одна аллокация вне активного guard при политике EXPLICIT
"""

import logging
import math
from fractions import Fraction
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence, Tuple, Union

from src.core.engine.booleans import Bool
from src.core.engine.config import EngineConfig, GuardPolicy, HeapStats
from src.core.engine.guard import RootRegistry
from src.core.engine.heap import CollectionResult, Heap
from src.core.engine.representation import (
    BagRef,
    BoxedInt,
    Immediate,
    RatPair,
    Ref,
    format_int_base,
    fits_immediate,
    join_limbs,
    parse_int_base,
    split_limbs,
    validate_base,
)
from src.core.errors import (
    DivisionByZeroError,
    EngineNotInitializedError,
    GuardInactiveError,
    NarrowingRangeError,
    NumericDomainError,
    NumericError,
    StaleHandleError,
)

logger = logging.getLogger(__name__)

MarkRootsCallback = Callable[[], Iterable[Any]]
ErrorCallback = Callable[[NumericError], None]

ZERO: Immediate = Immediate(0)
ONE: Immediate = Immediate(1)


class NumericEngine:
    """
    Числовой движок: куча, таблица корней, операции над ссылками.

    Args:
        config: Конфигурация (по умолчанию EngineConfig())
        mark_roots: Callback, возвращающий дополнительные корни (handles
            или ссылки) при каждой сборке
        on_error: Callback, получающий каждую NumericError до её подъёма
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        mark_roots: Optional[MarkRootsCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.config = config or EngineConfig()
        self.heap = Heap(self.config)
        self.roots = RootRegistry(self.config.guard_policy)
        self.closed = False

        self._mark_roots = mark_roots
        self._on_error = on_error

    # =========================================================================
    # ОШИБКИ
    # =========================================================================

    def report(self, error: NumericError) -> None:
        """Передача ошибки в error callback (ошибку поднимает вызывающий)."""
        logger.debug("numeric error in %s: %s", error.operation, error)
        if self._on_error is not None:
            self._on_error(error)

    def _fail(self, error: NumericError):
        self.report(error)
        raise error

    # =========================================================================
    # СБОРКА МУСОРА
    # =========================================================================

    def _gather_roots(self, extra: Sequence[Ref]) -> Iterator[Ref]:
        yield from self.roots.roots()
        yield from extra
        if self._mark_roots is not None:
            for item in self._mark_roots():
                yield getattr(item, "_ref", item)

    def collect(self, extra: Sequence[Ref] = ()) -> CollectionResult:
        """
        Сборка мусора по текущим корням.

        Корни: зарегистрированные в guard-фреймах handles, extra и
        результат mark_roots callback.
        """
        return self.heap.collect(self._gather_roots(extra))

    def stats(self) -> HeapStats:
        return self.heap.stats()

    def _safepoint(self, operation: str, operands: Sequence[Ref]) -> None:
        if self.closed:
            self._fail(EngineNotInitializedError(operation, "engine shut down"))
        if (
            self.config.guard_policy == GuardPolicy.EXPLICIT
            and not self.roots.is_visible()
        ):
            self._fail(
                GuardInactiveError(
                    operation,
                    "allocating engine call outside an active stack guard",
                    *operands,
                )
            )
        if self.heap.should_collect():
            self.collect(extra=operands)

    # =========================================================================
    # ЧТЕНИЕ / ЗАПИСЬ ЗНАЧЕНИЙ
    # =========================================================================

    def _bag(self, ref: BagRef, operation: str):
        if not self.heap.is_live(ref):
            self._fail(
                StaleHandleError(
                    operation,
                    "reference to a reclaimed bag (handle was not visible to the collector)",
                    ref,
                )
            )
        return self.heap.deref(ref)

    def _int(self, ref: Ref, operation: str) -> int:
        if isinstance(ref, Immediate):
            return ref.value
        bag = self._bag(ref, operation)
        if not isinstance(bag, BoxedInt):
            raise TypeError(f"{operation}: expected an integer object, got a rational")
        magnitude = join_limbs(bag.limbs, self.config.limb_bits)
        return -magnitude if bag.sign < 0 else magnitude

    def _frac(self, ref: Ref, operation: str) -> Fraction:
        if isinstance(ref, BagRef):
            bag = self._bag(ref, operation)
            if isinstance(bag, RatPair):
                return Fraction(self._int(bag.num, operation), self._int(bag.den, operation))
        return Fraction(self._int(ref, operation))

    def _alloc_int(self, value: int) -> Ref:
        if fits_immediate(value, self.config.immediate_bits):
            return Immediate(value)
        limbs = split_limbs(abs(value), self.config.limb_bits)
        return self.heap.alloc(BoxedInt(sign=-1 if value < 0 else 1, limbs=limbs))

    def _store_int(self, operation: str, value: int, operands: Sequence[Ref]) -> Ref:
        if fits_immediate(value, self.config.immediate_bits):
            return Immediate(value)
        self._safepoint(operation, operands)
        return self._alloc_int(value)

    def _store_rat(self, operation: str, value: Fraction, operands: Sequence[Ref]) -> Ref:
        if value.denominator == 1:
            return self._store_int(operation, value.numerator, operands)
        self._safepoint(operation, operands)
        num = self._alloc_int(value.numerator)
        den = self._alloc_int(value.denominator)
        return self.heap.alloc(RatPair(num=num, den=den))

    def _nonzero_divisor(self, operation: str, divisor: Union[int, Fraction], *operands: Ref):
        if divisor == 0:
            self._fail(DivisionByZeroError(operation, "division by zero", *operands))

    # =========================================================================
    # ЦЕЛЫЕ: КОНСТРУИРОВАНИЕ И ПРЕОБРАЗОВАНИЯ
    # =========================================================================

    def make_int(self, value: int) -> Ref:
        """Целое из Python int: immediate или новый boxed-блок."""
        return self._store_int("make_int", value, ())

    def make_int_from_limbs(self, limbs: Sequence[int], size: int) -> Ref:
        """
        Целое из limbs (младший первым).

        |size| — число используемых limbs, знак size — знак результата;
        size == 0 даёт 0. Ведущие нулевые limbs отбрасываются, результат
        понижается до immediate, если помещается.

        Raises:
            ValueError: limbs короче |size| или limb вне диапазона
        """
        count = abs(size)
        if count == 0:
            return ZERO
        if len(limbs) < count:
            raise ValueError(f"make_int_from_limbs: size {size} exceeds {len(limbs)} limbs")
        magnitude = join_limbs(limbs[:count], self.config.limb_bits)
        return self._store_int("make_int_from_limbs", -magnitude if size < 0 else magnitude, ())

    def int_from_string(self, text: str, base: int = 10) -> Ref:
        return self._store_int("int_from_string", parse_int_base(text, base), ())

    def value_of(self, ref: Ref) -> int:
        """Значение целого как Python int."""
        return self._int(ref, "value_of")

    def int_limbs(self, ref: Ref) -> Tuple[int, Tuple[int, ...]]:
        """Знак (-1/0/1) и limbs модуля целого (младший первым)."""
        value = self._int(ref, "int_limbs")
        sign = (value > 0) - (value < 0)
        return sign, split_limbs(abs(value), self.config.limb_bits)

    def int_to_machine(self, ref: Ref, bits: int, signed: bool) -> int:
        """
        Сужающее преобразование к машинной ширине.

        Raises:
            NarrowingRangeError: Значение вне диапазона
        """
        value = self._int(ref, "int_to_machine")
        if signed:
            low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        else:
            low, high = 0, (1 << bits) - 1
        if not low <= value <= high:
            kind = "signed" if signed else "unsigned"
            self._fail(
                NarrowingRangeError(
                    "int_to_machine",
                    f"value does not fit {bits}-bit {kind} range [{low}, {high}]",
                    value,
                )
            )
        return value

    def size_int(self, ref: Ref) -> int:
        """Число limbs boxed-целого; для immediate — 1."""
        if isinstance(ref, Immediate):
            return 1
        bag = self._bag(ref, "size_int")
        if not isinstance(bag, BoxedInt):
            raise TypeError("size_int: expected an integer object, got a rational")
        return len(bag.limbs)

    def string_int_base(self, ref: Ref, base: int = 10) -> str:
        validate_base(base)
        return format_int_base(self._int(ref, "string_int_base"), base)

    # =========================================================================
    # ЦЕЛЫЕ: ПРЕДИКАТЫ
    # =========================================================================

    def is_int(self, ref: Ref) -> Bool:
        if isinstance(ref, Immediate):
            return Bool.TRUE
        return Bool.of(isinstance(self._bag(ref, "is_int"), BoxedInt))

    def is_small_int(self, ref: Ref) -> Bool:
        return Bool.of(isinstance(ref, Immediate))

    def is_large_int(self, ref: Ref) -> Bool:
        if isinstance(ref, Immediate):
            return Bool.FALSE
        return Bool.of(isinstance(self._bag(ref, "is_large_int"), BoxedInt))

    def is_neg_int(self, ref: Ref) -> Bool:
        return Bool.of(self._int(ref, "is_neg_int") < 0)

    def is_pos_int(self, ref: Ref) -> Bool:
        return Bool.of(self._int(ref, "is_pos_int") > 0)

    def is_odd_int(self, ref: Ref) -> Bool:
        return Bool.of(self._int(ref, "is_odd_int") & 1 == 1)

    def eq(self, left: Ref, right: Ref) -> Bool:
        """Равенство по значению (целые и рациональные), не по адресу."""
        return Bool.of(self._frac(left, "eq") == self._frac(right, "eq"))

    def lt(self, left: Ref, right: Ref) -> Bool:
        return Bool.of(self._frac(left, "lt") < self._frac(right, "lt"))

    def sign_int(self, ref: Ref) -> Immediate:
        value = self._int(ref, "sign_int")
        return Immediate((value > 0) - (value < 0))

    # =========================================================================
    # ЦЕЛЫЕ: АРИФМЕТИКА
    # =========================================================================

    def sum_int(self, left: Ref, right: Ref) -> Ref:
        value = self._int(left, "sum_int") + self._int(right, "sum_int")
        return self._store_int("sum_int", value, (left, right))

    def diff_int(self, left: Ref, right: Ref) -> Ref:
        value = self._int(left, "diff_int") - self._int(right, "diff_int")
        return self._store_int("diff_int", value, (left, right))

    def prod_int(self, left: Ref, right: Ref) -> Ref:
        value = self._int(left, "prod_int") * self._int(right, "prod_int")
        return self._store_int("prod_int", value, (left, right))

    def _trunc_quo(self, operation: str, left: Ref, right: Ref) -> Tuple[int, int, int]:
        a = self._int(left, operation)
        b = self._int(right, operation)
        self._nonzero_divisor(operation, b, a, b)
        quotient = abs(a) // abs(b)
        if (a < 0) != (b < 0):
            quotient = -quotient
        return a, b, quotient

    def quo_int(self, left: Ref, right: Ref) -> Ref:
        """Частное с усечением к нулю."""
        _, _, quotient = self._trunc_quo("quo_int", left, right)
        return self._store_int("quo_int", quotient, (left, right))

    def rem_int(self, left: Ref, right: Ref) -> Ref:
        """Остаток со знаком делимого."""
        a, b, quotient = self._trunc_quo("rem_int", left, right)
        return self._store_int("rem_int", a - quotient * b, (left, right))

    def ainv_int(self, ref: Ref) -> Ref:
        return self._store_int("ainv_int", -self._int(ref, "ainv_int"), (ref,))

    def abs_int(self, ref: Ref) -> Ref:
        return self._store_int("abs_int", abs(self._int(ref, "abs_int")), (ref,))

    def pow_int(self, base: Ref, exponent: Ref) -> Ref:
        """
        Точная степень целого.

        Raises:
            DivisionByZeroError: 0 в отрицательной степени
            NumericDomainError: Отрицательный показатель для |base| > 1
        """
        b = self._int(base, "pow_int")
        e = self._int(exponent, "pow_int")
        if e >= 0:
            value = b ** e
        elif b == 0:
            self._fail(DivisionByZeroError("pow_int", "zero to a negative power", b, e))
        elif b == 1:
            value = 1
        elif b == -1:
            value = -1 if e & 1 else 1
        else:
            self._fail(
                NumericDomainError("pow_int", "negative exponent yields a non-integer", b, e)
            )
        return self._store_int("pow_int", value, (base, exponent))

    def mod_int(self, left: Ref, modulus: Ref) -> Ref:
        """Наименьший неотрицательный представитель класса вычетов."""
        a = self._int(left, "mod_int")
        m = self._int(modulus, "mod_int")
        self._nonzero_divisor("mod_int", m, a, m)
        return self._store_int("mod_int", a % abs(m), (left, modulus))

    def inverse_mod_int(self, base: Ref, modulus: Ref) -> Union[Ref, Bool]:
        """
        Обратный элемент по модулю.

        Returns:
            Ссылка на результат в [0, |m|) или Bool.FAIL, если base и
            modulus не взаимно просты
        """
        a = self._int(base, "inverse_mod_int")
        m = self._int(modulus, "inverse_mod_int")
        self._nonzero_divisor("inverse_mod_int", m, a, m)
        m = abs(m)
        if m == 1:
            return ZERO
        try:
            value = pow(a, -1, m)
        except ValueError:
            return Bool.FAIL
        return self._store_int("inverse_mod_int", value, (base, modulus))

    def gcd_int(self, left: Ref, right: Ref) -> Ref:
        value = math.gcd(self._int(left, "gcd_int"), self._int(right, "gcd_int"))
        return self._store_int("gcd_int", value, (left, right))

    def lcm_int(self, left: Ref, right: Ref) -> Ref:
        value = math.lcm(self._int(left, "lcm_int"), self._int(right, "lcm_int"))
        return self._store_int("lcm_int", value, (left, right))

    def binomial_int(self, n_ref: Ref, k_ref: Ref) -> Ref:
        n = self._int(n_ref, "binomial_int")
        k = self._int(k_ref, "binomial_int")
        if k < 0:
            value = 0
        elif n >= 0:
            value = math.comb(n, k) if k <= n else 0
        else:
            value = math.comb(k - n - 1, k)
            if k & 1:
                value = -value
        return self._store_int("binomial_int", value, (n_ref, k_ref))

    # =========================================================================
    # РАЦИОНАЛЬНЫЕ
    # =========================================================================

    def make_rat(self, num: Ref, den: Ref) -> Ref:
        """
        Рациональное num/den в канонической форме.

        Raises:
            DivisionByZeroError: den == 0
        """
        p = self._frac(num, "make_rat")
        q = self._frac(den, "make_rat")
        self._nonzero_divisor("make_rat", q, p, q)
        return self._store_rat("make_rat", p / q, (num, den))

    def is_rat(self, ref: Ref) -> Bool:
        if isinstance(ref, BagRef):
            self._bag(ref, "is_rat")
        return Bool.TRUE

    def rat_parts(self, ref: Ref) -> Tuple[int, int]:
        value = self._frac(ref, "rat_parts")
        return value.numerator, value.denominator

    def num_rat(self, ref: Ref) -> Ref:
        if isinstance(ref, BagRef):
            bag = self._bag(ref, "num_rat")
            if isinstance(bag, RatPair):
                return bag.num
        return ref

    def den_rat(self, ref: Ref) -> Ref:
        if isinstance(ref, BagRef):
            bag = self._bag(ref, "den_rat")
            if isinstance(bag, RatPair):
                return bag.den
        return ONE

    def sum_rat(self, left: Ref, right: Ref) -> Ref:
        value = self._frac(left, "sum_rat") + self._frac(right, "sum_rat")
        return self._store_rat("sum_rat", value, (left, right))

    def diff_rat(self, left: Ref, right: Ref) -> Ref:
        value = self._frac(left, "diff_rat") - self._frac(right, "diff_rat")
        return self._store_rat("diff_rat", value, (left, right))

    def prod_rat(self, left: Ref, right: Ref) -> Ref:
        value = self._frac(left, "prod_rat") * self._frac(right, "prod_rat")
        return self._store_rat("prod_rat", value, (left, right))

    def quo_rat(self, left: Ref, right: Ref) -> Ref:
        p = self._frac(left, "quo_rat")
        q = self._frac(right, "quo_rat")
        self._nonzero_divisor("quo_rat", q, p, q)
        return self._store_rat("quo_rat", p / q, (left, right))

    def ainv_rat(self, ref: Ref) -> Ref:
        return self._store_rat("ainv_rat", -self._frac(ref, "ainv_rat"), (ref,))

    def abs_rat(self, ref: Ref) -> Ref:
        return self._store_rat("abs_rat", abs(self._frac(ref, "abs_rat")), (ref,))

    def inv_rat(self, ref: Ref) -> Ref:
        value = self._frac(ref, "inv_rat")
        if value == 0:
            self._fail(DivisionByZeroError("inv_rat", "inverse of zero", value))
        return self._store_rat("inv_rat", 1 / value, (ref,))

    def pow_rat(self, base: Ref, exponent: Ref) -> Ref:
        value = self._frac(base, "pow_rat")
        e = self._int(exponent, "pow_rat")
        if value == 0 and e < 0:
            self._fail(DivisionByZeroError("pow_rat", "zero to a negative power", value, e))
        return self._store_rat("pow_rat", value ** e, (base, exponent))

    def eq_rat(self, left: Ref, right: Ref) -> Bool:
        return self.eq(left, right)

    def lt_rat(self, left: Ref, right: Ref) -> Bool:
        return self.lt(left, right)

    def mod_rat(self, ref: Ref, modulus: Ref) -> Union[Ref, Bool]:
        """
        Остаток дроби p/q по модулю n: k в [0, |n|), p ≡ k·q (mod n).

        Returns:
            Ссылка на целое k или Bool.FAIL, если q необратим по модулю n
        """
        value = self._frac(ref, "mod_rat")
        n = self._int(modulus, "mod_rat")
        self._nonzero_divisor("mod_rat", n, value, n)
        m = abs(n)
        p, q = value.numerator, value.denominator
        if q == 1:
            return self._store_int("mod_rat", p % m, (ref, modulus))
        try:
            inverse = pow(q, -1, m)
        except ValueError:
            return Bool.FAIL
        return self._store_int("mod_rat", (p * inverse) % m, (ref, modulus))


__all__ = [
    "MarkRootsCallback",
    "ErrorCallback",
    "NumericEngine",
]
