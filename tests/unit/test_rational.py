"""
Тесты для Rational — точное рациональное число

Проверяемые инварианты:
1. Сокращение при конструировании и после каждой операции
2. Неподвижная точка: Rational(r.num(), r.den()) == r
3. mod(n): k в [0, n), p ≡ k·q (mod n); необратимый q → NotInvertibleError
4. Строка "<num> / <den>" в заданном основании
5. Усечённое десятичное разложение
"""

import math

import pytest

from src.core.errors import DivisionByZeroError, NotInvertibleError
from src.core.numbers import Integer, Rational


class TestRationalConstruction:
    """Тесты конструирования и сокращения"""

    def test_sum_scenario(self) -> None:
        result = Rational(1, 2) + Rational(1, 3)
        assert result.num() == 5
        assert result.den() == 6

    def test_auto_reduced(self) -> None:
        r = Rational(2, 4)
        assert r.num() == 1
        assert r.den() == 2

    def test_negative_denominator_normalized(self) -> None:
        r = Rational(3, -6)
        assert r.num() == -1
        assert r.den() == 2

    def test_single_argument(self) -> None:
        assert Rational(7) == Rational(7, 1)
        assert Rational(7).den() == 1
        assert Rational() == 0

    def test_from_integers_and_rationals(self) -> None:
        assert Rational(Integer(2**100), Integer(2**99)) == 2
        assert Rational(Rational(1, 2), Rational(1, 4)) == 2
        assert Rational(Rational(3, 5)) == Rational(3, 5)

    def test_zero_denominator(self) -> None:
        with pytest.raises(DivisionByZeroError):
            Rational(1, 0)

    def test_rejects_float(self) -> None:
        with pytest.raises(TypeError):
            Rational(0.5)
        with pytest.raises(TypeError):
            Rational(1, 2.0)

    def test_reduction_fixed_point(self) -> None:
        for n in (-12, -7, 0, 1, 6, 2**70, -(3**50)):
            for d in (-9, -1, 1, 4, 12, 2**65):
                r = Rational(n, d)
                num, den = r.num(), r.den()
                assert den > 0
                assert Integer.gcd(num, den) == 1
                again = Rational(num, den)
                assert again.num() == num
                assert again.den() == den

    def test_integral_value(self) -> None:
        r = Rational(4, 2)
        assert r.is_integral()
        assert r.den() == 1
        assert r == Integer(2)
        assert Integer(2) == r
        assert not Rational(1, 2).is_integral()
        assert Rational(1, 2).is_rat()


class TestRationalArithmetic:
    """Тесты арифметики"""

    def test_operations_stay_reduced(self) -> None:
        a, b = Rational(1, 6), Rational(1, 3)
        assert a + b == Rational(1, 2)
        assert b - a == Rational(1, 6)
        assert a * b == Rational(1, 18)
        assert a / b == Rational(1, 2)
        assert -a == Rational(-1, 6)

    def test_difference_to_zero_is_integral(self) -> None:
        r = Rational(1, 2) - Rational(1, 2)
        assert r == 0
        assert r.is_integral()

    def test_mixed_with_int_and_integer(self) -> None:
        half = Rational(1, 2)
        assert half * 2 == 1
        assert 2 * half == 1
        assert 1 - half == half
        assert 1 / Rational(1, 3) == 3
        assert Integer(1) / Rational(1, 3) == 3
        assert Integer(1) + half == Rational(3, 2)
        assert half + Integer(1) == Rational(3, 2)

    def test_division_by_zero(self) -> None:
        with pytest.raises(DivisionByZeroError):
            Rational(1, 2) / 0

    def test_pow(self) -> None:
        assert Rational(2, 3).pow(2) == Rational(4, 9)
        assert Rational(2, 3).pow(-2) == Rational(9, 4)
        assert Rational(2, 3) ** Integer(3) == Rational(8, 27)
        assert Rational(5, 7).pow(0) == 1

    def test_pow_zero_negative(self) -> None:
        with pytest.raises(DivisionByZeroError):
            Rational(0).pow(-1)

    def test_abs_and_inv(self) -> None:
        assert Rational(-3, 4).abs() == Rational(3, 4)
        assert abs(Rational(-3, 4)) == Rational(3, 4)
        assert Rational(-3, 4).inv() == Rational(-4, 3)
        assert Rational(1, 5).inv() == 5
        with pytest.raises(DivisionByZeroError):
            Rational(0).inv()

    def test_large_values(self) -> None:
        r = Rational(2**200 + 1, 3**100)
        assert (r * r.inv()) == 1
        assert (r - r) == 0
        assert r.num() == 2**200 + 1


class TestRationalPredicates:
    """Тесты знака и сравнения"""

    def test_sign(self) -> None:
        assert Rational(-3, 4).sign() == -1
        assert Rational(3, -4).is_neg()
        assert Rational(3, 4).is_pos()
        assert Rational(0, 5).sign() == 0
        assert not Rational(0)

    def test_ordering(self) -> None:
        assert Rational(1, 3) < Rational(1, 2)
        assert Rational(1, 2) > 0
        assert Rational(-1, 2) < Integer(0)
        assert Integer(0) > Rational(-1, 2)
        assert Rational(2, 4) <= Rational(1, 2)
        assert Rational(2, 3) >= Rational(1, 2)

    def test_hash(self) -> None:
        assert hash(Rational(4, 2)) == hash(Integer(2)) == hash(2)
        assert hash(Rational(1, 2)) == hash(Rational(2, 4))
        assert len({Rational(1, 2), Rational(2, 4), Rational(3, 6)}) == 1


class TestRationalMod:
    """Тесты Rational.mod"""

    def test_inverse_scenario(self) -> None:
        assert Rational(1, 5).mod(Integer(7)) == 3

    def test_mod_definition(self) -> None:
        for p, q in ((-1, 3), (7, 4), (22, 7), (2**70 + 1, 3**20)):
            for n in (5, 11, 2**61 - 1):
                if math.gcd(q, n) != 1:
                    continue
                k = Rational(p, q).mod(n)
                assert 0 <= k < n
                assert (Integer(p) - k * Rational(p, q).den()).mod(n) == 0

    def test_integral_mod(self) -> None:
        assert Rational(7).mod(3) == 1
        assert Rational(-7).mod(3) == 2
        assert Rational(3, 2).mod(1) == 0

    def test_not_invertible(self, make_engine) -> None:
        reported = []
        make_engine(on_error=reported.append)
        with pytest.raises(NotInvertibleError, match="Rational.mod"):
            Rational(1, 2).mod(4)
        assert len(reported) == 1

    def test_zero_modulus(self) -> None:
        with pytest.raises(DivisionByZeroError):
            Rational(1, 2).mod(0)


class TestRationalStrings:
    """Тесты строкового представления"""

    def test_to_string(self) -> None:
        assert Rational(1, 2).to_string() == "1 / 2"
        assert Rational(-1, 2).to_string() == "-1 / 2"
        assert Rational(3).to_string() == "3 / 1"
        assert Rational(255, 16).to_string(16) == "ff / 10"

    def test_str_repr(self) -> None:
        assert str(Rational(2, 6)) == "1 / 3"
        assert repr(Rational(2, 6)) == "Rational(1, 3)"

    def test_format_honours_base(self) -> None:
        assert format(Rational(255, 16), "x") == "ff / 10"
        assert format(Rational(8, 9), "o") == "10 / 11"
        assert format(Rational(255, 16), "X") == "FF / 10"
        assert f"{Rational(1, 2):>8}" == "   1 / 2"
        assert f"{Rational(1, 2):>8d}" == "   1 / 2"

    @pytest.mark.parametrize(
        "n,d,precision,expected",
        [
            (22, 7, 5, "3.14285"),
            (1, 8, 5, "0.12500"),
            (-1, 3, 4, "-0.3333"),
            (-7, 2, 1, "-3.5"),
            (7, 2, 0, "3"),
            (2**70, 1, 2, "1180591620717411303424.00"),
        ],
    )
    def test_decimal_expansion(self, n: int, d: int, precision: int, expected: str) -> None:
        assert Rational(n, d).decimal_expansion(precision) == expected

    def test_decimal_expansion_truncates(self) -> None:
        assert Rational(2, 3).decimal_expansion(3) == "0.666"

    def test_decimal_expansion_truncated_zero_is_unsigned(self) -> None:
        assert Rational(-1, 3).decimal_expansion(0) == "0"
        assert Rational(-1, 1000).decimal_expansion(2) == "0.00"
        assert Rational(-1, 1000).decimal_expansion(3) == "-0.001"

    def test_decimal_expansion_of_huge_value(self) -> None:
        text = Rational(10**5000 + 1, 10).decimal_expansion(1)
        assert text == "1" + "0" * 4999 + ".1"

    def test_decimal_expansion_negative_precision(self) -> None:
        with pytest.raises(ValueError):
            Rational(1, 3).decimal_expansion(-1)
