"""
Тесты для Representation — immediate/boxed кодирование и limbs

Проверяет:
1. Границы immediate-представления
2. Разбиение/сборку limbs (младший первым)
3. Инвариант нормализации BoxedInt
4. Форматирование и разбор в основаниях 2..36
"""

import pytest

from src.core.engine.representation import (
    DIGITS,
    MAX_BASE,
    MIN_BASE,
    BoxedInt,
    fits_immediate,
    format_int_base,
    immediate_bounds,
    join_limbs,
    parse_int_base,
    split_limbs,
    validate_base,
)


# =============================================================================
# IMMEDIATE
# =============================================================================


class TestImmediateBounds:
    """Тесты границ immediate-представления"""

    def test_bounds_8_bits(self) -> None:
        assert immediate_bounds(8) == (-128, 127)

    def test_bounds_default_width(self) -> None:
        """61 бит → [-2**60, 2**60 - 1]"""
        assert immediate_bounds(61) == (-(2**60), 2**60 - 1)

    def test_fits_immediate_edges(self) -> None:
        assert fits_immediate(127, 8)
        assert fits_immediate(-128, 8)
        assert not fits_immediate(128, 8)
        assert not fits_immediate(-129, 8)


# =============================================================================
# LIMBS
# =============================================================================


class TestLimbs:
    """Тесты разбиения и сборки limbs"""

    def test_split_least_significant_first(self) -> None:
        assert split_limbs(0x1_0000_0002, 32) == (2, 1)
        assert split_limbs(0x0102, 8) == (2, 1)

    def test_split_zero_is_empty(self) -> None:
        assert split_limbs(0, 64) == ()

    def test_split_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            split_limbs(-1, 8)

    def test_join_inverts_split(self) -> None:
        for value in (1, 255, 256, 2**64, 2**200 + 12345, 3**100):
            for bits in (8, 16, 32, 64):
                assert join_limbs(split_limbs(value, bits), bits) == value

    def test_join_rejects_out_of_range_limb(self) -> None:
        with pytest.raises(ValueError, match="limb 1 out of range"):
            join_limbs([1, 256], 8)

    def test_join_ignores_leading_zero_limbs(self) -> None:
        assert join_limbs([5, 0, 0], 8) == 5


class TestBoxedInt:
    """Тесты инварианта нормализации BoxedInt"""

    def test_valid_block(self) -> None:
        block = BoxedInt(sign=-1, limbs=(0, 1))
        assert block.sign == -1
        assert block.limbs == (0, 1)

    def test_leading_zero_limb_rejected(self) -> None:
        with pytest.raises(ValueError, match="most significant limb"):
            BoxedInt(sign=1, limbs=(1, 0))

    def test_empty_limbs_rejected(self) -> None:
        with pytest.raises(ValueError):
            BoxedInt(sign=1, limbs=())

    def test_bad_sign_rejected(self) -> None:
        with pytest.raises(ValueError):
            BoxedInt(sign=0, limbs=(1,))


# =============================================================================
# ОСНОВАНИЯ
# =============================================================================


class TestBaseConversion:
    """Тесты форматирования и разбора"""

    def test_digits_alphabet(self) -> None:
        assert len(DIGITS) == MAX_BASE
        assert DIGITS[10] == "a"

    @pytest.mark.parametrize(
        "value,base,expected",
        [
            (0, 2, "0"),
            (255, 16, "ff"),
            (-5, 2, "-101"),
            (35, 36, "z"),
            (8, 8, "10"),
            (-1234567890, 10, "-1234567890"),
            (10**18, 10, "1" + "0" * 18),
            (3**40, 3, "1" + "0" * 40),
        ],
    )
    def test_format(self, value: int, base: int, expected: str) -> None:
        assert format_int_base(value, base) == expected

    def test_parse_round_trip(self) -> None:
        for base in (2, 8, 10, 16, 36):
            for value in (0, 1, -1, 35, -12345, 2**200 + 17, -(3**150)):
                assert parse_int_base(format_int_base(value, base), base) == value

    def test_decimal_beyond_interpreter_digit_limit(self) -> None:
        assert format_int_base(10**5000) == "1" + "0" * 5000
        assert format_int_base(-(10**5000) - 7) == "-1" + "0" * 4999 + "7"
        value = 7**6000
        assert parse_int_base(format_int_base(value, 10), 10) == value
        assert parse_int_base(format_int_base(-value, 3), 3) == -value

    def test_parse_accepts_uppercase_and_plus(self) -> None:
        assert parse_int_base("FF", 16) == 255
        assert parse_int_base("+10", 2) == 2

    def test_parse_rejects_bad_digit(self) -> None:
        with pytest.raises(ValueError, match="invalid digit"):
            parse_int_base("12", 2)

    def test_parse_rejects_empty(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            parse_int_base("-", 10)

    def test_validate_base_range(self) -> None:
        assert validate_base(MIN_BASE) == MIN_BASE
        with pytest.raises(ValueError):
            validate_base(1)
        with pytest.raises(ValueError):
            validate_base(37)
        with pytest.raises(TypeError):
            validate_base(True)
