"""
Representation — Непрозрачные ссылки и канонические формы

Модуль описывает, как движок кодирует числа:
- Immediate: значение встроено в ссылку, без аллокации в куче
- BagRef: ссылка на блок кучи (индекс арены + поколение слота)
- BoxedInt: блок кучи со знаком и последовательностью limbs
- RatPair: блок кучи рационального числа (числитель, знаменатель)

Порядок limbs: младший limb первым (little-endian по словам).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Старший limb BoxedInt никогда не равен нулю (нормализация)
2. Значение, помещающееся в immediate, всегда кодируется как Immediate
3. RatPair хранит взаимно простые num/den, den > 1
"""

from dataclasses import dataclass
from typing import Final, Sequence, Tuple, Union

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

MIN_BASE: Final[int] = 2
MAX_BASE: Final[int] = 36

# Цифры для оснований > 10 — строчные латинские буквы
DIGITS: Final[str] = "0123456789abcdefghijklmnopqrstuvwxyz"

# Цифр в одном блоке при переводе в недвоичные основания
CHUNK_DIGITS: Final[int] = 18


# =============================================================================
# ССЫЛКИ
# =============================================================================


@dataclass(frozen=True)
class Immediate:
    """Immediate-ссылка: значение встроено, блока в куче нет."""

    value: int


@dataclass(frozen=True)
class BagRef:
    """
    Ссылка на блок кучи.

    generation фиксирует поколение слота в момент аллокации: после
    освобождения слота и повторного использования старая ссылка
    распознаётся как устаревшая.
    """

    index: int
    generation: int


Ref = Union[Immediate, BagRef]


# =============================================================================
# БЛОКИ КУЧИ
# =============================================================================


@dataclass(frozen=True)
class BoxedInt:
    """Многословное целое: знак и limbs (младший первым)."""

    sign: int
    limbs: Tuple[int, ...]

    def __post_init__(self):
        if self.sign not in (-1, 1):
            raise ValueError(f"BoxedInt sign must be -1 or 1, got {self.sign}")
        if not self.limbs:
            raise ValueError("BoxedInt requires at least one limb")
        if self.limbs[-1] == 0:
            raise ValueError("BoxedInt most significant limb must be non-zero")


@dataclass(frozen=True)
class RatPair:
    """Рациональное число в сокращённой форме: (num, den), den > 1."""

    num: Ref
    den: Ref


Bag = Union[BoxedInt, RatPair]


# =============================================================================
# IMMEDIATE ГРАНИЦЫ
# =============================================================================


def immediate_bounds(immediate_bits: int) -> Tuple[int, int]:
    """
    Диапазон immediate-представления для знаковой ширины.

    Examples:
        >>> immediate_bounds(8)
        (-128, 127)
    """
    half = 1 << (immediate_bits - 1)
    return (-half, half - 1)


def fits_immediate(value: int, immediate_bits: int) -> bool:
    """Помещается ли value в immediate-представление."""
    low, high = immediate_bounds(immediate_bits)
    return low <= value <= high


# =============================================================================
# LIMBS
# =============================================================================


def split_limbs(magnitude: int, limb_bits: int) -> Tuple[int, ...]:
    """
    Разбиение неотрицательного числа на limbs (младший первым).

    Ноль даёт пустой кортеж.

    Examples:
        >>> split_limbs(0x1_0000_0002, 32)
        (2, 1)
    """
    if magnitude < 0:
        raise ValueError(f"magnitude must be non-negative, got {magnitude}")
    mask = (1 << limb_bits) - 1
    limbs = []
    while magnitude:
        limbs.append(magnitude & mask)
        magnitude >>= limb_bits
    return tuple(limbs)


def join_limbs(limbs: Sequence[int], limb_bits: int) -> int:
    """
    Сборка неотрицательного числа из limbs (младший первым).

    Raises:
        ValueError: Если limb вне [0, 2**limb_bits)
    """
    bound = 1 << limb_bits
    value = 0
    for position, limb in enumerate(limbs):
        if not 0 <= limb < bound:
            raise ValueError(
                f"limb {position} out of range for {limb_bits}-bit limbs: {limb}"
            )
        value |= limb << (position * limb_bits)
    return value


# =============================================================================
# ПРЕОБРАЗОВАНИЕ ОСНОВАНИЙ
# =============================================================================


def validate_base(base: int) -> int:
    """
    Проверка основания системы счисления.

    Raises:
        ValueError: Если base вне [2, 36]
    """
    if isinstance(base, bool) or not isinstance(base, int):
        raise TypeError(f"base must be int, got {type(base).__name__}")
    if not MIN_BASE <= base <= MAX_BASE:
        raise ValueError(f"base must be in [{MIN_BASE}, {MAX_BASE}], got {base}")
    return base


def format_int_base(value: int, base: int = 10) -> str:
    """
    Строковое представление целого в основании base.

    Ведущий '-' для отрицательных, без ведущих нулей, ноль → "0".

    Examples:
        >>> format_int_base(255, 16)
        'ff'
        >>> format_int_base(-5, 2)
        '-101'
    """
    validate_base(base)
    if value == 0:
        return "0"
    magnitude = abs(value)
    if base == 16:
        text = format(magnitude, "x")
    elif base == 8:
        text = format(magnitude, "o")
    elif base == 2:
        text = format(magnitude, "b")
    else:
        text = _format_magnitude(magnitude, base)
    return "-" + text if value < 0 else text


def _chunk_digits(chunk: int, base: int, width: int) -> str:
    chars = []
    for _ in range(width):
        chunk, digit = divmod(chunk, base)
        chars.append(DIGITS[digit])
    return "".join(reversed(chars))


def _format_magnitude(magnitude: int, base: int) -> str:
    """
    Цифры положительного числа делением на base**CHUNK_DIGITS.

    Не использует str(int): его длина ограничена интерпретатором
    (sys.set_int_max_str_digits).
    """
    chunk_base = base ** CHUNK_DIGITS
    chunks = []
    while magnitude:
        magnitude, chunk = divmod(magnitude, chunk_base)
        chunks.append(chunk)
    head = _chunk_digits(chunks[-1], base, CHUNK_DIGITS).lstrip("0")
    tail = [_chunk_digits(chunk, base, CHUNK_DIGITS) for chunk in reversed(chunks[:-1])]
    return head + "".join(tail)


def parse_int_base(text: str, base: int = 10) -> int:
    """
    Разбор строки, полученной format_int_base.

    Raises:
        ValueError: Если строка пуста или содержит недопустимые цифры
    """
    validate_base(base)
    body = text.strip()
    negative = body.startswith("-")
    if negative or body.startswith("+"):
        body = body[1:]
    if not body:
        raise ValueError(f"empty integer literal: {text!r}")
    value = 0
    for char in body.lower():
        digit = DIGITS.find(char)
        if digit < 0 or digit >= base:
            raise ValueError(f"invalid digit {char!r} for base {base} in {text!r}")
        value = value * base + digit
    return -value if negative else value


__all__ = [
    "MIN_BASE",
    "MAX_BASE",
    "DIGITS",
    "CHUNK_DIGITS",
    "Immediate",
    "BagRef",
    "Ref",
    "BoxedInt",
    "RatPair",
    "Bag",
    "immediate_bounds",
    "fits_immediate",
    "split_limbs",
    "join_limbs",
    "validate_base",
    "format_int_base",
    "parse_int_base",
]
