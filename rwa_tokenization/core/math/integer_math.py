"""
IntegerMath — целочисленные примитивы фиксированной ширины

Все денежные величины протокола — беззнаковые целые фиксированной ширины.
Модуль даёт проверки диапазонов, checked-арифметику (аналог checked_add /
checked_sub на стороне программы) и integer_sqrt.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Никаких float: все промежуточные значения — int произвольной точности
2. Выход за ширину поля → ArithmeticOverflow (никакого wrap-around)
3. Все функции детерминированы и не имеют побочных эффектов
"""

from typing import Final

from rwa_tokenization.core.errors import ArithmeticOverflow

# =============================================================================
# ГРАНИЦЫ ТИПОВ
# =============================================================================

U8_MAX: Final[int] = (1 << 8) - 1
U32_MAX: Final[int] = (1 << 32) - 1
U64_MAX: Final[int] = (1 << 64) - 1
I64_MIN: Final[int] = -(1 << 63)
I64_MAX: Final[int] = (1 << 63) - 1


# =============================================================================
# ПРОВЕРКИ ДИАПАЗОНА
# =============================================================================


def _ensure_int(value: int, name: str) -> int:
    # bool является подклассом int, но как количество не допускается
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    return value


def ensure_range(value: int, low: int, high: int, name: str = "value") -> int:
    """
    Проверка, что value ∈ [low, high].

    Raises:
        TypeError: если value не int
        ArithmeticOverflow: если value вне диапазона
    """
    _ensure_int(value, name)
    if value < low or value > high:
        raise ArithmeticOverflow(f"{name}={value} out of range [{low}, {high}]")
    return value


def ensure_u8(value: int, name: str = "value") -> int:
    return ensure_range(value, 0, U8_MAX, name)


def ensure_u32(value: int, name: str = "value") -> int:
    return ensure_range(value, 0, U32_MAX, name)


def ensure_u64(value: int, name: str = "value") -> int:
    return ensure_range(value, 0, U64_MAX, name)


def ensure_i64(value: int, name: str = "value") -> int:
    return ensure_range(value, I64_MIN, I64_MAX, name)


# =============================================================================
# CHECKED ARITHMETIC
# =============================================================================


def checked_add_u64(a: int, b: int) -> int:
    """
    Сложение u64 с проверкой переполнения.

    Raises:
        ArithmeticOverflow: если a, b или a + b вне u64
    """
    ensure_u64(a, "a")
    ensure_u64(b, "b")
    return ensure_u64(a + b, "a + b")


def checked_sub_u64(a: int, b: int) -> int:
    """
    Вычитание u64 с проверкой underflow.

    Raises:
        ArithmeticOverflow: если результат отрицательный
    """
    ensure_u64(a, "a")
    ensure_u64(b, "b")
    return ensure_u64(a - b, "a - b")


# =============================================================================
# INTEGER SQRT
# =============================================================================


def integer_sqrt(n: int) -> int:
    """
    Целочисленный квадратный корень методом Ньютона.

    Начальное приближение (n + 1) // 2, итерации монотонно убывают;
    остановка, когда очередная итерация перестаёт уменьшаться.

    Гарантии:
        integer_sqrt(0) == 0
        integer_sqrt(k * k) == k
        integer_sqrt(n) ** 2 <= n < (integer_sqrt(n) + 1) ** 2

    Args:
        n: Неотрицательное целое

    Returns:
        floor(sqrt(n))

    Raises:
        ValueError: если n < 0

    Examples:
        >>> integer_sqrt(40000)
        200
        >>> integer_sqrt(99)
        9
    """
    _ensure_int(n, "n")
    if n < 0:
        raise ValueError(f"integer_sqrt is undefined for negative input: {n}")
    if n < 2:
        return n

    x = n
    y = (x + 1) // 2
    while y < x:
        x = y
        y = (x + n // x) // 2
    return x
