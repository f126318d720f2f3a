"""
Тесты для модуля IntegerMath

Проверяет:
1. integer_sqrt: 0, полные квадраты, floor-свойство, отрицательный вход
2. Проверки диапазонов u8/u32/u64/i64
3. Checked-арифметику u64
"""

import math

import pytest

from rwa_tokenization.core.errors import ArithmeticOverflow
from rwa_tokenization.core.math.integer_math import (
    I64_MAX,
    I64_MIN,
    U8_MAX,
    U32_MAX,
    U64_MAX,
    checked_add_u64,
    checked_sub_u64,
    ensure_i64,
    ensure_u8,
    ensure_u32,
    ensure_u64,
    integer_sqrt,
)

# =============================================================================
# INTEGER SQRT
# =============================================================================


class TestIntegerSqrt:
    """Тесты для integer_sqrt"""

    def test_zero_and_one(self) -> None:
        assert integer_sqrt(0) == 0
        assert integer_sqrt(1) == 1

    def test_perfect_squares(self) -> None:
        """integer_sqrt(k*k) == k"""
        for k in range(0, 5000):
            assert integer_sqrt(k * k) == k

    def test_large_perfect_squares(self) -> None:
        for k in (2**32 - 1, 2**32, 2**63 + 12345, U64_MAX):
            assert integer_sqrt(k * k) == k

    def test_floor_property(self) -> None:
        """isqrt(n)^2 <= n < (isqrt(n)+1)^2"""
        for n in list(range(0, 3000)) + [10**18 + 7, U64_MAX, U64_MAX * U64_MAX - 1]:
            r = integer_sqrt(n)
            assert r * r <= n < (r + 1) * (r + 1)

    def test_matches_stdlib_isqrt(self) -> None:
        for n in (2, 3, 99, 40_000, 123_456_789, 2**100 + 1):
            assert integer_sqrt(n) == math.isqrt(n)

    def test_lp_example(self) -> None:
        assert integer_sqrt(100 * 400) == 200

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            integer_sqrt(-1)

    def test_non_int_rejected(self) -> None:
        with pytest.raises(TypeError):
            integer_sqrt(4.0)


# =============================================================================
# RANGE CHECKS
# =============================================================================


class TestRangeChecks:
    """Тесты для ensure_u8 / u32 / u64 / i64"""

    def test_bounds_accepted(self) -> None:
        assert ensure_u8(0) == 0
        assert ensure_u8(U8_MAX) == U8_MAX
        assert ensure_u32(U32_MAX) == U32_MAX
        assert ensure_u64(U64_MAX) == U64_MAX
        assert ensure_i64(I64_MIN) == I64_MIN
        assert ensure_i64(I64_MAX) == I64_MAX

    @pytest.mark.parametrize(
        "check,value",
        [
            (ensure_u8, U8_MAX + 1),
            (ensure_u8, -1),
            (ensure_u32, U32_MAX + 1),
            (ensure_u64, U64_MAX + 1),
            (ensure_u64, -1),
            (ensure_i64, I64_MAX + 1),
            (ensure_i64, I64_MIN - 1),
        ],
    )
    def test_out_of_range(self, check, value) -> None:
        with pytest.raises(ArithmeticOverflow):
            check(value)

    def test_overflow_is_overflow_error(self) -> None:
        """ArithmeticOverflow ловится как стандартный OverflowError"""
        with pytest.raises(OverflowError):
            ensure_u64(U64_MAX + 1)

    def test_name_in_message(self) -> None:
        with pytest.raises(ArithmeticOverflow, match="total_months"):
            ensure_u32(U32_MAX + 1, "total_months")

    def test_bool_rejected(self) -> None:
        with pytest.raises(TypeError):
            ensure_u64(True)


# =============================================================================
# CHECKED ARITHMETIC
# =============================================================================


class TestCheckedArithmetic:
    """Тесты для checked_add_u64 / checked_sub_u64"""

    def test_add(self) -> None:
        assert checked_add_u64(1_000_000, 50_000) == 1_050_000
        assert checked_add_u64(U64_MAX - 1, 1) == U64_MAX

    def test_add_overflow(self) -> None:
        with pytest.raises(ArithmeticOverflow):
            checked_add_u64(U64_MAX, 1)

    def test_sub(self) -> None:
        assert checked_sub_u64(10, 10) == 0

    def test_sub_underflow(self) -> None:
        with pytest.raises(ArithmeticOverflow):
            checked_sub_u64(0, 1)
