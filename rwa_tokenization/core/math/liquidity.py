"""
LiquidityMath — дисконтное ценообразование и выпуск LP shares

Off-chain копия расчётов программы. Результаты обязаны совпадать с
on-chain значениями бит-в-бит, поэтому:
- только целочисленная арифметика (деление с усечением, floor для
  неотрицательных операндов);
- промежуточные произведения не ограничены (на стороне программы — u128),
  итог проверяется на попадание в u64.

ФОРМУЛЫ:
    discount_amount = floor(token_amount * discount / 100)
    purchase_price  = token_amount - discount_amount

    lp_shares (пустой пул)  = isqrt(a * b)
    lp_shares (иначе)       = min(floor(a * S / Ra), floor(b * S / Rb))

    withdraw_a = floor(shares * Ra / S)
    withdraw_b = floor(shares * Rb / S)

Минимум двух пропорций — защита от манипуляций: перекошенный депозит
не может получить непропорционально много долей.
"""

from typing import Final, NamedTuple

from rwa_tokenization.core.errors import DivisionByZero, InvalidDiscount
from rwa_tokenization.core.math.integer_math import (
    checked_add_u64,
    ensure_i64,
    ensure_u64,
    integer_sqrt,
)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

DISCOUNT_MIN_PCT: Final[int] = 0
DISCOUNT_MAX_PCT: Final[int] = 100

# Длина rolling-окна пула: 90 дней (3 месяца) в секундах
LIQUIDITY_WINDOW_SECONDS: Final[int] = 90 * 24 * 60 * 60


# =============================================================================
# ТИПЫ
# =============================================================================


class WithdrawalAmounts(NamedTuple):
    """Суммы токенов A/B, возвращаемые при сжигании LP shares."""

    token_a_amount: int
    token_b_amount: int


class LiquidityWindow(NamedTuple):
    """Состояние rolling-окна пула."""

    window_start: int
    window_number: int


# =============================================================================
# ДИСКОНТ
# =============================================================================


def validate_discount(discount_percent: int) -> int:
    """
    Проверка процента дисконта.

    Raises:
        InvalidDiscount: если значение не int или вне 0..100
    """
    if isinstance(discount_percent, bool) or not isinstance(discount_percent, int):
        raise InvalidDiscount(discount_percent)
    if discount_percent < DISCOUNT_MIN_PCT or discount_percent > DISCOUNT_MAX_PCT:
        raise InvalidDiscount(discount_percent)
    return discount_percent


def discount_amount(token_amount: int, discount_percent: int) -> int:
    """floor(token_amount * discount_percent / 100)."""
    ensure_u64(token_amount, "token_amount")
    validate_discount(discount_percent)
    return token_amount * discount_percent // 100


def purchase_price(token_amount: int, discount_percent: int) -> int:
    """
    Цена покупки на первичном рынке с дисконтом.

    Args:
        token_amount: Количество токенов (номинал, u64)
        discount_percent: Дисконт в процентах, 0..100

    Returns:
        token_amount - floor(token_amount * discount_percent / 100)

    Raises:
        InvalidDiscount: discount_percent вне 0..100
        ArithmeticOverflow: token_amount вне u64

    Examples:
        >>> purchase_price(1_000_000, 10)
        900000
        >>> purchase_price(999, 33)
        670
    """
    return token_amount - discount_amount(token_amount, discount_percent)


# =============================================================================
# LP SHARES
# =============================================================================


def lp_shares(
    token_a_amount: int,
    token_b_amount: int,
    pool_reserve_a: int,
    pool_reserve_b: int,
    total_lp_shares: int,
) -> int:
    """
    Количество LP shares за депозит (token_a_amount, token_b_amount).

    Пустой пул (total_lp_shares == 0): геометрическое среднее isqrt(a * b),
    задающее начальное соотношение share/value.

    Иначе: меньшая из двух пропорций — провайдер всегда получает
    консервативное количество долей.

    Raises:
        DivisionByZero: резерв равен 0 при total_lp_shares != 0
        ArithmeticOverflow: вход или результат вне u64

    Examples:
        >>> lp_shares(100, 400, 0, 0, 0)
        200
        >>> lp_shares(10, 50, 100, 400, 200)
        20
    """
    ensure_u64(token_a_amount, "token_a_amount")
    ensure_u64(token_b_amount, "token_b_amount")
    ensure_u64(pool_reserve_a, "pool_reserve_a")
    ensure_u64(pool_reserve_b, "pool_reserve_b")
    ensure_u64(total_lp_shares, "total_lp_shares")

    if total_lp_shares == 0:
        return ensure_u64(integer_sqrt(token_a_amount * token_b_amount), "lp_shares")

    if pool_reserve_a == 0 or pool_reserve_b == 0:
        raise DivisionByZero(
            f"Inconsistent pool: reserves=({pool_reserve_a}, {pool_reserve_b}) "
            f"with total_lp_shares={total_lp_shares}"
        )

    a_ratio = token_a_amount * total_lp_shares // pool_reserve_a
    b_ratio = token_b_amount * total_lp_shares // pool_reserve_b
    return ensure_u64(min(a_ratio, b_ratio), "lp_shares")


def withdrawal_amounts(
    lp_shares_to_burn: int,
    pool_reserve_a: int,
    pool_reserve_b: int,
    total_lp_shares: int,
) -> WithdrawalAmounts:
    """
    Пропорциональный вывод ликвидности.

    Raises:
        DivisionByZero: total_lp_shares == 0 (пустой пул)
        ValueError: сжигается больше shares, чем выпущено
    """
    ensure_u64(lp_shares_to_burn, "lp_shares")
    ensure_u64(pool_reserve_a, "pool_reserve_a")
    ensure_u64(pool_reserve_b, "pool_reserve_b")
    ensure_u64(total_lp_shares, "total_lp_shares")

    if total_lp_shares == 0:
        raise DivisionByZero("Cannot withdraw from a pool with zero LP shares")
    if lp_shares_to_burn > total_lp_shares:
        raise ValueError(
            f"lp_shares {lp_shares_to_burn} exceeds total_lp_shares {total_lp_shares}"
        )

    return WithdrawalAmounts(
        token_a_amount=lp_shares_to_burn * pool_reserve_a // total_lp_shares,
        token_b_amount=lp_shares_to_burn * pool_reserve_b // total_lp_shares,
    )


# =============================================================================
# VAULT / WINDOW
# =============================================================================


def total_tokens_minted(principal: int, total_expected_interest: int) -> int:
    """Полный выпуск токенов vault: principal + interest (checked u64)."""
    return checked_add_u64(principal, total_expected_interest)


def advance_window(window_start: int, window_number: int, now: int) -> LiquidityWindow:
    """
    Переход rolling-окна пула.

    Окно перезапускается только когда прошло строго больше
    LIQUIDITY_WINDOW_SECONDS с window_start.

    Args:
        window_start: Начало текущего окна (unix seconds, i64)
        window_number: Номер текущего окна (u64)
        now: Текущее время (unix seconds, i64)

    Returns:
        LiquidityWindow — новое (или неизменное) окно
    """
    ensure_i64(window_start, "window_start")
    ensure_i64(now, "now")
    ensure_u64(window_number, "window_number")

    if now - window_start > LIQUIDITY_WINDOW_SECONDS:
        return LiquidityWindow(window_start=now, window_number=checked_add_u64(window_number, 1))
    return LiquidityWindow(window_start=window_start, window_number=window_number)
