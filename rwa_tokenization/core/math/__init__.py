"""
Core math modules для протокола токенизации

Целочисленные примитивы и расчёты ликвидности, совпадающие с on-chain
программой бит-в-бит. Float не используется нигде.
"""

# Integer primitives
from rwa_tokenization.core.math.integer_math import (
    I64_MAX,
    I64_MIN,
    U8_MAX,
    U32_MAX,
    U64_MAX,
    checked_add_u64,
    checked_sub_u64,
    ensure_i64,
    ensure_range,
    ensure_u8,
    ensure_u32,
    ensure_u64,
    integer_sqrt,
)

# Liquidity & pricing
from rwa_tokenization.core.math.liquidity import (
    DISCOUNT_MAX_PCT,
    DISCOUNT_MIN_PCT,
    LIQUIDITY_WINDOW_SECONDS,
    LiquidityWindow,
    WithdrawalAmounts,
    advance_window,
    discount_amount,
    lp_shares,
    purchase_price,
    total_tokens_minted,
    validate_discount,
    withdrawal_amounts,
)

__all__ = [
    # Integer primitives: Constants
    "I64_MAX",
    "I64_MIN",
    "U8_MAX",
    "U32_MAX",
    "U64_MAX",
    # Integer primitives: Functions
    "checked_add_u64",
    "checked_sub_u64",
    "ensure_i64",
    "ensure_range",
    "ensure_u8",
    "ensure_u32",
    "ensure_u64",
    "integer_sqrt",
    # Liquidity: Constants
    "DISCOUNT_MAX_PCT",
    "DISCOUNT_MIN_PCT",
    "LIQUIDITY_WINDOW_SECONDS",
    # Liquidity: Types
    "LiquidityWindow",
    "WithdrawalAmounts",
    # Liquidity: Functions
    "advance_window",
    "discount_amount",
    "lp_shares",
    "purchase_price",
    "total_tokens_minted",
    "validate_discount",
    "withdrawal_amounts",
]
