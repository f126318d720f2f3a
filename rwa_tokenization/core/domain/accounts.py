"""
Accounts — типизированные записи аккаунтов программы

Immutable Pydantic модели, в которые AccountCodec разбирает сырые байты
ledger. Это read-снапшоты: авторитетное состояние принадлежит программе,
ядро только читает.

Ширина каждого поля совпадает с layout-таблицей (contracts/schema/accounts.v1.json):
адреса — 32 байта, суммы — u64, месяцы — u32, проценты — u8, время — i64.
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from rwa_tokenization.core.domain.address import Address
from rwa_tokenization.core.math.integer_math import I64_MAX, I64_MIN, U8_MAX, U32_MAX, U64_MAX


# =============================================================================
# ENUMS
# =============================================================================


class AccountKind(str, Enum):
    """
    Тип аккаунта программы.

    Значение совпадает с именем типа на стороне программы — из него
    вычисляется 8-байтовый discriminator.
    """

    VAULT = "Vault"
    PRIMARY_SALE = "PrimarySale"
    MONTHLY_PAYMENT_RECORD = "MonthlyPaymentRecord"
    REDEMPTION_RECORD = "RedemptionRecord"
    LIQUIDITY_POOL = "LiquidityPool"
    LP_POSITION = "LPPosition"


# =============================================================================
# VAULT
# =============================================================================


class Vault(BaseModel):
    """
    Vault — именованный пул финансируемого cash-flow актива.

    Инвариант: current_month <= total_months.
    """

    authority: Address = Field(..., description="Authority vault")
    token_mint: Address = Field(..., description="Mint токенов vault")
    vault_treasury: Address = Field(..., description="Treasury token account")

    principal: int = Field(..., ge=0, le=U64_MAX, description="Основной долг")
    total_expected_interest: int = Field(..., ge=0, le=U64_MAX, description="Ожидаемые проценты")
    total_tokens_minted: int = Field(..., ge=0, le=U64_MAX, description="principal + interest")
    monthly_payment: int = Field(..., ge=0, le=U64_MAX, description="Ежемесячный платёж")
    total_months: int = Field(..., ge=0, le=U32_MAX, description="Срок в месяцах")
    current_month: int = Field(..., ge=0, le=U32_MAX, description="Число полученных платежей")

    vault_name: str = Field(..., description="Имя vault (seed адреса, неизменяемо)")
    created_at: int = Field(..., ge=I64_MIN, le=I64_MAX, description="Время создания (unix s)")
    total_redeemed: int = Field(..., ge=0, le=U64_MAX, description="Всего погашено")
    is_active: bool = Field(..., description="Флаг активности")

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @model_validator(mode="after")
    def validate_month_progress(self) -> "Vault":
        if self.current_month > self.total_months:
            raise ValueError(
                f"current_month {self.current_month} exceeds total_months {self.total_months}"
            )
        return self

    @property
    def remaining_months(self) -> int:
        return self.total_months - self.current_month

    @property
    def is_matured(self) -> bool:
        """Все плановые платежи получены."""
        return self.current_month >= self.total_months


# =============================================================================
# PRIMARY SALE
# =============================================================================


class PrimarySale(BaseModel):
    """Запись одной покупки на первичном рынке с дисконтом."""

    vault: Address
    buyer: Address
    token_amount: int = Field(..., ge=0, le=U64_MAX, description="Куплено токенов")
    purchase_price: int = Field(..., ge=0, le=U64_MAX, description="Оплачено (с дисконтом)")
    discount_percentage: int = Field(..., ge=0, le=U8_MAX, description="Дисконт, %")
    purchased_at: int = Field(..., ge=I64_MIN, le=I64_MAX)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


# =============================================================================
# MONTHLY PAYMENT / REDEMPTION
# =============================================================================


class MonthlyPaymentRecord(BaseModel):
    """
    Поступление платежа за конкретный месяц.

    available_for_redemption уменьшается погашениями и никогда не
    превышает amount.
    """

    vault: Address
    month: int = Field(..., ge=0, le=U32_MAX, description="Индекс месяца")
    amount: int = Field(..., ge=0, le=U64_MAX, description="Полученная сумма")
    received_at: int = Field(..., ge=I64_MIN, le=I64_MAX)
    available_for_redemption: int = Field(..., ge=0, le=U64_MAX)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @model_validator(mode="after")
    def validate_capacity(self) -> "MonthlyPaymentRecord":
        if self.available_for_redemption > self.amount:
            raise ValueError(
                f"available_for_redemption {self.available_for_redemption} "
                f"exceeds amount {self.amount}"
            )
        return self


class RedemptionRecord(BaseModel):
    """Одно погашение токенов."""

    vault: Address
    redeemer: Address
    token_amount: int = Field(..., ge=0, le=U64_MAX)
    redemption_value: int = Field(..., ge=0, le=U64_MAX)
    redeemed_at: int = Field(..., ge=I64_MIN, le=I64_MAX)
    month: int = Field(..., ge=0, le=U32_MAX)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


# =============================================================================
# LIQUIDITY
# =============================================================================


class LiquidityPool(BaseModel):
    """
    Пул вторичного рынка, привязанный к vault и rolling-окну.

    Инвариант: total_lp_shares == 0 ⇔ оба резерва == 0, а ненулевые доли
    требуют обоих ненулевых резервов. Он принадлежит программе;
    снапшот его не отвергает, а сообщает через is_consistent.
    """

    vault: Address
    token_a_mint: Address
    token_b_mint: Address
    pool_authority: Address
    pool_name: str = Field(..., description="Имя пула (seed адреса)")
    created_at: int = Field(..., ge=I64_MIN, le=I64_MAX)
    token_a_reserve: int = Field(..., ge=0, le=U64_MAX)
    token_b_reserve: int = Field(..., ge=0, le=U64_MAX)
    total_lp_shares: int = Field(..., ge=0, le=U64_MAX)
    window_start: int = Field(..., ge=I64_MIN, le=I64_MAX)
    window_number: int = Field(..., ge=0, le=U64_MAX)
    is_active: bool

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def is_empty(self) -> bool:
        return self.total_lp_shares == 0

    @property
    def is_consistent(self) -> bool:
        """Нет долей без ликвидности и ликвидности без долей."""
        reserves = (self.token_a_reserve, self.token_b_reserve)
        if self.total_lp_shares == 0:
            return reserves == (0, 0)
        return all(r > 0 for r in reserves)


class LPPosition(BaseModel):
    """Позиция провайдера ликвидности в пуле за конкретное окно."""

    pool: Address
    provider: Address = Field(..., description="Провайдер ликвидности (lp)")
    token_a_amount: int = Field(..., ge=0, le=U64_MAX)
    token_b_amount: int = Field(..., ge=0, le=U64_MAX)
    lp_shares: int = Field(..., ge=0, le=U64_MAX)
    forward_discount_percentage: int = Field(..., ge=0, le=U8_MAX)
    window_number: int = Field(..., ge=0, le=U64_MAX)
    provided_at: int = Field(..., ge=I64_MIN, le=I64_MAX)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


RECORD_TYPES = {
    AccountKind.VAULT: Vault,
    AccountKind.PRIMARY_SALE: PrimarySale,
    AccountKind.MONTHLY_PAYMENT_RECORD: MonthlyPaymentRecord,
    AccountKind.REDEMPTION_RECORD: RedemptionRecord,
    AccountKind.LIQUIDITY_POOL: LiquidityPool,
    AccountKind.LP_POSITION: LPPosition,
}
