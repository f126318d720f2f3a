"""
Params — параметры операций протокола

Immutable Pydantic модели аргументов инструкций. Проверяется только
ширина полей (u8/u32/u64); доменные ограничения (дисконт 0..100, имя как
seed) проверяет InstructionCodec и поднимает протокольные ошибки.

Модели работают в обычном (lax) режиме pydantic: True становится 1,
"5" становится 5. Строгая проверка типов (bool и str вместо int
отвергаются) выполняется кодеком, когда encode_instruction получает
сырой mapping параметров.
"""

from pydantic import BaseModel, Field

from rwa_tokenization.core.math.integer_math import U8_MAX, U32_MAX, U64_MAX


class CreateVaultParams(BaseModel):
    """Параметры создания vault."""

    principal: int = Field(..., ge=0, le=U64_MAX, description="Основной долг")
    total_expected_interest: int = Field(..., ge=0, le=U64_MAX, description="Ожидаемые проценты")
    monthly_payment: int = Field(..., ge=0, le=U64_MAX, description="Ежемесячный платёж")
    total_months: int = Field(..., ge=0, le=U32_MAX, description="Срок в месяцах")
    vault_name: str = Field(..., min_length=1, description="Имя vault (seed адреса)")

    model_config = {"frozen": True}


class PurchaseTokensParams(BaseModel):
    """Параметры покупки на первичном рынке."""

    token_amount: int = Field(..., ge=0, le=U64_MAX)
    discount_percentage: int = Field(..., ge=0, le=U8_MAX)

    model_config = {"frozen": True}


class ProvideLiquidityParams(BaseModel):
    """Параметры внесения ликвидности."""

    token_a_amount: int = Field(..., ge=0, le=U64_MAX)
    token_b_amount: int = Field(..., ge=0, le=U64_MAX)
    forward_discount_percentage: int = Field(..., ge=0, le=U8_MAX)

    model_config = {"frozen": True}
