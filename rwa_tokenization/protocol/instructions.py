"""
InstructionCodec — построение бинарных инструкций программы

Payload: 1 байт discriminator (0..7), затем поля в порядке схемы
(u64/u32/u8 little-endian, строки — u32 LE длина + UTF-8).

Порядок аккаунтов и флаги signer/writable — такая же часть wire-контракта,
как и байты payload, поэтому они берутся из таблицы instructions.v1.json,
а не собираются ad hoc в каждой функции.

Модуль ничего не подписывает и не отправляет в сеть.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from rwa_tokenization.core.contracts import INSTRUCTION_LAYOUTS_V1, load_layout_table
from rwa_tokenization.core.domain.address import Address
from rwa_tokenization.core.domain.params import (
    CreateVaultParams,
    ProvideLiquidityParams,
    PurchaseTokensParams,
)
from rwa_tokenization.core.errors import SchemaMismatch
from rwa_tokenization.core.math.liquidity import validate_discount
from rwa_tokenization.protocol.config import FIXED_ACCOUNTS
from rwa_tokenization.protocol.layout import FieldSpec, decode_fields, encode_fields, fields_from_table
from rwa_tokenization.protocol.pda import seed_bytes

logger = logging.getLogger(__name__)


# =============================================================================
# ТИПЫ
# =============================================================================


class Action(str, Enum):
    """Действие протокола; значение — ключ в instructions.v1.json."""

    CREATE_VAULT = "create_vault"
    MINT_TOKENS = "mint_tokens"
    PURCHASE_TOKENS_PRIMARY = "purchase_tokens_primary"
    RECEIVE_MONTHLY_PAYMENT = "receive_monthly_payment"
    REDEEM_TOKENS = "redeem_tokens"
    CREATE_LIQUIDITY_POOL = "create_liquidity_pool"
    PROVIDE_LIQUIDITY = "provide_liquidity"
    WITHDRAW_LIQUIDITY = "withdraw_liquidity"


@dataclass(frozen=True)
class AccountMeta:
    """Аккаунт инструкции с флагами доступа."""

    address: Address
    is_signer: bool
    is_writable: bool


@dataclass(frozen=True)
class Instruction:
    """Готовая к подписи инструкция."""

    program_id: Address
    accounts: Tuple[AccountMeta, ...]
    data: bytes


@dataclass(frozen=True)
class AccountSlot:
    """Позиция в списке аккаунтов инструкции."""

    name: str
    is_signer: bool
    is_writable: bool
    # Адрес берётся из другого слота (redeem: vault дважды)
    address_of: Optional[str] = None
    # Well-known программа (token / system / rent)
    fixed: Optional[str] = None

    @property
    def source(self) -> Optional[str]:
        """Имя входного аргумента, из которого берётся адрес (None для fixed)."""
        if self.fixed is not None:
            return None
        return self.address_of or self.name


@dataclass(frozen=True)
class InstructionSchema:
    """Схема одной инструкции: discriminator, поля payload, аккаунты."""

    action: Action
    discriminator: int
    fields: Tuple[FieldSpec, ...]
    accounts: Tuple[AccountSlot, ...]

    @property
    def required_accounts(self) -> Tuple[str, ...]:
        """Имена адресов, которые должен передать вызывающий код (по порядку)."""
        names = []
        for slot in self.accounts:
            source = slot.source
            if source is not None and source not in names:
                names.append(source)
        return tuple(names)


# =============================================================================
# SCHEMA TABLE
# =============================================================================


@lru_cache(maxsize=None)
def instruction_schemas() -> Dict[Action, InstructionSchema]:
    """Схемы всех инструкций (таблица загружается и проверяется один раз)."""
    table = load_layout_table(INSTRUCTION_LAYOUTS_V1)
    schemas = {}
    for name, layout in table["instructions"].items():
        action = Action(name)
        schemas[action] = InstructionSchema(
            action=action,
            discriminator=layout["discriminator"],
            fields=fields_from_table(layout["fields"]),
            accounts=tuple(
                AccountSlot(
                    name=slot["name"],
                    is_signer=slot["signer"],
                    is_writable=slot["writable"],
                    address_of=slot.get("address_of"),
                    fixed=slot.get("fixed"),
                )
                for slot in layout["accounts"]
            ),
        )
    return schemas


def get_schema(action: Union[Action, str]) -> InstructionSchema:
    return instruction_schemas()[Action(action)]


# =============================================================================
# ENCODE
# =============================================================================


def _validate_params(schema: InstructionSchema, params: Mapping[str, Any]) -> None:
    for f in schema.fields:
        if f.name not in params:
            continue
        if f.domain == "percent":
            validate_discount(params[f.name])
        elif f.type == "string":
            # Имена vault/pool используются как seeds адресов
            seed_bytes(params[f.name])


def _resolve_accounts(
    schema: InstructionSchema, accounts: Mapping[str, Address]
) -> Tuple[AccountMeta, ...]:
    required = set(schema.required_accounts)
    unknown = sorted(set(accounts) - required)
    if unknown:
        raise ValueError(f"{schema.action.value}: unknown accounts {', '.join(unknown)}")

    metas = []
    for slot in schema.accounts:
        if slot.fixed is not None:
            address = FIXED_ACCOUNTS[slot.fixed]
        else:
            if slot.source not in accounts:
                raise ValueError(f"{schema.action.value}: missing account '{slot.source}'")
            address = Address.coerce(accounts[slot.source])
        metas.append(AccountMeta(address=address, is_signer=slot.is_signer, is_writable=slot.is_writable))
    return tuple(metas)


def encode_instruction(
    action: Union[Action, str],
    program_id: Address,
    accounts: Mapping[str, Address],
    params: Mapping[str, Any],
) -> Instruction:
    """
    Генерическое построение инструкции по схеме.

    Args:
        action: Действие протокола
        program_id: Адрес программы
        accounts: Адреса по именам слотов (fixed-слоты подставляются сами)
        params: Значения полей payload по именам

    Returns:
        Instruction

    Raises:
        InvalidDiscount: процент дисконта вне 0..100
        InvalidSeed: имя длиннее 32 байт UTF-8
        ArithmeticOverflow: число вне ширины поля
        ValueError: отсутствует/лишний аккаунт или поле
    """
    schema = get_schema(action)
    _validate_params(schema, params)

    data = bytes([schema.discriminator]) + encode_fields(schema.fields, params)
    metas = _resolve_accounts(schema, accounts)

    logger.debug(
        "Encoded %s: %d data bytes, %d accounts", schema.action.value, len(data), len(metas)
    )
    return Instruction(program_id=program_id, accounts=metas, data=data)


def decode_instruction_data(data: bytes) -> Tuple[Action, Dict[str, Any]]:
    """
    Обратный разбор payload (для инспекции и тестов).

    Raises:
        SchemaMismatch: пустой payload, неизвестный discriminator,
            длина не совпадает со схемой
    """
    if not data:
        raise SchemaMismatch("Empty instruction data")
    by_disc = {s.discriminator: s for s in instruction_schemas().values()}
    schema = by_disc.get(data[0])
    if schema is None:
        raise SchemaMismatch(f"Unknown instruction discriminator {data[0]}")

    values, end = decode_fields(schema.fields, data, offset=1, layout_name=schema.action.value)
    if end != len(data):
        raise SchemaMismatch(
            f"{schema.action.value}: {len(data) - end} trailing bytes after payload"
        )
    return schema.action, values


# =============================================================================
# ДЕЙСТВИЯ
# =============================================================================


def create_vault(
    program_id: Address,
    *,
    vault: Address,
    token_mint: Address,
    vault_treasury: Address,
    authority: Address,
    params: CreateVaultParams,
) -> Instruction:
    return encode_instruction(
        Action.CREATE_VAULT,
        program_id,
        {
            "vault": vault,
            "token_mint": token_mint,
            "vault_treasury": vault_treasury,
            "authority": authority,
        },
        params.model_dump(),
    )


def mint_tokens(
    program_id: Address,
    *,
    vault: Address,
    token_mint: Address,
    destination: Address,
    authority: Address,
    amount: int,
) -> Instruction:
    return encode_instruction(
        Action.MINT_TOKENS,
        program_id,
        {
            "vault": vault,
            "token_mint": token_mint,
            "destination": destination,
            "authority": authority,
        },
        {"amount": amount},
    )


def purchase_tokens_primary(
    program_id: Address,
    *,
    vault: Address,
    token_mint: Address,
    vault_treasury: Address,
    primary_sale: Address,
    buyer_payment_account: Address,
    buyer_token_account: Address,
    buyer: Address,
    authority: Address,
    params: PurchaseTokensParams,
) -> Instruction:
    return encode_instruction(
        Action.PURCHASE_TOKENS_PRIMARY,
        program_id,
        {
            "vault": vault,
            "token_mint": token_mint,
            "vault_treasury": vault_treasury,
            "primary_sale": primary_sale,
            "buyer_payment_account": buyer_payment_account,
            "buyer_token_account": buyer_token_account,
            "buyer": buyer,
            "authority": authority,
        },
        params.model_dump(),
    )


def receive_monthly_payment(
    program_id: Address,
    *,
    vault: Address,
    vault_treasury: Address,
    monthly_payment_record: Address,
    payer_account: Address,
    payer: Address,
    payment_amount: int,
) -> Instruction:
    return encode_instruction(
        Action.RECEIVE_MONTHLY_PAYMENT,
        program_id,
        {
            "vault": vault,
            "vault_treasury": vault_treasury,
            "monthly_payment_record": monthly_payment_record,
            "payer_account": payer_account,
            "payer": payer,
        },
        {"payment_amount": payment_amount},
    )


def redeem_tokens(
    program_id: Address,
    *,
    vault: Address,
    token_mint: Address,
    vault_treasury: Address,
    monthly_payment_record: Address,
    user_token_account: Address,
    user_payment_account: Address,
    redemption_record: Address,
    user: Address,
    vault_authority: Address,
    token_amount: int,
) -> Instruction:
    """Vault передаётся один раз и попадает в список дважды (read-only и writable)."""
    return encode_instruction(
        Action.REDEEM_TOKENS,
        program_id,
        {
            "vault": vault,
            "token_mint": token_mint,
            "vault_treasury": vault_treasury,
            "monthly_payment_record": monthly_payment_record,
            "user_token_account": user_token_account,
            "user_payment_account": user_payment_account,
            "redemption_record": redemption_record,
            "user": user,
            "vault_authority": vault_authority,
        },
        {"token_amount": token_amount},
    )


def create_liquidity_pool(
    program_id: Address,
    *,
    vault: Address,
    liquidity_pool: Address,
    token_a_mint: Address,
    token_b_mint: Address,
    authority: Address,
    pool_name: str,
) -> Instruction:
    return encode_instruction(
        Action.CREATE_LIQUIDITY_POOL,
        program_id,
        {
            "vault": vault,
            "liquidity_pool": liquidity_pool,
            "token_a_mint": token_a_mint,
            "token_b_mint": token_b_mint,
            "authority": authority,
        },
        {"pool_name": pool_name},
    )


def provide_liquidity(
    program_id: Address,
    *,
    liquidity_pool: Address,
    vault: Address,
    lp_token_a_account: Address,
    lp_token_b_account: Address,
    pool_token_a_vault: Address,
    pool_token_b_vault: Address,
    lp_position: Address,
    lp: Address,
    params: ProvideLiquidityParams,
) -> Instruction:
    return encode_instruction(
        Action.PROVIDE_LIQUIDITY,
        program_id,
        {
            "liquidity_pool": liquidity_pool,
            "vault": vault,
            "lp_token_a_account": lp_token_a_account,
            "lp_token_b_account": lp_token_b_account,
            "pool_token_a_vault": pool_token_a_vault,
            "pool_token_b_vault": pool_token_b_vault,
            "lp_position": lp_position,
            "lp": lp,
        },
        params.model_dump(),
    )


def withdraw_liquidity(
    program_id: Address,
    *,
    liquidity_pool: Address,
    lp_position: Address,
    lp_token_a_account: Address,
    lp_token_b_account: Address,
    pool_token_a_vault: Address,
    pool_token_b_vault: Address,
    lp: Address,
    pool_authority: Address,
    lp_shares: int,
) -> Instruction:
    return encode_instruction(
        Action.WITHDRAW_LIQUIDITY,
        program_id,
        {
            "liquidity_pool": liquidity_pool,
            "lp_position": lp_position,
            "lp_token_a_account": lp_token_a_account,
            "lp_token_b_account": lp_token_b_account,
            "pool_token_a_vault": pool_token_a_vault,
            "pool_token_b_vault": pool_token_b_vault,
            "lp": lp,
            "pool_authority": pool_authority,
        },
        {"lp_shares": lp_shares},
    )
