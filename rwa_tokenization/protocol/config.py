"""
Protocol configuration

Адреса well-known программ ledger, seed-теги и конфигурация клиента.
Никаких глобальных singletons: ProtocolConfig передаётся явно, что
позволяет параллельно работать с несколькими program id / endpoint'ами.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Optional

from rwa_tokenization.core.domain.address import Address

# =============================================================================
# WELL-KNOWN ADDRESSES
# =============================================================================

TOKEN_PROGRAM_ID: Final[Address] = Address.from_base58("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
SYSTEM_PROGRAM_ID: Final[Address] = Address(bytes(32))
RENT_SYSVAR_ID: Final[Address] = Address.from_base58("SysvarRent111111111111111111111111111111111")

# Имена fixed-слотов в instructions.v1.json → адрес
FIXED_ACCOUNTS: Final[dict] = {
    "token_program": TOKEN_PROGRAM_ID,
    "system_program": SYSTEM_PROGRAM_ID,
    "rent_sysvar": RENT_SYSVAR_ID,
}

# =============================================================================
# SEED TAGS
# =============================================================================

VAULT_SEED: Final[str] = "vault"
MINT_SEED: Final[str] = "mint"
TREASURY_SEED: Final[str] = "treasury"
SALE_SEED: Final[str] = "sale"
PAYMENT_SEED: Final[str] = "payment"
REDEMPTION_SEED: Final[str] = "redemption"
POOL_SEED: Final[str] = "pool"
LP_POSITION_SEED: Final[str] = "lp_position"


# =============================================================================
# TRANSACTION OPTIONS
# =============================================================================


class Commitment(str, Enum):
    """Уровень подтверждения транзакции."""

    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class TransactionOptions:
    """
    Опции отправки, передаются submission-коллаборатору как есть.

    commitment=None — не ждать подтверждения.
    """

    commitment: Optional[Commitment] = None
    skip_preflight: bool = False
    max_retries: Optional[int] = None


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class ProtocolConfig:
    """Конфигурация клиента: адрес программы и опции по умолчанию."""

    program_id: Address
    default_options: TransactionOptions = field(default_factory=TransactionOptions)

    @classmethod
    def from_program_id(
        cls,
        program_id: str,
        commitment: Optional[Commitment] = None,
    ) -> "ProtocolConfig":
        """Конфиг из base58 program id."""
        return cls(
            program_id=Address.from_base58(program_id),
            default_options=TransactionOptions(commitment=commitment),
        )
