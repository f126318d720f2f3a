"""
Domain models and value objects.

Contains the ledger address type, typed account records, operation
parameters and display-unit conversion.
"""

from rwa_tokenization.core.domain.accounts import (
    RECORD_TYPES,
    AccountKind,
    LiquidityPool,
    LPPosition,
    MonthlyPaymentRecord,
    PrimarySale,
    RedemptionRecord,
    Vault,
)
from rwa_tokenization.core.domain.address import ADDRESS_LENGTH, Address
from rwa_tokenization.core.domain.params import (
    CreateVaultParams,
    ProvideLiquidityParams,
    PurchaseTokensParams,
)
from rwa_tokenization.core.domain.units import TOKEN_DECIMALS, format_amount, parse_amount

__all__ = [
    # Address
    "ADDRESS_LENGTH",
    "Address",
    # Account records
    "AccountKind",
    "RECORD_TYPES",
    "Vault",
    "PrimarySale",
    "MonthlyPaymentRecord",
    "RedemptionRecord",
    "LiquidityPool",
    "LPPosition",
    # Params
    "CreateVaultParams",
    "PurchaseTokensParams",
    "ProvideLiquidityParams",
    # Units
    "TOKEN_DECIMALS",
    "format_amount",
    "parse_amount",
]
