"""
AccountCodec — разбор сырых байтов аккаунтов в типизированные записи

Формат аккаунта:
    [0..8)  discriminator = sha256("account:<TypeName>")[:8]
    [8..)   поля в порядке accounts.v1.json

Проверки до разбора полей:
1. blob не короче header + минимальной длины layout (строки пустые)
2. discriminator совпадает с ожидаемым типом

Лишние байты в конце (запас под рост аккаунта) игнорируются.
Вход никогда не модифицируется.
"""

import hashlib
import logging
from functools import lru_cache
from typing import Dict, Final, Optional, Tuple, Union

from pydantic import BaseModel, ValidationError

from rwa_tokenization.core.contracts import ACCOUNT_LAYOUTS_V1, load_layout_table
from rwa_tokenization.core.domain.accounts import RECORD_TYPES, AccountKind
from rwa_tokenization.core.errors import SchemaMismatch
from rwa_tokenization.protocol.layout import FieldSpec, decode_fields, fields_from_table, min_size

logger = logging.getLogger(__name__)

DISCRIMINATOR_LENGTH: Final[int] = 8


# =============================================================================
# DISCRIMINATORS
# =============================================================================


def account_discriminator(kind: Union[AccountKind, str]) -> bytes:
    """8-байтовый discriminator типа аккаунта."""
    name = AccountKind(kind).value
    return hashlib.sha256(f"account:{name}".encode("utf-8")).digest()[:DISCRIMINATOR_LENGTH]


@lru_cache(maxsize=None)
def _discriminator_index() -> Dict[bytes, AccountKind]:
    return {account_discriminator(kind): kind for kind in AccountKind}


# =============================================================================
# LAYOUTS
# =============================================================================


@lru_cache(maxsize=None)
def account_layouts() -> Dict[AccountKind, Tuple[FieldSpec, ...]]:
    """Поля каждого типа аккаунта из accounts.v1.json."""
    table = load_layout_table(ACCOUNT_LAYOUTS_V1)
    if table["header_size"] != DISCRIMINATOR_LENGTH:
        raise ValueError(
            f"{ACCOUNT_LAYOUTS_V1}: header_size {table['header_size']}, "
            f"expected {DISCRIMINATOR_LENGTH}"
        )
    return {
        AccountKind(name): fields_from_table(layout["fields"])
        for name, layout in table["accounts"].items()
    }


def min_account_size(kind: Union[AccountKind, str]) -> int:
    """Минимальная длина blob: header + поля со всеми строками пустыми."""
    return DISCRIMINATOR_LENGTH + min_size(account_layouts()[AccountKind(kind)])


# =============================================================================
# DECODE
# =============================================================================


def identify_account(raw: bytes) -> Optional[AccountKind]:
    """Тип аккаунта по discriminator или None, если он не принадлежит протоколу."""
    if len(raw) < DISCRIMINATOR_LENGTH:
        return None
    return _discriminator_index().get(bytes(raw[:DISCRIMINATOR_LENGTH]))


def decode_account(raw: bytes, kind: Union[AccountKind, str]) -> BaseModel:
    """
    Разбор blob в запись заданного типа.

    Args:
        raw: Данные аккаунта как их вернул ledger
        kind: Ожидаемый тип

    Returns:
        Immutable запись (Vault, PrimarySale, ...)

    Raises:
        SchemaMismatch: короткий blob, чужой discriminator, битая строка,
            значения нарушают инварианты записи
    """
    kind = AccountKind(kind)
    required = min_account_size(kind)
    if len(raw) < required:
        raise SchemaMismatch(
            f"{kind.value}: account data is {len(raw)} bytes, at least {required} required"
        )

    header = bytes(raw[:DISCRIMINATOR_LENGTH])
    expected = account_discriminator(kind)
    if header != expected:
        actual = _discriminator_index().get(header)
        found = actual.value if actual is not None else header.hex()
        raise SchemaMismatch(f"Expected {kind.value} account, found {found}")

    values, end = decode_fields(
        account_layouts()[kind], raw, offset=DISCRIMINATOR_LENGTH, layout_name=kind.value
    )
    try:
        record = RECORD_TYPES[kind](**values)
    except ValidationError as e:
        raise SchemaMismatch(f"{kind.value}: decoded values are inconsistent: {e}")

    logger.debug("Decoded %s (%d of %d bytes used)", kind.value, end, len(raw))
    return record


def decode_any(raw: bytes) -> BaseModel:
    """
    Разбор blob неизвестного типа по его discriminator.

    Raises:
        SchemaMismatch: discriminator не принадлежит ни одному типу протокола
    """
    kind = identify_account(raw)
    if kind is None:
        raise SchemaMismatch("Unrecognized account discriminator")
    return decode_account(raw, kind)
