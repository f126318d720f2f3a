"""
AddressDeriver — детерминированные program-derived addresses

Адрес = sha256(seed_0 || ... || seed_n || [bump] || program_id || "ProgramDerivedAddress"),
где bump перебирается вниз от 255 до 1 до первого кандидата вне кривой
ed25519. Порядок и кодирование seeds — часть контракта с программой:
любое расхождение даёт адрес, который программа отвергнет.

Кодирование seed-компонент:
    bytes   → как есть
    str     → UTF-8
    Address → 32 байта
    int     → u32 little-endian (индекс месяца, nonce)

Все функции чистые; program_id — явный параметр.
"""

import hashlib
import logging
from typing import Callable, Final, NamedTuple, Sequence, Union

from rwa_tokenization.core.domain.address import Address
from rwa_tokenization.core.errors import DerivationExhausted, InvalidSeed
from rwa_tokenization.core.math.integer_math import U32_MAX
from rwa_tokenization.protocol import config
from rwa_tokenization.protocol.ed25519 import is_on_curve as ed25519_is_on_curve

logger = logging.getLogger(__name__)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

MAX_SEED_LENGTH: Final[int] = 32
# Включая bump
MAX_SEEDS: Final[int] = 16
PDA_MARKER: Final[bytes] = b"ProgramDerivedAddress"
MAX_BUMP: Final[int] = 255
MIN_BUMP: Final[int] = 1

SeedComponent = Union[bytes, str, Address, int]


class ProgramAddress(NamedTuple):
    """Результат деривации: адрес и bump."""

    address: Address
    bump: int


# =============================================================================
# SEEDS
# =============================================================================


def seed_bytes(component: SeedComponent) -> bytes:
    """
    Кодирование одной seed-компоненты.

    Raises:
        InvalidSeed: неподдерживаемый тип, int вне u32, seed длиннее 32 байт
    """
    if isinstance(component, Address):
        encoded = component.raw
    elif isinstance(component, (bytes, bytearray)):
        encoded = bytes(component)
    elif isinstance(component, str):
        encoded = component.encode("utf-8")
    elif isinstance(component, int) and not isinstance(component, bool):
        if component < 0 or component > U32_MAX:
            raise InvalidSeed(f"Integer seed {component} out of u32 range")
        encoded = component.to_bytes(4, "little")
    else:
        raise InvalidSeed(f"Unsupported seed component type: {type(component).__name__}")

    if len(encoded) > MAX_SEED_LENGTH:
        raise InvalidSeed(
            f"Seed of {len(encoded)} bytes exceeds the {MAX_SEED_LENGTH}-byte limit"
        )
    return encoded


def _encode_seeds(tag: str, components: Sequence[SeedComponent]) -> list:
    seeds = [seed_bytes(tag)] + [seed_bytes(c) for c in components]
    if len(seeds) + 1 > MAX_SEEDS:
        raise InvalidSeed(f"Too many seeds: {len(seeds)} (max {MAX_SEEDS - 1} plus bump)")
    return seeds


def _hash_candidate(program_id: Address, seeds: Sequence[bytes]) -> bytes:
    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(seed)
    hasher.update(program_id.raw)
    hasher.update(PDA_MARKER)
    return hasher.digest()


# =============================================================================
# DERIVATION
# =============================================================================


def create_program_address(
    program_id: Address,
    seeds: Sequence[bytes],
    bump: int,
    is_on_curve: Callable[[bytes], bool] = ed25519_is_on_curve,
) -> Address:
    """
    Адрес для уже закодированных seeds и конкретного bump.

    Raises:
        InvalidSeed: bump вне 0..255 или результат лежит на кривой
    """
    if bump < 0 or bump > MAX_BUMP:
        raise InvalidSeed(f"Bump {bump} out of range 0..{MAX_BUMP}")
    candidate = _hash_candidate(program_id, list(seeds) + [bytes([bump])])
    if is_on_curve(candidate):
        raise InvalidSeed("Derived address lies on the ed25519 curve")
    return Address(candidate)


def find_program_address(
    program_id: Address,
    tag: str,
    *components: SeedComponent,
    is_on_curve: Callable[[bytes], bool] = ed25519_is_on_curve,
) -> ProgramAddress:
    """
    Поиск PDA: bump от 255 вниз до 1, первый кандидат вне кривой.

    Args:
        program_id: Адрес программы
        tag: Namespace-тег ("vault", "mint", ...)
        *components: Упорядоченные seed-компоненты
        is_on_curve: Предикат принадлежности кривой (подменяется в тестах)

    Returns:
        ProgramAddress(address, bump)

    Raises:
        InvalidSeed: seeds нарушают правила ledger
        DerivationExhausted: ни один bump не подошёл
    """
    seeds = _encode_seeds(tag, components)

    for bump in range(MAX_BUMP, MIN_BUMP - 1, -1):
        candidate = _hash_candidate(program_id, seeds + [bytes([bump])])
        if not is_on_curve(candidate):
            address = Address(candidate)
            logger.debug("Derived %s address %s (bump=%d)", tag, address, bump)
            return ProgramAddress(address=address, bump=bump)

    raise DerivationExhausted(tag)


# =============================================================================
# NAMED DERIVATIONS
# =============================================================================


def derive_vault(program_id: Address, vault_name: str) -> ProgramAddress:
    return find_program_address(program_id, config.VAULT_SEED, vault_name)


def derive_token_mint(program_id: Address, vault: Address) -> ProgramAddress:
    return find_program_address(program_id, config.MINT_SEED, vault)


def derive_vault_treasury(program_id: Address, vault: Address) -> ProgramAddress:
    return find_program_address(program_id, config.TREASURY_SEED, vault)


def derive_primary_sale(
    program_id: Address, vault: Address, buyer: Address, nonce: int
) -> ProgramAddress:
    """
    Запись покупки: ("sale", vault, buyer, nonce:u32).

    nonce выбирает и хранит вызывающая сторона — повтор nonce для той же
    пары (vault, buyer) даёт тот же адрес.
    """
    return find_program_address(program_id, config.SALE_SEED, vault, buyer, nonce)


def derive_monthly_payment(program_id: Address, vault: Address, month: int) -> ProgramAddress:
    return find_program_address(program_id, config.PAYMENT_SEED, vault, month)


def derive_redemption(
    program_id: Address, vault: Address, redeemer: Address, nonce: int
) -> ProgramAddress:
    """Запись погашения: ("redemption", vault, redeemer, nonce:u32)."""
    return find_program_address(program_id, config.REDEMPTION_SEED, vault, redeemer, nonce)


def derive_liquidity_pool(program_id: Address, vault: Address, pool_name: str) -> ProgramAddress:
    return find_program_address(program_id, config.POOL_SEED, vault, pool_name)


def derive_lp_position(program_id: Address, pool: Address, provider: Address) -> ProgramAddress:
    return find_program_address(program_id, config.LP_POSITION_SEED, pool, provider)
