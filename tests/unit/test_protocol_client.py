"""
Тесты для ProtocolClient

Коллабораторы (submission / reader / signer) — in-memory fakes.

Проверяет:
1. Write path: derive → encode → submit → confirm по commitment
2. Nonce и month выбирают адреса записей
3. redeem_tokens без month: последний полученный платёж
4. Read path: NotFound и разбор аккаунтов
5. Quotes
6. Проброс ошибок без вызова submitter
"""

import hashlib
import struct
from dataclasses import dataclass, field

import pytest

from rwa_tokenization.core.domain.address import Address
from rwa_tokenization.core.domain.params import (
    CreateVaultParams,
    ProvideLiquidityParams,
    PurchaseTokensParams,
)
from rwa_tokenization.core.errors import InvalidDiscount, NotFound, SchemaMismatch
from rwa_tokenization.protocol import pda
from rwa_tokenization.protocol.client import ProtocolClient
from rwa_tokenization.protocol.config import Commitment, ProtocolConfig, TransactionOptions

# =============================================================================
# FIXTURES - FAKE COLLABORATORS
# =============================================================================

PROGRAM_ID = Address(hashlib.sha256(b"rwa-program").digest())


def addr(n: int) -> Address:
    return Address(bytes([n]) * 32)


@dataclass(frozen=True)
class FakeSigner:
    address: Address


@dataclass
class FakeSubmitter:
    submitted: list = field(default_factory=list)
    confirmed: list = field(default_factory=list)

    def submit(self, instruction, signers, options) -> str:
        self.submitted.append((instruction, list(signers), options))
        return f"sig-{len(self.submitted)}"

    def confirm(self, signature, commitment) -> None:
        self.confirmed.append((signature, commitment))

    @property
    def last_instruction(self):
        return self.submitted[-1][0]


@dataclass
class FakeReader:
    accounts: dict = field(default_factory=dict)

    def get_account_data(self, address):
        return self.accounts.get(address)


def header(type_name: str) -> bytes:
    return hashlib.sha256(f"account:{type_name}".encode()).digest()[:8]


def vault_blob(name: str, current_month: int) -> bytes:
    raw_name = name.encode("utf-8")
    return (
        header("Vault")
        + addr(1).raw
        + addr(2).raw
        + addr(3).raw
        + struct.pack("<QQQQ", 1_000_000, 100_000, 1_100_000, 91_666)
        + struct.pack("<II", 12, current_month)
        + struct.pack("<I", len(raw_name))
        + raw_name
        + struct.pack("<qQ", 1_700_000_000, 0)
        + b"\x01"
    )


def pool_blob(reserve_a: int, reserve_b: int, shares: int) -> bytes:
    return (
        header("LiquidityPool")
        + addr(1).raw
        + addr(2).raw
        + addr(3).raw
        + addr(4).raw
        + struct.pack("<I", 2)
        + b"Q1"
        + struct.pack("<qQQQqQ", 1_700_000_000, reserve_a, reserve_b, shares, 1_700_000_000, 0)
        + b"\x01"
    )


@pytest.fixture
def submitter() -> FakeSubmitter:
    return FakeSubmitter()


@pytest.fixture
def reader() -> FakeReader:
    return FakeReader()


@pytest.fixture
def client(submitter, reader) -> ProtocolClient:
    return ProtocolClient(ProtocolConfig(program_id=PROGRAM_ID), submitter, reader)


@pytest.fixture
def authority() -> FakeSigner:
    return FakeSigner(addr(0x41))


@pytest.fixture
def user() -> FakeSigner:
    return FakeSigner(addr(0x55))


@pytest.fixture
def vault_address() -> Address:
    return pda.derive_vault(PROGRAM_ID, "Fund-A").address


# =============================================================================
# CONFIG
# =============================================================================


class TestConfig:
    def test_from_program_id(self) -> None:
        config = ProtocolConfig.from_program_id(PROGRAM_ID.to_base58(), Commitment.CONFIRMED)
        assert config.program_id == PROGRAM_ID
        assert config.default_options.commitment is Commitment.CONFIRMED

    def test_default_options(self) -> None:
        options = ProtocolConfig(program_id=PROGRAM_ID).default_options
        assert options == TransactionOptions(commitment=None, skip_preflight=False, max_retries=None)


# =============================================================================
# WRITE PATH
# =============================================================================


class TestWritePath:
    """derive → encode → submit → confirm"""

    def test_create_vault(self, client, submitter, authority, vault_address) -> None:
        params = CreateVaultParams(
            principal=1_000_000,
            total_expected_interest=100_000,
            monthly_payment=91_666,
            total_months=12,
            vault_name="Fund-A",
        )
        signature = client.create_vault(authority, params)

        assert signature == "sig-1"
        instruction, signers, options = submitter.submitted[0]
        mint = pda.derive_token_mint(PROGRAM_ID, vault_address).address
        treasury = pda.derive_vault_treasury(PROGRAM_ID, vault_address).address
        assert [m.address for m in instruction.accounts[:4]] == [
            vault_address,
            mint,
            treasury,
            authority.address,
        ]
        assert instruction.program_id == PROGRAM_ID
        assert instruction.data[0] == 0
        assert signers == [authority]
        assert options == client.config.default_options
        assert submitter.confirmed == []

    def test_confirm_when_commitment_set(self, client, submitter, authority) -> None:
        options = TransactionOptions(commitment=Commitment.FINALIZED)
        signature = client.mint_tokens(authority, "Fund-A", addr(9), 1_000, options=options)
        assert submitter.submitted[0][2] is options
        assert submitter.confirmed == [(signature, Commitment.FINALIZED)]

    def test_default_commitment_from_config(self, submitter, reader, authority) -> None:
        config = ProtocolConfig(
            program_id=PROGRAM_ID,
            default_options=TransactionOptions(commitment=Commitment.CONFIRMED),
        )
        client = ProtocolClient(config, submitter, reader)
        client.mint_tokens(authority, "Fund-A", addr(9), 1_000)
        assert submitter.confirmed == [("sig-1", Commitment.CONFIRMED)]

    def test_purchase_nonce_selects_sale_record(
        self, client, submitter, user, authority, vault_address
    ) -> None:
        params = PurchaseTokensParams(token_amount=1_000_000, discount_percentage=10)
        client.purchase_tokens_primary(user, authority, "Fund-A", addr(5), addr(6), params, nonce=0)
        client.purchase_tokens_primary(user, authority, "Fund-A", addr(5), addr(6), params, nonce=1)

        first = submitter.submitted[0][0].accounts[3].address
        second = submitter.submitted[1][0].accounts[3].address
        assert first == pda.derive_primary_sale(PROGRAM_ID, vault_address, user.address, 0).address
        assert second == pda.derive_primary_sale(PROGRAM_ID, vault_address, user.address, 1).address
        assert first != second
        assert submitter.submitted[0][1] == [user, authority]

    def test_nonce_is_required(self, client, user, authority) -> None:
        params = PurchaseTokensParams(token_amount=1, discount_percentage=0)
        with pytest.raises(TypeError):
            client.purchase_tokens_primary(user, authority, "Fund-A", addr(5), addr(6), params)

    def test_monthly_payment_record_for_month(self, client, submitter, user, vault_address) -> None:
        client.receive_monthly_payment(user, "Fund-A", 91_666, addr(7), month=4)
        record = submitter.last_instruction.accounts[2].address
        assert record == pda.derive_monthly_payment(PROGRAM_ID, vault_address, 4).address

    def test_create_pool_and_provide(self, client, submitter, authority, user, vault_address) -> None:
        client.create_liquidity_pool(authority, "Fund-A", addr(2), addr(3), "Q1")
        pool = pda.derive_liquidity_pool(PROGRAM_ID, vault_address, "Q1").address
        assert submitter.last_instruction.accounts[1].address == pool

        params = ProvideLiquidityParams(token_a_amount=10, token_b_amount=50, forward_discount_percentage=5)
        client.provide_liquidity(user, "Fund-A", "Q1", addr(11), addr(12), addr(13), addr(14), params)
        position = pda.derive_lp_position(PROGRAM_ID, pool, user.address).address
        metas = submitter.last_instruction.accounts
        assert metas[0].address == pool
        assert metas[6].address == position

    def test_withdraw_signers(self, client, submitter, authority, user) -> None:
        client.withdraw_liquidity(user, authority, "Fund-A", "Q1", addr(11), addr(12), addr(13), addr(14), 20)
        assert submitter.submitted[0][1] == [user, authority]
        assert submitter.last_instruction.data[0] == 7

    def test_invalid_discount_not_submitted(self, client, submitter, user, authority) -> None:
        params = PurchaseTokensParams(token_amount=1, discount_percentage=101)
        with pytest.raises(InvalidDiscount):
            client.purchase_tokens_primary(user, authority, "Fund-A", addr(5), addr(6), params, nonce=0)
        assert submitter.submitted == []


# =============================================================================
# REDEEM
# =============================================================================


class TestRedeem:
    """redeem_tokens: выбор месяца и nonce"""

    def test_latest_paid_month_by_default(
        self, client, submitter, reader, user, authority, vault_address
    ) -> None:
        reader.accounts[vault_address] = vault_blob("Fund-A", current_month=3)
        client.redeem_tokens(user, authority, "Fund-A", 1_000, addr(5), addr(6), nonce=7)

        metas = submitter.last_instruction.accounts
        assert metas[0].address == metas[1].address == vault_address
        assert metas[4].address == pda.derive_monthly_payment(PROGRAM_ID, vault_address, 2).address
        assert metas[7].address == pda.derive_redemption(PROGRAM_ID, vault_address, user.address, 7).address
        assert submitter.submitted[0][1] == [user, authority]

    def test_explicit_month_skips_read(self, client, submitter, user, authority, vault_address) -> None:
        client.redeem_tokens(user, authority, "Fund-A", 1_000, addr(5), addr(6), nonce=0, month=0)
        metas = submitter.last_instruction.accounts
        assert metas[4].address == pda.derive_monthly_payment(PROGRAM_ID, vault_address, 0).address

    def test_no_payments_yet(self, client, submitter, reader, user, authority, vault_address) -> None:
        reader.accounts[vault_address] = vault_blob("Fund-A", current_month=0)
        with pytest.raises(NotFound):
            client.redeem_tokens(user, authority, "Fund-A", 1_000, addr(5), addr(6), nonce=0)
        assert submitter.submitted == []

    def test_missing_vault(self, client, user, authority) -> None:
        with pytest.raises(NotFound, match="Vault 'Fund-A'"):
            client.redeem_tokens(user, authority, "Fund-A", 1_000, addr(5), addr(6), nonce=0)


# =============================================================================
# READ PATH / QUOTES
# =============================================================================


class TestReadPath:
    """Чтение и разбор аккаунтов"""

    def test_get_vault(self, client, reader, vault_address) -> None:
        reader.accounts[vault_address] = vault_blob("Fund-A", current_month=5)
        vault = client.get_vault("Fund-A")
        assert vault.vault_name == "Fund-A"
        assert vault.current_month == 5

    def test_not_found_is_lookup_error(self, client) -> None:
        with pytest.raises(LookupError):
            client.get_vault("Missing")

    def test_not_found_carries_address(self, client) -> None:
        with pytest.raises(NotFound) as exc_info:
            client.get_liquidity_pool("Fund-A", "Q1")
        vault = pda.derive_vault(PROGRAM_ID, "Fund-A").address
        assert exc_info.value.address == pda.derive_liquidity_pool(PROGRAM_ID, vault, "Q1").address

    def test_wrong_account_type(self, client, reader, vault_address) -> None:
        reader.accounts[vault_address] = pool_blob(1, 1, 1)
        with pytest.raises(SchemaMismatch):
            client.get_vault("Fund-A")

    def test_other_records_not_found(self, client, user) -> None:
        with pytest.raises(NotFound):
            client.get_primary_sale("Fund-A", user.address, 0)
        with pytest.raises(NotFound):
            client.get_monthly_payment("Fund-A", 1)
        with pytest.raises(NotFound):
            client.get_redemption("Fund-A", user.address, 0)
        with pytest.raises(NotFound):
            client.get_lp_position("Fund-A", "Q1", user.address)

    def test_get_monthly_payment(self, client, reader, vault_address) -> None:
        address = pda.derive_monthly_payment(PROGRAM_ID, vault_address, 1).address
        reader.accounts[address] = (
            header("MonthlyPaymentRecord") + vault_address.raw + struct.pack("<IQqQ", 1, 500, 0, 500)
        )
        record = client.get_monthly_payment("Fund-A", 1)
        assert record.vault == vault_address
        assert record.available_for_redemption == 500


class TestQuotes:
    def test_quote_purchase(self, client) -> None:
        assert client.quote_purchase(1_000_000, 10) == 900_000

    def test_quote_lp_shares(self, client, reader, vault_address) -> None:
        pool = pda.derive_liquidity_pool(PROGRAM_ID, vault_address, "Q1").address
        reader.accounts[pool] = pool_blob(100, 400, 200)
        assert client.quote_lp_shares("Fund-A", "Q1", 10, 50) == 20

    def test_quote_lp_shares_empty_pool(self, client, reader, vault_address) -> None:
        pool = pda.derive_liquidity_pool(PROGRAM_ID, vault_address, "Q1").address
        reader.accounts[pool] = pool_blob(0, 0, 0)
        assert client.quote_lp_shares("Fund-A", "Q1", 100, 400) == 200
