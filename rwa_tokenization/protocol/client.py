"""
ProtocolClient — оркестрация операций протокола

Write path: derive → encode → submit → (опционально) confirm.
Read path: derive → fetch raw bytes → AccountCodec.

Клиент не хранит состояния кроме явной конфигурации и двух внешних
коллабораторов (submission и reader). Ошибки кодеков и математики
пробрасываются вызывающему коду без изменений; retry — ответственность
submission-коллаборатора.

Nonce для записей покупки/погашения выбирает и хранит вызывающая сторона.
"""

import logging
from typing import Optional, Protocol, Sequence

from pydantic import BaseModel

from rwa_tokenization.core.domain.accounts import (
    AccountKind,
    LiquidityPool,
    LPPosition,
    MonthlyPaymentRecord,
    PrimarySale,
    RedemptionRecord,
    Vault,
)
from rwa_tokenization.core.domain.address import Address
from rwa_tokenization.core.domain.params import (
    CreateVaultParams,
    ProvideLiquidityParams,
    PurchaseTokensParams,
)
from rwa_tokenization.core.errors import NotFound
from rwa_tokenization.core.math import liquidity
from rwa_tokenization.protocol import instructions, pda
from rwa_tokenization.protocol.accounts import decode_account
from rwa_tokenization.protocol.config import Commitment, ProtocolConfig, TransactionOptions
from rwa_tokenization.protocol.instructions import Instruction

logger = logging.getLogger(__name__)


# =============================================================================
# КОЛЛАБОРАТОРЫ
# =============================================================================


class Signer(Protocol):
    """Подписант транзакции (ключи остаются у wallet-слоя)."""

    @property
    def address(self) -> Address: ...


class TransactionSubmitter(Protocol):
    """Отправка инструкций в ledger."""

    def submit(
        self,
        instruction: Instruction,
        signers: Sequence[Signer],
        options: TransactionOptions,
    ) -> str: ...

    def confirm(self, signature: str, commitment: Commitment) -> None: ...


class AccountReader(Protocol):
    """Чтение аккаунтов ledger; None — аккаунта нет."""

    def get_account_data(self, address: Address) -> Optional[bytes]: ...


# =============================================================================
# CLIENT
# =============================================================================


class ProtocolClient:
    """
    Клиент протокола токенизации cash-flow активов.

    Args:
        config: Program id и опции транзакций по умолчанию
        submitter: Коллаборатор отправки транзакций
        reader: Коллаборатор чтения аккаунтов
    """

    def __init__(
        self,
        config: ProtocolConfig,
        submitter: TransactionSubmitter,
        reader: AccountReader,
    ):
        self.config = config
        self.submitter = submitter
        self.reader = reader

    @property
    def program_id(self) -> Address:
        return self.config.program_id

    # -------------------------------------------------------------------------
    # Внутренние шаги
    # -------------------------------------------------------------------------

    def _send(
        self,
        instruction: Instruction,
        signers: Sequence[Signer],
        options: Optional[TransactionOptions],
    ) -> str:
        options = options or self.config.default_options
        signature = self.submitter.submit(instruction, list(signers), options)
        logger.info(
            "Submitted instruction %d to %s: %s",
            instruction.data[0],
            instruction.program_id,
            signature,
        )
        if options.commitment is not None:
            self.submitter.confirm(signature, options.commitment)
            logger.debug("Confirmed %s at %s", signature, Commitment(options.commitment).value)
        return signature

    def _fetch(self, address: Address, kind: AccountKind, what: str) -> BaseModel:
        raw = self.reader.get_account_data(address)
        if raw is None:
            raise NotFound(what, address)
        return decode_account(raw, kind)

    def _vault_addresses(self, vault_name: str):
        vault = pda.derive_vault(self.program_id, vault_name).address
        token_mint = pda.derive_token_mint(self.program_id, vault).address
        treasury = pda.derive_vault_treasury(self.program_id, vault).address
        return vault, token_mint, treasury

    def _pool_address(self, vault_name: str, pool_name: str) -> Address:
        vault = pda.derive_vault(self.program_id, vault_name).address
        return pda.derive_liquidity_pool(self.program_id, vault, pool_name).address

    # -------------------------------------------------------------------------
    # Write operations
    # -------------------------------------------------------------------------

    def create_vault(
        self,
        authority: Signer,
        params: CreateVaultParams,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        vault, token_mint, treasury = self._vault_addresses(params.vault_name)
        instruction = instructions.create_vault(
            self.program_id,
            vault=vault,
            token_mint=token_mint,
            vault_treasury=treasury,
            authority=authority.address,
            params=params,
        )
        return self._send(instruction, [authority], options)

    def mint_tokens(
        self,
        authority: Signer,
        vault_name: str,
        destination: Address,
        amount: int,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        vault, token_mint, _ = self._vault_addresses(vault_name)
        instruction = instructions.mint_tokens(
            self.program_id,
            vault=vault,
            token_mint=token_mint,
            destination=destination,
            authority=authority.address,
            amount=amount,
        )
        return self._send(instruction, [authority], options)

    def purchase_tokens_primary(
        self,
        buyer: Signer,
        authority: Signer,
        vault_name: str,
        buyer_payment_account: Address,
        buyer_token_account: Address,
        params: PurchaseTokensParams,
        *,
        nonce: int,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        """
        Покупка на первичном рынке.

        nonce различает повторные покупки одного buyer в одном vault;
        один и тот же nonce адресует одну и ту же запись PrimarySale.
        """
        vault, token_mint, treasury = self._vault_addresses(vault_name)
        sale = pda.derive_primary_sale(self.program_id, vault, buyer.address, nonce).address
        instruction = instructions.purchase_tokens_primary(
            self.program_id,
            vault=vault,
            token_mint=token_mint,
            vault_treasury=treasury,
            primary_sale=sale,
            buyer_payment_account=buyer_payment_account,
            buyer_token_account=buyer_token_account,
            buyer=buyer.address,
            authority=authority.address,
            params=params,
        )
        return self._send(instruction, [buyer, authority], options)

    def receive_monthly_payment(
        self,
        payer: Signer,
        vault_name: str,
        payment_amount: int,
        payer_account: Address,
        *,
        month: int,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        vault, _, treasury = self._vault_addresses(vault_name)
        record = pda.derive_monthly_payment(self.program_id, vault, month).address
        instruction = instructions.receive_monthly_payment(
            self.program_id,
            vault=vault,
            vault_treasury=treasury,
            monthly_payment_record=record,
            payer_account=payer_account,
            payer=payer.address,
            payment_amount=payment_amount,
        )
        return self._send(instruction, [payer], options)

    def redeem_tokens(
        self,
        user: Signer,
        vault_authority: Signer,
        vault_name: str,
        token_amount: int,
        user_token_account: Address,
        user_payment_account: Address,
        *,
        nonce: int,
        month: Optional[int] = None,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        """
        Погашение токенов из платежа за месяц.

        month=None — последний полученный платёж (current_month - 1),
        для этого vault читается из ledger.

        Raises:
            NotFound: vault не найден или по нему ещё не было платежей
        """
        vault, token_mint, treasury = self._vault_addresses(vault_name)
        if month is None:
            month = self.latest_paid_month(vault_name)
        record = pda.derive_monthly_payment(self.program_id, vault, month).address
        redemption = pda.derive_redemption(self.program_id, vault, user.address, nonce).address

        instruction = instructions.redeem_tokens(
            self.program_id,
            vault=vault,
            token_mint=token_mint,
            vault_treasury=treasury,
            monthly_payment_record=record,
            user_token_account=user_token_account,
            user_payment_account=user_payment_account,
            redemption_record=redemption,
            user=user.address,
            vault_authority=vault_authority.address,
            token_amount=token_amount,
        )
        return self._send(instruction, [user, vault_authority], options)

    def create_liquidity_pool(
        self,
        authority: Signer,
        vault_name: str,
        token_a_mint: Address,
        token_b_mint: Address,
        pool_name: str,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        vault = pda.derive_vault(self.program_id, vault_name).address
        pool = pda.derive_liquidity_pool(self.program_id, vault, pool_name).address
        instruction = instructions.create_liquidity_pool(
            self.program_id,
            vault=vault,
            liquidity_pool=pool,
            token_a_mint=token_a_mint,
            token_b_mint=token_b_mint,
            authority=authority.address,
            pool_name=pool_name,
        )
        return self._send(instruction, [authority], options)

    def provide_liquidity(
        self,
        lp: Signer,
        vault_name: str,
        pool_name: str,
        lp_token_a_account: Address,
        lp_token_b_account: Address,
        pool_token_a_vault: Address,
        pool_token_b_vault: Address,
        params: ProvideLiquidityParams,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        vault = pda.derive_vault(self.program_id, vault_name).address
        pool = pda.derive_liquidity_pool(self.program_id, vault, pool_name).address
        position = pda.derive_lp_position(self.program_id, pool, lp.address).address
        instruction = instructions.provide_liquidity(
            self.program_id,
            liquidity_pool=pool,
            vault=vault,
            lp_token_a_account=lp_token_a_account,
            lp_token_b_account=lp_token_b_account,
            pool_token_a_vault=pool_token_a_vault,
            pool_token_b_vault=pool_token_b_vault,
            lp_position=position,
            lp=lp.address,
            params=params,
        )
        return self._send(instruction, [lp], options)

    def withdraw_liquidity(
        self,
        lp: Signer,
        pool_authority: Signer,
        vault_name: str,
        pool_name: str,
        lp_token_a_account: Address,
        lp_token_b_account: Address,
        pool_token_a_vault: Address,
        pool_token_b_vault: Address,
        lp_shares: int,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        pool = self._pool_address(vault_name, pool_name)
        position = pda.derive_lp_position(self.program_id, pool, lp.address).address
        instruction = instructions.withdraw_liquidity(
            self.program_id,
            liquidity_pool=pool,
            lp_position=position,
            lp_token_a_account=lp_token_a_account,
            lp_token_b_account=lp_token_b_account,
            pool_token_a_vault=pool_token_a_vault,
            pool_token_b_vault=pool_token_b_vault,
            lp=lp.address,
            pool_authority=pool_authority.address,
            lp_shares=lp_shares,
        )
        return self._send(instruction, [lp, pool_authority], options)

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------

    def get_vault(self, vault_name: str) -> Vault:
        address = pda.derive_vault(self.program_id, vault_name).address
        return self._fetch(address, AccountKind.VAULT, f"Vault '{vault_name}'")

    def get_primary_sale(self, vault_name: str, buyer: Address, nonce: int) -> PrimarySale:
        vault = pda.derive_vault(self.program_id, vault_name).address
        address = pda.derive_primary_sale(self.program_id, vault, Address.coerce(buyer), nonce).address
        return self._fetch(address, AccountKind.PRIMARY_SALE, f"Primary sale #{nonce}")

    def get_monthly_payment(self, vault_name: str, month: int) -> MonthlyPaymentRecord:
        vault = pda.derive_vault(self.program_id, vault_name).address
        address = pda.derive_monthly_payment(self.program_id, vault, month).address
        return self._fetch(
            address, AccountKind.MONTHLY_PAYMENT_RECORD, f"Payment for month {month}"
        )

    def get_redemption(self, vault_name: str, redeemer: Address, nonce: int) -> RedemptionRecord:
        vault = pda.derive_vault(self.program_id, vault_name).address
        address = pda.derive_redemption(self.program_id, vault, Address.coerce(redeemer), nonce).address
        return self._fetch(address, AccountKind.REDEMPTION_RECORD, f"Redemption #{nonce}")

    def get_liquidity_pool(self, vault_name: str, pool_name: str) -> LiquidityPool:
        address = self._pool_address(vault_name, pool_name)
        return self._fetch(address, AccountKind.LIQUIDITY_POOL, f"Liquidity pool '{pool_name}'")

    def get_lp_position(self, vault_name: str, pool_name: str, provider: Address) -> LPPosition:
        pool = self._pool_address(vault_name, pool_name)
        address = pda.derive_lp_position(self.program_id, pool, Address.coerce(provider)).address
        return self._fetch(address, AccountKind.LP_POSITION, "LP position")

    def latest_paid_month(self, vault_name: str) -> int:
        """
        Индекс последнего полученного платежа.

        Raises:
            NotFound: vault не найден или current_month == 0
        """
        vault = self.get_vault(vault_name)
        if vault.current_month == 0:
            raise NotFound(f"Monthly payment for vault '{vault_name}'", "any month")
        return vault.current_month - 1

    # -------------------------------------------------------------------------
    # Quotes
    # -------------------------------------------------------------------------

    def quote_purchase(self, token_amount: int, discount_percentage: int) -> int:
        """Сумма к оплате за token_amount при заданном дисконте."""
        return liquidity.purchase_price(token_amount, discount_percentage)

    def quote_lp_shares(
        self,
        vault_name: str,
        pool_name: str,
        token_a_amount: int,
        token_b_amount: int,
    ) -> int:
        """Доли, которые получит депозит при текущих резервах пула."""
        pool = self.get_liquidity_pool(vault_name, pool_name)
        return liquidity.lp_shares(
            token_a_amount,
            token_b_amount,
            pool.token_a_reserve,
            pool.token_b_reserve,
            pool.total_lp_shares,
        )
