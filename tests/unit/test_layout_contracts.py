"""
Tests for layout tables and their validators

Проверяет:
- Валидность meta-схемы и поставляемых таблиц (accounts.v1, instructions.v1)
- Детекцию структурных нарушений (jsonschema)
- Детекцию семантических нарушений (дубликаты, висячие address_of)
"""

import copy

import pytest
from jsonschema import ValidationError

from rwa_tokenization.core.contracts import (
    ACCOUNT_LAYOUTS_V1,
    INSTRUCTION_LAYOUTS_V1,
    LayoutTableValidator,
    SchemaLoader,
    load_layout_table,
    validate_layout_table,
)

# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def validator() -> LayoutTableValidator:
    return LayoutTableValidator()


@pytest.fixture
def minimal_instruction_table() -> dict:
    """Минимальная валидная таблица инструкций."""
    return {
        "version": 1,
        "kind": "instructions",
        "instructions": {
            "ping": {
                "discriminator": 0,
                "fields": [{"name": "amount", "type": "u64"}],
                "accounts": [
                    {"name": "vault", "signer": False, "writable": True},
                    {"name": "authority", "signer": True, "writable": False},
                ],
            }
        },
    }


@pytest.fixture
def minimal_account_table() -> dict:
    return {
        "version": 1,
        "kind": "accounts",
        "header_size": 8,
        "accounts": {"Thing": {"fields": [{"name": "owner", "type": "pubkey"}]}},
    }


# =============================================================================
# SHIPPED TABLES
# =============================================================================


class TestShippedTables:
    """Поставляемые таблицы валидны"""

    def test_meta_schema_is_valid_json_schema(self) -> None:
        SchemaLoader().load_schema("layout_table")

    def test_account_table(self) -> None:
        table = load_layout_table(ACCOUNT_LAYOUTS_V1)
        assert table["header_size"] == 8
        assert set(table["accounts"]) == {
            "Vault",
            "PrimarySale",
            "MonthlyPaymentRecord",
            "RedemptionRecord",
            "LiquidityPool",
            "LPPosition",
        }

    def test_instruction_table_discriminators(self) -> None:
        table = load_layout_table(INSTRUCTION_LAYOUTS_V1)
        discriminators = {
            name: layout["discriminator"] for name, layout in table["instructions"].items()
        }
        assert discriminators == {
            "create_vault": 0,
            "mint_tokens": 1,
            "purchase_tokens_primary": 2,
            "receive_monthly_payment": 3,
            "redeem_tokens": 4,
            "create_liquidity_pool": 5,
            "provide_liquidity": 6,
            "withdraw_liquidity": 7,
        }

    def test_loader_caches_documents(self) -> None:
        loader = SchemaLoader()
        assert loader.load(ACCOUNT_LAYOUTS_V1) is loader.load(ACCOUNT_LAYOUTS_V1)

    def test_missing_document(self) -> None:
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load("accounts.v999")

    def test_missing_schema_dir(self, tmp_path) -> None:
        with pytest.raises(RuntimeError):
            SchemaLoader(tmp_path / "nope")


# =============================================================================
# STRUCTURAL VIOLATIONS
# =============================================================================


class TestStructuralViolations:
    """Нарушения, которые ловит JSON Schema"""

    def test_minimal_tables_valid(
        self, validator, minimal_instruction_table, minimal_account_table
    ) -> None:
        assert validator.is_valid(minimal_instruction_table)
        assert validator.is_valid(minimal_account_table)

    def test_missing_kind(self, validator, minimal_instruction_table) -> None:
        del minimal_instruction_table["kind"]
        with pytest.raises(ValidationError):
            validator.validate(minimal_instruction_table)

    def test_accounts_table_requires_header_size(self, validator, minimal_account_table) -> None:
        del minimal_account_table["header_size"]
        with pytest.raises(ValidationError):
            validator.validate(minimal_account_table)

    def test_unknown_field_type(self, validator, minimal_instruction_table) -> None:
        minimal_instruction_table["instructions"]["ping"]["fields"][0]["type"] = "u128"
        with pytest.raises(ValidationError):
            validator.validate(minimal_instruction_table)

    def test_discriminator_out_of_byte(self, validator, minimal_instruction_table) -> None:
        minimal_instruction_table["instructions"]["ping"]["discriminator"] = 256
        assert not validator.is_valid(minimal_instruction_table)

    def test_fixed_and_address_of_exclusive(self, validator, minimal_instruction_table) -> None:
        minimal_instruction_table["instructions"]["ping"]["accounts"].append(
            {
                "name": "program",
                "signer": False,
                "writable": False,
                "fixed": "token_program",
                "address_of": "vault",
            }
        )
        with pytest.raises(ValidationError):
            validator.validate(minimal_instruction_table)

    def test_unknown_fixed_account(self, validator, minimal_instruction_table) -> None:
        minimal_instruction_table["instructions"]["ping"]["accounts"].append(
            {"name": "clock", "signer": False, "writable": False, "fixed": "clock_sysvar"}
        )
        assert not validator.is_valid(minimal_instruction_table)

    def test_bad_field_name(self, validator, minimal_account_table) -> None:
        minimal_account_table["accounts"]["Thing"]["fields"][0]["name"] = "Owner"
        assert not validator.is_valid(minimal_account_table)

    def test_percent_domain_on_u8(self, validator, minimal_instruction_table) -> None:
        minimal_instruction_table["instructions"]["ping"]["fields"].append(
            {"name": "fee", "type": "u8", "domain": "percent"}
        )
        validator.validate(minimal_instruction_table)

    def test_percent_domain_requires_u8(self, validator, minimal_instruction_table) -> None:
        minimal_instruction_table["instructions"]["ping"]["fields"][0]["domain"] = "percent"
        with pytest.raises(ValidationError):
            validator.validate(minimal_instruction_table)

    def test_unknown_domain(self, validator, minimal_instruction_table) -> None:
        minimal_instruction_table["instructions"]["ping"]["fields"].append(
            {"name": "fee", "type": "u8", "domain": "basis_points"}
        )
        assert not validator.is_valid(minimal_instruction_table)


# =============================================================================
# SEMANTIC VIOLATIONS
# =============================================================================


class TestSemanticViolations:
    """Нарушения, которые JSON Schema не выражает"""

    def test_duplicate_field_names(self, minimal_account_table) -> None:
        fields = minimal_account_table["accounts"]["Thing"]["fields"]
        fields.append({"name": "owner", "type": "u64"})
        with pytest.raises(ValueError, match="Duplicate account Thing field names: owner"):
            validate_layout_table(minimal_account_table)

    def test_duplicate_slot_names(self, minimal_instruction_table) -> None:
        minimal_instruction_table["instructions"]["ping"]["accounts"].append(
            {"name": "vault", "signer": False, "writable": False}
        )
        with pytest.raises(ValueError, match="account names: vault"):
            validate_layout_table(minimal_instruction_table)

    def test_duplicate_discriminator(self, minimal_instruction_table) -> None:
        table = minimal_instruction_table
        table["instructions"]["pong"] = copy.deepcopy(table["instructions"]["ping"])
        with pytest.raises(ValueError, match="Duplicate discriminator 0"):
            validate_layout_table(table)

    def test_address_of_must_refer_to_earlier_slot(self, minimal_instruction_table) -> None:
        accounts = minimal_instruction_table["instructions"]["ping"]["accounts"]
        accounts.insert(0, {"name": "vault_mut", "signer": False, "writable": True, "address_of": "vault"})
        with pytest.raises(ValueError, match="undeclared slot vault"):
            validate_layout_table(minimal_instruction_table)

    def test_address_of_earlier_slot_ok(self, validator, minimal_instruction_table) -> None:
        minimal_instruction_table["instructions"]["ping"]["accounts"].append(
            {"name": "vault_mut", "signer": False, "writable": True, "address_of": "vault"}
        )
        assert validator.is_valid(minimal_instruction_table)
