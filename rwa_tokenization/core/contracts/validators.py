"""
Layout Table Validators

Layout-таблицы аккаунтов и инструкций хранятся как данные
(contracts/schema/*.json), а не как код: смена версии layout программы —
это новый JSON-файл, а не правка offset-арифметики.

Каждая таблица проходит два уровня проверки:
1. JSON Schema (layout_table.json) через jsonschema — структура и типы
2. Семантика — уникальность имён полей/слотов и discriminator'ов,
   корректность ссылок address_of

Таблицы:
- accounts.v1.json     — layout аккаунтов (после 8-байтового header)
- instructions.v1.json — payload и список аккаунтов каждой инструкции
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

LAYOUT_META_SCHEMA = "layout_table"
ACCOUNT_LAYOUTS_V1 = "accounts.v1"
INSTRUCTION_LAYOUTS_V1 = "instructions.v1"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON файлов из contracts/schema/.

    Файлы лежат внутри пакета, поэтому путь не зависит от того,
    установлен ли пакет или запущен из checkout.
    """

    def __init__(self, schema_dir: Optional[Path] = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных документов (заполняется один раз, далее только чтение)
        self._documents: Dict[str, Dict[str, Any]] = {}

    def load(self, name: str) -> Dict[str, Any]:
        """
        Загрузка JSON документа по имени без расширения.

        Raises:
            FileNotFoundError: Если файл не найден
            json.JSONDecodeError: Если файл не является валидным JSON
        """
        if name in self._documents:
            return self._documents[name]

        path = self._schema_dir / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(f"Schema not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)

        self._documents[name] = document
        return document

    def load_schema(self, name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema с meta-валидацией.

        Raises:
            ValueError: Если документ не является валидной JSON Schema
        """
        schema = self.load(name)
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {name}.json: {e}")
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# LAYOUT TABLE VALIDATOR
# =============================================================================


class LayoutTableValidator:
    """
    Валидатор layout-таблиц.

    Структурная проверка — JSON Schema; семантическая — здесь же,
    так как JSON Schema не выражает уникальность по ключу.
    """

    def __init__(self, loader: Optional[SchemaLoader] = None):
        self.loader = loader or _SCHEMA_LOADER
        self.schema = self.loader.load_schema(LAYOUT_META_SCHEMA)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, table: Dict[str, Any]) -> None:
        """
        Полная проверка таблицы.

        Raises:
            ValidationError: Если таблица не соответствует layout_table.json
            ValueError: Если нарушена семантика (дубликаты, висячие ссылки)
        """
        self.validator.validate(table)

        for kind, layout in table.get("accounts", {}).items():
            _check_unique_names(layout["fields"], f"account {kind} field")

        seen_discriminators: Dict[int, str] = {}
        for action, layout in table.get("instructions", {}).items():
            _check_unique_names(layout["fields"], f"instruction {action} field")
            _check_unique_names(layout["accounts"], f"instruction {action} account")

            disc = layout["discriminator"]
            if disc in seen_discriminators:
                raise ValueError(
                    f"Duplicate discriminator {disc}: {seen_discriminators[disc]} and {action}"
                )
            seen_discriminators[disc] = action

            declared = set()
            for slot in layout["accounts"]:
                target = slot.get("address_of")
                if target is not None and target not in declared:
                    raise ValueError(
                        f"instruction {action}: slot {slot['name']} refers to "
                        f"undeclared slot {target}"
                    )
                declared.add(slot["name"])

    def is_valid(self, table: Dict[str, Any]) -> bool:
        """Проверка валидности без exception."""
        try:
            self.validate(table)
        except (ValidationError, ValueError):
            return False
        return True


def _check_unique_names(items, what: str) -> None:
    names = [item["name"] for item in items]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate {what} names: {', '.join(duplicates)}")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def load_layout_table(name: str) -> Dict[str, Any]:
    """
    Загрузка и проверка layout-таблицы.

    Args:
        name: Имя таблицы (например, 'accounts.v1')

    Returns:
        Проверенная таблица как dict

    Raises:
        ValidationError / ValueError: Если таблица невалидна
    """
    table = _SCHEMA_LOADER.load(name)
    LayoutTableValidator().validate(table)
    return table


def validate_layout_table(table: Dict[str, Any]) -> None:
    """
    Проверка произвольной layout-таблицы (например, новой версии layout).

    Raises:
        ValidationError / ValueError: Если таблица невалидна
    """
    LayoutTableValidator().validate(table)
