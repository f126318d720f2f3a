"""
Contract Validation Module

Версионированные layout-таблицы аккаунтов и инструкций (JSON) и их
валидация через jsonschema.
"""

from .validators import (
    ACCOUNT_LAYOUTS_V1,
    INSTRUCTION_LAYOUTS_V1,
    LayoutTableValidator,
    SchemaLoader,
    load_layout_table,
    validate_layout_table,
)

__all__ = [
    # Table names
    "ACCOUNT_LAYOUTS_V1",
    "INSTRUCTION_LAYOUTS_V1",
    # Classes
    "SchemaLoader",
    "LayoutTableValidator",
    # Functions
    "load_layout_table",
    "validate_layout_table",
]
