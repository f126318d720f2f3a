"""
Layout — единый генератор encode/decode по layout-таблице

Вместо ручной offset-арифметики для каждого аккаунта и инструкции —
декларативный список полей (имя, тип), который обходит одна функция.
Offsets аддитивны и кумулятивны; строка (u32 LE длина + UTF-8) — единственный
тип переменной длины.

Типы полей:
    u8 / u32 / u64 — беззнаковые little-endian
    i64            — знаковый little-endian (timestamps)
    bool           — 1 байт, 0 = False, 1 = True
    pubkey         — 32 байта
    string         — u32 LE длина + байты UTF-8, без padding и терминатора
"""

import struct
from typing import Any, Dict, Final, Mapping, NamedTuple, Optional, Sequence, Tuple

from rwa_tokenization.core.domain.address import ADDRESS_LENGTH, Address
from rwa_tokenization.core.errors import SchemaMismatch
from rwa_tokenization.core.math.integer_math import (
    ensure_i64,
    ensure_u8,
    ensure_u32,
    ensure_u64,
)

# =============================================================================
# ТИПЫ ПОЛЕЙ
# =============================================================================

_STRUCTS: Final[Dict[str, struct.Struct]] = {
    "u8": struct.Struct("<B"),
    "u32": struct.Struct("<I"),
    "u64": struct.Struct("<Q"),
    "i64": struct.Struct("<q"),
    "bool": struct.Struct("<B"),
}

_RANGE_CHECKS: Final[dict] = {
    "u8": ensure_u8,
    "u32": ensure_u32,
    "u64": ensure_u64,
    "i64": ensure_i64,
}

STRING_LENGTH_PREFIX: Final[int] = 4

# Ширина фиксированной части; для string только префикс длины
FIELD_WIDTHS: Final[Dict[str, int]] = {
    "u8": 1,
    "u32": 4,
    "u64": 8,
    "i64": 8,
    "bool": 1,
    "pubkey": ADDRESS_LENGTH,
    "string": STRING_LENGTH_PREFIX,
}


class FieldSpec(NamedTuple):
    """Одно поле layout-таблицы."""

    name: str
    type: str
    # Доменное ограничение сверх ширины типа ("percent": 0..100)
    domain: Optional[str] = None

    @property
    def width(self) -> int:
        return FIELD_WIDTHS[self.type]

    @property
    def is_variable(self) -> bool:
        return self.type == "string"


def fields_from_table(entries: Sequence[Mapping[str, str]]) -> Tuple[FieldSpec, ...]:
    """JSON-записи {"name", "type", "domain"?} → кортеж FieldSpec."""
    return tuple(
        FieldSpec(name=entry["name"], type=entry["type"], domain=entry.get("domain"))
        for entry in entries
    )


# =============================================================================
# РАЗМЕРЫ И OFFSETS
# =============================================================================


def min_size(fields: Sequence[FieldSpec]) -> int:
    """Минимальная длина: все строки пустые."""
    return sum(f.width for f in fields)


def fixed_offsets(fields: Sequence[FieldSpec]) -> Dict[str, int]:
    """
    Offsets полей от начала layout до первого поля переменной длины
    (включительно — offset самой строки известен).
    """
    offsets: Dict[str, int] = {}
    offset = 0
    for f in fields:
        offsets[f.name] = offset
        if f.is_variable:
            break
        offset += f.width
    return offsets


# =============================================================================
# ENCODE
# =============================================================================


def encode_fields(fields: Sequence[FieldSpec], values: Mapping[str, Any]) -> bytes:
    """
    Сериализация значений строго в порядке layout.

    Raises:
        ValueError: отсутствует значение для поля
        ArithmeticOverflow: целое вне ширины поля
        TypeError: значение неподходящего типа
    """
    out = bytearray()
    for f in fields:
        if f.name not in values:
            raise ValueError(f"Missing value for field '{f.name}'")
        out += _encode_value(f, values[f.name])
    return bytes(out)


def _encode_value(f: FieldSpec, value: Any) -> bytes:
    if f.type == "pubkey":
        return Address.coerce(value).raw
    if f.type == "string":
        if not isinstance(value, str):
            raise TypeError(f"Field '{f.name}' expects str, got {type(value).__name__}")
        raw = value.encode("utf-8")
        return _STRUCTS["u32"].pack(ensure_u32(len(raw), f"len({f.name})")) + raw
    if f.type == "bool":
        if not isinstance(value, bool):
            raise TypeError(f"Field '{f.name}' expects bool, got {type(value).__name__}")
        return _STRUCTS["bool"].pack(1 if value else 0)
    return _STRUCTS[f.type].pack(_RANGE_CHECKS[f.type](value, f.name))


# =============================================================================
# DECODE
# =============================================================================


def decode_fields(
    fields: Sequence[FieldSpec],
    data: bytes,
    offset: int = 0,
    layout_name: Optional[str] = None,
) -> Tuple[Dict[str, Any], int]:
    """
    Разбор полей начиная с offset.

    Вход не модифицируется; чтения за границей буфера не происходит.

    Returns:
        (значения по именам полей, offset после последнего поля)

    Raises:
        SchemaMismatch: буфер короче layout, строка выходит за буфер,
            невалидный UTF-8, bool не 0/1
    """
    label = layout_name or "layout"
    view = memoryview(data)
    required = offset + min_size(fields)
    if len(view) < required:
        raise SchemaMismatch(
            f"{label}: {len(view)} bytes, at least {required} required"
        )

    values: Dict[str, Any] = {}
    for f in fields:
        if f.type == "pubkey":
            if offset + ADDRESS_LENGTH > len(view):
                raise SchemaMismatch(f"{label}: field '{f.name}' runs past end of data")
            values[f.name] = Address(bytes(view[offset:offset + ADDRESS_LENGTH]))
            offset += ADDRESS_LENGTH
        elif f.type == "string":
            values[f.name], offset = _decode_string(f, view, offset, label)
        else:
            if offset + f.width > len(view):
                raise SchemaMismatch(f"{label}: field '{f.name}' runs past end of data")
            (raw,) = _STRUCTS[f.type].unpack_from(view, offset)
            offset += f.width
            if f.type == "bool":
                if raw not in (0, 1):
                    raise SchemaMismatch(f"{label}: field '{f.name}' has invalid bool byte {raw}")
                raw = raw == 1
            values[f.name] = raw
    return values, offset


def _decode_string(f: FieldSpec, view: memoryview, offset: int, label: str) -> Tuple[str, int]:
    if offset + STRING_LENGTH_PREFIX > len(view):
        raise SchemaMismatch(f"{label}: field '{f.name}' length prefix runs past end of data")
    (length,) = _STRUCTS["u32"].unpack_from(view, offset)
    offset += STRING_LENGTH_PREFIX
    end = offset + length
    if end > len(view):
        raise SchemaMismatch(
            f"{label}: field '{f.name}' declares {length} bytes, "
            f"only {len(view) - offset} available"
        )
    try:
        text = bytes(view[offset:end]).decode("utf-8")
    except UnicodeDecodeError as e:
        raise SchemaMismatch(f"{label}: field '{f.name}' is not valid UTF-8: {e}")
    return text, end
