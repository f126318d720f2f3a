"""
Address — 32-байтовый адрес ledger

Immutable value object. Текстовое представление — base58 (как в
кошельках и explorer'ах ledger); бинарное — ровно 32 байта, именно в
таком виде адрес входит в seeds и в account layout.
"""

from dataclasses import dataclass
from typing import Final, Union

import base58

ADDRESS_LENGTH: Final[int] = 32


@dataclass(frozen=True)
class Address:
    """Адрес аккаунта или программы (32 байта)."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray)):
            raise TypeError(f"Address expects bytes, got {type(self.raw).__name__}")
        if len(self.raw) != ADDRESS_LENGTH:
            raise ValueError(f"Address must be {ADDRESS_LENGTH} bytes, got {len(self.raw)}")
        # bytearray → bytes, чтобы экземпляр оставался hashable
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def from_base58(cls, text: str) -> "Address":
        """
        Разбор base58-строки.

        Raises:
            ValueError: невалидный алфавит или длина после декодирования != 32
        """
        return cls(base58.b58decode(text))

    @classmethod
    def coerce(cls, value: Union["Address", bytes, str]) -> "Address":
        """Address / 32 bytes / base58 str → Address."""
        if isinstance(value, Address):
            return value
        if isinstance(value, (bytes, bytearray)):
            return cls(bytes(value))
        if isinstance(value, str):
            return cls.from_base58(value)
        raise TypeError(f"Cannot interpret {type(value).__name__} as an address")

    def to_base58(self) -> str:
        return base58.b58encode(self.raw).decode("ascii")

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return self.to_base58()

    def __repr__(self) -> str:
        return f"Address('{self.to_base58()}')"
