"""
Units — конверсия base units ↔ отображаемые суммы

Mint токенов vault создаётся с 6 знаками после запятой. Все суммы в
протоколе — целые base units; этот модуль — единственный допустимый способ
перевода в человекочитаемую десятичную строку и обратно.

Только целочисленная арифметика: никаких float даже для отображения.
"""

from typing import Final

# Decimals mint'а токенов vault
TOKEN_DECIMALS: Final[int] = 6


def format_amount(amount: int, decimals: int = TOKEN_DECIMALS) -> str:
    """
    base units → десятичная строка без хвостовых нулей.

    Examples:
        >>> format_amount(1_500_000)
        '1.5'
        >>> format_amount(2_000_000)
        '2'
    """
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")
    if decimals < 0:
        raise ValueError(f"Decimals cannot be negative: {decimals}")

    divisor = 10**decimals
    integer_part, fractional_part = divmod(amount, divisor)
    if decimals == 0:
        return str(integer_part)

    fractional_str = str(fractional_part).rjust(decimals, "0").rstrip("0")
    if not fractional_str:
        return str(integer_part)
    return f"{integer_part}.{fractional_str}"


def parse_amount(text: str, decimals: int = TOKEN_DECIMALS) -> int:
    """
    Десятичная строка → base units.

    Лишние знаки после запятой отбрасываются (усечение, не округление).

    Raises:
        ValueError: строка не является неотрицательным десятичным числом

    Examples:
        >>> parse_amount("1.5")
        1500000
        >>> parse_amount("0.0000019")
        1
    """
    if decimals < 0:
        raise ValueError(f"Decimals cannot be negative: {decimals}")

    text = text.strip()
    integer_str, _, fractional_str = text.partition(".")
    if not integer_str and not fractional_str:
        raise ValueError(f"Invalid amount: {text!r}")
    if not integer_str:
        integer_str = "0"
    if not integer_str.isdigit() or (fractional_str and not fractional_str.isdigit()):
        raise ValueError(f"Invalid amount: {text!r}")

    fractional_str = fractional_str.ljust(decimals, "0")[:decimals]
    fractional_part = int(fractional_str) if fractional_str else 0
    return int(integer_str) * 10**decimals + fractional_part
