"""
Ed25519 curve membership

Program-derived address валиден, только если 32 байта НЕ являются
сжатой точкой кривой ed25519 (у такого адреса не может быть приватного
ключа). Проверка повторяет декомпрессию точки на стороне ledger:

    y = int(bytes, little-endian) без sign-бита, mod p
    u = y² - 1
    v = d·y² + 1
    точка на кривой ⇔ u/v — квадрат по модулю p (включая 0)

Неканоническое y (y >= p) принимается и редуцируется — так же, как это
делает ledger. v никогда не равно 0: -1/d не является квадратом.
"""

from typing import Final

# Простое поле 2^255 - 19
P: Final[int] = 2**255 - 19

# Параметр кривой d = -121665 / 121666 mod p
D: Final[int] = (-121665 * pow(121666, P - 2, P)) % P

_Y_MASK: Final[int] = (1 << 255) - 1


def is_on_curve(point: bytes) -> bool:
    """
    Являются ли 32 байта сжатой точкой ed25519.

    Args:
        point: 32 байта (сжатая точка / кандидат в адрес)

    Returns:
        True если декомпрессия успешна

    Raises:
        ValueError: если длина != 32
    """
    if len(point) != 32:
        raise ValueError(f"Compressed point must be 32 bytes, got {len(point)}")

    y = (int.from_bytes(point, "little") & _Y_MASK) % P
    y2 = y * y % P
    u = (y2 - 1) % P
    v = (D * y2 + 1) % P

    x2 = u * pow(v, P - 2, P) % P
    if x2 == 0:
        return True
    # Критерий Эйлера
    return pow(x2, (P - 1) // 2, P) == 1
