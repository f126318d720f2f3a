"""
Errors — иерархия исключений протокольного ядра

Все ошибки локальные, синхронные и не подлежат retry: они обнаруживаются
валидацией входных данных при построении инструкций, разборе аккаунтов
или в целочисленной математике. Сетевые ошибки принадлежат внешним
коллабораторам (submission / reader) и здесь не создаются.

Где это естественно, исключения дополнительно наследуют встроенные типы
(ValueError, LookupError, ...), чтобы вызывающий код мог ловить их
привычным образом.
"""


class ProtocolError(Exception):
    """Базовый класс всех ошибок протокольного ядра."""

    pass


class NotFound(ProtocolError, LookupError):
    """
    По адресу нет аккаунта.

    Поднимается клиентом на read path, когда reader вернул None.
    """

    def __init__(self, what: str, address) -> None:
        self.what = what
        self.address = address
        super().__init__(f"{what} not found at {address}")


class SchemaMismatch(ProtocolError):
    """
    Байты аккаунта не соответствуют layout-таблице.

    Причины: blob короче минимальной длины, неизвестный discriminator,
    строка выходит за границы буфера, запись не проходит валидацию.
    """

    pass


class InvalidDiscount(ProtocolError, ValueError):
    """Процент дисконта вне диапазона 0–100."""

    def __init__(self, discount_percent) -> None:
        self.discount_percent = discount_percent
        super().__init__(f"Discount percentage must be within 0..100, got {discount_percent}")


class DivisionByZero(ProtocolError, ZeroDivisionError):
    """
    Математика ликвидности вызвана для неконсистентного пула.

    Нулевой резерв при ненулевом total_lp_shares (или вывод из пустого пула).
    """

    pass


class DerivationExhausted(ProtocolError):
    """Ни один bump в диапазоне 255..1 не дал адрес вне кривой."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Unable to find a viable program address bump for seed '{tag}'")


class InvalidSeed(ProtocolError, ValueError):
    """Seed нарушает правила ledger (длина, количество, тип)."""

    pass


class ArithmeticOverflow(ProtocolError, OverflowError):
    """Значение не помещается в объявленную ширину поля (u8/u32/u64/i64)."""

    pass
