"""
Scalar Errors — таксономия ошибок числовых типов

Два уровня ошибок:
- Recoverable: подклассы ValueError. Возникают на внешних данных
  (битая строка, hex, значение вне диапазона u64). Вызывающий код решает,
  отклонить запись или подставить default.
- Fatal: ScalarPanic. Нарушение инварианта вызывающим кодом (деление на ноль,
  overflow при проекции в U256). Не является ожидаемыми данными.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. ScalarPanic наследуется от BaseException, поэтому `except Exception`
   его не перехватывает
2. Непойманный ScalarPanic завершает процесс с ненулевым кодом
3. Перед raise panic() всегда пишет CRITICAL в лог
"""

import logging
from typing import NoReturn

logger = logging.getLogger(__name__)


# =============================================================================
# FATAL
# =============================================================================


class ScalarPanic(BaseException):
    """
    Нарушение инварианта числового типа.

    Аналог process abort: сигнализирует об ошибке логики вызывающего кода,
    а не о некорректных данных. Не должен перехватываться прикладным кодом.
    """

    pass


def panic(message: str) -> NoReturn:
    """
    Зафиксировать нарушение инварианта и прервать операцию.

    Args:
        message: Описание нарушения

    Raises:
        ScalarPanic: всегда
    """
    logger.critical("scalar invariant violated: %s", message)
    raise ScalarPanic(message)


# =============================================================================
# RECOVERABLE
# =============================================================================


class BigIntOutOfRangeError(ValueError):
    """BigInt не помещается в целевой тип."""

    pass


class BigIntNegativeError(BigIntOutOfRangeError):
    def __init__(self) -> None:
        super().__init__("Cannot convert negative BigInt into type")


class BigIntOverflowError(BigIntOutOfRangeError):
    def __init__(self) -> None:
        super().__init__("BigInt value is too large for type")


class InvalidBigIntString(ValueError):
    """Строка не является десятичным целым числом."""

    pass


class InvalidBigDecimalString(ValueError):
    """Строка (или float) не является конечным десятичным числом."""

    pass


class MalformedHexError(ValueError):
    """Hex-строка содержит недопустимые символы или нечётное число цифр."""

    pass
