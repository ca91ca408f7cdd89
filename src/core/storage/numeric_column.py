"""
Numeric Columns — хранение BigInt / BigDecimal без потери точности

SQLAlchemy TypeDecorator'ы:
- PostgreSQL: NUMERIC без precision/scale (произвольная точность, со знаком)
- остальные диалекты: TEXT с каноническим десятичным представлением
  (SQLite хранит NUMERIC как REAL и теряет точность)

Значения за пределами лимитов PostgreSQL numeric отклоняются до записи:
обрезка на стороне БД была бы тихой порчей данных.
"""

import decimal
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Numeric, Text
from sqlalchemy.types import TypeDecorator

from src.core.scalar.big_decimal import BigDecimal
from src.core.scalar.big_int import BigInt

logger = logging.getLogger(__name__)


# =============================================================================
# ЛИМИТЫ
# =============================================================================


@dataclass(frozen=True)
class NumericStorageLimits:
    """Лимиты десятичной колонки хранилища."""

    max_integer_digits: int = 131072
    max_fraction_digits: int = 16383


POSTGRES_NUMERIC_LIMITS = NumericStorageLimits()


class NumericStorageRangeError(ValueError):
    """Значение не помещается в десятичную колонку без потери точности."""

    pass


def check_storage_range(
    value: BigDecimal,
    limits: NumericStorageLimits = POSTGRES_NUMERIC_LIMITS,
) -> None:
    """
    Проверка, что значение хранится в колонке точно.

    Raises:
        NumericStorageRangeError: если цифр до или после точки больше лимита
    """
    if not value:
        return
    _, exponent = value.as_bigint_and_exponent()
    integer_digits = value.digits() + exponent
    fraction_digits = -exponent
    if integer_digits > limits.max_integer_digits:
        raise NumericStorageRangeError(
            f"{integer_digits} integer digits exceed column limit {limits.max_integer_digits}"
        )
    if fraction_digits > limits.max_fraction_digits:
        raise NumericStorageRangeError(
            f"{fraction_digits} fraction digits exceed column limit {limits.max_fraction_digits}"
        )


# =============================================================================
# TYPE DECORATORS
# =============================================================================


class _ExactNumeric(TypeDecorator):
    impl = Text
    cache_ok = True

    def __init__(self, limits: NumericStorageLimits = POSTGRES_NUMERIC_LIMITS):
        super().__init__()
        self.limits = limits

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(asdecimal=True))
        return dialect.type_descriptor(Text())

    def _bind(self, value: BigDecimal, dialect):
        try:
            check_storage_range(value, self.limits)
        except NumericStorageRangeError:
            logger.debug("rejecting %s for %s column", value, dialect.name)
            raise
        if dialect.name == "postgresql":
            return value.to_decimal()
        return str(value)

    @staticmethod
    def _load(value) -> BigDecimal:
        if isinstance(value, decimal.Decimal):
            return BigDecimal.from_decimal(value)
        return BigDecimal.from_str(str(value))


class BigDecimalColumn(_ExactNumeric):
    """Колонка для BigDecimal."""

    def process_bind_param(self, value: Optional[BigDecimal], dialect):
        if value is None:
            return None
        if not isinstance(value, BigDecimal):
            raise TypeError(f"BigDecimalColumn expects BigDecimal, got {type(value).__name__}")
        return self._bind(value, dialect)

    def process_result_value(self, value, dialect) -> Optional[BigDecimal]:
        if value is None:
            return None
        return self._load(value)


class BigIntColumn(_ExactNumeric):
    """
    Колонка для BigInt.

    Значение из БД с ненулевой дробной частью — порча данных, а не округление.
    """

    def process_bind_param(self, value: Optional[BigInt], dialect):
        if value is None:
            return None
        if not isinstance(value, BigInt):
            raise TypeError(f"BigIntColumn expects BigInt, got {type(value).__name__}")
        return self._bind(BigDecimal.from_int(value), dialect)

    def process_result_value(self, value, dialect) -> Optional[BigInt]:
        if value is None:
            return None
        mantissa, exponent = self._load(value).as_bigint_and_exponent()
        if exponent < 0:
            raise NumericStorageRangeError(f"stored value {value} is not an integer")
        return mantissa * 10**exponent
