"""
Storage — колонки хранилища для точных числовых типов.
"""

from src.core.storage.numeric_column import (
    POSTGRES_NUMERIC_LIMITS,
    BigDecimalColumn,
    BigIntColumn,
    NumericStorageLimits,
    NumericStorageRangeError,
    check_storage_range,
)

__all__ = [
    "POSTGRES_NUMERIC_LIMITS",
    "BigDecimalColumn",
    "BigIntColumn",
    "NumericStorageLimits",
    "NumericStorageRangeError",
    "check_storage_range",
]
