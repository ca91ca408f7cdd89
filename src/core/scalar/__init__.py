"""
Scalar types для ledger-значений

Точные числовые типы без потери точности (BigInt, BigDecimal),
непрозрачный байтовый массив (Bytes) и fixed-width значения ledger reader.
"""

from src.core.scalar.big_decimal import (
    BIG_DECIMAL_PATTERN,
    DIVISION_PRECISION,
    BigDecimal,
    normalize,
)
from src.core.scalar.big_int import (
    BIG_INT_PATTERN,
    I64_MAX,
    I64_MIN,
    BigInt,
    BigIntSign,
)
from src.core.scalar.bytes_value import BYTES_PATTERN, Bytes
from src.core.scalar.errors import (
    BigIntNegativeError,
    BigIntOutOfRangeError,
    BigIntOverflowError,
    InvalidBigDecimalString,
    InvalidBigIntString,
    MalformedHexError,
    ScalarPanic,
    panic,
)
from src.core.scalar.fixed_width import (
    ADDRESS_BYTES,
    U64,
    U64_BYTES,
    U128,
    U128_BYTES,
    U256,
    U256_BYTES,
    Address,
)

__all__ = [
    # Types
    "BigInt",
    "BigIntSign",
    "BigDecimal",
    "Bytes",
    # Fixed-width
    "U64",
    "U128",
    "U256",
    "Address",
    # Constants
    "ADDRESS_BYTES",
    "BIG_DECIMAL_PATTERN",
    "BIG_INT_PATTERN",
    "BYTES_PATTERN",
    "DIVISION_PRECISION",
    "I64_MAX",
    "I64_MIN",
    "U64_BYTES",
    "U128_BYTES",
    "U256_BYTES",
    # Functions
    "normalize",
    "panic",
    # Exceptions (recoverable)
    "BigIntOutOfRangeError",
    "BigIntNegativeError",
    "BigIntOverflowError",
    "InvalidBigIntString",
    "InvalidBigDecimalString",
    "MalformedHexError",
    # Exceptions (fatal)
    "ScalarPanic",
]
