"""
Fixed-Width Ledger Values — U64 / U128 / U256 / Address

Беззнаковые целые фиксированной ширины в том виде, в котором их отдаёт
ledger reader. Типы берутся из ethereum_types: U64 и U256 как есть,
U128 объявлен по тому же образцу (FixedUnsigned с MAX_VALUE).
Выход за диапазон [0, MAX_VALUE] — OverflowError библиотеки.

Знаковая интерпретация (two's-complement) здесь НЕ выполняется:
это задача BigInt.from_signed_u256 / BigInt.to_signed_u256.
"""

from typing import ClassVar, Final, Type

from ethereum_types.bytes import Bytes20
from ethereum_types.numeric import U64, U256, FixedUnsigned

# =============================================================================
# БАЙТОВЫЕ ШИРИНЫ
# =============================================================================

U64_BYTES: Final[int] = 8
U128_BYTES: Final[int] = 16
U256_BYTES: Final[int] = 32

# Адрес контракта / аккаунта (20 байт)
ADDRESS_BYTES: Final[int] = Bytes20.LENGTH

# Адрес ledger: ровно 20 байт, иначе ValueError
Address = Bytes20


# =============================================================================
# U128
# =============================================================================


class U128(FixedUnsigned):
    """Беззнаковое целое от 0 до 2**128 - 1."""

    MAX_VALUE: ClassVar["U128"]


class _U128Max(U128):
    def _in_range(self, value: int) -> bool:
        return True


U128.MAX_VALUE = _U128Max((1 << (U128_BYTES * 8)) - 1)
U128.MAX_VALUE = U128((1 << (U128_BYTES * 8)) - 1)


# =============================================================================
# LITTLE-ENDIAN
# =============================================================================
# Разбор: U64.from_le_bytes / U128.from_le_bytes / U256.from_le_bytes
# (вход короче ширины допустим, длиннее -> ValueError)


def width_of(cls: Type[FixedUnsigned]) -> int:
    """Ширина типа в байтах."""
    return (int(cls.MAX_VALUE).bit_length() + 7) // 8


def to_little_endian(value: FixedUnsigned) -> bytes:
    """Ровно width_of(type(value)) байт, little-endian."""
    return int(value).to_bytes(width_of(type(value)), "little")
