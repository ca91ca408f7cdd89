"""
BigInt — знаковое целое неограниченной разрядности

Базовое представление ledger-значений (балансы, номера блоков, поля событий),
которые не помещаются в 64 бита. Все остальные числовые типы проецируются
на BigInt.

Конверсии:
- десятичная строка <-> BigInt (формат wire/storage)
- little-endian байты (unsigned magnitude / two's-complement signed) -> BigInt
- U64 / U128 (только unsigned), U256 (signed и unsigned) <-> BigInt

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Immutable: каждая операция возвращает новый экземпляр
2. Равенство — по математическому значению
3. Деление и остаток на ноль -> ScalarPanic (ошибка логики вызывающего)
4. to_signed_u256 вне [-2**255, 2**255 - 1] -> ScalarPanic
5. to_unsigned_u256 на отрицательном значении -> ScalarPanic
6. to_u64 вне [0, 2**64) -> BigIntOutOfRangeError (recoverable)
"""

import decimal
import functools
import re
from enum import Enum
from typing import TYPE_CHECKING, Final, Tuple, Union

from pydantic_core import core_schema

from src.core.hashing.stable_hash import SequenceNumber, StableHasher, int_to_as_int
from src.core.scalar.errors import (
    BigIntNegativeError,
    BigIntOverflowError,
    InvalidBigIntString,
    panic,
)
from src.core.scalar.fixed_width import (
    U64,
    U64_BYTES,
    U128,
    U256,
    U256_BYTES,
    to_little_endian,
)

if TYPE_CHECKING:
    from src.core.scalar.big_decimal import BigDecimal

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Диапазон экспоненты BigDecimal (signed 64-bit)
I64_MIN: Final[int] = -(1 << 63)
I64_MAX: Final[int] = (1 << 63) - 1

# Максимальная степень для pow (экспонента в один байт)
POW_EXPONENT_MAX: Final[int] = 255

# Входной формат десятичной строки
BIG_INT_INPUT_PATTERN: Final[str] = r"[+-]?[0-9]+"

# Выходной (канонический) формат
BIG_INT_PATTERN: Final[str] = r"^-?[0-9]+$"

_BIG_INT_RE = re.compile(BIG_INT_INPUT_PATTERN)


class BigIntSign(str, Enum):
    """Знак BigInt"""

    MINUS = "minus"
    NO_SIGN = "no_sign"  # ноль
    PLUS = "plus"


IntLike = Union["BigInt", int]


def _coerce(other: object) -> Union[int, None]:
    if isinstance(other, BigInt):
        return other._value
    if isinstance(other, int) and not isinstance(other, bool):
        return other
    return None


def _trunc_divmod(a: int, b: int) -> Tuple[int, int]:
    """divmod с округлением частного к нулю (знак остатка = знак делимого)."""
    quotient = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        quotient = -quotient
    return quotient, a - b * quotient


# =============================================================================
# BIGINT
# =============================================================================


@functools.total_ordering
class BigInt:
    """
    Знаковое целое неограниченной разрядности.

    Операторы:
        +, -, *   — всегда определены
        /         — деление с отбрасыванием дробной части (к нулю)
        %         — остаток с тем же знаком, что у делимого
    Смешанные операции с int допустимы, результат всегда BigInt.

    Examples:
        >>> str(BigInt(-7) / BigInt(2))
        '-3'
        >>> str(BigInt(-7) % BigInt(2))
        '-1'
    """

    __slots__ = ("_value",)

    def __init__(self, value: IntLike = 0):
        if isinstance(value, BigInt):
            value = value._value
        elif isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"BigInt expects int, got {type(value).__name__}")
        object.__setattr__(self, "_value", int(value))

    def __setattr__(self, name, value):
        raise AttributeError("BigInt is immutable")

    def __delattr__(self, name):
        raise AttributeError("BigInt is immutable")

    def __reduce__(self):
        return (BigInt, (self._value,))

    # -------------------------------------------------------------------------
    # Конструкторы
    # -------------------------------------------------------------------------

    @classmethod
    def from_str(cls, text: str) -> "BigInt":
        """
        Разбор десятичной строки с необязательным знаком.

        Raises:
            InvalidBigIntString: если строка не соответствует [+-]?[0-9]+
        """
        if not isinstance(text, str) or _BIG_INT_RE.fullmatch(text) is None:
            raise InvalidBigIntString(f"invalid BigInt string: {text!r}")
        # Через decimal: int(str) ограничен sys.get_int_max_str_digits()
        return cls(int(decimal.Decimal(text)))

    @classmethod
    def from_unsigned_bytes_le(cls, data: bytes) -> "BigInt":
        """Все байты — неотрицательный модуль (little-endian)."""
        return cls(int.from_bytes(data, "little", signed=False))

    @classmethod
    def from_signed_bytes_le(cls, data: bytes) -> "BigInt":
        """Two's-complement little-endian: старший бит последнего байта — знак."""
        return cls(int.from_bytes(data, "little", signed=True))

    @classmethod
    def from_u64(cls, n: U64) -> "BigInt":
        """
        U64 как беззнаковое значение.

        Знаковый вариант не нужен: U64 приходит только для номеров блоков.
        """
        return cls.from_unsigned_bytes_le(to_little_endian(n))

    @classmethod
    def from_u128(cls, n: U128) -> "BigInt":
        """U128 как беззнаковое значение (знаковый вариант не нужен)."""
        return cls.from_unsigned_bytes_le(to_little_endian(n))

    @classmethod
    def from_unsigned_u256(cls, n: U256) -> "BigInt":
        return cls.from_unsigned_bytes_le(to_little_endian(n))

    @classmethod
    def from_signed_u256(cls, n: U256) -> "BigInt":
        """32 байта U256 интерпретируются как int256 (two's-complement)."""
        return cls.from_signed_bytes_le(to_little_endian(n))

    # -------------------------------------------------------------------------
    # Байтовые представления
    # -------------------------------------------------------------------------

    @property
    def sign(self) -> BigIntSign:
        if self._value < 0:
            return BigIntSign.MINUS
        if self._value == 0:
            return BigIntSign.NO_SIGN
        return BigIntSign.PLUS

    def _magnitude_bytes(self, byteorder: str) -> bytes:
        magnitude = abs(self._value)
        length = max(1, (magnitude.bit_length() + 7) // 8)
        return magnitude.to_bytes(length, byteorder)

    def to_bytes_le(self) -> Tuple[BigIntSign, bytes]:
        """(знак, модуль little-endian). Для нуля модуль — b'\\x00'."""
        return self.sign, self._magnitude_bytes("little")

    def to_bytes_be(self) -> Tuple[BigIntSign, bytes]:
        return self.sign, self._magnitude_bytes("big")

    def to_signed_bytes_le(self) -> bytes:
        """Минимальное two's-complement представление, little-endian."""
        value = self._value
        length = ((value if value >= 0 else ~value).bit_length() // 8) + 1
        return value.to_bytes(length, "little", signed=True)

    # -------------------------------------------------------------------------
    # Проекции в фиксированную ширину
    # -------------------------------------------------------------------------

    def to_signed_u256(self) -> U256:
        """
        Проекция в int256, упакованный в U256.

        Отрицательные значения дополняются байтами 0xFF до 32 байт.

        Raises:
            ScalarPanic: если значение вне [-2**255, 2**255 - 1]
        """
        data = self.to_signed_bytes_le()
        if len(data) > U256_BYTES:
            panic(f"BigInt value does not fit into signed U256: {self}")
        filler = b"\xff" if self._value < 0 else b"\x00"
        return U256.from_le_bytes(data + filler * (U256_BYTES - len(data)))

    def to_unsigned_u256(self) -> U256:
        """
        Raises:
            ScalarPanic: если значение отрицательное или длиннее 256 бит
        """
        if self._value < 0:
            panic(f"negative value encountered for U256: {self}")
        if self.bits() > U256_BYTES * 8:
            panic(f"BigInt value does not fit into unsigned U256: {self}")
        return U256(self._value)

    def to_u64(self) -> int:
        """
        Сужение до u64.

        Единственная recoverable конверсия: значение может прийти
        из внешнего (недоверенного) источника.

        Raises:
            BigIntNegativeError: если значение отрицательное
            BigIntOverflowError: если модуль длиннее 8 байт
        """
        sign, data = self.to_bytes_le()
        if sign is BigIntSign.MINUS:
            raise BigIntNegativeError()
        if len(data) > U64_BYTES:
            raise BigIntOverflowError()
        return int.from_bytes(data, "little")

    def to_big_decimal(self, exp: IntLike) -> "BigDecimal":
        """
        BigDecimal со значением self * 10**exp.

        Raises:
            ScalarPanic: если exp не помещается в i64
        """
        from src.core.scalar.big_decimal import BigDecimal

        exponent = int(BigInt(exp))
        if not I64_MIN <= exponent <= I64_MAX:
            panic("big decimal exponent does not fit in i64")
        return BigDecimal.new(self, exponent)

    # -------------------------------------------------------------------------
    # Прочие операции
    # -------------------------------------------------------------------------

    def pow(self, exponent: int) -> "BigInt":
        """
        Точная степень. Экспонента — один байт, рост модуля не ограничен.

        Raises:
            ValueError: если exponent вне [0, 255]
        """
        if isinstance(exponent, bool) or not isinstance(exponent, int):
            raise TypeError(f"exponent must be int, got {type(exponent).__name__}")
        if not 0 <= exponent <= POW_EXPONENT_MAX:
            raise ValueError(f"exponent must be in [0, {POW_EXPONENT_MAX}], got {exponent}")
        return BigInt(self._value**exponent)

    def bits(self) -> int:
        """Число бит модуля (0 для нуля)."""
        return abs(self._value).bit_length()

    def is_zero(self) -> bool:
        return self._value == 0

    # -------------------------------------------------------------------------
    # Арифметика
    # -------------------------------------------------------------------------

    def __add__(self, other):
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        return BigInt(self._value + rhs)

    __radd__ = __add__

    def __sub__(self, other):
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        return BigInt(self._value - rhs)

    def __rsub__(self, other):
        lhs = _coerce(other)
        if lhs is None:
            return NotImplemented
        return BigInt(lhs - self._value)

    def __mul__(self, other):
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        return BigInt(self._value * rhs)

    __rmul__ = __mul__

    def __truediv__(self, other):
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        if rhs == 0:
            panic("Cannot divide by zero-valued `BigInt`!")
        return BigInt(_trunc_divmod(self._value, rhs)[0])

    def __rtruediv__(self, other):
        lhs = _coerce(other)
        if lhs is None:
            return NotImplemented
        return BigInt(lhs) / self

    def __mod__(self, other):
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        if rhs == 0:
            panic("Cannot take remainder of zero-valued `BigInt`!")
        return BigInt(_trunc_divmod(self._value, rhs)[1])

    def __rmod__(self, other):
        lhs = _coerce(other)
        if lhs is None:
            return NotImplemented
        return BigInt(lhs) % self

    def __neg__(self) -> "BigInt":
        return BigInt(-self._value)

    def __abs__(self) -> "BigInt":
        return BigInt(abs(self._value))

    # -------------------------------------------------------------------------
    # Сравнение, преобразования
    # -------------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        return self._value == rhs

    def __lt__(self, other) -> bool:
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        return self._value < rhs

    def __hash__(self) -> int:
        return hash(self._value)

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __str__(self) -> str:
        return str(decimal.Decimal(self._value))

    def __repr__(self) -> str:
        return f"BigInt({self})"

    # -------------------------------------------------------------------------
    # Stable hash / pydantic
    # -------------------------------------------------------------------------

    def stable_hash(self, sequence_number: SequenceNumber, state: StableHasher) -> None:
        """(флаг знака, модуль little-endian)."""
        int_to_as_int(self._value).stable_hash(sequence_number, state)

    @classmethod
    def _validate(cls, value: object) -> "BigInt":
        if isinstance(value, BigInt):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            return cls.from_str(value)
        raise ValueError(f"cannot build BigInt from {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, _core_schema, handler):
        return {"type": "string", "pattern": BIG_INT_PATTERN}
