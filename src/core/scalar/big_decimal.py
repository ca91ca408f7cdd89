"""
BigDecimal — точное десятичное число (mantissa × 10**exponent)

Mantissa — BigInt (целое неограниченной разрядности со знаком),
exponent — степень десяти: положительная экспонента увеличивает модуль.
Это НЕ scale десятичной библиотеки (scale = -exponent).

Нормализация (выполняется при КАЖДОМ построении):
    если значение ноль -> (0, 0)
    иначе: хвостовые нули mantissa отбрасываются, exponent увеличивается
    на их количество, знак сохраняется

Нормализация не откладывается: равенство и stable hash предполагают,
что одно математическое значение имеет ровно одно представление.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Любой наблюдаемый экземпляр нормализован
2. +, -, * точные (без округления)
3. / точное, если частное представимо в DIVISION_PRECISION цифрах,
   иначе округляется до DIVISION_PRECISION значащих цифр
4. Деление на ноль -> ScalarPanic
5. str() — обычная десятичная запись без экспоненты, "0" для нуля
"""

import decimal
import math
import re
from typing import Final, Optional, Tuple, Union

from pydantic_core import core_schema

from src.core.hashing.stable_hash import (
    SequenceNumber,
    StableHasher,
    feed,
    int_to_as_int,
)
from src.core.scalar.big_int import I64_MAX, I64_MIN, BigInt, _trunc_divmod
from src.core.scalar.errors import InvalidBigDecimalString, panic

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Число значащих цифр частного, если деление не точное
DIVISION_PRECISION: Final[int] = 100

U64_MAX: Final[int] = (1 << 64) - 1

# Входной формат: целое/дробное, опционально научная запись
BIG_DECIMAL_INPUT_PATTERN: Final[str] = (
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)

# Выходной (канонический) формат
BIG_DECIMAL_PATTERN: Final[str] = r"^-?[0-9]+(\.[0-9]+)?$"

_BIG_DECIMAL_RE = re.compile(BIG_DECIMAL_INPUT_PATTERN)

DecimalLike = Union["BigDecimal", BigInt, int, float, str, decimal.Decimal]


# =============================================================================
# НОРМАЛИЗАЦИЯ
# =============================================================================


def normalize(mantissa: int, exponent: int) -> Tuple[int, int]:
    """
    Каноническая пара (mantissa, exponent).

    Examples:
        >>> normalize(132400, 4)
        (1324, 6)
        >>> normalize(0, -5)
        (0, 0)
        >>> normalize(-1900000, -3)
        (-19, 2)
    """
    if mantissa == 0:
        return 0, 0
    trailing = 0
    for digit in reversed(_decimal_digits(mantissa)):
        if digit:
            break
        trailing += 1
    return mantissa // 10**trailing, exponent + trailing


def _decimal_digits(value: int) -> Tuple[int, ...]:
    """Десятичные цифры модуля без int -> str (нет лимита на длину)."""
    return decimal.Decimal(value).as_tuple().digits


def _parts_from_decimal(value: decimal.Decimal) -> Tuple[int, int]:
    if not value.is_finite():
        raise InvalidBigDecimalString(f"BigDecimal must be finite, got {value}")
    sign, digits, exponent = value.as_tuple()
    mantissa = int(decimal.Decimal((0, digits, 0)))
    return (-mantissa if sign else mantissa), exponent


def _parts_from_str(text: str) -> Tuple[int, int]:
    if not isinstance(text, str) or _BIG_DECIMAL_RE.fullmatch(text) is None:
        raise InvalidBigDecimalString(f"invalid BigDecimal string: {text!r}")
    return _parts_from_decimal(decimal.Decimal(text))


def _parts_from_float(value: float) -> Tuple[int, int]:
    # Через кратчайший repr: 0.1 -> "0.1", а не двоичное приближение
    if not math.isfinite(value):
        raise InvalidBigDecimalString(f"BigDecimal must be finite, got {value}")
    return _parts_from_decimal(decimal.Decimal(repr(value)))


def _align(a: "BigDecimal", b: "BigDecimal") -> Tuple[int, int, int]:
    """Mantissa обоих чисел на общей (минимальной) экспоненте."""
    exponent = min(a._exponent, b._exponent)
    return (
        a._mantissa * 10 ** (a._exponent - exponent),
        b._mantissa * 10 ** (b._exponent - exponent),
        exponent,
    )


# =============================================================================
# BIGDECIMAL
# =============================================================================


class BigDecimal:
    """
    Точное десятичное число. Все операции возвращают нормализованное значение.

    Examples:
        >>> str(BigDecimal.new(BigInt(132400), 4))
        '1324000000'
        >>> str(BigDecimal.new(BigInt(10), -2))
        '0.1'
        >>> BigDecimal.new(BigInt(0), 3) == BigDecimal.zero()
        True
    """

    __slots__ = ("_mantissa", "_exponent")

    def __init__(self, value: DecimalLike = 0):
        if isinstance(value, BigDecimal):
            parts = (value._mantissa, value._exponent)
        elif isinstance(value, bool):
            raise TypeError("BigDecimal does not accept bool")
        elif isinstance(value, (BigInt, int)):
            parts = (int(value), 0)
        elif isinstance(value, float):
            parts = _parts_from_float(value)
        elif isinstance(value, str):
            parts = _parts_from_str(value)
        elif isinstance(value, decimal.Decimal):
            parts = _parts_from_decimal(value)
        else:
            raise TypeError(f"cannot build BigDecimal from {type(value).__name__}")
        self._set(*parts)

    def _set(self, mantissa: int, exponent: int) -> None:
        mantissa, exponent = normalize(mantissa, exponent)
        object.__setattr__(self, "_mantissa", mantissa)
        object.__setattr__(self, "_exponent", exponent)

    def __setattr__(self, name, value):
        raise AttributeError("BigDecimal is immutable")

    def __delattr__(self, name):
        raise AttributeError("BigDecimal is immutable")

    def __reduce__(self):
        return (BigDecimal.new, (self._mantissa, self._exponent))

    # -------------------------------------------------------------------------
    # Конструкторы
    # -------------------------------------------------------------------------

    @classmethod
    def new(cls, mantissa: Union[BigInt, int], exponent: int) -> "BigDecimal":
        """
        Значение mantissa × 10**exponent, сразу нормализованное.

        exponent — степень десяти (а не scale хранилища).
        """
        if isinstance(exponent, bool) or not isinstance(exponent, int):
            raise TypeError(f"exponent must be int, got {type(exponent).__name__}")
        result = cls.__new__(cls)
        result._set(int(BigInt(mantissa)), exponent)
        return result

    @classmethod
    def zero(cls) -> "BigDecimal":
        return cls.new(0, 0)

    @classmethod
    def from_str(cls, text: str) -> "BigDecimal":
        """
        Raises:
            InvalidBigDecimalString: если строка не является конечным числом
        """
        return cls.new(*_parts_from_str(text))

    @classmethod
    def from_int(cls, value: Union[BigInt, int]) -> "BigDecimal":
        return cls.new(value, 0)

    @classmethod
    def from_float(cls, value: float) -> "BigDecimal":
        """
        Raises:
            InvalidBigDecimalString: для NaN/Inf
        """
        return cls.new(*_parts_from_float(value))

    @classmethod
    def from_decimal(cls, value: decimal.Decimal) -> "BigDecimal":
        return cls.new(*_parts_from_decimal(value))

    # -------------------------------------------------------------------------
    # Представления
    # -------------------------------------------------------------------------

    def as_bigint_and_exponent(self) -> Tuple[BigInt, int]:
        return BigInt(self._mantissa), self._exponent

    def normalized(self) -> "BigDecimal":
        """Каноническая форма. Идемпотентна."""
        return BigDecimal.new(*normalize(self._mantissa, self._exponent))

    def digits(self) -> int:
        """Число десятичных цифр mantissa (1 для нуля)."""
        return len(_decimal_digits(self._mantissa))

    def to_decimal(self) -> decimal.Decimal:
        """Точный decimal.Decimal (без участия контекста)."""
        digits = _decimal_digits(self._mantissa)
        return decimal.Decimal((int(self._mantissa < 0), digits, self._exponent))

    def _truncated(self) -> int:
        if self._exponent >= 0:
            return self._mantissa * 10**self._exponent
        return _trunc_divmod(self._mantissa, 10 ** -self._exponent)[0]

    def to_i64(self) -> Optional[int]:
        """Целая часть (к нулю), None если не помещается в i64."""
        value = self._truncated()
        return value if I64_MIN <= value <= I64_MAX else None

    def to_u64(self) -> Optional[int]:
        """Целая часть (к нулю), None если не помещается в u64."""
        value = self._truncated()
        return value if 0 <= value <= U64_MAX else None

    def __str__(self) -> str:
        sign = "-" if self._mantissa < 0 else ""
        digits = "".join(map(str, _decimal_digits(self._mantissa)))
        if self._exponent >= 0:
            if self._mantissa == 0:
                return "0"
            return sign + digits + "0" * self._exponent
        point = len(digits) + self._exponent
        if point > 0:
            return f"{sign}{digits[:point]}.{digits[point:]}"
        return f"{sign}0.{'0' * -point}{digits}"

    def __repr__(self) -> str:
        return f"BigDecimal('{self}')"

    # -------------------------------------------------------------------------
    # Арифметика
    # -------------------------------------------------------------------------

    @staticmethod
    def _coerce(other: object) -> Optional["BigDecimal"]:
        if isinstance(other, BigDecimal):
            return other
        if isinstance(other, (BigInt, int)) and not isinstance(other, bool):
            return BigDecimal.from_int(other)
        return None

    def __add__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        a, b, exponent = _align(self, rhs)
        return BigDecimal.new(a + b, exponent)

    __radd__ = __add__

    def __sub__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        a, b, exponent = _align(self, rhs)
        return BigDecimal.new(a - b, exponent)

    def __rsub__(self, other):
        lhs = self._coerce(other)
        if lhs is None:
            return NotImplemented
        return lhs - self

    def __mul__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return BigDecimal.new(self._mantissa * rhs._mantissa, self._exponent + rhs._exponent)

    __rmul__ = __mul__

    def __truediv__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        if rhs._mantissa == 0:
            panic("Cannot divide by zero-valued `BigDecimal`!")
        with decimal.localcontext() as ctx:
            ctx.prec = DIVISION_PRECISION
            ctx.rounding = decimal.ROUND_HALF_EVEN
            ctx.Emax = decimal.MAX_EMAX
            ctx.Emin = decimal.MIN_EMIN
            quotient = self.to_decimal() / rhs.to_decimal()
        return BigDecimal.from_decimal(quotient)

    def __rtruediv__(self, other):
        lhs = self._coerce(other)
        if lhs is None:
            return NotImplemented
        return lhs / self

    def __neg__(self) -> "BigDecimal":
        return BigDecimal.new(-self._mantissa, self._exponent)

    def __abs__(self) -> "BigDecimal":
        return BigDecimal.new(abs(self._mantissa), self._exponent)

    def __bool__(self) -> bool:
        return self._mantissa != 0

    # -------------------------------------------------------------------------
    # Сравнение
    # -------------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return (self._mantissa, self._exponent) == (rhs._mantissa, rhs._exponent)

    def _compare(self, other) -> Optional[int]:
        rhs = self._coerce(other)
        if rhs is None:
            return None
        a, b, _ = _align(self, rhs)
        return (a > b) - (a < b)

    def __lt__(self, other) -> bool:
        result = self._compare(other)
        return NotImplemented if result is None else result < 0

    def __le__(self, other) -> bool:
        result = self._compare(other)
        return NotImplemented if result is None else result <= 0

    def __gt__(self, other) -> bool:
        result = self._compare(other)
        return NotImplemented if result is None else result > 0

    def __ge__(self, other) -> bool:
        result = self._compare(other)
        return NotImplemented if result is None else result >= 0

    def __hash__(self) -> int:
        # Совпадает с hash(int) для целых значений, как и __eq__
        return hash(self.to_decimal())

    # -------------------------------------------------------------------------
    # Stable hash / pydantic
    # -------------------------------------------------------------------------

    def stable_hash(self, sequence_number: SequenceNumber, state: StableHasher) -> None:
        """
        Сначала scale (= -exponent, обычное int) в дочерней позиции, затем
        mantissa в собственной позиции. Пишется именно scale: 0.1 -> scale 1.

        Совместимость гарантируется только с беззнаковыми целыми:
        у целого значения scale == 0 ничего не пишет, и хэш совпадает
        с хэшем mantissa как int.
        """
        feed(-self._exponent, sequence_number.next_child(), state)
        int_to_as_int(self._mantissa).stable_hash(sequence_number, state)

    @classmethod
    def _validate(cls, value: object) -> "BigDecimal":
        if isinstance(value, BigDecimal):
            return value
        if isinstance(value, (BigInt, int, float, str, decimal.Decimal)) and not isinstance(
            value, bool
        ):
            return cls(value)
        raise ValueError(f"cannot build BigDecimal from {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, _core_schema, handler):
        return {"type": "string", "pattern": BIG_DECIMAL_PATTERN}
