"""
Bytes — непрозрачный неизменяемый байтовый массив с hex-представлением

Текстовая форма: "0x" + lowercase hex. Разбор принимает префикс "0x"/"0X"
или его отсутствие и hex-цифры в любом регистре.
"""

import binascii
import functools
import re
from typing import Final

from pydantic_core import core_schema

from src.core.hashing.stable_hash import AsBytes, SequenceNumber, StableHasher
from src.core.scalar.errors import MalformedHexError
from src.core.scalar.fixed_width import Address

BYTES_PATTERN: Final[str] = r"^0x([0-9a-f]{2})*$"

_HEX_PREFIX_RE = re.compile(r"^0[xX]")
_HEX_DIGITS_RE = re.compile(r"[0-9a-fA-F]*")


@functools.total_ordering
class Bytes:
    """
    Байтовый массив, сериализуемый как hex-строка с префиксом 0x.

    Равенство и порядок — побайтовые.

    Examples:
        >>> str(Bytes(b"\\x1a\\x2b"))
        '0x1a2b'
        >>> Bytes.from_str("1A2B") == Bytes.from_str("0x1a2b")
        True
    """

    __slots__ = ("_data",)

    def __init__(self, data: bytes = b""):
        if isinstance(data, Bytes):
            data = data._data
        elif not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Bytes expects bytes, got {type(data).__name__}")
        object.__setattr__(self, "_data", bytes(data))

    def __setattr__(self, name, value):
        raise AttributeError("Bytes is immutable")

    def __delattr__(self, name):
        raise AttributeError("Bytes is immutable")

    def __reduce__(self):
        return (Bytes, (self._data,))

    @classmethod
    def from_address(cls, address: Address) -> "Bytes":
        return cls(bytes(address))

    @classmethod
    def from_str(cls, text: str) -> "Bytes":
        """
        Разбор hex-строки.

        Raises:
            MalformedHexError: недопустимый символ или нечётное число цифр
        """
        if not isinstance(text, str):
            raise MalformedHexError(f"hex string expected, got {type(text).__name__}")
        digits = _HEX_PREFIX_RE.sub("", text, count=1)
        if _HEX_DIGITS_RE.fullmatch(digits) is None:
            raise MalformedHexError(f"invalid character in hex string: {text!r}")
        if len(digits) % 2:
            raise MalformedHexError(f"odd number of digits in hex string: {text!r}")
        return cls(binascii.unhexlify(digits))

    def as_slice(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return self._data

    def __str__(self) -> str:
        return "0x" + self._data.hex()

    def __repr__(self) -> str:
        return f"Bytes('{self}')"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Bytes):
            return NotImplemented
        return self._data == other._data

    def __lt__(self, other) -> bool:
        if not isinstance(other, Bytes):
            return NotImplemented
        return self._data < other._data

    def __hash__(self) -> int:
        return hash(self._data)

    def stable_hash(self, sequence_number: SequenceNumber, state: StableHasher) -> None:
        AsBytes(self._data).stable_hash(sequence_number, state)

    @classmethod
    def _validate(cls, value: object) -> "Bytes":
        if isinstance(value, Bytes):
            return value
        if isinstance(value, (bytes, bytearray)):
            return cls(value)
        if isinstance(value, str):
            return cls.from_str(value)
        raise ValueError(f"cannot build Bytes from {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, _core_schema, handler):
        return {"type": "string", "pattern": BYTES_PATTERN}
