"""
Stable Hash — детерминированная байтовая проекция значений для content hashing

Модуль задаёт контракт между значениями (BigInt, BigDecimal, Bytes, записи)
и hashing engine:
- SequenceNumber — позиция значения внутри хэшируемой записи
- StableHasher — engine, принимающий пары (позиция, payload)
- AsInt / AsBytes — базовые проекции, к которым сводятся все типы
- feed() — диспетчер проекций для native значений и записей

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Проекция зависит только от математического значения, а не от
   внутреннего представления (ведущие/хвостовые нулевые байты обрезаются)
2. Значения по умолчанию (0, b"", None, пустой список) ничего не пишут —
   это позволяет добавлять поля без изменения старых хэшей
3. Формат записи Sha256StableHasher зафиксирован pinned-векторами в тестах;
   любое его изменение ломает совместимость хэшей между версиями
"""

import hashlib
import struct
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence, Tuple

from pydantic import BaseModel

_U64_LE = struct.Struct("<Q")


# =============================================================================
# SEQUENCE NUMBER
# =============================================================================


class SequenceNumber:
    """
    Позиция значения в хэшируемой записи.

    Позиция — путь от корня: () для корня, (0,), (1,), (0, 2) для вложенных.
    next_child() выдаёт очередную дочернюю позицию и сдвигает счётчик детей,
    при этом собственный путь не меняется: значение, пишущее после выдачи
    детей, пишет в ту же позицию, что и без них.

    Экземпляр — курсор одного вызова хэширования, не разделяется между потоками.
    """

    __slots__ = ("_path", "_children")

    def __init__(self, path: Tuple[int, ...] = ()):
        self._path = path
        self._children = 0

    @property
    def path(self) -> Tuple[int, ...]:
        return self._path

    def next_child(self) -> "SequenceNumber":
        child = SequenceNumber(self._path + (self._children,))
        self._children += 1
        return child

    def __repr__(self) -> str:
        return f"SequenceNumber({self._path!r})"


# =============================================================================
# HASHER
# =============================================================================


class StableHasher(Protocol):
    """Engine, накапливающий payload'ы и выдающий 64-битный хэш."""

    def write(self, sequence_number: SequenceNumber, payload: bytes) -> None: ...

    def finish(self) -> int: ...


class Sha256StableHasher:
    """
    Reference engine на SHA-256.

    Формат одной записи (все целые — u64 little-endian):
        len(path) | path[0] | ... | path[n-1] | len(payload) | payload

    finish() — первые 8 байт digest как big-endian u64.
    """

    def __init__(self) -> None:
        self._sha = hashlib.sha256()

    def write(self, sequence_number: SequenceNumber, payload: bytes) -> None:
        path = sequence_number.path
        self._sha.update(_U64_LE.pack(len(path)))
        for index in path:
            self._sha.update(_U64_LE.pack(index))
        self._sha.update(_U64_LE.pack(len(payload)))
        self._sha.update(payload)

    def digest(self) -> bytes:
        return self._sha.digest()

    def finish(self) -> int:
        return int.from_bytes(self._sha.digest()[:8], "big")


# =============================================================================
# БАЗОВЫЕ ПРОЕКЦИИ
# =============================================================================


@dataclass(frozen=True)
class AsInt:
    """
    Целое как (флаг знака, little-endian модуль).

    Хвостовые нулевые байты модуля обрезаются, поэтому одно и то же значение
    с разной шириной кодирования даёт одинаковый payload. Ноль не пишется.
    """

    is_negative: bool
    little_endian: bytes

    def stable_hash(self, sequence_number: SequenceNumber, state: StableHasher) -> None:
        magnitude = self.little_endian.rstrip(b"\x00")
        if not magnitude:
            return
        sign = b"\x01" if self.is_negative else b"\x00"
        state.write(sequence_number, sign + magnitude)


@dataclass(frozen=True)
class AsBytes:
    """Непрозрачный байтовый payload. Пустая последовательность не пишется."""

    data: bytes

    def stable_hash(self, sequence_number: SequenceNumber, state: StableHasher) -> None:
        if not self.data:
            return
        state.write(sequence_number, bytes(self.data))


def int_to_as_int(value: int) -> AsInt:
    magnitude = abs(value)
    return AsInt(value < 0, magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "little"))


# =============================================================================
# ДИСПЕТЧЕР
# =============================================================================


def feed(value: Any, sequence_number: SequenceNumber, state: StableHasher) -> None:
    """
    Передать проекцию значения в hasher.

    Поддерживаются:
    - объекты с методом stable_hash(sequence_number, state)
    - None (ничего не пишет)
    - bool, int (AsInt), str (UTF-8 AsBytes), bytes-like (AsBytes)
    - pydantic-модели: поля в порядке объявления, каждое в next_child()
    - list/tuple: элементы в next_child(), затем длина в собственной позиции

    Raises:
        TypeError: если для типа значения нет проекции
    """
    if value is None:
        return

    method = getattr(value, "stable_hash", None)
    if callable(method):
        method(sequence_number, state)
    elif isinstance(value, bool):
        int_to_as_int(int(value)).stable_hash(sequence_number, state)
    elif isinstance(value, int):
        int_to_as_int(value).stable_hash(sequence_number, state)
    elif isinstance(value, str):
        AsBytes(value.encode("utf-8")).stable_hash(sequence_number, state)
    elif isinstance(value, (bytes, bytearray, memoryview)):
        AsBytes(bytes(value)).stable_hash(sequence_number, state)
    elif isinstance(value, BaseModel):
        for name in type(value).model_fields:
            feed(getattr(value, name), sequence_number.next_child(), state)
    elif isinstance(value, (list, tuple)):
        _feed_sequence(value, sequence_number, state)
    else:
        raise TypeError(f"No stable hash projection for {type(value).__name__}")


def _feed_sequence(items: Sequence[Any], sequence_number: SequenceNumber, state: StableHasher) -> None:
    for item in items:
        feed(item, sequence_number.next_child(), state)
    feed(len(items), sequence_number, state)


# =============================================================================
# ТОЧКИ ВХОДА
# =============================================================================


def stable_hash_with_hasher(
    value: Any,
    hasher_factory: Callable[[], StableHasher] = Sha256StableHasher,
) -> int:
    """
    64-битный stable hash значения заданным engine.

    Examples:
        >>> hex(stable_hash_with_hasher(1))
        '0xdbbfd0446d0dbfb2'
    """
    state = hasher_factory()
    feed(value, SequenceNumber(), state)
    return state.finish()


def stable_hash(value: Any) -> int:
    """64-битный stable hash reference engine'ом (Sha256StableHasher)."""
    return stable_hash_with_hasher(value)


def stable_hash_digest(value: Any) -> bytes:
    """Полный 32-байтовый SHA-256 digest для дедупликации записей."""
    state = Sha256StableHasher()
    feed(value, SequenceNumber(), state)
    return state.digest()
