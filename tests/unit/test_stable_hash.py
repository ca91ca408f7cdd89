"""
Тесты для Stable Hash

Проверяет:
1. Pinned-векторы reference engine (Sha256StableHasher)
2. Совпадение хэшей BigInt и native int
3. Совместимость BigDecimal с беззнаковыми целыми
4. Порядок и позиции записей (SequenceNumber)
5. Независимость от ширины кодирования (AsInt)
6. Хэширование записей (pydantic-модели, списки)
"""

import hashlib
from typing import List, Tuple

import pytest
from pydantic import BaseModel

from src.core.hashing import (
    AsBytes,
    AsInt,
    SequenceNumber,
    Sha256StableHasher,
    feed,
    stable_hash,
    stable_hash_digest,
    stable_hash_with_hasher,
)
from src.core.scalar import BigDecimal, BigInt, Bytes


class RecordingHasher:
    """Hasher, запоминающий пары (путь, payload)."""

    def __init__(self) -> None:
        self.writes: List[Tuple[Tuple[int, ...], bytes]] = []

    def write(self, sequence_number: SequenceNumber, payload: bytes) -> None:
        self.writes.append((sequence_number.path, payload))

    def finish(self) -> int:
        return len(self.writes)


def recorded(value) -> List[Tuple[Tuple[int, ...], bytes]]:
    state = RecordingHasher()
    feed(value, SequenceNumber(), state)
    return state.writes


def same_stable_hash(left, right) -> None:
    assert stable_hash(left) == stable_hash(right)


# =============================================================================
# PINNED-ВЕКТОРЫ
# =============================================================================


class TestPinnedVectors:
    """Формат Sha256StableHasher зафиксирован: изменение ломает старые хэши"""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("0.1", 0xE95571EC6129B731),
            ("-0.1", 0x4A2600DAE201DD3F),
        ],
    )
    def test_big_decimal_vectors(self, text: str, expected: int) -> None:
        assert stable_hash(BigDecimal.from_str(text)) == expected

    def test_int_vector(self) -> None:
        assert stable_hash(1) == 0xDBBFD0446D0DBFB2
        assert stable_hash(BigInt(1)) == 0xDBBFD0446D0DBFB2

    def test_empty_feed_vector(self) -> None:
        """Ноль ничего не пишет: хэш пустого SHA-256"""
        assert stable_hash(0) == 0xE3B0C44298FC1C14
        assert stable_hash(BigDecimal.zero()) == 0xE3B0C44298FC1C14

    def test_bytes_vector(self) -> None:
        assert stable_hash(Bytes(b"\x1a\x2b\x3c")) == 0xD9022CD5C8D27B68

    def test_explicit_engine(self) -> None:
        value = BigDecimal.from_str("0.1")
        assert stable_hash_with_hasher(value, Sha256StableHasher) == stable_hash(value)

    def test_digest(self) -> None:
        assert stable_hash_digest(0) == hashlib.sha256(b"").digest()
        assert len(stable_hash_digest(BigInt(2**200))) == 32


# =============================================================================
# СОВМЕСТИМОСТЬ ТИПОВ
# =============================================================================


class TestHashAgreement:
    """Хэш зависит от значения, а не от типа-обёртки"""

    @pytest.mark.parametrize("value", [0, 1, 1 << 20])
    def test_big_int_same_as_int(self, value: int) -> None:
        same_stable_hash(value, BigInt(value))

    def test_negative_from_signed_bytes(self) -> None:
        same_stable_hash(-1, BigInt.from_signed_bytes_le((-1).to_bytes(4, "little", signed=True)))

    @pytest.mark.parametrize("value", [0, 4, 1 << 21])
    def test_big_decimal_same_as_uint(self, value: int) -> None:
        same_stable_hash(value, BigDecimal.from_int(value))

    def test_trailing_zero_integer_hashes_normalized_form(self) -> None:
        """10 нормализуется в (1, 1): пишется scale -1, совместимости с int нет"""
        assert recorded(BigDecimal.from_int(10)) == [((0,), b"\x01\x01"), ((), b"\x00\x01")]
        assert stable_hash(BigDecimal.from_int(10)) != stable_hash(10)

    def test_representation_independent(self) -> None:
        """Одно значение из разных конструкторов — один хэш"""
        same_stable_hash(BigDecimal.new(BigInt(1_500), -3), BigDecimal.from_str("1.5"))
        same_stable_hash(BigInt.from_unsigned_bytes_le(b"\x05\x00\x00\x00"), BigInt(5))

    def test_sign_distinguished(self) -> None:
        assert stable_hash(BigInt(5)) != stable_hash(BigInt(-5))
        assert stable_hash(BigDecimal("0.1")) != stable_hash(BigDecimal("-0.1"))

    def test_bool_like_int(self) -> None:
        same_stable_hash(True, 1)
        same_stable_hash(False, 0)


# =============================================================================
# ФОРМА ЗАПИСЕЙ
# =============================================================================


class TestFeedShape:
    """Порядок и позиции записей"""

    def test_big_int_payload(self) -> None:
        """(флаг знака, модуль little-endian)"""
        assert recorded(BigInt(256)) == [((), b"\x00\x00\x01")]
        assert recorded(BigInt(-1)) == [((), b"\x01\x01")]
        assert recorded(BigInt(0)) == []

    def test_big_decimal_scale_first(self) -> None:
        """Scale (-exponent) в дочерней позиции, затем mantissa в собственной"""
        assert recorded(BigDecimal.from_str("0.1")) == [
            ((0,), b"\x00\x01"),
            ((), b"\x00\x01"),
        ]
        assert recorded(BigDecimal.from_str("-0.1")) == [
            ((0,), b"\x00\x01"),
            ((), b"\x01\x01"),
        ]
        assert recorded(BigDecimal.from_str("1e3"))[0] == ((0,), b"\x01\x03")

    def test_bytes_payload(self) -> None:
        assert recorded(Bytes(b"\x00\x01")) == [((), b"\x00\x01")]
        assert recorded(Bytes(b"")) == []

    def test_as_int_trims_padding(self) -> None:
        assert recorded(AsInt(False, b"\x01\x00\x00")) == recorded(AsInt(False, b"\x01"))
        assert recorded(AsInt(True, b"\x00\x00")) == []

    def test_as_bytes_keeps_zero_bytes(self) -> None:
        """Нулевые байты внутри payload значимы"""
        assert recorded(AsBytes(b"\x00")) == [((), b"\x00")]

    def test_str_utf8(self) -> None:
        assert recorded("é") == [((), "é".encode("utf-8"))]

    def test_none_writes_nothing(self) -> None:
        assert recorded(None) == []

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError, match="No stable hash projection"):
            stable_hash(1.5)


class TestSequenceNumber:
    """Тесты для SequenceNumber"""

    def test_children_paths(self) -> None:
        root = SequenceNumber()
        first = root.next_child()
        second = root.next_child()
        nested = second.next_child()
        assert root.path == ()
        assert first.path == (0,)
        assert second.path == (1,)
        assert nested.path == (1, 0)

    def test_child_does_not_move_parent(self) -> None:
        root = SequenceNumber()
        root.next_child()
        assert root.path == ()


# =============================================================================
# ЗАПИСИ
# =============================================================================


class Transfer(BaseModel):
    block: BigInt
    amount: BigDecimal
    sender: Bytes
    memo: str = ""


class TestRecordHashing:
    """Content hashing структурированных записей"""

    def _transfer(self, amount: str = "1.5", memo: str = "") -> Transfer:
        return Transfer(block=BigInt(12345), amount=amount, sender="0x" + "11" * 20, memo=memo)

    def test_fields_in_declaration_order(self) -> None:
        writes = recorded(self._transfer())
        assert [path for path, _ in writes] == [(0,), (1, 0), (1,), (2,)]

    def test_equal_values_equal_hash(self) -> None:
        same_stable_hash(self._transfer("1.5"), self._transfer("1.50"))

    def test_field_change_changes_hash(self) -> None:
        assert stable_hash(self._transfer("1.5")) != stable_hash(self._transfer("1.6"))

    def test_default_field_invisible(self) -> None:
        """Пустое поле не пишется: добавление поля с default не меняет хэш"""
        assert len(recorded(self._transfer(memo=""))) == 4
        assert len(recorded(self._transfer(memo="x"))) == 5

    def test_sequences(self) -> None:
        assert recorded([]) == []
        assert recorded([BigInt(1)]) == [((0,), b"\x00\x01"), ((), b"\x00\x01")]
        assert stable_hash([1]) != stable_hash([1, 0])
        same_stable_hash((1, 2), [BigInt(1), BigDecimal(2)])
