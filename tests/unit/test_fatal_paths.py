"""
Тесты для fatal-ошибок (ScalarPanic)

Проверяет:
1. panic() пишет CRITICAL в лог до raise
2. Непойманный ScalarPanic завершает процесс с ненулевым кодом,
   даже если вызов обёрнут в `except Exception`
3. Recoverable ошибки процесс не завершают
"""

import logging
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from src.core.scalar import BigDecimal, BigInt, ScalarPanic, panic

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def run_isolated(body: str) -> subprocess.CompletedProcess:
    """Выполнить код в отдельном интерпретаторе из корня проекта."""
    code = textwrap.dedent(
        """
        from src.core.scalar import BigDecimal, BigInt

        try:
        {body}
        except Exception:
            print("recovered")
        """
    ).format(body=textwrap.indent(textwrap.dedent(body), "    "))
    return subprocess.run(
        [sys.executable, "-c", code],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=60,
    )


# =============================================================================
# ЛОГИРОВАНИЕ
# =============================================================================


class TestPanicLogging:
    """panic() фиксирует нарушение в логе"""

    def test_critical_before_raise(self, caplog) -> None:
        with caplog.at_level(logging.CRITICAL, logger="src.core.scalar.errors"):
            with pytest.raises(ScalarPanic, match="boom"):
                panic("boom")
        assert caplog.records[-1].levelno == logging.CRITICAL
        assert "boom" in caplog.records[-1].getMessage()

    def test_division_logged(self, caplog) -> None:
        with caplog.at_level(logging.CRITICAL):
            with pytest.raises(ScalarPanic):
                BigInt(1) / BigInt(0)
        assert any("zero-valued `BigInt`" in r.getMessage() for r in caplog.records)

    def test_panic_not_an_exception(self) -> None:
        assert not issubclass(ScalarPanic, Exception)
        assert issubclass(ScalarPanic, BaseException)


# =============================================================================
# ЗАВЕРШЕНИЕ ПРОЦЕССА
# =============================================================================


class TestProcessTermination:
    """Fatal пути завершают процесс"""

    @pytest.mark.parametrize(
        "body, message",
        [
            ("BigInt(1) / BigInt(0)", "Cannot divide by zero-valued `BigInt`!"),
            ("BigInt(1) % 0", "Cannot take remainder of zero-valued `BigInt`!"),
            ("BigDecimal('1') / BigDecimal('0')", "Cannot divide by zero-valued `BigDecimal`!"),
            ("BigInt(2**255).to_signed_u256()", "does not fit into signed U256"),
            ("BigInt(-1).to_unsigned_u256()", "negative value encountered for U256"),
            ("BigInt(1).to_big_decimal(2**63)", "big decimal exponent does not fit in i64"),
        ],
    )
    def test_fatal_path_terminates(self, body: str, message: str) -> None:
        result = run_isolated(body)
        assert result.returncode != 0
        assert "recovered" not in result.stdout
        assert "ScalarPanic" in result.stderr
        assert message in result.stderr

    def test_recoverable_path_survives(self) -> None:
        result = run_isolated("BigInt(-1).to_u64()")
        assert result.returncode == 0
        assert "recovered" in result.stdout

    def test_in_process_equivalents(self) -> None:
        """Тот же код в процессе тестов поднимает ScalarPanic"""
        with pytest.raises(ScalarPanic):
            BigDecimal("1") / BigDecimal.zero()
        with pytest.raises(ScalarPanic):
            BigInt(-(2**255) - 1).to_signed_u256()
