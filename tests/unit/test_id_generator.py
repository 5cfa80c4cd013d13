"""Tests for ot_common.id_generator and ot_common.datetime_utils."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from src.ot_common.datetime_utils import MonotonicClock, utc_now
from src.ot_common.id_generator import SnowflakeIdGenerator, generate_id


class TestSnowflakeIdGenerator:
    def test_returns_str(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        assert isinstance(gen.next_id(), str)

    def test_prefix(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        assert gen.next_id("order").startswith("order_")
        assert gen("trade").startswith("trade_")

    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        prev = gen.next_int()
        for _ in range(100):
            current = gen.next_int()
            assert current > prev
            prev = current

    def test_clock_step_back_keeps_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        with patch.object(gen, "_current_ms", return_value=1_800_000_000_000):
            first = gen.next_int()
        with patch.object(gen, "_current_ms", return_value=1_799_999_999_000):
            second = gen.next_int()
        assert second > first

    def test_invalid_machine_id(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)

    def test_module_default(self) -> None:
        assert generate_id("market").startswith("market_")


class TestUtcNow:
    def test_returns_aware_datetime(self) -> None:
        now = utc_now()
        assert isinstance(now, datetime)
        assert now.tzinfo is not None

    def test_is_utc(self) -> None:
        assert utc_now().tzinfo == UTC


class TestMonotonicClock:
    def test_never_goes_backwards(self) -> None:
        t0 = datetime(2026, 1, 1, tzinfo=UTC)
        readings = iter([t0, t0 - timedelta(seconds=5), t0 + timedelta(seconds=1)])
        clock = MonotonicClock(source=lambda: next(readings))
        assert clock() == t0
        assert clock() == t0  # step back clamped
        assert clock() == t0 + timedelta(seconds=1)
