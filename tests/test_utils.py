"""Tests for unit conversion and keyed locks."""

import asyncio
from decimal import Decimal

import pytest

from griffin.utils.locks import KeyedLock, LockTimeoutError
from griffin.utils.units import from_base_units, parse_int, quantize_to, to_base_units, to_decimal


class TestUnits:
    def test_to_decimal(self):
        assert to_decimal("100.5") == Decimal("100.5")
        assert to_decimal(7) == Decimal("7")
        assert to_decimal(" 1e3 ") == Decimal("1000")

    @pytest.mark.parametrize("value", ["abc", "", "NaN", "inf", "-Infinity", True])
    def test_to_decimal_rejects(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)

    def test_base_units_round_down(self):
        assert to_base_units("1.5", 6) == 1_500_000
        assert to_base_units("0.0000001", 6) == 0
        assert to_base_units(Decimal("1.23456789"), 6) == 1_234_567

    def test_negative_base_units(self):
        with pytest.raises(ValueError):
            to_base_units("-1", 18)

    def test_from_base_units(self):
        assert from_base_units(2_500_000, 6) == Decimal("2.5")
        assert from_base_units(10**18, 18) == Decimal("1")

    def test_parse_int(self):
        assert parse_int("0x1a") == 26
        assert parse_int("26") == 26
        assert parse_int(26) == 26

    def test_quantize_large_values(self):
        assert quantize_to(Decimal("1e23"), Decimal("0.00000001")) == Decimal("1e23")
        assert quantize_to(Decimal("2.123456789"), Decimal("0.00000001")) == Decimal("2.12345679")


class TestKeyedLock:
    """Tests for KeyedLock."""

    @pytest.mark.asyncio
    async def test_same_key_is_serialised(self):
        locks = KeyedLock(timeout=1.0)
        events = []

        async def worker(name):
            async with locks.hold("intent-1", name):
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert events in (
            ["a-start", "a-end", "b-start", "b-end"],
            ["b-start", "b-end", "a-start", "a-end"],
        )

    @pytest.mark.asyncio
    async def test_different_keys_do_not_block(self):
        locks = KeyedLock(timeout=0.5)

        async with locks.hold("intent-1"):
            async with locks.hold("intent-2"):
                pass

    @pytest.mark.asyncio
    async def test_timeout(self):
        locks = KeyedLock(timeout=0.05)

        async with locks.hold("intent-1"):
            with pytest.raises(LockTimeoutError):
                async with locks.hold("intent-1"):
                    pass

    @pytest.mark.asyncio
    async def test_released_after_error(self):
        locks = KeyedLock(timeout=0.05)

        with pytest.raises(RuntimeError):
            async with locks.hold("intent-1"):
                raise RuntimeError("boom")

        assert len(locks) == 0
        assert not locks.get_lock("intent-1").locked()

    @pytest.mark.asyncio
    async def test_idle_keys_are_dropped(self):
        locks = KeyedLock(timeout=0.5)

        for i in range(100):
            async with locks.hold(f"intent-{i}"):
                assert len(locks) == 1

        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_waiter_keeps_lock_alive(self):
        locks = KeyedLock(timeout=1.0)
        events = []

        async def holder():
            async with locks.hold("intent-1", "holder"):
                events.append("holder")
                await asyncio.sleep(0.02)

        async def waiter():
            await asyncio.sleep(0.005)
            async with locks.hold("intent-1", "waiter"):
                events.append("waiter")
                assert len(locks) == 1

        await asyncio.gather(holder(), waiter())

        assert events == ["holder", "waiter"]
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_timed_out_waiter_is_dropped(self):
        locks = KeyedLock(timeout=0.05)

        async with locks.hold("intent-1"):
            with pytest.raises(LockTimeoutError):
                async with locks.hold("intent-1"):
                    pass
            assert len(locks) == 1

        assert len(locks) == 0
