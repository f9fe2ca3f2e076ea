"""Tests for checked unsigned arithmetic and zero-default maps."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fragments.engine.arithmetic import CheckedUint
from fragments.engine.errors import ArithmeticOverflowError, LedgerError
from fragments.engine.store import ZeroDefaultMap

MAX_UINT256 = 2 ** 256 - 1


class TestCheckedUint:
    """Width enforcement for ledger arithmetic."""

    def test_max_value(self):
        """Max value is 2**bits - 1."""
        assert CheckedUint(256).max_value == MAX_UINT256
        assert CheckedUint(8).max_value == 255

    def test_add_at_boundary(self):
        """Addition up to the max succeeds; one past fails."""
        math = CheckedUint(8)
        assert math.add(200, 55) == 255
        with pytest.raises(ArithmeticOverflowError):
            math.add(200, 56)

    def test_mul_overflow(self):
        """Multiplication fails instead of wrapping."""
        math = CheckedUint(256)
        assert math.mul(2 ** 128, 2 ** 127) == 2 ** 255
        with pytest.raises(ArithmeticOverflowError):
            math.mul(2 ** 128, 2 ** 128)

    def test_div_truncates_and_rejects_zero(self):
        """Division truncates; dividing by zero fails."""
        math = CheckedUint(256)
        assert math.div(7, 2) == 3
        with pytest.raises(ArithmeticOverflowError):
            math.div(7, 0)

    def test_require_rejects_out_of_range(self):
        """Negative, too-wide and non-integer inputs are rejected."""
        math = CheckedUint(256)
        assert math.require(0) == 0
        assert math.require(MAX_UINT256) == MAX_UINT256
        for bad in (-1, MAX_UINT256 + 1, 1.5, True, "10"):
            with pytest.raises(ArithmeticOverflowError):
                math.require(bad)

    def test_largest_multiple(self):
        """Largest multiple fits the width and divides evenly."""
        math = CheckedUint(256)
        supply = 10_000_000 * 10 ** 9
        pool = math.largest_multiple(supply)
        assert pool % supply == 0
        assert pool <= MAX_UINT256
        assert MAX_UINT256 - pool < supply

    def test_overflow_is_ledger_error(self):
        """Overflow belongs to the ledger error taxonomy."""
        with pytest.raises(LedgerError) as excinfo:
            CheckedUint(8).mul(16, 16)
        assert excinfo.value.code == "arithmetic_overflow"
        assert str(excinfo.value).startswith("arithmetic_overflow:")


class TestZeroDefaultMap:
    """Absent keys read as zero; zero writes delete."""

    def test_missing_key_reads_zero(self):
        """Reading an unknown key yields 0 without inserting it."""
        m = ZeroDefaultMap()
        assert m["nobody"] == 0
        assert "nobody" not in m
        assert len(m) == 0

    def test_zero_write_deletes(self):
        """Setting a key to zero removes it."""
        m = ZeroDefaultMap({"a": 5})
        m["a"] = 0
        assert "a" not in m
        assert list(m) == []

    def test_negative_rejected(self):
        """Negative balances cannot be stored."""
        m = ZeroDefaultMap()
        with pytest.raises(ValueError):
            m["a"] = -1

    def test_total(self):
        """total() sums stored values; zero entries are not stored."""
        m = ZeroDefaultMap({"a": 3, "b": 4, "c": 0})
        assert m.total() == 7
        assert len(m) == 2

    def test_tuple_keys(self):
        """Allowance-style (owner, spender) keys work."""
        m = ZeroDefaultMap()
        m[("owner", "spender")] = 1000
        assert m[("owner", "spender")] == 1000
        assert m[("spender", "owner")] == 0
