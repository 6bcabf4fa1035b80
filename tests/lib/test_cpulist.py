"""Tests for CPU range list parsing and mask computation."""

import pytest

from ticktrace.core.errors import InvalidRange, RangeOverflow
from ticktrace.lib.cpulist import (
    CpuRange,
    compute_mask,
    format_cpu_list,
    format_cpumask,
    mask_to_cpus,
    parse_ranges,
)


class TestParseRanges:
    """Tests for parse_ranges."""

    def test_single_value_is_min_and_max(self):
        """A bare value becomes (v, v)."""
        assert parse_ranges("5") == [CpuRange(5, 5)]

    def test_range(self):
        """min-max becomes one range."""
        assert parse_ranges("2-7") == [CpuRange(2, 7)]

    def test_multiple_tokens_keep_order(self):
        """Each token is parsed and appended in input order."""
        assert parse_ranges("8-9,0,3-4") == [CpuRange(8, 9), CpuRange(0, 0), CpuRange(3, 4)]

    def test_degenerate_range(self):
        """min == max is allowed."""
        assert parse_ranges("3-3") == [CpuRange(3, 3)]

    @pytest.mark.parametrize("text", [
        "",
        "1,",
        ",1",
        "1,,2",
        "a",
        "1a",
        " 1",
        "1 ",
        "1-2-3",
        "-1",
        "1-",
        "1.5",
        "+1",
        "0x3",
    ])
    def test_rejects_malformed(self, text):
        """Non-digits, empty tokens and extra fields are rejected."""
        with pytest.raises(InvalidRange):
            parse_ranges(text)

    def test_rejects_reversed_range(self):
        """min greater than max is rejected."""
        with pytest.raises(InvalidRange, match="min greater than max"):
            parse_ranges("5-2")

    def test_rejects_non_ascii_digits(self):
        """Only ASCII digits count as integers."""
        with pytest.raises(InvalidRange):
            parse_ranges("٣")


class TestComputeMask:
    """Tests for compute_mask."""

    @pytest.mark.parametrize("cpu", [0, 1, 7, 31, 32, 63, 64, 255, 1000])
    def test_single_cpu_sets_one_bit(self, cpu):
        """A single value v gives 1 << v."""
        assert compute_mask(parse_ranges(str(cpu))) == 1 << cpu

    @pytest.mark.parametrize("low,high", [(0, 0), (0, 2), (3, 5), (30, 33), (60, 70)])
    def test_range_sets_contiguous_bits(self, low, high):
        """A range sets exactly max-min+1 bits starting at min."""
        mask = compute_mask(parse_ranges(f"{low}-{high}"))

        assert bin(mask).count("1") == high - low + 1
        assert mask >> low == (1 << (high - low + 1)) - 1
        assert mask & ((1 << low) - 1) == 0

    def test_overlapping_ranges_or_together(self):
        """Overlapping ranges never clear bits."""
        assert compute_mask([CpuRange(0, 3), CpuRange(2, 5)]) == 0b111111

    def test_order_does_not_matter(self):
        """Bit-OR is commutative."""
        assert compute_mask(parse_ranges("0,4-5")) == compute_mask(parse_ranges("4-5,0"))

    def test_empty_is_zero(self):
        """No ranges, no bits."""
        assert compute_mask([]) == 0

    def test_highest_supported_cpu(self):
        """max_cpus - 1 is the last valid index."""
        assert compute_mask([CpuRange(63, 63)], max_cpus=64) == 1 << 63

    def test_overflow_raises(self):
        """Indexes at or beyond max_cpus fail instead of wrapping."""
        with pytest.raises(RangeOverflow, match="63"):
            compute_mask([CpuRange(0, 64)], max_cpus=64)

    def test_default_bound(self):
        """The default bound is 8192 CPUs."""
        compute_mask([CpuRange(8191, 8191)])
        with pytest.raises(RangeOverflow):
            compute_mask([CpuRange(8192, 8192)])


class TestFormatCpumask:
    """Tests for format_cpumask."""

    @pytest.mark.parametrize("mask,expected", [
        (0, "0"),
        (1, "1"),
        (0b111, "7"),
        (0xFFFFFFFF, "ffffffff"),
        (1 << 32, "1,00000000"),
        ((1 << 40) | 0xF0, "100,000000f0"),
        (1 << 64, "1,00000000,00000000"),
    ])
    def test_kernel_format(self, mask, expected):
        """Hex in comma separated 32-bit words."""
        assert format_cpumask(mask) == expected

    def test_negative_rejected(self):
        """Negative masks are a programming error."""
        with pytest.raises(ValueError):
            format_cpumask(-1)


class TestCpuLists:
    """Tests for mask_to_cpus and format_cpu_list."""

    def test_mask_to_cpus(self):
        """Lists set bits in ascending order."""
        assert mask_to_cpus(0b101101) == [0, 2, 3, 5]

    def test_format_cpu_list(self):
        """Collapses runs into ranges."""
        assert format_cpu_list([0, 1, 2, 5, 7, 8]) == "0-2,5,7-8"

    def test_format_empty(self):
        """No CPUs gives an empty string."""
        assert format_cpu_list([]) == ""
