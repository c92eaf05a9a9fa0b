"""Tests for Range header parsing."""

import pytest

from filestreamer.core.model import (
    ByteRange, Disposition, RangeUnitUnsupportedError, RangeUnsatisfiableError, StreamConfig,
)
from filestreamer.core.ranges import parse_range_header


class TestParseRangeHeader:
    """Valid headers for a 10 byte file."""

    @pytest.mark.parametrize("header, expected", [
        ("bytes=3-7", (ByteRange(3, 7),)),
        ("bytes=-3", (ByteRange(7, 9),)),
        ("bytes=3-", (ByteRange(3, 9),)),
        ("bytes=0-0", (ByteRange(0, 0),)),
        ("bytes=0-9", (ByteRange(0, 9),)),
        ("bytes=2-4,5-7,-2", (ByteRange(2, 4), ByteRange(5, 7), ByteRange(8, 9))),
    ])
    def test_valid_ranges(self, header, expected):
        """Test start-end, suffix and open forms."""
        assert parse_range_header(header, 10) == expected

    def test_no_header(self):
        """Test that a missing header gives an empty range set."""
        assert parse_range_header(None, 10) == ()

    def test_end_clamped_to_file(self):
        """Test that an end beyond the file is cut back to the last byte."""
        assert parse_range_header("bytes=5-500", 10) == (ByteRange(5, 9),)

    def test_suffix_longer_than_file(self):
        """Test that a suffix longer than the file starts at byte 0."""
        assert parse_range_header("bytes=-500", 10) == (ByteRange(0, 9),)

    def test_order_and_overlap_preserved(self):
        """Test that ranges are neither sorted nor merged."""
        ranges = parse_range_header("bytes=6-8,0-2,1-3,6-8", 10)
        assert ranges == (ByteRange(6, 8), ByteRange(0, 2), ByteRange(1, 3), ByteRange(6, 8))

    def test_whitespace_around_specs(self):
        """Test that whitespace after commas is tolerated."""
        assert parse_range_header("bytes=0-1, 4-5", 10) == (ByteRange(0, 1), ByteRange(4, 5))

    def test_length(self):
        """Test the inclusive length of a range."""
        assert ByteRange(3, 7).length == 5
        assert ByteRange(9, 9).length == 1


class TestInvalidRanges:
    """Headers that must end in a 416."""

    def test_invalid_unit(self):
        """Test that only the bytes unit is accepted."""
        with pytest.raises(RangeUnitUnsupportedError):
            parse_range_header("invalid=3-7", 10)

    def test_invalid_unit_checked_first(self):
        """Test that the unit is rejected before any spec is looked at."""
        with pytest.raises(RangeUnitUnsupportedError):
            parse_range_header("items=9-7", 10)

    @pytest.mark.parametrize("header", [
        "bytes=9-7",
        "bytes=2-4,7-5,-2",
        "bytes=10-",
        "bytes=-0",
    ])
    def test_start_after_end(self, header):
        """Test ranges whose start lies past their end after clamping."""
        with pytest.raises(RangeUnsatisfiableError):
            parse_range_header(header, 10)

    @pytest.mark.parametrize("header", [
        "bytes",
        "bytes=",
        "bytes=-",
        "bytes=abc",
        "bytes=1-2-3",
        "bytes=a-5",
        "bytes=0-1,",
    ])
    def test_malformed(self, header):
        """Test that malformed specs are unsatisfiable."""
        with pytest.raises(RangeUnsatisfiableError):
            parse_range_header(header, 10)

    def test_empty_file(self):
        """Test that no range fits an empty file."""
        for header in ("bytes=0-", "bytes=-1", "bytes=0-0"):
            with pytest.raises(RangeUnsatisfiableError):
                parse_range_header(header, 0)


class TestStreamConfig:
    def test_defaults(self):
        """Test the default chunk size, delay and disposition."""
        config = StreamConfig()
        assert config.chunk_size == 1024
        assert config.delay == 0
        assert config.disposition is Disposition.ATTACHMENT

    @pytest.mark.parametrize("options", [{"chunk_size": 0}, {"delay": -1}])
    def test_rejects_bad_values(self, options):
        with pytest.raises(ValueError):
            StreamConfig(**options)
