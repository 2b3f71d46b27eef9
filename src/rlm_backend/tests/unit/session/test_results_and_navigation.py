"""
Tests for result accumulation, aggregation and the range/position helpers.
"""

import pytest

from rlm_backend.core.session import (
    DEFAULT_SEPARATOR,
    SIGNAL_FINAL,
    SIGNAL_PARTIAL,
    ResultBuffer,
    Session,
    aggregate_results,
    parse_slice_range,
    resolve_jump_target,
)
from rlm_backend.exceptions import InvalidArgumentError


class TestResultBuffer:
    """Test the key/value accumulator."""

    def test_last_write_wins(self):
        """Test that storing a key twice keeps the later value."""
        buffer = ResultBuffer()
        buffer.store("a", "first")
        buffer.store("a", "second")

        assert buffer.get("a") == "second"
        assert buffer.count == 1

    def test_combined_is_sorted_by_key(self):
        """Test the "[key]" block format and ordering."""
        buffer = ResultBuffer()
        buffer.store("b", "second")
        buffer.store("a", "first")

        assert buffer.get_combined(" | ") == "[a]\nfirst | [b]\nsecond"
        assert buffer.get_combined(" | ", sort_keys=False) == "[b]\nsecond | [a]\nfirst"

    def test_writes_through_to_backing_dict(self):
        """Test that a buffer over a session's results updates the session."""
        session = Session()

        session.result_buffer().store("k", "v")

        assert session.results == {"k": "v"}

    def test_remove_and_clear(self):
        """Test removal of single keys and of everything."""
        buffer = ResultBuffer({"a": "1", "b": "2"})

        assert buffer.remove("a")
        assert not buffer.remove("missing")
        buffer.clear()
        assert not buffer.has_results

    def test_empty_combined(self):
        """Test that no results combine to an empty string."""
        assert ResultBuffer().get_combined() == ""


class TestAggregateResults:
    """Test aggregation into a final or partial output."""

    def test_partial_by_default(self):
        """Test the default separator and signal."""
        session = Session()
        session.store_result("chunk_1", "two")
        session.store_result("chunk_0", "one")

        output = aggregate_results(session)

        assert output.result_count == 2
        assert output.signal == SIGNAL_PARTIAL
        assert output.combined == "[chunk_0]\none" + DEFAULT_SEPARATOR + "[chunk_1]\ntwo"

    def test_final_signal_and_dict(self):
        """Test the FINAL tag and the JSON view."""
        session = Session()
        session.store_result("k", "v")

        output = aggregate_results(session, separator="\n", final=True)

        assert output.is_final
        assert output.to_dict() == {
            "resultCount": 1,
            "combined": "[k]\nv",
            "signal": SIGNAL_FINAL,
            "results": {"k": "v"},
        }

    def test_aggregation_is_repeatable(self):
        """Test that aggregating does not change the session."""
        session = Session()
        session.store_result("k", "v")

        first = aggregate_results(session)
        second = aggregate_results(session)

        assert first == second
        assert session.results == {"k": "v"}


class TestParseSliceRange:
    """Test "start:end" character ranges."""

    @pytest.mark.parametrize("range_spec,expected", [
        ("0:5", (0, 5)),
        (":5", (0, 5)),
        ("5:", (5, 20)),
        ("-5:", (15, 20)),
        (":-5", (0, 15)),
        ("10:100", (10, 20)),
        ("-100:3", (0, 3)),
    ])
    def test_valid_ranges(self, range_spec, expected):
        """Test open ends, negative offsets and clamping."""
        assert parse_slice_range(range_spec, 20) == expected

    @pytest.mark.parametrize("range_spec", ["5", "a:b", "1:2:3", "15:5"])
    def test_invalid_ranges(self, range_spec):
        """Test malformed and inverted ranges."""
        with pytest.raises(InvalidArgumentError):
            parse_slice_range(range_spec, 20)


class TestResolveJumpTarget:
    """Test chunk numbers and percentages."""

    @pytest.mark.parametrize("target,expected", [
        ("1", 0),
        ("10", 9),
        ("50", 9),
        ("0", 0),
        ("50%", 4),
        ("100%", 9),
        ("150%", 9),
        (" 3 ", 2),
    ])
    def test_targets(self, target, expected):
        """Test conversion to a clamped 0-based index over ten chunks."""
        assert resolve_jump_target(target, 10) == expected

    @pytest.mark.parametrize("target", ["", "x", "abc%", "1.5"])
    def test_invalid_targets(self, target):
        """Test that non-numeric targets are rejected."""
        with pytest.raises(InvalidArgumentError):
            resolve_jump_target(target, 10)
