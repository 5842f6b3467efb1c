"""
Property-based tests for the Event Logger module.

Uses Hypothesis to verify dual-format output, level filtering and error
context capture.
"""

import json
from io import StringIO

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rdap_checker.enums import LogLevel
from rdap_checker.event_logger import EventLogger


@st.composite
def component_name_strategy(draw) -> str:
    """Generate valid component names."""
    return draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"),
        min_size=1,
        max_size=30,
    ))


@st.composite
def message_strategy(draw) -> str:
    """Generate single-line log messages."""
    return draw(st.text(
        alphabet=st.characters(
            whitelist_categories=('L', 'N', 'P', 'S', 'Zs'),
            blacklist_characters='\x00\n\r',
        ),
        min_size=1,
        max_size=100,
    ))


data_strategy = st.dictionaries(
    st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=12),
    st.one_of(st.integers(), st.text(max_size=20), st.booleans(), st.none()),
    max_size=5,
)


class TestDualFormatProperty:
    @given(
        level=st.sampled_from(list(LogLevel)),
        component=component_name_strategy(),
        message=message_strategy(),
        data=data_strategy,
    )
    @settings(max_examples=100)
    def test_dual_format_produces_both_outputs(self, level, component, message, data) -> None:
        """*For any* entry in 'both' mode, a JSON line and a text line SHALL be written."""
        output = StringIO()
        logger = EventLogger(output_format="both", output_stream=output, level=LogLevel.DEBUG)

        entry = logger.log(level, component, message, data)

        lines = output.getvalue().strip("\n").split("\n")
        assert len(lines) == 2

        parsed = json.loads(lines[0])
        assert parsed["level"] == level.value
        assert parsed["component"] == component
        assert parsed["message"] == message
        assert parsed["data"] == data
        assert parsed["timestamp"] == entry.timestamp

        assert lines[1].startswith(f"[{entry.timestamp}] {level.value.upper()} [{component}] ")
        assert message in lines[1]

    def test_json_only_format(self) -> None:
        output = StringIO()
        logger = EventLogger(output_format="json", output_stream=output)

        logger.info("Bootstrap", "refreshed", {"tlds": 3})

        parsed = json.loads(output.getvalue().strip())
        assert parsed["data"] == {"tlds": 3}

    def test_text_without_data_has_no_trailing_json(self) -> None:
        output = StringIO()
        logger = EventLogger(output_format="text", output_stream=output)

        entry = logger.info("CLI", "done")

        assert entry is not None
        assert output.getvalue().strip().endswith("[CLI] done")

    def test_invalid_format_rejected(self) -> None:
        with pytest.raises(ValueError):
            EventLogger(output_format="xml")


class TestLevelFilteringProperty:
    @given(minimum=st.sampled_from(list(LogLevel)), level=st.sampled_from(list(LogLevel)))
    @settings(max_examples=50)
    def test_entries_below_minimum_are_dropped(self, minimum: LogLevel, level: LogLevel) -> None:
        """*For any* minimum level, entries SHALL be recorded iff their rank is at least the minimum's."""
        output = StringIO()
        logger = EventLogger(output_format="json", output_stream=output, level=minimum)

        entry = logger.log(level, "Test", "message")

        if level.rank >= minimum.rank:
            assert entry is not None
            assert len(logger.entries) == 1
            assert output.getvalue()
        else:
            assert entry is None
            assert logger.entries == []
            assert output.getvalue() == ""

    def test_set_level(self) -> None:
        logger = EventLogger(output_stream=StringIO(), level=LogLevel.ERROR)
        assert logger.debug("Test", "hidden") is None

        logger.set_level(LogLevel.DEBUG)
        assert logger.debug("Test", "shown") is not None

    def test_from_config(self) -> None:
        logger = EventLogger.from_config("WARN", "json", StringIO())

        assert logger.level == LogLevel.WARN
        assert logger.output_format == "json"

    def test_from_config_rejects_unknown_level(self) -> None:
        with pytest.raises(ValueError):
            EventLogger.from_config("verbose", "text", StringIO())


class TestErrorContext:
    def test_log_error_captures_context(self) -> None:
        logger = EventLogger(output_format="json", output_stream=StringIO())

        entry = logger.log_error(
            "RdapResolver",
            "query failed",
            error=TimeoutError("deadline exceeded"),
            request_url="https://rdap.org/domain/example.com",
            response_status_code=504,
            additional_data={"domain": "example.com"},
        )

        assert entry.level == LogLevel.ERROR
        assert entry.data == {
            "domain": "example.com",
            "error_message": "deadline exceeded",
            "error_type": "TimeoutError",
            "request_url": "https://rdap.org/domain/example.com",
            "response_status_code": 504,
        }

    def test_entries_are_copies(self) -> None:
        logger = EventLogger(output_stream=StringIO())
        logger.warn("Test", "one")

        entries = logger.entries
        entries.clear()
        assert len(logger.entries) == 1


class TestEntryRetention:
    @given(count=st.integers(min_value=1, max_value=50))
    @settings(max_examples=20)
    def test_unretained_entries_are_written_but_not_kept(self, count: int) -> None:
        """*For any* number of entries with retention off, all SHALL be written and none kept."""
        output = StringIO()
        logger = EventLogger(output_format="json", output_stream=output, retain_entries=False)

        for i in range(count):
            assert logger.info("Test", f"entry {i}") is not None

        assert logger.entries == []
        assert len(output.getvalue().splitlines()) == count

    def test_from_config_passes_retention(self) -> None:
        logger = EventLogger.from_config("info", "text", StringIO(), retain_entries=False)
        logger.info("Test", "one")

        assert logger.entries == []
