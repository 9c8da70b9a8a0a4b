"""Tests for log line cleanup and wrapping."""

import pytest

from jobtail.helpers.text import clean_log_line, split_output, wrap_line


def test_carriage_return_keeps_last_overwrite() -> None:
    """Test that progress-bar style overwrites collapse to the final text."""
    # Act
    cleaned = clean_log_line("progress 50%\rprogress 100%")

    # Assert
    assert cleaned == "progress 100%"


def test_trailing_carriage_return_is_dropped() -> None:
    """Test that a CRLF line ending leaves the text intact."""
    # Act
    cleaned = clean_log_line("done\r")

    # Assert
    assert cleaned == "done"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("\x1b[2Kloading", "loading"),
        ("\x1b[1A\x1b[10Cstep", "step"),
        ("\x1b[31mred\x1b[0m text", "red text"),
        ("\x1b[2;5fhere", "here"),
    ],
)
def test_escape_sequences_are_removed(raw: str, expected: str) -> None:
    """Test that cursor movement and color codes are stripped."""
    # Act
    cleaned = clean_log_line(raw)

    # Assert
    assert cleaned == expected


def test_wrap_breaks_at_word_boundaries() -> None:
    """Test that wrapping keeps words whole where possible."""
    # Act
    wrapped = wrap_line("alpha beta gamma delta", 11)

    # Assert
    assert wrapped == ["alpha beta", "gamma delta"]


def test_wrap_breaks_long_words() -> None:
    """Test that no visual line exceeds the width."""
    # Act
    wrapped = wrap_line("x" * 25, 10)

    # Assert
    assert wrapped == ["x" * 10, "x" * 10, "x" * 5]


def test_wrap_keeps_leading_indentation() -> None:
    """Test that an indented line stays indented."""
    # Act
    wrapped = wrap_line("    at frame()", 40)

    # Assert
    assert wrapped == ["    at frame()"]


@pytest.mark.parametrize("line", ["", "   "])
def test_wrap_of_blank_line_is_one_empty_line(line: str) -> None:
    """Test that blank lines still occupy one visual line."""
    # Act
    wrapped = wrap_line(line, 20)

    # Assert
    assert wrapped == [""]


def test_wrap_without_width_returns_line() -> None:
    """Test that a zero width leaves the line alone."""
    # Act
    wrapped = wrap_line("unwrapped text", 0)

    # Assert
    assert wrapped == ["unwrapped text"]


def test_wrap_round_trip_preserves_words() -> None:
    """Test that joining the wrapped lines gives back every word."""
    # Arrange
    line = "the quick brown fox jumps over the lazy dog " * 5

    # Act
    wrapped = wrap_line(line, 17)

    # Assert
    assert all(len(visual) <= 17 for visual in wrapped)
    assert " ".join(wrapped).split() == line.split()


def test_split_output_drops_final_newline() -> None:
    """Test splitting of command output into lines."""
    # Act
    lines = split_output("one\r\ntwo\nthree\n")

    # Assert
    assert lines == ["one", "two", "three"]
    assert split_output("\n") == []
