#!/usr/bin/env python3
"""Tests for lydep/color_utils.py"""

import io

import pytest

from lydep.color_utils import (
    Colors,
    colored,
    format_path,
    print_error,
    print_info,
    print_success,
    print_warning,
    set_color_enabled,
    should_use_color,
)


class FakeTerminal(io.StringIO):
    def isatty(self) -> bool:
        return True


class TestColored:
    """Tests for colored function."""

    def test_plain_when_disabled(self) -> None:
        assert colored("test", Colors.RED) == "test"

    def test_codes_when_enabled(self) -> None:
        set_color_enabled(True)
        result = colored("test", Colors.GREEN, Colors.BRIGHT)
        assert result == f"{Colors.BRIGHT}{Colors.GREEN}test{Colors.RESET}"

    def test_no_color_given(self) -> None:
        set_color_enabled(True)
        assert colored("test") == "test"

    def test_format_path(self) -> None:
        assert format_path("./Makefile") == "./Makefile"

    def test_palette(self) -> None:
        """Only the colors the message helpers print are defined."""
        assert sorted(name for name in vars(Colors) if name.isupper()) == ["BRIGHT", "CYAN", "DIM", "GREEN", "RED", "RESET", "WHITE", "YELLOW"]


class TestPrintFunctions:
    """Tests for print_* convenience functions."""

    def test_print_success(self) -> None:
        output = io.StringIO()
        print_success("Wrote Makefile", file=output)
        assert output.getvalue() == "Wrote Makefile\n"

    def test_print_error_prefix(self) -> None:
        output = io.StringIO()
        print_error("Cannot read ./a.ily", file=output)
        assert output.getvalue() == "Error: Cannot read ./a.ily\n"

    def test_print_error_without_prefix(self) -> None:
        output = io.StringIO()
        print_error("networkx not installed", file=output, prefix=False)
        assert output.getvalue() == "networkx not installed\n"

    def test_print_warning(self) -> None:
        output = io.StringIO()
        print_warning("No renderable scores found", file=output)
        assert output.getvalue() == "Warning: No renderable scores found\n"

    def test_print_info(self) -> None:
        output = io.StringIO()
        print_info("  4 entry points", file=output)
        assert output.getvalue() == "  4 entry points\n"

    def test_default_stream_is_stderr(self, capsys: pytest.CaptureFixture) -> None:
        print_success("done")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "done\n"


class TestShouldUseColor:
    """Tests for should_use_color function."""

    def test_terminal(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        assert should_use_color(FakeTerminal())

    def test_not_a_terminal(self) -> None:
        assert not should_use_color(io.StringIO())

    def test_no_color_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        assert not should_use_color(FakeTerminal(), no_color=True)

    def test_no_color_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        assert not should_use_color(FakeTerminal())
