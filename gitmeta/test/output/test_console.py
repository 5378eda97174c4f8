"""Tests for gitmeta.output.console module."""

from __future__ import annotations

import pytest

from gitmeta.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.ERROR) == "error"
        assert str(Style.DEBUG) == "debug"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DEBUG", "DIM"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs == [OutputRecord("hello", Style.DEFAULT)]

    def test_levels(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("bad")
        console.warning("careful")
        console.info("fyi")
        console.debug("details")

        assert console.messages == [
            "OK done",
            "error: bad",
            "warning: careful",
            "fyi",
            "debug: details",
        ]
        assert console.count(Style.ERROR) == 1
        assert console.count(Style.DEBUG) == 1

    def test_has_error_and_warning(self) -> None:
        console = MockConsole()
        assert console.has_error() is False
        assert console.has_warning() is False
        console.warning("w")
        console.error("e")
        assert console.has_error() is True
        assert console.has_warning() is True

    def test_find_and_text(self) -> None:
        console = MockConsole()
        console.info("Syncing GitDB...")
        console.info("Uploading list of tracked files...")

        assert len(console.find("GitDB")) == 1
        assert console.text == "Syncing GitDB...\nUploading list of tracked files..."

    def test_clear(self) -> None:
        console = MockConsole()
        console.info("x")
        console.clear()
        assert console.outputs == []

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("typed")


class TestRichConsole:
    def test_debug_hidden_unless_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().debug("secret")
        assert "secret" not in capsys.readouterr().out

        RichConsole(verbose=True).debug("shown")
        assert "shown" in capsys.readouterr().out

    def test_brackets_printed_verbatim(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().info("[attempt 2] Retrying upload")
        assert "[attempt 2] Retrying upload" in capsys.readouterr().out

    def test_error_prefix(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().error("Failed upload: boom")
        assert "error: Failed upload: boom" in capsys.readouterr().out
