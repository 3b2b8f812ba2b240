"""Tests for the diagnostics output manager.

Covers:
- stdout vs stderr discipline
- Quiet mode suppression rules
- Debug mode output
- NO_COLOR / TERM=dumb color disabling
- Global instance management
"""

from __future__ import annotations

import pytest

from spacectl import output as output_module
from spacectl.output import (
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color()

    def test_term_dumb(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color()

    def test_color_enabled_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert not _should_disable_color()


class TestStreams:
    def test_print_data_goes_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(no_color=True).print_data("payload")
        captured = capsys.readouterr()
        assert captured.out == "payload\n"
        assert captured.err == ""

    def test_print_data_keeps_existing_newline(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(no_color=True).print_data("a: 1\n")
        assert capsys.readouterr().out == "a: 1\n"

    def test_diagnostics_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        manager = OutputManager(no_color=True)
        manager.info("info line")
        manager.success("done")
        manager.warning("careful")
        manager.error("broken")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "info line" in captured.err
        assert "done" in captured.err
        assert "Warning: careful" in captured.err
        assert "Error: broken" in captured.err


class TestQuietMode:
    def test_quiet_suppresses_informational(self, capsys: pytest.CaptureFixture[str]) -> None:
        manager = OutputManager(no_color=True, quiet=True)
        manager.info("info line")
        manager.success("done")
        manager.suggest("next step")
        assert capsys.readouterr().err == ""

    def test_quiet_keeps_warnings_and_errors(self, capsys: pytest.CaptureFixture[str]) -> None:
        manager = OutputManager(no_color=True, quiet=True)
        manager.warning("careful")
        manager.error("broken")
        err = capsys.readouterr().err
        assert "Warning: careful" in err
        assert "Error: broken" in err


class TestDebugMode:
    def test_debug_hidden_by_default(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(no_color=True).debug("[spacectl] -> GET /x")
        assert capsys.readouterr().err == ""

    def test_debug_printed_verbatim(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(no_color=True, debug=True).debug('   body: {"password": "[x]"}')
        assert capsys.readouterr().err == '   body: {"password": "[x]"}\n'


class TestGlobalInstance:
    def test_get_output_creates_default(self) -> None:
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_installs_instance(self) -> None:
        manager = OutputManager(quiet=True)
        set_output(manager)
        assert get_output() is manager

    def test_convenience_functions_delegate(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(no_color=True, debug=True))
        output_module.error("bad")
        output_module.debug("dbg")
        output_module.print_data("data")
        captured = capsys.readouterr()
        assert captured.out == "data\n"
        assert "Error: bad" in captured.err
        assert "dbg" in captured.err
