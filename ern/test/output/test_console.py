"""Tests for ern.output.console module."""

from __future__ import annotations

from ern.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.DIM) == "dim"
        assert str(Style.HEADER) == "header"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DIM", "BOLD", "HEADER"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """MockConsole records every line with its style."""

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("pushed")
        console.error("rejected")
        console.warning("conflict")
        console.info("bootstrapping")
        assert console.messages == [
            "OK pushed",
            "error: rejected",
            "warning: conflict",
            "info: bootstrapping",
        ]

    def test_header_and_newline(self) -> None:
        console = MockConsole()
        console.header("Resolved native dependencies")
        console.newline()
        assert console.outputs == [
            OutputRecord("Resolved native dependencies", Style.HEADER),
            OutputRecord("", Style.DEFAULT),
        ]

    def test_dim_messages(self) -> None:
        console = MockConsole()
        console.print("git fetch upstream master", Style.DIM)
        console.print("react-native@0.72.4")
        console.print("git reset --hard upstream/master", Style.DIM)
        assert console.dim_messages == [
            "git fetch upstream master",
            "git reset --hard upstream/master",
        ]

    def test_flags(self) -> None:
        console = MockConsole()
        assert not (console.has_error() or console.has_warning() or console.has_success())
        console.warning("hmm")
        assert console.has_warning()
        assert not console.has_error()

    def test_find_and_count(self) -> None:
        console = MockConsole()
        console.error("push rejected")
        console.error("fetch failed")
        console.print("push done")
        assert len(console.find("push")) == 2
        assert console.count(Style.ERROR) == 2
        assert console.count(Style.DEFAULT) == 1

    def test_clear_and_text(self) -> None:
        console = MockConsole()
        console.print("line1")
        console.print("line2")
        assert console.text == "line1\nline2"
        console.clear()
        assert console.outputs == []


class TestRichConsole:
    def test_user_text_is_not_markup(self, capsys) -> None:  # type: ignore[no-untyped-def]
        console = RichConsole()
        console.print("[bold]walmart:ios:1.0.0[/bold]")
        console.error("[red]x[/red]")
        out = capsys.readouterr().out
        assert "[bold]walmart:ios:1.0.0[/bold]" in out
        assert "[red]x[/red]" in out

    def test_stderr(self, capsys) -> None:  # type: ignore[no-untyped-def]
        RichConsole(stderr=True).warning("to stderr")
        captured = capsys.readouterr()
        assert "to stderr" in captured.err
        assert captured.out == ""


class TestConsoleProtocol:
    def test_mock_satisfies_protocol(self) -> None:
        def use_console(c: ConsoleProtocol) -> None:
            c.print("test")
            c.success("ok")
            c.error("err")
            c.warning("warn")
            c.info("info")
            c.header("hdr")
            c.newline()

        mock = MockConsole()
        use_console(mock)
        assert len(mock.outputs) == 7
