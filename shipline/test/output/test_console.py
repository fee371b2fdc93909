"""Tests for shipline.output.console module."""

from __future__ import annotations

from shipline.output.console import MockConsole, Style


def test_records_styles() -> None:
    console = MockConsole()

    console.header("Compile")
    console.success("Compile")
    console.warning("scan failed")
    console.error("push failed")
    console.print("$ mvn test", Style.DIM)

    assert console.messages == [
        "Compile",
        "OK Compile",
        "warning: scan failed",
        "error: push failed",
        "$ mvn test",
    ]
    assert console.has_error()
    assert console.has_warning()
    assert len(console.find("failed")) == 2


def test_text_joins_lines() -> None:
    console = MockConsole()
    console.info("a")
    console.newline()
    assert console.text == "info: a\n"
