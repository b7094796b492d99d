"""Tests for the console helpers."""
from rich.style import Style

from sk_gov_labs.console import console, log_error, log_section


def test_agent_panel_style_is_themed() -> None:
    assert console.get_style("agent") == Style.parse("bold magenta")


def test_log_section_prints_title_and_body(capsys) -> None:
    log_section("🤖 Writer", "draft **one**", markdown=True, border="agent")

    out = capsys.readouterr().out
    assert "Writer" in out
    assert "draft" in out


def test_log_error_goes_to_stderr(capsys) -> None:
    log_error("boom")

    captured = capsys.readouterr()
    assert "boom" in captured.err
    assert "boom" not in captured.out
