"""Tests for the Rich console factory and style helpers."""

from tasknotes.output.console import (
    create_console,
    get_output,
    status_icon,
    style_for_priority,
    style_for_status,
)


class TestConsole:
    def test_renders_to_buffer(self) -> None:
        console = create_console(no_color=True)
        console.print("[tn.ok]hello[/tn.ok]")
        assert get_output(console) == "hello\n"

    def test_icons(self) -> None:
        assert status_icon("done") == "☑"
        assert status_icon("blocked") == "•"
        assert status_icon(None) == "•"

    def test_styles(self) -> None:
        assert style_for_status("open") == "tn.status.open"
        assert style_for_status("weird") == ""
        assert style_for_priority("urgent") == "tn.priority.urgent"
        assert style_for_priority(None) == ""
