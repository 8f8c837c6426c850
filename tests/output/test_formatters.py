"""Tests for output mode selection."""

import json

from tasknotes.output.formatters import OutputSettings, format_result
from tasknotes.services.result import ServiceResult


def _result() -> ServiceResult:
    return ServiceResult(ok=True, op="create_task", data={"path": "tasks/a.md", "title": "a"})


class TestFormatResult:
    def test_default_is_rich(self) -> None:
        assert format_result(_result()).startswith("✓ Task created")

    def test_json(self) -> None:
        parsed = json.loads(format_result(_result(), settings=OutputSettings(json_output=True)))
        assert parsed["ok"] is True
        assert parsed["op"] == "create_task"
        assert parsed["data"]["path"] == "tasks/a.md"

    def test_json_beats_quiet(self) -> None:
        settings = OutputSettings(json_output=True, quiet=True)
        assert json.loads(format_result(_result(), settings=settings))["ok"] is True

    def test_quiet(self) -> None:
        assert format_result(_result(), settings=OutputSettings(quiet=True)) == "tasks/a.md"
