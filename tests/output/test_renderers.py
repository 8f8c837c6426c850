"""Tests for operation-specific Rich renderers."""

from datetime import date

from tasknotes.output.renderers import (
    format_date,
    format_duration,
    format_task_line,
    render_quiet,
    render_result,
)
from tasknotes.services.result import ServiceError, ServiceResult

TODAY = date(2026, 3, 4)

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


# ── Formatting helpers ───────────────────────────────────────────────


class TestFormatting:
    def test_duration(self) -> None:
        assert format_duration(45) == "45m"
        assert format_duration(120) == "2h"
        assert format_duration(90) == "1h 30m"

    def test_date(self) -> None:
        assert format_date("2026-03-04", today=TODAY).plain == "today"
        assert format_date("2026-03-01", today=TODAY).style == "tn.overdue"
        assert format_date("2026-03-09", today=TODAY).plain == "2026-03-09"
        assert format_date("someday", today=TODAY).plain == "someday"

    def test_task_line(self) -> None:
        task = {
            "title": "Ship launch plan",
            "status": "in-progress",
            "priority": "high",
            "due": "2026-03-04",
            "tags": ["work", "task"],
            "contexts": ["office"],
            "projects": ["[[Q3 Launch]]"],
            "timeEstimate": 90,
        }
        line = format_task_line(task, today=TODAY).plain
        assert line == (
            "◐ [high] Ship launch plan due:today #work #task @office +Q3 Launch ~1h 30m"
        )

    def test_task_line_minimal(self) -> None:
        line = format_task_line({"title": "Plain", "priority": "normal"}, today=TODAY).plain
        assert line == "• Plain"


# ── Error rendering ──────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("show_task", "NOT_FOUND", 'No task found matching "x"'))
        assert output == '✗ No task found matching "x"'

    def test_verbose_shows_code_and_detail(self) -> None:
        output = render_result(_err("create_task", "IO_ERROR", "Bad", path="/x"), verbose=True)
        assert "code: IO_ERROR" in output
        assert "path: /x" in output

    def test_backlinks_listed(self) -> None:
        result = _err("delete_task", "HAS_BACKLINKS", "linked", backlinks=["a.md", "b.md"])
        assert render_result(result).splitlines() == ["✗ linked", "  - a.md", "  - b.md"]

    def test_no_error_object(self) -> None:
        assert "Unknown error" in render_result(ServiceResult(ok=False, op="test"))


# ── Task renderers ───────────────────────────────────────────────────


class TestTaskRenderers:
    def test_create(self) -> None:
        output = render_result(_ok("create_task", path="tasks/Buy milk.md", title="Buy milk"))
        lines = output.splitlines()
        assert lines[0] == "✓ Task created"
        assert "Buy milk" in lines[1]
        assert lines[2] == "  → tasks/Buy milk.md"

    def test_list_empty(self) -> None:
        assert render_result(_ok("list_tasks", items=[], count=0)) == "No tasks found."

    def test_list_more(self) -> None:
        items = [{"title": "A", "path": "tasks/A.md"}]
        output = render_result(_ok("list_tasks", items=items, count=1, has_more=True))
        assert "• A" in output
        assert "raise --limit above 1" in output

    def test_list_verbose_paths(self) -> None:
        items = [{"title": "A", "path": "tasks/A.md"}]
        output = render_result(_ok("list_tasks", items=items, count=1), verbose=True)
        assert "    tasks/A.md" in output

    def test_detail(self) -> None:
        output = render_result(
            _ok(
                "show_task",
                path="tasks/A.md",
                title="A",
                status="open",
                priority="high",
                tags=["task"],
                timeEstimate=30,
                recurrence="FREQ=DAILY",
                timeEntries=[{"startTime": "2026-03-04T09:00:00", "endTime": "2026-03-04T09:30:00",
                              "duration": 30}],
                body="Details here\n",
            )
        )
        assert output.splitlines()[0] == "☐ A"
        assert "  Status:    open" in output
        assert "  Estimate:  30m" in output
        assert "  Recurs:    FREQ=DAILY" in output
        assert "2026-03-04 09:00 → 09:30 (30m)" in output
        assert "  Path: tasks/A.md" in output
        assert output.endswith("Details here")

    def test_detail_instance(self) -> None:
        output = render_result(
            _ok(
                "show_task",
                path="tasks/A.md",
                title="A",
                status="open",
                recurrence="FREQ=DAILY",
                complete_instances=["2026-03-01", "2026-03-02"],
                skipped_instances=["2026-03-03"],
                instance={"date": "2026-03-03", "state": "skipped"},
            )
        )
        assert "  Done on:   2026-03-01, 2026-03-02" in output
        assert "  Skipped:   2026-03-03" in output
        assert "  Instance (2026-03-03): skipped" in output

    def test_instance_ops(self) -> None:
        instance = {"date": "2026-03-03", "state": "skipped"}
        output = render_result(_ok("skip_instance", title="A", instance=instance))
        assert output == "✓ Skipped: A (2026-03-03)"
        output = render_result(_ok("unskip_instance", title="A", instance=instance, already=True))
        assert output == "Not skipped: A (2026-03-03)"
        output = render_result(_ok("complete_instance", title="A", instance=instance))
        assert output == "✓ Completed: A (2026-03-03)"

    def test_complete(self) -> None:
        assert render_result(_ok("complete_task", title="A")) == "✓ Completed: A"
        assert render_result(_ok("complete_task", title="A", already=True)) == "Already done: A"

    def test_archive(self) -> None:
        assert render_result(_ok("archive_task", title="A")) == "✓ Archived: A"
        assert render_result(_ok("archive_task", title="A", already=True)) == "Already archived: A"

    def test_delete(self) -> None:
        output = render_result(_ok("delete_task", path="tasks/A.md", deleted=True))
        assert output == "✓ Deleted: tasks/A.md"


# ── Project renderers ────────────────────────────────────────────────


class TestProjectRenderers:
    def test_projects_with_stats(self) -> None:
        items = [{"name": "Launch", "total": 2, "open": 1, "done": 1, "percent": 50}]
        output = render_result(_ok("list_projects", items=items, count=1, stats=True))
        assert output == "  +Launch  1 open, 1 done (50%)"

    def test_projects_plain(self) -> None:
        items = [{"name": "Launch", "total": 2, "open": 1, "done": 1, "percent": 50}]
        assert render_result(_ok("list_projects", items=items, count=1)) == "  +Launch"

    def test_projects_empty(self) -> None:
        assert render_result(_ok("list_projects", items=[], count=0)) == "No projects found."

    def test_project_empty(self) -> None:
        output = render_result(_ok("show_project", project="Nope", items=[], count=0))
        assert output == 'No tasks in project "Nope".'

    def test_project(self) -> None:
        items = [{"title": "A", "status": "done"}]
        output = render_result(_ok("show_project", project="Launch", items=items, count=1))
        assert output.splitlines()[0] == "Project: +Launch"
        assert "☑ A" in output


# ── Config / init renderers ──────────────────────────────────────────


class TestConfigRenderers:
    def test_list(self) -> None:
        output = render_result(
            _ok("list_config", path="/c.json", values={"collectionPath": None, "language": "en"})
        )
        assert "Config file: /c.json" in output
        assert "  collectionPath: (not set)" in output
        assert "  language: en" in output

    def test_get(self) -> None:
        assert render_result(_ok("get_config", key="language", value="en")) == "en"
        assert render_result(_ok("get_config", key="collectionPath", value=None)) == "(not set)"

    def test_set(self) -> None:
        output = render_result(_ok("set_config", key="collectionPath", value=None, path="/c"))
        assert output == "✓ Set collectionPath = (null)"

    def test_init(self) -> None:
        output = render_result(
            _ok("init_collection", path="/v", created=["mdbase.yaml", "_types/task.md", "tasks/"])
        )
        assert output.splitlines()[0] == "✓ Initialized mdbase-tasknotes collection:"
        assert "  _types/task.md" in output
        assert "Collection path: /v" in output
        assert 'mtn create "Buy groceries tomorrow #shopping"' in output


class TestGenericRenderer:
    def test_unknown_op(self) -> None:
        output = render_result(_ok("custom_op", answer=42))
        assert "custom_op" in output
        assert "answer: 42" in output


# ── Quiet mode ───────────────────────────────────────────────────────


class TestQuiet:
    def test_items(self) -> None:
        result = _ok("list_tasks", items=[{"path": "tasks/a.md"}, {"path": "tasks/b.md"}])
        assert render_quiet(result) == "tasks/a.md\ntasks/b.md"

    def test_projects_by_name(self) -> None:
        assert render_quiet(_ok("list_projects", items=[{"name": "Launch"}])) == "Launch"

    def test_path(self) -> None:
        assert render_quiet(_ok("create_task", path="tasks/a.md")) == "tasks/a.md"

    def test_config_value(self) -> None:
        assert render_quiet(_ok("get_config", key="language", value="en")) == "en"

    def test_error(self) -> None:
        assert render_quiet(_err("x", "E", "boom")) == "✗ boom"
