"""QueryService — read-only task operations: list, show, projects."""

from __future__ import annotations

from typing import Any

from tasknotes.domain.links import extract_project_names
from tasknotes.domain.recurrence import instance_state, parse_instance_date
from tasknotes.domain.roles import FieldRole, normalize_frontmatter, resolve_field
from tasknotes.infrastructure.query import parse_where
from tasknotes.services._helpers import (
    CLOSED_STATUSES,
    TASK_TYPE,
    resolve_task_path,
    task_payload,
    today_iso,
)
from tasknotes.services.base import BaseService
from tasknotes.services.result import ServiceResult, fail

DEFAULT_LIMIT = 50


class QueryService(BaseService):
    """Lists and inspects tasks."""

    def list_tasks(
        self,
        *,
        status: str | None = None,
        priority: str | None = None,
        tag: str | None = None,
        due: str | None = None,
        overdue: bool = False,
        include_closed: bool = False,
        where: str | None = None,
        limit: int | None = DEFAULT_LIMIT,
    ) -> ServiceResult:
        """List tasks matching the filters, soonest due first.

        Without *status*, closed tasks (done/cancelled) are hidden unless
        *include_closed* is set. A raw *where* expression (YAML or JSON, in
        stored field names) replaces every other filter.
        """
        op = "list_tasks"
        due_field = resolve_field(self.mapping, FieldRole.DUE)

        if where:
            try:
                conditions = parse_where(where)
            except ValueError as exc:
                return fail(op, "INVALID_QUERY", str(exc))
        else:
            conditions = self._filter_conditions(
                status=status,
                priority=priority,
                tag=tag,
                due=due,
                overdue=overdue,
                include_closed=include_closed,
            )

        result = self._collection.query(
            types=[TASK_TYPE],
            where=conditions,
            order_by=[{"field": due_field, "direction": "asc"}],
            limit=limit,
        )
        if result.error:
            return fail(op, result.error.code.upper(), result.error.message)

        items = [task_payload(r, self.mapping) for r in result.results]
        return ServiceResult(
            ok=True,
            op=op,
            data={"items": items, "count": len(items), "has_more": result.has_more},
            warnings=self._mapping_warnings(),
        )

    def _filter_conditions(
        self,
        *,
        status: str | None,
        priority: str | None,
        tag: str | None,
        due: str | None,
        overdue: bool,
        include_closed: bool,
    ) -> dict[str, Any]:
        status_field = resolve_field(self.mapping, FieldRole.STATUS)
        due_field = resolve_field(self.mapping, FieldRole.DUE)

        where: dict[str, Any] = {}
        if status:
            _add_condition(where, status_field, "eq", status)
        elif not include_closed and not overdue:
            _add_condition(where, status_field, "not_in", list(CLOSED_STATUSES))
        if priority:
            _add_condition(where, resolve_field(self.mapping, FieldRole.PRIORITY), "eq", priority)
        if tag:
            _add_condition(where, resolve_field(self.mapping, FieldRole.TAGS), "contains", tag)
        if due:
            _add_condition(where, due_field, "eq", due)
        if overdue:
            _add_condition(where, due_field, "lt", today_iso())
            _add_condition(where, status_field, "not_in", list(CLOSED_STATUSES))
        return where

    def show_task(self, task: str, *, on: str | None = None) -> ServiceResult:
        """Full detail of one task, including its body.

        With *on*, the payload also carries the state of the recurring
        occurrence on that date.
        """
        op = "show_task"
        day: str | None = None
        if on is not None:
            try:
                day = parse_instance_date(on)
            except ValueError as exc:
                return fail(op, "INVALID_DATE", str(exc))

        path, error = resolve_task_path(self._collection, self.mapping, task)
        if error:
            return ServiceResult(ok=False, op=op, error=error)
        assert path is not None

        read = self._collection.read(path)
        if read.error:
            return fail(op, read.error.code.upper(), f"Failed to read task: {read.error.message}")

        data = {
            "path": path,
            **normalize_frontmatter(read.frontmatter, self.mapping),
            "body": read.body,
        }
        if day is not None:
            if not data.get(FieldRole.RECURRENCE):
                return fail(op, "NOT_RECURRING", f"Task is not recurring: {path}", path=path)
            data["instance"] = {"date": day, "state": instance_state(data, day).value}
        return ServiceResult(ok=True, op=op, data=data, warnings=self._mapping_warnings())

    def list_projects(self, *, stats: bool = False) -> ServiceResult:
        """Every project referenced by a task, with open/done counts.

        *stats* only asks renderers to show the counts; they are always
        present in the payload.
        """
        op = "list_projects"
        tasks = self._all_tasks()
        if isinstance(tasks, ServiceResult):
            return tasks

        counts: dict[str, dict[str, Any]] = {}
        for task in tasks:
            closed = task.get(FieldRole.STATUS) in CLOSED_STATUSES
            for name in extract_project_names(task.get(FieldRole.PROJECTS)):
                entry = counts.setdefault(name, {"name": name, "total": 0, "open": 0, "done": 0})
                entry["total"] += 1
                entry["done" if closed else "open"] += 1

        items = sorted(counts.values(), key=lambda e: e["name"].casefold())
        for entry in items:
            entry["percent"] = round(entry["done"] / entry["total"] * 100) if entry["total"] else 0
        data = {"items": items, "count": len(items), "stats": stats}
        return ServiceResult(ok=True, op=op, data=data)

    def show_project(self, name: str) -> ServiceResult:
        """Tasks that reference project *name* (case-insensitive)."""
        op = "show_project"
        tasks = self._all_tasks()
        if isinstance(tasks, ServiceResult):
            return tasks

        wanted = name.casefold()
        items = [
            task
            for task in tasks
            if any(
                p.casefold() == wanted
                for p in extract_project_names(task.get(FieldRole.PROJECTS))
            )
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={"project": name, "items": items, "count": len(items)},
        )

    def _all_tasks(self) -> list[dict[str, Any]] | ServiceResult:
        due_field = resolve_field(self.mapping, FieldRole.DUE)
        result = self._collection.query(
            types=[TASK_TYPE],
            order_by=[{"field": due_field, "direction": "asc"}],
        )
        if result.error:
            return fail("query_tasks", result.error.code.upper(), result.error.message)
        return [task_payload(r, self.mapping) for r in result.results]


def _add_condition(where: dict[str, Any], field: str, op: str, value: Any) -> None:
    where.setdefault(field, {})[op] = value
