"""UpdateService — status transitions, recurring instances, archiving, and deletion.

Every mutation writes the modification timestamp when the task type
declares a ``dateModified``-role field.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from tasknotes.domain.recurrence import (
    InstanceState,
    anchor_date,
    instance_state,
    occurs_on,
    parse_instance_date,
    transition,
)
from tasknotes.domain.roles import FieldRole, normalize_frontmatter, resolve_field
from tasknotes.services._helpers import (
    ARCHIVE_TAG,
    DONE_STATUS,
    modified_stamp,
    resolve_task_path,
    today_iso,
)
from tasknotes.services.base import BaseService
from tasknotes.services.result import ServiceResult, fail

logger = logging.getLogger(__name__)


class UpdateService(BaseService):
    """Mutates existing tasks."""

    def complete_task(self, task: str, *, on: str | None = None) -> ServiceResult:
        """Mark a task done and stamp its completion date.

        With *on*, only the occurrence of a recurring task on that date is
        completed and the task itself stays open.
        """
        if on is not None:
            return self._set_instance("complete_instance", task, on, InstanceState.COMPLETED)

        op = "complete_task"
        located = self._locate(op, task)
        if isinstance(located, ServiceResult):
            return located
        path, frontmatter = located

        status_field = resolve_field(self.mapping, FieldRole.STATUS)
        if frontmatter.get(status_field) == DONE_STATUS:
            return self._respond(op, path, frontmatter, already=True)

        fields: dict[str, Any] = {
            status_field: DONE_STATUS,
            resolve_field(self.mapping, FieldRole.COMPLETED_DATE): today_iso(),
            **modified_stamp(self._collection, self.mapping),
        }
        return self._write(op, path, fields)

    def skip_instance(self, task: str, on: str) -> ServiceResult:
        """Skip the occurrence of a recurring task on *on*."""
        return self._set_instance("skip_instance", task, on, InstanceState.SKIPPED)

    def unskip_instance(self, task: str, on: str) -> ServiceResult:
        """Reopen a skipped occurrence. Completed occurrences are left alone."""
        return self._set_instance("unskip_instance", task, on, InstanceState.OPEN)

    def archive_task(self, task: str) -> ServiceResult:
        """Add the ``archive`` tag to a task. Archiving twice is a no-op."""
        op = "archive_task"
        located = self._locate(op, task)
        if isinstance(located, ServiceResult):
            return located
        path, frontmatter = located

        tags_field = resolve_field(self.mapping, FieldRole.TAGS)
        current = frontmatter.get(tags_field)
        if isinstance(current, list):
            tags = list(current)
        elif isinstance(current, str) and current:
            tags = [current]
        else:
            tags = []
        if ARCHIVE_TAG in tags:
            return self._respond(op, path, frontmatter, already=True)

        tags.append(ARCHIVE_TAG)
        fields = {tags_field: tags, **modified_stamp(self._collection, self.mapping)}
        return self._write(op, path, fields)

    def delete_task(self, task: str, *, force: bool = False) -> ServiceResult:
        """Delete a task file.

        Unless *force* is set, a task that other documents link to is
        kept and the linking paths are returned as ``HAS_BACKLINKS``.
        """
        op = "delete_task"
        path, error = resolve_task_path(self._collection, self.mapping, task)
        if error:
            return ServiceResult(ok=False, op=op, error=error)
        assert path is not None

        result = self._collection.delete(path, check_backlinks=not force)
        if result.error:
            message = f"Failed to delete task: {result.error.message}"
            return fail(op, result.error.code.upper(), message)
        if not result.deleted:
            return fail(
                op,
                "HAS_BACKLINKS",
                f"{path} is linked from {len(result.broken_links)} document(s). "
                "Use --force to delete anyway.",
                backlinks=result.broken_links,
            )
        logger.info("Deleted task %s", path)
        return ServiceResult(ok=True, op=op, data={"path": path, "deleted": True})

    # ------------------------------------------------------------------

    def _set_instance(self, op: str, task: str, on: str, target: InstanceState) -> ServiceResult:
        try:
            day = parse_instance_date(on)
        except ValueError as exc:
            return fail(op, "INVALID_DATE", str(exc))

        located = self._locate(op, task)
        if isinstance(located, ServiceResult):
            return located
        path, frontmatter = located
        normalized = normalize_frontmatter(frontmatter, self.mapping)

        rule = normalized.get(FieldRole.RECURRENCE)
        if not rule:
            return fail(op, "NOT_RECURRING", f"Task is not recurring: {path}", path=path)

        current = instance_state(normalized, day)
        unchanged = current is target or (
            target is InstanceState.OPEN and current is InstanceState.COMPLETED
        )
        if unchanged:
            instance = {"date": day, "state": current.value}
            return self._respond(op, path, frontmatter, already=True, instance=instance)

        start = anchor_date(normalized)
        if target is not InstanceState.OPEN and start is not None:
            try:
                occurs = occurs_on(str(rule), start, date.fromisoformat(day))
            except ValueError as exc:
                return fail(op, "INVALID_RECURRENCE", f"Invalid recurrence rule {rule!r}: {exc}")
            if not occurs:
                return fail(
                    op,
                    "NOT_AN_OCCURRENCE",
                    f"{day} is not an occurrence of {path} ({rule}, from {start.isoformat()})",
                    path=path,
                )

        fields: dict[str, Any] = {
            **transition(normalized, day, target),
            **modified_stamp(self._collection, self.mapping),
        }
        return self._write(op, path, fields, instance={"date": day, "state": target.value})

    def _locate(self, op: str, task: str) -> tuple[str, dict[str, Any]] | ServiceResult:
        path, error = resolve_task_path(self._collection, self.mapping, task)
        if error:
            return ServiceResult(ok=False, op=op, error=error)
        assert path is not None
        read = self._collection.read(path)
        if read.error:
            return fail(op, read.error.code.upper(), f"Failed to read task: {read.error.message}")
        return path, read.frontmatter

    def _write(self, op: str, path: str, fields: dict[str, Any], **extra: Any) -> ServiceResult:
        result = self._collection.update(path=path, fields=fields)
        if result.error:
            message = f"Failed to update task: {result.error.message}"
            return fail(op, result.error.code.upper(), message)
        logger.info("%s: %s", op, path)
        return self._respond(op, path, result.frontmatter, **extra)

    def _respond(
        self,
        op: str,
        path: str,
        frontmatter: dict[str, Any],
        *,
        already: bool = False,
        **extra: Any,
    ) -> ServiceResult:
        data = {
            "path": path,
            **normalize_frontmatter(frontmatter, self.mapping),
            "already": already,
            **extra,
        }
        return ServiceResult(ok=True, op=op, data=data, warnings=self._mapping_warnings())
