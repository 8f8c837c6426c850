"""CreateService — task creation pipeline.

Pipeline: PARSE → DENORMALIZE → DEFAULTS → PERSIST → PATH FALLBACK → RESPOND

The store gets the first attempt at placing the new document. Only when
it answers ``path_required`` is the type's ``path_pattern`` rendered
here and a second, explicit-path attempt made.
"""

from __future__ import annotations

import logging
from datetime import datetime

from tasknotes.domain.defaults import (
    apply_field_defaults,
    apply_match_defaults,
    apply_timestamp_defaults,
)
from tasknotes.domain.nlp import parse_task_text
from tasknotes.domain.paths import PathResolution, derive_path
from tasknotes.domain.roles import FieldRole, denormalize_frontmatter, normalize_frontmatter
from tasknotes.infrastructure.collection import PATH_REQUIRED, WriteResult
from tasknotes.services._helpers import DEFAULT_STATUS, TASK_TYPE, local_now
from tasknotes.services.base import BaseService
from tasknotes.services.result import ServiceResult, fail

logger = logging.getLogger(__name__)


class CreateService(BaseService):
    """Creates tasks from natural-language text."""

    def create_task(
        self,
        text: str,
        *,
        body: str | None = None,
        now: datetime | None = None,
    ) -> ServiceResult:
        """Parse *text* and store it as a new task document."""
        op = "create_task"
        warnings = self._mapping_warnings()
        text = text.strip()
        if not text:
            return fail(op, "EMPTY_INPUT", "Please provide task text.")

        now = now or local_now()

        # ── PARSE ─────────────────────────────────────────────────
        draft = parse_task_text(text, today=now.date())
        role_frontmatter = draft.to_role_frontmatter()
        role_frontmatter.setdefault(FieldRole.STATUS, DEFAULT_STATUS)
        role_frontmatter.setdefault(FieldRole.DATE_CREATED, now.isoformat())
        body = body if body is not None else draft.body

        # ── DENORMALIZE + DEFAULTS ───────────────────────────────
        frontmatter = denormalize_frontmatter(role_frontmatter, self.mapping)
        type_def = self._collection.get_type(TASK_TYPE)
        if type_def is not None:
            apply_field_defaults(frontmatter, type_def.fields)
            apply_timestamp_defaults(frontmatter, self.mapping, type_def.fields, now)
            apply_match_defaults(frontmatter, type_def.match.where)

        # ── PERSIST ───────────────────────────────────────────────
        result = self._collection.create(type=TASK_TYPE, frontmatter=frontmatter, body=body)

        # ── PATH FALLBACK ─────────────────────────────────────────
        if result.error and result.error.code == PATH_REQUIRED:
            template = type_def.path_pattern if type_def is not None else None
            resolution = derive_path(template, frontmatter, self.mapping, now)
            result = self._retry_with_path(result, resolution, frontmatter, body, warnings)

        # ── RESPOND ───────────────────────────────────────────────
        if result.error:
            return fail(
                op,
                result.error.code.upper(),
                f"Failed to create task: {result.error.message}",
                warnings=warnings,
            )

        data = {"path": result.path, **normalize_frontmatter(result.frontmatter, self.mapping)}
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def _retry_with_path(
        self,
        first_attempt: WriteResult,
        resolution: PathResolution,
        frontmatter: dict[str, object],
        body: str | None,
        warnings: list[str],
    ) -> WriteResult:
        if resolution.path:
            logger.debug("Rendered path_pattern %r -> %s", resolution.template, resolution.path)
            return self._collection.create(
                type=TASK_TYPE,
                frontmatter=frontmatter,
                body=body,
                path=resolution.path,
            )
        if resolution.missing:
            missing = ", ".join(resolution.missing)
            warnings.append(
                f'Cannot resolve path_pattern "{resolution.template}": '
                f"missing template values for {missing}."
            )
        elif resolution.unsafe:
            warnings.append(
                f'Rendered path_pattern "{resolution.template}" produced an unsafe path.'
            )
        return first_attempt
