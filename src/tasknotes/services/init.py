"""InitService — scaffold a new task collection.

Renders ``mdbase.yaml`` and the ``task`` type definition from the
packaged Jinja2 templates and creates the tasks folder.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import TemplateError

from tasknotes.infrastructure.schema import CONFIG_FILENAME, DEFAULT_TYPES_FOLDER
from tasknotes.infrastructure.templates import build_template_environment
from tasknotes.services.result import ServiceResult, fail

logger = logging.getLogger(__name__)

SPEC_VERSION = "0.2.0"
TASKS_FOLDER = "tasks"
STATUSES = ("open", "in-progress", "done", "cancelled")
PRIORITIES = ("low", "normal", "high", "urgent")


class InitService:
    """Collection scaffolding. Stateless; no collection is open yet."""

    @staticmethod
    def init_collection(path: Path, *, force: bool = False) -> ServiceResult:
        """Write the collection config, task type, and tasks folder under *path*.

        An existing ``mdbase.yaml`` is only overwritten with *force*.
        """
        op = "init_collection"
        root = path.expanduser().resolve()
        config_file = root / CONFIG_FILENAME
        if config_file.exists() and not force:
            return fail(
                op,
                "ALREADY_INITIALIZED",
                f"{CONFIG_FILENAME} already exists in {root}. Use --force to overwrite.",
                path=str(root),
            )

        context = {
            "spec_version": SPEC_VERSION,
            "name": root.name or "tasks",
            "types_folder": DEFAULT_TYPES_FOLDER,
            "tasks_folder": TASKS_FOLDER,
            "statuses": STATUSES,
            "default_status": STATUSES[0],
            "priorities": PRIORITIES,
            "default_priority": "normal",
        }
        env = build_template_environment("init")
        outputs = {
            CONFIG_FILENAME: "mdbase.yaml.j2",
            f"{DEFAULT_TYPES_FOLDER}/task.md": "task.md.j2",
        }

        created: list[str] = []
        try:
            for relative, template_name in outputs.items():
                target = root / relative
                target.parent.mkdir(parents=True, exist_ok=True)
                rendered = env.get_template(template_name).render(**context)
                target.write_text(rendered, encoding="utf-8")
                created.append(relative)
            (root / TASKS_FOLDER).mkdir(parents=True, exist_ok=True)
            created.append(f"{TASKS_FOLDER}/")
        except (OSError, TemplateError) as exc:
            return fail(op, "IO_ERROR", f"Failed to initialize collection: {exc}", created=created)

        logger.info("Initialized collection at %s", root)
        return ServiceResult(ok=True, op=op, data={"path": str(root), "created": created})
