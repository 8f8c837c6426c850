"""Collection — the file-backed document store.

Provides open / query / read / create / update / delete over the markdown
documents of one collection directory. Operations never raise for
expected failures; they return result objects carrying a
:class:`StoreError` with a machine-readable ``code``.

The store places new documents itself only when the type's
``path_pattern`` uses plain ``{field}`` placeholders over scalar
frontmatter values. Anything richer yields :data:`PATH_REQUIRED` and the
caller must supply an explicit path.
"""

from __future__ import annotations

import fnmatch
import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

from ruamel.yaml.error import YAMLError

from tasknotes.domain.links import (
    extract_markdown_link_targets,
    extract_wikilinks,
    link_targets_path,
)
from tasknotes.infrastructure.filesystem import (
    find_documents,
    read_content_file,
    relative_posix,
    resolve_document_path,
    write_content_file,
)
from tasknotes.infrastructure.query import matches_where, sort_records
from tasknotes.infrastructure.schema import (
    CollectionConfig,
    SchemaError,
    TypeDefinition,
    load_collection_config,
    load_type_definitions,
)

logger = logging.getLogger(__name__)

# Error codes
NOT_FOUND = "not_found"
UNKNOWN_TYPE = "unknown_type"
PATH_REQUIRED = "path_required"
PATH_CONFLICT = "path_conflict"
INVALID_PATH = "invalid_path"
INVALID_QUERY = "invalid_query"
VALIDATION_FAILED = "validation_failed"
INVALID_COLLECTION = "invalid_collection"
IO_ERROR = "io_error"
INVALID_DOCUMENT = "invalid_document"

_SIMPLE_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_UNSAFE_SEGMENT_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


class CollectionError(Exception):
    """Raised when a collection cannot be opened."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StoreError:
    """Structured store failure."""

    code: str
    message: str


@dataclass(frozen=True)
class Record:
    """One document: collection-relative path plus parsed content."""

    path: str
    frontmatter: dict[str, Any]
    body: str = ""


@dataclass(frozen=True)
class QueryResult:
    results: list[Record] = field(default_factory=list)
    has_more: bool = False
    error: StoreError | None = None


@dataclass(frozen=True)
class ReadResult:
    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    error: StoreError | None = None


@dataclass(frozen=True)
class WriteResult:
    """Outcome of create or update."""

    path: str | None = None
    frontmatter: dict[str, Any] = field(default_factory=dict)
    error: StoreError | None = None


@dataclass(frozen=True)
class DeleteResult:
    path: str
    deleted: bool = False
    broken_links: list[str] = field(default_factory=list)
    error: StoreError | None = None


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


class Collection:
    """An opened collection directory.

    Usage::

        with Collection.open(path) as collection:
            result = collection.query(types=["task"], where={"status": "open"})
    """

    def __init__(
        self,
        root: Path,
        config: CollectionConfig,
        type_defs: dict[str, TypeDefinition],
    ) -> None:
        self.root = root
        self.config = config
        self.type_defs = type_defs
        self._closed = False

    @classmethod
    def open(cls, path: Path | str) -> Self:
        """Load the config and type definitions of the collection at *path*.

        Raises:
            CollectionError: If the directory is not a valid collection.
        """
        root = Path(path).resolve()
        if not root.is_dir():
            raise CollectionError(INVALID_COLLECTION, f"Not a directory: {root}")
        try:
            config = load_collection_config(root)
            type_defs = load_type_definitions(root, config)
        except SchemaError as exc:
            raise CollectionError(INVALID_COLLECTION, str(exc)) from exc
        logger.debug("Opened collection %s with types %s", root, sorted(type_defs))
        return cls(root, config, type_defs)

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def get_type(self, name: str) -> TypeDefinition | None:
        return self.type_defs.get(name)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query(
        self,
        *,
        types: Sequence[str] | None = None,
        where: Mapping[str, Any] | None = None,
        order_by: Sequence[Mapping[str, str]] | None = None,
        limit: int | None = None,
    ) -> QueryResult:
        """Return documents of *types* matching *where*, ordered and limited."""
        for name in types or []:
            if name not in self.type_defs:
                return QueryResult(error=StoreError(UNKNOWN_TYPE, f"Unknown type: {name}"))

        matched: list[Record] = []
        try:
            for record in self._iter_records():
                if types and not any(self._is_type(t, record) for t in types):
                    continue
                if matches_where(record.frontmatter, where):
                    matched.append(record)
        except ValueError as exc:
            return QueryResult(error=StoreError(INVALID_QUERY, str(exc)))

        ordered = sort_records(matched, order_by, key=lambda r: r.frontmatter)
        if limit is not None and limit >= 0 and len(ordered) > limit:
            return QueryResult(results=ordered[:limit], has_more=True)
        return QueryResult(results=ordered)

    def read(self, path: str) -> ReadResult:
        try:
            absolute = resolve_document_path(self.root, path)
        except ValueError as exc:
            return ReadResult(error=StoreError(INVALID_PATH, str(exc)))
        if not absolute.is_file():
            return ReadResult(error=StoreError(NOT_FOUND, f"Document not found: {path}"))
        try:
            frontmatter, body = read_content_file(absolute)
        except (OSError, UnicodeError) as exc:
            return ReadResult(error=StoreError(IO_ERROR, str(exc)))
        except YAMLError as exc:
            message = f"Invalid frontmatter in {path}: {exc}"
            return ReadResult(error=StoreError(INVALID_DOCUMENT, message))
        return ReadResult(frontmatter=frontmatter, body=body)

    def types_of(self, path: str, frontmatter: Mapping[str, Any]) -> list[str]:
        """Names of every type the document classifies as."""
        record = Record(path=path, frontmatter=dict(frontmatter))
        return [name for name in self.type_defs if self._is_type(name, record)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        *,
        type: str,
        frontmatter: Mapping[str, Any],
        body: str | None = None,
        path: str | None = None,
    ) -> WriteResult:
        """Write a new document of *type*.

        Without *path*, the store derives one from ``path_pattern`` or fails
        with :data:`PATH_REQUIRED`.
        """
        type_def = self.type_defs.get(type)
        if type_def is None:
            return WriteResult(error=StoreError(UNKNOWN_TYPE, f"Unknown type: {type}"))

        data = dict(frontmatter)
        if not type_def.match.declared:
            data.setdefault("type", type_def.name)

        problems = _validate_fields(type_def, data)
        if problems:
            return WriteResult(error=StoreError(VALIDATION_FAILED, "; ".join(problems)))

        if path is None:
            path = _store_path(type_def, data)
            if path is None:
                return WriteResult(
                    error=StoreError(
                        PATH_REQUIRED,
                        f'Type "{type}" cannot determine a path for this document; '
                        "an explicit path is required.",
                    )
                )

        try:
            absolute = resolve_document_path(self.root, path)
        except ValueError as exc:
            return WriteResult(error=StoreError(INVALID_PATH, str(exc)))
        if absolute.exists():
            return WriteResult(error=StoreError(PATH_CONFLICT, f"File already exists: {path}"))

        try:
            write_content_file(absolute, data, body or "")
        except OSError as exc:
            return WriteResult(error=StoreError(IO_ERROR, str(exc)))

        relative = relative_posix(self.root, absolute)
        logger.debug("Created %s document at %s", type, relative)
        return WriteResult(path=relative, frontmatter=data)

    def update(self, *, path: str, fields: Mapping[str, Any]) -> WriteResult:
        """Merge *fields* into a document's frontmatter; ``None`` removes a key."""
        current = self.read(path)
        if current.error:
            return WriteResult(error=current.error)

        data = dict(current.frontmatter)
        for key, value in fields.items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value

        absolute = resolve_document_path(self.root, path)
        try:
            write_content_file(absolute, data, current.body)
        except OSError as exc:
            return WriteResult(error=StoreError(IO_ERROR, str(exc)))
        return WriteResult(path=path, frontmatter=data)

    def delete(self, path: str, *, check_backlinks: bool = False) -> DeleteResult:
        """Remove a document.

        With *check_backlinks*, a document that other documents link to is
        left in place and the linking paths are reported.
        """
        try:
            absolute = resolve_document_path(self.root, path)
        except ValueError as exc:
            return DeleteResult(path=path, error=StoreError(INVALID_PATH, str(exc)))
        if not absolute.is_file():
            missing = StoreError(NOT_FOUND, f"Document not found: {path}")
            return DeleteResult(path=path, error=missing)

        if check_backlinks:
            linking = self.backlinks(path)
            if linking:
                return DeleteResult(path=path, broken_links=linking)

        try:
            absolute.unlink()
        except OSError as exc:
            return DeleteResult(path=path, error=StoreError(IO_ERROR, str(exc)))
        logger.debug("Deleted %s", path)
        return DeleteResult(path=path, deleted=True)

    def backlinks(self, path: str) -> list[str]:
        """Paths of documents whose body or frontmatter links to *path*."""
        linking: list[str] = []
        for record in self._iter_records():
            if record.path == path:
                continue
            if _links_to(record, path):
                linking.append(record.path)
        return linking

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _iter_records(self) -> Iterator[Record]:
        exclude = [self.config.settings.types_folder, *self.config.settings.exclude]
        for absolute in find_documents(self.root, exclude=exclude):
            try:
                frontmatter, body = read_content_file(absolute)
            except (OSError, UnicodeError, ValueError, YAMLError):
                logger.debug("Skipping unreadable document %s", absolute, exc_info=True)
                continue
            relative = relative_posix(self.root, absolute)
            yield Record(path=relative, frontmatter=frontmatter, body=body)

    def _is_type(self, name: str, record: Record) -> bool:
        type_def = self.type_defs[name]
        rule = type_def.match
        if not rule.declared:
            return record.frontmatter.get("type") == name
        if rule.path_glob and not fnmatch.fnmatch(record.path, rule.path_glob):
            return False
        return matches_where(record.frontmatter, rule.where)


def _validate_fields(type_def: TypeDefinition, data: Mapping[str, Any]) -> list[str]:
    problems: list[str] = []
    for name, definition in type_def.fields.items():
        value = data.get(name)
        if definition.required and (value is None or value == ""):
            problems.append(f"Missing required field: {name}")
            continue
        if definition.type == "enum" and definition.values and value is not None:
            if value not in definition.values:
                allowed = ", ".join(str(v) for v in definition.values)
                problems.append(f"Invalid value for {name}: {value} (allowed: {allowed})")
    return problems


def _store_path(type_def: TypeDefinition, data: Mapping[str, Any]) -> str | None:
    pattern = type_def.path_pattern
    if not pattern or "{{" in pattern:
        return None

    unresolved = False

    def _substitute(match: re.Match[str]) -> str:
        nonlocal unresolved
        value = data.get(match.group(1))
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            unresolved = True
            return ""
        segment = _UNSAFE_SEGMENT_CHARS.sub("", str(value)).strip().strip(".")
        if not segment:
            unresolved = True
        return segment

    rendered = _SIMPLE_PLACEHOLDER.sub(_substitute, pattern)
    if unresolved or "{" in rendered or "}" in rendered:
        return None
    if not rendered.lower().endswith(".md"):
        rendered = f"{rendered}.md"
    return rendered


def _links_to(record: Record, path: str) -> bool:
    texts = [record.body, *_string_values(record.frontmatter)]
    for text in texts:
        for link in extract_wikilinks(text):
            if link_targets_path(link.raw, path):
                return True
        for target in extract_markdown_link_targets(text):
            if link_targets_path(target, path):
                return True
    return False


def _string_values(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _string_values(item)
    elif isinstance(value, list):
        for item in value:
            yield from _string_values(item)
