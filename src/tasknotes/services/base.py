"""BaseService — abstract foundation for task services.

Every service receives an opened :class:`Collection`. The field mapping
is loaded once per service on first use and reused for every
normalize/denormalize in the invocation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tasknotes.services._helpers import load_field_mapping

if TYPE_CHECKING:
    from tasknotes.domain.roles import FieldMapping
    from tasknotes.infrastructure.collection import Collection


class BaseService:
    """Base for service-layer classes that work on one collection.

    Usage::

        class CompleteService(BaseService):
            def complete(self, task: str) -> ServiceResult:
                status_field = resolve_field(self.mapping, FieldRole.STATUS)
                ...
    """

    def __init__(self, collection: Collection, mapping: FieldMapping | None = None) -> None:
        self._collection = collection
        self._mapping = mapping

    @property
    def mapping(self) -> FieldMapping:
        """Field mapping for the collection's task type (loaded lazily)."""
        if self._mapping is None:
            self._mapping = load_field_mapping(self._collection.root)
        return self._mapping

    def _mapping_warnings(self) -> list[str]:
        return list(self.mapping.warnings)
