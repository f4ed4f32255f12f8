"""Query contract the reconciler consumes.

A source query answers questions about one class-like source unit. The
reconciler never parses text itself; any parser that can answer these
questions can feed it.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from routewire.domain.models import FieldFact, Role


class RouteSourceQuery(Protocol):
    """Facts about a single class, pre-extracted from its syntax tree."""

    def super_type_name(self) -> Optional[str]:
        ...

    def fields(self) -> list[FieldFact]:
        ...

    def find_lifecycle_method(self) -> Optional[Any]:
        ...

    def extract_uris(
        self,
        method: Any,
        literals_only: bool,
        include_field_references: bool,
        role: Role,
    ) -> list[str]:
        ...


def parse_consumer_uris(
    source: RouteSourceQuery,
    method: Any,
    literals_only: bool,
    include_field_references: bool,
) -> list[str]:
    return source.extract_uris(method, literals_only, include_field_references, Role.CONSUMER)


def parse_producer_uris(
    source: RouteSourceQuery,
    method: Any,
    literals_only: bool,
    include_field_references: bool,
) -> list[str]:
    return source.extract_uris(method, literals_only, include_field_references, Role.PRODUCER)
