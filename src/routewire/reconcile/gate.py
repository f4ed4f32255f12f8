from __future__ import annotations

from typing import Optional

# Known route-builder base types. Deliberately a literal list: a full
# hierarchy walk needs cross-module type resolution we don't have here.
ROUTE_BUILDER_BASES = frozenset(
    {
        "camel.builder.RouteBuilder",
        "camel.spring.boot.FatJarRouter",
    }
)


def is_route_builder(super_type_name: Optional[str]) -> bool:
    """A class with no declared base, or one of the known bases, may define routes."""
    if super_type_name is None:
        return True
    return super_type_name in ROUTE_BUILDER_BASES
