from __future__ import annotations

from typing import Optional


def endpoint_component_name(uri: Optional[str]) -> Optional[str]:
    """
    Component (scheme) of an endpoint uri: "timer:foo?period=500" -> "timer".
    Returns None when there is no scheme before the first ':'.
    """
    if not uri:
        return None
    idx = uri.find(":")
    if idx > 0:
        return uri[:idx]
    return None
