from __future__ import annotations

import logging
from typing import Iterable, Optional

from routewire.catalog import endpoint_component_name
from routewire.domain.models import EndpointDescriptor, binding_for
from routewire.parser.ports import (
    RouteSourceQuery,
    parse_consumer_uris,
    parse_producer_uris,
)
from routewire.reconcile.gate import is_route_builder

logger = logging.getLogger(__name__)


def parse_route_builder(
    source: RouteSourceQuery,
    base_dir: str,
    file_name: str,
    endpoints: list[EndpointDescriptor],
) -> list[EndpointDescriptor]:
    """
    Reconcile the endpoints used by one route-builder class into `endpoints`.

    `endpoints` is owned by the caller and may already hold descriptors from
    other classes; new ones are appended in discovery order and existing ones
    only ever have their role flags updated. Not safe to share across threads
    without external locking.

    Order of evidence:
      A. fields bound with an endpoint annotation (deduplicated by uri)
      B. the configure method (nothing more to do without it)
      C. field references in from/to call-sites mark roles on known uris
      D. literal uris: consumers always appended, producers deduplicated
    """
    if not is_route_builder(source.super_type_name()):
        return endpoints

    rel_name = _relative_file_name(base_dir, file_name)

    # A: bound fields, first writer wins
    for field in source.fields():
        binding = binding_for(field.annotations)
        uri = binding.uri if binding else None
        if uri and find_endpoint_by_uri(endpoints, uri) is None:
            # role is unknown until the configure method is scanned
            endpoints.append(_descriptor(rel_name, uri, instance=field.name))

    # B
    method = source.find_lifecycle_method()
    if method is None:
        return endpoints

    # C: field references only flag what step A already found
    for uri in parse_consumer_uris(source, method, False, True):
        detail = find_endpoint_by_uri(endpoints, uri)
        if detail is not None:
            detail.consumer_only = True

    for uri in parse_producer_uris(source, method, False, True):
        detail = find_endpoint_by_uri(endpoints, uri)
        if detail is None:
            continue
        if detail.consumer_only:
            # consumer and producer
            detail.consumer_only = False
            detail.producer_only = False
        else:
            detail.producer_only = True

    # D: literal consumers are appended without a lookup
    for uri in parse_consumer_uris(source, method, True, False):
        endpoints.append(_descriptor(rel_name, uri, consumer_only=True))

    for uri in parse_producer_uris(source, method, True, False):
        detail = find_endpoint_by_uri(endpoints, uri)
        if detail is None:
            endpoints.append(_descriptor(rel_name, uri, producer_only=True))
        else:
            detail.consumer_only = False
            detail.producer_only = False

    logger.debug("%s: %d endpoints after reconciliation", rel_name, len(endpoints))
    return endpoints


def find_endpoint_by_uri(
    endpoints: Iterable[EndpointDescriptor], uri: str
) -> Optional[EndpointDescriptor]:
    for detail in endpoints:
        if detail.endpoint_uri == uri:
            return detail
    return None


def _relative_file_name(base_dir: str, file_name: str) -> str:
    if file_name.startswith(base_dir):
        return file_name[len(base_dir) + 1:]
    return file_name


def _descriptor(
    file_name: str,
    uri: str,
    instance: Optional[str] = None,
    consumer_only: bool = False,
    producer_only: bool = False,
) -> EndpointDescriptor:
    return EndpointDescriptor(
        file_name=file_name,
        endpoint_instance=instance,
        endpoint_uri=uri,
        endpoint_component_name=endpoint_component_name(uri),
        consumer_only=consumer_only,
        producer_only=producer_only,
    )
