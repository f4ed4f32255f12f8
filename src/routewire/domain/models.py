from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel


class Role(str, Enum):
    CONSUMER = "consumer"
    PRODUCER = "producer"


class BindingKind(str, Enum):
    """Field annotations that bind an endpoint URI, keyed by qualified name."""

    ENDPOINT_INJECT = "camel.EndpointInject"
    URI = "camel.cdi.Uri"

    @classmethod
    def from_qualified_name(cls, qualified_name: str) -> Optional["BindingKind"]:
        for kind in cls:
            if kind.value == qualified_name:
                return kind
        return None


@dataclass(frozen=True)
class Binding:
    kind: BindingKind
    uri: Optional[str] = None


@dataclass(frozen=True)
class AnnotationFact:
    qualified_name: str
    string_value: Optional[str] = None


@dataclass(frozen=True)
class FieldFact:
    name: str
    annotations: tuple[AnnotationFact, ...] = ()


class EndpointDescriptor(BaseModel):
    file_name: str
    endpoint_instance: Optional[str] = None
    endpoint_uri: str
    endpoint_component_name: Optional[str] = None

    # both False: role unknown, or used as consumer and producer
    consumer_only: bool = False
    producer_only: bool = False

    @property
    def role(self) -> str:
        if self.consumer_only:
            return "consumer"
        if self.producer_only:
            return "producer"
        return "mixed"


def binding_for(annotations: Iterable[AnnotationFact]) -> Optional[Binding]:
    # last recognized annotation wins
    found: Optional[Binding] = None
    for ann in annotations:
        kind = BindingKind.from_qualified_name(ann.qualified_name)
        if kind is not None:
            found = Binding(kind=kind, uri=ann.string_value)
    return found
