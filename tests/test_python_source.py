import ast
import textwrap

import pytest

from routewire.domain.models import AnnotationFact, Role
from routewire.parser.python_source import route_sources_from_source
from routewire.utils.exceptions import SourceParseError


def one_class(src: str):
    sources = route_sources_from_source(textwrap.dedent(src), file_name="routes.py")
    assert len(sources) == 1
    return sources[0]


def uris(source, literals_only, include_field_references, role):
    method = source.find_lifecycle_method()
    assert method is not None
    return source.extract_uris(method, literals_only, include_field_references, role)


ORDER_ROUTE = """
from typing import Annotated

from camel import EndpointInject
from camel.builder import RouteBuilder
from camel.cdi import Uri


class OrderRoute(RouteBuilder):
    inbox: Annotated[object, EndpointInject("jms:queue:in")]
    audit = Uri(uri="log:audit")
    retries = 3

    def configure(self):
        self.from_(self.inbox).to("file:out").wire_tap(self.audit)
        self.from_("timer:tick?period=500").to(audit, "seda:" + "work")
"""


def test_super_type_resolves_through_imports():
    src = one_class(ORDER_ROUTE)
    assert src.name == "OrderRoute"
    assert src.super_type_name() == "camel.builder.RouteBuilder"


def test_super_type_aliases_and_modules():
    src = one_class(
        """
        from camel.builder import RouteBuilder as RB

        class A(RB):
            pass
        """
    )
    assert src.super_type_name() == "camel.builder.RouteBuilder"

    src = one_class(
        """
        import camel.builder

        class A(camel.builder.RouteBuilder):
            pass
        """
    )
    assert src.super_type_name() == "camel.builder.RouteBuilder"


def test_no_base_or_object_base_is_none():
    sources = route_sources_from_source("class A:\n    pass\n\nclass B(object):\n    pass\n")
    assert [s.super_type_name() for s in sources] == [None, None]


def test_unknown_base_keeps_its_local_name():
    src = one_class("class A(Service):\n    pass\n")
    assert src.super_type_name() == "Service"


def test_fields_and_annotations_in_declaration_order():
    src = one_class(ORDER_ROUTE)
    fields = src.fields()

    assert [f.name for f in fields] == ["inbox", "audit", "retries"]
    assert fields[0].annotations == (AnnotationFact("camel.EndpointInject", "jms:queue:in"),)
    assert fields[1].annotations == (AnnotationFact("camel.cdi.Uri", "log:audit"),)
    assert fields[2].annotations == ()


def test_non_literal_annotation_value_is_none():
    src = one_class(
        """
        from camel import EndpointInject

        class A:
            inbox = EndpointInject(make_uri())
        """
    )
    assert src.fields()[0].annotations == (AnnotationFact("camel.EndpointInject", None),)


def test_consumer_and_producer_literals_in_source_order():
    src = one_class(ORDER_ROUTE)

    assert uris(src, True, False, Role.CONSUMER) == ["timer:tick?period=500"]
    assert uris(src, True, False, Role.PRODUCER) == ["file:out", "seda:work"]


def test_field_references_resolve_to_bound_uris():
    src = one_class(ORDER_ROUTE)

    assert uris(src, False, True, Role.CONSUMER) == ["jms:queue:in"]
    # self.audit and a bare audit both refer to the field
    assert uris(src, False, True, Role.PRODUCER) == ["log:audit", "log:audit"]


def test_both_toggles_combine_and_neither_yields_nothing():
    src = one_class(ORDER_ROUTE)

    assert uris(src, True, True, Role.CONSUMER) == ["jms:queue:in", "timer:tick?period=500"]
    assert uris(src, False, False, Role.PRODUCER) == []


def test_missing_configure_method():
    src = one_class("class A:\n    def setup(self):\n        self.from_('timer:x')\n")
    assert src.find_lifecycle_method() is None


def test_only_top_level_classes_are_returned():
    sources = route_sources_from_source(
        textwrap.dedent(
            """
            class A:
                class Inner:
                    pass

            def f():
                class Local:
                    pass

            class B:
                pass
            """
        )
    )
    assert [s.name for s in sources] == ["A", "B"]


def test_syntax_error_raises_source_parse_error():
    with pytest.raises(SourceParseError) as excinfo:
        route_sources_from_source("class A(:\n", file_name="broken.py")
    assert excinfo.value.file_name == "broken.py"
    assert "broken.py" in str(excinfo.value)


def test_long_string_concatenation_is_folded():
    arg = " + ".join(['"ab"'] * 300)
    src = one_class(f"class A:\n    def configure(self):\n        self.to({arg})\n")
    assert uris(src, True, False, Role.PRODUCER) == ["ab" * 300]


def test_recursion_during_parse_raises_source_parse_error(monkeypatch):
    def too_deep(*args, **kwargs):
        raise RecursionError("maximum recursion depth exceeded during ast construction")

    monkeypatch.setattr(ast, "parse", too_deep)
    with pytest.raises(SourceParseError) as excinfo:
        route_sources_from_source("class A:\n    pass\n", file_name="deep.py")
    assert "RecursionError" in excinfo.value.reason
