from __future__ import annotations

import ast
from typing import Iterable, Optional

from routewire.domain.models import AnnotationFact, FieldFact, Role, binding_for
from routewire.utils.exceptions import SourceParseError

LIFECYCLE_METHOD = "configure"

_ROLE_VERBS = {
    Role.CONSUMER: frozenset({"from_", "from_f", "poll_enrich"}),
    Role.PRODUCER: frozenset({"to", "to_d", "to_f", "enrich", "wire_tap", "in_only", "in_out"}),
}

_ANNOTATED_NAMES = {"Annotated", "typing.Annotated", "typing_extensions.Annotated"}
_URI_KEYWORDS = ("uri", "value")


class PythonRouteSource:
    """
    Route facts for one class in a parsed Python module.

    Field bindings are read from
        inbox: Annotated[Endpoint, EndpointInject("jms:queue:in")]
        outbox = Uri("file:out")
    and call-sites from the body of `def configure(self)`.
    """

    def __init__(self, node: ast.ClassDef, imports: dict[str, str]) -> None:
        self.node = node
        self.imports = imports
        self._fields: Optional[list[FieldFact]] = None

    @property
    def name(self) -> str:
        return self.node.name

    def super_type_name(self) -> Optional[str]:
        if not self.node.bases:
            return None
        base = self.node.bases[0]
        if isinstance(base, ast.Subscript):
            base = base.value
        name = self._resolve(base)
        if name in (None, "object", "builtins.object"):
            return None
        return name

    def fields(self) -> list[FieldFact]:
        if self._fields is None:
            self._fields = list(self._iter_fields())
        return list(self._fields)

    def find_lifecycle_method(self) -> Optional[ast.AST]:
        for stmt in self.node.body:
            if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)) and stmt.name == LIFECYCLE_METHOD:
                return stmt
        return None

    def extract_uris(
        self,
        method: ast.AST,
        literals_only: bool,
        include_field_references: bool,
        role: Role,
    ) -> list[str]:
        verbs = _ROLE_VERBS[role]
        field_uris = self._field_uris() if include_field_references else {}

        calls = [n for n in ast.walk(method) if isinstance(n, ast.Call) and _verb_of(n) in verbs]
        # chained calls share a start position; order by where the verb itself ends
        calls.sort(key=lambda c: (c.func.end_lineno or 0, c.func.end_col_offset or 0))

        out: list[str] = []
        for call in calls:
            for arg in call.args:
                if literals_only:
                    literal = _literal_uri(arg)
                    if literal is not None:
                        out.append(literal)
                        continue
                if include_field_references:
                    ref = _field_ref_name(arg)
                    if ref is not None and ref in field_uris:
                        out.append(field_uris[ref])
        return out

    # ----------------------------
    # internal helpers
    # ----------------------------

    def _iter_fields(self) -> Iterable[FieldFact]:
        for stmt in self.node.body:
            if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
                anns = self._annotations_from_hint(stmt.annotation)
                if stmt.value is not None:
                    anns.extend(self._annotations_from_value(stmt.value))
                yield FieldFact(name=stmt.target.id, annotations=tuple(anns))
            elif isinstance(stmt, ast.Assign):
                anns = tuple(self._annotations_from_value(stmt.value))
                for target in stmt.targets:
                    if isinstance(target, ast.Name):
                        yield FieldFact(name=target.id, annotations=anns)

    def _annotations_from_hint(self, hint: ast.AST) -> list[AnnotationFact]:
        if not isinstance(hint, ast.Subscript):
            return []
        if self._resolve(hint.value) not in _ANNOTATED_NAMES:
            return []
        if not isinstance(hint.slice, ast.Tuple):
            return []
        out: list[AnnotationFact] = []
        for meta in hint.slice.elts[1:]:
            out.extend(self._annotations_from_value(meta))
        return out

    def _annotations_from_value(self, value: ast.AST) -> list[AnnotationFact]:
        if not isinstance(value, ast.Call):
            return []
        qualified = self._resolve(value.func)
        if qualified is None:
            return []
        return [AnnotationFact(qualified_name=qualified, string_value=_call_string_value(value))]

    def _field_uris(self) -> dict[str, str]:
        out: dict[str, str] = {}
        for field in self.fields():
            binding = binding_for(field.annotations)
            if binding is not None and binding.uri:
                out[field.name] = binding.uri
        return out

    def _resolve(self, node: ast.AST) -> Optional[str]:
        dotted = _dotted_name(node)
        if dotted is None:
            return None
        head, _, rest = dotted.partition(".")
        if head in self.imports:
            head = self.imports[head]
        return f"{head}.{rest}" if rest else head


def route_sources_from_source(source: str, file_name: str = "<unknown>") -> list[PythonRouteSource]:
    """
    Parse a module and return one route source per top-level class, in order.
    Raises SourceParseError if the module is not valid Python.
    """
    try:
        tree = ast.parse(source, filename=file_name)
    except SyntaxError as e:
        raise SourceParseError(file_name, f"line {e.lineno}: {e.msg}") from e
    except (ValueError, RecursionError, MemoryError) as e:
        # null bytes, or nesting too deep to build the tree
        raise SourceParseError(file_name, f"{type(e).__name__}: {e}") from e

    imports = _import_table(tree)
    return [PythonRouteSource(node, imports) for node in tree.body if isinstance(node, ast.ClassDef)]


def _import_table(tree: ast.Module) -> dict[str, str]:
    # local alias -> dotted origin, module level only
    table: dict[str, str] = {}
    for stmt in tree.body:
        if isinstance(stmt, ast.Import):
            for alias in stmt.names:
                if alias.asname:
                    table[alias.asname] = alias.name
                else:
                    head = alias.name.split(".")[0]
                    table[head] = head
        elif isinstance(stmt, ast.ImportFrom):
            module = "." * (stmt.level or 0) + (stmt.module or "")
            for alias in stmt.names:
                if alias.name == "*":
                    continue
                local = alias.asname or alias.name
                table[local] = f"{module}.{alias.name}" if module else alias.name
    return table


def _dotted_name(node: ast.AST) -> Optional[str]:
    attrs: list[str] = []
    while isinstance(node, ast.Attribute):
        attrs.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    return ".".join([node.id, *reversed(attrs)])


def _verb_of(call: ast.Call) -> Optional[str]:
    if isinstance(call.func, ast.Attribute):
        return call.func.attr
    if isinstance(call.func, ast.Name):
        return call.func.id
    return None


def _call_string_value(call: ast.Call) -> Optional[str]:
    if call.args:
        return _literal_uri(call.args[0])
    for kw in call.keywords or []:
        if kw.arg in _URI_KEYWORDS:
            return _literal_uri(kw.value)
    return None


def _literal_uri(node: ast.AST) -> Optional[str]:
    # "a" and "a" + "b"; f-strings and names are not evaluated.
    # Walked with an explicit stack: long "+" chains nest one BinOp per term.
    parts: list[str] = []
    stack = [node]
    while stack:
        cur = stack.pop()
        if isinstance(cur, ast.BinOp) and isinstance(cur.op, ast.Add):
            stack.append(cur.right)
            stack.append(cur.left)
        elif isinstance(cur, ast.Constant) and isinstance(cur.value, str):
            parts.append(cur.value)
        else:
            return None
    return "".join(parts)



def _field_ref_name(node: ast.AST) -> Optional[str]:
    # self.inbox or a bare inbox
    if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name) and node.value.id == "self":
        return node.attr
    if isinstance(node, ast.Name):
        return node.id
    return None
