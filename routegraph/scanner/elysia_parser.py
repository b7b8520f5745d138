"""Structural extraction of Elysia route definitions from one source file.

The walker threads two values down the syntax tree: the in-file path prefix
contributed by enclosing ``group``/``guard`` callbacks, and the owner, i.e.
the variable (or function) the current chain is assigned to. Mount prefixes
from other files are never applied here; see ``routegraph.core.resolver``.
"""

import logging
from typing import Dict, List, Optional, Tuple

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from routegraph.core.paths import join_paths
from routegraph.errors import ExtractionError
from routegraph.models.route import HTTP_METHODS, MountUsage, RouteItem, StructuralRecord

logger = logging.getLogger("routegraph.scanner")

FRAMEWORK_ROOT = "Elysia"

# node kinds walked when looking for the `new Elysia(...)` at the bottom of a chain
_CHAIN_NODES = ("call_expression", "member_expression", "parenthesized_expression")
_FUNCTION_NODES = ("arrow_function", "function_expression", "function")
_DECLARATION_NODES = ("lexical_declaration", "variable_declaration")

_LANGUAGES: Dict[str, Language] = {}


def _language_for(filename: str) -> Language:
    key = "tsx" if filename.lower().endswith((".tsx", ".jsx")) else "typescript"
    if key not in _LANGUAGES:
        if key == "tsx":
            _LANGUAGES[key] = Language(tstypescript.language_tsx())
        else:
            _LANGUAGES[key] = Language(tstypescript.language_typescript())
    return _LANGUAGES[key]


def _text(node: Node) -> str:
    return node.text.decode("utf-8", errors="replace")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


def _unescape(sequence: str) -> str:
    body = sequence[1:]
    if body[:1] in ("x", "u"):
        digits = body[1:].strip("{}")
        try:
            return chr(int(digits, 16))
        except ValueError:
            return sequence
    if body[:1] in ("\n", "\r"):
        # line continuation
        return ""
    return _SIMPLE_ESCAPES.get(body, body)


def _string_value(node: Optional[Node]) -> Optional[str]:
    if node is None or node.type != "string":
        return None
    parts = []
    for child in node.named_children:
        if child.type == "escape_sequence":
            parts.append(_unescape(_text(child)))
        else:
            parts.append(_text(child))
    return "".join(parts)


def _arguments(node: Node) -> List[Node]:
    args = node.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        return []
    return [child for child in args.named_children if child.type != "comment"]


def _function_body(node: Optional[Node]) -> Optional[Node]:
    if node is None or node.type not in _FUNCTION_NODES:
        return None
    return node.child_by_field_name("body")


def instance_prefix(expr: Optional[Node]) -> str:
    """
    Walk a call chain down to its receiver and return the ``prefix`` option
    of ``new Elysia({ prefix: "..." })`` if that is what the chain starts
    from; "" otherwise.
    """
    while expr is not None and expr.type in _CHAIN_NODES:
        if expr.type == "call_expression":
            expr = expr.child_by_field_name("function")
        elif expr.type == "member_expression":
            expr = expr.child_by_field_name("object")
        else:
            expr = expr.named_children[0] if expr.named_children else None

    if expr is None or expr.type != "new_expression":
        return ""
    ctor = expr.child_by_field_name("constructor")
    if ctor is None or ctor.type != "identifier" or _text(ctor) != FRAMEWORK_ROOT:
        return ""

    args = _arguments(expr)
    if not args or args[0].type != "object":
        return ""
    for prop in args[0].named_children:
        if prop.type != "pair":
            continue
        key = prop.child_by_field_name("key")
        if key is None or key.type != "property_identifier" or _text(key) != "prefix":
            continue
        value = _string_value(prop.child_by_field_name("value"))
        if value is not None:
            return value
    return ""


class _StructureWalker:
    def __init__(self):
        self.routes: List[Tuple[int, RouteItem]] = []
        self.usages: List[Tuple[int, MountUsage]] = []
        self.exported: Dict[str, str] = {}
        self.imports: Dict[str, str] = {}

    def walk(self, root: Node) -> None:
        # explicit stack: long `.get().post()...` chains nest deeply
        stack = [(root, "", None)]
        while stack:
            node, prefix, owner = stack.pop()
            children = self._visit(node, prefix, owner)
            stack.extend(reversed(children))

    def _visit(self, node: Node, prefix: str, owner: Optional[str]):
        kind = node.type

        if kind == "call_expression":
            handled = self._visit_call(node, prefix, owner)
            if handled is not None:
                return handled
        elif kind == "variable_declarator":
            name = node.child_by_field_name("name")
            value = node.child_by_field_name("value")
            if name is not None and name.type == "identifier":
                return [(value, prefix, _text(name))] if value is not None else []
        elif kind == "function_declaration":
            name = node.child_by_field_name("name")
            body = node.child_by_field_name("body")
            if name is not None and body is not None:
                return [(body, prefix, _text(name))]
        elif kind == "import_statement":
            self._collect_import(node)
            return []
        elif kind == "export_statement":
            self._collect_export(node)

        return [(child, prefix, owner) for child in node.named_children]

    def _visit_call(self, node: Node, prefix: str, owner: Optional[str]):
        """Returns the children to walk, or None for the generic walk."""
        callee = node.child_by_field_name("function")
        if callee is None or callee.type != "member_expression":
            return None
        prop = callee.child_by_field_name("property")
        if prop is None:
            return None

        name = _text(prop)
        args = _arguments(node)
        effective = prefix or instance_prefix(callee)

        if name == "group":
            return self._visit_group(node, callee, args, prefix, effective, owner)
        if name == "guard":
            callback = next((a for a in args if a.type in _FUNCTION_NODES), None)
            children = [(callee, prefix, owner)]
            for arg in args:
                body = _function_body(arg) if arg is callback else None
                if body is not None:
                    children.append((body, effective, owner))
                else:
                    children.append((arg, prefix, owner))
            return children
        if name == "use":
            if args and args[0].type == "identifier":
                usage = MountUsage(target=_text(args[0]), prefix=effective, line=_line(prop), owner=owner)
                self.usages.append((prop.start_byte, usage))
            return None
        if name in HTTP_METHODS:
            # (path, handler) at least: skips `headers.get("x")` and friends
            literal = _string_value(args[0]) if len(args) >= 2 else None
            if literal is not None:
                path = join_paths(effective, literal) if effective else literal
                route = RouteItem(method=name.upper(), path=path, line=_line(prop), owner=owner)
                self.routes.append((prop.start_byte, route))
        return None

    def _visit_group(self, node, callee, args, prefix, effective, owner):
        literal = _string_value(args[0]) if args else None
        callback = None
        if literal is not None:
            callback = next((a for a in args[1:] if a.type in _FUNCTION_NODES), None)

        children = [(callee, prefix, owner)]
        for arg in args:
            body = _function_body(arg) if arg is callback else None
            if body is not None:
                children.append((body, join_paths(effective, literal), owner))
            else:
                children.append((arg, prefix, owner))
        return children

    def _collect_import(self, node: Node) -> None:
        clause = next((c for c in node.named_children if c.type == "import_clause"), None)
        if clause is None:
            return
        for child in clause.named_children:
            if child.type == "identifier":
                local = _text(child)
                self.imports[local] = local
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    name = spec.child_by_field_name("name")
                    alias = spec.child_by_field_name("alias")
                    if name is None or name.type != "identifier":
                        continue
                    imported = _text(name)
                    self.imports[_text(alias) if alias is not None else imported] = imported

    def _collect_export(self, node: Node) -> None:
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            if declaration.type in _DECLARATION_NODES:
                for declarator in declaration.named_children:
                    if declarator.type != "variable_declarator":
                        continue
                    name = declarator.child_by_field_name("name")
                    if name is not None and name.type == "identifier":
                        self.exported[_text(name)] = _text(name)
            elif declaration.type == "function_declaration":
                name = declaration.child_by_field_name("name")
                if name is not None:
                    self.exported[_text(name)] = _text(name)
            return

        # `export { x } from "./y"` re-exports something that is not local
        if node.child_by_field_name("source") is not None:
            return

        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                name = spec.child_by_field_name("name")
                alias = spec.child_by_field_name("alias")
                if name is None:
                    continue
                local = _text(name)
                self.exported[_text(alias) if alias is not None else local] = local

        value = node.child_by_field_name("value")
        if value is not None and value.type == "identifier":
            self.exported[_text(value)] = _text(value)

    def record(self) -> StructuralRecord:
        routes = [r for _, r in sorted(self.routes, key=lambda item: item[0])]
        usages = [u for _, u in sorted(self.usages, key=lambda item: item[0])]
        exports = {
            public: [r for r in routes if r.owner == local]
            for public, local in self.exported.items()
        }
        return StructuralRecord(
            routes=routes,
            exports=exports,
            export_locals=dict(self.exported),
            usages=usages,
            imports=dict(self.imports),
        )


def extract_structure(source, filename: str = "<memory>") -> StructuralRecord:
    if isinstance(source, bytes):
        data = source
    else:
        try:
            data = source.encode("utf-8")
        except (AttributeError, UnicodeEncodeError) as exc:
            raise ExtractionError(filename, f"unreadable source: {exc}") from exc

    parser = Parser(_language_for(filename))
    try:
        tree = parser.parse(data)
    except (ValueError, TypeError, RuntimeError) as exc:
        raise ExtractionError(filename, f"parser failure: {exc}") from exc
    if tree is None or tree.root_node is None:
        raise ExtractionError(filename, "parser returned no tree")

    if tree.root_node.has_error:
        logger.warning("Syntax errors in %s, extracting from the recovered tree", filename)

    walker = _StructureWalker()
    walker.walk(tree.root_node)
    return walker.record()
