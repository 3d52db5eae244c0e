"""
Script Scanner
==============

Finds calls to the ``$translate`` service in JavaScript sources.

The service is recognized however it is reached:

    $translate("global variable");

    function Controller($translate) {
        this.$translate = $translate;
        this.$translate("translate in constructor");
        var _this = this;
        load(function () { _this.$translate("captured alias"); });
        load(() => this.$translate("translate in arrow function"));
    }

    Controller.prototype.show = function () {
        this.$translate("this-translate");
    };

The first argument is an id or an array of ids, the optional second argument
the default text (or an object of id -> default text for arrays). Explicit
``i18n.registerTranslation(id, text)`` and ``i18n.registerTranslations({...})``
calls are extracted as well.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple, Union

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser, Tree

from ngtranslate_extract.exceptions import ParseError
from ngtranslate_extract.utils.config import ScriptSettings
from .diagnostics import Diagnostic, DiagnosticReporter
from .models import Literal, Resource, TextValue, TranslationRecord, Unresolved

ScanItem = Union[TranslationRecord, Diagnostic]

JS_LANGUAGE = Language(tree_sitter_javascript.language())

FUNCTION_TYPES = frozenset({
    "function_declaration", "function_expression", "function",
    "generator_function_declaration", "generator_function",
    "arrow_function", "method_definition",
})

# Nodes whose children are statements
BLOCK_TYPES = frozenset({
    "program", "statement_block", "class_body", "switch_case", "switch_default",
})

ABSENT_TYPES = frozenset({"undefined", "null"})

_JS_ESCAPE_RE = re.compile(
    r'\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])'
)
_SIMPLE_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0',
    '\n': '', '\r\n': '', '\r': '', '\u2028': '', '\u2029': '',
}


def _unescape_js(raw: str) -> str:
    def repl(m):
        seq = m.group(1)
        if seq.startswith('u{'):
            return chr(int(seq[2:-1], 16))
        if seq[0] in 'ux' and len(seq) > 1:
            return chr(int(seq[1:], 16))
        return _SIMPLE_ESCAPES.get(seq, seq)

    return _JS_ESCAPE_RE.sub(repl, raw)


def node_text(node: Node) -> str:
    return node.text.decode("utf-8", errors="replace")


def _unwrap(node: Optional[Node]) -> Optional[Node]:
    while node is not None and node.type == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        node = inner[0] if inner else None
    return node


def _named(node: Node) -> List[Node]:
    return [c for c in node.named_children if c.type != "comment"]


def parse_script(source: str, path: str = "") -> Tree:
    """Parse JavaScript source; raises ParseError on syntax errors."""
    parser = Parser(JS_LANGUAGE)
    tree = parser.parse(source.encode("utf-8"))
    if tree.root_node.has_error:
        line = _first_error_line(tree.root_node)
        raise ParseError(f"Syntax error in {path or '<script>'} near line {line}", path)
    return tree


def _first_error_line(root: Node) -> int:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        stack.extend(reversed(node.children))
    return root.start_point[0] + 1


# ---------------------------------------------------------------------------
# Service reference resolution
# ---------------------------------------------------------------------------

class ReceiverKind(Enum):
    NONE = "none"      # $translate(...)
    THIS = "this"      # this.$translate(...)
    ALIAS = "alias"    # _this.$translate(...) where `var _this = this`


class ScopeKind(Enum):
    PROGRAM = "program"
    CONSTRUCTOR = "constructor"
    ARROW = "arrow"
    METHOD = "method"
    FUNCTION = "function"


@dataclass(frozen=True)
class ServiceReference:
    """A callee normalized to the name it reaches and how it reaches it."""
    name: str
    receiver: ReceiverKind
    scope: ScopeKind


def matches_bare_identifier(ref: ServiceReference, service: str) -> bool:
    return ref.receiver is ReceiverKind.NONE and ref.name == service


def matches_constructor_capture(ref: ServiceReference, service: str) -> bool:
    return ref.receiver is not ReceiverKind.NONE and ref.scope is ScopeKind.CONSTRUCTOR and ref.name == service


def matches_arrow_capture(ref: ServiceReference, service: str) -> bool:
    return ref.receiver is not ReceiverKind.NONE and ref.scope is ScopeKind.ARROW and ref.name == service


def matches_member_function_capture(ref: ServiceReference, service: str) -> bool:
    return (ref.receiver is not ReceiverKind.NONE
            and ref.scope in (ScopeKind.METHOD, ScopeKind.FUNCTION)
            and ref.name == service)


SERVICE_MATCHERS: Tuple[Callable[[ServiceReference, str], bool], ...] = (
    matches_bare_identifier,
    matches_constructor_capture,
    matches_arrow_capture,
    matches_member_function_capture,
)


def _is_constructor_function(node: Node) -> bool:
    # ES5 classes: function Controller($translate) { ... }
    name = node.child_by_field_name("name")
    if name is None:
        return False
    text = node_text(name)
    return text[:1].isupper()


def scope_kind(node: Node) -> ScopeKind:
    """Kind of the innermost function enclosing ``node``."""
    current = node.parent
    while current is not None:
        if current.type == "arrow_function":
            return ScopeKind.ARROW
        if current.type == "method_definition":
            name = current.child_by_field_name("name")
            if name is not None and node_text(name) == "constructor":
                return ScopeKind.CONSTRUCTOR
            return ScopeKind.METHOD
        if current.type in FUNCTION_TYPES:
            return ScopeKind.CONSTRUCTOR if _is_constructor_function(current) else ScopeKind.FUNCTION
        current = current.parent
    return ScopeKind.PROGRAM


class CallKind(Enum):
    SERVICE = "service"
    REGISTER_ONE = "register-one"
    REGISTER_MANY = "register-many"


@dataclass
class _ScanContext:
    path: str
    aliases: Dict[Tuple[int, int, str], Set[str]] = field(default_factory=dict)


class ScriptScanner:
    """Extracts translation records from a parsed JavaScript tree."""

    def __init__(self, settings: Optional[ScriptSettings] = None,
                 reporter: Optional[DiagnosticReporter] = None):
        self.logger = logging.getLogger(__name__)
        self.settings = settings or ScriptSettings()
        self.reporter = reporter or DiagnosticReporter(self.settings.suppress_comment)

    def scan(self, tree: Union[Tree, Node], path: str) -> Iterator[ScanItem]:
        root = tree.root_node if isinstance(tree, Tree) else tree
        context = _ScanContext(path)
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "call_expression":
                kind = self.classify_call(node, context)
                if kind is not None:
                    yield from self._extract(node, kind, context)
            stack.extend(reversed(node.children))

    # -- recognition -------------------------------------------------------

    def classify_call(self, call: Node, context: _ScanContext) -> Optional[CallKind]:
        callee = _unwrap(call.child_by_field_name("function"))
        if callee is None:
            return None

        register = self._register_kind(callee)
        if register is not None:
            return register

        reference = self.resolve_reference(callee, context)
        if reference is None:
            return None
        service = self.settings.service_name
        if any(matcher(reference, service) for matcher in SERVICE_MATCHERS):
            return CallKind.SERVICE
        return None

    def resolve_reference(self, callee: Node, context: _ScanContext) -> Optional[ServiceReference]:
        if callee.type == "identifier":
            return ServiceReference(node_text(callee), ReceiverKind.NONE, scope_kind(callee))

        if callee.type != "member_expression":
            return None
        obj = _unwrap(callee.child_by_field_name("object"))
        prop = callee.child_by_field_name("property")
        if obj is None or prop is None or prop.type != "property_identifier":
            return None

        if obj.type == "this":
            receiver = ReceiverKind.THIS
        elif obj.type == "identifier" and self._is_this_alias(node_text(obj), callee, context):
            receiver = ReceiverKind.ALIAS
        else:
            return None
        return ServiceReference(node_text(prop), receiver, scope_kind(callee))

    def _register_kind(self, callee: Node) -> Optional[CallKind]:
        if callee.type != "member_expression":
            return None
        obj = _unwrap(callee.child_by_field_name("object"))
        prop = callee.child_by_field_name("property")
        if obj is None or prop is None or obj.type != "identifier":
            return None
        if node_text(obj) != self.settings.register_object:
            return None
        name = node_text(prop)
        if name == self.settings.register_function:
            return CallKind.REGISTER_ONE
        if name == self.settings.register_many_function:
            return CallKind.REGISTER_MANY
        return None

    def _is_this_alias(self, name: str, node: Node, context: _ScanContext) -> bool:
        current = node.parent
        while current is not None:
            if current.type in FUNCTION_TYPES or current.type == "program":
                if name in self._scope_aliases(current, context):
                    return True
            current = current.parent
        return False

    def _scope_aliases(self, scope: Node, context: _ScanContext) -> Set[str]:
        """Names bound to ``this`` directly inside ``scope`` (nested functions excluded)."""
        key = (scope.start_byte, scope.end_byte, scope.type)
        cached = context.aliases.get(key)
        if cached is not None:
            return cached

        aliases: Set[str] = set()
        stack = list(scope.children)
        while stack:
            node = stack.pop()
            if node.type in FUNCTION_TYPES:
                continue
            if node.type == "variable_declarator":
                name = node.child_by_field_name("name")
                value = _unwrap(node.child_by_field_name("value"))
                if name is not None and name.type == "identifier" and value is not None and value.type == "this":
                    aliases.add(node_text(name))
            elif node.type == "assignment_expression":
                left = node.child_by_field_name("left")
                right = _unwrap(node.child_by_field_name("right"))
                if left is not None and left.type == "identifier" and right is not None and right.type == "this":
                    aliases.add(node_text(left))
            stack.extend(node.children)

        context.aliases[key] = aliases
        return aliases

    # -- extraction --------------------------------------------------------

    def _extract(self, call: Node, kind: CallKind, context: _ScanContext) -> Iterator[ScanItem]:
        row, column = call.start_point
        resource = Resource(context.path, row + 1, column + 1)
        args_node = call.child_by_field_name("arguments")
        if args_node is None or args_node.type != "arguments":
            # tagged template: $translate`...`
            return
        args = _named(args_node)
        if not args:
            yield self.reporter.empty_id(resource)
            return

        suppressed = self._is_suppressed(call)
        first = _unwrap(args[0])
        second = _unwrap(args[1]) if len(args) > 1 else None

        if kind is CallKind.REGISTER_MANY:
            items = self._register_many(first, resource)
        elif kind is CallKind.SERVICE and first.type == "array":
            items = self._array_call(first, second, resource)
        else:
            translation_id = self.literal_or_unresolved(first)
            items = [self._record(translation_id, self._single_default(second), resource)]

        for item in items:
            if isinstance(item, TranslationRecord) and item.is_dynamic and suppressed:
                self.logger.debug(f"Suppressed dynamic translation {item.key!r} at {resource}")
                continue
            yield item

    def _array_call(self, ids: Node, defaults: Optional[Node], resource: Resource) -> List[ScanItem]:
        lookup = self._default_lookup(defaults)
        items = []
        for element in _named(ids):
            translation_id = self.literal_or_unresolved(element)
            items.append(self._record(translation_id, lookup(translation_id), resource))
        return items

    def _register_many(self, mapping: Node, resource: Resource) -> List[ScanItem]:
        if mapping.type != "object":
            return [self._record(Unresolved(node_text(mapping)), None, resource)]
        items = []
        for key, key_node, value in self._object_entries(mapping):
            translation_id = Literal(key) if key is not None else Unresolved(node_text(key_node))
            items.append(self._record(translation_id, value, resource))
        return items

    def _record(self, translation_id: TextValue, default_text: Optional[TextValue],
                resource: Resource) -> ScanItem:
        if translation_id == Literal(""):
            return self.reporter.empty_id(resource)
        return TranslationRecord(translation_id, default_text, (resource,))

    def _single_default(self, node: Optional[Node]) -> Optional[TextValue]:
        if node is None or node.type in ABSENT_TYPES:
            return None
        return self.literal_or_unresolved(node)

    def _default_lookup(self, node: Optional[Node]) -> Callable[[TextValue], Optional[TextValue]]:
        if node is None or node.type in ABSENT_TYPES:
            return lambda translation_id: None

        if node.type != "object":
            unresolved = Unresolved(node_text(node))
            return lambda translation_id: unresolved

        mapping: Dict[str, TextValue] = {}
        is_open = False
        for key, _, value in self._object_entries(node):
            if key is None:
                is_open = True
            elif key not in mapping:
                mapping[key] = value
        fallback = Unresolved(node_text(node)) if is_open else None

        def lookup(translation_id: TextValue) -> Optional[TextValue]:
            if isinstance(translation_id, Literal) and translation_id.value in mapping:
                return mapping[translation_id.value]
            return fallback

        return lookup

    def _object_entries(self, obj: Node) -> List[Tuple[Optional[str], Node, TextValue]]:
        """(key, key node, value) per property; key is None when not static."""
        entries = []
        for child in _named(obj):
            if child.type == "pair":
                key_node = child.child_by_field_name("key")
                value_node = child.child_by_field_name("value")
                entries.append((self._property_key(key_node), key_node,
                                self.literal_or_unresolved(value_node)))
            elif child.type == "shorthand_property_identifier":
                name = node_text(child)
                entries.append((name, child, Unresolved(name)))
            elif child.type == "method_definition":
                name_node = child.child_by_field_name("name")
                entries.append((self._property_key(name_node), name_node, Unresolved(node_text(child))))
            else:
                # spread_element and anything else hides its keys
                entries.append((None, child, Unresolved(node_text(child))))
        return entries

    def _property_key(self, node: Optional[Node]) -> Optional[str]:
        if node is None:
            return None
        if node.type in ("property_identifier", "number"):
            return node_text(node)
        value = self.literal_or_unresolved(node)
        return value.value if isinstance(value, Literal) else None

    def literal_or_unresolved(self, node: Node) -> TextValue:
        node = _unwrap(node)
        if node is None:
            return Unresolved("")
        text = node_text(node)
        if node.type == "string":
            return Literal(_unescape_js(text[1:-1]))
        if node.type == "template_string":
            if not any(c.type == "template_substitution" for c in node.children):
                return Literal(_unescape_js(text[1:-1]))
        return Unresolved(text)

    def _is_suppressed(self, call: Node) -> bool:
        marker = self.settings.suppress_comment
        args = call.child_by_field_name("arguments")
        if args is not None and any(c.type == "comment" and marker in node_text(c) for c in args.children):
            return True

        statement = call
        while statement.parent is not None and statement.parent.type not in BLOCK_TYPES:
            statement = statement.parent
        sibling = statement.prev_sibling
        while sibling is not None and sibling.type == "comment":
            if marker in node_text(sibling):
                return True
            sibling = sibling.prev_sibling
        return False


def scan_script(source: str, path: str, settings: Optional[ScriptSettings] = None) -> Tuple[ScanItem, ...]:
    """Parse and scan a script in one go."""
    return tuple(ScriptScanner(settings).scan(parse_script(source, path), path))
