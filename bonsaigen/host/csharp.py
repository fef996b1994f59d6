"""Tree-sitter powered C# compilation host."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import tree_sitter
import tree_sitter_c_sharp

from ..logging import get_logger
from ..models import (
    MARKER_ATTRIBUTE,
    NamespaceSymbol,
    PropertySymbol,
    SourceManifest,
    TypeRef,
    TypeSymbol,
)
from ..syntax import AccessorSyntax, BodyKind, PropertyDeclaration
from .base import SemanticHost


class HostError(RuntimeError):
    """Raised when the C# grammar cannot be loaded."""


_TYPE_DECLARATIONS = {
    "class_declaration": "class",
    "struct_declaration": "struct",
    "interface_declaration": "interface",
    "record_declaration": "record",
    "record_struct_declaration": "record struct",
}

_ACCESSOR_KEYWORDS = {"get", "set", "init"}

_PREDEFINED_VALUE_TYPES = {
    "bool", "byte", "sbyte", "char", "decimal", "double", "float",
    "int", "uint", "long", "ulong", "short", "ushort", "nint", "nuint",
}

# BCL delegates that resolve without a declaration in the program
_WELL_KNOWN_TYPES: Dict[Tuple[str, int], str] = {
    **{("System.Func", arity): "delegate" for arity in range(1, 18)},
    **{("System.Action", arity): "delegate" for arity in range(0, 17)},
    ("System.Predicate", 1): "delegate",
    ("System.Comparison", 1): "delegate",
    ("System.Converter", 2): "delegate",
    ("System.EventHandler", 0): "delegate",
    ("System.EventHandler", 1): "delegate",
    (MARKER_ATTRIBUTE, 0): "class",
}

# implicit global usings of an SDK-style project
_IMPLICIT_USINGS = ("System",)

_WHITESPACE = re.compile(r"\s+")

_LOGGER = get_logger("host.csharp")


def load_language() -> tree_sitter.Language:
    try:
        return tree_sitter.Language(tree_sitter_c_sharp.language())
    except (TypeError, ValueError) as exc:
        raise HostError(f"Failed to load the C# tree-sitter grammar: {exc}") from exc


def _node_text(node, source_bytes: bytes) -> str:  # type: ignore[no-untyped-def]
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _normalise_name(text: str) -> str:
    text = _WHITESPACE.sub("", text)
    if text.startswith("global::"):
        text = text[len("global::") :]
    return text.replace("::", ".")


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _namespace_chain(namespace: str) -> List[str]:
    chain: List[str] = []
    current = namespace
    while current:
        chain.append(current)
        current = current.rpartition(".")[0]
    chain.append("")
    return chain


@dataclass
class _FileContext:
    """Using scope of a file, or of a block namespace body inside it."""

    path: str
    source: bytes
    usings: List[str] = field(default_factory=list)
    aliases: Dict[str, str] = field(default_factory=dict)
    type_aliases: Dict[str, "_AliasTarget"] = field(default_factory=dict)

    def nested(self) -> "_FileContext":
        return _FileContext(
            path=self.path,
            source=self.source,
            usings=list(self.usings),
            aliases=dict(self.aliases),
            type_aliases=dict(self.type_aliases),
        )


@dataclass(frozen=True)
class _AliasTarget:
    node: object
    scope: _FileContext


@dataclass(frozen=True)
class _TypeName:
    """A type reference as written: optional qualifier, simple name, argument nodes."""

    name: str
    qualifier: Optional[str]
    arguments: Tuple[object, ...] = ()


@dataclass
class _PropertyRecord:
    declaration: PropertyDeclaration
    node: object
    file: _FileContext
    namespace: str
    owner: TypeSymbol
    is_static: bool


class CSharpCompilation(SemanticHost):
    """Parses C# sources and answers the symbol questions the pipeline asks."""

    def __init__(self, sources: Mapping[str, str], language: tree_sitter.Language | None = None) -> None:
        self._language = language or load_language()
        self._parser = tree_sitter.Parser()
        self._parser.language = self._language
        self._types: Dict[Tuple[str, int], str] = dict(_WELL_KNOWN_TYPES)
        self._global_usings: List[str] = list(_IMPLICIT_USINGS)
        self._global_aliases: Dict[str, str] = {}
        self._global_type_aliases: Dict[str, _AliasTarget] = {}
        self._properties: List[_PropertyRecord] = []
        self._by_id: Dict[int, _PropertyRecord] = {}
        self.error_count = 0

        for path in sorted(sources):
            self._parse_file(path, sources[path])

    @classmethod
    def from_sources(cls, sources: Mapping[str, str]) -> "CSharpCompilation":
        return cls(sources)

    @classmethod
    def from_manifest(cls, manifest: SourceManifest) -> "CSharpCompilation":
        root = Path(manifest.root)
        sources: Dict[str, str] = {}
        for meta in manifest.files:
            try:
                sources[meta.path] = (root / meta.path).read_text(encoding="utf-8-sig")
            except (OSError, UnicodeDecodeError) as exc:
                _LOGGER.warning("Skipping unreadable source %s: %s", meta.path, exc)
        return cls(sources)

    # ------------------------------------------------------------------
    # SemanticHost

    def iter_property_declarations(self) -> Iterator[PropertyDeclaration]:
        for record in self._properties:
            yield record.declaration

    def resolve_symbol(self, node: PropertyDeclaration) -> Optional[PropertySymbol]:
        record = self._by_id.get(node.node_id)
        if record is None or record.declaration != node:
            return None
        type_node = record.node.child_by_field_name("type")  # type: ignore[attr-defined]
        if type_node is None:
            return None
        return PropertySymbol(
            name=node.name,
            is_static=record.is_static,
            type=self._resolve_type(type_node, record),
            containing_type=record.owner,
            attributes=tuple(self._resolve_attributes(record)),
            has_getter=node.getter is not None,
        )

    # ------------------------------------------------------------------
    # Parsing

    def _parse_file(self, path: str, text: str) -> None:
        source = text.encode("utf-8")
        tree = self._parser.parse(source)
        if tree.root_node.has_error:
            self.error_count += 1
            _LOGGER.debug("Syntax errors in %s; unparsable regions are ignored", path)
        context = _FileContext(path=path, source=source)
        self._walk(tree.root_node, context, namespace="", owner=None)

    def _walk(self, node, context: _FileContext, *, namespace: str, owner: TypeSymbol | None) -> None:  # type: ignore[no-untyped-def]
        for child in node.children:
            kind = child.type
            if kind == "file_scoped_namespace_declaration":
                # applies to the following siblings and, in older grammars, to its own children
                namespace = _join(namespace, self._name_of(child, context))
                self._walk(child, context, namespace=namespace, owner=None)
            elif kind == "namespace_declaration":
                nested = _join(namespace, self._name_of(child, context))
                body = child.child_by_field_name("body")
                if body is not None:
                    self._walk(body, context.nested(), namespace=nested, owner=None)
            elif kind == "using_directive":
                self._record_using(child, context)
            elif kind in _TYPE_DECLARATIONS:
                self._record_type(child, context, namespace=namespace, owner=owner)
            elif kind == "enum_declaration":
                name = self._name_of(child, context)
                if name:
                    self._types[(self._full_name(name, namespace, owner), 0)] = "enum"
            elif kind == "delegate_declaration":
                name = self._name_of(child, context)
                if name:
                    arity = len(self._type_parameters(child, context))
                    self._types[(self._full_name(name, namespace, owner), arity)] = "delegate"
            elif kind == "property_declaration" and owner is not None:
                self._record_property(child, context, namespace=namespace, owner=owner)
            elif kind == "declaration_list":
                self._walk(child, context, namespace=namespace, owner=owner)

    def _record_type(self, node, context: _FileContext, *, namespace: str, owner: TypeSymbol | None) -> None:  # type: ignore[no-untyped-def]
        name = self._name_of(node, context)
        if not name:
            return
        keyword = _TYPE_DECLARATIONS[node.type]
        if node.type == "record_declaration" and any(child.type == "struct" for child in node.children):
            keyword = "record struct"
        ns_symbol = NamespaceSymbol(namespace)
        symbol = TypeSymbol(
            name=name,
            namespace=ns_symbol,
            container=owner if owner is not None else ns_symbol,
            keyword=keyword,
            type_parameters=self._type_parameters(node, context),
        )
        self._types[(symbol.display_name, len(symbol.type_parameters))] = keyword
        body = node.child_by_field_name("body")
        if body is not None:
            self._walk(body, context, namespace=namespace, owner=symbol)

    def _record_property(self, node, context: _FileContext, *, namespace: str, owner: TypeSymbol) -> None:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        attribute_names: List[str] = []
        modifiers: List[str] = []
        accessors: List[AccessorSyntax] = []
        for child in node.children:
            if child.type == "attribute_list":
                attribute_names.extend(self._attribute_names(child, context))
            elif child.type == "modifier":
                modifiers.append(_node_text(child, context.source).strip())
            elif child.type == "static":
                modifiers.append("static")
            elif child.type == "accessor_list":
                accessors.extend(self._accessors(child, context))
            elif child.type == "arrow_expression_clause":
                accessors.append(self._arrow_accessor("get", child, context))

        declaration = PropertyDeclaration(
            name=_node_text(name_node, context.source),
            attribute_names=tuple(attribute_names),
            accessors=tuple(accessors),
            path=context.path,
            line=node.start_point[0] + 1,
            node_id=len(self._properties) + 1,
        )
        record = _PropertyRecord(
            declaration=declaration,
            node=node,
            file=context,
            namespace=namespace,
            owner=owner,
            is_static="static" in modifiers,
        )
        self._properties.append(record)
        self._by_id[declaration.node_id] = record

    def _record_using(self, node, context: _FileContext) -> None:  # type: ignore[no-untyped-def]
        child_types = {child.type for child in node.children}
        if "static" in child_types:
            return
        named = [child for child in node.children if child.is_named and child.type != "comment"]
        if not named:
            return
        is_global = "global" in child_types
        target = _normalise_name(_node_text(named[-1], context.source))
        if ("=" in child_types or "name_equals" in child_types) and len(named) >= 2:
            alias = _node_text(named[0], context.source).replace("=", "").strip()
            (self._global_aliases if is_global else context.aliases)[alias] = target
            (self._global_type_aliases if is_global else context.type_aliases)[alias] = _AliasTarget(
                node=named[-1], scope=context
            )
        elif is_global:
            self._global_usings.append(target)
        else:
            context.usings.append(target)

    def _accessors(self, node, context: _FileContext) -> Iterator[AccessorSyntax]:  # type: ignore[no-untyped-def]
        for child in node.children:
            if child.type != "accessor_declaration":
                continue
            keyword = ""
            body = BodyKind.NONE
            arrow = None
            for part in child.children:
                if part.type in _ACCESSOR_KEYWORDS:
                    keyword = part.type
                elif part.type == "block":
                    body = BodyKind.BLOCK
                elif part.type == "arrow_expression_clause":
                    arrow = part
            if not keyword:
                name_node = child.child_by_field_name("name")
                keyword = _node_text(name_node, context.source) if name_node is not None else ""
            if arrow is not None:
                yield self._arrow_accessor(keyword, arrow, context, BodyKind.ACCESSOR_EXPRESSION)
            else:
                yield AccessorSyntax(keyword=keyword, body=body)

    @staticmethod
    def _arrow_accessor(  # type: ignore[no-untyped-def]
        keyword: str, node, context: _FileContext, body: BodyKind = BodyKind.EXPRESSION
    ) -> AccessorSyntax:
        for child in node.children:
            if child.is_named and child.type != "comment":
                return AccessorSyntax(
                    keyword=keyword,
                    body=body,
                    expression=_node_text(child, context.source),
                )
        return AccessorSyntax(keyword=keyword, body=BodyKind.NONE)

    @staticmethod
    def _attribute_names(node, context: _FileContext) -> Iterator[str]:  # type: ignore[no-untyped-def]
        for child in node.children:
            if child.type != "attribute":
                continue
            name_node = child.child_by_field_name("name")
            if name_node is None:
                name_node = next((part for part in child.children if part.is_named), None)
            if name_node is not None:
                yield _node_text(name_node, context.source)

    @staticmethod
    def _name_of(node, context: _FileContext) -> str:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        if name_node is None:
            for child in node.children:
                if child.type in ("identifier", "qualified_name"):
                    name_node = child
                    break
        return _normalise_name(_node_text(name_node, context.source)) if name_node is not None else ""

    @staticmethod
    def _type_parameters(node, context: _FileContext) -> Tuple[str, ...]:  # type: ignore[no-untyped-def]
        for child in node.children:
            if child.type == "type_parameter_list":
                names: List[str] = []
                for parameter in child.children:
                    if parameter.type != "type_parameter":
                        continue
                    name_node = parameter.child_by_field_name("name")
                    if name_node is None:
                        name_node = next(
                            (part for part in parameter.children if part.type == "identifier"),
                            None,
                        )
                    if name_node is not None:
                        names.append(_node_text(name_node, context.source))
                return tuple(names)
        return ()

    @staticmethod
    def _full_name(name: str, namespace: str, owner: TypeSymbol | None) -> str:
        if owner is not None:
            return f"{owner.display_name}.{name}"
        return _join(namespace, name)

    # ------------------------------------------------------------------
    # Resolution

    def _resolve_attributes(self, record: _PropertyRecord) -> Iterable[str]:
        for written in record.declaration.attribute_names:
            type_name = self._split_name(written)
            simple = type_name.name
            candidates = [simple] if simple.endswith("Attribute") else [simple, f"{simple}Attribute"]
            for name in candidates:
                resolved = self._lookup(
                    _TypeName(name=name, qualifier=type_name.qualifier),
                    arity=0,
                    record=record,
                )
                if resolved is not None:
                    yield resolved
                    break

    def _resolve_type(  # type: ignore[no-untyped-def]
        self,
        node,
        record: _PropertyRecord,
        scope: _FileContext | None = None,
        *,
        allow_alias: bool = True,
    ) -> TypeRef:
        scope = scope or record.file
        if node.type == "nullable_type":
            inner = next((child for child in node.children if child.is_named), None)
            if inner is not None:
                return self._resolve_type(inner, record, scope, allow_alias=allow_alias)
        if node.type == "predefined_type":
            text = _node_text(node, scope.source)
            return TypeRef(name=text, kind="struct" if text in _PREDEFINED_VALUE_TYPES else "class")

        type_name = self._type_name(node, scope)
        if type_name is None:
            return TypeRef(name=_node_text(node, scope.source))

        if allow_alias and type_name.qualifier is None and not type_name.arguments:
            alias = self._alias_target(type_name.name, record)
            if alias is not None and self._lookup_enclosing(type_name.name, 0, record) is None:
                # alias targets are resolved without consulting other aliases
                return self._resolve_type(alias.node, record, alias.scope, allow_alias=False)

        arguments = tuple(
            TypeRef(name=self._argument_name(argument, scope)) for argument in type_name.arguments
        )
        resolved = self._lookup(type_name, arity=len(arguments), record=record)
        kind = self._types.get((resolved, len(arguments)), "unknown") if resolved else "unknown"
        return TypeRef(name=type_name.name, kind=kind, type_arguments=arguments)

    def _alias_target(self, name: str, record: _PropertyRecord) -> Optional[_AliasTarget]:
        return record.file.type_aliases.get(name) or self._global_type_aliases.get(name)

    def _type_name(self, node, context: _FileContext) -> Optional[_TypeName]:  # type: ignore[no-untyped-def]
        if node.type == "identifier":
            return _TypeName(name=_node_text(node, context.source), qualifier=None)
        if node.type == "generic_name":
            identifier = next((child for child in node.children if child.type == "identifier"), None)
            argument_list = next(
                (child for child in node.children if child.type == "type_argument_list"), None
            )
            if identifier is None:
                return None
            arguments: Tuple[object, ...] = ()
            if argument_list is not None:
                arguments = tuple(
                    child for child in argument_list.children if child.is_named and child.type != "comment"
                )
            return _TypeName(name=_node_text(identifier, context.source), qualifier=None, arguments=arguments)
        if node.type in ("qualified_name", "alias_qualified_name"):
            name_node = node.child_by_field_name("name")
            qualifier_node = node.child_by_field_name("qualifier") or node.child_by_field_name("alias")
            if name_node is None:
                named = [child for child in node.children if child.is_named]
                if not named:
                    return None
                name_node = named[-1]
                qualifier_node = named[0] if len(named) > 1 else None
            inner = self._type_name(name_node, context)
            if inner is None:
                return None
            qualifier = _normalise_name(_node_text(qualifier_node, context.source)) if qualifier_node else None
            if qualifier == "global":
                qualifier = None
            return _TypeName(name=inner.name, qualifier=qualifier or None, arguments=inner.arguments)
        return None

    def _argument_name(self, node, context: _FileContext) -> str:  # type: ignore[no-untyped-def]
        if node.type == "predefined_type":
            return _node_text(node, context.source)
        type_name = self._type_name(node, context)
        if type_name is not None:
            return type_name.name
        return _node_text(node, context.source)

    def _split_name(self, written: str) -> _TypeName:
        text = _normalise_name(written)
        text = text.split("<", 1)[0]
        qualifier, _, name = text.rpartition(".")
        return _TypeName(name=name, qualifier=qualifier or None)

    def _lookup(self, type_name: _TypeName, *, arity: int, record: _PropertyRecord) -> Optional[str]:
        aliases = {**self._global_aliases, **record.file.aliases}
        namespaces = _namespace_chain(record.namespace)

        if type_name.qualifier is not None:
            head, _, rest = type_name.qualifier.partition(".")
            qualifier = type_name.qualifier
            if head in aliases:
                qualifier = _join(aliases[head], rest) if rest else aliases[head]
            for prefix in namespaces:
                full = _join(prefix, f"{qualifier}.{type_name.name}")
                if (full, arity) in self._types:
                    return full
            return None

        found = self._lookup_enclosing(type_name.name, arity, record)
        if found is not None:
            return found

        if arity == 0 and type_name.name in aliases:
            target = aliases[type_name.name]
            if (target, 0) in self._types:
                return target

        for using in self._usings_for(record):
            full = _join(using, type_name.name)
            if (full, arity) in self._types:
                return full
        return None

    def _lookup_enclosing(self, name: str, arity: int, record: _PropertyRecord) -> Optional[str]:
        """Resolve ``name`` against the enclosing types, then the enclosing namespaces."""
        owner: TypeSymbol | None = record.owner
        while owner is not None:
            full = f"{owner.display_name}.{name}"
            if (full, arity) in self._types:
                return full
            owner = owner.container if isinstance(owner.container, TypeSymbol) else None

        for prefix in _namespace_chain(record.namespace):
            full = _join(prefix, name)
            if (full, arity) in self._types:
                return full
        return None

    def _usings_for(self, record: _PropertyRecord) -> Sequence[str]:
        return [*record.file.usings, *self._global_usings]


__all__ = ["CSharpCompilation", "HostError", "load_language"]
