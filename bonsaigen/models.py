"""Core data models shared across bonsaigen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .syntax import PropertyDeclaration

MARKER_ATTRIBUTE = "Corvus.Expressions.SourceGenerator.GenerateBonsaiAttribute"


@dataclass(frozen=True)
class NamespaceSymbol:
    """A namespace; the global namespace has an empty name."""

    name: str = ""

    @property
    def is_global(self) -> bool:
        return not self.name


@dataclass(frozen=True)
class TypeRef:
    """Declared type of a property as resolved by the host."""

    name: str
    kind: str = "unknown"
    type_arguments: Tuple["TypeRef", ...] = ()

    @property
    def is_function(self) -> bool:
        return self.kind == "delegate"


@dataclass(frozen=True)
class TypeSymbol:
    """A type declaration that may own annotated properties."""

    name: str
    namespace: NamespaceSymbol
    container: Union[NamespaceSymbol, "TypeSymbol"]
    keyword: str = "class"
    type_parameters: Tuple[str, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.type_parameters)

    @property
    def key(self) -> Tuple[str, str, int]:
        return (self.namespace.name, self.name, self.arity)

    @property
    def declaration_name(self) -> str:
        if self.type_parameters:
            return f"{self.name}<{', '.join(self.type_parameters)}>"
        return self.name

    @property
    def display_name(self) -> str:
        if isinstance(self.container, TypeSymbol):
            return f"{self.container.display_name}.{self.name}"
        return f"{self.namespace.name}.{self.name}" if self.namespace.name else self.name


@dataclass(frozen=True)
class PropertySymbol:
    """Semantic view of a property declaration."""

    name: str
    is_static: bool
    type: TypeRef
    containing_type: TypeSymbol
    attributes: Tuple[str, ...] = ()
    has_getter: bool = True


@dataclass(frozen=True)
class Candidate:
    """An annotated property discovered during a generation pass."""

    symbol: PropertySymbol
    declaration: PropertyDeclaration

    @property
    def name(self) -> str:
        return self.symbol.name

    @property
    def is_static(self) -> bool:
        return self.symbol.is_static

    @property
    def declared_type(self) -> TypeRef:
        return self.symbol.type

    @property
    def owner(self) -> TypeSymbol:
        return self.symbol.containing_type


@dataclass
class SourceFile:
    """Metadata for a C# source file included in a pass."""

    path: str
    size: int
    hash: str


@dataclass
class SourceManifest:
    """Normalized view of the project sources for a host."""

    root: str
    files: List[SourceFile]


@dataclass(frozen=True)
class GeneratedUnit:
    """A synthesized source file returned to the host."""

    hint_name: str
    text: str
    namespace: str = ""
    type_name: str = ""

    @property
    def key(self) -> Tuple[str, str]:
        return (self.namespace, self.type_name)


@dataclass(frozen=True)
class SkippedMember:
    """A candidate that produced no generated member."""

    candidate: Candidate
    reason: str


@dataclass(frozen=True)
class Emitted:
    """Outcome for an owning type that produced a generated unit."""

    unit: GeneratedUnit
    owner: TypeSymbol
    members: Tuple[str, ...] = ()
    skipped_members: Tuple[SkippedMember, ...] = ()


@dataclass(frozen=True)
class Skipped:
    """Outcome for an owning type that produced nothing."""

    owner: TypeSymbol
    reason: str
    candidates: Tuple[Candidate, ...] = ()


Outcome = Union[Emitted, Skipped]


@dataclass
class GenerationResult:
    """Everything one generation pass produced."""

    candidates: List[Candidate] = field(default_factory=list)
    outcomes: List[Outcome] = field(default_factory=list)
    bootstrap: Optional[GeneratedUnit] = None
    fingerprint: str = ""

    @property
    def units(self) -> List[GeneratedUnit]:
        units: List[GeneratedUnit] = []
        if self.bootstrap is not None:
            units.append(self.bootstrap)
        units.extend(outcome.unit for outcome in self.outcomes if isinstance(outcome, Emitted))
        return units

    @property
    def skipped(self) -> List[Skipped]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, Skipped)]


__all__ = [
    "MARKER_ATTRIBUTE",
    "Candidate",
    "Emitted",
    "GeneratedUnit",
    "GenerationResult",
    "NamespaceSymbol",
    "Outcome",
    "PropertySymbol",
    "Skipped",
    "SkippedMember",
    "SourceFile",
    "SourceManifest",
    "TypeRef",
    "TypeSymbol",
]
