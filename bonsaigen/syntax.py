"""Syntax-level view of property declarations handed to the pipeline by a host."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class BodyKind(str, Enum):
    """Shape of an accessor body."""

    EXPRESSION = "expression"
    ACCESSOR_EXPRESSION = "accessor_expression"
    BLOCK = "block"
    NONE = "none"


@dataclass(frozen=True)
class AccessorSyntax:
    """A single accessor (`get`, `set`, `init`) of a property declaration."""

    keyword: str
    body: BodyKind = BodyKind.NONE
    expression: Optional[str] = None


@dataclass(frozen=True)
class PropertyDeclaration:
    """Property declaration node as parsed by the host.

    An expression-bodied property (``P => expr;``) is modelled as a ``get``
    accessor whose body is that expression. An arrow on the accessor itself
    (``{ get => expr; }``) is kept apart as ``ACCESSOR_EXPRESSION``.
    """

    name: str
    attribute_names: Tuple[str, ...] = ()
    accessors: Tuple[AccessorSyntax, ...] = ()
    path: str = ""
    line: int = 0
    node_id: int = field(default=0, compare=False)

    @property
    def getter(self) -> Optional[AccessorSyntax]:
        for accessor in self.accessors:
            if accessor.keyword == "get":
                return accessor
        return None

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}" if self.path else f"<memory>:{self.line}"


__all__ = ["AccessorSyntax", "BodyKind", "PropertyDeclaration"]
