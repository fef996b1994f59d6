"""Single-expression body extraction."""

from __future__ import annotations

from typing import Optional

from ..syntax import BodyKind, PropertyDeclaration


def extract_expression(declaration: PropertyDeclaration) -> Optional[str]:
    """Return the verbatim getter expression, or None when the getter is not expression-bodied."""
    getter = declaration.getter
    if getter is None or getter.body is not BodyKind.EXPRESSION:
        return None
    return getter.expression


__all__ = ["extract_expression"]
