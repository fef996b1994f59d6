"""Type descriptor serialization for function-valued property types."""

from __future__ import annotations

from ..models import TypeRef


def serialize_signature(type_ref: TypeRef) -> str:
    """Return the canonical descriptor for ``type_ref``.

    Function-valued types serialize as their simple name followed by one
    ``" Argument {i}: {name}"`` segment per positional type argument. Nested
    type arguments are not descended into. Any other type yields ``""``.
    """
    if not type_ref.is_function:
        return ""

    parts = [type_ref.name]
    for index, argument in enumerate(type_ref.type_arguments):
        parts.append(f" Argument {index}: {argument.name}")
    return "".join(parts)


__all__ = ["serialize_signature"]
