"""Fixed source unit declaring the marker attribute."""

from __future__ import annotations

from ..models import GeneratedUnit

BOOTSTRAP_HINT_NAME = "GenerateBonsaiAttribute.g.cs"

ATTRIBUTE_TEXT = """\
// <auto-generated/>
namespace Corvus.Expressions.SourceGenerator;

using System;

[AttributeUsage(AttributeTargets.Property, Inherited = false, AllowMultiple = false)]
sealed class GenerateBonsaiAttribute : Attribute
{
    public GenerateBonsaiAttribute()
    {
    }
}
"""


def bootstrap_unit() -> GeneratedUnit:
    return GeneratedUnit(hint_name=BOOTSTRAP_HINT_NAME, text=ATTRIBUTE_TEXT)


__all__ = ["ATTRIBUTE_TEXT", "BOOTSTRAP_HINT_NAME", "bootstrap_unit"]
