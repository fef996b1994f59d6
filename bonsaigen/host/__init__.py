"""Compilation hosts the generation pipeline can run against."""

from .base import SemanticHost
from .csharp import CSharpCompilation, HostError

__all__ = ["CSharpCompilation", "HostError", "SemanticHost"]
