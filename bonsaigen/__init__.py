"""Build-time generator of *Bonsai() accessors for [GenerateBonsai] C# properties."""

from .generator import Generator
from .models import MARKER_ATTRIBUTE, GeneratedUnit, GenerationResult

__all__ = ["Generator", "GeneratedUnit", "GenerationResult", "MARKER_ATTRIBUTE"]

__version__ = "0.1.0"
