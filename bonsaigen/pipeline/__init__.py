"""Generation pipeline stages."""

from .body import extract_expression
from .bootstrap import ATTRIBUTE_TEXT, BOOTSTRAP_HINT_NAME, bootstrap_unit
from .discovery import discover_candidates
from .emission import Emitter, format_literal
from .grouping import group_candidates, qualifies
from .signature import serialize_signature

__all__ = [
    "ATTRIBUTE_TEXT",
    "BOOTSTRAP_HINT_NAME",
    "Emitter",
    "bootstrap_unit",
    "discover_candidates",
    "extract_expression",
    "format_literal",
    "group_candidates",
    "qualifies",
    "serialize_signature",
]
