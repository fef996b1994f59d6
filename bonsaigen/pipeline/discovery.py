"""Candidate discovery over a host's property declarations."""

from __future__ import annotations

from typing import List

from ..host.base import SemanticHost
from ..logging import get_logger
from ..models import MARKER_ATTRIBUTE, Candidate

_LOGGER = get_logger("discovery")


def discover_candidates(host: SemanticHost, marker: str = MARKER_ATTRIBUTE) -> List[Candidate]:
    """Return annotated properties in discovery order.

    Declarations without attributes are skipped before any symbol resolution.
    Unresolvable declarations and properties without a getter are dropped.
    """
    candidates: List[Candidate] = []
    for node in host.iter_property_declarations():
        # any property with at least one attribute is worth resolving
        if not node.attribute_names:
            continue
        symbol = host.resolve_symbol(node)
        if symbol is None:
            _LOGGER.debug("Could not resolve property %s at %s", node.name, node.location)
            continue
        if marker not in host.get_attributes(symbol):
            continue
        if not symbol.has_getter or node.getter is None:
            _LOGGER.debug("Property %s at %s has no getter", node.name, node.location)
            continue
        candidates.append(Candidate(symbol=symbol, declaration=node))
    return candidates


__all__ = ["discover_candidates"]
