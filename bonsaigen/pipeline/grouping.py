"""Containment validation and grouping of candidates by owning type."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from ..host.base import SemanticHost
from ..logging import get_logger
from ..models import Candidate, Skipped, TypeSymbol

_LOGGER = get_logger("grouping")

NESTED_TYPE = "owning type is not declared directly in a namespace"


def qualifies(owner: TypeSymbol) -> bool:
    """Return True when ``owner`` is a top-level type of its namespace."""
    return owner.container == owner.namespace


def group_candidates(
    candidates: Iterable[Candidate], host: SemanticHost | None = None
) -> Tuple[List[Tuple[TypeSymbol, List[Candidate]]], List[Skipped]]:
    """Partition candidates by owning type.

    Owners keep first-seen order and candidates keep discovery order. Owners
    nested inside another type are returned as ``Skipped`` with all of their
    candidates.
    """
    order: List[Tuple[str, str, int]] = []
    owners: Dict[Tuple[str, str, int], TypeSymbol] = {}
    members: Dict[Tuple[str, str, int], List[Candidate]] = {}

    for candidate in candidates:
        owner = host.containing_type(candidate.symbol) if host is not None else candidate.owner
        key = _owner_key(owner)
        if key not in owners:
            order.append(key)
            owners[key] = owner
            members[key] = []
        members[key].append(candidate)

    groups: List[Tuple[TypeSymbol, List[Candidate]]] = []
    skipped: List[Skipped] = []
    for key in order:
        owner = owners[key]
        if not qualifies(owner):
            _LOGGER.debug(
                "Skipping %d candidate(s) on %s: %s",
                len(members[key]),
                owner.display_name,
                NESTED_TYPE,
            )
            skipped.append(Skipped(owner=owner, reason=NESTED_TYPE, candidates=tuple(members[key])))
            continue
        groups.append((owner, members[key]))
    return groups, skipped


def _owner_key(owner: TypeSymbol) -> Tuple[str, str, int]:
    # nested owners are keyed by their full display name so Outer.Inner never merges with Inner
    if qualifies(owner):
        return owner.key
    return (owner.namespace.name, owner.display_name, owner.arity)


__all__ = ["NESTED_TYPE", "group_candidates", "qualifies"]
