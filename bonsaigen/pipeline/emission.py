"""Emission of generated partial type declarations."""

from __future__ import annotations

import unicodedata
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader

from ..logging import get_logger
from ..models import Candidate, Emitted, GeneratedUnit, SkippedMember, TypeSymbol
from .body import extract_expression
from .signature import serialize_signature

_LOGGER = get_logger("emission")

UNIT_TEMPLATE = "unit.cs.j2"
NO_EXPRESSION_BODY = "getter is not a single expression"

_ESCAPES: Dict[str, str] = {
    '"': '\\"',
    "\\": "\\\\",
    "\0": "\\0",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}

# characters a C# regular string literal cannot carry verbatim
_UNICODE_ESCAPED_CATEGORIES = {"Cc", "Cs", "Zl", "Zp"}


def format_literal(value: str) -> str:
    """Return ``value`` as a quoted C# regular string literal."""
    out: List[str] = ['"']
    for char in value:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            out.append(escaped)
        elif unicodedata.category(char) in _UNICODE_ESCAPED_CATEGORIES:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


def bonsai_text(candidate: Candidate, expression: str) -> str:
    """Return the unquoted payload returned by a generated ``*Bonsai()`` method."""
    return serialize_signature(candidate.declared_type) + " Expression: " + expression


def hint_name_for(owner: TypeSymbol, qualified: bool = False) -> str:
    """Return the unit file name; generic owners carry their arity (``Box_1``)."""
    stem = f"{owner.name}_{owner.arity}" if owner.arity else owner.name
    if qualified and owner.namespace.name:
        stem = f"{owner.namespace.name}.{stem}"
    return f"{stem}_GenerateBonsai.g.cs"


@dataclass(frozen=True)
class _Member:
    name: str
    is_static: bool
    literal: str


class Emitter:
    """Renders one generated unit per qualifying owning type."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._env = self._create_env(templates_dir)

    def emit_all(self, groups: Sequence[Tuple[TypeSymbol, Sequence[Candidate]]]) -> List[Emitted]:
        """Emit every group, disambiguating hint names of owners that share a simple name."""
        name_counts = Counter((owner.name, owner.arity) for owner, _ in groups)
        return [
            self.emit(owner, candidates, qualified_hint=name_counts[(owner.name, owner.arity)] > 1)
            for owner, candidates in groups
        ]

    def emit(
        self,
        owner: TypeSymbol,
        candidates: Sequence[Candidate],
        *,
        qualified_hint: bool = False,
    ) -> Emitted:
        members: List[_Member] = []
        skipped: List[SkippedMember] = []
        for candidate in candidates:
            expression = extract_expression(candidate.declaration)
            if expression is None:
                _LOGGER.debug(
                    "Omitting %s.%s: %s", owner.display_name, candidate.name, NO_EXPRESSION_BODY
                )
                skipped.append(SkippedMember(candidate=candidate, reason=NO_EXPRESSION_BODY))
                continue
            members.append(
                _Member(
                    name=candidate.name,
                    is_static=candidate.is_static,
                    literal=format_literal(bonsai_text(candidate, expression)),
                )
            )

        template = self._env.get_template(UNIT_TEMPLATE)
        text = template.render(
            namespace=owner.namespace.name,
            keyword=owner.keyword,
            type_name=owner.declaration_name,
            members=members,
        )
        unit = GeneratedUnit(
            hint_name=hint_name_for(owner, qualified=qualified_hint),
            text=text,
            namespace=owner.namespace.name,
            type_name=owner.declaration_name,
        )
        return Emitted(
            unit=unit,
            owner=owner,
            members=tuple(f"{member.name}Bonsai" for member in members),
            skipped_members=tuple(skipped),
        )

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).resolve().parent.parent / "templates"))
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )


__all__ = ["Emitter", "NO_EXPRESSION_BODY", "bonsai_text", "format_literal", "hint_name_for"]
