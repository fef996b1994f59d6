"""Writes generated units to the project's output directory."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence

from ..logging import get_logger
from ..models import GeneratedUnit

MANIFEST_FILENAME = "manifest.json"
_MANIFEST_VERSION = 1


@dataclass
class WriteOutcome:
    """Files touched by one write of a generation pass."""

    output_dir: Path
    written: List[Path] = field(default_factory=list)
    unchanged: List[Path] = field(default_factory=list)
    removed: List[Path] = field(default_factory=list)
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.written or self.removed)


class OutputWriter:
    """Materializes units as ``.g.cs`` files, rewriting only what changed."""

    def __init__(self) -> None:
        self.logger = get_logger("writer")

    def write(
        self,
        units: Sequence[GeneratedUnit],
        output_dir: Path,
        *,
        fingerprint: str = "",
        prune_stale: bool = True,
        dry_run: bool = False,
    ) -> WriteOutcome:
        outcome = WriteOutcome(output_dir=output_dir, dry_run=dry_run)
        previous = self._load_manifest(output_dir)
        current: Dict[str, str] = {}

        for unit in units:
            target = output_dir / unit.hint_name
            current[unit.hint_name] = _digest(unit.text)
            if target.exists() and target.read_text(encoding="utf-8") == unit.text:
                outcome.unchanged.append(target)
                continue
            outcome.written.append(target)
            if not dry_run:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(unit.text, encoding="utf-8", newline="\n")
                self.logger.debug("Wrote %s", target)

        if prune_stale:
            for hint_name in sorted(set(previous) - set(current)):
                stale = output_dir / hint_name
                if not stale.exists():
                    continue
                outcome.removed.append(stale)
                if not dry_run:
                    stale.unlink()
                    self.logger.debug("Removed stale unit %s", stale)

        if not dry_run and (outcome.changed or previous != current):
            self._store_manifest(output_dir, current, fingerprint)
        return outcome

    @staticmethod
    def _load_manifest(output_dir: Path) -> Dict[str, str]:
        path = output_dir / MANIFEST_FILENAME
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            return {}
        if not isinstance(payload, dict) or payload.get("version") != _MANIFEST_VERSION:
            return {}
        units = payload.get("units")
        if not isinstance(units, dict):
            return {}
        return {
            name: digest
            for name, digest in units.items()
            if isinstance(name, str) and isinstance(digest, str)
        }

    @staticmethod
    def _store_manifest(output_dir: Path, units: Dict[str, str], fingerprint: str) -> None:
        output_dir.mkdir(parents=True, exist_ok=True)
        payload = {"version": _MANIFEST_VERSION, "fingerprint": fingerprint, "units": units}
        (output_dir / MANIFEST_FILENAME).write_text(
            json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
        )


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


__all__ = ["MANIFEST_FILENAME", "OutputWriter", "WriteOutcome"]
