"""Generation pass orchestration."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from .config import BonsaiGenConfig, load_config
from .host.base import SemanticHost
from .host.csharp import CSharpCompilation
from .logging import get_logger
from .models import MARKER_ATTRIBUTE, Candidate, GenerationResult, Outcome, SourceManifest
from .output.writer import OutputWriter, WriteOutcome
from .pipeline.body import extract_expression
from .pipeline.bootstrap import bootstrap_unit
from .pipeline.discovery import discover_candidates
from .pipeline.emission import Emitter
from .pipeline.grouping import group_candidates
from .pipeline.signature import serialize_signature
from .source_scanner import SourceScanner

HostFactory = Callable[[SourceManifest], SemanticHost]


@dataclass
class PassOutcome:
    """Result of running a pass against a project directory."""

    config: BonsaiGenConfig
    result: GenerationResult
    write: WriteOutcome


def fingerprint_candidates(candidates: List[Candidate]) -> str:
    """Return a content fingerprint of the full candidate set, in discovery order."""
    entries = [
        {
            "owner": candidate.owner.display_name,
            "name": candidate.name,
            "static": candidate.is_static,
            "descriptor": serialize_signature(candidate.declared_type),
            "expression": extract_expression(candidate.declaration),
        }
        for candidate in candidates
    ]
    payload = json.dumps(entries, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class Generator:
    """Runs discovery, grouping and emission for one program state at a time."""

    def __init__(
        self,
        scanner: SourceScanner | None = None,
        writer: OutputWriter | None = None,
        emitter: Emitter | None = None,
        host_factory: HostFactory | None = None,
    ) -> None:
        self.scanner = scanner or SourceScanner()
        self.writer = writer or OutputWriter()
        self._emitter = emitter
        self._host_factory = host_factory or CSharpCompilation.from_manifest
        self.logger = get_logger("generator")

    def run(
        self,
        host: SemanticHost,
        *,
        marker: str = MARKER_ATTRIBUTE,
        emit_bootstrap: bool = True,
        emitter: Emitter | None = None,
    ) -> GenerationResult:
        """Run one generation pass against ``host``; never raises for unusable candidates."""
        emitter = emitter or self._emitter or Emitter()

        candidates = discover_candidates(host, marker)
        self.logger.debug("Discovered %d candidate(s)", len(candidates))

        groups, skipped = group_candidates(candidates, host)
        outcomes: List[Outcome] = []
        outcomes.extend(emitter.emit_all(groups))
        outcomes.extend(skipped)

        return GenerationResult(
            candidates=candidates,
            outcomes=outcomes,
            bootstrap=bootstrap_unit() if emit_bootstrap else None,
            fingerprint=fingerprint_candidates(candidates),
        )

    def run_path(
        self,
        path: str,
        *,
        output_dir: Optional[str] = None,
        dry_run: bool = False,
    ) -> PassOutcome:
        """Scan ``path``, run a pass and write the generated units."""
        root = Path(path).expanduser().resolve()
        self.logger.info("Starting generation pass for %s", root)
        manifest = self.scanner.scan(str(root))
        self.logger.debug("Scanner found %d source file(s)", len(manifest.files))

        config = load_config(root)
        if output_dir is not None:
            config.output_dir = (root / output_dir).resolve()

        host = self._host_factory(manifest)
        emitter = self._emitter or Emitter(config.templates_dir)
        result = self.run(
            host,
            marker=config.marker,
            emit_bootstrap=config.emit_bootstrap,
            emitter=emitter,
        )

        write = self.writer.write(
            result.units,
            config.output_dir,
            fingerprint=result.fingerprint,
            prune_stale=config.prune_stale,
            dry_run=dry_run,
        )
        self.logger.info(
            "Generated %d unit(s): %d written, %d unchanged, %d removed",
            len(result.units),
            len(write.written),
            len(write.unchanged),
            len(write.removed),
        )
        return PassOutcome(config=config, result=result, write=write)


__all__ = ["Generator", "HostFactory", "PassOutcome", "fingerprint_candidates"]
