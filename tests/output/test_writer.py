"""Tests for the generated source writer."""

from __future__ import annotations

import json
from pathlib import Path

from bonsaigen.models import GeneratedUnit
from bonsaigen.output import MANIFEST_FILENAME, OutputWriter


def _unit(name: str, text: str = "public partial class X {}\n") -> GeneratedUnit:
    return GeneratedUnit(hint_name=f"{name}_GenerateBonsai.g.cs", text=text, type_name=name)


def test_write_creates_units_and_manifest(tmp_path: Path) -> None:
    output_dir = tmp_path / "Generated"

    outcome = OutputWriter().write([_unit("Program")], output_dir, fingerprint="abc")

    target = output_dir / "Program_GenerateBonsai.g.cs"
    assert outcome.written == [target]
    assert outcome.changed
    assert target.read_text(encoding="utf-8") == "public partial class X {}\n"
    manifest = json.loads((output_dir / MANIFEST_FILENAME).read_text(encoding="utf-8"))
    assert manifest["version"] == 1
    assert manifest["fingerprint"] == "abc"
    assert list(manifest["units"]) == ["Program_GenerateBonsai.g.cs"]


def test_unchanged_units_are_not_rewritten(tmp_path: Path) -> None:
    writer = OutputWriter()
    writer.write([_unit("Program")], tmp_path)

    outcome = writer.write([_unit("Program")], tmp_path)

    assert outcome.written == []
    assert outcome.unchanged == [tmp_path / "Program_GenerateBonsai.g.cs"]
    assert not outcome.changed


def test_stale_units_are_pruned(tmp_path: Path) -> None:
    writer = OutputWriter()
    writer.write([_unit("Program"), _unit("Removed")], tmp_path)

    outcome = writer.write([_unit("Program")], tmp_path)

    assert outcome.removed == [tmp_path / "Removed_GenerateBonsai.g.cs"]
    assert not (tmp_path / "Removed_GenerateBonsai.g.cs").exists()
    manifest = json.loads((tmp_path / MANIFEST_FILENAME).read_text(encoding="utf-8"))
    assert list(manifest["units"]) == ["Program_GenerateBonsai.g.cs"]


def test_pruning_only_touches_files_from_the_manifest(tmp_path: Path) -> None:
    handwritten = tmp_path / "Notes_GenerateBonsai.g.cs"
    handwritten.write_text("// mine\n", encoding="utf-8")

    outcome = OutputWriter().write([_unit("Program")], tmp_path)

    assert outcome.removed == []
    assert handwritten.exists()


def test_prune_can_be_disabled(tmp_path: Path) -> None:
    writer = OutputWriter()
    writer.write([_unit("Program"), _unit("Kept")], tmp_path)

    outcome = writer.write([_unit("Program")], tmp_path, prune_stale=False)

    assert outcome.removed == []
    assert (tmp_path / "Kept_GenerateBonsai.g.cs").exists()


def test_dry_run_reports_without_touching_disk(tmp_path: Path) -> None:
    output_dir = tmp_path / "Generated"

    outcome = OutputWriter().write([_unit("Program")], output_dir, dry_run=True)

    assert outcome.dry_run
    assert outcome.written == [output_dir / "Program_GenerateBonsai.g.cs"]
    assert not output_dir.exists()


def test_corrupt_manifest_is_ignored(tmp_path: Path) -> None:
    (tmp_path / MANIFEST_FILENAME).write_text("{not json", encoding="utf-8")

    outcome = OutputWriter().write([_unit("Program")], tmp_path)

    assert outcome.removed == []
    assert outcome.written == [tmp_path / "Program_GenerateBonsai.g.cs"]
