"""Tests for bonsaigen.generator."""

from __future__ import annotations

from pathlib import Path

from bonsaigen.generator import Generator, fingerprint_candidates
from bonsaigen.models import Emitted, Skipped
from bonsaigen.pipeline.discovery import discover_candidates
from tests._fixtures.fake_host import FakeHost, nested, top_level
from tests._fixtures.project_builder import ProjectBuilder

OUTPUT = "obj/Generated/bonsaigen"


def test_run_orders_bootstrap_then_emitted_units() -> None:
    host = FakeHost()
    alpha = top_level("Alpha")
    host.add("A", owner=alpha)
    host.add("Hidden", owner=nested("Inner", alpha))
    host.add("B", owner=top_level("Beta"))

    result = Generator().run(host)

    assert [unit.hint_name for unit in result.units] == [
        "GenerateBonsaiAttribute.g.cs",
        "Alpha_GenerateBonsai.g.cs",
        "Beta_GenerateBonsai.g.cs",
    ]
    assert [type(outcome) for outcome in result.outcomes] == [Emitted, Emitted, Skipped]
    assert [candidate.name for candidate in result.candidates] == ["A", "Hidden", "B"]


def test_run_without_candidates_only_bootstraps() -> None:
    result = Generator().run(FakeHost())

    assert [unit.hint_name for unit in result.units] == ["GenerateBonsaiAttribute.g.cs"]
    assert result.outcomes == []


def test_run_can_skip_bootstrap() -> None:
    host = FakeHost()
    host.add("A", owner=top_level("Alpha"))

    result = Generator().run(host, emit_bootstrap=False)

    assert result.bootstrap is None
    assert [unit.hint_name for unit in result.units] == ["Alpha_GenerateBonsai.g.cs"]


def test_fingerprint_tracks_candidate_content() -> None:
    first = FakeHost()
    first.add("A", owner=top_level("Alpha"), expression="x => x")
    second = FakeHost()
    second.add("A", owner=top_level("Alpha"), expression="x => x + 1")

    same = fingerprint_candidates(discover_candidates(first))

    assert same == fingerprint_candidates(discover_candidates(first))
    assert same != fingerprint_candidates(discover_candidates(second))
    assert Generator().run(first).fingerprint == same


def test_run_path_writes_generated_sources(
    project_builder: ProjectBuilder, sandbox_source: str
) -> None:
    project_builder.write({"Program.cs": sandbox_source})

    outcome = Generator().run_path(str(project_builder.path()))

    output_dir = project_builder.path().resolve() / OUTPUT
    assert outcome.config.output_dir == output_dir
    assert sorted(path.name for path in outcome.write.written) == [
        "GenerateBonsaiAttribute.g.cs",
        "Program_GenerateBonsai.g.cs",
    ]
    text = (output_dir / "Program_GenerateBonsai.g.cs").read_text(encoding="utf-8")
    assert "public static string StringLengthBonsai() =>" in text
    assert (output_dir / "manifest.json").exists()


def test_run_path_is_idempotent(project_builder: ProjectBuilder, sandbox_source: str) -> None:
    project_builder.write({"Program.cs": sandbox_source})
    generator = Generator()
    generator.run_path(str(project_builder.path()))

    second = generator.run_path(str(project_builder.path()))

    assert not second.write.changed
    assert len(second.write.unchanged) == 2


def test_run_path_prunes_units_for_removed_owners(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "Alpha.cs": """
            using Corvus.Expressions.SourceGenerator;

            namespace Sandbox;

            public partial class Alpha
            {
                [GenerateBonsai]
                public static Func<int> One => () => 1;
            }
            """,
            "Beta.cs": """
            using Corvus.Expressions.SourceGenerator;

            namespace Sandbox;

            public partial class Beta
            {
                [GenerateBonsai]
                public static Func<int> Two => () => 2;
            }
            """,
        }
    )
    generator = Generator()
    generator.run_path(str(project_builder.path()))
    (project_builder.path() / "Beta.cs").unlink()

    outcome = generator.run_path(str(project_builder.path()))

    output_dir = project_builder.path().resolve() / OUTPUT
    assert [path.name for path in outcome.write.removed] == ["Beta_GenerateBonsai.g.cs"]
    assert (output_dir / "Alpha_GenerateBonsai.g.cs").exists()
    assert not (output_dir / "Beta_GenerateBonsai.g.cs").exists()


def test_run_path_dry_run_and_output_override(
    project_builder: ProjectBuilder, sandbox_source: str
) -> None:
    project_builder.write({"Program.cs": sandbox_source})

    outcome = Generator().run_path(str(project_builder.path()), output_dir="Generated", dry_run=True)

    output_dir = project_builder.path().resolve() / "Generated"
    assert outcome.write.output_dir == output_dir
    assert outcome.write.dry_run
    assert len(outcome.write.written) == 2
    assert not output_dir.exists()


def test_run_path_uses_configured_marker(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            ".bonsaigen.yml": "marker: Sandbox.BonsaiAttribute\nemit_bootstrap: false\n",
            "Program.cs": """
            namespace Sandbox;

            public sealed class BonsaiAttribute : System.Attribute {}

            public partial class Program
            {
                [Bonsai]
                public static Func<int> Answer => () => 42;
            }
            """,
        }
    )

    outcome = Generator().run_path(str(project_builder.path()), dry_run=True)

    assert [path.name for path in outcome.write.written] == ["Program_GenerateBonsai.g.cs"]
    assert [candidate.name for candidate in outcome.result.candidates] == ["Answer"]
