"""CLI entrypoints for bonsaigen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .generator import Generator
from .host.csharp import HostError
from .logging import configure_logging
from .models import Emitted


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the C# project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bonsaigen",
        description="Generate *Bonsai() accessors for properties marked with [GenerateBonsai].",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Run a generation pass and write the generated sources.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_path_argument(generate_parser)
    generate_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Directory for generated sources, relative to the project root.",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report which files would change without writing them.",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="List annotated properties and what the pass would do with them.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_path_argument(list_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for bonsaigen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    generator = Generator()

    try:
        outcome = generator.run_path(
            args.path,
            output_dir=getattr(args, "output", None),
            dry_run=args.command == "list" or bool(getattr(args, "dry_run", False)),
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except (ConfigError, HostError) as exc:
        parser.exit(1, f"bonsaigen {args.command} failed: {exc}\n")

    if args.command == "list":
        _print_listing(outcome.result)
        return

    write = outcome.write
    if write.dry_run:
        print("Generated sources (dry-run):")
        for path in write.written:
            print(f"  write   {_relativize(path)}")
        for path in write.removed:
            print(f"  remove  {_relativize(path)}")
        if not write.changed:
            print("  (no changes)")
    elif write.changed:
        print(
            f"Generated sources updated in {_relativize(write.output_dir)} "
            f"({len(write.written)} written, {len(write.removed)} removed)"
        )
    else:
        print("Generated sources already up to date")


def _print_listing(result) -> None:  # type: ignore[no-untyped-def]
    if not result.candidates:
        print("No [GenerateBonsai] properties found")
        return
    for outcome in result.outcomes:
        if isinstance(outcome, Emitted):
            print(f"{outcome.owner.display_name} -> {outcome.unit.hint_name}")
            for member in outcome.members:
                print(f"  + {member}()")
            for skipped in outcome.skipped_members:
                print(f"  - {skipped.candidate.name}: {skipped.reason}")
        else:
            print(f"{outcome.owner.display_name} (skipped: {outcome.reason})")
            for candidate in outcome.candidates:
                print(f"  - {candidate.name}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
