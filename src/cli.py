"""Command-line interface for synth."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING, cast

from artifacts.utils import _dump_json
from artifacts.write import generate_all_artifacts
from contract.errors import SynthesisFailed
from report.diagnostics import error, format_diagnostics
from report.log import configure_logging
from rules.config import ConfigError
from verify.verify import check_artifacts

if TYPE_CHECKING:
    from collections.abc import Iterable

    from report.diagnostics import Diagnostic

EXIT_OK = 0
EXIT_DRIFT = 1
EXIT_ERROR = 2


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Package root (default: .)",
    )
    parser.add_argument(
        "--out-dir",
        default=None,
        help="Output directory for artifacts (default: config output dir)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Reject imports from packages the manifest does not declare",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Emit debug logs on stderr",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="synth")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate", help="Write manifest, namespace and documentation pages"
    )
    _add_common_arguments(generate_parser)

    check_parser = subparsers.add_parser(
        "check", help="Report drift between sources and artifacts without writing"
    )
    _add_common_arguments(check_parser)
    check_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Report format (default: text)",
    )

    return parser


def _resolve_output_dir(out_dir: str | None) -> Path | None:
    if out_dir is None:
        return None
    return Path(out_dir).expanduser().resolve()


def _emit(diagnostics: Iterable[Diagnostic]) -> None:
    sys.stderr.write(format_diagnostics(diagnostics))


def _os_error(exc: OSError, root: Path) -> Diagnostic:
    subject = exc.filename if exc.filename is not None else root
    return error(str(subject), exc.strerror or str(exc))


def _handle_generate(root: Path, out_dir: str | None, strict: bool | None) -> int:
    try:
        result = generate_all_artifacts(
            root=root, out_dir=_resolve_output_dir(out_dir), strict=strict
        )
    except ConfigError as exc:
        _emit([error("config", str(exc))])
        return EXIT_ERROR
    except SynthesisFailed as exc:
        _emit(exc.diagnostics())
        return EXIT_ERROR
    except OSError as exc:
        _emit([_os_error(exc, root)])
        return EXIT_ERROR

    _emit(cast("list[Diagnostic]", result["warnings"]))
    return EXIT_OK


def _handle_check(
    root: Path, out_dir: str | None, strict: bool | None, output_format: str
) -> int:
    try:
        report = check_artifacts(
            root=root, out_dir=_resolve_output_dir(out_dir), strict=strict
        )
    except ConfigError as exc:
        _emit([error("config", str(exc))])
        return EXIT_ERROR
    except SynthesisFailed as exc:
        _emit(exc.diagnostics())
        return EXIT_ERROR
    except OSError as exc:
        _emit([_os_error(exc, root)])
        return EXIT_ERROR

    if output_format == "json":
        sys.stdout.write(_dump_json(report).decode("utf-8"))
    else:
        _emit(report.warnings)
        sys.stdout.write("".join(f"{entry.format()}\n" for entry in report.statuses))
    return EXIT_OK if report.ok else EXIT_DRIFT


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    root = Path(args.root).expanduser().resolve()

    if args.command == "generate":
        return _handle_generate(root, args.out_dir, args.strict)

    if args.command == "check":
        return _handle_check(root, args.out_dir, args.strict, args.format)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
