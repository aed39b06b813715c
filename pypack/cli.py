"""CLI entrypoints for pypack commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from .config import load_config
from .logging import configure_logging, get_logger
from .orchestrator import Packer

_LOGGER = get_logger("cli")

EXIT_USAGE = 1
EXIT_FAILURE = 2


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit code 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


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


def _add_shared_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    """Options accepted both before and after the subcommand."""
    _add_verbose_option(parser, suppress_default=suppress_default)
    parser.add_argument(
        "--config",
        default=argparse.SUPPRESS if suppress_default else ".",
        help="Path to .pypack.yml or the directory holding it (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write log records to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="pypack",
        description="Bundle a multi-file Python program and its libraries into one script.",
    )
    _add_shared_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True, parser_class=_ArgumentParser)

    bundle_parser = subparsers.add_parser(
        "bundle",
        help="Bundle a library's __main__.py with everything its pack.list references.",
    )
    _add_shared_options(bundle_parser, suppress_default=True)
    bundle_parser.add_argument("dialect", help="Code generation dialect (2.7 or 3.5).")
    bundle_parser.add_argument("output", help="Path of the bundled script to write.")
    bundle_parser.add_argument("library", help="Name of the main library.")
    bundle_parser.add_argument(
        "roots",
        nargs="*",
        help="Library search roots, in priority order (defaults to library_paths from config).",
    )
    bundle_parser.add_argument(
        "--product",
        help="Nest every bundled module under this namespace and rewrite imports to match.",
    )
    bundle_parser.add_argument(
        "--marker",
        help="Sentinel comment line used as insertion point when the script has no imports.",
    )
    bundle_parser.add_argument(
        "--no-isolation-token",
        dest="isolation_token",
        action="store_false",
        default=None,
        help="Do not declare the per-process isolation token.",
    )
    bundle_parser.add_argument(
        "--insert-at",
        choices=("start", "end"),
        default=None,
        help="Fallback insertion point when neither imports nor a marker are found.",
    )

    script_parser = subparsers.add_parser(
        "script",
        help="Bundle a standalone script using the pack.list next to it.",
    )
    _add_shared_options(script_parser, suppress_default=True)
    script_parser.add_argument("input", help="Script to bundle.")
    script_parser.add_argument("output", help="Path of the bundled script to write.")
    script_parser.add_argument(
        "roots",
        nargs="*",
        help="Library search roots (defaults to the script's directory).",
    )
    script_parser.add_argument("--dialect", default=None, help="Code generation dialect.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for pypack commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    try:
        packer = Packer(load_config(Path(args.config)))
        if args.command == "bundle":
            packed = packer.pack(
                args.dialect,
                args.library,
                [Path(root) for root in args.roots],
                product=args.product,
                marker=args.marker,
                isolation_token=args.isolation_token,
                insert_fallback=args.insert_at,
            )
        elif args.command == "script":
            packed = packer.pack_script(
                Path(args.input),
                dialect=args.dialect,
                roots=[Path(root) for root in args.roots],
            )
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(EXIT_USAGE, "Unknown command\n")
        output = Path(args.output)
        output.write_text(packed, encoding="utf-8")
    except Exception as exc:
        _LOGGER.debug("Packing failed", exc_info=True)
        parser.exit(EXIT_FAILURE, f"An error occurred: {exc}\n")

    print(f"Bundle written to {_relativize(output)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
