"""CLI entrypoints for msggen commands."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Mapping, Sequence

from .config import ConfigError, GeneratorConfig, load_config, split_path_list
from .emit import JavaInterfaceEmitter
from .errors import MsggenError
from .logging import configure_logging
from .orchestrator import Orchestrator

PACKAGE_PATH_ENV = "ROS_PACKAGE_PATH"


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


def _add_path_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-p",
        "--package-path",
        metavar="PATH",
        help=f"Paths to packages, separated by '{os.pathsep}' (defaults to ${PACKAGE_PATH_ENV}).",
    )
    parser.add_argument(
        "-s",
        "--sources",
        metavar="PATH",
        help="Source folders for single package generation.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .msggen.yml file or its directory (defaults to the current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="msggen",
        description="Resolve message and service definitions and generate interfaces.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate interfaces for packages found on the package path.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_path_options(generate_parser)
    generate_parser.add_argument(
        "-o",
        "--output-path",
        metavar="DIRECTORY",
        type=Path,
        default=None,
        help="Output directory (defaults to the current directory).",
    )
    generate_parser.add_argument(
        "-n",
        "--package-names",
        nargs="+",
        default=None,
        help="Names of the packages to generate (defaults to every discovered package).",
    )
    generate_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Print the full definition closure of one type.",
    )
    _add_verbose_option(resolve_parser, suppress_default=True)
    _add_path_options(resolve_parser)
    resolve_parser.add_argument("type", help="Full type name, for example std_msgs/Header.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing generate and resolve.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")

    return parser


def main(argv: list[str] | None = None, environ: Mapping[str, str] | None = None) -> None:
    """CLI entrypoint for msggen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    env = os.environ if environ is None else environ

    if args.command == "serve":
        from .service import run_service

        configure_logging(verbose=bool(args.verbose))
        run_service(host=args.host, port=args.port)
        return

    try:
        config = load_config(args.config or Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    configure_logging(
        verbose=bool(args.verbose),
        log_file=getattr(args, "log_file", None) or config.log_file,
    )

    package_roots = _package_roots(args.package_path, config, env)
    source_roots = _paths(args.sources, config.sources)

    if args.command == "generate":
        orchestrator = Orchestrator(
            JavaInterfaceEmitter(
                config.emitter.templates_dir,
                base_interface=config.emitter.base_interface,
            )
        )
        output_dir = args.output_path or config.output_path or Path(".")
        packages = args.package_names if args.package_names is not None else config.package_names
        try:
            report = orchestrator.generate(output_dir, packages, package_roots, source_roots)
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        except MsggenError as exc:
            parser.exit(1, f"msggen generate failed: {exc}\nRun with --verbose for more details.\n")
        print(
            f"Generated {len(report.generated)} of {len(report.attempted)} interfaces "
            f"into {_relativize(Path(output_dir))}"
        )
        if not report.succeeded:
            parser.exit(1, f"{len(report.failures)} interfaces failed; see log for details.\n")
    elif args.command == "resolve":
        try:
            declaration = Orchestrator().resolve(args.type, package_roots, source_roots)
        except MsggenError as exc:
            parser.exit(1, f"msggen resolve failed: {exc}\n")
        sys.stdout.write(declaration.text)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _package_roots(
    cli_value: str | None, config: GeneratorConfig, env: Mapping[str, str]
) -> List[Path]:
    if cli_value:
        return _paths(cli_value, [])
    if config.package_path:
        return list(config.package_path)
    return _paths(env.get(PACKAGE_PATH_ENV), [])


def _paths(cli_value: str | None, fallback: Sequence[Path]) -> List[Path]:
    if cli_value:
        return [Path(entry) for entry in split_path_list(cli_value)]
    return list(fallback)


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
