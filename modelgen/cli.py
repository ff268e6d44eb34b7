# File: modelgen/cli.py
"""
modelgen - Command-Line Interface
==================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Model with two attributes, migration written to ./migrations
    python -m modelgen model post title:text body:nulls.String

    # Short alias, skip the migration
    python -m modelgen m widget -s

    # Custom migration directory and settings file
    python -m modelgen model comment body -p db/migrations --config modelgen.yaml

    # Render and print without touching the filesystem
    python -m modelgen model user email --dry-run

Exit codes:
    0 — success
    1 — validation error
    2 — generation error
    3 — export error (file or migration write)
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root modelgen logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("modelgen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _add_verbosity_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("verbosity")
    group.add_argument(
        "-v", "--verbose",
        action="count",
        default=argparse.SUPPRESS,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Suppress all output except the generated source and errors.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from modelgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="modelgen",
        description=(
            "modelgen — scaffold a record type and its table migration "
            "from a one-line description."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s model post title:text body:nulls.String\n"
            "  %(prog)s m widget --skip-migration\n"
            "  %(prog)s model comment body -p db/migrations\n"
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"modelgen v{__version__}",
    )
    _add_verbosity_flags(parser)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    model_parser: argparse.ArgumentParser = subparsers.add_parser(
        "model",
        aliases=["m"],
        help="Generates a model for your database.",
        description="Generates a model for your database.",
    )
    model_parser.add_argument(
        "name",
        nargs="?",
        default=None,
        help="Model name, e.g. 'post' or 'user_profile'.",
    )
    model_parser.add_argument(
        "attributes",
        nargs="*",
        metavar="NAME[:TYPE]",
        help=(
            "Attribute tokens. TYPE defaults to 'string'; prefix with "
            "'nulls.' for a nullable column (e.g. body:nulls.String)."
        ),
    )
    model_parser.add_argument(
        "-s", "--skip-migration",
        action="store_true",
        default=None,
        help="Skip creating a new fizz migration for this model.",
    )
    model_parser.add_argument(
        "-p", "--path",
        type=str,
        default=None,
        metavar="DIR",
        help="Path to the migrations directory (default: ./migrations).",
    )
    model_parser.add_argument(
        "-o", "--output",
        type=str,
        default=".",
        metavar="DIR",
        help="Project root the models directory is created in (default: .).",
    )
    model_parser.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="FILE",
        help="YAML or JSON file with generation settings.",
    )
    model_parser.add_argument(
        "--no-format",
        action="store_true",
        default=False,
        help="Do not run the source formatter on the generated file.",
    )
    model_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Render and print the source without writing any files.",
    )
    _add_verbosity_flags(model_parser)

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.skip_migration:
        overrides["skip_migration"] = True

    if args.path is not None:
        overrides["migrations_path"] = args.path

    if args.no_format:
        overrides["formatter_command"] = []

    return overrides


def _load_config(args: argparse.Namespace) -> Any:
    """Resolve the GenerationConfig for this run, or None on input errors."""
    from modelgen.generator import apply_overrides, load_config_file
    from modelgen.models import GenerationConfig

    if args.config is not None:
        config_path: Path = Path(args.config).resolve()
        try:
            config: GenerationConfig = load_config_file(config_path)
        except (FileNotFoundError, ValueError) as exc:
            logger.error("Failed to load config: %s", exc)
            return None
    else:
        config = GenerationConfig()

    try:
        return apply_overrides(config, _build_config_overrides(args))
    except PydanticValidationError as exc:
        logger.error("Invalid option value: %s", exc)
        return None


# ---------------------------------------------------------------------------
# Model command
# ---------------------------------------------------------------------------


def _run_model(args: argparse.Namespace, verbosity: int) -> int:
    """
    Run the model generation pipeline.

    Returns the appropriate exit code.
    """
    from modelgen.generator import GenerationReport, ModelGenerator

    config = _load_config(args)
    if config is None:
        return EXIT_INPUT_ERROR

    output_dir: Path = Path(args.output).resolve()

    logger.info("Model:   %s", args.name)
    logger.info("Output:  %s", output_dir)
    logger.info("Migrate: %s", not config.skip_migration)

    generator: ModelGenerator = ModelGenerator(config)
    report: GenerationReport = generator.generate(
        args.name,
        args.attributes,
        output_dir=output_dir,
        dry_run=args.dry_run,
    )

    if report.source and config.echo_source:
        print(report.source)

    if verbosity >= 1 or not report.success:
        print(report.summary(), file=sys.stderr)

    if not report.success:
        if report.validation_errors:
            return EXIT_VALIDATION_ERROR
        if report.export_errors:
            return EXIT_EXPORT_ERROR
        return EXIT_GENERATION_ERROR

    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    # --- Verbosity ---
    if getattr(args, "quiet", False):
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = getattr(args, "verbose", 0)

    _setup_logging(verbosity)

    if args.command is None:
        parser.print_help(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    exit_code: int = _run_model(args, verbosity)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("modelgen.cli loaded.")
