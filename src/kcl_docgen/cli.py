"""Command line interface for kcl-docgen."""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import Callable

from kcl_docgen.config import DEFAULT_CONFIG_FILENAME, DocConfig, load_config
from kcl_docgen.errors import DocGenError, OutputError
from kcl_docgen.gendoc import MARKER_FILENAME, GenContext
from kcl_docgen.paths import Platform
from kcl_docgen.render import DocFormat

Handler = Callable[[argparse.Namespace], int]

logger = logging.getLogger(__name__)


def _build_context(args: argparse.Namespace) -> GenContext:
    config = DocConfig()
    config_path = args.config
    if config_path is None and Path(DEFAULT_CONFIG_FILENAME).is_file():
        config_path = DEFAULT_CONFIG_FILENAME
    if config_path is not None:
        config = load_config(config_path)

    package_path = args.package_path or config.package_path or Path(".")
    target = getattr(args, "target", None) or config.target or Path("docs")
    doc_format = DocFormat.parse(args.format) if args.format else config.doc_format
    if args.platform:
        platform = Platform.from_name(args.platform)
    else:
        platform = config.platform or Platform.host()
    return GenContext(
        package_path=package_path,
        target=target,
        doc_format=doc_format,
        ignore_deprecated=args.ignore_deprecated or config.ignore_deprecated,
        escape_html=args.escape_html or config.escape_html,
        platform=platform,
    )


def _handle_gen_docs(args: argparse.Namespace) -> int:
    """Generate the documentation tree."""
    context = _build_context(args)
    target = Path(context.target)
    try:
        written = context.gen_doc()
    except OutputError:
        # partial output of an aborted run is never kept
        if (target / MARKER_FILENAME).is_file():
            shutil.rmtree(target, ignore_errors=True)
        raise
    print(f"{len(written)} files written to {target}")
    return 0


def _handle_render(args: argparse.Namespace) -> int:
    """Print the document of one schema."""
    context = _build_context(args)
    root = context.load()
    package_path, _, name = args.schema.rpartition(".")
    package = root
    for part in package_path.split(".") if package_path else []:
        if part not in package.subpackages:
            raise DocGenError(f"unknown package '{package_path}'")
        package = package.subpackages[part]
    if name not in package.schemas:
        raise DocGenError(f"unknown schema '{args.schema}'")
    content = context.render_schema_doc_content(package.schemas[name])
    if content is None:
        logger.warning("schema '%s' is deprecated and deprecated schemas are ignored", args.schema)
        return 0
    sys.stdout.write(content)
    return 0


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--package-path", type=Path, help="package root or schema dump to document")
    parser.add_argument("--config", help=f"config file (default: ./{DEFAULT_CONFIG_FILENAME})")
    parser.add_argument("--format", choices=["md", "markdown", "html"], help="output format")
    parser.add_argument(
        "--platform",
        choices=["host", "unix", "windows"],
        help="platform whose path separator and line endings are used",
    )
    parser.add_argument(
        "--ignore-deprecated",
        action="store_true",
        help="skip schemas and attributes marked @deprecated",
    )
    parser.add_argument(
        "--escape-html",
        action="store_true",
        help="escape HTML in Markdown descriptions",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(prog="kcl-docgen")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="increase log output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen_docs = subparsers.add_parser("gen-docs", help="generate the documentation tree")
    _add_common_options(gen_docs)
    gen_docs.add_argument("--target", type=Path, help="output directory (default: docs)")
    gen_docs.set_defaults(func=_handle_gen_docs)

    render = subparsers.add_parser("render", help="print the document of one schema")
    _add_common_options(render)
    render.add_argument("--schema", required=True, help="schema key, e.g. models.Person")
    render.set_defaults(func=_handle_render)

    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    handler: Handler = args.func
    try:
        return handler(args)
    except (DocGenError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
