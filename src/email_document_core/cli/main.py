"""Main CLI entry point for the email-doc command-line tool.

Converts between persisted design JSON and MJML markup, recovers documents
from saved model replies, and dumps starter templates.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

from email_document_core import __version__
from email_document_core.blocks import STARTER_TEMPLATES, find_starter
from email_document_core.model.conditions import condition_filter
from email_document_core.recovery import try_parse_ai_response
from email_document_core.serializer import (
    ESP_PRESETS,
    design_json_dumps,
    design_json_loads,
    document_to_markup,
    markup_to_document_with_diagnostics,
    transform_merge_tags,
)
from email_document_core.shared import EditorConfig, RecoveryError
from email_document_core.shared.logging import configure_logging, get_logger

PRESETS = {
    "default": EditorConfig.default,
    "interactive": EditorConfig.interactive,
    "strict_recovery": EditorConfig.strict_recovery,
}

logger = get_logger(__name__, component="cli")


def _read_input(path: Path) -> str:
    """Read a file, or stdin when the path is ``-``."""
    if str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def _write_output(text: str, output: Optional[Path]) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        print(f"Written to {output}", file=sys.stderr)
    else:
        print(text)


def _parse_variables(pairs: List[str]) -> Dict[str, str]:
    variables: Dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected NAME=VALUE, got {pair!r}")
        variables[name.strip()] = value
    return variables


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="email-doc",
        description="Convert, recover and inspect structured email documents"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="default",
        help="Editor configuration preset"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # to-markup
    to_markup = subparsers.add_parser("to-markup", help="Render design JSON as MJML")
    to_markup.add_argument("path", type=Path, help="Design JSON file, or - for stdin")
    to_markup.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Merge-tag value used to resolve conditional content"
    )
    to_markup.add_argument(
        "--esp",
        choices=sorted(ESP_PRESETS),
        help="Rewrite merge tags for an email service provider and drop editor ids"
    )
    to_markup.add_argument("--output", "-o", type=Path, help="Output file (default: stdout)")

    # from-markup
    from_markup = subparsers.add_parser("from-markup", help="Parse MJML into design JSON")
    from_markup.add_argument("path", type=Path, help="MJML file, or - for stdin")
    from_markup.add_argument(
        "--diagnostics",
        action="store_true",
        help="Report every coercion applied on stderr"
    )
    from_markup.add_argument("--output", "-o", type=Path, help="Output file (default: stdout)")

    # recover
    recover = subparsers.add_parser("recover", help="Recover a document from a model reply")
    recover.add_argument("path", type=Path, help="Saved reply text, or - for stdin")
    recover.add_argument(
        "--format", "-f",
        choices=["json", "mjml"],
        default="json",
        help="Output format (default: json)"
    )
    recover.add_argument("--output", "-o", type=Path, help="Output file (default: stdout)")

    # starters
    starters = subparsers.add_parser("starters", help="List or dump starter templates")
    starters.add_argument("name", nargs="?", help="Starter to dump (default: list all)")
    starters.add_argument(
        "--format", "-f",
        choices=["json", "mjml"],
        default="mjml",
        help="Dump format (default: mjml)"
    )

    # Global options
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet output")

    return parser


def cmd_to_markup(args: argparse.Namespace, config: EditorConfig) -> int:
    """Handle to-markup command."""
    try:
        document = design_json_loads(_read_input(args.path))
        variables = _parse_variables(args.var)
    except (OSError, RecoveryError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    include = condition_filter(variables) if variables else None
    if args.esp:
        serializer = replace(config.serializer, emit_node_ids=False)
        markup = transform_merge_tags(
            document_to_markup(document, include, serializer), ESP_PRESETS[args.esp]
        )
    else:
        markup = document_to_markup(document, include, config.serializer)
    _write_output(markup, args.output)
    return 0


def cmd_from_markup(args: argparse.Namespace, config: EditorConfig) -> int:
    """Handle from-markup command."""
    try:
        markup = _read_input(args.path)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = markup_to_document_with_diagnostics(markup, config.correlation_id)
    if args.diagnostics:
        for diag in result.diagnostics:
            print(f"{diag.severity.name}: {diag.message}", file=sys.stderr)
        print(f"{result.coercion_count} coercions applied", file=sys.stderr)

    _write_output(design_json_dumps(result.document), args.output)
    return 0


def cmd_recover(args: argparse.Namespace, config: EditorConfig) -> int:
    """Handle recover command."""
    try:
        raw = _read_input(args.path)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = try_parse_ai_response(raw, config.recovery, config.correlation_id)
    if not result.success:
        print(f"Error: {result.failure.reason}", file=sys.stderr)
        return 1

    print(f"Recovered via {result.strategy.value}"
          f"{' (repaired)' if result.repaired else ''}", file=sys.stderr)
    if args.format == "mjml":
        text = document_to_markup(result.document, config=config.serializer)
    else:
        text = design_json_dumps(result.document)
    _write_output(text, args.output)
    return 0


def cmd_starters(args: argparse.Namespace, config: EditorConfig) -> int:
    """Handle starters command."""
    if not args.name:
        for starter in STARTER_TEMPLATES:
            print(f"{starter.id:<12} {starter.description}")
        return 0

    starter = find_starter(args.name)
    if starter is None:
        known = ", ".join(s.id for s in STARTER_TEMPLATES)
        print(f"Unknown starter: {args.name} (known: {known})", file=sys.stderr)
        return 1

    document = starter.create()
    if args.format == "json":
        print(design_json_dumps(document))
    else:
        print(document_to_markup(document, config=config.serializer))
    return 0


COMMANDS = {
    "to-markup": cmd_to_markup,
    "from-markup": cmd_from_markup,
    "recover": cmd_recover,
    "starters": cmd_starters,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        configure_logging(logging.DEBUG)
    elif args.quiet:
        configure_logging(logging.ERROR)

    config = PRESETS[args.preset]()
    logger.debug("Running command", extra={"command": args.command, "preset": args.preset})

    try:
        return COMMANDS[args.command](args, config)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
