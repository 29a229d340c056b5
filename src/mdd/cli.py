"""Command line interface: ``mdd validate`` and ``mdd transform``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from mdd.exceptions import MddError, MissingInputError
from mdd.pipeline import ProcessingOptions, process_document
from mdd.schemas import ValidationIssue, ValidationReport
from mdd.utils.logging_config import configure_logging
from mdd.validator import ValidationOptions, validate_document

logger = logging.getLogger(__name__)

EXIT_VALID = 0
EXIT_ERRORS = 1
EXIT_STRICT_WARNINGS = 2
EXIT_FAILURE = 3

SKIPPABLE_CHECKS = ("frontmatter", "directives", "requirements", "classes", "references")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mdd", description="Validate and transform MDD business documents.")
    parser.add_argument("--log-level", help="Log level for diagnostics on stderr (default: MDD_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Check frontmatter, directives and document-type rules")
    validate.add_argument("file", type=Path, help="MDD document to validate")
    validate.add_argument("--strict", action="store_true", help="Treat warnings as failures")
    validate.add_argument("--json", action="store_true", help="Print the report as JSON")
    validate.add_argument(
        "--skip",
        action="append",
        choices=SKIPPABLE_CHECKS,
        default=[],
        help="Check to skip; may be repeated",
    )

    transform = subparsers.add_parser("transform", help="Print the transformed document tree as JSON")
    transform.add_argument("file", type=Path, help="MDD document to transform")
    transform.add_argument("--no-formatting", action="store_true", help="Skip inline formatting and numbering")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.command == "validate":
            return _run_validate(args)
        return _run_transform(args)
    except MddError as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"mdd: {exc}", file=sys.stderr)
        return EXIT_FAILURE


def _read_source(path: Path) -> str:
    if not path.is_file():
        raise MissingInputError(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


def _run_validate(args: argparse.Namespace) -> int:
    options = ValidationOptions(
        check_frontmatter="frontmatter" not in args.skip,
        check_directives="directives" not in args.skip,
        check_type_requirements="requirements" not in args.skip,
        check_semantic_classes="classes" not in args.skip,
        check_references="references" not in args.skip,
        strict=args.strict,
    )
    report = validate_document(_read_source(args.file), options)

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print(_render_report(args.file, report))

    if report.errors:
        return EXIT_ERRORS
    if not report.valid:
        return EXIT_STRICT_WARNINGS
    return EXIT_VALID


def _run_transform(args: argparse.Namespace) -> int:
    options = ProcessingOptions(apply_formatting=not args.no_formatting)
    processed = process_document(_read_source(args.file), path=str(args.file), options=options)
    print(json.dumps(processed.tree.model_dump(mode="json", exclude_defaults=True), indent=2, ensure_ascii=False))
    return EXIT_VALID


def _render_report(path: Path, report: ValidationReport) -> str:
    lines = [f"{path}: {'valid' if report.valid else 'invalid'}"]
    for issue in report.errors + report.warnings:
        lines.append(_render_issue(issue))
    lines.append(f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)")
    return "\n".join(lines)


def _render_issue(issue: ValidationIssue) -> str:
    where = f"line {issue.location.line}: " if issue.location.line else ""
    text = f"  {issue.severity.value.upper()} [{issue.code.value}] {where}{issue.message}"
    if issue.suggestion:
        text += f"\n    hint: {issue.suggestion}"
    return text


if __name__ == "__main__":
    sys.exit(main())
