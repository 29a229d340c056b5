"""Validate MDD source text.

Validation works on raw text rather than a parsed tree: frontmatter,
directive occurrences and semantic-class tokens are re-derived line by line,
checked against format rules and the per-type requirement table, and every
finding is accumulated into one ``ValidationReport``.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import date

from mdd.exceptions import MissingInputError
from mdd.formatting import SectionCounter
from mdd.patterns import (
    ATX_HEADING_RE,
    BLOCKQUOTE_PREFIX_RE,
    CODE_FENCE_RE,
    DIRECTIVE_SPECS,
    FRONTMATTER_RE,
    REFERENCE_RE,
    SECTION_BREAK_INLINE_RE,
    SEMANTIC_CLASS_NAME_RE,
    SEMANTIC_CLASS_TOKEN_RE,
    DirectiveKind,
    is_close_marker,
    match_open_marker,
)
from mdd.requirements import default_requirements, default_vocabulary
from mdd.schemas import (
    DirectiveOccurrence,
    IssueCode,
    IssueLocation,
    RequirementsTable,
    Severity,
    ValidationIssue,
    ValidationReport,
    Vocabulary,
)
from mdd.schemas.validation import FrontmatterValue

logger = logging.getLogger(__name__)

DATE_FIELDS = ("date", "effective-date", "expiration-date", "due-date")
REQUIRED_FIELDS = ("title", "document-type")
OTHER_DOCUMENT_TYPE = "other"

DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
VERSION_RE = re.compile(r"^\d+\.\d+(?:\.\d+)?$")
LANGUAGE_RE = re.compile(r"^[a-z]{2}(?:-[A-Z]{2})?$")
CURRENCY_RE = re.compile(r"^[A-Z]{3}\s*(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}$")

Frontmatter = dict[str, FrontmatterValue]


@dataclass
class ValidationOptions:
    """Which checks to run and whether warnings fail the document."""

    check_frontmatter: bool = True
    check_directives: bool = True
    check_type_requirements: bool = True
    check_semantic_classes: bool = True
    check_references: bool = True
    strict: bool = False


@dataclass
class _Findings:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def add(self, issue: ValidationIssue) -> None:
        if issue.severity == Severity.ERROR:
            self.errors.append(issue)
        else:
            self.warnings.append(issue)

    def extend(self, issues: list[ValidationIssue]) -> None:
        for issue in issues:
            self.add(issue)


def _error(code: IssueCode, message: str, suggestion: str | None = None, **location) -> ValidationIssue:
    return ValidationIssue(
        severity=Severity.ERROR,
        code=code,
        message=message,
        location=IssueLocation(**location),
        suggestion=suggestion,
    )


def _warning(code: IssueCode, message: str, suggestion: str | None = None, **location) -> ValidationIssue:
    return ValidationIssue(
        severity=Severity.WARNING,
        code=code,
        message=message,
        location=IssueLocation(**location),
        suggestion=suggestion,
    )


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------


def extract_frontmatter(content: str) -> Frontmatter | None:
    """Parse the leading ``---`` block into a flat mapping.

    ``[a, b]`` values become lists, ``true``/``false`` become booleans and
    matching surrounding quotes are stripped. Returns None when the document
    does not start with a fence.
    """
    frontmatter, _ = _parse_frontmatter(content)
    return frontmatter


def _parse_frontmatter(content: str) -> tuple[Frontmatter | None, dict[str, int]]:
    match = FRONTMATTER_RE.match(content)
    if not match:
        return None, {}

    values: Frontmatter = {}
    lines: dict[str, int] = {}
    # Line 1 is the opening fence.
    for offset, line in enumerate(match.group(1).split("\n"), start=2):
        key, sep, raw = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        if not key:
            continue
        values[key] = _parse_value(raw.strip())
        lines[key] = offset
    return values, lines


def _parse_value(raw: str) -> FrontmatterValue:
    if raw.startswith("[") and raw.endswith("]"):
        items = (_strip_quotes(item.strip()) for item in raw[1:-1].split(","))
        return [item for item in items if item]
    if raw in ("true", "false"):
        return raw == "true"
    return _strip_quotes(raw)


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def is_blank(value: FrontmatterValue | None) -> bool:
    """Missing, whitespace-only or empty-list values count as blank."""
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, list):
        return not value
    return not value.strip()


def is_valid_date(value: FrontmatterValue) -> bool:
    """Check for a real calendar date written as ``YYYY-MM-DD``."""
    if not isinstance(value, str):
        return False
    match = DATE_RE.match(value)
    if not match:
        return False
    year, month, day = (int(part) for part in match.groups())
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def _matches(pattern: re.Pattern[str], value: FrontmatterValue) -> bool:
    return isinstance(value, str) and bool(pattern.match(value))


def _is_member(value: FrontmatterValue, allowed: frozenset[str]) -> bool:
    return isinstance(value, str) and value in allowed


def validate_frontmatter(
    frontmatter: Frontmatter | None,
    vocabulary: Vocabulary,
    field_lines: dict[str, int] | None = None,
) -> list[ValidationIssue]:
    """Check required fields and field formats. Every violation is reported."""
    if frontmatter is None:
        return [
            _error(
                IssueCode.MISSING_FRONTMATTER,
                "Document is missing YAML frontmatter",
                "Add a frontmatter block at the start of the document:\n"
                "---\ntitle: Your Title\ndocument-type: business-letter\n---",
                line=1,
            )
        ]

    field_lines = field_lines or {}
    issues: list[ValidationIssue] = []

    def where(name: str) -> dict:
        return {"field": name, "line": field_lines.get(name)}

    for name in REQUIRED_FIELDS:
        if is_blank(frontmatter.get(name)):
            issues.append(
                _error(
                    IssueCode.MISSING_REQUIRED_FIELD,
                    f"Missing required field: {name}",
                    f'Add "{name}: value" to frontmatter',
                    **where(name),
                )
            )

    document_type = frontmatter.get("document-type")
    if not is_blank(document_type) and not _is_member(document_type, vocabulary.document_types):
        issues.append(
            _error(
                IssueCode.INVALID_DOCUMENT_TYPE,
                f'Invalid document-type: "{document_type}"',
                f"Use one of: {', '.join(sorted(vocabulary.document_types)[:5])}, ...",
                **where("document-type"),
            )
        )

    for name in DATE_FIELDS:
        value = frontmatter.get(name)
        if not is_blank(value) and not is_valid_date(value):
            issues.append(
                _error(
                    IssueCode.INVALID_DATE_FORMAT,
                    f'Invalid {name} format: "{value}" (expected YYYY-MM-DD)',
                    "Use ISO 8601 format: YYYY-MM-DD",
                    **where(name),
                )
            )

    version = frontmatter.get("version")
    if not is_blank(version) and not _matches(VERSION_RE, version):
        issues.append(
            _error(
                IssueCode.INVALID_VERSION_FORMAT,
                f'Invalid version format: "{version}" (expected X.Y or X.Y.Z)',
                "Use semantic versioning: 1.0 or 1.0.0",
                **where("version"),
            )
        )

    status = frontmatter.get("status")
    if not is_blank(status) and not _is_member(status, vocabulary.statuses):
        issues.append(
            _error(
                IssueCode.INVALID_STATUS,
                f'Invalid status: "{status}"',
                f"Use one of: {', '.join(sorted(vocabulary.statuses))}",
                **where("status"),
            )
        )

    language = frontmatter.get("language")
    if not is_blank(language) and not _matches(LANGUAGE_RE, language):
        issues.append(
            _error(
                IssueCode.INVALID_LANGUAGE_CODE,
                f'Invalid language code: "{language}" (expected ISO 639-1 format)',
                "Use ISO 639-1 format: en, en-US, el-GR",
                **where("language"),
            )
        )

    amount = frontmatter.get("total-amount")
    if not is_blank(amount) and not _matches(CURRENCY_RE, amount):
        issues.append(
            _error(
                IssueCode.INVALID_CURRENCY_FORMAT,
                f'Invalid total-amount format: "{amount}" (expected "CCC #,###.##")',
                "Use format: USD 1,234.56",
                **where("total-amount"),
            )
        )
    return issues


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------


@dataclass
class _OpenDirective:
    kind: DirectiveKind
    start_line: int
    nested_in: DirectiveKind | None = None
    lines: list[str] = field(default_factory=list)

    def finish(self, end_line: int | None) -> DirectiveOccurrence:
        return DirectiveOccurrence(
            kind=self.kind,
            content="\n".join(self.lines).strip(),
            start_line=self.start_line,
            has_end_marker=end_line is not None or DIRECTIVE_SPECS[self.kind].self_closing,
            end_line=end_line,
            nested_in=self.nested_in,
        )


def _iter_source_lines(content: str):
    """Yield ``(line_number, line)`` outside fenced code blocks."""
    fence: str | None = None
    for number, line in enumerate(content.split("\n"), start=1):
        match = CODE_FENCE_RE.match(line)
        if match:
            if fence is None:
                fence = match.group(1)
            elif match.group(1) == fence:
                fence = None
            continue
        if fence is None:
            yield number, line


def _scan_directives(content: str) -> tuple[list[DirectiveOccurrence], list[int]]:
    occurrences: list[DirectiveOccurrence] = []
    orphans: list[int] = []
    block: _OpenDirective | None = None
    section: _OpenDirective | None = None

    for number, raw_line in _iter_source_lines(content):
        line = BLOCKQUOTE_PREFIX_RE.sub("", raw_line)
        stripped = line.strip()
        kind = match_open_marker(stripped)

        if section is not None and (kind is not None or is_close_marker(stripped, "::")):
            # The ::: fence of a block-form section break is optional.
            occurrences.append(section.finish(None))
            section = None

        if kind is not None:
            spec = DIRECTIVE_SPECS[kind]
            nested_in = block.kind if block is not None else None
            if spec.self_closing:
                if kind == DirectiveKind.SECTION_BREAK and not SECTION_BREAK_INLINE_RE.match(stripped):
                    section = _OpenDirective(kind=kind, start_line=number, nested_in=nested_in)
                else:
                    occurrences.append(_OpenDirective(kind=kind, start_line=number, nested_in=nested_in).finish(None))
                continue
            if block is not None:
                occurrences.append(block.finish(None))
            block = _OpenDirective(kind=kind, start_line=number, nested_in=nested_in)
            continue

        if section is not None:
            if is_close_marker(stripped, ":::"):
                occurrences.append(section.finish(number))
                section = None
            else:
                section.lines.append(line)
            continue

        if is_close_marker(stripped, "::"):
            if block is None:
                orphans.append(number)
            else:
                occurrences.append(block.finish(number))
                block = None
            continue

        if block is not None:
            block.lines.append(line)

    for pending in (section, block):
        if pending is not None:
            occurrences.append(pending.finish(None))

    occurrences.sort(key=lambda occurrence: occurrence.start_line)
    return occurrences, orphans


def extract_directives(content: str) -> list[DirectiveOccurrence]:
    """Find every directive occurrence in ``content``, ordered by start line.

    An open marker met while another block directive is still open ends the
    previous one without an end marker and is itself marked as nested.
    """
    occurrences, _ = _scan_directives(content)
    return occurrences


def count_directives(occurrences: list[DirectiveOccurrence]) -> dict[str, int]:
    """Occurrences per directive kind."""
    return dict(Counter(occurrence.kind.value for occurrence in occurrences))


def validate_directives(
    occurrences: list[DirectiveOccurrence],
    orphan_lines: list[int] | None = None,
) -> list[ValidationIssue]:
    """Report unterminated, nested, empty and orphaned directive markers."""
    issues: list[ValidationIssue] = []
    for occurrence in occurrences:
        name = occurrence.kind.value
        spec = DIRECTIVE_SPECS[occurrence.kind]
        if not occurrence.has_end_marker:
            issues.append(
                _error(
                    IssueCode.MISSING_END_MARKER,
                    f"Directive ::{name} at line {occurrence.start_line} is missing end marker {spec.close_token}",
                    f"Add {spec.close_token} on its own line after the {name} content",
                    line=occurrence.start_line,
                    directive=name,
                )
            )
        if occurrence.nested_in is not None:
            issues.append(
                _error(
                    IssueCode.INVALID_DIRECTIVE_NESTING,
                    f"Directive ::{name} at line {occurrence.start_line} "
                    f"cannot be nested inside ::{occurrence.nested_in.value}",
                    f"Close ::{occurrence.nested_in.value} before starting ::{name}",
                    line=occurrence.start_line,
                    directive=name,
                )
            )
        if spec.requires_close and occurrence.has_end_marker and not occurrence.content:
            issues.append(
                _warning(
                    IssueCode.EMPTY_DIRECTIVE,
                    f"Directive ::{name} at line {occurrence.start_line} is empty",
                    f"Add content inside the ::{name} block or remove it",
                    line=occurrence.start_line,
                    directive=name,
                )
            )
    for line in orphan_lines or []:
        issues.append(
            _warning(
                IssueCode.ORPHANED_END_MARKER,
                f"End marker :: at line {line} does not close any directive",
                "Remove the marker or add the directive it should close",
                line=line,
            )
        )
    return issues


# ---------------------------------------------------------------------------
# Document-type requirements
# ---------------------------------------------------------------------------


def validate_document_type_requirements(
    frontmatter: Frontmatter | None,
    directive_counts: dict[str, int],
    requirements: RequirementsTable,
) -> list[ValidationIssue]:
    """Check the directives and metadata the document's type asks for.

    Unknown types and ``other`` are not checked.
    """
    if not frontmatter:
        return []
    document_type = frontmatter.get("document-type")
    if not isinstance(document_type, str) or document_type == OTHER_DOCUMENT_TYPE:
        return []
    rules = requirements.for_type(document_type)
    if rules is None:
        return []

    issues: list[ValidationIssue] = []
    for kind in rules.required_directives:
        if not directive_counts.get(kind.value):
            issues.append(
                _error(
                    IssueCode.MISSING_REQUIRED_DIRECTIVE,
                    f'Document type "{document_type}" requires ::{kind.value} directive',
                    f"Add ::{kind.value} block to your document",
                    directive=kind.value,
                )
            )
    for kind in rules.recommended_directives:
        if not directive_counts.get(kind.value):
            issues.append(
                _warning(
                    IssueCode.MISSING_RECOMMENDED_DIRECTIVE,
                    f'Document type "{document_type}" recommends ::{kind.value} directive',
                    f"Consider adding ::{kind.value} block to your document",
                    directive=kind.value,
                )
            )
    for name in rules.required_metadata:
        if is_blank(frontmatter.get(name)):
            issues.append(
                _error(
                    IssueCode.MISSING_REQUIRED_FIELD,
                    f'Document type "{document_type}" requires frontmatter field: {name}',
                    f'Add "{name}: value" to your frontmatter',
                    field=name,
                )
            )
    for name in rules.recommended_metadata:
        if is_blank(frontmatter.get(name)):
            issues.append(
                _warning(
                    IssueCode.MISSING_RECOMMENDED_FIELD,
                    f'Document type "{document_type}" recommends frontmatter field: {name}',
                    f'Consider adding "{name}: value" to your frontmatter',
                    field=name,
                )
            )
    for kind, allowed in rules.max_directive_occurrences.items():
        observed = directive_counts.get(kind.value, 0)
        if observed > allowed:
            suggestion = (
                f"Keep only one ::{kind.value} directive"
                if allowed == 1
                else f"Reduce to {allowed} ::{kind.value} directives"
            )
            issues.append(
                _warning(
                    IssueCode.DUPLICATE_DIRECTIVE,
                    f"Directive ::{kind.value} appears {observed} times (maximum {allowed} recommended)",
                    suggestion,
                    directive=kind.value,
                )
            )
    return issues


# ---------------------------------------------------------------------------
# Semantic classes
# ---------------------------------------------------------------------------


def validate_semantic_classes(content: str, vocabulary: Vocabulary) -> list[ValidationIssue]:
    """Flag malformed or unknown ``{.class}`` tokens. Only ever warns."""
    issues: list[ValidationIssue] = []
    for number, line in _iter_source_lines(content):
        for match in SEMANTIC_CLASS_TOKEN_RE.finditer(line):
            name = match.group(1)
            column = match.start() + 1
            if not SEMANTIC_CLASS_NAME_RE.match(name):
                issues.append(
                    _warning(
                        IssueCode.INVALID_SEMANTIC_CLASS,
                        f"Malformed semantic class: {{.{name}}} at line {number}",
                        "Class names use lowercase letters, digits and hyphens",
                        line=number,
                        column=column,
                    )
                )
            elif name not in vocabulary.semantic_classes:
                issues.append(
                    _warning(
                        IssueCode.UNKNOWN_SEMANTIC_CLASS,
                        f"Unknown semantic class: {{.{name}}} at line {number}",
                        f"Valid classes: {', '.join(sorted(vocabulary.semantic_classes)[:5])}, ...",
                        line=number,
                        column=column,
                    )
                )
    return issues


# ---------------------------------------------------------------------------
# Cross-references
# ---------------------------------------------------------------------------


def _body_start_line(content: str) -> int:
    match = FRONTMATTER_RE.match(content)
    return match.group(0).count("\n") if match else 0


def collect_section_ids(content: str) -> set[str]:
    """Target ids that heading numbering assigns to the ATX headings in ``content``."""
    counter = SectionCounter()
    ids: set[str] = set()
    body_start = _body_start_line(content)
    for number, line in _iter_source_lines(content):
        if number <= body_start:
            continue
        match = ATX_HEADING_RE.match(BLOCKQUOTE_PREFIX_RE.sub("", line))
        if match:
            level = len(match.group(1))
            counter.advance(level)
            ids.add(f"section-{counter.number(level).replace('.', '-')}")
    return ids


def validate_references(content: str) -> list[ValidationIssue]:
    """Warn about ``@section-N`` references with no matching heading."""
    section_ids = collect_section_ids(content)
    body_start = _body_start_line(content)
    issues: list[ValidationIssue] = []
    for number, line in _iter_source_lines(content):
        if number <= body_start:
            continue
        for match in REFERENCE_RE.finditer(line):
            if match.group(1) != "section":
                continue
            target = f"section-{match.group(2)}"
            if target in section_ids:
                continue
            issues.append(
                _warning(
                    IssueCode.INVALID_REFERENCE,
                    f"Reference @{target} at line {number} points to non-existent section",
                    "Reference a numbered heading, e.g. @section-1 for the first top-level heading",
                    line=number,
                    column=match.start() + 1,
                )
            )
    return issues


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


class DocumentValidator:
    """Runs the configured checks against one requirement table and vocabulary."""

    def __init__(
        self,
        requirements: RequirementsTable | None = None,
        vocabulary: Vocabulary | None = None,
    ) -> None:
        self.requirements = requirements if requirements is not None else default_requirements()
        self.vocabulary = vocabulary if vocabulary is not None else default_vocabulary()

    def validate(self, content: str, options: ValidationOptions | None = None) -> ValidationReport:
        """Validate ``content`` and return the accumulated report.

        Raises:
            MissingInputError: If ``content`` is None.
        """
        if content is None:
            raise MissingInputError("Document content is required")
        options = options or ValidationOptions()
        content = content.replace("\r\n", "\n")
        findings = _Findings()

        frontmatter, field_lines = _parse_frontmatter(content)
        if options.check_frontmatter:
            findings.extend(validate_frontmatter(frontmatter, self.vocabulary, field_lines))

        occurrences, orphans = _scan_directives(content)
        counts = count_directives(occurrences)
        if options.check_directives:
            findings.extend(validate_directives(occurrences, orphans))

        if options.check_type_requirements:
            findings.extend(validate_document_type_requirements(frontmatter, counts, self.requirements))

        if options.check_semantic_classes:
            findings.extend(validate_semantic_classes(content, self.vocabulary))

        if options.check_references:
            findings.extend(validate_references(content))

        valid = not findings.errors and (not options.strict or not findings.warnings)
        logger.debug(
            "Validated document",
            extra={
                "valid": valid,
                "errors": len(findings.errors),
                "warnings": len(findings.warnings),
                "directives": len(occurrences),
            },
        )
        return ValidationReport(
            valid=valid,
            errors=findings.errors,
            warnings=findings.warnings,
            frontmatter=frontmatter,
            directives=occurrences,
            directive_counts=counts,
        )


def validate_document(content: str, options: ValidationOptions | None = None) -> ValidationReport:
    """Validate ``content`` with the shared requirement table and vocabulary."""
    return DocumentValidator().validate(content, options)
