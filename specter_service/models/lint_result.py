from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from xml.etree import ElementTree

from .constants import LintSource, Platform
from .errors import invalid_arguments


class LintSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    STYLE = "style"


@dataclass(frozen=True)
class LintIssue:
    rule_id: str
    severity: LintSeverity
    message: str
    file: str
    line: int
    column: Optional[int] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class FileLintResult:
    file: str
    issues: list[LintIssue]
    error_count: int
    warning_count: int


@dataclass(frozen=True)
class LintResult:
    linter: LintSource
    success: bool
    total_issues: int
    error_count: int
    warning_count: int
    info_count: int
    style_count: int
    files: list[FileLintResult]
    duration_ms: int = 0
    platform: Platform = Platform.ANDROID
    timestamp: float = field(default_factory=time.time)


def map_severity(severity: str) -> LintSeverity:
    lower = (severity or "").lower()
    if lower in ("error", "fatal"):
        return LintSeverity.ERROR
    if lower == "warning":
        return LintSeverity.WARNING
    if lower in ("info", "information"):
        return LintSeverity.INFO
    return LintSeverity.STYLE


def _parse_report(xml: str, *, linter: str) -> Optional[ElementTree.Element]:
    if not xml.strip():
        return None
    try:
        return ElementTree.fromstring(xml)
    except ElementTree.ParseError as e:
        raise invalid_arguments(f"Failed to parse {linter} report XML: {e}") from e


def _int_attr(node: ElementTree.Element, name: str) -> Optional[int]:
    value = node.get(name)
    if value is None or not value.isdigit():
        return None
    return int(value)


def parse_checkstyle_xml(xml: str, *, linter: str = "detekt") -> list[LintIssue]:
    """
    Parse a checkstyle-format report (what detekt and `ktlint --reporter=checkstyle` write).

    <checkstyle><file name="..."><error line column severity message source/></file></checkstyle>

    `source` is a dotted rule path such as "detekt.style.MagicNumber": the last
    segment becomes `rule_id`, the rest `category`. Errors missing line,
    severity, message or source are skipped.
    """
    root = _parse_report(xml, linter=linter)
    if root is None:
        return []

    issues = []
    for file_node in root.iter("file"):
        file_name = file_node.get("name", "")
        for error in file_node.iter("error"):
            line = _int_attr(error, "line")
            severity = error.get("severity")
            message = error.get("message")
            source = error.get("source")
            if line is None or severity is None or message is None or not source:
                continue
            head, _, rule = source.rpartition(".")
            issues.append(
                LintIssue(
                    rule_id=rule,
                    severity=map_severity(severity),
                    message=message,
                    file=file_name,
                    line=line,
                    column=_int_attr(error, "column"),
                    category=head,
                )
            )
    return issues


def parse_detekt_xml(xml: str) -> list[LintIssue]:
    return parse_checkstyle_xml(xml, linter="detekt")


def parse_android_lint_xml(xml: str) -> list[LintIssue]:
    """
    Parse an Android Lint XML report.

    <issues><issue id severity message category><location file line column/></issue></issues>

    Only the first location of an issue is used; issues without a file and
    line (project-wide checks) are skipped.
    """
    root = _parse_report(xml, linter="android-lint")
    if root is None:
        return []

    issues = []
    for issue in root.iter("issue"):
        location = issue.find("location")
        if location is None:
            continue
        line = _int_attr(location, "line")
        file_name = location.get("file")
        if line is None or not file_name:
            continue
        issues.append(
            LintIssue(
                rule_id=issue.get("id", ""),
                severity=map_severity(issue.get("severity", "")),
                message=issue.get("message", ""),
                file=file_name,
                line=line,
                column=_int_attr(location, "column"),
                category=issue.get("category"),
            )
        )
    return issues


def parse_lint_report(linter: LintSource, xml: str) -> list[LintIssue]:
    if linter is LintSource.ANDROID_LINT:
        return parse_android_lint_xml(xml)
    return parse_checkstyle_xml(xml, linter=linter.value)


def group_issues_by_file(issues: list[LintIssue]) -> list[FileLintResult]:
    """Group issues per file, files in order of first appearance."""
    by_file: dict[str, list[LintIssue]] = {}
    for issue in issues:
        by_file.setdefault(issue.file, []).append(issue)
    return [
        FileLintResult(
            file=file_name,
            issues=file_issues,
            error_count=sum(1 for i in file_issues if i.severity is LintSeverity.ERROR),
            warning_count=sum(1 for i in file_issues if i.severity is LintSeverity.WARNING),
        )
        for file_name, file_issues in by_file.items()
    ]


def build_lint_result(linter: LintSource, issues: list[LintIssue], *, duration_ms: int = 0) -> LintResult:
    counts = {severity: 0 for severity in LintSeverity}
    for issue in issues:
        counts[issue.severity] += 1
    return LintResult(
        linter=linter,
        success=counts[LintSeverity.ERROR] == 0,
        total_issues=len(issues),
        error_count=counts[LintSeverity.ERROR],
        warning_count=counts[LintSeverity.WARNING],
        info_count=counts[LintSeverity.INFO],
        style_count=counts[LintSeverity.STYLE],
        files=group_issues_by_file(issues),
        duration_ms=duration_ms,
    )


def lint_issue_to_dict(issue: LintIssue) -> dict[str, object]:
    return {
        "rule_id": issue.rule_id,
        "severity": issue.severity.value,
        "message": issue.message,
        "file": issue.file,
        "line": issue.line,
        "column": issue.column,
        "category": issue.category,
        "suggestion": get_lint_suggestion(issue),
    }


def create_lint_summary(result: LintResult) -> str:
    lines = [
        f"Lint Results: {'PASSED' if result.success else 'FAILED'}",
        f"Linter: {result.linter.value}",
        f"Total: {result.total_issues} | Errors: {result.error_count} | Warnings: {result.warning_count}",
        f"Duration: {result.duration_ms / 1000:.2f}s",
    ]

    if result.error_count > 0:
        lines.extend(["", "Errors:"])
        errors = [i for f in result.files for i in f.issues if i.severity is LintSeverity.ERROR]
        for issue in errors[:5]:
            location = f"{issue.file.rsplit('/', 1)[-1]}:{issue.line}"
            lines.append(f"  [{issue.rule_id}] {location}: {issue.message[:80]}")
        if result.error_count > 5:
            lines.append(f"  ... and {result.error_count - 5} more errors")

    return "\n".join(lines)


_RULE_SUGGESTIONS: tuple[tuple[str, str], ...] = (
    ("magicnumber", "Extract magic numbers to named constants for better readability."),
    ("longmethod", "Consider breaking this method into smaller, focused methods."),
    ("complexity", "Reduce cyclomatic complexity by extracting conditions or using early returns."),
    ("unused", "Remove unused code to improve maintainability."),
    ("hardcodedtext", "Move hardcoded strings to strings.xml for localization support."),
    ("missingpermission", "Add the required permission to AndroidManifest.xml."),
    ("obsoleteapi", "Update to use the recommended replacement API."),
)


def get_lint_suggestion(issue: LintIssue) -> Optional[str]:
    rule_id = issue.rule_id.lower()
    for needle, suggestion in _RULE_SUGGESTIONS:
        if needle in rule_id:
            return suggestion
    return None
