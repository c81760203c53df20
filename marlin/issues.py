"""Structured diagnostics collected while compiling a site."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto


class IssueSeverity(Enum):
    """Severity level for build issues."""

    ERROR = auto()
    WARNING = auto()


class IssueKind(str, Enum):
    """What went wrong for the unit that was skipped or failed."""

    UNKNOWN_MIME = "unknown-mime"
    MISSING_ENGINE = "missing-engine"
    INVALID_JSON = "invalid-json"
    RENDER_FAILED = "render-failed"
    MISSING_CONTENT = "missing-content"
    UNREADABLE_DIRECTORY = "unreadable-directory"
    UNREADABLE_FILE = "unreadable-file"
    WRITE_FAILED = "write-failed"
    TIMEOUT = "timeout"


@dataclass(frozen=True, slots=True)
class BuildIssue:
    """A recoverable problem tied to one file, segment or route."""

    kind: IssueKind
    severity: IssueSeverity
    message: str
    path: str | None = None
    route: str | None = None
    mime: str | None = None

    def location(self) -> str:
        parts = [part for part in (self.route, self.path) if part]
        return " :: ".join(parts)

    def __str__(self) -> str:
        location = self.location()
        if location:
            return f"{location} - {self.message}"
        return self.message


def record(
    issues: list[BuildIssue] | None,
    logger: logging.Logger,
    kind: IssueKind,
    message: str,
    *,
    severity: IssueSeverity = IssueSeverity.WARNING,
    path: object = None,
    route: str | None = None,
    mime: str | None = None,
) -> BuildIssue:
    """Log an issue and append it to ``issues`` when a collector is given."""
    issue = BuildIssue(
        kind=kind,
        severity=severity,
        message=message,
        path=None if path is None else str(path),
        route=route,
        mime=mime,
    )
    level = logging.ERROR if severity is IssueSeverity.ERROR else logging.WARNING
    logger.log(level, "%s", issue)
    if issues is not None:
        issues.append(issue)
    return issue


def count(issues: list[BuildIssue], severity: IssueSeverity) -> int:
    return sum(1 for issue in issues if issue.severity is severity)
