"""Aggregation over a collection of page audits.

Functions:
    average_score(audits)               -> int
    counts_by_severity(audits)          -> dict
    filter_pages(audits, severity)      -> list   (page-level)
    filter_issues(audit, severity)      -> tuple  (issue-level)
    sort_pages(audits, key, direction)  -> list
    filter_counts(audits)               -> dict
    score_buckets(audits)               -> dict
    build_summary(audits)               -> dict
    build_view(audits, state)           -> dict

Nothing here mutates the audit collection; filtered and sorted results are
new lists. UI state lives in a caller-owned ``ViewState``.
"""

import math
from dataclasses import dataclass
from typing import Sequence

from a11y_audit.models import SEVERITIES, Issue, PageAudit

SEVERITY_FILTERS = ("all",) + SEVERITIES
SORT_KEYS        = ("score", "url", "issues")
SORT_DIRECTIONS  = ("asc", "desc")

_SORT_FIELDS = {
    "score":  lambda a: a.score,
    "url":    lambda a: a.url,
    "issues": lambda a: len(a.issues),
}

# (label, lowest score, highest score), highest bucket first
_SCORE_BUCKETS = (
    ("90-100", 90, 100),
    ("70-89",  70, 89),
    ("50-69",  50, 69),
    ("0-49",   0,  49),
)


# ---------------------------------------------------------------------------
# View state
# ---------------------------------------------------------------------------

@dataclass
class ViewState:
    severity: str = "all"
    sort_key: str = "score"
    sort_dir: str = "asc"
    expanded: str | None = None
    export_format: str = "json"

    def toggle_sort(self, key: str) -> None:
        """Flip the direction when *key* is already active, else select it ascending."""
        _check_choice("sort key", key, SORT_KEYS)
        if self.sort_key == key:
            self.sort_dir = "desc" if self.sort_dir == "asc" else "asc"
        else:
            self.sort_key = key
            self.sort_dir = "asc"

    def toggle_expanded(self, url: str) -> None:
        self.expanded = None if self.expanded == url else url


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

def average_score(audits: Sequence[PageAudit]) -> int:
    """Mean score rounded half-up; 0 for an empty collection."""
    if not audits:
        return 0
    mean = sum(a.score for a in audits) / len(audits)
    return int(math.floor(mean + 0.5))


def counts_by_severity(audits: Sequence[PageAudit]) -> dict[str, int]:
    counts = {s: 0 for s in SEVERITIES}
    for audit in audits:
        for issue in audit.issues:
            if issue.severity in counts:
                counts[issue.severity] += 1
    return counts


def filter_counts(audits: Sequence[PageAudit]) -> dict[str, int]:
    """Number of pages each severity filter would show."""
    return {s: len(filter_pages(audits, s)) for s in SEVERITY_FILTERS}


def score_buckets(audits: Sequence[PageAudit]) -> dict[str, int]:
    return {
        label: sum(1 for a in audits if low <= a.score <= high)
        for label, low, high in _SCORE_BUCKETS
    }


def score_grade(score: int) -> str:
    if score >= 80:
        return "good"
    if score >= 50:
        return "fair"
    return "poor"


def page_badges(audit: PageAudit) -> dict:
    errors   = sum(1 for i in audit.issues if i.severity == "error")
    warnings = sum(1 for i in audit.issues if i.severity == "warning")
    return {"errors": errors, "warnings": warnings, "pass": not errors and not warnings}


def result_banner(audits: Sequence[PageAudit]) -> dict:
    """Overall outcome of the audit batch with a one-line headline."""
    counts = counts_by_severity(audits)
    errors, warnings = counts["error"], counts["warning"]

    if not errors and not warnings:
        return {
            "status": "pass",
            "headline": "All pages pass accessibility checks!",
        }
    if errors:
        return {
            "status": "errors",
            "headline": f"{_plural(errors, 'error')} and {_plural(warnings, 'warning')} found",
        }
    return {
        "status": "warnings",
        "headline": f"{_plural(warnings, 'warning')} found",
    }


# ---------------------------------------------------------------------------
# Filtering and sorting
# ---------------------------------------------------------------------------

def filter_pages(audits: Sequence[PageAudit], severity: str) -> list[PageAudit]:
    """Pages holding at least one issue of *severity* (every page for ``"all"``)."""
    _check_choice("severity", severity, SEVERITY_FILTERS)
    if severity == "all":
        return list(audits)
    return [a for a in audits if any(i.severity == severity for i in a.issues)]


def filter_issues(audit: PageAudit, severity: str) -> tuple[Issue, ...]:
    """Issues of one page matching *severity*, used for an expanded page."""
    _check_choice("severity", severity, SEVERITY_FILTERS)
    if severity == "all":
        return audit.issues
    return tuple(i for i in audit.issues if i.severity == severity)


def sort_pages(
    audits: Sequence[PageAudit],
    key: str = "score",
    direction: str = "asc",
) -> list[PageAudit]:
    """Return a sorted copy. Pages with equal keys keep their relative order."""
    _check_choice("sort key", key, SORT_KEYS)
    _check_choice("sort direction", direction, SORT_DIRECTIONS)

    return sorted(audits, key=_SORT_FIELDS[key], reverse=direction == "desc")


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------

def build_summary(audits: Sequence[PageAudit]) -> dict:
    return {
        "pages":         len(audits),
        "average_score": average_score(audits),
        "by_severity":   counts_by_severity(audits),
        "filter_counts": filter_counts(audits),
        "score_buckets": score_buckets(audits),
        "banner":        result_banner(audits),
    }


def build_view(audits: Sequence[PageAudit], state: ViewState) -> dict:
    """Everything a presentation layer needs to render the current view."""
    visible = sort_pages(filter_pages(audits, state.severity), state.sort_key, state.sort_dir)
    pages = [
        {
            "url":      a.url,
            "score":    a.score,
            "grade":    score_grade(a.score),
            "badges":   page_badges(a),
            "expanded": a.url == state.expanded,
            "issues":   [i.to_dict() for i in filter_issues(a, state.severity)],
        }
        for a in visible
    ]
    return {
        **build_summary(audits),
        "severity":  state.severity,
        "sort_key":  state.sort_key,
        "sort_dir":  state.sort_dir,
        "page_list": pages,
    }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _check_choice(name: str, value: str, allowed: tuple[str, ...]) -> None:
    if value not in allowed:
        raise ValueError(f"Unknown {name} '{value}'. Expected one of: {', '.join(allowed)}")


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"
