"""Export audit results for download.

Functions:
    export(audits, fmt, today=None)   -> ExportResult
    load_json_export(text)            -> list[PageAudit]

Formats:
    json       full audit collection, pretty-printed
    csv        one row per issue, every field quoted
    markdown   narrative report with one section per page

The exporter only relies on the ``PageAudit`` shape, so any pre-filtered
or sorted subset can be passed in.
"""

import csv
import io
import json
from datetime import date, datetime, timezone
from typing import NamedTuple, Sequence

from a11y_audit.models import PageAudit
from a11y_audit.reports.summary import average_score

FORMATS = ("json", "csv", "markdown")

# format -> (file extension, MIME type)
_FILE_TYPES = {
    "json":     ("json", "application/json"),
    "csv":      ("csv",  "text/csv"),
    "markdown": ("md",   "text/markdown"),
}

_CSV_HEADER = ("URL", "Score", "Rule", "Severity", "Message", "Suggestion")


class ExportResult(NamedTuple):
    content: str
    filename: str
    mime_type: str


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def export(audits: Sequence[PageAudit], fmt: str, today: date | None = None) -> ExportResult:
    """Serialize *audits* as *fmt* and name the file after *today* (UTC by default)."""
    if fmt not in _FILE_TYPES:
        raise ValueError(f"Unknown export format '{fmt}'. Expected one of: {', '.join(FORMATS)}")

    today = today or datetime.now(timezone.utc).date()
    stamp = today.isoformat()

    if fmt == "json":
        content = _to_json(audits)
    elif fmt == "csv":
        content = _to_csv(audits)
    else:
        content = _to_markdown(audits, stamp)

    ext, mime_type = _FILE_TYPES[fmt]
    return ExportResult(content, f"a11y-audit-{stamp}.{ext}", mime_type)


def load_json_export(text: str) -> list[PageAudit]:
    """Rebuild the audit collection from a json export.

    Raises:
        ValueError: if *text* is not a json export (``json.JSONDecodeError``
                    is a ``ValueError`` too).
    """
    raw = json.loads(text)
    if not isinstance(raw, list):
        raise ValueError("Expected a JSON array of page audits.")
    try:
        return [PageAudit.from_dict(item) for item in raw]
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed page audit entry: {exc}") from exc


# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------

def _to_json(audits: Sequence[PageAudit]) -> str:
    return json.dumps([a.to_dict() for a in audits], indent=2, ensure_ascii=False)


def _to_csv(audits: Sequence[PageAudit]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(_CSV_HEADER)

    for audit in audits:
        score = str(audit.score)
        if not audit.issues:
            writer.writerow((audit.url, score, "", "", "No issues", ""))
            continue
        for issue in audit.issues:
            writer.writerow(
                (audit.url, score, issue.rule, issue.severity, issue.message, issue.suggestion)
            )

    return buf.getvalue()


def _to_markdown(audits: Sequence[PageAudit], stamp: str) -> str:
    lines = [
        "# Accessibility Audit Report",
        "",
        f"**Date:** {stamp}",
        f"**Pages Audited:** {len(audits)}",
        "",
        f"**Average Score:** {average_score(audits)}/100",
        "",
        "---",
        "",
    ]

    for audit in audits:
        lines += [f"## {audit.url}", "", f"**Score:** {audit.score}/100", ""]
        if not audit.issues:
            lines += ["No issues found.", ""]
            continue
        lines += [
            "| Severity | Rule | Message | Suggestion |",
            "|----------|------|---------|------------|",
        ]
        for issue in audit.issues:
            lines.append(
                f"| {issue.severity.upper()} | {issue.rule} | {issue.message} | {issue.suggestion} |"
            )
        lines.append("")

    # each section, the last included, ends with a blank line
    return "\n".join(lines + [""])
