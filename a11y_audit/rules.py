"""Accessibility rule evaluator.

Usage:
    audit  = evaluate("https://example.com/", html)
    audits = audit_records([{"url": ..., "content": ...}, ...])

Every rule is a plain function ``(html) -> Finding | None`` registered in
the ordered ``RULES`` table. ``evaluate`` folds the table into a single
``PageAudit``: issues keep table order and the score starts at 100 minus
each finding's penalty, clamped at 0.

The checks are pattern matches over the markup text, not a parsed DOM.
"""

import re
from typing import Any, Callable, Iterable, NamedTuple

from a11y_audit.models import Issue, PageAudit

MAX_SCORE = 100

# Input types that need a visible label
_LABELABLE_TYPES = ("text", "email", "password", "tel", "number", "search")

_HTML_LANG_RE   = re.compile(r"<html[^>]*lang=", re.IGNORECASE)
_IMG_NO_ALT_RE  = re.compile(r"<img(?![^>]*alt=)[^>]*>", re.IGNORECASE)
_H1_RE          = re.compile(r"<h1[\s>]", re.IGNORECASE)
_HEADING_RE     = re.compile(r"<h([1-6])[\s>]", re.IGNORECASE)
_EMPTY_LINK_RE  = re.compile(r"<a(?:\s[^>]*)?>\s*</a>", re.IGNORECASE)
_INPUT_RE       = re.compile(
    r"<input[^>]*type=[\"'](?:" + "|".join(_LABELABLE_TYPES) + r")[\"'][^>]*>",
    re.IGNORECASE,
)
_LABEL_RE       = re.compile(r"<label", re.IGNORECASE)
_MAIN_RE        = re.compile(r"<main[\s>]|role=[\"']main[\"']", re.IGNORECASE)
_NAV_RE         = re.compile(r"<nav[\s>]|role=[\"']navigation[\"']", re.IGNORECASE)


class Finding(NamedTuple):
    issue: Issue
    penalty: int


Rule = Callable[[str], Finding | None]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def check_html_lang(html: str) -> Finding | None:
    if _HTML_LANG_RE.search(html):
        return None
    return Finding(
        Issue(
            rule="html-lang",
            severity="error",
            message="Missing lang attribute on <html>",
            suggestion='Add lang="en" to the <html> tag',
        ),
        10,
    )


def check_img_alt(html: str) -> Finding | None:
    missing = len(_IMG_NO_ALT_RE.findall(html))
    if not missing:
        return None
    return Finding(
        Issue(
            rule="img-alt",
            severity="error",
            message=f"{missing} image(s) missing alt attribute",
            suggestion="Add descriptive alt text to all images",
        ),
        min(20, missing * 5),
    )


def check_single_h1(html: str) -> Finding | None:
    count = len(_H1_RE.findall(html))
    if count == 1:
        return None
    if count > 1:
        issue = Issue(
            rule="single-h1",
            severity="warning",
            message=f"{count} H1 tags found",
            suggestion="Use only one H1 per page",
        )
    else:
        issue = Issue(
            rule="single-h1",
            severity="warning",
            message="No H1 tag found",
            suggestion="Add a single H1 heading",
        )
    return Finding(issue, 5)


def check_heading_order(html: str) -> Finding | None:
    """Report the first skipped heading level only."""
    levels = [int(level) for level in _HEADING_RE.findall(html)]
    for previous, current in zip(levels, levels[1:]):
        if current - previous > 1:
            return Finding(
                Issue(
                    rule="heading-order",
                    severity="warning",
                    message=f"Heading level skipped: H{previous} to H{current}",
                    suggestion="Use sequential heading levels",
                ),
                5,
            )
    return None


def check_empty_links(html: str) -> Finding | None:
    empty = len(_EMPTY_LINK_RE.findall(html))
    if not empty:
        return None
    return Finding(
        Issue(
            rule="empty-links",
            severity="error",
            message=f"{empty} empty link(s) found",
            suggestion="Add text content or aria-label to links",
        ),
        min(10, empty * 3),
    )


def check_form_labels(html: str) -> Finding | None:
    unlabeled = len(_INPUT_RE.findall(html)) - len(_LABEL_RE.findall(html))
    if unlabeled <= 0:
        return None
    return Finding(
        Issue(
            rule="form-labels",
            severity="error",
            message=f"{unlabeled} input(s) potentially missing labels",
            suggestion="Associate a <label> with each form input",
        ),
        min(15, unlabeled * 5),
    )


def check_landmark_main(html: str) -> Finding | None:
    if _MAIN_RE.search(html):
        return None
    return Finding(
        Issue(
            rule="landmark-main",
            severity="info",
            message="No <main> landmark found",
            suggestion="Wrap main content in a <main> element",
        ),
        3,
    )


def check_landmark_nav(html: str) -> Finding | None:
    if _NAV_RE.search(html):
        return None
    return Finding(
        Issue(
            rule="landmark-nav",
            severity="info",
            message="No <nav> landmark found",
            suggestion="Wrap navigation in a <nav> element",
        ),
        2,
    )


# Evaluation order is part of the output contract
RULES: tuple[Rule, ...] = (
    check_html_lang,
    check_img_alt,
    check_single_h1,
    check_heading_order,
    check_empty_links,
    check_form_labels,
    check_landmark_main,
    check_landmark_nav,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def evaluate(url: str, html: str, rules: Iterable[Rule] = RULES) -> PageAudit:
    """Run every rule against *html* and fold the findings into a PageAudit."""
    issues: list[Issue] = []
    penalty = 0
    for rule in rules:
        finding = rule(html)
        if finding is None:
            continue
        issues.append(finding.issue)
        penalty += finding.penalty

    return PageAudit(url=url, score=max(0, MAX_SCORE - penalty), issues=tuple(issues))


def audit_records(records: Iterable[dict[str, Any]]) -> list[PageAudit]:
    """Evaluate crawl records, skipping any without a string ``url`` and ``content``."""
    return [
        evaluate(record["url"], record["content"])
        for record in records
        if isinstance(record, dict) and _is_text(record.get("url")) and _is_text(record.get("content"))
    ]


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value)
