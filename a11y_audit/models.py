"""Data models for accessibility audit results.

Contains the dataclasses shared by the rule evaluator, the aggregator and
the exporter:
    - Issue       one rule violation on a page
    - PageAudit   score + ordered issues for one page

Both are immutable and serialize to plain dicts with a stable key order.
"""

from dataclasses import dataclass
from typing import Any

SEVERITIES = ("error", "warning", "info")


@dataclass(frozen=True)
class Issue:
    rule: str
    severity: str
    message: str
    suggestion: str

    def to_dict(self) -> dict[str, str]:
        return {
            "rule":       self.rule,
            "severity":   self.severity,
            "message":    self.message,
            "suggestion": self.suggestion,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Issue":
        return cls(
            rule=raw["rule"],
            severity=raw["severity"],
            message=raw["message"],
            suggestion=raw["suggestion"],
        )


@dataclass(frozen=True)
class PageAudit:
    """Evaluation result for one page.

    ``issues`` keeps rule-evaluation order and is stored as a tuple so an
    audit can be shared between views without being mutated.
    """

    url: str
    score: int
    issues: tuple[Issue, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "url":    self.url,
            "score":  self.score,
            "issues": [i.to_dict() for i in self.issues],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "PageAudit":
        return cls(
            url=raw["url"],
            score=int(raw["score"]),
            issues=tuple(Issue.from_dict(i) for i in raw.get("issues") or []),
        )
