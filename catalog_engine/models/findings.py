"""
Finding data models.

Structural validation errors (blocking) and audit findings (reported).
"""

from dataclasses import dataclass


# Audit finding kinds
BROKEN_URL_SYNTAX = "broken_url_syntax"
DUPLICATE_RESOURCE_URL = "duplicate_resource_url"
UNKNOWN_LANGUAGE_TAG = "unknown_language_tag"
UNKNOWN_RESOURCE_TYPE = "unknown_resource_type"
UNREACHABLE_URL = "unreachable_url"
LINK_TIMEOUT = "link_timeout"

HARD = "hard"
SOFT = "soft"

FINDING_SEVERITY = {
    BROKEN_URL_SYNTAX: HARD,
    DUPLICATE_RESOURCE_URL: SOFT,
    UNKNOWN_LANGUAGE_TAG: SOFT,
    UNKNOWN_RESOURCE_TYPE: SOFT,
    UNREACHABLE_URL: SOFT,
    LINK_TIMEOUT: SOFT,
}


@dataclass(frozen=True)
class ValidationError:
    """
    One structural defect in a candidate record.
    Output of the schema validator; always blocks admission.
    """
    path: str  # Authoring field path, e.g. "codeExamples[2].code"
    reason: str  # Human-readable explanation

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}" if self.path else self.reason


@dataclass(frozen=True)
class AuditFinding:
    """A non-blocking quality issue detected in registered content."""
    kind: str
    topic_id: str
    path: str  # e.g. "resources[1].url"
    detail: str

    def __post_init__(self):
        # Validate kind
        if self.kind not in FINDING_SEVERITY:
            raise ValueError(
                f"Invalid finding kind: {self.kind}. Must be one of {', '.join(FINDING_SEVERITY)}"
            )

    @property
    def severity(self) -> str:
        return FINDING_SEVERITY[self.kind]

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "severity": self.severity,
            "topicId": self.topic_id,
            "path": self.path,
            "detail": self.detail,
        }
