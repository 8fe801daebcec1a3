"""
Link/Resource Auditor.

Read-only quality pass over registered topics. Produces a report of
findings and never blocks ingestion or mutates the registry.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

import pandas as pd
import requests

from catalog_engine.models.findings import (
    BROKEN_URL_SYNTAX,
    DUPLICATE_RESOURCE_URL,
    FINDING_SEVERITY,
    HARD,
    LINK_TIMEOUT,
    SOFT,
    UNKNOWN_LANGUAGE_TAG,
    UNKNOWN_RESOURCE_TYPE,
    UNREACHABLE_URL,
    AuditFinding,
)
from catalog_engine.models.topic import Topic
import config.settings as settings

logger = logging.getLogger(__name__)


SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*$")

REPORT_COLUMNS = ["kind", "severity", "topicId", "path", "detail"]


def is_valid_url(url: str) -> bool:
    """Basic URL shape check: scheme + host, no whitespace."""
    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        # e.g. an unclosed IPv6 bracket
        return False
    return bool(SCHEME_RE.match(parsed.scheme or "")) and bool(hostname)


@dataclass(frozen=True)
class AuditReport:
    """Categorized audit findings, in topic order."""
    findings: Tuple[AuditFinding, ...] = field(default_factory=tuple)

    def by_kind(self, kind: str) -> List[AuditFinding]:
        return [f for f in self.findings if f.kind == kind]

    @property
    def broken_url_syntax(self) -> List[AuditFinding]:
        return self.by_kind(BROKEN_URL_SYNTAX)

    @property
    def duplicate_resource_url(self) -> List[AuditFinding]:
        return self.by_kind(DUPLICATE_RESOURCE_URL)

    @property
    def unknown_language_tag(self) -> List[AuditFinding]:
        return self.by_kind(UNKNOWN_LANGUAGE_TAG)

    @property
    def hard_findings(self) -> List[AuditFinding]:
        return [f for f in self.findings if f.severity == HARD]

    @property
    def soft_findings(self) -> List[AuditFinding]:
        return [f for f in self.findings if f.severity == SOFT]

    @property
    def has_hard_findings(self) -> bool:
        return any(f.severity == HARD for f in self.findings)

    def counts(self) -> Dict[str, int]:
        """Finding count per kind (every kind listed, zeros included)."""
        return {kind: len(self.by_kind(kind)) for kind in FINDING_SEVERITY}

    def to_dict(self) -> dict:
        return {
            "counts": self.counts(),
            "findings": [f.to_dict() for f in self.findings],
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per finding, for CSV export."""
        return pd.DataFrame([f.to_dict() for f in self.findings], columns=REPORT_COLUMNS)


class LinkChecker:
    """
    Live reachability check for resource URLs.

    Bounded fan-out: at most max_workers requests in flight. Timeouts and
    HTTP errors become soft findings.
    """

    def __init__(
        self,
        max_workers: int = settings.LINK_CHECK_MAX_WORKERS,
        timeout_seconds: float = settings.LINK_CHECK_TIMEOUT_SECONDS,
        user_agent: str = settings.LINK_CHECK_USER_AGENT
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self.timeout_seconds = timeout_seconds
        self.headers = {"User-Agent": user_agent}

    def check_url(self, url: str) -> Tuple[str, Optional[str], str]:
        """
        Check one URL.

        Returns:
            (url, finding kind or None if healthy, detail)
        """
        try:
            response = requests.head(
                url, headers=self.headers, timeout=self.timeout_seconds, allow_redirects=True
            )
            if response.status_code >= 400:
                # Some hosts reject HEAD, retry with GET
                response = requests.get(
                    url, headers=self.headers, timeout=self.timeout_seconds,
                    allow_redirects=True, stream=True
                )
                response.close()
            if response.status_code >= 400:
                return url, UNREACHABLE_URL, f"HTTP {response.status_code}"
            return url, None, f"HTTP {response.status_code}"
        except requests.Timeout:
            return url, LINK_TIMEOUT, f"no response within {self.timeout_seconds:g}s"
        except requests.RequestException as e:
            return url, UNREACHABLE_URL, f"{type(e).__name__}: {e}"

    def check(self, topics: Iterable[Topic]) -> List[AuditFinding]:
        """
        Check every unique, well-formed URL referenced by the topics.

        Args:
            topics: Topics in registry order

        Returns:
            Findings for unhealthy URLs, one per reference, in topic order
        """
        references: Dict[str, List[Tuple[str, str]]] = {}  # url -> [(topic_id, path)]
        for topic in topics:
            for path, resource in _iter_links(topic):
                if is_valid_url(resource.url):
                    references.setdefault(resource.url, []).append((topic.id, path))

        urls = list(references)
        logger.info(f"Checking {len(urls)} unique URLs with {self.max_workers} workers")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            results = list(executor.map(self.check_url, urls))

        findings = []
        for url, kind, detail in results:
            if kind is None:
                continue
            logger.warning(f"Link check failed for {url}: {detail}")
            for topic_id, path in references[url]:
                findings.append(AuditFinding(kind, topic_id, path, f"{url} ({detail})"))
        return findings


def _iter_links(topic: Topic):
    """Yield (path, resource) for resources and discussion links."""
    for i, resource in enumerate(topic.resources):
        yield f"resources[{i}]", resource
    for i, discussion in enumerate(topic.discussions):
        yield f"discussions[{i}]", discussion


class LinkAuditor:
    """
    Static audit of resource links, resource types and code languages.

    Deterministic: the same topics always yield the same report.
    """

    def __init__(
        self,
        known_languages: Iterable[str] = settings.KNOWN_LANGUAGE_TAGS,
        known_resource_types: Iterable[str] = settings.KNOWN_RESOURCE_TYPES,
        link_checker: Optional[LinkChecker] = None
    ):
        """
        Initialize auditor.

        Args:
            known_languages: Tracked code language tags
            known_resource_types: Tracked resource types
            link_checker: Optional live checker; None skips reachability checks
        """
        self.known_languages = frozenset(known_languages)
        self.known_resource_types = frozenset(known_resource_types)
        self.link_checker = link_checker

    def audit(self, topics: Iterable[Topic]) -> AuditReport:
        """
        Audit topics and return categorized findings.

        Args:
            topics: Registered topics, in registry order

        Returns:
            AuditReport (static findings first, then live-check findings)
        """
        topics = list(topics)
        findings: List[AuditFinding] = []
        for topic in topics:
            findings.extend(self._audit_topic(topic))

        if self.link_checker is not None:
            findings.extend(self.link_checker.check(topics))

        report = AuditReport(findings=tuple(findings))
        logger.info(
            f"Audit complete: {len(report.hard_findings)} hard, "
            f"{len(report.soft_findings)} soft findings across {len(topics)} topics"
        )
        return report

    def _audit_topic(self, topic: Topic) -> List[AuditFinding]:
        findings = []

        for path, resource in _iter_links(topic):
            if not is_valid_url(resource.url):
                findings.append(AuditFinding(
                    BROKEN_URL_SYNTAX, topic.id, f"{path}.url",
                    f"'{resource.url}' is not a valid URL (scheme and host required)"
                ))
            if resource.type is not None and resource.type not in self.known_resource_types:
                findings.append(AuditFinding(
                    UNKNOWN_RESOURCE_TYPE, topic.id, f"{path}.type",
                    f"unknown resource type '{resource.type}'"
                ))

        # Duplicates only within the topic's own resources list
        first_seen: Dict[str, int] = {}
        for i, resource in enumerate(topic.resources):
            key = resource.url.rstrip("/")
            if key in first_seen:
                findings.append(AuditFinding(
                    DUPLICATE_RESOURCE_URL, topic.id, f"resources[{i}].url",
                    f"'{resource.url}' duplicates resources[{first_seen[key]}]"
                ))
            else:
                first_seen[key] = i

        for i, example in enumerate(topic.code_examples):
            if example.language not in self.known_languages:
                findings.append(AuditFinding(
                    UNKNOWN_LANGUAGE_TAG, topic.id, f"codeExamples[{i}].language",
                    f"unknown language tag '{example.language}'"
                ))

        return findings


def audit(topics: Iterable[Topic]) -> AuditReport:
    """Static audit with the configured language and resource-type sets."""
    return LinkAuditor().audit(topics)
