"""
Unit tests for the Link/Resource Auditor.

Note: Live link checks use mocked requests calls, no network access.
"""

from unittest.mock import MagicMock, patch

import pandas as pd
import pytest
import requests

from catalog_engine.registry import TopicRegistry
from catalog_engine.stages.auditing import (
    AuditReport,
    LinkAuditor,
    LinkChecker,
    audit,
    is_valid_url,
)


def resource(url, **extra):
    return {"title": "Link", "url": url, **extra}


@pytest.mark.parametrize("url, expected", [
    ("https://en.wikipedia.org/wiki/ACID", True),
    ("http://localhost:8080/docs", True),
    ("ftp://files.example.com/rfc.txt", True),
    ("not a url", False),
    ("www.example.com/page", False),
    ("https://", False),
    ("https://exa mple.com", False),
    ("mailto:someone@example.com", False),
    ("http://[broken", False),
    ("", False),
])
def test_is_valid_url(url, expected):
    assert is_valid_url(url) is expected


def test_clean_topic_has_no_findings(make_topic):
    report = audit([make_topic()])

    assert report.findings == ()
    assert not report.has_hard_findings


def test_broken_url_is_reported_but_registration_succeeds(make_topic):
    """Test that a malformed URL is a hard finding that never blocks register()."""
    topic = make_topic(resources=[resource("not a url")])
    registry = TopicRegistry()
    registry.register(topic)

    report = audit(registry.all())

    assert len(report.broken_url_syntax) == 1
    finding = report.broken_url_syntax[0]
    assert finding.topic_id == "acid-properties"
    assert finding.path == "resources[0].url"
    assert report.has_hard_findings
    assert registry.by_id("acid-properties") is topic


def test_unclosed_ipv6_bracket_is_broken_url(make_topic):
    report = LinkAuditor().audit([make_topic(resources=[resource("http://[broken")])])

    assert [f.kind for f in report.findings] == ["broken_url_syntax"]


def test_duplicate_resource_url_is_soft(make_topic):
    topic = make_topic(resources=[
        resource("https://example.com/acid"),
        resource("https://example.com/other"),
        resource("https://example.com/acid/"),
    ])

    report = audit([topic])

    assert [f.path for f in report.duplicate_resource_url] == ["resources[2].url"]
    assert "resources[0]" in report.duplicate_resource_url[0].detail
    assert not report.has_hard_findings
    assert report.soft_findings == report.duplicate_resource_url


def test_same_url_in_different_topics_is_not_duplicate(make_topic):
    url = "https://example.com/shared"
    report = audit([
        make_topic(id="first", resources=[resource(url)]),
        make_topic(id="second", resources=[resource(url)]),
    ])

    assert report.duplicate_resource_url == []


def test_unknown_language_tag(make_topic):
    topic = make_topic(codeExamples=[
        {"title": "Known", "language": "java", "code": "class A {}"},
        {"title": "Unknown", "language": "cobol", "code": "DISPLAY 'HI'."},
    ])

    report = audit([topic])

    assert [f.path for f in report.unknown_language_tag] == ["codeExamples[1].language"]
    assert "cobol" in report.unknown_language_tag[0].detail


def test_known_languages_are_configurable(make_topic):
    topic = make_topic(codeExamples=[{"title": "T", "language": "cobol", "code": "x"}])

    report = LinkAuditor(known_languages={"cobol"}).audit([topic])

    assert report.unknown_language_tag == []


def test_unknown_resource_type(make_topic):
    report = audit([make_topic(resources=[resource("https://example.com", type="podcast")])])

    assert [f.kind for f in report.findings] == ["unknown_resource_type"]


def test_discussion_links_are_audited(make_topic):
    report = audit([make_topic(discussions=[resource("forum/acid")])])

    assert [f.path for f in report.broken_url_syntax] == ["discussions[0].url"]


def test_idempotent_audit(make_topic):
    """Test that auditing the same input twice gives identical reports."""
    topics = [
        make_topic(id="one", resources=[resource("bad url"), resource("bad url")]),
        make_topic(id="two", codeExamples=[{"title": "T", "language": "brainfuck", "code": "+"}]),
    ]

    assert audit(topics) == audit(topics)


def test_report_counts_and_dataframe(make_topic):
    report = audit([make_topic(resources=[resource("bad url")])])

    counts = report.counts()
    assert counts["broken_url_syntax"] == 1
    assert counts["duplicate_resource_url"] == 0

    df = report.to_dataframe()
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["kind", "severity", "topicId", "path", "detail"]
    assert df.iloc[0]["severity"] == "hard"

    assert AuditReport().to_dataframe().empty


def _response(status):
    response = MagicMock()
    response.status_code = status
    return response


def test_link_checker_healthy_url():
    checker = LinkChecker(max_workers=2, timeout_seconds=1)

    with patch("catalog_engine.stages.auditing.requests.head", return_value=_response(200)) as head:
        url, kind, _ = checker.check_url("https://example.com")

    assert url == "https://example.com"
    assert kind is None
    assert head.call_args.kwargs["timeout"] == 1


def test_link_checker_falls_back_to_get():
    """Test that a HEAD rejection is retried with GET."""
    checker = LinkChecker(max_workers=1)

    with patch("catalog_engine.stages.auditing.requests.head", return_value=_response(405)), \
         patch("catalog_engine.stages.auditing.requests.get", return_value=_response(200)) as get:
        _, kind, _ = checker.check_url("https://example.com")

    assert kind is None
    get.assert_called_once()


def test_link_checker_timeout_is_soft_finding(make_topic):
    """Test that a timeout becomes a soft finding rather than a failure."""
    topic = make_topic(resources=[resource("https://slow.example.com")])
    checker = LinkChecker(max_workers=2, timeout_seconds=0.5)

    with patch("catalog_engine.stages.auditing.requests.head",
               side_effect=requests.Timeout("timed out")):
        report = LinkAuditor(link_checker=checker).audit([topic])

    assert [f.kind for f in report.findings] == ["link_timeout"]
    assert report.findings[0].severity == "soft"
    assert not report.has_hard_findings


def test_link_checker_reports_each_reference(make_topic):
    """Test that one dead URL is checked once but reported per reference."""
    url = "https://gone.example.com"
    topics = [
        make_topic(id="first", resources=[resource(url)]),
        make_topic(id="second", resources=[resource(url), resource("not a url")]),
    ]
    checker = LinkChecker(max_workers=4)

    with patch("catalog_engine.stages.auditing.requests.head", return_value=_response(404)) as head, \
         patch("catalog_engine.stages.auditing.requests.get", return_value=_response(404)):
        findings = checker.check(topics)

    assert head.call_count == 1  # Malformed URLs are never requested
    assert [(f.kind, f.topic_id) for f in findings] == [
        ("unreachable_url", "first"), ("unreachable_url", "second"),
    ]


def test_link_checker_connection_error():
    checker = LinkChecker(max_workers=1)

    with patch("catalog_engine.stages.auditing.requests.head",
               side_effect=requests.ConnectionError("refused")):
        _, kind, detail = checker.check_url("https://down.example.com")

    assert kind == "unreachable_url"
    assert "ConnectionError" in detail


def test_link_checker_requires_a_worker():
    with pytest.raises(ValueError):
        LinkChecker(max_workers=0)
