"""
Build Orchestrator.

Coordinates one catalog build: load -> validate -> register -> freeze
-> index -> audit -> export. Authoring problems are collected and judged
together at the end; I/O failures abort immediately.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from catalog_engine.models.findings import ValidationError
from catalog_engine.registry.topic_registry import DuplicateIdError, TopicRegistry
from catalog_engine.stages.auditing import AuditReport, LinkAuditor, LinkChecker
from catalog_engine.stages.export import CatalogExporter, CatalogSnapshot
from catalog_engine.stages.indexing import CatalogIndex, build_index
from catalog_engine.stages.ingestion import ContentLoader
from catalog_engine.stages.validation import SchemaValidator
from catalog_engine.utils.storage import StorageManager

logger = logging.getLogger(__name__)


@dataclass
class DuplicateIdProblem:
    topic_id: str
    source: str  # Candidate that was rejected


@dataclass
class BuildReport:
    """Everything one build found, plus what it produced."""
    strict: bool = False
    candidates_loaded: int = 0
    validation_errors: Dict[str, List[ValidationError]] = field(default_factory=dict)
    duplicate_ids: List[DuplicateIdProblem] = field(default_factory=list)
    audit: AuditReport = field(default_factory=AuditReport)
    registry: Optional[TopicRegistry] = None
    index: Optional[CatalogIndex] = None
    snapshot: Optional[CatalogSnapshot] = None
    snapshot_path: Optional[str] = None

    @property
    def validation_error_count(self) -> int:
        return sum(len(errors) for errors in self.validation_errors.values())

    @property
    def has_blocking_errors(self) -> bool:
        """Validation or duplicate-id errors."""
        return bool(self.validation_errors or self.duplicate_ids)

    @property
    def audit_failed(self) -> bool:
        """Hard findings always fail; soft findings fail only in strict mode."""
        if self.strict:
            return bool(self.audit.findings)
        return self.audit.has_hard_findings

    @property
    def passed(self) -> bool:
        return not self.has_blocking_errors and not self.audit_failed


class CatalogBuildOrchestrator:
    """
    Runs the catalog build pipeline.

    Stages:
    1. Load candidates → 2. Validate → 3. Register → 4. Freeze
    → 5. Index → 6. Audit → 7. Export (+ optional CSV reports)
    """

    def __init__(
        self,
        content_root: str,
        strict: bool = False,
        check_links: bool = False,
        storage: Optional[StorageManager] = None
    ):
        """
        Initialize build orchestrator.

        Args:
            content_root: Directory holding topic files
            strict: Treat soft audit findings as failures
            check_links: Run live URL reachability checks
            storage: File I/O helper shared by the stages
        """
        self.content_root = content_root
        self.strict = strict
        self.storage = storage or StorageManager()

        self.loader = ContentLoader(content_root, storage=self.storage)
        self.validator = SchemaValidator()
        self.auditor = LinkAuditor(link_checker=LinkChecker() if check_links else None)
        self.exporter = CatalogExporter(storage=self.storage)

    def run(
        self,
        out_path: Optional[str] = None,
        summary_csv: Optional[str] = None,
        audit_csv: Optional[str] = None,
        built_at: Optional[str] = None
    ) -> BuildReport:
        """
        Run one complete build.

        Args:
            out_path: Snapshot destination (None: build in memory only)
            summary_csv: Optional topic summary CSV destination
            audit_csv: Optional audit findings CSV destination
            built_at: Override build timestamp

        Returns:
            BuildReport. The snapshot is written only when the build passed.

        Raises:
            ContentLoadError: If the content cannot be read
            ExportError: If an output cannot be written
        """
        report = BuildReport(strict=self.strict)

        # STAGE 1: Load
        loaded = self.loader.load()
        report.candidates_loaded = len(loaded.candidates)
        report.validation_errors.update(loaded.source_errors)

        # STAGE 2-3: Validate and register
        registry = TopicRegistry()
        for candidate in loaded.candidates:
            result = self.validator.validate(candidate)
            if not result.is_valid:
                report.validation_errors.setdefault(candidate.label, []).extend(result.errors)
                logger.error(f"Validation failed for {candidate.label}: {len(result.errors)} errors")
                continue

            try:
                registry.register(result.topic)
            except DuplicateIdError as e:
                logger.error(f"{e} (rejected {candidate.source})")
                report.duplicate_ids.append(DuplicateIdProblem(e.topic_id, candidate.source))

        # STAGE 4: Freeze
        registry.freeze()
        report.registry = registry

        # STAGE 5: Index
        report.index = build_index(registry.all())

        # STAGE 6: Audit (side channel, never blocks registration)
        report.audit = self.auditor.audit(registry.all())

        # STAGE 7: Export
        report.snapshot = self.exporter.export(registry, report.index, built_at=built_at)

        if audit_csv:
            self.exporter.write_audit_csv(report.audit, audit_csv)
        if summary_csv:
            self.exporter.write_summary_csv(registry, summary_csv)

        if not report.passed:
            logger.error(
                f"Build failed: {report.validation_error_count} validation errors, "
                f"{len(report.duplicate_ids)} duplicate ids, "
                f"{len(report.audit.findings)} audit findings"
            )
        elif out_path:
            report.snapshot_path = self.exporter.write(report.snapshot, out_path)

        logger.info(
            f"Build complete: {len(registry)} of {report.candidates_loaded} candidates registered"
        )
        return report
