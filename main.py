"""
build-catalog - Content Catalog Engine

CLI entry point for validating, indexing, auditing and exporting topics.
"""

import argparse
import logging
import sys
from typing import Optional

from catalog_engine.orchestrator import BuildReport, CatalogBuildOrchestrator
from catalog_engine.stages.export import ExportError
from catalog_engine.stages.ingestion import ContentLoadError
import config.settings as settings

EXIT_OK = 0
EXIT_VALIDATION = 1
EXIT_IO = 2


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Configure logging for the entire application."""
    if log_file is None:
        log_file = settings.LOG_FILE
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=handlers,
        force=True
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="build-catalog",
        description="Validate, index, audit and export the topic catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build from the default content directory
  build-catalog

  # Fail on any audit warning and write the snapshot elsewhere
  build-catalog --strict --out dist/catalog.json

  # Also check that every resource URL responds
  build-catalog --check-links --audit-csv output/audit.csv

Exit codes: 0 success, 1 validation errors, 2 I/O or export failure.
        """
    )

    parser.add_argument(
        "--content-root",
        default=str(settings.CONTENT_ROOT),
        help=f"Directory holding topic files (default: {settings.CONTENT_ROOT})"
    )

    parser.add_argument(
        "--out",
        default=str(settings.SNAPSHOT_PATH),
        help=f"Snapshot destination (default: {settings.SNAPSHOT_PATH})"
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat audit warnings as build failures"
    )

    parser.add_argument(
        "--check-links",
        action="store_true",
        help="Check that resource URLs are reachable (network access)"
    )

    parser.add_argument(
        "--summary-csv",
        help="Also write a per-topic summary table to this CSV path"
    )

    parser.add_argument(
        "--audit-csv",
        help="Also write audit findings to this CSV path"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    parser.add_argument(
        "--log-file",
        default=settings.LOG_FILE,
        help=f"Log file, empty to disable (default: {settings.LOG_FILE})"
    )

    return parser


def print_summary(report: BuildReport) -> None:
    """Print grouped problems and the final verdict."""
    print("=" * 60)
    print("Catalog Build Summary")
    print("=" * 60)
    registered = len(report.registry) if report.registry is not None else 0
    print(f"Candidates loaded: {report.candidates_loaded}")
    print(f"Topics registered: {registered}")

    print()
    print(f"Validation errors: {report.validation_error_count}")
    for label, errors in report.validation_errors.items():
        print(f"  {label}")
        for error in errors:
            print(f"    - {error}")

    print()
    print(f"Duplicate ids: {len(report.duplicate_ids)}")
    for problem in report.duplicate_ids:
        print(f"  - {problem.topic_id} (rejected from {problem.source})")

    print()
    counts = report.audit.counts()
    print(
        f"Audit findings: {len(report.audit.hard_findings)} hard, "
        f"{len(report.audit.soft_findings)} soft"
        + (" (strict: warnings fail the build)" if report.strict else "")
    )
    for kind, count in counts.items():
        if count:
            print(f"  {kind}: {count}")
            for finding in report.audit.by_kind(kind):
                print(f"    - {finding.topic_id} {finding.path}: {finding.detail}")

    print()
    print("=" * 60)
    if report.passed:
        print("✅ PASS")
        if report.snapshot_path:
            print(f"Snapshot: {report.snapshot_path}")
    else:
        print("❌ FAIL")
    print("=" * 60)


def exit_code_for(report: BuildReport) -> int:
    return EXIT_OK if report.passed else EXIT_VALIDATION


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level, args.log_file)
    logger = logging.getLogger(__name__)

    try:
        orchestrator = CatalogBuildOrchestrator(
            content_root=args.content_root,
            strict=args.strict,
            check_links=args.check_links
        )
        report = orchestrator.run(
            out_path=args.out,
            summary_csv=args.summary_csv,
            audit_csv=args.audit_csv
        )

    except KeyboardInterrupt:
        logger.warning("Build interrupted by user")
        print("\n⚠️  Build interrupted")
        return EXIT_IO

    except (ContentLoadError, ExportError) as e:
        logger.error(f"Build aborted: {e}")
        print(f"\n❌ Build aborted: {e}")
        return EXIT_IO

    except Exception as e:
        logger.error(f"Build crashed: {e}", exc_info=True)
        print(f"\n❌ Build crashed: {e}")
        print(f"Check {args.log_file or 'the log output'} for details")
        return EXIT_IO

    print_summary(report)
    return exit_code_for(report)


def run():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
