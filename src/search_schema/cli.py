"""CLI for validating a live Solr schema against the metadata catalog."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

from pydantic import ValidationError

from search_schema.admin_client import SchemaAdminClient
from search_schema.checker import SchemaChecker
from search_schema.config import Settings
from search_schema.metadata import JsonMetadataCatalog
from search_schema.observability.context import get_trace_context, set_trace_context
from search_schema.observability.logging import configure_logging
from search_schema.observability.metrics import get_metrics
from search_schema.observability.tracing import init_tracing
from search_schema.report import FailureKind, Finding, FindingKind, Severity, ValidationReport
from search_schema.schema_cache import SchemaCache


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_INVALID = 2
EXIT_FAILED = 3


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fetch the Solr schema and validate it against the metadata field catalog",
    )
    parser.add_argument("--solr-url", help="Solr base URL (default: SOLR_URL or http://localhost:8983/solr)")
    parser.add_argument("--collection", help="Collection or core name (default: SOLR_COLLECTION)")
    parser.add_argument(
        "--catalog",
        type=Path,
        help="JSON metadata field catalog; without it only internal consistency is checked",
    )
    parser.add_argument("--timeout", type=float, help="Schema request timeout in seconds")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON logs instead of plain text",
    )
    parser.add_argument(
        "--fail-on-warning",
        action="store_true",
        help="Exit non-zero on warnings as well as errors",
    )
    parser.add_argument(
        "--metrics-file",
        type=Path,
        help="Write Prometheus metrics of the run to this file (text exposition format)",
    )
    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, object] = {}
    if args.solr_url:
        overrides["solr_url"] = args.solr_url
    if args.collection:
        overrides["solr_collection"] = args.collection
    if args.timeout is not None:
        overrides["http_timeout"] = args.timeout
    if args.catalog is not None:
        overrides["metadata_catalog_path"] = args.catalog
    if args.json:
        overrides["log_json"] = True
    return Settings(**overrides)


def _format_finding(finding: Finding) -> str:
    return f"{finding.severity.value:<7} {finding.kind.value:<22} {finding.message}"


def _print_report(report: ValidationReport) -> None:
    for finding in report.findings:
        if finding.severity is Severity.ERROR:
            logger.error(_format_finding(finding))
        elif finding.severity is Severity.WARNING:
            logger.warning(_format_finding(finding))
        elif finding.kind is not FindingKind.LIVE_ONLY_FIELD:
            logger.info(_format_finding(finding))
    sys.stdout.write(report.to_json() + "\n")


def _write_metrics(path: Path) -> None:
    path.write_bytes(get_metrics())
    logger.debug("Metrics written to %s", path)


def _determine_exit_code(report: ValidationReport, *, fail_on_warning: bool) -> int:
    if report.failure_kind is FailureKind.CATALOG:
        return EXIT_CONFIG
    if report.failure_kind is not None:
        return EXIT_FAILED
    if report.has_errors:
        return EXIT_INVALID
    if fail_on_warning and report.has_warnings:
        return EXIT_INVALID
    return EXIT_OK


def run_check(settings: Settings) -> ValidationReport:
    cache = None
    if settings.metadata_catalog_path is not None:
        cache = SchemaCache(
            JsonMetadataCatalog(settings.metadata_catalog_path),
            max_chars=settings.copy_field_max_chars,
        )
        cache.load()

    with SchemaAdminClient.from_settings(settings) as client:
        return SchemaChecker(client, cache, collection=settings.solr_collection).check()


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = _load_settings(args)
    except ValidationError as exc:
        configure_logging("INFO", json_output=False)
        logger.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG

    configure_logging(settings.log_level, json_output=settings.log_json)
    init_tracing(resource_attributes={"solr.collection": settings.solr_collection})
    ctx = get_trace_context()
    set_trace_context(ctx["trace_id"], ctx["span_id"], collection=settings.solr_collection)

    try:
        report = run_check(settings)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG
    except ValueError as exc:
        logger.error("Invalid metadata catalog: %s", exc)
        return EXIT_CONFIG

    _print_report(report)
    if args.metrics_file is not None:
        _write_metrics(args.metrics_file)

    exit_code = _determine_exit_code(report, fail_on_warning=args.fail_on_warning)
    if exit_code == EXIT_OK:
        logger.info("Schema of %s matches expectations", settings.solr_collection)
    elif exit_code == EXIT_INVALID:
        logger.warning("Schema of %s has discrepancies", settings.solr_collection)
    else:
        logger.error("Schema check failed: %s", report.error)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
