"""
Validation of the live Solr schema against the expected one.

One run walks ``idle -> fetching -> parsing -> validated | failed``:

1. Fetch the schema through the Schema API. A transport or protocol problem
   ends the run as FAILED; no findings are produced because nothing could be
   checked.
2. Parse every ``field`` and ``dynamicField`` entry into the typed model. An
   unknown type, unknown property or invalid name is recorded as a finding and
   the entry is skipped.
3. Resolve every ``copyField`` against the parsed fields. Unknown references
   are recorded and the remaining entries are still processed.
4. Reconcile against the expected schema from :class:`SchemaCache`, if one is
   given: fields only live, fields only expected, and fields whose effective
   properties differ.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging
import time
from typing import Any, Protocol, TypeVar

from search_schema.admin_client import RawEntry, SchemaRepresentation
from search_schema.errors import (
    SchemaError,
    SchemaProtocolError,
    SchemaTransportError,
    UnknownFieldTypeError,
    UnknownWirePropertyError,
    UnresolvedCopyFieldReferenceError,
)
from search_schema.observability.metrics import SCHEMA_CHECKS, SCHEMA_FINDINGS
from search_schema.observability.tracing import create_span
from search_schema.report import CheckState, FailureKind, FindingKind, Severity, ValidationReport
from search_schema.schema.copy_fields import CopyField, check_copy_field_targets, parse_max_chars
from search_schema.schema.fields import DynamicField, SchemaField, StaticField
from search_schema.schema.properties import FieldProperty, lookup
from search_schema.schema_cache import ExpectedSchema, SchemaCache, ignored_dynamic_field


logger = logging.getLogger(__name__)

FieldT = TypeVar("FieldT", bound=SchemaField)

# Compared through the field type instead of property by property.
_IDENTITY_PROPERTIES = frozenset({FieldProperty.NAME, FieldProperty.TYPE})


class SchemaSource(Protocol):
    def fetch_schema(self) -> SchemaRepresentation: ...


@dataclass(slots=True)
class ParsedSchema:
    """Typed view of a live schema, scoped to one validation run."""

    static_fields: dict[str, StaticField] = field(default_factory=dict)
    dynamic_fields: dict[str, DynamicField] = field(default_factory=dict)
    copy_fields: list[CopyField] = field(default_factory=list)


def resolve_reference(
    role: str,
    name: Any,
    static_fields: Mapping[str, StaticField],
    dynamic_fields: Mapping[str, DynamicField],
) -> SchemaField:
    """Find the parsed field a copy field names as source or dest.

    Exact names win. A concrete name caught by a dynamic field (``title_str``
    by ``*_str``) resolves to a static field with that template's type and
    properties; the longest matching template is used, as Solr does.

    Raises:
        UnresolvedCopyFieldReferenceError: If no parsed field has or matches that name.
    """
    if isinstance(name, str):
        found = static_fields.get(name) or dynamic_fields.get(name)
        if found is not None:
            return found
        if StaticField.is_valid_name(name):
            templates = [template for template in dynamic_fields.values() if template.matches(name)]
            if templates:
                template = max(templates, key=lambda candidate: len(candidate.name))
                overlay = {
                    prop: value for prop, value in template.properties.items() if prop not in _IDENTITY_PROPERTIES
                }
                return StaticField(name, template.field_type, overlay)
    raise UnresolvedCopyFieldReferenceError(role, name)


class SchemaChecker:
    """Fetches the live schema and validates it.

    Args:
        client: Source of the live schema (normally a SchemaAdminClient)
        cache: Expected schema; without it only internal consistency is checked
        collection: Collection name used in reports and logs
    """

    def __init__(self, client: SchemaSource, cache: SchemaCache | None = None, *, collection: str | None = None):
        self.client = client
        self.cache = cache
        self.collection = collection or getattr(client, "collection", None)

    def check(self) -> ValidationReport:
        """Run a full validation pass. Never raises for transport, parse or catalog problems."""
        start = time.perf_counter()
        report = ValidationReport(collection=self.collection)

        report.state = CheckState.FETCHING
        try:
            with create_span("schema.fetch", attributes={"solr.collection": self.collection or ""}):
                representation = self.client.fetch_schema()
        except SchemaProtocolError as exc:
            logger.error("Schema response from Solr unusable: %s", exc)
            report.fail(FailureKind.PROTOCOL, str(exc))
            return self._finish(report, start)
        except SchemaTransportError as exc:
            logger.error("Could not fetch schema from Solr: %s", exc)
            report.fail(FailureKind.TRANSPORT, str(exc))
            return self._finish(report, start)

        self._validate_into(report, representation)
        return self._finish(report, start)

    def validate(self, representation: SchemaRepresentation) -> ValidationReport:
        """Validate an already fetched schema."""
        start = time.perf_counter()
        report = ValidationReport(collection=self.collection)
        self._validate_into(report, representation)
        return self._finish(report, start)

    def parse(self, representation: SchemaRepresentation, report: ValidationReport) -> ParsedSchema:
        """Turn the raw schema into typed fields, recording every entry that does not fit."""
        parsed = ParsedSchema()
        parsed.static_fields = self._parse_fields(representation.fields, StaticField, report)
        dynamic_entries = [
            raw
            for raw in representation.dynamic_fields
            if not ignored_dynamic_field(raw.get(FieldProperty.NAME.key))
        ]
        parsed.dynamic_fields = self._parse_fields(dynamic_entries, DynamicField, report)
        parsed.copy_fields = self._parse_copy_fields(representation.copy_fields, parsed, report)
        return parsed

    def _validate_into(self, report: ValidationReport, representation: SchemaRepresentation) -> None:
        report.state = CheckState.PARSING
        report.schema_version = representation.version
        if self.cache is not None and not self.cache.is_loaded:
            try:
                self.cache.load()
            except (ValueError, OSError) as exc:
                logger.error("Could not build the expected schema: %s", exc)
                report.fail(FailureKind.CATALOG, str(exc))
                return

        with create_span("schema.validate", attributes={"solr.collection": self.collection or ""}):
            parsed = self.parse(representation, report)

            for problem in check_copy_field_targets(parsed.copy_fields):
                report.add(FindingKind.COPY_FIELD_RULE, Severity.WARNING, problem)

            if self.cache is not None:
                self._reconcile(self.cache.snapshot(), parsed, report)
        report.state = CheckState.VALIDATED

    def _parse_fields(
        self, entries: Iterable[RawEntry], field_cls: type[FieldT], report: ValidationReport
    ) -> dict[str, FieldT]:
        label = field_cls.kind.value
        parsed: dict[str, FieldT] = {}
        for raw in entries:
            subject = str(raw.get(FieldProperty.NAME.key))
            try:
                parsed_field = field_cls.from_wire(raw)
            except UnknownFieldTypeError as exc:
                report.add(FindingKind.UNKNOWN_FIELD_TYPE, Severity.ERROR, f"{label} {subject}: {exc}", subject)
                continue
            except UnknownWirePropertyError as exc:
                report.add(FindingKind.UNKNOWN_PROPERTY, Severity.ERROR, f"{label} {subject}: {exc}", subject)
                continue
            except SchemaError as exc:
                report.add(FindingKind.INVALID_FIELD, Severity.ERROR, f"{label} {subject}: {exc}", subject)
                continue

            if parsed_field.name in parsed:
                report.add(
                    FindingKind.INVALID_FIELD, Severity.WARNING, f"{label} {subject} is defined twice", subject
                )
                continue
            parsed[parsed_field.name] = parsed_field
        logger.debug("Parsed %d of %s entries", len(parsed), label)
        return parsed

    def _parse_copy_fields(
        self, entries: Iterable[RawEntry], parsed: ParsedSchema, report: ValidationReport
    ) -> list[CopyField]:
        copy_fields: list[CopyField] = []
        for raw in entries:
            source_name = raw.get(FieldProperty.SOURCE.key)
            dest_name = raw.get(FieldProperty.DEST.key)
            subject = f"{source_name} -> {dest_name}"

            try:
                for key in raw:
                    lookup(key)
            except UnknownWirePropertyError as exc:
                report.add(FindingKind.UNKNOWN_PROPERTY, Severity.ERROR, f"copyField {subject}: {exc}", subject)
                continue

            endpoints: list[SchemaField] = []
            for role, name in (("source", source_name), ("dest", dest_name)):
                try:
                    endpoints.append(resolve_reference(role, name, parsed.static_fields, parsed.dynamic_fields))
                except UnresolvedCopyFieldReferenceError as exc:
                    logger.warning("%s", exc)
                    report.add(FindingKind.UNRESOLVED_COPY_FIELD, Severity.ERROR, str(exc), subject)
            if len(endpoints) != 2:
                continue

            try:
                copy_field = CopyField(endpoints[0], endpoints[1], parse_max_chars(raw))
            except SchemaError as exc:
                report.add(FindingKind.INVALID_COPY_FIELD, Severity.ERROR, f"copyField {subject}: {exc}", subject)
                continue

            if copy_field in copy_fields:
                continue
            copy_fields.append(copy_field)
        return copy_fields

    def _reconcile(self, expected: ExpectedSchema, parsed: ParsedSchema, report: ValidationReport) -> None:
        self._reconcile_fields("field", expected.static_fields, parsed.static_fields, report)
        self._reconcile_fields("dynamicField", expected.dynamic_fields, parsed.dynamic_fields, report)

        live_copy_fields = {copy_field.key: copy_field for copy_field in parsed.copy_fields}
        expected_copy_fields = {copy_field.key: copy_field for copy_field in expected.copy_fields}
        for key, copy_field in expected_copy_fields.items():
            subject = f"{key[0]} -> {key[1]}"
            live = live_copy_fields.get(key)
            if live is None:
                report.add(
                    FindingKind.MISSING_COPY_FIELD, Severity.ERROR, f"copyField {subject} missing in Solr", subject
                )
            elif live.max_chars != copy_field.max_chars:
                report.add(
                    FindingKind.PROPERTY_MISMATCH,
                    Severity.WARNING,
                    f"copyField {subject}: maxChars expected {copy_field.max_chars}, found {live.max_chars}",
                    subject,
                )
        for key in live_copy_fields.keys() - expected_copy_fields.keys():
            subject = f"{key[0]} -> {key[1]}"
            report.add(
                FindingKind.LIVE_ONLY_COPY_FIELD, Severity.INFO, f"copyField {subject} only in Solr", subject
            )

    def _reconcile_fields(
        self,
        label: str,
        expected: Mapping[str, SchemaField],
        live: Mapping[str, SchemaField],
        report: ValidationReport,
    ) -> None:
        for name in sorted(live.keys() - expected.keys()):
            report.add(FindingKind.LIVE_ONLY_FIELD, Severity.INFO, f"{label} {name} only in Solr", name)
        for name in sorted(expected.keys() - live.keys()):
            report.add(FindingKind.MISSING_FIELD, Severity.ERROR, f"{label} {name} missing in Solr", name)
        for name in sorted(expected.keys() & live.keys()):
            for message in compare_fields(expected[name], live[name]):
                report.add(FindingKind.PROPERTY_MISMATCH, Severity.ERROR, f"{label} {name}: {message}", name)

    def _finish(self, report: ValidationReport, start: float) -> ValidationReport:
        report.duration_s = time.perf_counter() - start
        SCHEMA_CHECKS.labels(state=report.state.value).inc()
        for finding in report.findings:
            SCHEMA_FINDINGS.labels(kind=finding.kind.value, severity=finding.severity.value).inc()

        if report.state is CheckState.FAILED:
            return report
        log = logger.warning if report.has_errors else logger.info
        log(
            "Schema validation finished: %d findings (%d errors) in %.2fs",
            len(report.findings),
            len(report.by_severity(Severity.ERROR)),
            report.duration_s,
        )
        return report


def compare_fields(expected: SchemaField, live: SchemaField) -> list[str]:
    """Describe every difference in type or effective property value."""
    differences: list[str] = []
    if expected.type_name != live.type_name:
        differences.append(f"type expected {expected.type_name!r}, found {live.type_name!r}")

    props = (set(expected.properties) | set(live.properties)) - _IDENTITY_PROPERTIES
    for prop in sorted(props, key=lambda p: p.key):
        want = expected.effective(prop)
        got = live.effective(prop)
        if want != got:
            differences.append(f"{prop.key} expected {want!r}, found {got!r}")
    return differences
