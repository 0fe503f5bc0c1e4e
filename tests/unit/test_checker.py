"""Unit tests for live schema validation."""

from __future__ import annotations

import copy
from pathlib import Path

import httpx
from prometheus_client import REGISTRY
import pytest

from search_schema.admin_client import SchemaAdminClient, SchemaRepresentation
from search_schema.checker import SchemaChecker, compare_fields, resolve_reference
from search_schema.errors import SchemaProtocolError, SchemaTransportError, UnresolvedCopyFieldReferenceError
from search_schema.metadata import (
    InMemoryMetadataCatalog,
    JsonMetadataCatalog,
    MetadataFieldDefinition,
    MetadataFieldType,
)
from search_schema.report import CheckState, FailureKind, FindingKind, Severity, ValidationReport
from search_schema.schema import field_types
from search_schema.schema.fields import DynamicField, StaticField, StdConf
from search_schema.schema.properties import FieldProperty
from search_schema.schema_cache import SchemaCache


pytestmark = pytest.mark.unit


class StaticSource:
    """Schema source returning a fixed payload or raising a fixed error."""

    collection = "collection1"

    def __init__(self, payload=None, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls = 0

    def fetch_schema(self) -> SchemaRepresentation:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return SchemaRepresentation.from_response(self.payload)


@pytest.fixture
def cache(metadata_definitions) -> SchemaCache:
    cache = SchemaCache(InMemoryMetadataCatalog(metadata_definitions))
    cache.load()
    return cache


@pytest.fixture
def payload(live_schema_payload):
    return copy.deepcopy(live_schema_payload)


def _schema(payload) -> dict:
    return payload["schema"]


def test_matching_schema_is_clean(payload, cache: SchemaCache) -> None:
    report = SchemaChecker(StaticSource(payload), cache).check()

    assert report.state is CheckState.VALIDATED
    assert report.findings == []
    assert report.ok
    assert report.status == "ok"
    assert report.collection == "collection1"
    assert report.schema_version == 1.6
    assert report.duration_s >= 0


def test_check_over_http(live_schema_payload, cache: SchemaCache) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=live_schema_payload))
    with SchemaAdminClient("http://solr.test:8983/solr", "collection1", transport=transport) as client:
        report = SchemaChecker(client, cache).check()

    assert report.ok


def test_cache_is_loaded_on_first_use(payload, metadata_definitions) -> None:
    cache = SchemaCache(InMemoryMetadataCatalog(metadata_definitions))
    report = SchemaChecker(StaticSource(payload), cache).check()

    assert cache.is_loaded
    assert report.ok


class TestFailures:
    def test_transport_failure(self, cache: SchemaCache) -> None:
        source = StaticSource(error=SchemaTransportError("Schema request failed with HTTP 503"))
        report = SchemaChecker(source, cache).check()

        assert report.state is CheckState.FAILED
        assert report.failure_kind is FailureKind.TRANSPORT
        assert "503" in report.error
        assert report.findings == []
        assert report.status == "failed"
        assert not report.ok

    def test_protocol_failure(self) -> None:
        report = SchemaChecker(StaticSource({"unexpected": True})).check()

        assert report.state is CheckState.FAILED
        assert report.failure_kind is FailureKind.PROTOCOL
        assert "schema" in report.error

    def test_protocol_error_from_client(self) -> None:
        report = SchemaChecker(StaticSource(error=SchemaProtocolError("not JSON"))).check()
        assert report.failure_kind is FailureKind.PROTOCOL

    def test_missing_catalog_file_fails_the_run(self, payload, tmp_path: Path) -> None:
        cache = SchemaCache(JsonMetadataCatalog(tmp_path / "missing.json"))
        before = REGISTRY.get_sample_value("schema_checks_total", {"state": "failed"}) or 0.0

        report = SchemaChecker(StaticSource(payload), cache).check()

        assert report.state is CheckState.FAILED
        assert report.failure_kind is FailureKind.CATALOG
        assert "missing.json" in report.error
        assert report.findings == []
        assert REGISTRY.get_sample_value("schema_checks_total", {"state": "failed"}) == before + 1

    def test_unsupported_catalog_type_fails_the_run(self, payload) -> None:
        catalog = InMemoryMetadataCatalog([MetadataFieldDefinition(name="count", declared_type=MetadataFieldType.INT)])

        report = SchemaChecker(StaticSource(payload), SchemaCache(catalog)).check()

        assert report.failure_kind is FailureKind.CATALOG
        assert "not supported yet" in report.error

    def test_invalid_catalog_content_fails_the_run(self, payload, tmp_path: Path) -> None:
        path = tmp_path / "fields.json"
        path.write_text('[{"name": "title", "type": "geo"}]', encoding="utf-8")

        report = SchemaChecker(StaticSource(payload), SchemaCache(JsonMetadataCatalog(path))).check()

        assert report.state is CheckState.FAILED
        assert report.failure_kind is FailureKind.CATALOG


class TestParsing:
    def test_unresolved_copy_field_does_not_stop_validation(self, payload, cache: SchemaCache) -> None:
        _schema(payload)["copyFields"].insert(0, {"source": "ghostField", "dest": "_text_", "maxChars": 3000})

        report = SchemaChecker(StaticSource(payload), cache).check()

        unresolved = report.by_kind(FindingKind.UNRESOLVED_COPY_FIELD)
        assert len(unresolved) == 1
        assert unresolved[0].severity is Severity.ERROR
        assert "ghostField" in unresolved[0].message
        assert report.state is CheckState.VALIDATED
        # Entries after the broken one are still processed
        assert report.by_kind(FindingKind.MISSING_COPY_FIELD) == []

    def test_both_unresolved_endpoints_are_reported(self, payload) -> None:
        _schema(payload)["copyFields"] = [{"source": "nope", "dest": "neither"}]

        report = SchemaChecker(StaticSource(payload)).check()

        messages = [finding.message for finding in report.by_kind(FindingKind.UNRESOLVED_COPY_FIELD)]
        assert len(messages) == 2
        assert "source" in messages[0]
        assert "dest" in messages[1]

    def test_unknown_field_type_skips_entry(self, payload, cache: SchemaCache) -> None:
        _schema(payload)["fields"].append({"name": "location", "type": "location_rpt"})

        report = SchemaChecker(StaticSource(payload), cache).check()

        [finding] = report.by_kind(FindingKind.UNKNOWN_FIELD_TYPE)
        assert finding.subject == "location"
        assert "location_rpt" in finding.message
        assert report.live_only == []

    def test_unknown_property_skips_entry(self, payload, cache: SchemaCache) -> None:
        _schema(payload)["fields"].append({"name": "subject", "type": "text_en", "boost": 2})

        report = SchemaChecker(StaticSource(payload), cache).check()

        [finding] = report.by_kind(FindingKind.UNKNOWN_PROPERTY)
        assert finding.subject == "subject"
        assert "boost" in finding.message

    def test_invalid_name_is_reported(self, payload) -> None:
        _schema(payload)["fields"].append({"name": "bad-name", "type": "text_en"})

        report = SchemaChecker(StaticSource(payload)).check()

        [finding] = report.by_kind(FindingKind.INVALID_FIELD)
        assert finding.severity is Severity.ERROR
        assert finding.subject == "bad-name"

    def test_duplicate_field_is_a_warning(self, payload) -> None:
        _schema(payload)["fields"].append({"name": "authorName", "type": "text_en"})

        report = SchemaChecker(StaticSource(payload)).check()

        [finding] = report.by_kind(FindingKind.INVALID_FIELD)
        assert finding.severity is Severity.WARNING
        assert "defined twice" in finding.message

    def test_solr_default_dynamic_fields_are_ignored(self, payload) -> None:
        _schema(payload)["dynamicFields"].append({"name": "*_s", "type": "not_a_modeled_type"})

        report = SchemaChecker(StaticSource(payload)).check()

        assert report.findings == []

    def test_invalid_max_chars_is_reported(self, payload, cache: SchemaCache) -> None:
        _schema(payload)["copyFields"][0]["maxChars"] = 0

        report = SchemaChecker(StaticSource(payload), cache).check()

        [finding] = report.by_kind(FindingKind.INVALID_COPY_FIELD)
        assert "maxChars" in finding.message
        assert finding.subject == "authorName -> _text_"

    def test_unknown_copy_field_key(self, payload) -> None:
        _schema(payload)["copyFields"][0]["boost"] = 1

        report = SchemaChecker(StaticSource(payload)).check()

        [finding] = report.by_kind(FindingKind.UNKNOWN_PROPERTY)
        assert "boost" in finding.message

    def test_parse_returns_typed_fields(self, payload) -> None:
        checker = SchemaChecker(StaticSource(payload))
        report = ValidationReport()
        parsed = checker.parse(SchemaRepresentation.from_response(payload), report)

        assert report.findings == []

        assert set(parsed.static_fields) == {"_text_", "authorName", "keywordValue"}
        assert isinstance(parsed.static_fields["authorName"], StaticField)
        assert parsed.dynamic_fields == {}
        assert [copy_field.key for copy_field in parsed.copy_fields] == [
            ("authorName", "_text_"),
            ("keywordValue", "_text_"),
        ]

    def test_fan_in_into_single_valued_dest_is_a_warning(self, payload) -> None:
        fields = _schema(payload)["fields"]
        fields.append({"name": "summary", "type": "text_en", "multiValued": False})
        fields.append({"name": "titleText", "type": "text_en"})
        _schema(payload)["copyFields"] = [
            {"source": "authorName", "dest": "summary"},
            {"source": "titleText", "dest": "summary"},
        ]

        report = SchemaChecker(StaticSource(payload)).check()

        [finding] = report.by_kind(FindingKind.COPY_FIELD_RULE)
        assert finding.severity is Severity.WARNING
        assert "'summary'" in finding.message


class TestReconciliation:
    def test_live_only_field(self, payload, cache: SchemaCache) -> None:
        _schema(payload)["fields"].append({"name": "id", "type": "string", "required": True})

        report = SchemaChecker(StaticSource(payload), cache).check()

        [finding] = report.live_only
        assert finding.subject == "id"
        assert finding.severity is Severity.INFO
        assert report.ok

    def test_missing_field(self, payload, cache: SchemaCache) -> None:
        _schema(payload)["fields"] = [f for f in _schema(payload)["fields"] if f["name"] != "keywordValue"]
        _schema(payload)["copyFields"] = [c for c in _schema(payload)["copyFields"] if c["source"] != "keywordValue"]

        report = SchemaChecker(StaticSource(payload), cache).check()

        [finding] = report.expected_only
        assert finding.subject == "keywordValue"
        assert finding.severity is Severity.ERROR
        [missing_copy] = report.by_kind(FindingKind.MISSING_COPY_FIELD)
        assert missing_copy.subject == "keywordValue -> _text_"
        assert report.status == "invalid"

    def test_property_mismatch(self, payload, cache: SchemaCache) -> None:
        author = next(f for f in _schema(payload)["fields"] if f["name"] == "authorName")
        author["stored"] = False

        report = SchemaChecker(StaticSource(payload), cache).check()

        [finding] = report.mismatched
        assert finding.subject == "authorName"
        assert "stored expected 'true', found 'false'" in finding.message

    def test_type_mismatch(self, payload, cache: SchemaCache) -> None:
        author = next(f for f in _schema(payload)["fields"] if f["name"] == "authorName")
        author["type"] = "text_general"
        author["multiValued"] = False

        report = SchemaChecker(StaticSource(payload), cache).check()

        [finding] = report.mismatched
        assert "type expected 'text_en', found 'text_general'" in finding.message

    def test_max_chars_mismatch_is_a_warning(self, payload, cache: SchemaCache) -> None:
        _schema(payload)["copyFields"][0]["maxChars"] = 500

        report = SchemaChecker(StaticSource(payload), cache).check()

        [finding] = report.mismatched
        assert finding.severity is Severity.WARNING
        assert "maxChars expected 3000, found 500" in finding.message
        assert not report.has_errors

    def test_missing_max_chars_counts_as_default(self, payload, cache: SchemaCache) -> None:
        for entry in _schema(payload)["copyFields"]:
            del entry["maxChars"]

        report = SchemaChecker(StaticSource(payload), cache).check()

        assert report.findings == []

    def test_live_only_copy_field(self, payload, cache: SchemaCache) -> None:
        _schema(payload)["copyFields"].append({"source": "authorName", "dest": "keywordValue"})

        report = SchemaChecker(StaticSource(payload), cache).check()

        [finding] = report.by_kind(FindingKind.LIVE_ONLY_COPY_FIELD)
        assert finding.subject == "authorName -> keywordValue"
        assert finding.severity is Severity.INFO

    def test_registered_dynamic_field_is_expected(self, payload, cache: SchemaCache) -> None:
        cache.register_dynamic_field(
            DynamicField("*_facet", field_types.STRINGS, {FieldProperty.STORED: "true", FieldProperty.INDEXED: "true"})
        )

        report = SchemaChecker(StaticSource(payload), cache).check()
        assert [finding.subject for finding in report.expected_only] == ["*_facet"]

        _schema(payload)["dynamicFields"].append({"name": "*_facet", "type": "strings"})
        report = SchemaChecker(StaticSource(payload), cache).check()
        assert report.findings == []

    def test_without_cache_only_internal_consistency_is_checked(self, payload) -> None:
        _schema(payload)["fields"].append({"name": "id", "type": "string"})

        report = SchemaChecker(StaticSource(payload)).check()

        assert report.findings == []


def test_resolve_reference_prefers_exact_names() -> None:
    static = {"title": StaticField("title", field_types.TEXT_EN)}
    dynamic = {"*_t": DynamicField("*_t", field_types.TEXT_EN)}

    assert resolve_reference("source", "title", static, dynamic) is static["title"]
    assert resolve_reference("source", "*_t", static, dynamic) is dynamic["*_t"]
    with pytest.raises(UnresolvedCopyFieldReferenceError, match="unknown dest field 'x_s'"):
        resolve_reference("dest", "x_s", static, dynamic)
    with pytest.raises(UnresolvedCopyFieldReferenceError):
        resolve_reference("dest", None, static, dynamic)


def test_resolve_reference_through_dynamic_template() -> None:
    dynamic = {
        "*_str": DynamicField("*_str", field_types.STRINGS, {FieldProperty.STORED: "false"}),
        "*_x_str": DynamicField("*_x_str", field_types.TEXT_EN),
    }

    resolved = resolve_reference("dest", "title_str", {}, dynamic)

    assert isinstance(resolved, StaticField)
    assert resolved.name == "title_str"
    assert resolved.field_type is field_types.STRINGS
    assert resolved.get(FieldProperty.STORED) == "false"
    assert resolved.is_multivalued
    assert resolve_reference("dest", "title_x_str", {}, dynamic).field_type is field_types.TEXT_EN


def test_resolve_reference_needs_a_valid_concrete_name() -> None:
    dynamic = {"*_str": DynamicField("*_str", field_types.STRINGS)}

    with pytest.raises(UnresolvedCopyFieldReferenceError):
        resolve_reference("dest", "bad-name_str", {}, dynamic)


def test_copy_field_into_dynamically_matched_name(payload) -> None:
    _schema(payload)["dynamicFields"].append({"name": "*_sort", "type": "string"})
    _schema(payload)["copyFields"].append({"source": "authorName", "dest": "authorName_sort", "maxChars": 100})

    checker = SchemaChecker(StaticSource(payload))
    report = ValidationReport()
    parsed = checker.parse(SchemaRepresentation.from_response(payload), report)

    assert report.findings == []
    assert ("authorName", "authorName_sort") in [copy_field.key for copy_field in parsed.copy_fields]


def test_compare_fields_uses_effective_values() -> None:
    expected = StaticField("tags", field_types.STRINGS, {})
    live = StaticField("tags", field_types.STRINGS, {FieldProperty.MULTIVALUED: "true"})

    assert compare_fields(expected, live) == []
    assert compare_fields(StaticField("tags", field_types.STRINGS, StdConf.STORED_INDEXED), live) == [
        "multiValued expected 'false', found 'true'"
    ]
