"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


# Complete test environment that overrides ALL possible config values
TEST_ENV = {
    "SOLR_URL": "http://solr.test:8983/solr",
    "SOLR_COLLECTION": "collection1",
    "HTTP_TIMEOUT": "5",
    "CONNECT_TIMEOUT": "2",
    "HTTP_RETRIES": "0",
    "COPY_FIELD_MAX_CHARS": "3000",
    "LOG_LEVEL": "info",
    "LOG_JSON": "false",
    # Proxy settings - ensure they're cleared for tests
    "http_proxy": "",
    "https_proxy": "",
    "all_proxy": "",
    "no_proxy": "",
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Set test defaults and drop settings a developer may have exported."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("METADATA_CATALOG_PATH", raising=False)


@pytest.fixture
def live_schema_payload():
    """Schema API response matching the catalog returned by ``metadata_definitions``."""
    return {
        "responseHeader": {"status": 0, "QTime": 1},
        "schema": {
            "name": "collection1",
            "version": 1.6,
            "uniqueKey": "id",
            "fieldTypes": [
                {"name": "string", "class": "solr.StrField", "sortMissingLast": True, "docValues": True},
                {"name": "text_en", "class": "solr.TextField", "positionIncrementGap": "100"},
            ],
            "fields": [
                {"name": "_text_", "type": "text_general", "indexed": True, "stored": False, "multiValued": True},
                {"name": "authorName", "type": "text_en", "indexed": True, "stored": True, "multiValued": False},
                {"name": "keywordValue", "type": "text_en", "indexed": True, "stored": True, "multiValued": True},
            ],
            "dynamicFields": [
                {"name": "*_s", "type": "string", "indexed": True, "stored": True},
                {"name": "*_txt_en", "type": "text_en", "indexed": True, "stored": True, "multiValued": True},
            ],
            "copyFields": [
                {"source": "authorName", "dest": "_text_", "maxChars": 3000},
                {"source": "keywordValue", "dest": "_text_", "maxChars": 3000},
            ],
        },
    }


@pytest.fixture
def metadata_definitions():
    """Catalog entries for a small citation block."""
    from search_schema.metadata import MetadataFieldDefinition, MetadataFieldType

    return [
        MetadataFieldDefinition(
            name="keywordValue", declared_type=MetadataFieldType.TEXT, allows_multiple_values=True
        ),
        MetadataFieldDefinition(name="authorName", declared_type=MetadataFieldType.TEXT),
        MetadataFieldDefinition(name="authorEmail", declared_type=MetadataFieldType.EMAIL),
    ]
