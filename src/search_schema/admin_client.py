"""
Client for the Solr Schema API.

Fetches ``GET /solr/<collection>/schema`` and hands back the raw field, dynamic
field and copy field maps. One blocking request per call; the timeout and the
single bounded connection retry live in the httpx transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

import httpx

from search_schema.errors import SchemaProtocolError, SchemaTransportError
from search_schema.observability.metrics import SCHEMA_FETCH_LATENCY, track_latency


if TYPE_CHECKING:
    from search_schema.config import Settings

logger = logging.getLogger(__name__)

RawEntry = dict[str, Any]


@dataclass(slots=True)
class SchemaRepresentation:
    """Raw schema as returned by the Schema API."""

    version: float | None = None
    name: str | None = None
    unique_key: str | None = None
    fields: list[RawEntry] = field(default_factory=list)
    dynamic_fields: list[RawEntry] = field(default_factory=list)
    copy_fields: list[RawEntry] = field(default_factory=list)
    field_types: list[RawEntry] = field(default_factory=list)

    @classmethod
    def from_response(cls, payload: Any) -> SchemaRepresentation:
        """Parse the JSON body of a schema response.

        Raises:
            SchemaProtocolError: If the body does not hold a schema representation.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("schema"), dict):
            raise SchemaProtocolError("Response has no 'schema' object")
        schema = payload["schema"]

        version = schema.get("version")
        if version is not None and (isinstance(version, bool) or not isinstance(version, (int, float))):
            raise SchemaProtocolError(f"Schema version {version!r} is not a number")

        return cls(
            version=float(version) if version is not None else None,
            name=schema.get("name"),
            unique_key=schema.get("uniqueKey"),
            fields=_entries(schema, "fields"),
            dynamic_fields=_entries(schema, "dynamicFields"),
            copy_fields=_entries(schema, "copyFields"),
            field_types=_entries(schema, "fieldTypes"),
        )


def _entries(schema: dict[str, Any], key: str) -> list[RawEntry]:
    entries = schema.get(key, [])
    if not isinstance(entries, list) or not all(isinstance(entry, dict) for entry in entries):
        raise SchemaProtocolError(f"Schema '{key}' must be a list of objects")
    return entries


class SchemaAdminClient:
    """Synchronous Schema API client.

    Args:
        base_url: Solr base URL (e.g., "http://localhost:8983/solr")
        collection: Collection or core name
        timeout: Overall request timeout in seconds
        connect_timeout: Connection timeout in seconds
        retries: Connection retries performed by the transport
        transport: Optional transport override (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        collection: str,
        *,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        retries: int = 1,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.collection = collection
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.retries = retries
        self._transport = transport
        self._client: httpx.Client | None = None

    @classmethod
    def from_settings(cls, settings: Settings, *, transport: httpx.BaseTransport | None = None) -> SchemaAdminClient:
        return cls(
            settings.solr_url,
            settings.solr_collection,
            timeout=settings.http_timeout,
            connect_timeout=settings.connect_timeout,
            retries=settings.http_retries,
            transport=transport,
        )

    @property
    def schema_url(self) -> str:
        return f"{self.base_url}/{self.collection}/schema"

    def __enter__(self) -> SchemaAdminClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _create_client(self) -> httpx.Client:
        """Create HTTP client with an explicit timeout and bounded connection retries."""
        transport = self._transport or httpx.HTTPTransport(retries=self.retries)
        timeout = httpx.Timeout(self.timeout, connect=self.connect_timeout)
        return httpx.Client(
            transport=transport,
            timeout=timeout,
            headers={"Accept": "application/json"},
            follow_redirects=True,
        )

    def fetch_schema(self) -> SchemaRepresentation:
        """Fetch the live schema.

        Raises:
            SchemaTransportError: If the request fails, times out or returns an error status.
            SchemaProtocolError: If the response is not a usable schema representation.
        """
        if self._client is None:
            self._client = self._create_client()

        logger.debug("Fetching schema from %s", self.schema_url)
        with track_latency(SCHEMA_FETCH_LATENCY, collection=self.collection):
            try:
                resp = self._client.get(self.schema_url, params={"wt": "json"})
                resp.raise_for_status()
            except httpx.TimeoutException as exc:
                raise SchemaTransportError(f"Schema request to {self.schema_url} timed out: {exc}") from exc
            except httpx.HTTPStatusError as exc:
                raise SchemaTransportError(
                    f"Schema request to {self.schema_url} failed with HTTP {exc.response.status_code}"
                ) from exc
            except httpx.HTTPError as exc:
                raise SchemaTransportError(f"Schema request to {self.schema_url} failed: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError as exc:
            raise SchemaProtocolError(f"Schema response from {self.schema_url} is not JSON") from exc

        representation = SchemaRepresentation.from_response(payload)
        logger.info(
            "Fetched schema %s version %s: %d fields, %d dynamic fields, %d copy fields",
            representation.name,
            representation.version,
            len(representation.fields),
            len(representation.dynamic_fields),
            len(representation.copy_fields),
        )
        return representation
