"""
Solr ``<copyField>`` directives.

A copy field duplicates data from a source field into a destination field at
indexing time, truncated to ``max_chars`` characters. Rules enforced here:

1. Source and destination are static or dynamic fields, never field types.
2. A wildcard destination is only valid with a wildcard source (the matched
   glob is reused for the destination name).
3. A destination receiving from a multivalued source, or from more than one
   copy field, must itself be multivalued. The first half is checked on
   construction, the second by :func:`check_copy_field_targets` once a full
   set of copy fields is assembled.

See https://solr.apache.org/guide/solr/latest/indexing-guide/copy-fields.html
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any

from search_schema.errors import InvalidCharLimitError, InvalidCopyFieldEndpointError
from search_schema.schema.fields import SchemaField
from search_schema.schema.properties import FieldProperty


DEFAULT_MAX_CHARS = 3000


class CopyField:
    """A copy directive between two fields. Identity is the (source, dest) name pair."""

    __slots__ = ("source", "destination", "max_chars")

    def __init__(
        self, source: SchemaField, destination: SchemaField, max_chars: int | None = DEFAULT_MAX_CHARS
    ) -> None:
        if source is None or destination is None:
            raise InvalidCopyFieldEndpointError("Copy field source and dest may not be None")
        if not isinstance(source, SchemaField) or not isinstance(destination, SchemaField):
            raise InvalidCopyFieldEndpointError(
                "Copy field source and dest may only be static or dynamic fields, not types"
            )
        if destination.is_wildcard and not source.is_wildcard:
            raise InvalidCopyFieldEndpointError(
                f"Wildcard dest {destination.name!r} requires a wildcard source, got {source.name!r}"
            )
        if source.is_multivalued and not destination.is_multivalued:
            raise InvalidCopyFieldEndpointError(
                f"Dest {destination.name!r} must be multivalued to receive from multivalued {source.name!r}"
            )
        if isinstance(max_chars, bool) or not isinstance(max_chars, int) or max_chars < 1:
            raise InvalidCharLimitError(f"Copy field maxChars may not be < 1 or None, got {max_chars!r}")

        self.source = source
        self.destination = destination
        self.max_chars = max_chars

    @classmethod
    def build(
        cls, source: SchemaField, destination: SchemaField, max_chars: int | None = DEFAULT_MAX_CHARS
    ) -> CopyField:
        return cls(source, destination, max_chars)

    @property
    def key(self) -> tuple[str, str]:
        return (self.source.name, self.destination.name)

    def to_wire(self) -> dict[str, Any]:
        return {
            FieldProperty.SOURCE.key: self.source.name,
            FieldProperty.DEST.key: self.destination.name,
            FieldProperty.MAXCHARS.key: self.max_chars,
        }

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, CopyField):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"CopyField({self.source.name!r} -> {self.destination.name!r}, max_chars={self.max_chars})"


def parse_max_chars(raw: Mapping[str, Any]) -> int:
    """Read the maxChars limit of a raw copy field entry, defaulting when the entry has none."""
    prop = FieldProperty.MAXCHARS
    if prop.key not in raw:
        return DEFAULT_MAX_CHARS
    return int(prop.from_wire(raw[prop.key]))


def check_copy_field_targets(copy_fields: Iterable[CopyField]) -> list[str]:
    """Report destinations fed by several copy fields that are not multivalued."""
    copy_fields = list(copy_fields)
    fan_in = Counter(copy_field.destination.name for copy_field in copy_fields)
    problems: list[str] = []
    seen: set[str] = set()
    for copy_field in copy_fields:
        dest = copy_field.destination
        if dest.name in seen or fan_in[dest.name] < 2 or dest.is_multivalued:
            continue
        seen.add(dest.name)
        problems.append(
            f"Dest {dest.name!r} receives from {fan_in[dest.name]} copy fields but is not multivalued"
        )
    return problems
