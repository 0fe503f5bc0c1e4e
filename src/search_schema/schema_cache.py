"""
In-memory cache of the schema the application expects Solr to have.

The expected schema is derived from the metadata field catalog: every
searchable metadata field becomes a stored + indexed static field, and every
such field is copied into the full-text aggregation field ``_text_``.

The cache is shared by everything in the process that needs the expected
schema. Writers insert-if-absent under a lock and readers get immutable
snapshots, so a concurrent reader never sees a half-built entry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
import threading
from types import MappingProxyType

from search_schema.errors import UnsupportedMetadataTypeError
from search_schema.metadata import MetadataFieldCatalog, MetadataFieldDefinition, MetadataFieldType
from search_schema.schema import field_types
from search_schema.schema.copy_fields import DEFAULT_MAX_CHARS, CopyField
from search_schema.schema.field_types import FieldType
from search_schema.schema.fields import DynamicField, StaticField, StdConf
from search_schema.schema.properties import FieldProperty


logger = logging.getLogger(__name__)


FULL_TEXT_FIELD_NAME = "_text_"

FULL_TEXT_FIELD = StaticField(
    FULL_TEXT_FIELD_NAME,
    field_types.TEXT_GENERAL,
    {
        FieldProperty.INDEXED: "true",
        FieldProperty.STORED: "false",
        FieldProperty.MULTIVALUED: "true",
    },
)

# Metadata types mapped to the Solr type their values are indexed with.
# None means the field is never indexed (e.g., email addresses).
SOLR_TYPE_BY_METADATA_TYPE: Mapping[MetadataFieldType, FieldType | None] = MappingProxyType(
    {
        MetadataFieldType.NONE: field_types.TEXT_EN,
        MetadataFieldType.DATE: field_types.TEXT_EN,
        MetadataFieldType.TEXT: field_types.TEXT_EN,
        MetadataFieldType.TEXTBOX: field_types.TEXT_EN,
        MetadataFieldType.URL: field_types.TEXT_EN,
        MetadataFieldType.INT: field_types.INTEGER,
        MetadataFieldType.FLOAT: field_types.FLOAT,
        MetadataFieldType.EMAIL: None,
    }
)

# Solr types the builder knows how to turn into a field definition.
SUPPORTED_FIELD_TYPES: frozenset[FieldType] = frozenset({field_types.TEXT_EN})

# Dynamic fields shipped with Solr's default schema. They are not managed by the
# application, so validation leaves them alone.
IGNORED_DYNAMIC_FIELDS: frozenset[str] = frozenset(
    {
        "*_i",
        "*_is",
        "*_s",
        "*_ss",
        "*_l",
        "*_ls",
        "*_t",
        "*_txt",
        "*_txt_en",
        "*_b",
        "*_bs",
        "*_f",
        "*_fs",
        "*_d",
        "*_ds",
        "*_dt",
        "*_dts",
        "*_p",
        "*_pi",
        "*_c",
        "*_ti",
        "*_tl",
        "*_tf",
        "*_td",
        "*_tdt",
        "*_coordinate",
        "*_point",
        "*_srpt",
        "*_ws",
        "*_str",
        "*_descendent_path",
        "*_ancestor_path",
        "attr_*",
        "ignored_*",
        "random_*",
    }
)


@dataclass(frozen=True, slots=True)
class ExpectedSchema:
    """Immutable view of the cache at one point in time."""

    static_fields: Mapping[str, StaticField]
    dynamic_fields: Mapping[str, DynamicField]
    copy_fields: tuple[CopyField, ...]

    def copy_field_keys(self) -> set[tuple[str, str]]:
        return {copy_field.key for copy_field in self.copy_fields}


class SchemaCache:
    """Builds and holds the expected schema.

    Args:
        catalog: Source of metadata field definitions
        full_text_field: Aggregation field every searchable field is copied into
        max_chars: Limit used for the generated full-text copy fields
    """

    def __init__(
        self,
        catalog: MetadataFieldCatalog,
        *,
        full_text_field: StaticField = FULL_TEXT_FIELD,
        max_chars: int = DEFAULT_MAX_CHARS,
    ) -> None:
        self.catalog = catalog
        self.full_text_field = full_text_field
        self.max_chars = max_chars
        self._lock = threading.Lock()
        self._static_fields: dict[str, StaticField] = {full_text_field.name: full_text_field}
        self._dynamic_fields: dict[str, DynamicField] = {}
        self._copy_fields: list[CopyField] = []
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        """Add fields for every catalog entry that is not cached yet.

        Repeated calls with an unchanged catalog leave the cache as it is.
        """
        static_fields, copy_fields = self._build_from_catalog()
        with self._lock:
            for static_field in static_fields:
                self._static_fields.setdefault(static_field.name, static_field)
            for copy_field in copy_fields:
                if copy_field not in self._copy_fields:
                    self._copy_fields.append(copy_field)
            self._loaded = True
        logger.info(
            "Schema cache loaded: %d static fields, %d copy fields",
            len(self._static_fields),
            len(self._copy_fields),
        )

    def reload(self) -> None:
        """Rebuild from the catalog, dropping fields that left it."""
        static_fields, copy_fields = self._build_from_catalog()
        fresh_static = {self.full_text_field.name: self.full_text_field}
        for static_field in static_fields:
            fresh_static.setdefault(static_field.name, static_field)
        fresh_copy: list[CopyField] = []
        for copy_field in copy_fields:
            if copy_field not in fresh_copy:
                fresh_copy.append(copy_field)

        with self._lock:
            dropped = set(self._static_fields) - set(fresh_static)
            self._static_fields = fresh_static
            self._copy_fields = fresh_copy
            self._loaded = True
        if dropped:
            logger.info("Schema cache reload dropped fields: %s", ", ".join(sorted(dropped)))
        logger.info("Schema cache reloaded: %d static fields", len(fresh_static))

    def register_dynamic_field(self, dynamic_field: DynamicField) -> DynamicField:
        """Add an application-owned dynamic field, returning the cached instance for its name."""
        with self._lock:
            return self._dynamic_fields.setdefault(dynamic_field.name, dynamic_field)

    def build_static_field(self, definition: MetadataFieldDefinition) -> StaticField | None:
        """Map one metadata field to its Solr field, or None if it is never indexed.

        Raises:
            UnsupportedMetadataTypeError: If the field maps to a Solr type not supported yet.
        """
        if definition.declared_type not in SOLR_TYPE_BY_METADATA_TYPE:
            raise UnsupportedMetadataTypeError(
                f"Metadata type {definition.declared_type.value!r} of {definition.name!r} has no Solr mapping"
            )
        solr_type = SOLR_TYPE_BY_METADATA_TYPE[definition.declared_type]
        if solr_type is None:
            return None
        if solr_type not in SUPPORTED_FIELD_TYPES:
            raise UnsupportedMetadataTypeError(
                f"Solr type {solr_type.name!r} for {definition.name!r} not supported yet"
            )

        conf = StdConf.STORED_INDEXED_MULTIVALUED if definition.allows_multiple_values else StdConf.STORED_INDEXED
        return StaticField(definition.name, solr_type, conf)

    def build_full_text_copy_field(self, source: StaticField) -> CopyField:
        return CopyField(source, self.full_text_field, self.max_chars)

    def static_fields(self) -> tuple[StaticField, ...]:
        with self._lock:
            return tuple(self._static_fields.values())

    def dynamic_fields(self) -> tuple[DynamicField, ...]:
        with self._lock:
            return tuple(self._dynamic_fields.values())

    def copy_fields(self) -> tuple[CopyField, ...]:
        with self._lock:
            return tuple(self._copy_fields)

    def get_static_field(self, name: str) -> StaticField | None:
        with self._lock:
            return self._static_fields.get(name)

    def snapshot(self) -> ExpectedSchema:
        with self._lock:
            return ExpectedSchema(
                static_fields=MappingProxyType(dict(self._static_fields)),
                dynamic_fields=MappingProxyType(dict(self._dynamic_fields)),
                copy_fields=tuple(self._copy_fields),
            )

    def _build_from_catalog(self) -> tuple[list[StaticField], list[CopyField]]:
        definitions = self.catalog.find_all_ordered_by_name()
        static_fields: list[StaticField] = []
        for definition in definitions:
            static_field = self.build_static_field(definition)
            if static_field is None:
                logger.debug("Skipping metadata field %s: not indexed", definition.name)
                continue
            static_fields.append(static_field)
        copy_fields = [self.build_full_text_copy_field(static_field) for static_field in static_fields]
        return static_fields, copy_fields


def ignored_dynamic_field(name: object) -> bool:
    return name in IGNORED_DYNAMIC_FIELDS


