"""Typed model of a Solr schema: properties, field types, fields and copy fields."""

from search_schema.schema.base import BaseField, FieldKind
from search_schema.schema.copy_fields import DEFAULT_MAX_CHARS, CopyField, check_copy_field_targets
from search_schema.schema.field_types import ALL_FIELD_TYPES, FieldType, find_by_name
from search_schema.schema.fields import DynamicField, SchemaField, StaticField, StdConf
from search_schema.schema.properties import FieldProperty, ValueType, default_of, lookup


__all__ = [
    "ALL_FIELD_TYPES",
    "DEFAULT_MAX_CHARS",
    "BaseField",
    "CopyField",
    "DynamicField",
    "FieldKind",
    "FieldProperty",
    "FieldType",
    "SchemaField",
    "StaticField",
    "StdConf",
    "ValueType",
    "check_copy_field_targets",
    "default_of",
    "find_by_name",
    "lookup",
]
