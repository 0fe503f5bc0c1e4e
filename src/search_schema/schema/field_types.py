"""
Built-in Solr field types.

Mirrors the ``<fieldType>`` entries of the collection schema that matter for
validation. Analyzer chains (tokenizers, filters) are not modeled; a type is
identified by its name, its implementation class and the properties it sets
for every field using it.

The catalog is closed: :data:`ALL_FIELD_TYPES` is built once at import and
:func:`find_by_name` is the only way to resolve a type name coming from the
engine.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

from search_schema.errors import UnknownFieldTypeError
from search_schema.schema.base import BaseField, FieldKind
from search_schema.schema.properties import FieldProperty


P = FieldProperty


class FieldType(BaseField):
    """A ``<fieldType>`` definition.

    Args:
        name: Type name referenced by fields (e.g., "string", "text_en")
        implementation_class: Solr class backing the type (e.g., "solr.StrField")
        overrides: Properties the type sets for every field using it
        deprecated: Kept only to read older schemas
    """

    kind: ClassVar[FieldKind] = FieldKind.TYPE

    def __init__(
        self,
        name: str,
        implementation_class: str,
        overrides: Mapping[FieldProperty, str] | None = None,
        *,
        deprecated: bool = False,
    ) -> None:
        properties = {FieldProperty.CLASS: implementation_class}
        properties.update(overrides or {})
        super().__init__(name, properties)
        self.deprecated = deprecated

    @property
    def implementation_class(self) -> str:
        return self._properties[FieldProperty.CLASS]

    @property
    def overrides(self) -> dict[FieldProperty, str]:
        return {
            prop: value
            for prop, value in self._properties.items()
            if prop not in (FieldProperty.NAME, FieldProperty.CLASS)
        }


# TODO: make the English analyzed type configurable (text_general or other languages) once
# metadata blocks can declare a language.
STRING = FieldType("string", "solr.StrField", {P.DOCVALUES: "true", P.SORTMISSINGLAST: "true"})
STRINGS = FieldType(
    "strings", "solr.StrField", {P.DOCVALUES: "true", P.MULTIVALUED: "true", P.SORTMISSINGLAST: "true"}
)

INTEGER = FieldType("pint", "solr.IntPointField", {P.DOCVALUES: "true"})
INTEGERS = FieldType("pints", "solr.IntPointField", {P.DOCVALUES: "true", P.MULTIVALUED: "true"})
LONG = FieldType("plong", "solr.LongPointField", {P.DOCVALUES: "true"})
LONGS = FieldType("plongs", "solr.LongPointField", {P.DOCVALUES: "true", P.MULTIVALUED: "true"})
FLOAT = FieldType("pfloat", "solr.FloatPointField", {P.DOCVALUES: "true"})
FLOATS = FieldType("pfloats", "solr.FloatPointField", {P.DOCVALUES: "true", P.MULTIVALUED: "true"})
DOUBLE = FieldType("pdouble", "solr.DoublePointField", {P.DOCVALUES: "true"})
DOUBLES = FieldType("pdoubles", "solr.DoublePointField", {P.DOCVALUES: "true", P.MULTIVALUED: "true"})

DATE = FieldType("pdate", "solr.DatePointField", {P.DOCVALUES: "true"})
DATES = FieldType("pdates", "solr.DatePointField", {P.DOCVALUES: "true", P.MULTIVALUED: "true"})

BOOLEAN = FieldType("boolean", "solr.BoolField", {P.SORTMISSINGLAST: "true"})
BOOLEANS = FieldType("booleans", "solr.BoolField", {P.SORTMISSINGLAST: "true", P.MULTIVALUED: "true"})

# Trie types are gone from current Solr releases; only here to parse older schemas.
TRIE_INTEGER = FieldType(
    "int", "solr.TrieIntField", {P.PRECISIONSTEP: "0", P.POSITIONINCREMENTGAP: "0"}, deprecated=True
)
TRIE_LONG = FieldType(
    "long", "solr.TrieLongField", {P.PRECISIONSTEP: "0", P.POSITIONINCREMENTGAP: "0"}, deprecated=True
)
TRIE_DATE = FieldType(
    "date", "solr.TrieDateField", {P.PRECISIONSTEP: "0", P.POSITIONINCREMENTGAP: "0"}, deprecated=True
)

TEXT_EN = FieldType("text_en", "solr.TextField")
TEXT_GENERAL = FieldType("text_general", "solr.TextField", {P.MULTIVALUED: "true"})
TEXT_GENERAL_REV = FieldType("text_general_rev", "solr.TextField")
ALPHA_ONLY_SORT = FieldType("alphaOnlySort", "solr.TextField")


ALL_FIELD_TYPES: tuple[FieldType, ...] = (
    STRING,
    STRINGS,
    INTEGER,
    INTEGERS,
    LONG,
    LONGS,
    FLOAT,
    FLOATS,
    DOUBLE,
    DOUBLES,
    DATE,
    DATES,
    BOOLEAN,
    BOOLEANS,
    TRIE_INTEGER,
    TRIE_LONG,
    TRIE_DATE,
    TEXT_EN,
    TEXT_GENERAL,
    TEXT_GENERAL_REV,
    ALPHA_ONLY_SORT,
)

_BY_NAME: dict[str, FieldType] = {field_type.name: field_type for field_type in ALL_FIELD_TYPES}
if len(_BY_NAME) != len(ALL_FIELD_TYPES):  # pragma: no cover - guards edits to the table above
    raise RuntimeError("Field type names must be unique")


def find_by_name(name: str) -> FieldType:
    """Resolve a type name from the engine.

    Raises:
        UnknownFieldTypeError: If the type has not been modeled.
    """
    try:
        return _BY_NAME[name]
    except (KeyError, TypeError):
        raise UnknownFieldTypeError(name) from None
