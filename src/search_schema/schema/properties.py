"""
Registry of Solr schema properties.

Every attribute that may appear on a ``<fieldType>``, ``<field>``,
``<dynamicField>`` or ``<copyField>`` is a member of :class:`FieldProperty`.
Members carry:

- key: the attribute name as used on the wire and in schema.xml
- value_type: the declared value type, used to normalize raw wire values
- default: Solr's default when the attribute is absent (``None`` if Solr has none)

Property values are held in their canonical string form (``"true"``, ``"3000"``)
and converted to typed values on demand, so field property bags compare equal
no matter whether the engine answered with a JSON boolean or a string.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from search_schema.errors import InvalidWireValueError, UnknownWirePropertyError


class ValueType(str, Enum):
    """Declared value types of schema properties."""

    BOOL = "bool"
    STRING = "string"
    INT = "int"
    LONG = "long"


class FieldProperty(Enum):
    """Closed set of schema property keys."""

    # <fieldType>, <dynamicField> and <field>
    NAME = ("name", ValueType.STRING, None)

    # <fieldType> only
    CLASS = ("class", ValueType.STRING, None)

    # <dynamicField> and <field> only
    TYPE = ("type", ValueType.STRING, None)
    DEFAULT = ("default", ValueType.STRING, None)

    PRECISIONSTEP = ("precisionStep", ValueType.LONG, None)
    POSITIONINCREMENTGAP = ("positionIncrementGap", ValueType.STRING, None)
    AUTOGENERATEPHRASEQUERIES = ("autoGeneratePhraseQueries", ValueType.BOOL, None)
    SYNONYMQUERYSTYLE = ("synonymQueryStyle", ValueType.STRING, None)
    ENABLEGRAPHQUERIES = ("enableGraphQueries", ValueType.BOOL, "true")
    DOCVALUESFORMAT = ("docValuesFormat", ValueType.STRING, None)
    POSTINGSFORMAT = ("postingsFormat", ValueType.STRING, None)

    INDEXED = ("indexed", ValueType.BOOL, "true")
    STORED = ("stored", ValueType.BOOL, "true")
    DOCVALUES = ("docValues", ValueType.BOOL, "false")
    SORTMISSINGFIRST = ("sortMissingFirst", ValueType.BOOL, "false")
    SORTMISSINGLAST = ("sortMissingLast", ValueType.BOOL, "false")
    MULTIVALUED = ("multiValued", ValueType.BOOL, "false")
    UNINVERTIBLE = ("uninvertible", ValueType.BOOL, "true")
    OMITNORMS = ("omitNorms", ValueType.BOOL, None)
    OMITTERMFREQANDPOSITIONS = ("omitTermFreqAndPositions", ValueType.BOOL, None)
    OMITPOSITIONS = ("omitPositions", ValueType.BOOL, None)
    TERMVECTORS = ("termVectors", ValueType.BOOL, "false")
    TERMPOSITIONS = ("termPositions", ValueType.BOOL, "false")
    TERMOFFSETS = ("termOffsets", ValueType.BOOL, "false")
    TERMPAYLOADS = ("termPayloads", ValueType.BOOL, "false")
    REQUIRED = ("required", ValueType.BOOL, "false")
    USEDOCVALUESASSTORED = ("useDocValuesAsStored", ValueType.BOOL, "true")
    LARGE = ("large", ValueType.BOOL, "false")

    # <copyField> only
    SOURCE = ("source", ValueType.STRING, None)
    DEST = ("dest", ValueType.STRING, None)
    MAXCHARS = ("maxChars", ValueType.INT, None)

    def __init__(self, key: str, value_type: ValueType, default: str | None) -> None:
        self.key = key
        self.value_type = value_type
        self.default = default

    def __repr__(self) -> str:
        return f"<FieldProperty.{self.name}: {self.key!r}>"

    def from_wire(self, raw: Any) -> str:
        """Normalize a raw wire value into the canonical string form."""
        if self.value_type is ValueType.BOOL:
            if isinstance(raw, bool):
                return "true" if raw else "false"
            if isinstance(raw, str) and raw.lower() in ("true", "false"):
                return raw.lower()
        elif self.value_type in (ValueType.INT, ValueType.LONG):
            if isinstance(raw, int) and not isinstance(raw, bool):
                return str(raw)
            if isinstance(raw, str):
                try:
                    return str(int(raw))
                except ValueError:
                    pass
        elif isinstance(raw, str):
            return raw
        elif isinstance(raw, bool):
            return "true" if raw else "false"
        elif isinstance(raw, (int, float)):
            return str(raw)

        msg = f"Value {raw!r} for property {self.key!r} is not a valid {self.value_type.value}"
        raise InvalidWireValueError(msg)

    def to_wire(self, value: str) -> bool | int | str:
        """Convert a canonical string value into its typed wire value."""
        if self.value_type is ValueType.BOOL:
            return value == "true"
        if self.value_type in (ValueType.INT, ValueType.LONG):
            return int(value)
        return value


_BY_KEY: dict[str, FieldProperty] = {prop.key: prop for prop in FieldProperty}


def lookup(key: str) -> FieldProperty:
    """Resolve a wire key to its property.

    Raises:
        UnknownWirePropertyError: If the key is not registered.
    """
    try:
        return _BY_KEY[key]
    except (KeyError, TypeError):
        raise UnknownWirePropertyError(key) from None


def default_of(prop: FieldProperty) -> str | None:
    return prop.default


def convert_to_properties(raw: dict[str, Any]) -> dict[FieldProperty, str]:
    """Convert a raw wire map into a property bag, failing on the first unknown key."""
    properties: dict[FieldProperty, str] = {}
    for key, value in raw.items():
        prop = lookup(key)
        properties[prop] = prop.from_wire(value)
    return properties
