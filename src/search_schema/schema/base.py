"""Common base for ``<fieldType>``, ``<field>`` and ``<dynamicField>`` entries."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
import re
from types import MappingProxyType
from typing import Any, ClassVar

from search_schema.errors import InvalidNameError, InvalidPropertyKeyError
from search_schema.schema.properties import FieldProperty


class FieldKind(str, Enum):
    """Kinds of named schema entries."""

    STATIC = "field"
    DYNAMIC = "dynamicField"
    TYPE = "fieldType"


# Solr convention: alphanumerics or underscore, not starting with a digit.
# See https://solr.apache.org/guide/solr/latest/indexing-guide/fields.html
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]+$")
WILDCARD_PATTERN = re.compile(r"^\*_[A-Za-z0-9_]+$")


class BaseField:
    """A named schema entry holding an ordered, read-only property bag.

    Identity is the name: two entries with the same name are the same entry, which is
    how Solr enforces uniqueness in a schema. Subclasses pick the naming rule through
    ``name_pattern`` and tag themselves with ``kind``.
    """

    kind: ClassVar[FieldKind]
    name_pattern: ClassVar[re.Pattern[str]] = IDENTIFIER_PATTERN

    def __init__(self, name: str, properties: Mapping[FieldProperty, Any] | None = None) -> None:
        """Build the bag from a name and properties.

        Values are normalized to their canonical strings, so ``True`` and ``"true"`` are the same value.

        Raises:
            InvalidNameError: If the name breaks the naming rule of this kind.
            InvalidPropertyKeyError: If a key is not a FieldProperty.
            InvalidWireValueError: If a value does not fit its property.
        """
        if not self.is_valid_name(name):
            raise InvalidNameError(f"{name!r} does not meet the Solr naming convention for {self.kind.value}")
        bag: dict[FieldProperty, str] = {FieldProperty.NAME: name}
        for prop, value in (properties or {}).items():
            if not isinstance(prop, FieldProperty):
                raise InvalidPropertyKeyError(f"Property key {prop!r} is not a FieldProperty")
            bag[prop] = prop.from_wire(value)
        self._properties = bag

    @classmethod
    def is_valid_name(cls, name: Any) -> bool:
        """Check a name against this kind's naming rule. Accepts anything, including None."""
        if not isinstance(name, str):
            return False
        return cls.name_pattern.fullmatch(name) is not None

    @property
    def name(self) -> str:
        return self._properties[FieldProperty.NAME]

    @property
    def properties(self) -> Mapping[FieldProperty, str]:
        return MappingProxyType(self._properties)

    def has(self, prop: FieldProperty) -> bool:
        return prop in self._properties

    def get(self, prop: FieldProperty) -> str | None:
        return self._properties.get(prop)

    def typed(self, prop: FieldProperty) -> bool | int | str | None:
        """Return the property converted to its declared value type, or None when unset."""
        value = self._properties.get(prop)
        if value is None:
            return None
        return prop.to_wire(value)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the key/value form used by the schema API."""
        return {prop.key: prop.to_wire(value) for prop, value in self._properties.items()}

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, BaseField):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
