"""
Static and dynamic Solr fields.

- StaticField: a concretely named ``<field>`` (e.g., "dsDescriptionValue")
- DynamicField: a ``<dynamicField>`` template with a single leading wildcard (e.g., "*_ss")

Both are built from a name, a :class:`FieldType` and a property overlay. The
overlay is either one of the :class:`StdConf` presets or an explicit mapping;
it may never carry ``name`` or ``type``, which are managed by the constructor.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, ClassVar, Self

from search_schema.errors import ReservedPropertyOverrideError
from search_schema.schema.base import WILDCARD_PATTERN, BaseField, FieldKind
from search_schema.schema.field_types import FieldType, find_by_name
from search_schema.schema.properties import FieldProperty, convert_to_properties


P = FieldProperty


class StdConf(Enum):
    """Commonly used property combinations, ready to reuse."""

    STORED = ((P.STORED, "true"), (P.INDEXED, "false"), (P.MULTIVALUED, "false"))
    STORED_INDEXED = ((P.STORED, "true"), (P.INDEXED, "true"), (P.MULTIVALUED, "false"))
    STORED_INDEXED_MULTIVALUED = ((P.STORED, "true"), (P.INDEXED, "true"), (P.MULTIVALUED, "true"))

    @property
    def config(self) -> dict[FieldProperty, str]:
        return dict(self.value)


class SchemaField(BaseField):
    """A field entry referencing a :class:`FieldType`."""

    kind: ClassVar[FieldKind]

    def __init__(
        self,
        name: str,
        field_type: FieldType,
        properties: StdConf | Mapping[FieldProperty, Any] | None = None,
    ) -> None:
        if properties is None:
            properties = StdConf.STORED_INDEXED
        overlay = properties.config if isinstance(properties, StdConf) else dict(properties)
        if FieldProperty.NAME in overlay or FieldProperty.TYPE in overlay:
            raise ReservedPropertyOverrideError("Given properties may not override the field's name or type")
        super().__init__(name, {FieldProperty.TYPE: field_type.name, **overlay})
        self.field_type = field_type

    @property
    def type_name(self) -> str:
        return self._properties[FieldProperty.TYPE]

    def effective(self, prop: FieldProperty) -> str | None:
        """Resolve a property the way Solr does: field, then field type, then Solr default."""
        value = self._properties.get(prop)
        if value is None:
            value = self.field_type.get(prop)
        if value is None:
            value = prop.default
        return value

    @property
    def is_multivalued(self) -> bool:
        return self.effective(FieldProperty.MULTIVALUED) == "true"

    @property
    def is_wildcard(self) -> bool:
        return self.kind is FieldKind.DYNAMIC

    @classmethod
    def from_wire(cls, raw: Mapping[str, Any]) -> Self:
        """Build a field from a raw schema API entry.

        ``name`` and ``type`` are stripped first, the type is resolved against the
        field type catalog, and every remaining key goes through the property
        registry. Entries with no explicit storage flags get the stored + indexed
        preset, skipping properties their type already sets.

        Raises:
            UnknownFieldTypeError: If the type has not been modeled.
            UnknownWirePropertyError: If any key is not a known property.
            InvalidWireValueError: If a value does not fit its property.
            InvalidNameError: If the name breaks the naming rule of this kind.
        """
        data = dict(raw)
        name = data.pop(FieldProperty.NAME.key, None)
        type_name = data.pop(FieldProperty.TYPE.key, None)
        field_type = find_by_name(type_name)

        properties = {
            prop: value
            for prop, value in StdConf.STORED_INDEXED.config.items()
            if field_type.get(prop) is None
        }
        properties.update(convert_to_properties(data))
        return cls(name, field_type, properties)


class StaticField(SchemaField):
    """A concretely named ``<field>``, generally one per metadata attribute."""

    kind: ClassVar[FieldKind] = FieldKind.STATIC


class DynamicField(SchemaField):
    """A ``<dynamicField>`` matched by Solr against many concrete field names."""

    kind: ClassVar[FieldKind] = FieldKind.DYNAMIC
    name_pattern = WILDCARD_PATTERN

    def matches(self, field_name: str) -> bool:
        """Check whether a concrete field name would be caught by this template."""
        suffix = self.name[1:]
        return len(field_name) > len(suffix) and field_name.endswith(suffix)
