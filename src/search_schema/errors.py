"""Exception hierarchy for schema modeling, parsing and transport."""

from __future__ import annotations


class SchemaError(Exception):
    """Base class for every error raised by search_schema."""


# Construction errors: programming-contract violations, raised immediately.


class InvalidNameError(SchemaError, ValueError):
    """A field name does not match the naming rule of its kind."""


class ReservedPropertyOverrideError(SchemaError, ValueError):
    """A property overlay tried to set the constructor-managed name or type."""


class InvalidPropertyKeyError(SchemaError, ValueError):
    """A property bag key is not a registered field property."""


class InvalidCopyFieldEndpointError(SchemaError, ValueError):
    """A copy-field source or destination is missing, a field type, or breaks a copy rule."""


class InvalidCharLimitError(SchemaError, ValueError):
    """A copy-field maxChars limit is missing or below 1."""


class UnsupportedMetadataTypeError(SchemaError, ValueError):
    """A metadata field maps to a Solr type the schema builder cannot model yet."""


# Wire parsing errors: recoverable per entry while checking a live schema.


class WireParseError(SchemaError, ValueError):
    """A raw schema entry from the engine could not be turned into the typed model."""


class UnknownWirePropertyError(WireParseError):
    """A raw schema key has no registered field property."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Unknown schema property {key!r}")


class UnknownFieldTypeError(WireParseError):
    """A raw schema type name has no registered field type."""

    def __init__(self, type_name: object) -> None:
        self.type_name = type_name
        super().__init__(f"Field type {type_name!r} from Solr is not modeled")


class InvalidWireValueError(WireParseError):
    """A raw property value does not fit the declared value type of its property."""


class UnresolvedCopyFieldReferenceError(WireParseError):
    """A copy-field source or dest names a field that was not parsed."""

    def __init__(self, role: str, name: object) -> None:
        self.role = role
        self.name = name
        super().__init__(f"copyField references unknown {role} field {name!r}")


# Transport errors: no validation could happen at all.


class SchemaTransportError(SchemaError, RuntimeError):
    """The schema request to the engine failed or timed out."""


class SchemaProtocolError(SchemaTransportError):
    """The engine answered, but not with a usable schema representation."""
