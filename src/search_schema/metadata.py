"""Application metadata field catalog consumed by the schema builder."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
import json
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class MetadataFieldType(str, Enum):
    """Value types a metadata block may declare for one of its fields."""

    NONE = "none"
    DATE = "date"
    EMAIL = "email"
    TEXT = "text"
    TEXTBOX = "textbox"
    URL = "url"
    INT = "int"
    FLOAT = "float"


class MetadataFieldDefinition(BaseModel):
    """One user-definable metadata attribute."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1, description="Metadata field name, used verbatim as the Solr field name")
    declared_type: MetadataFieldType = Field(alias="type", description="Declared value type")
    allows_multiple_values: bool = Field(
        default=False, alias="allow_multiples", description="Whether a record may carry several values"
    )


@runtime_checkable
class MetadataFieldCatalog(Protocol):
    """Source of metadata field definitions."""

    def find_all_ordered_by_name(self) -> Sequence[MetadataFieldDefinition]: ...


class InMemoryMetadataCatalog:
    """Catalog over a fixed sequence of definitions."""

    def __init__(self, definitions: Sequence[MetadataFieldDefinition]) -> None:
        self._definitions = list(definitions)

    def find_all_ordered_by_name(self) -> list[MetadataFieldDefinition]:
        return sorted(self._definitions, key=lambda definition: definition.name)


_DEFINITIONS_ADAPTER = TypeAdapter(list[MetadataFieldDefinition])


class JsonMetadataCatalog:
    """Catalog read from a JSON file holding a list of ``{name, type, allow_multiples}`` objects.

    The file is re-read on every call so a schema reload picks up edits.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def find_all_ordered_by_name(self) -> list[MetadataFieldDefinition]:
        if not self.path.exists():
            raise FileNotFoundError(f"Metadata catalog not found: {self.path}")

        with self.path.open(encoding="utf-8") as f:
            data = json.load(f)

        definitions = _DEFINITIONS_ADAPTER.validate_python(data)
        return sorted(definitions, key=lambda definition: definition.name)
