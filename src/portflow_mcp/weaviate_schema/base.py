"""Base types and common properties for Weaviate collection definitions.

PropertyDef and CollectionDef describe each collection; _common_properties()
provides the fields every portfolio collection carries.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class PropertyDef:
    """Single property in a Weaviate collection."""

    name: str
    data_type: list[str]
    description: str = ""
    skip_vectorization: bool = False
    index_filterable: bool = True
    index_range_filters: bool = False
    index_searchable: bool | None = None  # None = Weaviate default (True for text)


@dataclass
class CollectionDef:
    """A Weaviate collection definition."""

    name: str
    description: str = ""
    properties: list[PropertyDef] = field(default_factory=list)

    @property
    def property_names(self) -> list[str]:
        return [p.name for p in self.properties]


def _common_properties() -> list[PropertyDef]:
    """Properties shared by all portfolio collections."""
    return [
        PropertyDef(
            "portfolio_id", ["text"], "Owning portfolio id",
            skip_vectorization=True, index_searchable=False,
        ),
        PropertyDef(
            "created_at", ["date"], "Timestamp of creation",
            skip_vectorization=True, index_range_filters=True,
        ),
    ]
