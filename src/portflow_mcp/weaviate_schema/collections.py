"""Portfolio collections: headers, items, and uploaded file payloads."""

from __future__ import annotations

from .base import CollectionDef, PropertyDef, _common_properties

PORTFOLIOS = CollectionDef(
    name="Portfolios",
    description="Published portfolio headers, looked up by share slug",
    properties=_common_properties() + [
        PropertyDef(
            "slug", ["text"], "8-character share slug",
            skip_vectorization=True, index_searchable=False,
        ),
        PropertyDef("title", ["text"], "Portfolio title"),
        PropertyDef("description", ["text"], "Portfolio blurb"),
        PropertyDef("is_public", ["boolean"], "Visible through the share URL", skip_vectorization=True),
    ],
)

PORTFOLIO_ITEMS = CollectionDef(
    name="PortfolioItems",
    description="Analysed portfolio items with user edits",
    properties=_common_properties() + [
        PropertyDef(
            "item_id", ["text"], "Stable item id assigned at creation",
            skip_vectorization=True, index_searchable=False,
        ),
        PropertyDef("title", ["text"], "Item title"),
        PropertyDef("description", ["text"], "Item description"),
        PropertyDef("notes", ["text"], "User notes"),
        PropertyDef(
            "category", ["text"], "Content category",
            skip_vectorization=True, index_searchable=False,
        ),
        PropertyDef(
            "method", ["text"], "Strategy that produced the description",
            skip_vectorization=True, index_searchable=False,
        ),
        PropertyDef(
            "extracted_preview", ["text"], "Excerpt of the analysed content",
            skip_vectorization=True,
        ),
        PropertyDef(
            "source", ["text"], "Original URL or file name",
            skip_vectorization=True, index_searchable=False,
        ),
        PropertyDef("url", ["text"], "Link URL", skip_vectorization=True, index_searchable=False),
        PropertyDef("file_url", ["text"], "Uploaded file URL", skip_vectorization=True, index_searchable=False),
        PropertyDef("file_name", ["text"], "Uploaded file name", skip_vectorization=True),
        PropertyDef(
            "sort_order", ["int"], "Display position",
            skip_vectorization=True, index_range_filters=True,
        ),
    ],
)

PORTFOLIO_FILES = CollectionDef(
    name="PortfolioFiles",
    description="Uploaded file payloads keyed by storage path",
    properties=_common_properties() + [
        PropertyDef(
            "path", ["text"], "Storage path {portfolio_id}/{timestamp}_{name}",
            skip_vectorization=True, index_searchable=False,
        ),
        PropertyDef(
            "mime_type", ["text"], "MIME type",
            skip_vectorization=True, index_searchable=False,
        ),
        PropertyDef("data", ["blob"], "Base64 file payload", skip_vectorization=True, index_filterable=False),
    ],
)
