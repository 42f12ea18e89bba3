"""Weaviate collection definitions for the remote portfolio store.

Collections are created idempotently by WeaviateClient.ensure_collections()
on first connection. ALL_COLLECTIONS is the canonical list.
"""

from __future__ import annotations

from .base import CollectionDef, PropertyDef, _common_properties
from .collections import PORTFOLIO_FILES, PORTFOLIO_ITEMS, PORTFOLIOS

ALL_COLLECTIONS: list[CollectionDef] = [
    PORTFOLIOS,
    PORTFOLIO_ITEMS,
    PORTFOLIO_FILES,
]

__all__ = [
    "ALL_COLLECTIONS",
    "CollectionDef",
    "PORTFOLIO_FILES",
    "PORTFOLIO_ITEMS",
    "PORTFOLIOS",
    "PropertyDef",
    "_common_properties",
]
