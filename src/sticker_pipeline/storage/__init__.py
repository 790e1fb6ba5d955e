"""
Object storage for ingested stickers.

StorageGateway enforces the object size limit and delegates to a backend:
SupabaseStorageClient (Supabase Storage REST API) or LocalObjectStore
(filesystem).
"""

from sticker_pipeline.storage.gateway import (
    ObjectStore,
    StorageEntry,
    StorageGateway,
    StoredObject,
    StoreStats,
)
from sticker_pipeline.storage.local import LocalObjectStore
from sticker_pipeline.storage.supabase import SupabaseStorageClient

__all__ = [
    "ObjectStore",
    "StorageEntry",
    "StorageGateway",
    "StoredObject",
    "StoreStats",
    "LocalObjectStore",
    "SupabaseStorageClient",
]
