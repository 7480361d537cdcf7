"""Infra layer utilities (blob storage)."""

from .storage import BlobStore, FileBlobStore, SQLiteBlobStore, SQLiteManager

__all__ = ["BlobStore", "FileBlobStore", "SQLiteBlobStore", "SQLiteManager"]
