"""Persistence layer - record stores the tree engine reads and updates."""

from fluxtree.persistence.adapter import RecordStore, StoreError
from fluxtree.persistence.config import DatabaseConfig, create_adapter, open_store

__all__ = ["RecordStore", "StoreError", "DatabaseConfig", "create_adapter", "open_store"]
