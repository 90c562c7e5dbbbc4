"""Storage layer - the adapter contract and the in-memory adapter."""

from listforge.storage.adapter import ListStorageAdapter, StorageAdapter
from listforge.storage.memory import MemoryAdapter, MemoryListAdapter

__all__ = ["ListStorageAdapter", "MemoryAdapter", "MemoryListAdapter", "StorageAdapter"]
