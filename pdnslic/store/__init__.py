"""
Settings store implementations.
"""

from pdnslic.store.persistence import InMemorySettingsStore, SQLiteSettingsStore

__all__ = ["InMemorySettingsStore", "SQLiteSettingsStore"]
