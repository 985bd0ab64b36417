"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from typing import Protocol


class ISettingsStore(Protocol):
    """Protocol for the persistent key-value settings store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def insert_if_absent(self, key: str, value: str) -> str:
        """Atomically store value unless key exists; return the stored value."""
        ...

    def count_domains(self) -> int: ...

    def add_domain(self, name: str) -> None: ...


class IAuditSink(Protocol):
    """Protocol for the audit/event log notified on setting changes."""

    def setting_updated(
        self,
        actor: str | None,
        key: str,
        old_value: str | None,
        new_value: str | None,
    ) -> None: ...
