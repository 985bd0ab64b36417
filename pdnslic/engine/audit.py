"""
Audit sinks notified when licensing settings change.
"""

from __future__ import annotations

import logging

from pdnslic.common.logging_utils import mask_license_key


class LoggingAuditSink:
    """Writes setting changes to the ``pdnslic.audit`` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("pdnslic.audit")

    def setting_updated(
        self,
        actor: str | None,
        key: str,
        old_value: str | None,
        new_value: str | None,
    ) -> None:
        self.logger.info(
            "Setting %s changed by %s: %s -> %s",
            key,
            actor or "system",
            mask_license_key(old_value),
            mask_license_key(new_value) if new_value else "(cleared)",
        )
