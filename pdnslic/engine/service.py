"""
Licensing service: the dependency root used by the CLI and the admin API.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from pdnslic.common.config import Config
from pdnslic.common.decorators import requires_domain_capacity
from pdnslic.common.models import KeyUpdateResult, LicenseStatus, ReasonCode
from pdnslic.engine.codec import LicenseCodec
from pdnslic.engine.enforcement import EnforcementGate
from pdnslic.engine.identity import InstallationIdentity
from pdnslic.engine.public_key import PublicKeyProvider
from pdnslic.engine.status_cache import LicenseStatusCache
from pdnslic.engine.verifier import LicenseVerifier

if TYPE_CHECKING:
    from pathlib import Path

    from pdnslic.common.interfaces import IAuditSink, ISettingsStore
    from pdnslic.common.models import EnforcementDecision


class LicenseService:
    """Owns one instance of every licensing component."""

    def __init__(
        self,
        store: ISettingsStore,
        config: Config | None = None,
        public_key_path: Path | None = None,
        audit_sink: IAuditSink | None = None,
        cache_ttl: float | None = None,
    ) -> None:
        self.config = config or Config()
        self.store = store
        self.audit_sink = audit_sink
        self.logger = logging.getLogger(__name__)

        self.identity = InstallationIdentity(self.store, self.config)
        self.key_provider = PublicKeyProvider(
            public_key_path or self.config.PUBLIC_KEY_PATH
        )
        self.codec = LicenseCodec(self.config.PRODUCT_TAG, self.config.KEY_DELIMITER)
        self.verifier = LicenseVerifier(
            config=self.config,
            codec=self.codec,
            key_provider=self.key_provider,
            identity=self.identity,
        )
        self.cache = LicenseStatusCache(
            config=self.config,
            store=self.store,
            verifier=self.verifier,
            key_provider=self.key_provider,
            ttl=cache_ttl,
        )
        self.gate = EnforcementGate(self.config, self.store, self.cache)

    def get_status(self) -> LicenseStatus:
        return self.cache.get_status()

    def can_create_domain(self) -> EnforcementDecision:
        return self.gate.can_create_resource()

    @requires_domain_capacity("gate")
    def add_domain(self, name: str) -> None:
        """Create a domain record if the license quota allows it."""
        self.store.add_domain(name)

    def installation_code(self) -> str:
        return self.identity.get_installation_code()

    def update_license_key(
        self, new_key: str, actor: str | None = None
    ) -> KeyUpdateResult:
        """Install, replace or (with an empty string) remove the license key."""
        setting = self.config.LICENSE_KEY_SETTING
        new_key = new_key.strip()
        old_key = self.store.get(setting) or ""

        if not new_key:
            self.store.delete(setting)
            self.cache.invalidate()
            self._notify_audit(actor, setting, old_key, None)
            return KeyUpdateResult(
                status=self.cache.get_status(),
                message="License key removed. System operating in Free mode.",
                level="success",
            )

        self.store.set(setting, new_key)
        self.cache.invalidate()
        self._notify_audit(actor, setting, old_key, new_key)
        status = self.cache.get_status()

        if status.valid:
            return KeyUpdateResult(
                status=status,
                message=f"License validated: {self.describe(status)}",
                level="success",
            )
        if status.reason is ReasonCode.LX_BIND:
            message = (
                "License key does not match this Installation Code "
                f"({self.installation_code()}). Please request a new license "
                "using this Installation Code."
            )
            return KeyUpdateResult(status=status, message=message, level="danger")

        reason = status.reason.value if status.reason else "unknown"
        return KeyUpdateResult(
            status=status,
            message=f"Key saved but invalid (code {reason}). Free mode active.",
            level="warning",
        )

    def clear_license_key(self, actor: str | None = None) -> KeyUpdateResult:
        return self.update_license_key("", actor)

    def set_enforcement(self, *, enabled: bool, actor: str | None = None) -> None:
        setting = self.config.ENFORCEMENT_SETTING
        old_value = self.store.get(setting)
        self.gate.set_enforcement(enabled=enabled)
        self._notify_audit(actor, setting, old_value, self.store.get(setting))

    def status_report(self) -> dict[str, Any]:
        """Summary used by the ``status`` command."""
        status = self.get_status()
        report: dict[str, Any] = {
            "license_type": status.license_type,
            "mode": self.describe(status),
            "max_domains": "unlimited" if status.unlimited else status.max_domains,
            "domains_used": self.store.count_domains(),
            "installation_code": self.installation_code(),
            "integrity": status.integrity,
        }
        if status.reason:
            report["error"] = status.reason.value
        if status.integrity_error:
            report["integrity_error"] = status.integrity_error.value
        return report

    def health(self) -> dict[str, Any]:
        return {"status": "ok", "timestamp": int(time.time())}

    @staticmethod
    def describe(status: LicenseStatus) -> str:
        if status.license_type != "commercial":
            return f"Free ({status.max_domains} domains)"
        if status.unlimited:
            return "Commercial Unlimited"
        return f"Commercial limit {status.max_domains}"

    def _notify_audit(
        self,
        actor: str | None,
        key: str,
        old_value: str | None,
        new_value: str | None,
    ) -> None:
        if self.audit_sink is None:
            return
        try:
            self.audit_sink.setting_updated(actor, key, old_value or None, new_value)
        except Exception:  # noqa: BLE001
            self.logger.warning("Audit sink failed for %s", key, exc_info=True)
