"""
Domain-creation quota gate.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pdnslic.common.models import EnforcementDecision

if TYPE_CHECKING:
    from pdnslic.common.config import Config
    from pdnslic.common.interfaces import ISettingsStore
    from pdnslic.engine.status_cache import LicenseStatusCache

logger = logging.getLogger(__name__)

DISABLED_VALUES = frozenset({"0", "false", "no", "off"})


class EnforcementGate:
    """Approves or denies creating another domain.

    Limited tiers read the domain count fresh on every call; unlimited
    licenses never touch it. Store failures propagate;
    the caller decides between failing closed and failing open.
    """

    def __init__(
        self, config: Config, store: ISettingsStore, cache: LicenseStatusCache
    ) -> None:
        self.config = config
        self.store = store
        self.cache = cache

    def enforcement_enabled(self) -> bool:
        """Enforcement is off only when explicitly switched off."""
        value = self.store.get(self.config.ENFORCEMENT_SETTING)
        if value is None:
            return True
        return value.strip().lower() not in DISABLED_VALUES

    def set_enforcement(self, *, enabled: bool) -> None:
        self.store.set(self.config.ENFORCEMENT_SETTING, "1" if enabled else "0")
        logger.warning("License enforcement %s", "enabled" if enabled else "disabled")

    def can_create_resource(self) -> EnforcementDecision:
        if not self.enforcement_enabled():
            return EnforcementDecision(
                allowed=True, limit=None, current_count=self.store.count_domains()
            )

        status = self.cache.get_status()
        if status.unlimited:
            return EnforcementDecision(allowed=True, limit=None)

        current = self.store.count_domains()
        limit = status.max_domains
        if limit is None:
            logger.warning("Limited license without max_domains, using free tier")
            limit = self.config.FREE_TIER_DOMAIN_LIMIT

        if current >= limit:
            logger.info("Domain creation denied: %s of %s used", current, limit)
            return EnforcementDecision(
                allowed=False,
                limit=limit,
                current_count=current,
                message=f"Domain limit reached for current license ({limit}).",
            )
        return EnforcementDecision(allowed=True, limit=limit, current_count=current)
