"""
Process-local memoization of the license status.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

from pdnslic.common.models import LicenseStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from pdnslic.common.config import Config
    from pdnslic.common.interfaces import ISettingsStore
    from pdnslic.engine.public_key import PublicKeyProvider
    from pdnslic.engine.verifier import LicenseVerifier

logger = logging.getLogger(__name__)


class LicenseStatusCache:
    """Caches the verdict for the stored license key for ``ttl`` seconds.

    The cache is not shared between worker processes. A process that writes
    the license key must call ``invalidate``; other processes pick the new
    key up once their entry expires. Threads of one process share the entry
    and the verdict is computed once per expiry.
    """

    def __init__(
        self,
        config: Config,
        store: ISettingsStore,
        verifier: LicenseVerifier,
        key_provider: PublicKeyProvider,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.store = store
        self.verifier = verifier
        self.key_provider = key_provider
        self.ttl = ttl if ttl is not None else config.STATUS_CACHE_TTL
        self.clock = clock
        self._entry: tuple[LicenseStatus, float] | None = None
        self._lock = threading.Lock()

    def get_status(self) -> LicenseStatus:
        with self._lock:
            now = self.clock()
            if self._entry is not None:
                status, computed_at = self._entry
                if now - computed_at < self.ttl:
                    return status

            # Store errors propagate here and leave the cache empty
            raw = (self.store.get(self.config.LICENSE_KEY_SETTING) or "").strip()
            if not raw:
                status = LicenseStatus.baseline(
                    self.config.FREE_TIER_DOMAIN_LIMIT,
                    integrity_error=self.key_provider.probe(),
                )
                logger.debug("No license key installed, using free tier")
            else:
                status = self.verifier.verify(raw)

            self._entry = (status, now)
            return status

    def invalidate(self) -> None:
        """Drop the cached verdict and any integrity flags."""
        with self._lock:
            self._entry = None
            self.key_provider.reset()
        logger.debug("License status cache invalidated")

    @property
    def is_fresh(self) -> bool:
        return self._entry is not None and self.clock() - self._entry[1] < self.ttl
