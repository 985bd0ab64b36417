"""
Installation identity: the persisted secret and the public Installation Code.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from typing import TYPE_CHECKING

from pdnslic.common.exceptions import InstallationError

if TYPE_CHECKING:
    from pdnslic.common.config import Config
    from pdnslic.common.interfaces import ISettingsStore

logger = logging.getLogger(__name__)


class InstallationIdentity:
    """Derives the Installation Code that licenses are bound to.

    The code depends only on the secret stored under ``installation_id``,
    so every node sharing the settings store presents the same code.
    """

    def __init__(self, store: ISettingsStore, config: Config) -> None:
        self.store = store
        self.config = config

    def _load_secret_hex(self) -> str:
        key = self.config.INSTALLATION_ID_SETTING
        stored = self.store.get(key)
        if not stored:
            candidate = secrets.token_hex(self.config.SECRET_BYTES)
            stored = self.store.insert_if_absent(key, candidate)
            if stored == candidate:
                logger.info("Generated new installation secret")
            else:
                logger.info("Installation secret created concurrently, using stored one")

        try:
            secret = bytes.fromhex(stored)
        except ValueError as err:
            msg = "Stored installation_id is not a hex string"
            raise InstallationError(msg) from err
        if len(secret) != self.config.SECRET_BYTES:
            msg = (
                f"Stored installation_id is {len(secret)} bytes, "
                f"expected {self.config.SECRET_BYTES}"
            )
            raise InstallationError(msg)
        return stored

    def get_or_create_secret(self) -> bytes:
        """Return the installation secret, creating it on first use."""
        return bytes.fromhex(self._load_secret_hex())

    def get_installation_code(self) -> str:
        """Return ``PDNS-`` followed by 40 uppercase hex chars."""
        return self.code_for_secret(self._load_secret_hex())

    def code_for_secret(self, secret_hex: str) -> str:
        digest = hashlib.sha256(
            (self.config.INSTALL_HASH_PREFIX + secret_hex).encode()
        ).hexdigest()
        code = digest[: self.config.INSTALLATION_CODE_LENGTH].upper()
        return f"{self.config.PRODUCT_TAG}-{code}"
