"""
Configuration settings for the licensing engine.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path


class Config:
    """Central configuration class for all licensing settings."""

    def __init__(self) -> None:
        # License key format
        self.PRODUCT_TAG: str = "PDNS"
        self.KEY_DELIMITER: str = "-"
        self.INSTALL_HASH_PREFIX: str = "PDNS-INSTALL-"
        self.INSTALLATION_CODE_LENGTH: int = 40  # Hex chars kept from the digest
        self.SECRET_BYTES: int = 16

        # Quota settings
        self.FREE_TIER_DOMAIN_LIMIT: int = 5
        self.STATUS_CACHE_TTL: int = 30 * 60  # Seconds a computed status stays fresh

        # Settings store keys
        self.LICENSE_KEY_SETTING: str = "license_key"
        self.INSTALLATION_ID_SETTING: str = "installation_id"
        self.ENFORCEMENT_SETTING: str = "license_enforcement"

        # File paths
        self.BASE_DIR: Path = Path(__file__).parent.parent
        self.PUBLIC_KEY_PATH: Path = Path(
            os.getenv(
                "PDNSLIC_PUBKEY_PATH",
                str(self.BASE_DIR / "config" / "license_pubkey.pem"),
            )
        )
        self.DB_PATH: Path = Path(
            os.getenv("PDNSLIC_DB_PATH", str(self.BASE_DIR / "data" / "pdnslic.db"))
        )
        self.DB_TIMEOUT: float = 5.0  # Seconds sqlite waits on a locked database

        # Admin API settings
        self.SERVER_HOST: str = os.getenv("PDNSLIC_SERVER_HOST", "127.0.0.1")
        self.SERVER_PORT: int = int(os.getenv("PDNSLIC_SERVER_PORT", "8000"))

        # Issuer settings
        self.RSA_KEY_SIZE: int = 2048
        self.PRIVATE_KEY_FILENAME: str = "license_private.pem"
        self.PUBLIC_KEY_FILENAME: str = "license_pubkey.pem"

        # Logging
        self.LOG_LEVEL: int = logging.getLevelName(
            os.getenv("PDNSLIC_LOG_LEVEL", "INFO").upper()
        )
        if not isinstance(self.LOG_LEVEL, int):
            self.LOG_LEVEL = logging.INFO
