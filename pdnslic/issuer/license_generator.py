"""
Offline license generator for creating signed license keys.
"""

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from pydantic import ValidationError as PydanticValidationError

from pdnslic.common.config import Config
from pdnslic.common.models import LicensePayload, LicenseType
from pdnslic.engine.codec import LicenseCodec

if TYPE_CHECKING:
    from pathlib import Path


class LicenseGenerator:
    """Signs license payloads with the private RSA key."""

    def __init__(
        self,
        private_key: rsa.RSAPrivateKey | None = None,
        private_key_path: Path | None = None,
        config: Config | None = None,
    ):
        self.config = config or Config()
        self.logger = logging.getLogger(__name__)
        self.codec = LicenseCodec(self.config.PRODUCT_TAG, self.config.KEY_DELIMITER)
        self.private_key = private_key or self._load_private_key(
            private_key_path
            or self.config.PUBLIC_KEY_PATH.parent / self.config.PRIVATE_KEY_FILENAME
        )

    @staticmethod
    def _load_private_key(path: Path) -> rsa.RSAPrivateKey:
        """Load the private signing key."""
        with path.open("rb") as f:
            key = serialization.load_pem_private_key(f.read(), None)
        if not isinstance(key, rsa.RSAPrivateKey):
            msg = f"{path} does not hold an RSA private key"
            raise ValueError(msg)
        return key

    def sign_segment(self, segment: str) -> bytes:
        """Sign a base64 payload segment as ASCII text."""
        return self.private_key.sign(
            segment.encode("ascii"), padding.PKCS1v15(), hashes.SHA256()
        )

    def generate_license(
        self,
        email: str,
        license_type: str,
        domains: int,
        issued: str | None = None,
        installation_id: str | None = None,
    ) -> str:
        """Generate a signed license key.

        Args:
            email: Customer e-mail, informational
            license_type: ``free`` or ``commercial``
            domains: Domain limit, 0 means unlimited for commercial licenses
            issued: Issue date, defaults to today (``YYYY-MM-DD``)
            installation_id: Installation Code the license is bound to
        """
        license_type = license_type.strip().lower()
        if license_type not in {t.value for t in LicenseType}:
            msg = "license_type must be free or commercial"
            raise ValueError(msg)
        if domains < 0:
            msg = "domains must be >= 0 (0 = unlimited)"
            raise ValueError(msg)

        try:
            payload = LicensePayload(
                email=email,
                type=license_type,
                domains=domains,
                issued=issued or datetime.date.today().isoformat(),
                installation_id=installation_id or None,
            )
        except PydanticValidationError as err:
            msg = f"Invalid license payload: {err}"
            raise ValueError(msg) from err

        segment = self.codec.encode_payload(payload)
        license_key = self.codec.encode(
            license_type, segment, self.sign_segment(segment)
        )
        self.logger.info(
            "Generated %s license for %s (domains=%s, bound=%s)",
            license_type,
            email,
            domains,
            bool(installation_id),
        )
        return license_key
