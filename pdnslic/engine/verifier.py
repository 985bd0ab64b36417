"""
License verification: signature, installation binding and tier derivation.
"""

from __future__ import annotations

import hmac
import logging
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from pdnslic.common.exceptions import LicenseFormatError
from pdnslic.common.models import (
    IntegrityCode,
    LicenseStatus,
    LicenseType,
    ReasonCode,
)

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

    from pdnslic.common.config import Config
    from pdnslic.common.models import LicenseKeyParts, LicensePayload
    from pdnslic.engine.codec import LicenseCodec
    from pdnslic.engine.identity import InstallationIdentity
    from pdnslic.engine.public_key import PublicKeyProvider


class LicenseVerifier:
    """Turns a stored license key into a LicenseStatus.

    Malformed or hostile input always produces a rejected status carrying a
    reason code; only settings-store failures raised while computing the
    Installation Code propagate.
    """

    def __init__(
        self,
        config: Config,
        codec: LicenseCodec,
        key_provider: PublicKeyProvider,
        identity: InstallationIdentity,
    ) -> None:
        self.config = config
        self.codec = codec
        self.key_provider = key_provider
        self.identity = identity
        self.logger = logging.getLogger(__name__)

    def verify(self, raw: str) -> LicenseStatus:
        """Verify a license key and derive the effective tier."""
        try:
            parts = self.codec.parse(raw)
            self.codec.check_payload_alphabet(parts)
            signature = self.codec.decode_signature(parts)
        except LicenseFormatError as err:
            self.logger.info("License key rejected: %s (%s)", err.code.value, err)
            return self._rejected(err.code)

        public_key = self.key_provider.load_key()
        if public_key is None:
            self.logger.warning("No usable public key at %s", self.key_provider.path)
            return self._rejected(ReasonCode.LX_PUB, IntegrityCode.PK_MISSING)

        # Signature is checked on the raw segment, before any decoding
        if not self._signature_matches(public_key, parts, signature):
            self.logger.warning("License signature invalid")
            self.key_provider.mark_mismatch()
            return self._rejected(ReasonCode.LX_SIG, IntegrityCode.PK_MISMATCH)
        self.logger.debug("License signature valid")

        try:
            _, payload = self.codec.decode_payload(parts)
        except LicenseFormatError as err:
            self.logger.warning("Signed license payload rejected: %s", err.code.value)
            return self._rejected(err.code)

        if not self._is_bound(payload.installation_id):
            self.logger.info("License is bound to a different installation")
            return self._rejected(ReasonCode.LX_BIND)

        status = self._effective_status(payload)
        self.logger.info(
            "License valid: type=%s max_domains=%s unlimited=%s",
            status.license_type,
            status.max_domains,
            status.unlimited,
        )
        return status

    def _signature_matches(
        self, public_key: RSAPublicKey, parts: LicenseKeyParts, signature: bytes
    ) -> bool:
        # Issuers emit lowercase hex; any other spelling is an altered key
        if parts.signature_hex != signature.hex():
            return False
        try:
            public_key.verify(
                signature,
                self.codec.signed_bytes(parts),
                padding.PKCS1v15(),
                hashes.SHA256(),
            )
        except (InvalidSignature, ValueError):
            return False
        return True

    def _is_bound(self, installation_id: str | None) -> bool:
        if not installation_id:
            return False
        try:
            candidate = installation_id.encode("utf-8")
        except UnicodeEncodeError:
            return False
        local_code = self.identity.get_installation_code()
        return hmac.compare_digest(candidate, local_code.encode("utf-8"))

    def _rejected(
        self, reason: ReasonCode, integrity_error: IntegrityCode | None = None
    ) -> LicenseStatus:
        if integrity_error is None:
            integrity_error = self.key_provider.integrity_error
        return LicenseStatus.baseline(
            self.config.FREE_TIER_DOMAIN_LIMIT,
            valid=False,
            reason=reason,
            integrity_error=integrity_error,
        )

    def _effective_status(self, payload: LicensePayload) -> LicenseStatus:
        license_type = payload.type.lower()
        if license_type != LicenseType.COMMERCIAL.value:
            # Unknown types get free-tier semantics; payload domains are ignored
            return LicenseStatus.baseline(self.config.FREE_TIER_DOMAIN_LIMIT)

        unlimited = payload.domains == 0
        return LicenseStatus(
            valid=True,
            license_type=license_type,
            max_domains=None if unlimited else payload.domains,
            unlimited=unlimited,
        )
