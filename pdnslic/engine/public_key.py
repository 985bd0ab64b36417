"""
Loading of the PEM public key that license signatures are verified with.
"""

from __future__ import annotations

import logging
import re
import threading
from enum import Enum
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from pdnslic.common.models import IntegrityCode

logger = logging.getLogger(__name__)

BEGIN_MARKER = "-----BEGIN PUBLIC KEY-----"
END_MARKER = "-----END PUBLIC KEY-----"
PEM_BLOCK_RE = re.compile(
    r"^-----BEGIN PUBLIC KEY-----\s+[A-Za-z0-9+/=\s]+-----END PUBLIC KEY-----$"
)


class PublicKeyState(str, Enum):
    UNKNOWN = "unknown"
    PRESENT = "present"
    MISSING = "missing"
    MALFORMED = "malformed"
    MISMATCH = "mismatch"


class PublicKeyProvider:
    """Reads the configured public key file and tracks its integrity state.

    There is no fallback key: an absent file is a normal state that leaves
    the installation in free mode.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.state = PublicKeyState.UNKNOWN
        self._lock = threading.Lock()

    def _load(self) -> str | None:
        try:
            content = self.path.read_text(encoding="ascii").strip()
        except (OSError, UnicodeDecodeError) as err:
            logger.debug("Public key not readable at %s: %s", self.path, err)
            self.state = PublicKeyState.MISSING
            return None

        if (
            content.count(BEGIN_MARKER) != 1
            or content.count(END_MARKER) != 1
            or not PEM_BLOCK_RE.match(content)
        ):
            logger.warning("Public key file %s is not a single PEM block", self.path)
            self.state = PublicKeyState.MALFORMED
            return None

        self.state = PublicKeyState.PRESENT
        return content

    def _load_key(self) -> RSAPublicKey | None:
        pem = self._load()
        if pem is None:
            return None
        try:
            key = serialization.load_pem_public_key(pem.encode("ascii"))
        except (ValueError, TypeError, UnsupportedAlgorithm) as err:
            logger.warning("Public key at %s cannot be parsed: %s", self.path, err)
            self.state = PublicKeyState.MALFORMED
            return None
        if not isinstance(key, RSAPublicKey):
            logger.warning("Public key at %s is not an RSA key", self.path)
            self.state = PublicKeyState.MALFORMED
            return None
        return key

    def load(self) -> str | None:
        """Return the PEM text if the file holds exactly one public key block."""
        with self._lock:
            return self._load()

    def load_key(self) -> RSAPublicKey | None:
        """Return the parsed RSA public key, or None if unusable."""
        with self._lock:
            return self._load_key()

    def probe(self) -> IntegrityCode | None:
        """Refresh the state from disk and return the integrity code."""
        with self._lock:
            self._load_key()
            return self.integrity_error

    def mark_mismatch(self) -> None:
        with self._lock:
            self.state = PublicKeyState.MISMATCH

    def reset(self) -> None:
        with self._lock:
            self.state = PublicKeyState.UNKNOWN

    @property
    def integrity_error(self) -> IntegrityCode | None:
        if self.state in (PublicKeyState.MISSING, PublicKeyState.MALFORMED):
            return IntegrityCode.PK_MISSING
        if self.state is PublicKeyState.MISMATCH:
            return IntegrityCode.PK_MISMATCH
        return None
