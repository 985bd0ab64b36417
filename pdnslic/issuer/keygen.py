"""
Key generator for the RSA key pair that signs licenses.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from pdnslic.common.config import Config

logger = logging.getLogger(__name__)


class KeyGenerator:
    """Key generator for creating the license signing key pair."""

    def __init__(self, keys_dir: Path | None = None, config: Config | None = None):
        self.config = config or Config()
        self.keys_dir = keys_dir or self.config.PUBLIC_KEY_PATH.parent

    @property
    def private_path(self) -> Path:
        return self.keys_dir / self.config.PRIVATE_KEY_FILENAME

    @property
    def public_path(self) -> Path:
        return self.keys_dir / self.config.PUBLIC_KEY_FILENAME

    def generate_keys(self) -> tuple[Path, Path]:
        """Generate and save the private/public key files."""
        logger.info("Generating RSA-%s license keys...", self.config.RSA_KEY_SIZE)

        private_key = rsa.generate_private_key(
            public_exponent=65537, key_size=self.config.RSA_KEY_SIZE
        )

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

        self.keys_dir.mkdir(parents=True, exist_ok=True)
        self.private_path.write_bytes(private_pem)
        self.private_path.chmod(0o600)
        self.public_path.write_bytes(public_pem)

        logger.info("Keys generated and saved:")
        logger.info("  Private: %s", self.private_path)
        logger.info("  Public: %s", self.public_path)
        logger.info("Keep the private key offline!")
        return self.private_path, self.public_path
