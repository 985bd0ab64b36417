from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any, Callable

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from pdnslic.engine.service import LicenseService
from pdnslic.issuer.license_generator import LicenseGenerator
from pdnslic.store.persistence import InMemorySettingsStore


def write_public_key(path: Path, private_key: rsa.RSAPrivateKey) -> Path:
    path.write_bytes(
        private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )
    return path


@pytest.fixture(scope="session")
def private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def public_key_path(tmp_path: Path, private_key: rsa.RSAPrivateKey) -> Path:
    return write_public_key(tmp_path / "license_pubkey.pem", private_key)


@pytest.fixture
def store() -> InMemorySettingsStore:
    return InMemorySettingsStore()


@pytest.fixture
def service(store: InMemorySettingsStore, public_key_path: Path) -> LicenseService:
    return LicenseService(store, public_key_path=public_key_path)


@pytest.fixture
def generator(private_key: rsa.RSAPrivateKey) -> LicenseGenerator:
    return LicenseGenerator(private_key=private_key)


@pytest.fixture
def issue(
    generator: LicenseGenerator, service: LicenseService
) -> Callable[..., str]:
    """Issue a key bound to the test installation unless told otherwise."""

    def _issue(
        license_type: str = "commercial",
        domains: int = 0,
        installation_id: str | None = None,
        *,
        bound: bool = True,
    ) -> str:
        if installation_id is None and bound:
            installation_id = service.installation_code()
        return generator.generate_license(
            "customer@example.com",
            license_type,
            domains,
            issued="2025-01-01",
            installation_id=installation_id,
        )

    return _issue


@pytest.fixture
def sign_document(
    generator: LicenseGenerator,
) -> Callable[[Any], str]:
    """Sign an arbitrary JSON document, bypassing issuer validation."""

    def _sign(document: Any, type_tag: str = "COMMERCIAL") -> str:
        segment = base64.b64encode(json.dumps(document).encode()).decode()
        return sign_segment(generator, segment, type_tag)

    return _sign


def sign_segment(
    generator: LicenseGenerator, segment: str, type_tag: str = "COMMERCIAL"
) -> str:
    signature = generator.sign_segment(segment)
    return f"PDNS-{type_tag}-{segment}-{signature.hex()}"
