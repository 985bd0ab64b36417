"""
Offline license verification and enforcement.
"""

from pdnslic.engine.codec import LicenseCodec
from pdnslic.engine.enforcement import EnforcementGate
from pdnslic.engine.identity import InstallationIdentity
from pdnslic.engine.public_key import PublicKeyProvider, PublicKeyState
from pdnslic.engine.service import LicenseService
from pdnslic.engine.status_cache import LicenseStatusCache
from pdnslic.engine.verifier import LicenseVerifier

__all__ = [
    "EnforcementGate",
    "InstallationIdentity",
    "LicenseCodec",
    "LicenseService",
    "LicenseStatusCache",
    "LicenseVerifier",
    "PublicKeyProvider",
    "PublicKeyState",
]
