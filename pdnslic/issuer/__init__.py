"""
Offline issuing tool. Never imported by the verification engine.
"""

from pdnslic.issuer.keygen import KeyGenerator
from pdnslic.issuer.license_generator import LicenseGenerator

__all__ = ["KeyGenerator", "LicenseGenerator"]
