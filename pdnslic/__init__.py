# PDNS offline licensing

from pdnslic.common.decorators import requires_domain_capacity
from pdnslic.engine.service import LicenseService

__all__ = [
    "LicenseService",
    "requires_domain_capacity",
]
