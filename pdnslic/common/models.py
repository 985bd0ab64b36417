"""
Pydantic models for license payloads, verdicts and request/response validation.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator


class ReasonCode(str, Enum):
    """Why a stored license key was not accepted."""

    LX_FMT = "LX_FMT"
    LX_B64 = "LX_B64"
    LX_JSON = "LX_JSON"
    LX_SIGHEX = "LX_SIGHEX"
    LX_PUB = "LX_PUB"
    LX_SIG = "LX_SIG"
    LX_BIND = "LX_BIND"


class IntegrityCode(str, Enum):
    """Problems with the verification mechanism itself."""

    PK_MISSING = "PK_MISSING"
    PK_MISMATCH = "PK_MISMATCH"


class LicenseType(str, Enum):
    FREE = "free"
    COMMERCIAL = "commercial"


class LicenseKeyParts(BaseModel):
    """The four fields of a license key, still encoded."""

    model_config = ConfigDict(frozen=True)

    product_tag: str
    type_tag: str
    payload_segment: str
    signature_hex: str


class LicensePayload(BaseModel):
    """JSON document embedded (base64) in a license key."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: StrictStr
    domains: StrictInt = Field(ge=0)
    email: StrictStr | None = None
    issued: StrictStr | StrictInt | None = None
    installation_id: StrictStr | None = None


class LicenseStatus(BaseModel):
    """Effective licensing verdict for this installation."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    license_type: str
    max_domains: int | None
    unlimited: bool
    reason: ReasonCode | None = None
    integrity: bool = True
    integrity_error: IntegrityCode | None = None

    @model_validator(mode="after")
    def _unlimited_has_no_limit(self) -> LicenseStatus:
        if self.unlimited and self.max_domains is not None:
            msg = "unlimited status cannot carry max_domains"
            raise ValueError(msg)
        return self

    @classmethod
    def baseline(
        cls,
        limit: int,
        *,
        valid: bool = True,
        reason: ReasonCode | None = None,
        integrity_error: IntegrityCode | None = None,
    ) -> LicenseStatus:
        """Free-tier status, used with and without a failure reason."""
        return cls(
            valid=valid,
            license_type=LicenseType.FREE.value,
            max_domains=limit,
            unlimited=False,
            reason=reason,
            integrity=integrity_error is None,
            integrity_error=integrity_error,
        )

    def with_integrity(self, integrity_error: IntegrityCode | None) -> LicenseStatus:
        return self.model_copy(
            update={
                "integrity": integrity_error is None,
                "integrity_error": integrity_error,
            }
        )


class EnforcementDecision(BaseModel):
    allowed: bool
    limit: int | None = None
    current_count: int | None = None
    message: str | None = None


class KeyUpdateResult(BaseModel):
    status: LicenseStatus
    message: str
    level: Literal["success", "warning", "danger"]


class LicenseKeyRequest(BaseModel):
    license_key: str


class InstallationCodeResponse(BaseModel):
    installation_code: str
