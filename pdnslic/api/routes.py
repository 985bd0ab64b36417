"""
Routes for the license admin API.
"""

from typing import Any

from fastapi import FastAPI, HTTPException

from pdnslic.common.exceptions import InstallationError, StoreError
from pdnslic.common.models import (
    EnforcementDecision,
    InstallationCodeResponse,
    KeyUpdateResult,
    LicenseKeyRequest,
    LicenseStatus,
)
from pdnslic.engine.service import LicenseService

UNAVAILABLE = (StoreError, InstallationError)


class LicenseRoutes:
    """Handles FastAPI routes over the licensing service.

    Settings-store failures answer 503; domain creation is never approved
    when the quota cannot be checked. Handlers that reach the settings store
    are plain functions, so FastAPI runs them in its threadpool.
    """

    def __init__(self, service: LicenseService):
        self.service = service

    def setup_routes(self, app: FastAPI) -> None:
        """Setup API routes on the FastAPI app."""

        app.get("/health")(self.health)
        app.get("/license/status", response_model=LicenseStatus)(self.status)
        app.get(
            "/license/installation-code", response_model=InstallationCodeResponse
        )(self.installation_code)
        app.put("/license/key", response_model=KeyUpdateResult)(self.update_key)
        app.delete("/license/key", response_model=KeyUpdateResult)(self.clear_key)
        app.get("/domains/can-create", response_model=EnforcementDecision)(
            self.can_create
        )

    async def health(self) -> dict[str, Any]:
        """Handle /health endpoint."""
        return self.service.health()

    def status(self) -> LicenseStatus:
        """Handle /license/status endpoint."""
        try:
            return self.service.get_status()
        except UNAVAILABLE as e:
            raise HTTPException(503, str(e))

    def installation_code(self) -> InstallationCodeResponse:
        """Handle /license/installation-code endpoint."""
        try:
            code = self.service.installation_code()
        except UNAVAILABLE as e:
            raise HTTPException(503, str(e))
        return InstallationCodeResponse(installation_code=code)

    def update_key(self, req: LicenseKeyRequest) -> KeyUpdateResult:
        """Handle PUT /license/key endpoint."""
        try:
            return self.service.update_license_key(req.license_key, actor="api")
        except UNAVAILABLE as e:
            raise HTTPException(503, str(e))

    def clear_key(self) -> KeyUpdateResult:
        """Handle DELETE /license/key endpoint."""
        try:
            return self.service.clear_license_key(actor="api")
        except UNAVAILABLE as e:
            raise HTTPException(503, str(e))

    def can_create(self) -> EnforcementDecision:
        """Handle /domains/can-create endpoint."""
        try:
            return self.service.can_create_domain()
        except UNAVAILABLE as e:
            raise HTTPException(503, str(e))
