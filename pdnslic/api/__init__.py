"""
Entry point for the license admin API.
"""

from __future__ import annotations

import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from pdnslic.common.config import Config
from pdnslic.common.logging_utils import setup_logger
from pdnslic.engine.audit import LoggingAuditSink
from pdnslic.engine.service import LicenseService
from pdnslic.store.persistence import SQLiteSettingsStore

from .routes import LicenseRoutes


def create_app(service: LicenseService) -> FastAPI:
    """Build the FastAPI app around an existing service."""
    app = FastAPI(title="PDNS license admin")
    LicenseRoutes(service).setup_routes(app)
    return app


def start_server(
    config: Config | None = None,
    db_path: Path | None = None,
    public_key_path: Path | None = None,
) -> None:
    """Start the license admin API."""
    if config is None:
        config = Config()
    setup_logger(logging.getLogger("pdnslic"), config.LOG_LEVEL)
    store = SQLiteSettingsStore(db_path or config.DB_PATH, timeout=config.DB_TIMEOUT)
    service = LicenseService(
        store,
        config=config,
        public_key_path=public_key_path,
        audit_sink=LoggingAuditSink(),
    )
    uvicorn.run(create_app(service), host=config.SERVER_HOST, port=config.SERVER_PORT)
