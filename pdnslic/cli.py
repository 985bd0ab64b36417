"""
Command-line interface for PDNS offline licensing.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click

from pdnslic.common.config import Config
from pdnslic.common.exceptions import InstallationError, StoreError
from pdnslic.common.logging_utils import setup_logger
from pdnslic.engine.audit import LoggingAuditSink
from pdnslic.engine.service import LicenseService
from pdnslic.issuer.keygen import KeyGenerator
from pdnslic.issuer.license_generator import LicenseGenerator
from pdnslic.store.persistence import SQLiteSettingsStore


def _service(ctx: click.Context) -> LicenseService:
    config: Config = ctx.obj["config"]
    try:
        store = SQLiteSettingsStore(
            ctx.obj["db_path"] or config.DB_PATH, timeout=config.DB_TIMEOUT
        )
    except StoreError as err:
        raise click.ClickException(str(err)) from err
    return LicenseService(
        store,
        config=config,
        public_key_path=ctx.obj["pubkey_path"],
        audit_sink=LoggingAuditSink(),
    )


@click.group()
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings database (default: PDNSLIC_DB_PATH or ./pdnslic/data/pdnslic.db)",
)
@click.option(
    "--pubkey",
    "pubkey_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="License public key PEM (default: PDNSLIC_PUBKEY_PATH)",
)
@click.pass_context
def cli(ctx: click.Context, db_path: Path | None, pubkey_path: Path | None) -> None:
    """PDNS offline licensing CLI"""
    config = Config()
    setup_logger(logging.getLogger("pdnslic"), config.LOG_LEVEL)
    ctx.obj = {"config": config, "db_path": db_path, "pubkey_path": pubkey_path}


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective license status"""
    try:
        report = _service(ctx).status_report()
    except (StoreError, InstallationError) as err:
        raise click.ClickException(str(err)) from err

    click.echo(f"License Type: {report['license_type']}")
    click.echo(f"Mode: {report['mode']}")
    click.echo(f"Max Domains: {report['max_domains']}")
    click.echo(f"Domains Used: {report['domains_used']}")
    click.echo(f"Installation Code: {report['installation_code']}")
    if "error" in report:
        click.echo(f"Error: {report['error']}")
    if "integrity_error" in report:
        click.echo(f"Integrity: {report['integrity_error']}")


@cli.command("installation-code")
@click.pass_context
def installation_code(ctx: click.Context) -> None:
    """Print the Installation Code to request a license for"""
    try:
        click.echo(_service(ctx).installation_code())
    except (StoreError, InstallationError) as err:
        raise click.ClickException(str(err)) from err


@cli.command("set-key")
@click.argument("license_key")
@click.pass_context
def set_key(ctx: click.Context, license_key: str) -> None:
    """Install a license key"""
    try:
        result = _service(ctx).update_license_key(license_key, actor="cli")
    except (StoreError, InstallationError) as err:
        raise click.ClickException(str(err)) from err
    click.echo(result.message)
    if result.level != "success":
        ctx.exit(1)


@cli.command("clear-key")
@click.pass_context
def clear_key(ctx: click.Context) -> None:
    """Remove the installed license key"""
    try:
        result = _service(ctx).clear_license_key(actor="cli")
    except (StoreError, InstallationError) as err:
        raise click.ClickException(str(err)) from err
    click.echo(result.message)


@cli.command()
@click.argument("state", type=click.Choice(["on", "off"]))
@click.pass_context
def enforcement(ctx: click.Context, state: str) -> None:
    """Switch domain-limit enforcement on or off"""
    try:
        _service(ctx).set_enforcement(enabled=state == "on", actor="cli")
    except StoreError as err:
        raise click.ClickException(str(err)) from err
    click.echo(f"License enforcement {state}")


@cli.command("can-create")
@click.pass_context
def can_create(ctx: click.Context) -> None:
    """Check whether another domain may be created"""
    try:
        decision = _service(ctx).can_create_domain()
    except (StoreError, InstallationError) as err:
        raise click.ClickException(str(err)) from err
    if decision.allowed and decision.current_count is None:
        click.echo("Allowed (unlimited license)")
    elif decision.allowed:
        limit = "unlimited" if decision.limit is None else decision.limit
        click.echo(f"Allowed ({decision.current_count} of {limit} used)")
    else:
        click.echo(decision.message)
        ctx.exit(1)


@cli.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind to (default: from PDNSLIC_SERVER_HOST env or 127.0.0.1)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind to (default: from PDNSLIC_SERVER_PORT env or 8000)",
)
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the license admin API"""
    from pdnslic.api import start_server  # noqa: PLC0415

    if host:
        os.environ["PDNSLIC_SERVER_HOST"] = host
    if port:
        os.environ["PDNSLIC_SERVER_PORT"] = str(port)

    start_server(
        Config(), db_path=ctx.obj["db_path"], public_key_path=ctx.obj["pubkey_path"]
    )


@cli.command()
@click.option(
    "--keys-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to save keys (default: directory of the configured public key)",
)
@click.pass_context
def keygen(ctx: click.Context, keys_dir: Path | None) -> None:
    """Generate the RSA license signing keys"""
    generator = KeyGenerator(keys_dir, config=ctx.obj["config"])
    private_path, public_path = generator.generate_keys()
    click.echo("Keys generated and saved")
    click.echo(f"Private: {private_path}")
    click.echo(f"Public: {public_path}")


@cli.command()
@click.option("--email", required=True, help="Customer e-mail")
@click.option(
    "--type",
    "license_type",
    required=True,
    type=click.Choice(["free", "commercial"], case_sensitive=False),
)
@click.option(
    "--domains",
    required=True,
    type=click.IntRange(min=0),
    help="Domain limit, 0 = unlimited",
)
@click.option(
    "--key",
    "private_key_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Private signing key PEM",
)
@click.option("--install", "installation_id", default=None, help="Installation Code")
@click.option("--issued", default=None, help="Issue date (default: today)")
@click.pass_context
def generate(
    ctx: click.Context,
    email: str,
    license_type: str,
    domains: int,
    private_key_path: Path,
    installation_id: str | None,
    issued: str | None,
) -> None:
    """Generate a signed license key (offline issuer)"""
    try:
        generator = LicenseGenerator(
            private_key_path=private_key_path, config=ctx.obj["config"]
        )
        license_key = generator.generate_license(
            email, license_type, domains, issued=issued, installation_id=installation_id
        )
    except ValueError as err:
        raise click.ClickException(str(err)) from err
    click.echo(license_key)


if __name__ == "__main__":
    cli()
