"""Command-line interface for freezer.

This module provides the main CLI entry point and assembles all commands.

Commands:
- configure: Store default connection settings
- rm: Remove a file by name
- rmrx: Remove files matching a regular expression
- rmid: Remove a file by id
- versions: List the versions of a file
- rmversions: Remove a range of versions of a file
- rmrxversions: Remove a range of versions of every matching file
- missing: List the chunks the server is missing for a file
"""

from __future__ import annotations

from pathlib import Path

import click

from freezer.client.cli.config import (
    Settings,
    get_config_dir,
    get_config_file,
    load_config,
    save_config,
    setup_logging,
)
from freezer.client.cli.configure import configure
from freezer.client.cli.files import list_versions_cmd, missing, rm, rmid, rmrx
from freezer.client.cli.versions import rmrxversions, rmversions


@click.group()
@click.version_option(package_name="freezer")
@click.option("--host", envvar="FREEZER_HOST", default=None, help="Server URL.")
@click.option("--user", envvar="FREEZER_USER", default=None, help="User name.")
@click.option("--password", envvar="FREEZER_PASSWORD", default=None, help="User password.")
@click.option(
    "--crypto-pass",
    envvar="FREEZER_CRYPTO_PASS",
    default=None,
    help="Password the file name encryption key is derived from.",
)
@click.option(
    "--tls-crt",
    envvar="FREEZER_TLS_CRT",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Client certificate (PEM) for mutual TLS.",
)
@click.option(
    "--tls-key",
    envvar="FREEZER_TLS_KEY",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Private key (PEM) for --tls-crt.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log requests and decisions.")
@click.pass_context
def cli(
    ctx: click.Context,
    host: str | None,
    user: str | None,
    password: str | None,
    crypto_pass: str | None,
    tls_crt: Path | None,
    tls_key: Path | None,
    verbose: bool,
) -> None:
    """freezer - manage files on an encrypted versioning server."""
    setup_logging(verbose)
    ctx.obj = Settings.resolve(
        host=host,
        user=user,
        password=password,
        crypto_password=crypto_pass,
        tls_cert=tls_crt,
        tls_key=tls_key,
    )


# Config commands
cli.add_command(configure)

# File commands
cli.add_command(rm)
cli.add_command(rmrx)
cli.add_command(rmid)
cli.add_command(list_versions_cmd)
cli.add_command(missing)

# Version commands
cli.add_command(rmversions)
cli.add_command(rmrxversions)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "cli",
    "main",
    "get_config_dir",
    "get_config_file",
    "load_config",
    "save_config",
]
