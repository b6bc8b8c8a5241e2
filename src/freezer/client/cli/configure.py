"""Configure command for the freezer CLI.

Commands:
- configure: Store default connection settings
"""

from __future__ import annotations

from pathlib import Path

import click

from freezer.client.cli.config import get_config_file, load_config, save_config


@click.command()
@click.option("--host", default=None, help="Server URL (e.g., https://localhost:8080).")
@click.option("--user", default=None, help="User name to log in with.")
@click.option(
    "--tls-crt",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Client certificate (PEM), also trusted as the server root.",
)
@click.option(
    "--tls-key",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Private key for --tls-crt (PEM).",
)
@click.option("--timeout", default=None, type=float, help="Request timeout in seconds.")
def configure(
    host: str | None,
    user: str | None,
    tls_crt: Path | None,
    tls_key: Path | None,
    timeout: float | None,
) -> None:
    """Store default connection settings in the config file.

    Passwords are never stored.
    """
    config = load_config()
    if host:
        config["host"] = host.rstrip("/")
    if user:
        config["user"] = user
    if tls_crt:
        config["tls_crt"] = str(tls_crt.expanduser().resolve())
    if tls_key:
        config["tls_key"] = str(tls_key.expanduser().resolve())
    if timeout:
        config["timeout"] = timeout
    save_config(config)

    click.echo(f"Configuration saved to {get_config_file()}")
    for key, value in sorted(config.items()):
        click.echo(f"  {key}: {value}")
