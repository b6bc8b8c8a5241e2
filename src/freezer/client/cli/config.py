"""Configuration utilities for the freezer CLI.

This module provides the config file helpers and the glue that turns
command line settings into a logged-in FileOps instance.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

from freezer.client.api import RequestDispatcher
from freezer.client.auth import authenticate
from freezer.client.files import FileOps
from freezer.core.config import DEFAULT_TIMEOUT
from freezer.core.errors import FreezerError

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def get_config_dir() -> Path:
    """Get the configuration directory for freezer.

    Returns:
        Path to ~/.freezer or equivalent.
    """
    return Path.home() / ".freezer"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration from config file.

    Raises:
        click.ClickException: If the file is not a JSON object.
    """
    config_file = get_config_file()
    if not config_file.exists():
        return {}
    try:
        config = json.loads(config_file.read_text())
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Failed to read config file {config_file}: {e}") from e
    if not isinstance(config, dict):
        raise click.ClickException(f"Config file {config_file} must hold a JSON object")
    return config


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


class ClickEchoHandler(logging.Handler):
    """Logging handler writing through click.echo to the current stderr."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def setup_logging(verbose: bool) -> None:
    """Send freezer log records to stderr.

    Args:
        verbose: Log everything down to DEBUG instead of warnings only.
    """
    freezer_logger = logging.getLogger("freezer")
    for handler in freezer_logger.handlers[:]:
        freezer_logger.removeHandler(handler)

    handler = ClickEchoHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    freezer_logger.addHandler(handler)
    freezer_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    freezer_logger.propagate = False


@dataclass
class Settings:
    """Connection settings gathered from options, env vars and the config file."""

    host: str | None = None
    user: str | None = None
    password: str | None = None
    crypto_password: str | None = None
    tls_cert: Path | None = None
    tls_key: Path | None = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def resolve(cls, **options: Any) -> Settings:
        """Fill options left unset on the command line from the config file."""
        config = load_config()
        tls_cert = options.get("tls_cert") or config.get("tls_crt")
        tls_key = options.get("tls_key") or config.get("tls_key")
        return cls(
            host=options.get("host") or config.get("host"),
            user=options.get("user") or config.get("user"),
            password=options.get("password"),
            crypto_password=options.get("crypto_password"),
            tls_cert=Path(tls_cert).expanduser() if tls_cert else None,
            tls_key=Path(tls_key).expanduser() if tls_key else None,
            timeout=float(options.get("timeout") or config.get("timeout") or DEFAULT_TIMEOUT),
        )


@contextmanager
def report_errors() -> Iterator[None]:
    """Print freezer errors and exit with status 1."""
    try:
        yield
    except FreezerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@contextmanager
def connect(settings: Settings) -> Iterator[FileOps]:
    """Log in and yield FileOps bound to the new session.

    Prompts for passwords that were not supplied.
    """
    if not settings.host or not settings.user:
        raise click.UsageError(
            "Server host and user are required (--host/--user, env vars or 'freezer configure')."
        )
    password = settings.password or click.prompt("Enter password", hide_input=True)
    crypto_password = settings.crypto_password or click.prompt(
        "Enter crypto password", hide_input=True
    )

    session = authenticate(
        settings.host,
        settings.user,
        password,
        crypto_password,
        tls_cert=settings.tls_cert,
        tls_key=settings.tls_key,
        timeout=settings.timeout,
    )
    with RequestDispatcher(session) as dispatcher:
        yield FileOps(dispatcher)
