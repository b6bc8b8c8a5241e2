"""Version pruning commands for the freezer CLI.

Commands:
- rmversions: Remove a range of versions from one file
- rmrxversions: Remove a range of versions from every matching file
"""

from __future__ import annotations

import sys

import click

from freezer.client.cli.config import Settings, connect, report_errors


@click.command()
@click.argument("name")
@click.argument("min_version", type=int)
@click.argument("max_version", type=int)
@click.option("--dry-run", is_flag=True, help="Validate the range without removing anything.")
@click.pass_obj
def rmversions(
    settings: Settings, name: str, min_version: int, max_version: int, dry_run: bool
) -> None:
    """Remove versions MIN_VERSION to MAX_VERSION (inclusive) of the file NAME.

    The current version of a file can never be removed.
    """
    with report_errors(), connect(settings) as ops:
        ops.pruner.prune_by_name(name, min_version, max_version, dry_run=dry_run)

    verb = "would remove" if dry_run else "successfully removed"
    click.echo(f"{name} -- {verb} versions {min_version} to {max_version}.")


@click.command()
@click.argument("pattern")
@click.argument("min_version", type=int)
@click.argument("max_version")
@click.option("--dry-run", is_flag=True, help="Show what would be removed without removing anything.")
@click.pass_obj
def rmrxversions(
    settings: Settings, pattern: str, min_version: int, max_version: str, dry_run: bool
) -> None:
    """Remove versions MIN_VERSION to MAX_VERSION of every file matching PATTERN.

    MAX_VERSION is a number or 'latest-minus-one' (alias 'H~') to keep
    only each file's current version. Files without prunable versions
    are skipped.
    """
    with report_errors(), connect(settings) as ops:
        outcomes = ops.pruner.prune_matching(pattern, min_version, max_version, dry_run=dry_run)

    verb = "would remove" if dry_run else "successfully removed"
    failed = 0
    for outcome in outcomes:
        if outcome.ok:
            click.echo(
                f"{outcome.file_name} -- {verb} versions "
                f"{outcome.min_version} to {outcome.max_version}."
            )
        else:
            failed += 1
            click.echo(f"{outcome.file_name} -- failed: {outcome.error}", err=True)

    if failed:
        click.echo(f"Error: {failed} of {len(outcomes)} files failed.", err=True)
        sys.exit(1)
