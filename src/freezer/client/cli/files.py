"""File commands for the freezer CLI.

Commands:
- rm: Remove a file by name
- rmrx: Remove every file matching a regular expression
- rmid: Remove a file by id
- versions: List the stored versions of a file
- missing: List the chunks the server is missing for a file
"""

from __future__ import annotations

import click

from freezer.client.cli.config import Settings, connect, report_errors

dry_run_option = click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be removed without removing anything.",
)


@click.command()
@click.argument("name")
@dry_run_option
@click.pass_obj
def rm(settings: Settings, name: str, dry_run: bool) -> None:
    """Remove the file NAME from the server."""
    with report_errors(), connect(settings) as ops:
        record = ops.remove(name, dry_run=dry_run)

    if dry_run:
        click.echo(f"Would remove file: {name} (id {record.file_id})")
    else:
        click.echo(f"Removed file: {name}")


@click.command()
@click.argument("pattern")
@dry_run_option
@click.pass_obj
def rmrx(settings: Settings, pattern: str, dry_run: bool) -> None:
    """Remove every file whose name matches the regular expression PATTERN."""
    with report_errors(), connect(settings) as ops:
        removed = ops.remove_matching(pattern, dry_run=dry_run)

    prefix = "Would remove file" if dry_run else "Removed file"
    for name in removed:
        click.echo(f"{prefix}: {name}")
    if not removed:
        click.echo(f"No files match {pattern}")


@click.command()
@click.argument("file_id", type=int)
@click.pass_obj
def rmid(settings: Settings, file_id: int) -> None:
    """Remove the file with id FILE_ID from the server."""
    with report_errors(), connect(settings) as ops:
        ops.remove_by_id(file_id)

    click.echo(f"Removed file by ID: {file_id}")


@click.command("versions")
@click.argument("name")
@click.pass_obj
def list_versions_cmd(settings: Settings, name: str) -> None:
    """List the stored versions of the file NAME."""
    with report_errors(), connect(settings) as ops:
        records = ops.list_versions(name)

    click.echo(f"Versions of {name}:")
    for version in records:
        click.echo(
            f"  {version.version_number:>6}  chunks: {version.chunk_count:<6} {version.file_hash}"
        )


@click.command()
@click.argument("file_id", type=int)
@click.pass_obj
def missing(settings: Settings, file_id: int) -> None:
    """List the chunk numbers the server is missing for FILE_ID."""
    with report_errors(), connect(settings) as ops:
        chunks = ops.missing_chunks(file_id)

    if not chunks:
        click.echo(f"File {file_id} has no missing chunks.")
        return
    click.echo(" ".join(str(n) for n in chunks))
