"""CLI interface for the Google Drive duplicate finder."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .api import DriveClient
from .auth import (
    require_access_token,
    run_authorization_flow,
    save_credentials,
)
from .cli_progress import ScanProgressDisplay
from .config import config
from .duplicate_finder import DuplicateFileFinder, format_path
from .exceptions import DriveAPIError, DriveDupesError, SourceUnavailableError
from .file_source import FILE_FIELDS, DriveFileSource
from .models import FileRecord
from .output import OutputFormatter
from .path_resolver import PathResolver, PathResult
from .utils import DEFAULT_OAUTH_PORT

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--access-token",
    "-t",
    envvar="GDRIVE_ACCESS_TOKEN",
    help="OAuth access token (skips the stored credentials)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option()
@click.pass_context
def main(
    ctx: Any,
    access_token: Optional[str],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """PyDriveDupes - Find duplicate files in Google Drive."""
    ctx.ensure_object(dict)
    ctx.obj["access_token"] = access_token
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pydrivedupes").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option(
    "--credentials",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="OAuth client secrets JSON (default: the configured credentials file)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=DEFAULT_OAUTH_PORT,
    show_default=True,
    help="Local port that receives the authorization code",
)
@click.pass_context
def init(ctx: Any, credentials: Optional[Path], port: int) -> None:
    """Authorize read-only access to your Google Drive.

    Opens the Google consent page in a browser and stores the resulting
    token in ~/.config/pydrivedupes/token.json for future use.
    """
    out: OutputFormatter = ctx.obj["out"]

    if credentials is not None:
        config.save_credentials_file(credentials)
    credentials_file = credentials or config.credentials_file

    try:
        out.info("Opening browser for authorization...")
        creds = run_authorization_flow(credentials_file, port=port)
        save_credentials(creds, config.token_file)

        with DriveClient(access_token=creds.token) as client:
            about = client.get_about(fields="user")
        user = about.get("user", {})

        out.print_summary(
            "Initialization Complete",
            [
                ("Status", "Authorization saved successfully"),
                ("User", user.get("emailAddress") or user.get("displayName", "")),
                ("Token file", str(config.token_file)),
                ("Config file", str(config.get_config_path())),
            ],
        )
    except DriveDupesError as e:
        out.error(f"Initialization failed: {e}")
        ctx.exit(1)


@main.command()
@click.pass_context
def status(ctx: Any) -> None:
    """Check authorization and show the logged-in user and storage quota."""
    out: OutputFormatter = ctx.obj["out"]
    access_token = require_access_token(ctx, out)

    try:
        with DriveClient(access_token=access_token) as client:
            about = client.get_about(fields="user, storageQuota")
    except DriveAPIError as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(about)
        return

    user = about.get("user", {})
    quota = about.get("storageQuota", {})
    usage = int(quota.get("usage", 0))
    limit = quota.get("limit")
    items = [
        ("User", user.get("displayName", "unknown")),
        ("Email", user.get("emailAddress", "unknown")),
        ("Used", out.format_size(usage)),
        ("Limit", out.format_size(int(limit)) if limit else "unlimited"),
    ]
    out.print_summary("Google Drive Status", items)


def _scan(
    source: DriveFileSource, out: OutputFormatter, resolve: bool
) -> tuple[list[FileRecord], Optional[dict[str, PathResult]]]:
    """List all files and, if requested, resolve their folder paths."""
    resolver = PathResolver(source)
    logger.debug(f"Scanning Drive (resolve paths: {resolve})")

    if not out.show_progress:
        files = source.list_all_files()
        out.info(f"Retrieved {len(files)} files")
        return files, resolver.resolve_paths(files) if resolve else None

    with ScanProgressDisplay() as display:
        files = source.list_all_files(page_callback=display.on_page)
        paths = None
        if resolve:
            display.start_resolving(len(files))
            paths = resolver.resolve_paths(
                files, progress_callback=display.on_file_resolved
            )
    out.info(f"Retrieved {len(files)} files")
    return files, paths


@main.command("find-duplicates")
@click.option(
    "--include-trashed",
    is_flag=True,
    help="Include files in the trash",
)
@click.option(
    "--no-paths",
    is_flag=True,
    help="Skip folder path resolution (no per-folder lookups)",
)
@click.option(
    "--min-size",
    type=click.IntRange(min=0),
    default=0,
    help="Ignore duplicate groups whose files are smaller than this (bytes)",
)
@click.pass_context
def find_duplicates(
    ctx: Any,
    include_trashed: bool,
    no_paths: bool,
    min_size: int,
) -> None:
    """Find files with identical content and show where they live.

    Duplicates are identified by identical MD5 checksums. Folders and
    Google Docs have no checksum and are never reported.

    Examples:

        # Report all duplicates with their folder paths
        pydrivedupes find-duplicates

        # Only groups of files of at least 1 MB
        pydrivedupes find-duplicates --min-size 1048576

        # Machine-readable report
        pydrivedupes --json find-duplicates
    """
    out: OutputFormatter = ctx.obj["out"]
    access_token = require_access_token(ctx, out)

    try:
        with DriveClient(access_token=access_token) as client:
            source = DriveFileSource(client, include_trashed=include_trashed)
            files, paths = _scan(source, out, resolve=not no_paths)
    except SourceUnavailableError as e:
        out.error(str(e))
        ctx.exit(1)
    except DriveDupesError as e:
        out.error(f"API error: {e}")
        ctx.exit(1)

    finder = DuplicateFileFinder(out)
    duplicates = finder.find_duplicates(files, min_size=min_size)
    finder.display_duplicates(duplicates, paths)


@main.command()
@click.argument("file_ids", nargs=-1, required=True)
@click.pass_context
def path(ctx: Any, file_ids: tuple[str, ...]) -> None:
    """Show the folder path of one or more files by ID."""
    out: OutputFormatter = ctx.obj["out"]
    access_token = require_access_token(ctx, out)

    results: dict[str, str] = {}
    failed = False

    try:
        with DriveClient(access_token=access_token) as client:
            resolver = PathResolver(DriveFileSource(client))
            for file_id in file_ids:
                try:
                    record = FileRecord.from_api_response(
                        client.get_file(file_id, fields=FILE_FIELDS)
                    )
                except DriveAPIError as e:
                    out.error(f"{file_id}: {e}")
                    failed = True
                    continue

                result = resolver.resolve_paths([record])[record.id]
                if isinstance(result, Exception):
                    failed = True
                results[file_id] = format_path(result)
    except DriveDupesError as e:
        out.error(f"API error: {e}")
        ctx.exit(1)

    if out.json_output:
        out.output_json(results)
    else:
        for file_id, folder_path in results.items():
            out.print(f"{file_id}: {folder_path}")

    if failed:
        ctx.exit(1)


if __name__ == "__main__":
    main()
