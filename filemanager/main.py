import json
import logging
from pathlib import Path
from typing import List

import typer

from filemanager.data_models.operations import DestPreset, OperationResult
from filemanager.data_models.quick_filter import QuickFilter
from filemanager.stages import operations
from filemanager.stages.browse import list_children
from filemanager.stages.overview import (
    build_home_items,
    downloads_summary,
    resolve_destination,
    storage_summary,
)
from filemanager.stages.quick_filter import build_quick_filter
from filemanager.stages.scan import scan_files
from filemanager.storage.capabilities import LocalVolumeInfo
from filemanager.utils.config import FileManagerSettings, get_config
from filemanager.utils.formatting import format_date, format_file_size
from filemanager.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

app = typer.Typer(help="Scan, browse and manage files on a storage volume.")


class CliState:
    settings: FileManagerSettings | None = None


state = CliState()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at debug level."),
):
    state.settings = FileManagerSettings()
    setup_logging(state.settings.log_file_prefix)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _settings() -> FileManagerSettings:
    if state.settings is None:
        state.settings = FileManagerSettings()
    return state.settings


def _root(root: Path | None) -> Path:
    return root if root is not None else _settings().storage_root


def _scan(root: Path | None):
    settings = _settings()
    return scan_files(_root(root), get_config(settings.config_path))


def _dump(payload):
    typer.echo(json.dumps(payload, indent=2))


ROOT_OPTION = typer.Option(
    None,
    "--root",
    "-r",
    help="Storage root. Defaults to FILEMANAGER_STORAGE_ROOT or the home directory.",
)


@app.command()
def scan(
    root: Path = ROOT_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
):
    """
    Scan the storage root and summarize files per category and source folder.
    """
    categories = _scan(root)

    if as_json:
        _dump(
            {
                category.value: data.model_dump(mode="json")
                for category, data in categories.items()
            }
        )
        return

    for category, data in categories.items():
        typer.echo(
            f"{category.display_name}: {data.item_count} files, "
            f"{format_file_size(data.total_size)}"
        )
        for source in data.sources.values():
            typer.echo(
                f"  {source.name} ({source.item_count}, "
                f"{format_file_size(source.total_size)})  {source.path}"
            )


@app.command("quick-filter")
def quick_filter(
    kind: QuickFilter = typer.Argument(..., help="recent, large or duplicates"),
    root: Path = ROOT_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the groups as JSON."),
):
    """
    Show recent files, the largest files, or duplicate files.
    """
    config = get_config(_settings().config_path)
    result = build_quick_filter(kind, _scan(root), config.quick_filter_limit)

    if as_json:
        _dump(result.model_dump(mode="json"))
        return

    typer.echo(f"{kind.display_name}:")
    for group in result.groups:
        if group.title:
            typer.echo(group.title)
        for item in group.files:
            typer.echo(
                f"  {format_file_size(item.size):>10}  "
                f"{format_date(item.date_modified)}  {item.path}"
            )


@app.command()
def browse(
    path: Path = typer.Argument(None, help="Directory to list. Defaults to the storage root."),
    root: Path = ROOT_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the entries as JSON."),
):
    """
    List the visible children of a directory, folders first.
    """
    storage_root = _root(root)
    entries = list_children(path or storage_root, storage_root=storage_root)

    if as_json:
        _dump([entry.model_dump(mode="json") for entry in entries])
        return

    for entry in entries:
        if entry.is_directory:
            detail = f"{entry.item_count} items, {format_file_size(entry.size)}"
            typer.echo(f"{entry.name}/  ({detail})")
        else:
            typer.echo(f"{entry.name}  ({format_file_size(entry.size)})")


def _report(result: OperationResult, verb: str):
    typer.echo(f"{verb} {result.processed} item(s), skipped {result.skipped}")
    for failure in result.failed:
        typer.echo(f"Failed: {failure.path}: {failure.reason}", err=True)
    if not result.success:
        raise typer.Exit(1)


def _destination(to: Path | None, preset: DestPreset | None, root: Path | None) -> Path:
    if preset is not None:
        return Path(resolve_destination(preset, _root(root)))
    if to is None:
        typer.echo("Error: give a destination with --to or --preset", err=True)
        raise typer.Exit(1)
    return to


def _transfer(operation, paths: List[Path], to, preset, root, verb: str):
    destination = _destination(to, preset, root)
    try:
        result = operation(paths, destination)
    except NotADirectoryError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    _report(result, verb)


TO_OPTION = typer.Option(None, "--to", "-t", help="Destination directory.")
PRESET_OPTION = typer.Option(
    None, "--preset", "-p", help="Destination folder under the storage root."
)


@app.command()
def copy(
    paths: List[Path] = typer.Argument(...),
    to: Path = TO_OPTION,
    preset: DestPreset = PRESET_OPTION,
    root: Path = ROOT_OPTION,
):
    """
    Copy files into a directory; name collisions get a numbered suffix.
    """
    _transfer(operations.copy_files, paths, to, preset, root, "Copied")


@app.command()
def move(
    paths: List[Path] = typer.Argument(...),
    to: Path = TO_OPTION,
    preset: DestPreset = PRESET_OPTION,
    root: Path = ROOT_OPTION,
):
    """
    Move files into a directory; name collisions get a numbered suffix.
    """
    _transfer(operations.move_files, paths, to, preset, root, "Moved")


@app.command()
def delete(
    paths: List[Path] = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    """
    Delete files or folders.
    """
    if not yes:
        typer.confirm(f"Delete {len(paths)} item(s)?", abort=True)
    _report(operations.delete_files(paths), "Deleted")


@app.command()
def rename(
    path: Path = typer.Argument(..., exists=True, resolve_path=True),
    new_name: str = typer.Argument(...),
):
    """
    Rename a file in place. A name without an extension keeps the old one.
    """
    if not operations.rename_file(path, new_name):
        typer.echo(f"Error: could not rename {path} to {new_name!r}", err=True)
        raise typer.Exit(1)
    typer.echo("✓ Renamed")


@app.command()
def overview(root: Path = ROOT_OPTION):
    """
    Print the home screen: storage usage, Downloads and per-category totals.
    """
    storage_root = _root(root)
    items = build_home_items(
        _scan(root),
        storage_summary(storage_root, LocalVolumeInfo()),
        downloads_summary(storage_root),
    )
    for item in items:
        typer.echo(f"{item.title}: {item.subtitle}")


if __name__ == "__main__":
    app()
