"""Copy, move, delete and rename on the real filesystem."""

import logging
import os
import shutil
from pathlib import Path
from typing import Iterable

from filemanager.data_models.files import FileItem
from filemanager.data_models.operations import FailedItem, OperationResult

logger = logging.getLogger(__name__)


def _path_of(item: FileItem | Path | str) -> Path:
    if isinstance(item, FileItem):
        return Path(item.path)
    return Path(item)


def unique_destination(target_dir: Path, name: str) -> Path:
    """
    First free path for ``name`` in ``target_dir``.

    Taken names become "stem (1).ext", "stem (2).ext" and so on.
    """
    candidate = target_dir / name
    if not candidate.exists():
        return candidate

    stem, suffix = Path(name).stem, Path(name).suffix
    counter = 1
    while True:
        candidate = target_dir / f"{stem} ({counter}){suffix}"
        if not candidate.exists():
            return candidate
        counter += 1


def is_within(root: Path | str, path: Path | str, include_root: bool = False) -> bool:
    """
    True when ``path`` lies below ``root`` once both are made absolute.

    ``..`` segments and symlinked parent directories are resolved, but a
    symlink named by ``path`` itself is not followed, so the link (not its
    target) is what gets checked.
    """
    real_root = Path(os.path.realpath(root))
    absolute = Path(os.path.abspath(path))
    if os.path.realpath(absolute) == str(real_root):
        return include_root
    real_path = Path(os.path.realpath(absolute.parent)) / absolute.name
    return real_root in real_path.parents


def _reserve_destination(target_dir: Path, name: str) -> Path:
    # the empty placeholder keeps a file created after the check from being overwritten
    while True:
        candidate = unique_destination(target_dir, name)
        try:
            with open(candidate, "xb"):
                pass
        except FileExistsError:
            continue
        return candidate


def _check_destination(destination: Path | str) -> Path:
    target_dir = Path(destination)
    if not target_dir.is_dir():
        raise NotADirectoryError(f"Destination is not a directory: {target_dir}")
    return target_dir


def _transfer(items, destination, operator: str, action) -> OperationResult:
    target_dir = _check_destination(destination)
    processed, skipped, failed = 0, 0, []

    for item in items:
        source = _path_of(item)
        if not source.exists():
            logger.info(f"Skipping {source}, it no longer exists")
            skipped += 1
            continue
        if operator == "move" and source.parent.resolve() == target_dir.resolve():
            logger.info(f"Skipping {source}, it is already in {target_dir}")
            skipped += 1
            continue
        if source.is_dir() and is_within(source, target_dir, include_root=True):
            reason = f"Cannot {operator} {source} into itself"
            logger.warning(reason)
            failed.append(FailedItem(path=str(source), reason=reason))
            continue

        # copytree creates its target exclusively; plain files need a placeholder
        if source.is_dir():
            target, placeholder = unique_destination(target_dir, source.name), False
        else:
            target, placeholder = _reserve_destination(target_dir, source.name), True

        logger.info(f"{operator}ing:\n\t{source}\n\t\tto\n\t'{target}'")
        try:
            action(source, target)
        except OSError as e:
            logger.warning(f"Failed to {operator} {source}: {e}")
            if placeholder:
                target.unlink(missing_ok=True)
            failed.append(FailedItem(path=str(source), reason=str(e)))
            continue
        processed += 1

    return OperationResult(processed=processed, skipped=skipped, failed=tuple(failed))


def _copy(source: Path, target: Path):
    if source.is_dir():
        shutil.copytree(source, target)
    else:
        shutil.copy2(source, target)


def copy_files(
    items: Iterable[FileItem | Path | str], destination: Path | str
) -> OperationResult:
    """Copy every item into ``destination``, renaming on collision.

    Raises NotADirectoryError before touching anything when ``destination``
    is not an existing directory.
    """
    return _transfer(items, destination, "copy", _copy)


def move_files(
    items: Iterable[FileItem | Path | str], destination: Path | str
) -> OperationResult:
    """Move every item into ``destination``, renaming on collision."""
    return _transfer(
        items, destination, "move", lambda source, target: shutil.move(source, target)
    )


def delete_files(items: Iterable[FileItem | Path | str]) -> OperationResult:
    processed, skipped, failed = 0, 0, []

    for item in items:
        path = _path_of(item)
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        except FileNotFoundError:
            logger.info(f"Skipping {path}, it no longer exists")
            skipped += 1
            continue
        except OSError as e:
            logger.warning(f"Failed to delete {path}: {e}")
            failed.append(FailedItem(path=str(path), reason=str(e)))
            continue
        logger.info(f"Deleted {path}")
        processed += 1

    return OperationResult(processed=processed, skipped=skipped, failed=tuple(failed))


def rename_file(item: FileItem | Path | str, new_name: str) -> bool:
    """
    Rename ``item`` in place.

    A name without an extension keeps the original one. Returns False for an
    empty name, a name with a path separator, a name already taken by another
    file, or a filesystem error; the original is left untouched in each case.
    """
    source = _path_of(item)
    new_name = new_name.strip()
    if not new_name or "/" in new_name or os.sep in new_name:
        logger.warning(f"Refusing to rename {source} to {new_name!r}")
        return False

    if "." not in new_name and source.suffix:
        new_name = f"{new_name}{source.suffix}"

    target = source.with_name(new_name)
    if target.exists() and target.resolve() != source.resolve():
        logger.warning(f"Cannot rename {source}, {target} already exists")
        return False

    try:
        source.rename(target)
    except OSError as e:
        logger.warning(f"Failed to rename {source}: {e}")
        return False

    logger.info(f"Renamed {source} to {target}")
    return True
