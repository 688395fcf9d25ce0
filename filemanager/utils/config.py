from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"
DEFAULT_QUICK_FILTER_LIMIT = 100


class FileManagerSettings(BaseSettings):
    """Runtime settings for the CLI and API entry points."""

    model_config = SettingsConfigDict(env_prefix="FILEMANAGER_")

    storage_root: Path = Field(
        Path.home(),
        description="Root of the storage volume to scan and browse.",
    )

    config_path: Path | None = Field(
        None,
        description="Optional YAML file overriding the bundled scan.yaml.",
    )

    max_workers: int = Field(
        4,
        description="Worker threads used for scans, listings and file operations.",
    )

    log_file_prefix: str = Field(
        "filemanager",
        description="Prefix of the rotating log file under ./logs.",
    )


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must be a mapping: {path}")
    return data


def _lower_set(values) -> frozenset[str]:
    return frozenset(str(value).lower() for value in values or [])


@dataclass(frozen=True)
class ScanConfig:
    """Grouping and skip rules for a directory scan.

    ``well_known_roots`` is relative to the storage root until
    :meth:`for_root` resolves it; the scanner only ever sees resolved roots.
    """

    well_known_roots: tuple[str, ...]
    ignored_directories: frozenset[str]
    restricted_subtrees: dict[str, frozenset[str]]
    meaningless_segments: frozenset[str]
    quick_filter_limit: int = DEFAULT_QUICK_FILTER_LIMIT
    storage_root: str | None = None

    def is_ignored_directory(self, name: str) -> bool:
        return name.lower() in self.ignored_directories

    def is_restricted(self, parent_name: str, name: str) -> bool:
        restricted = self.restricted_subtrees.get(parent_name.lower())
        return restricted is not None and name.lower() in restricted

    def for_root(self, storage_root: Path | str) -> "ScanConfig":
        """Resolve the well-known roots against ``storage_root``.

        A root is kept only if it, or its parent, exists.
        """
        root = Path(os.path.abspath(storage_root))
        resolved = []
        for relative in self.well_known_roots:
            candidate = root / relative
            if candidate.exists() or candidate.parent.exists():
                resolved.append(str(candidate))
        return replace(
            self, well_known_roots=tuple(resolved), storage_root=str(root)
        )


def _build_config(data: dict[str, Any]) -> ScanConfig:
    restricted = data.get("restricted_subtrees") or {}
    if not isinstance(restricted, dict):
        raise ValueError("restricted_subtrees must be a mapping of parent -> names")

    return ScanConfig(
        well_known_roots=tuple(data.get("well_known_roots") or []),
        ignored_directories=_lower_set(data.get("ignored_directories")),
        restricted_subtrees={
            str(parent).lower(): _lower_set(children)
            for parent, children in restricted.items()
        },
        meaningless_segments=frozenset(
            str(segment) for segment in data.get("meaningless_segments") or []
        ),
        quick_filter_limit=int(
            data.get("quick_filter_limit", DEFAULT_QUICK_FILTER_LIMIT)
        ),
    )


@lru_cache(maxsize=4)
def get_config(config_path: Path | None = None) -> ScanConfig:
    if config_path is None:
        config_path = CONFIG_DIR / "scan.yaml"
    return _build_config(_load_yaml(config_path))


def get_minimal_config() -> ScanConfig:
    return ScanConfig(
        well_known_roots=tuple(),
        ignored_directories=frozenset(),
        restricted_subtrees={},
        meaningless_segments=frozenset(),
    )
