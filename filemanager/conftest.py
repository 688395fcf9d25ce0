"""Shared test fixtures for the file manager core."""

import os
import random
from concurrent.futures import Executor, Future
from pathlib import Path

import pytest
from faker import Faker

from filemanager.utils.config import get_config


@pytest.fixture(scope="session", autouse=True)
def setup_factory_seed():
    """Configure factory_boy/Faker to use a deterministic seed for reproducibility.

    The seed can be set via FACTORY_SEED environment variable, or will be
    randomly generated. The seed is printed to stdout for reproducibility.
    """
    seed = os.environ.get("FACTORY_SEED")
    if seed:
        seed = int(seed)
    else:
        seed = random.randint(0, 2**32 - 1)

    print(f"\n{'=' * 70}")
    print(f"Factory seed: {seed}")
    print(f"To reproduce this test run, set: FACTORY_SEED={seed}")
    print(f"{'=' * 70}\n")

    Faker.seed(seed)
    random.seed(seed)

    return seed


def _make_file(path: Path, size: int = 10, mtime: int = 1_700_000_000) -> Path:
    """Create a file of ``size`` bytes with a fixed modification time (seconds)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """A small device-like storage volume.

    Layout:
        DCIM/Camera/IMG_1.jpg
        Pictures/wallpaper.png
        Pictures/Screenshots/shot.png
        Pictures/Screenshots/2024/old.png
        Download/report.pdf
        Download/setup.apk
        Documents/notes.txt
        Music/song.mp3
        Movies/clip.mp4
        Android/data/com.app/cache.jpg      (restricted)
        Android/obb/game.zip                (restricted)
        Android/media/com.whatsapp/WhatsApp Images/wa.jpg
        LOST.DIR/lost.jpg                   (ignored)
        .thumbnails/thumb.jpg               (hidden)
        Projects/site/index.html
        Projects/unknown.qqqzzz             (unclassified)
    """
    root = tmp_path / "storage"
    _make_file(root / "DCIM" / "Camera" / "IMG_1.jpg", 100, 1_700_000_100)
    _make_file(root / "Pictures" / "wallpaper.png", 200, 1_700_000_200)
    _make_file(root / "Pictures" / "Screenshots" / "shot.png", 300, 1_700_000_300)
    _make_file(
        root / "Pictures" / "Screenshots" / "2024" / "old.png", 400, 1_600_000_000
    )
    _make_file(root / "Download" / "report.pdf", 500, 1_700_000_500)
    _make_file(root / "Download" / "setup.apk", 600, 1_700_000_600)
    _make_file(root / "Documents" / "notes.txt", 700, 1_700_000_700)
    _make_file(root / "Music" / "song.mp3", 800, 1_700_000_800)
    _make_file(root / "Movies" / "clip.mp4", 900, 1_700_000_900)
    _make_file(root / "Android" / "data" / "com.app" / "cache.jpg", 10)
    _make_file(root / "Android" / "obb" / "game.zip", 10)
    _make_file(
        root / "Android" / "media" / "com.whatsapp" / "WhatsApp Images" / "wa.jpg",
        1000,
        1_700_001_000,
    )
    _make_file(root / "LOST.DIR" / "lost.jpg", 10)
    _make_file(root / ".thumbnails" / "thumb.jpg", 10)
    _make_file(root / "Projects" / "site" / "index.html", 1100, 1_700_001_100)
    _make_file(root / "Projects" / "unknown.qqqzzz", 10)
    return root


@pytest.fixture
def scan_config(storage_root: Path):
    return get_config().for_root(storage_root)


@pytest.fixture
def make_file():
    return _make_file


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


@pytest.fixture
def inline_executor() -> Executor:
    return InlineExecutor()
