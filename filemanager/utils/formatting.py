import math
from datetime import datetime

SIZE_PREFIXES = "KMGTPE"


def format_file_size(size: int) -> str:
    """Human readable size using 1024-based units, e.g. ``1.50 KB``."""
    if size < 1024:
        return f"{size} B"
    exp = min(int(math.log(size) / math.log(1024)), len(SIZE_PREFIXES))
    return f"{size / 1024 ** exp:.2f} {SIZE_PREFIXES[exp - 1]}B"


def format_date(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%b %d, %Y")
