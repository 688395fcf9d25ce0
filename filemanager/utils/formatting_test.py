from datetime import datetime

import pytest

from filemanager.utils.formatting import format_date, format_file_size


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1.00 KB"),
        (1536, "1.50 KB"),
        (5 * 1024 * 1024, "5.00 MB"),
        (3 * 1024**3, "3.00 GB"),
    ],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_format_date_uses_local_time():
    timestamp = datetime(2024, 3, 7, 12, 0).timestamp() * 1000
    assert format_date(int(timestamp)) == "Mar 07, 2024"
