"""Shared test fixtures."""

import pytest


@pytest.fixture
def write_csv(tmp_path):
    """Write ``lines`` to a file under tmp_path and return its path as str."""

    def _write(lines, name="data.csv", newline="\n", encoding="utf-8"):
        path = tmp_path / name
        path.write_bytes("".join(line + newline for line in lines).encode(encoding))
        return str(path)

    return _write
