from __future__ import annotations

from pathlib import Path

from idleminer.persistence import Snapshot


def write_snapshot(snapshot: Snapshot, directory: str | Path = ".") -> Path:
    """Write an exported snapshot as ``<directory>/<snapshot.filename>``.

    An existing export from the same day is overwritten.
    """
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / snapshot.filename
    with open(path, "w", encoding="utf-8") as f:
        f.write(snapshot.text)
    return path
