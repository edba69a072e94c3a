# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/install/fileutil.py
from __future__ import annotations

import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Optional


def atomic_write(path: Path, data: bytes, mode: int = 0o644) -> None:
    """
    Atomically replace `path` with `data` (tmp -> fsync -> chmod -> rename).

    The temp file lives in the destination directory so the final
    os.replace stays on one filesystem. Readers either see the old file
    or the complete new one.
    """
    path = Path(path)
    tmp_path: Optional[Path] = None
    try:
        with NamedTemporaryFile(
            dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_path = Path(tmp.name)
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        # chmod before the rename so the file never appears with the temp mode
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise


def read_if_exists(path: Path) -> Optional[bytes]:
    """Return the file's bytes, or None when it does not exist."""
    try:
        return Path(path).read_bytes()
    except FileNotFoundError:
        return None
