# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/install/binaries.py
from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Dict, Iterable, List, Set

from .errors import BinaryCopyError
from .fileutil import atomic_write, read_if_exists

BINARY_MODE = 0o755


def _list_artifacts(src_dir: Path) -> List[Path]:
    if not src_dir.is_dir():
        raise BinaryCopyError(f"Source directory {src_dir} does not exist or is not a directory")
    try:
        return sorted(p for p in src_dir.iterdir() if p.is_file())
    except OSError as e:
        raise BinaryCopyError(f"Cannot list source directory {src_dir}: {e}") from e


def _sync_target(artifacts: List[Path], target: Path, prefix: str, copied: Set[str]) -> None:
    """Copy into one target; the first OSError aborts this target only."""
    target.mkdir(parents=True, exist_ok=True)
    for artifact in artifacts:
        dest_name = prefix + artifact.name
        dest = target / dest_name
        data = artifact.read_bytes()
        if read_if_exists(dest) == data:
            # same bytes, but an earlier install may have left it non-executable
            if stat.S_IMODE(os.stat(dest).st_mode) != BINARY_MODE:
                os.chmod(dest, BINARY_MODE)
            continue
        atomic_write(dest, data, mode=BINARY_MODE)
        copied.add(dest_name)


def copy_binaries(
    src_dir: str | Path,
    target_dirs: Iterable[str | Path],
    prefix: str = "",
) -> Set[str]:
    """
    Copy every regular file in `src_dir` into each of `target_dirs` as
    `prefix + filename`.

    A destination whose bytes already match the source is not rewritten,
    only its mode is fixed up. Returns the destination names that were
    written (new or changed), across all targets.

    Copying is best-effort per target: an I/O failure aborts the remaining
    copies for that target and the next target is still processed. If any
    target failed, one BinaryCopyError is raised at the end carrying the
    combined `copied` set and `failed_targets`. Nothing is rolled back.
    """
    src = Path(src_dir)
    artifacts = _list_artifacts(src)
    copied: Set[str] = set()
    failures: Dict[Path, OSError] = {}

    for target in target_dirs:
        target = Path(target)
        try:
            _sync_target(artifacts, target, prefix, copied)
        except OSError as e:
            failures[target] = e

    if failures:
        detail = "; ".join(f"{t}: {e}" for t, e in failures.items())
        raise BinaryCopyError(
            f"Failed to copy binaries into {len(failures)} target(s): {detail}",
            failed_targets=list(failures),
            copied=copied,
        ) from next(iter(failures.values()))

    return copied
