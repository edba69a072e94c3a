# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/logging/log.py

from __future__ import annotations

import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional
import uuid

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"


def init_logging(
    *,
    log_dir: Optional[Path] = None,
    name: str = "cni_installer",
    verbose: bool = False,
) -> tuple[logging.Logger, str, Optional[Path]]:
    """
    Initializes:
      - console handler (INFO, DEBUG when verbose)
      - optional per-run log file with the full DEBUG trace
      - returns run_id so observers can reuse it

    The installer usually runs inside a container whose stdout is already
    collected, so the file is only written when `log_dir` is given.
    """
    run_id = str(uuid.uuid4())

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    log_path = None
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        log_path = log_dir / f"{name}-{ts}-{run_id}.log"
        fh = logging.FileHandler(log_path)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    logger.debug(f"run_id={run_id}")
    if log_path:
        logger.debug(f"log_file={log_path}")

    return logger, run_id, log_path
