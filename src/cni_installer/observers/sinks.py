# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/observers/sinks.py
from __future__ import annotations
import json
import logging
from pathlib import Path
from .events import BaseEvent, InstallFailed, InstallSummary


class LoggerObserver:
    """Writes each event as one log line; failures go out at ERROR."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        fields = ", ".join(
            f"{k}={v}" for k, v in event.dict().items() if k not in ("ts", "run_id")
        )
        level = logging.INFO
        if isinstance(event, InstallFailed) or (
            isinstance(event, InstallSummary) and event.status != "OK"
        ):
            level = logging.ERROR
        self.logger.log(level, "[%s] %s", event.__class__.__name__, fields)


class JsonFileObserver:
    """Appends one JSON object per line, e.g. for a hostPath audit trail."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def notify(self, event: BaseEvent) -> None:
        with self.path.open("a") as f:
            json.dump({"type": event.__class__.__name__, **event.dict()}, f, sort_keys=True)
            f.write("\n")
