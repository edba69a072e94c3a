# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import socket
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single install pass
    node: str         # hostname the pass runs on

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(node: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": str(uuid.uuid4()),
        "node": node or socket.gethostname(),
    }


# ---------------------------------------------------------------------
# Install pass lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class InstallStarted(BaseEvent):
    target_dirs: List[str]
    kubeconfig: str

@dataclass(frozen=True)
class BinariesInstalled(BaseEvent):
    copied: List[str]     # sorted destination names
    changed: bool

@dataclass(frozen=True)
class KubeconfigReconciled(BaseEvent):
    path: str
    action: str           # "created" | "replaced" | "unchanged"

@dataclass(frozen=True)
class InstallFailed(BaseEvent):
    step: str             # "binaries" | "kubeconfig"
    error: str

@dataclass(frozen=True)
class InstallSummary(BaseEvent):
    status: str           # "OK" | "FAILED"
    copied: int
    kubeconfig_action: Optional[str] = None
