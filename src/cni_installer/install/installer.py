# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/install/installer.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from ..config.models import InstallConfig
from ..observers.dispatcher import EventBus
from ..observers.events import (
    new_ctx,
    InstallStarted,
    BinariesInstalled,
    KubeconfigReconciled,
    InstallFailed,
    InstallSummary,
)
from .binaries import copy_binaries
from .errors import BinaryCopyError, InstallError, KubeconfigDriftError
from .kubeconfig import (
    KubeconfigAction,
    check_existing_kube_config_file,
    create_kube_config,
    ensure_kube_config,
    kubeconfig_path,
)

log = logging.getLogger("cni_installer")


@dataclass
class InstallReport:
    binaries_copied: Set[str] = field(default_factory=set)
    kubeconfig_action: Optional[KubeconfigAction] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def changed(self) -> bool:
        return bool(self.binaries_copied) or self.kubeconfig_action in (
            KubeconfigAction.CREATED,
            KubeconfigAction.REPLACED,
        )

    def summary(self) -> str:
        action = self.kubeconfig_action.value if self.kubeconfig_action else "-"
        return (
            f"{'OK' if self.ok else 'FAILED'} copied={len(self.binaries_copied)} "
            f"kubeconfig={action} errors={len(self.errors)}"
        )


def _install_binaries(cfg: InstallConfig, report: InstallReport, bus: EventBus, run_ctx: dict) -> None:
    try:
        copied = copy_binaries(
            cfg.cni_bin_source_dir, cfg.cni_bin_target_dirs, cfg.cni_binaries_prefix
        )
    except BinaryCopyError as e:
        # keep what made it onto disk before the failure
        report.binaries_copied |= e.copied
        report.errors.append(str(e))
        bus.emit(InstallFailed(step="binaries", error=str(e), **run_ctx))
        return

    report.binaries_copied |= copied
    if copied:
        log.info("Copied %s into %s", ", ".join(sorted(copied)), ", ".join(cfg.cni_bin_target_dirs))
    else:
        log.debug("Binaries already current in %s", ", ".join(cfg.cni_bin_target_dirs))
    bus.emit(BinariesInstalled(copied=sorted(copied), changed=bool(copied), **run_ctx))


def _install_kubeconfig(
    cfg: InstallConfig,
    report: InstallReport,
    bus: EventBus,
    run_ctx: dict,
    create_missing: bool,
) -> None:
    path = kubeconfig_path(cfg)
    try:
        expected = create_kube_config(cfg)
        log.debug("Expected kubeconfig:\n%s", expected.redacted)
        action = ensure_kube_config(cfg, expected, create_missing=create_missing)
    except InstallError as e:
        report.errors.append(str(e))
        bus.emit(InstallFailed(step="kubeconfig", error=str(e), **run_ctx))
        return

    report.kubeconfig_action = action
    if action is KubeconfigAction.UNCHANGED:
        log.debug("kubeconfig %s is current", path)
    else:
        log.info("kubeconfig %s %s", path, action.value)
    bus.emit(KubeconfigReconciled(path=str(path), action=action.value, **run_ctx))


def run_install_pass(
    cfg: InstallConfig,
    observers: Optional[List] = None,
    create_kubeconfig: bool = True,
    run_ctx: Optional[dict] = None,
) -> InstallReport:
    """
    One install pass: sync binaries, then reconcile the kubeconfig.

    The two steps are independent; a failed binary copy does not stop the
    kubeconfig step. Installer errors end up in the report, anything else
    propagates. With `create_kubeconfig=False` a missing kubeconfig is
    reported as an error instead of being written.
    """
    bus = EventBus(observers or [])
    run_ctx = run_ctx or new_ctx()
    report = InstallReport()

    bus.emit(
        InstallStarted(
            target_dirs=list(cfg.cni_bin_target_dirs),
            kubeconfig=str(kubeconfig_path(cfg)),
            **run_ctx,
        )
    )

    _install_binaries(cfg, report, bus, run_ctx)
    _install_kubeconfig(cfg, report, bus, run_ctx, create_missing=create_kubeconfig)

    bus.emit(
        InstallSummary(
            status="OK" if report.ok else "FAILED",
            copied=len(report.binaries_copied),
            kubeconfig_action=report.kubeconfig_action.value if report.kubeconfig_action else None,
            **run_ctx,
        )
    )
    return report


def check_install(cfg: InstallConfig) -> List[str]:
    """
    Readiness check: does the on-disk kubeconfig match what would be
    written now? Returns the drift found; never writes.

    Configuration errors, unreadable token or CA files and I/O errors
    propagate instead of being reported as drift.
    """
    expected = create_kube_config(cfg)
    try:
        check_existing_kube_config_file(cfg, expected)
    except KubeconfigDriftError as e:
        return [str(e)]
    return []
