# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/install/errors.py
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional


class InstallError(RuntimeError):
    """Base class for installer failures."""


class ConfigurationError(InstallError):
    """Raised when the install configuration cannot produce a valid result."""


class ConfigLoadError(ConfigurationError):
    """Raised when a config file cannot be read or fails validation."""


class BinaryCopyError(InstallError):
    """
    Raised when an artifact cannot be copied into a target directory.

    `copied` holds the destination names that were written, across every
    target; those files are left in place. `failed_targets` lists the
    target directories that could not be completed.
    """

    def __init__(
        self,
        message: str,
        *,
        failed_targets: Iterable[Path] = (),
        copied: Iterable[str] = (),
    ):
        super().__init__(message)
        self.failed_targets: List[Path] = list(failed_targets)
        self.copied = set(copied)

    @property
    def target_dir(self) -> Optional[Path]:
        return self.failed_targets[0] if self.failed_targets else None


class KubeconfigError(InstallError):
    """Base class for kubeconfig provisioning failures."""


class KubeconfigConfigError(KubeconfigError, ConfigurationError):
    """Raised when host/port or TLS trust material are not configured."""


class TokenReadError(KubeconfigError):
    """Raised when the service-account token cannot be read."""


class CAFileReadError(KubeconfigError):
    """Raised when the CA bundle cannot be read."""


class KubeconfigWriteError(KubeconfigError):
    """Raised when the kubeconfig cannot be read back or written."""


class KubeconfigDriftError(KubeconfigError):
    """The on-disk kubeconfig does not match the expected one."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


class KubeconfigMissingError(KubeconfigDriftError):
    """The kubeconfig file does not exist yet."""


class KubeconfigMismatchError(KubeconfigDriftError):
    """The kubeconfig file exists but its content is stale."""
