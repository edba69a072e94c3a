# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/config/loader.py

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from ..install.errors import ConfigLoadError
from .models import InstallConfig

log = logging.getLogger("cni_installer")

# environment variable -> InstallConfig field
ENV_OVERRIDES: Dict[str, str] = {
    "KUBERNETES_SERVICE_HOST": "k8s_service_host",
    "KUBERNETES_SERVICE_PORT": "k8s_service_port",
    "KUBERNETES_SERVICE_PROTOCOL": "k8s_service_protocol",
    "KUBE_CA_FILE": "kube_ca_file",
    "SKIP_TLS_VERIFY": "skip_tls_verify",
    "MOUNTED_CNI_NET_DIR": "mounted_cni_net_dir",
    "KUBECONFIG_FILENAME": "kubeconfig_filename",
    "SERVICE_ACCOUNT_TOKEN_PATH": "service_account_token_path",
    "CNI_BIN_SOURCE_DIR": "cni_bin_source_dir",
    "CNI_BIN_TARGET_DIRS": "cni_bin_target_dirs",
    "CNI_BINARIES_PREFIX": "cni_binaries_prefix",
}


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    try:
        raw = path.read_text()
    except OSError as e:
        raise ConfigLoadError(f"Cannot read config file {path}: {e}") from e
    expanded = os.path.expandvars(raw)
    try:
        data = yaml.safe_load(expanded) or {}
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Config file {path} must contain a mapping")
    return data


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    Collect overrides from the environment. Empty values are ignored so an
    unset-but-exported variable does not wipe a value from the file.
    """
    out: Dict[str, Any] = {}
    for env_name, field_name in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value in (None, ""):
            continue
        if field_name == "cni_bin_target_dirs":
            out[field_name] = [d.strip() for d in value.split(",") if d.strip()]
        else:
            out[field_name] = value
    return out


def load_config(
    path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> InstallConfig:
    """
    Build an InstallConfig from an optional YAML file plus environment
    overrides (environment wins).
    """
    data: Dict[str, Any] = {}
    if path is not None:
        data = _load_yaml(Path(path))
    else:
        log.debug("No config file given, using defaults and environment")

    env = os.environ if environ is None else environ
    overrides = _env_overrides(env)
    if overrides:
        log.debug("Applying environment overrides: %s", ", ".join(sorted(overrides)))
        data.update(overrides)

    try:
        return InstallConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid install configuration: {e}") from e
