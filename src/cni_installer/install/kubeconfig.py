# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/install/kubeconfig.py
from __future__ import annotations

import base64
import ipaddress
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..config.models import InstallConfig
from .errors import (
    CAFileReadError,
    KubeconfigConfigError,
    KubeconfigMismatchError,
    KubeconfigMissingError,
    KubeconfigWriteError,
    TokenReadError,
)
from .fileutil import atomic_write, read_if_exists

TOKEN_FILENAME = "token"
REDACTED = "<redacted>"
# group/other bits are always stripped from an existing kubeconfig
MAX_KUBECONFIG_MODE = 0o600


@dataclass(frozen=True)
class KubeConfig:
    """
    A rendered kubeconfig.

    full:     exact bytes written to disk and compared for drift
    redacted: same document with the bearer token masked, for logs
    """

    full: str
    redacted: str


class KubeconfigAction(str, Enum):
    CREATED = "created"
    REPLACED = "replaced"
    UNCHANGED = "unchanged"


def kubeconfig_path(cfg: InstallConfig) -> Path:
    return Path(cfg.mounted_cni_net_dir) / cfg.kubeconfig_filename


def _join_host_port(host: str, port: str) -> str:
    try:
        is_v6 = isinstance(ipaddress.ip_address(host), ipaddress.IPv6Address)
    except ValueError:
        is_v6 = False
    if is_v6:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def server_url(cfg: InstallConfig) -> str:
    return f"{cfg.protocol}://{_join_host_port(cfg.k8s_service_host, cfg.k8s_service_port)}"


def _read_token(cfg: InstallConfig) -> str:
    token_path = Path(cfg.service_account_token_path) / TOKEN_FILENAME
    try:
        return token_path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        raise TokenReadError(f"Cannot read service account token {token_path}: {e}") from e


def _read_ca(cfg: InstallConfig) -> bytes:
    try:
        return Path(cfg.kube_ca_file).read_bytes()
    except OSError as e:
        raise CAFileReadError(f"Cannot read CA file {cfg.kube_ca_file}: {e}") from e


def _render(
    cfg: InstallConfig,
    server: str,
    token: str,
    ca_data: Optional[bytes],
) -> str:
    cluster: Dict[str, Any] = {}
    if ca_data is None:
        cluster["insecure-skip-tls-verify"] = True
    else:
        cluster["certificate-authority-data"] = base64.b64encode(ca_data).decode("ascii")
    cluster["server"] = server

    doc = {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [{"cluster": cluster, "name": cfg.cluster_name}],
        "contexts": [
            {
                "context": {"cluster": cfg.cluster_name, "user": cfg.user_name},
                "name": cfg.context_name,
            }
        ],
        "current-context": cfg.context_name,
        "preferences": {},
        "users": [{"name": cfg.user_name, "user": {"token": token}}],
    }
    # insertion order above is the on-disk order
    return yaml.safe_dump(doc, sort_keys=False, default_flow_style=False, width=1 << 16)


def create_kube_config(cfg: InstallConfig) -> KubeConfig:
    """
    Render the kubeconfig the plugin uses to reach the API server.

    Trust material, in priority order:
      1. skip_tls_verify -> insecure-skip-tls-verify (kube_ca_file is not read)
      2. kube_ca_file    -> embedded certificate-authority-data
      3. neither         -> KubeconfigConfigError

    The token is read fresh on every call. The output depends only on the
    config and the token/CA bytes, so it can be compared byte-for-byte
    with what is on disk.
    """
    if not cfg.k8s_service_host:
        raise KubeconfigConfigError("k8s service host is not set")
    if not cfg.k8s_service_port:
        raise KubeconfigConfigError("k8s service port is not set")
    if not cfg.skip_tls_verify and not cfg.kube_ca_file:
        raise KubeconfigConfigError(
            "no CA file configured and TLS verification is not skipped"
        )

    server = server_url(cfg)
    token = _read_token(cfg)
    ca_data = None if cfg.skip_tls_verify else _read_ca(cfg)

    return KubeConfig(
        full=_render(cfg, server, token, ca_data),
        redacted=_render(cfg, server, REDACTED, ca_data),
    )


def check_existing_kube_config_file(cfg: InstallConfig, expected: KubeConfig) -> None:
    """
    Compare the on-disk kubeconfig with `expected` without writing.

    Raises KubeconfigMissingError or KubeconfigMismatchError on drift.
    """
    path = kubeconfig_path(cfg)
    try:
        current = read_if_exists(path)
    except OSError as e:
        raise KubeconfigWriteError(f"Cannot read kubeconfig {path}: {e}") from e
    if current is None:
        raise KubeconfigMissingError(f"kubeconfig {path} does not exist", path)
    if current != expected.full.encode("utf-8"):
        raise KubeconfigMismatchError(f"kubeconfig {path} does not match the expected content", path)


def ensure_kube_config(
    cfg: InstallConfig,
    expected: KubeConfig,
    create_missing: bool = True,
) -> KubeconfigAction:
    """
    Make the on-disk kubeconfig equal to `expected`.

    A missing file raises KubeconfigMissingError unless `create_missing`.
    A stale file is replaced atomically; its mode is kept but group/other
    bits are dropped.
    """
    path = kubeconfig_path(cfg)
    data = expected.full.encode("utf-8")
    try:
        current = read_if_exists(path)

        if current is None:
            if not create_missing:
                raise KubeconfigMissingError(f"kubeconfig {path} does not exist", path)
            path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(path, data, mode=cfg.kubeconfig_mode)
            return KubeconfigAction.CREATED

        if current == data:
            return KubeconfigAction.UNCHANGED

        mode = os.stat(path).st_mode & 0o777 & MAX_KUBECONFIG_MODE
        atomic_write(path, data, mode=mode)
        return KubeconfigAction.REPLACED
    except OSError as e:
        raise KubeconfigWriteError(f"Cannot write kubeconfig {path}: {e}") from e
