# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/config/models.py

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_KUBECONFIG_FILENAME = "ZZZ-istio-cni-kubeconfig"
DEFAULT_SERVICE_ACCOUNT_PATH = "/var/run/secrets/kubernetes.io/serviceaccount"
DEFAULT_PROTOCOL = "https"


class InstallConfig(BaseModel):
    """Settings for a single install pass on a node."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Kubeconfig placement
    mounted_cni_net_dir: str = "/host/etc/cni/net.d"
    kubeconfig_filename: str = DEFAULT_KUBECONFIG_FILENAME
    kubeconfig_mode: int = 0o600

    # API server and trust
    kube_ca_file: str = ""
    k8s_service_protocol: str = ""
    k8s_service_host: str = ""
    k8s_service_port: str = ""
    skip_tls_verify: bool = False
    service_account_token_path: str = DEFAULT_SERVICE_ACCOUNT_PATH

    # Binaries
    cni_bin_source_dir: str = "/opt/cni/bin"
    cni_bin_target_dirs: List[str] = Field(default_factory=lambda: ["/host/opt/cni/bin"])
    cni_binaries_prefix: str = ""

    # Kubeconfig entry names
    cluster_name: str = "local"
    user_name: str = "istio-cni"
    context_name: str = "istio-cni-context"

    @field_validator("kubeconfig_filename")
    @classmethod
    def _default_filename(cls, v: str) -> str:
        return v or DEFAULT_KUBECONFIG_FILENAME

    @field_validator("k8s_service_port", mode="before")
    @classmethod
    def _port_as_str(cls, v):
        # YAML gives ints for bare port numbers
        return str(v) if isinstance(v, int) else v

    @property
    def protocol(self) -> str:
        return self.k8s_service_protocol or DEFAULT_PROTOCOL
