import logging
from pathlib import Path

import pytest

from cni_installer.config.loader import ENV_OVERRIDES
from cni_installer.config.models import InstallConfig

TESTDATA = Path(__file__).parent / "install" / "testdata"
K8S_SERVICE_HOST = "10.96.0.1"
K8S_SERVICE_PORT = "443"
SA_TOKEN = "service_account_token_string"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # a pod running the tests would otherwise leak its own service env in
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logger():
    # init_logging binds handlers to the CliRunner's streams
    yield
    logger = logging.getLogger("cni_installer")
    logger.handlers.clear()
    logger.propagate = True


@pytest.fixture
def kube_ca_file() -> Path:
    return TESTDATA / "kube-ca.crt"


@pytest.fixture
def sa_dir(tmp_path: Path) -> Path:
    d = tmp_path / "serviceaccount"
    d.mkdir()
    (d / "token").write_text(SA_TOKEN)
    return d


@pytest.fixture
def make_cfg(tmp_path: Path, sa_dir: Path, kube_ca_file: Path):
    """Build an InstallConfig rooted in tmp_path; keyword args override."""
    def _make(**overrides) -> InstallConfig:
        values = dict(
            mounted_cni_net_dir=str(tmp_path / "net.d"),
            kube_ca_file=str(kube_ca_file),
            k8s_service_host=K8S_SERVICE_HOST,
            k8s_service_port=K8S_SERVICE_PORT,
            service_account_token_path=str(sa_dir),
            cni_bin_source_dir=str(tmp_path / "src-bin"),
            cni_bin_target_dirs=[str(tmp_path / "host-bin")],
        )
        values.update(overrides)
        return InstallConfig(**values)
    return _make
