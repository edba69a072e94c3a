from pathlib import Path

import pytest

from cni_installer.install.errors import KubeconfigConfigError, TokenReadError
from cni_installer.install.installer import check_install, run_install_pass
from cni_installer.install.kubeconfig import KubeconfigAction, kubeconfig_path


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)


def _seed_binaries(cfg, files: dict) -> None:
    src = Path(cfg.cni_bin_source_dir)
    src.mkdir(parents=True, exist_ok=True)
    for name, contents in files.items():
        (src / name).write_text(contents)


def test_first_pass_installs_everything(make_cfg):
    cfg = make_cfg(cni_binaries_prefix="my-")
    _seed_binaries(cfg, {"plugin-bin": "v1"})
    cap = Capture()

    report = run_install_pass(cfg, observers=[cap])

    assert report.ok
    assert report.changed
    assert report.binaries_copied == {"my-plugin-bin"}
    assert report.kubeconfig_action is KubeconfigAction.CREATED
    assert (Path(cfg.cni_bin_target_dirs[0]) / "my-plugin-bin").read_text() == "v1"
    assert kubeconfig_path(cfg).exists()

    kinds = [e.__class__.__name__ for e in cap.events]
    assert kinds == ["InstallStarted", "BinariesInstalled", "KubeconfigReconciled", "InstallSummary"]
    assert len({e.run_id for e in cap.events}) == 1
    assert cap.events[-1].status == "OK"


def test_second_pass_is_current(make_cfg):
    cfg = make_cfg()
    _seed_binaries(cfg, {"istio-cni": "cni"})
    run_install_pass(cfg)

    report = run_install_pass(cfg)

    assert report.ok
    assert not report.changed
    assert report.binaries_copied == set()
    assert report.kubeconfig_action is KubeconfigAction.UNCHANGED
    assert report.summary() == "OK copied=0 kubeconfig=unchanged errors=0"


def test_token_rotation_rewrites_kubeconfig(make_cfg, sa_dir: Path):
    cfg = make_cfg()
    _seed_binaries(cfg, {"istio-cni": "cni"})
    run_install_pass(cfg)
    assert check_install(cfg) == []

    (sa_dir / "token").write_text("rotated")
    assert len(check_install(cfg)) == 1

    report = run_install_pass(cfg)
    assert report.kubeconfig_action is KubeconfigAction.REPLACED
    assert check_install(cfg) == []


def test_binary_failure_still_reconciles_kubeconfig(make_cfg, tmp_path: Path):
    cfg = make_cfg(cni_bin_source_dir=str(tmp_path / "missing"))
    cap = Capture()

    report = run_install_pass(cfg, observers=[cap])

    assert not report.ok
    assert len(report.errors) == 1
    assert report.kubeconfig_action is KubeconfigAction.CREATED
    failed = [e for e in cap.events if e.__class__.__name__ == "InstallFailed"]
    assert [e.step for e in failed] == ["binaries"]
    assert cap.events[-1].status == "FAILED"


def test_kubeconfig_config_error_is_reported(make_cfg):
    cfg = make_cfg(k8s_service_host="")
    _seed_binaries(cfg, {"istio-cni": "cni"})

    report = run_install_pass(cfg)

    assert not report.ok
    assert report.binaries_copied == {"istio-cni"}
    assert report.kubeconfig_action is None
    assert not kubeconfig_path(cfg).exists()


def test_no_create_reports_missing_kubeconfig(make_cfg):
    cfg = make_cfg()
    _seed_binaries(cfg, {"istio-cni": "cni"})

    report = run_install_pass(cfg, create_kubeconfig=False)

    assert not report.ok
    assert "does not exist" in report.errors[0]
    assert not kubeconfig_path(cfg).exists()


def test_broken_observer_does_not_fail_pass(make_cfg):
    class Broken:
        def notify(self, ev): raise RuntimeError("sink down")

    cfg = make_cfg()
    _seed_binaries(cfg, {"istio-cni": "cni"})

    assert run_install_pass(cfg, observers=[Broken()]).ok


def test_check_install_missing(make_cfg):
    problems = check_install(make_cfg())
    assert len(problems) == 1
    assert "does not exist" in problems[0]


def test_check_install_raises_on_config_error(make_cfg):
    with pytest.raises(KubeconfigConfigError):
        check_install(make_cfg(k8s_service_host=""))


def test_check_install_raises_on_missing_token(make_cfg, tmp_path: Path):
    with pytest.raises(TokenReadError):
        check_install(make_cfg(service_account_token_path=str(tmp_path / "empty")))
