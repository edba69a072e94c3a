import logging
from pathlib import Path

from cni_installer.logging.log import init_logging


def test_console_only_by_default():
    logger, run_id, log_path = init_logging(name="cni_installer_test")
    assert log_path is None
    assert run_id
    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.INFO


def test_file_handler_gets_debug(tmp_path: Path):
    logger, run_id, log_path = init_logging(log_dir=tmp_path / "logs", name="cni_installer_test", verbose=True)
    logger.debug("hello from the installer")
    for h in logger.handlers:
        h.flush()

    assert log_path.parent == tmp_path / "logs"
    assert run_id in log_path.name
    text = log_path.read_text()
    assert "| DEBUG   | hello from the installer" in text
    assert logger.handlers[0].level == logging.DEBUG

    for h in list(logger.handlers):
        h.close()
        logger.removeHandler(h)
