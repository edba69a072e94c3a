# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from cni_installer.config.loader import load_config
from cni_installer.install.errors import ConfigurationError, InstallError
from cni_installer.install.installer import InstallReport, check_install, run_install_pass
from cni_installer.logging.log import init_logging
from cni_installer.observers.events import new_ctx
from cni_installer.observers.sinks import JsonFileObserver, LoggerObserver
from cni_installer.utils.retry import RetryError, retry


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="CNI plugin node installer", no_args_is_help=True)


class PassFailed(InstallError):
    """An install pass finished with errors."""

    def __init__(self, report: InstallReport):
        super().__init__("; ".join(report.errors))
        self.report = report


@app.command()
def install(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Install config YAML"),
    retries: int = typer.Option(1, "--retries", min=1, help="Total attempts for the pass"),
    delay: float = typer.Option(2.0, "--delay", help="Seconds between attempts"),
    no_create: bool = typer.Option(
        False, "--no-create", help="Treat a missing kubeconfig as an error instead of writing it"
    ),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also write a per-run log file here"),
    events_file: Optional[Path] = typer.Option(None, "--events-file", help="Append JSON events to this file"),
    debug: bool = typer.Option(False, "--debug"),
) -> None:
    """
    Run one install pass: copy CNI binaries and reconcile the kubeconfig.
    """
    logger, run_id, _ = init_logging(log_dir=log_dir, verbose=debug)

    try:
        cfg = load_config(config)
    except ConfigurationError as e:
        logger.error(str(e))
        raise typer.Exit(code=2)

    observers = [LoggerObserver(logger)]
    if events_file:
        observers.append(JsonFileObserver(events_file))

    run_ctx = new_ctx()
    run_ctx["run_id"] = run_id

    def _warn(attempt: int, exc: Exception, wait: float) -> None:
        logger.warning(f"install attempt {attempt}/{retries} failed: {exc}; retrying in {wait:.1f}s")

    @retry(attempts=retries, delay=delay, retry_on=(PassFailed,), on_retry=_warn)
    def _pass() -> InstallReport:
        report = run_install_pass(
            cfg, observers=observers, create_kubeconfig=not no_create, run_ctx=run_ctx
        )
        if not report.ok:
            raise PassFailed(report)
        return report

    try:
        report = _pass()
    except RetryError as e:
        logger.error(f"install failed: {e.__cause__}")
        raise typer.Exit(code=1)

    typer.echo(report.summary())


@app.command()
def check(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Install config YAML"),
    debug: bool = typer.Option(False, "--debug"),
) -> None:
    """
    Verify the on-disk kubeconfig is current. Never writes.

    Exit code 1 on drift or I/O failure, 2 on bad configuration.
    """
    logger, _, _ = init_logging(verbose=debug)
    try:
        cfg = load_config(config)
        problems = check_install(cfg)
    except ConfigurationError as e:
        logger.error(str(e))
        raise typer.Exit(code=2)
    except InstallError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)

    for p in problems:
        typer.echo(p, err=True)
    if problems:
        raise typer.Exit(code=1)
    typer.echo("kubeconfig is current")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
