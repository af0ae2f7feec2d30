"""Main CLI application entry point.

Defines the Typer application. picoprep has no subcommands: invoking it
runs every provisioning stage.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from picoprep import __version__
from picoprep.core.config import ConfigError, ProvisionConfig, load_config
from picoprep.core.provisioner import Provisioner
from picoprep.models.step import ProvisionReport
from picoprep.utils.formatting import (
    console,
    create_stage_table,
    create_summary_table,
    err_console,
    print_error,
    print_info,
    print_success,
)

app = typer.Typer(
    name="picoprep",
    help="Provision an Ubuntu workstation for Raspberry Pi Pico 2 (RP2350) development.",
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"picoprep version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _print_next_steps(config: ProvisionConfig) -> None:
    console.print("\n[bold_header]Next steps:[/]")
    console.print("  - Unplug/replug the Debug Probe after udev/group changes.")
    console.print(f"  - Open a new shell or run:  source {config.shell_rc}")
    console.print("  - Example build using Ninja (recommended):")
    console.print(
        "      mkdir -p build && cd build\n"
        "      cmake .. -G Ninja \\\n"
        "        -DPICO_SDK_PATH=$PICO_SDK_PATH \\\n"
        "        -DPICO_PLATFORM=rp2350-riscv \\\n"
        "        -DPICO_BOARD=pico2\n"
        "      ninja",
        markup=False,
        highlight=False,
    )


def _report(report: ProvisionReport, config: ProvisionConfig) -> None:
    console.print()
    console.print(create_stage_table(report))

    failure = report.failure
    if failure is not None:
        print_error(f"{failure.title} failed: {failure.error}")
        print_info("Fix the problem and run picoprep again; finished steps are not redone.")
        raise typer.Exit(code=1)

    console.print(create_summary_table(report.summary))
    if report.warnings:
        print_info(f"Completed with {len(report.warnings)} warning(s); see above.")
    else:
        print_success("Environment ready.")
    _print_next_steps(config)


@app.command()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log every command that runs.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Settings file (default: ~/.config/picoprep/config.toml).",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Install toolchains, pico-sdk, picotool, OpenOCD, udev rules and configs.

    Every step is idempotent: run it again after a failure and finished
    work is skipped or safely repeated.
    """
    _configure_logging(verbose)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e

    report = Provisioner(config).run()
    _report(report, config)


if __name__ == "__main__":
    app()
