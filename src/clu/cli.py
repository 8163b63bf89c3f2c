"""CLI entry point for clu."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import typer

from clu.config import TerminalConfig

if TYPE_CHECKING:
    from clu.terminal import Settlement

app = typer.Typer(
    name="clu",
    help="Run shell commands and wait for their output to settle.",
    no_args_is_help=True,
)

# Conventional exit code for timeouts (as used by coreutils `timeout`)
TIMEOUT_EXIT_CODE = 124


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@app.command()
def run(
    command: str = typer.Argument(help="Shell command to execute."),
    directory: str | None = typer.Option(
        None, "--dir", "-d", help="Working directory (default: current)."
    ),
    timeout_ms: int | None = typer.Option(
        None, "--timeout-ms", "-t", help="Timeout in milliseconds (-1 disables)."
    ),
    settle_ms: int | None = typer.Option(
        None, "--settle-ms", "-s", help="Quiet period before output is complete."
    ),
    break_on_error: bool | None = typer.Option(
        None,
        "--break-on-error/--no-break-on-error",
        help="Fail with a message instead of just the exit status.",
    ),
    legacy_status: bool = typer.Option(
        False,
        "--legacy-status",
        help="Exit 2 when the command succeeds but writes to stderr.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to a JSON config file."
    ),
) -> None:
    """Run COMMAND, print its captured output, and exit with its status."""
    from clu.terminal import (
        Settlement,
        Terminal,
        TerminalExecutionError,
        TerminalLaunchError,
    )

    setup_logging(verbose)
    config = TerminalConfig.load(config_file)
    overrides: dict[str, object] = {"log_output": verbose or config.log_output}
    if timeout_ms is not None:
        overrides["timeout_ms"] = timeout_ms
    if settle_ms is not None:
        overrides["settle_ms"] = settle_ms
    if break_on_error is not None:
        overrides["break_on_error"] = break_on_error
    if legacy_status:
        overrides["legacy_status"] = True
    config = TerminalConfig.model_validate({**config.model_dump(), **overrides})

    terminal = Terminal.from_config(config, directory)
    try:
        result = terminal.execute(command)
    except TerminalLaunchError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except TerminalExecutionError as e:
        terminal.kill()
        typer.echo(terminal.info, nl=False)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(_exit_code(e.settlement, e.status))

    typer.echo(result.info, nl=False)
    if result.error:
        typer.echo(result.error, err=True, nl=False)
    if result.settlement is Settlement.TIMED_OUT:
        # Nobody is left to wait for the child once the CLI exits
        terminal.kill()
        typer.echo(f"Timed out after {config.timeout_ms}ms: {command}", err=True)
    raise typer.Exit(_exit_code(result.settlement, result.status))


@app.command("os")
def os_info() -> None:
    """Show how clu classifies this host."""
    from clu.system import current_arch, current_arch_type, current_os

    os_type = current_os()
    typer.echo(f"OS: {os_type.value}")
    typer.echo(f"Arch: {current_arch().value}")
    typer.echo(f"Arch type: {current_arch_type().value}")
    typer.echo(f"Unix: {'yes' if os_type.is_unix else 'no'}")
    typer.echo(f"Kill command: {os_type.kill_command}")


@app.command()
def kill(
    name: str = typer.Argument(help="Process name (or command line) to kill."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Kill processes by name using the platform kill command."""
    from clu.system import kill_process_by_name

    setup_logging(verbose)
    result = kill_process_by_name(name)
    if result.info:
        typer.echo(result.info, nl=False)
    if result.error:
        typer.echo(result.error, err=True, nl=False)


def _exit_code(settlement: Settlement | None, status: int) -> int:
    from clu.terminal import Settlement

    if settlement is Settlement.TIMED_OUT:
        return TIMEOUT_EXIT_CODE
    # Signals show up as negative return codes
    return status if status >= 0 else 128 - status


def main() -> None:
    app()


if __name__ == "__main__":
    main()
