"""
Command-Line Interface for the Virtual Marlin simulator.
Uses 'click' for argument parsing and 'rich' for console output.
"""
import asyncio
import logging
import sys
from typing import List, Optional, TextIO, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import constants as const
from .config import SimulatorConfig, load_config, save_config
from .exceptions import CommunicationError, ConfigurationError
from .executor import VirtualExecutor
from .firmware_model import SimulatedFirmware
from .interface.http_debug_server import DebugHTTPServer

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("VirtualMarlinCLI")


def collect_commands(commands: Tuple[str, ...], command_file: Optional[TextIO]) -> List[str]:
    """Arguments first, then file lines; lines without a command are skipped."""
    lines = list(commands)
    if command_file is not None:
        lines.extend(command_file.read().splitlines())
    return [line.strip() for line in lines if SimulatedFirmware.normalize_command(line)]


def build_config(
    config_path: Optional[str],
    latency_ms: Optional[float],
    open_delay_ms: Optional[float],
    timeout: Optional[float],
    log_level: Optional[str],
    debug_api_host: Optional[str],
    debug_api_port: Optional[int],
) -> SimulatorConfig:
    """Loads the config file (if any) and applies explicit CLI overrides."""
    config = load_config(config_path) if config_path else SimulatorConfig()
    overrides = {
        "latency_ms": latency_ms,
        "open_delay_ms": open_delay_ms,
        "command_timeout_s": timeout,
        "log_level": log_level.upper() if log_level else None,
        "debug_api_host": debug_api_host,
        "debug_api_port": debug_api_port,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
    return config.validate()


async def run_session(
    config: SimulatorConfig,
    commands: List[str],
    console: Console,
    debug_api: bool = False,
) -> int:
    """Opens an executor, sends every command and prints the replies."""
    executor = VirtualExecutor(config)
    await executor.open()
    exit_code = 0
    results = Table(title="Virtual Marlin session")
    results.add_column("#", justify="right")
    results.add_column("Command", style="cyan")
    results.add_column("Last line")
    results.add_column("Complete")

    try:
        for index, command in enumerate(commands, start=1):
            try:
                reply = await executor.send_command(command)
            except CommunicationError as e:
                logger.error(f"{e}")
                console.print(f"[bold red]No reply to {escape(command)}[/bold red]")
                exit_code = 1
                break
            console.print(f"[bold cyan]>>> {escape(command)}[/bold cyan]")
            console.print(escape(reply.rstrip(const.LINE_TERMINATOR)))
            last = reply.rstrip().splitlines()[-1] if reply.strip() else ""
            complete = VirtualExecutor.validator(command, reply)
            results.add_row(str(index), escape(command), escape(last), "yes" if complete else "no")

        if commands:
            console.print(results)
        console.print(f"Commands processed: {executor.get_commands_processed()}")

        if debug_api and exit_code == 0:
            server = DebugHTTPServer(
                executor, port=config.debug_api_port, host=config.debug_api_host
            )
            console.print(
                f"Debug API listening on http://{config.debug_api_host}:{config.debug_api_port} (Ctrl+C to stop)"
            )
            await server.start_server()
    finally:
        if executor.is_open:
            await executor.close()
    return exit_code


@click.command()
@click.argument("commands", nargs=-1)
@click.option(
    "--file",
    "command_file",
    type=click.File("r"),
    help="Read commands from a file, one per line.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Load simulator configuration from a JSON file.",
)
@click.option(
    "--save-config",
    "save_config_path",
    type=click.Path(dir_okay=False),
    help="Save the effective configuration to a JSON file.",
)
@click.option(
    "--latency-ms",
    type=float,
    help=f"Delay before each reply line in milliseconds. [default: {const.DEFAULT_LATENCY_MS}]",
)
@click.option(
    "--open-delay-ms",
    type=float,
    help=f"Time the simulated port takes to open. [default: {const.DEFAULT_OPEN_DELAY_MS}]",
)
@click.option(
    "--timeout",
    type=float,
    help=f"Seconds to wait for 'ok'. [default: {const.DEFAULT_COMMAND_TIMEOUT_SECONDS}]",
)
@click.option(
    "--log-level",
    type=click.Choice(list(const.LOG_LEVELS), case_sensitive=False),
    help="Logging level for the simulator. [default: INFO]",
)
@click.option(
    "--debug-api",
    is_flag=True,
    help="Keep the executor open behind the HTTP debug API after the commands run.",
)
@click.option(
    "--debug-api-host",
    type=str,
    help=f"Host for the HTTP debug API. [default: {const.DEFAULT_DEBUG_API_HOST}]",
)
@click.option(
    "--debug-api-port",
    type=int,
    help=f"Port for the HTTP debug API. [default: {const.DEFAULT_DEBUG_API_PORT}]",
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable color output.",
)
def main(
    commands: Tuple[str, ...],
    command_file: Optional[TextIO],
    config_path: Optional[str],
    save_config_path: Optional[str],
    latency_ms: Optional[float],
    open_delay_ms: Optional[float],
    timeout: Optional[float],
    log_level: Optional[str],
    debug_api: bool,
    debug_api_host: Optional[str],
    debug_api_port: Optional[int],
    no_color: bool,
):
    """
    Virtual Marlin.

    Sends COMMANDS (and any commands in --file) to a simulated Marlin board
    and prints each reply. Useful for checking host code and G-code snippets
    without hardware attached.
    """
    try:
        config = build_config(
            config_path, latency_ms, open_delay_ms, timeout, log_level,
            debug_api_host, debug_api_port,
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    numeric_log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(numeric_log_level)
    logger.setLevel(numeric_log_level)

    if save_config_path:
        save_config(config, save_config_path)

    console = Console(no_color=no_color, highlight=False)
    command_list = collect_commands(commands, command_file)
    logger.info(
        f"Config: Latency={config.latency_ms}ms, OpenDelay={config.open_delay_ms}ms, "
        f"Timeout={config.command_timeout_s}s, Commands={len(command_list)}"
    )

    try:
        exit_code = asyncio.run(run_session(config, command_list, console, debug_api))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down.")
        exit_code = 0
    if exit_code:
        sys.exit(exit_code)
