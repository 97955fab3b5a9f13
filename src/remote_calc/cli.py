import asyncio
import logging
from typing import Iterable

import click

from .client import DIRECT_PATHS, PROXY_PATHS, CalculationClient
from .config import load_settings
from .state_machine import InputStateMachine


def _echo_state(machine: InputStateMachine) -> None:
    if machine.status.ok:
        click.echo(machine.display)
    else:
        click.echo(f"{machine.display}    [{machine.status.message}]")


async def run_session(machine: InputStateMachine, lines: Iterable[str]) -> None:
    """Feed each character of each line to the machine as a key; a blank line is Enter."""
    status = await machine.refresh_status()
    click.echo(status.message)
    click.echo(machine.display)

    for line in lines:
        line = line.rstrip("\r\n")
        if not machine.status.ok:
            await machine.refresh_status()
        keys = [ch for ch in line if not ch.isspace()] if line.strip() else ["Enter"]
        for key in keys:
            await machine.handle_key(key)
        _echo_state(machine)


@click.command()
@click.option("--url", default=None, help="Proxy (or, with --direct, service) base URL")
@click.option(
    "--direct", is_flag=True, default=False, help="Call the computation service without the proxy"
)
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
)
def main(url: str, direct: bool, timeout: float, log_level: str) -> None:
    """Terminal calculator: type digits, + - * / . and = (or a blank line); c clears."""
    logging.basicConfig(level=log_level, format="%(levelname)s %(name)s: %(message)s")
    settings = load_settings()

    if url is None:
        url = settings.backend_url if direct else f"http://localhost:{settings.port}"
    paths = DIRECT_PATHS if direct else PROXY_PATHS

    client = CalculationClient(
        url, *paths, timeout=timeout if timeout is not None else settings.timeout
    )
    machine = InputStateMachine(client)
    asyncio.run(run_session(machine, click.get_text_stream("stdin")))


if __name__ == "__main__":  # pragma: no cover
    main()
