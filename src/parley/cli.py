"""Command line entry point."""

from __future__ import annotations

import asyncio

import typer
from loguru import logger

from parley.config import Settings, load_settings
from parley.consumer import StreamConsumer
from parley.errors import ConfigError
from parley.generation import OpenAIGenerator
from parley.handlers import ChatHandler
from parley.history import HistoryLoader
from parley.logging_utils import configure_logging
from parley.network import build_network_factory
from parley.session import SessionManager
from parley.supervisor import ReconnectSupervisor, SupervisorState

app = typer.Typer(name="parley", help="Answer messages addressed to one identity.", add_completion=False)


@app.callback()
def main() -> None:
    """Parley command line."""


def build_supervisor(settings: Settings) -> ReconnectSupervisor:
    sessions = SessionManager(
        build_network_factory(settings),
        connect_timeout_seconds=settings.connect_timeout_seconds,
    )
    history = HistoryLoader(limit=settings.history_limit, timeout_seconds=settings.fetch_timeout_seconds)
    consumer = StreamConsumer(history, history_failure_policy=settings.history_failure_policy)
    return ReconnectSupervisor(
        sessions,
        consumer,
        key=settings.key,
        env=settings.env,
        retry_delay_seconds=settings.retry_delay_seconds,
    )


async def _run(settings: Settings) -> SupervisorState:
    handler = ChatHandler(OpenAIGenerator.from_settings(settings), system_prompt=settings.system_prompt)
    supervisor = build_supervisor(settings)
    return await supervisor.supervise(handler, settings.max_retries)


@app.command()
def run(
    network: str | None = typer.Option(None, "--network", help="Network plugin name, overrides PARLEY_NETWORK"),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level, overrides PARLEY_LOG_LEVEL"),
) -> None:
    """Consume the message stream until it ends or reconnects are exhausted."""

    settings = load_settings(network=network, log_level=log_level)
    configure_logging(profile=settings.log_profile, level=settings.log_level)

    try:
        state = asyncio.run(_run(settings))
    except ConfigError as exc:
        logger.error("parley.config.error {}", exc)
        raise typer.Exit(1) from exc
    except KeyboardInterrupt:
        logger.info("parley.interrupted")
        return
    if state is SupervisorState.FATAL:
        raise typer.Exit(1)

