"""Notify Gateway — Application Entry Point.

Startup sequence:
  1. Load configuration (.env + config/settings.yaml)
  2. Build providers: Resend + Novu, or in-memory recorders in dry-run
  3. Build the dispatcher and the web application
  4. Serve until interrupted, then close provider connections

Usage:
    python -m notify_gateway.main
    python scripts/run.py
"""

from __future__ import annotations

from aiohttp import web

from notify_gateway.api.app import create_app
from notify_gateway.config import AppConfig, load_config
from notify_gateway.dispatch.dispatcher import NotificationDispatcher
from notify_gateway.dispatch.push_tokens import PushTokenRegistry
from notify_gateway.providers.base import EmailSender, WorkflowTrigger
from notify_gateway.providers.memory import InMemoryEmailSender, InMemoryWorkflowClient
from notify_gateway.providers.novu_client import NovuWorkflowClient
from notify_gateway.providers.resend_client import ResendEmailSender
from notify_gateway.utils.logger import get_logger, set_level

logger = get_logger(__name__)


def build_providers(config: AppConfig) -> tuple[EmailSender, WorkflowTrigger]:
    """Create the provider pair for this configuration.

    Args:
        config: Loaded application configuration.

    Returns:
        (email sender, workflow trigger). In dry-run mode both are
        in-memory recorders and nothing leaves the process.
    """
    if config.dry_run:
        logger.warning("DRY RUN: notifications are recorded, not delivered")
        return InMemoryEmailSender(), InMemoryWorkflowClient()
    return ResendEmailSender(config.email), NovuWorkflowClient(config.workflow)


def build_app(config: AppConfig) -> web.Application:
    """Wire providers, dispatcher and routes into a web application."""
    email_sender, workflow = build_providers(config)
    dispatcher = NotificationDispatcher.from_config(config, email_sender, workflow)
    app = create_app(config, dispatcher, PushTokenRegistry())

    async def _close_providers(_app: web.Application) -> None:
        for provider in (email_sender, workflow):
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
        logger.info("Provider connections closed")

    app.on_cleanup.append(_close_providers)
    return app


def main() -> None:
    """Application entry point."""
    logger.info("═══ Loading configuration ═══")
    config = load_config()
    set_level(config.log_level)

    logger.info("═══ Initializing components ═══")
    app = build_app(config)

    logger.info(
        "═══ Serving on http://%s:%d ═══", config.server.host, config.server.port,
    )
    web.run_app(
        app,
        host=config.server.host,
        port=config.server.port,
        print=None,
    )
    logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
