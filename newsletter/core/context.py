"""
Application context.

Everything a request handler needs beyond the request itself is built once at
startup and held in one ``AppContext`` on ``app.state.context``.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import sessionmaker

from newsletter.core.config import Settings
from newsletter.core.database import create_engine, create_session_factory
from newsletter.core.errors import ConfigurationError, SubscriberValidationError
from newsletter.services.email_client import EmailClient


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: sessionmaker
    email_client: EmailClient
    base_url: str

    async def aclose(self) -> None:
        await self.email_client.aclose()
        await self.engine.dispose()


def build_context(
    settings: Settings,
    email_transport: httpx.AsyncBaseTransport | None = None,
) -> AppContext:
    """Build the shared context. ``email_transport`` replaces the network in tests."""
    try:
        sender = settings.email_client.sender()
    except SubscriberValidationError as exc:
        raise ConfigurationError(f"Invalid sender email: {exc.message}") from exc

    engine = create_engine(settings.sqlalchemy_url())
    email_client = EmailClient(
        settings.email_client.base_url,
        sender,
        settings.email_client.authorization_token,
        timeout=settings.email_client.timeout(),
        transport=email_transport,
    )
    return AppContext(
        settings=settings,
        engine=engine,
        session_factory=create_session_factory(engine),
        email_client=email_client,
        base_url=settings.application.base_url.rstrip("/"),
    )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the shared application context."""
    return request.app.state.context
