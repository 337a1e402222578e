"""
Shared fixtures.

Logging is configured once per test session. Each test that needs the
application gets its own SQLite database and its own mock email API.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest
from sqlalchemy import text

from newsletter.core.config import Settings
from newsletter.core.context import AppContext, build_context
from newsletter.core.database import init_db
from newsletter.core.logging import configure_logging
from newsletter.main import create_app

BASE_URL = "http://test"
EMAIL_API_URL = "http://email.test"
EMAIL_API_TOKEN = "test-email-token"

_LINK = re.compile(r"https?://[^\s\"'<>]+")

# Settings read the repository configuration regardless of the working directory.
os.environ.setdefault(
    "APP_CONFIGURATION_DIR", str(Path(__file__).resolve().parent.parent / "configuration")
)


@pytest.fixture(scope="session", autouse=True)
def logging_setup():
    """Log to stderr when TEST_LOG is set, otherwise discard."""
    if os.environ.get("TEST_LOG"):
        yield configure_logging("newsletter-test", "debug", "text")
        return
    with open(os.devnull, "w") as sink:
        yield configure_logging("newsletter-test", "info", "json", stream=sink)


class MockEmailServer:
    """Records every request sent to the email API and answers with ``status_code``."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.error: Optional[Callable[[httpx.Request], Exception]] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error(request)
        return httpx.Response(self.status_code)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def json_bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


@dataclass
class ConfirmationLinks:
    html: str
    plain_text: str


def first_link(body: str) -> str:
    links = _LINK.findall(body)
    assert len(links) == 1, f"expected exactly one link in {body!r}"
    return links[0]


@dataclass
class NewsletterApp:
    client: httpx.AsyncClient
    context: AppContext
    email_server: MockEmailServer

    async def post_subscriptions(self, body: str) -> httpx.Response:
        return await self.client.post(
            "/subscriptions",
            content=body,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    def confirmation_links(self, email_request: httpx.Request) -> ConfirmationLinks:
        body = json.loads(email_request.content)
        return ConfirmationLinks(
            html=first_link(body["HtmlBody"]),
            plain_text=first_link(body["TextBody"]),
        )

    async def fetch_subscriptions(self) -> list[dict]:
        async with self.context.session_factory() as session:
            result = await session.execute(
                text("SELECT email, name, status FROM subscriptions")
            )
            return [dict(row) for row in result.mappings().all()]

    async def execute(self, statement: str) -> None:
        async with self.context.engine.begin() as conn:
            await conn.execute(text(statement))


def make_settings(tmp_path) -> Settings:
    values = dict(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'newsletter.db'}",
        application={"base_url": BASE_URL},
        email_client={
            "base_url": EMAIL_API_URL,
            "sender_email": "newsletter@example.com",
            "authorization_token": EMAIL_API_TOKEN,
            "timeout_milliseconds": 200,
        },
    )
    return Settings(**values)


@pytest.fixture
async def newsletter_app(tmp_path):
    email_server = MockEmailServer()
    context = build_context(make_settings(tmp_path), email_transport=email_server.transport)
    await init_db(context.engine)
    app = create_app(context=context)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL) as client:
        yield NewsletterApp(client=client, context=context, email_server=email_server)
    await context.aclose()
