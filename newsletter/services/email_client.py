"""
Email API client.

Sends transactional email through a third-party HTTP API: one POST per
message, JSON body, server token in a request header. No retries; any
failure is reported to the caller as ``EmailDeliveryError``.
"""

from __future__ import annotations

import httpx
import structlog
from pydantic import SecretStr

from newsletter.core.errors import EmailDeliveryError
from newsletter.schemas.email import SendEmailRequest

log = structlog.get_logger()

AUTH_HEADER = "X-Email-Server-Token"


class EmailClient:
    """Thin wrapper around an ``httpx.AsyncClient`` bound to the email API."""

    def __init__(
        self,
        base_url: str,
        sender: str,
        authorization_token: SecretStr,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._sender = sender
        self._authorization_token = authorization_token
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @property
    def sender(self) -> str:
        return self._sender

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send_email(
        self,
        recipient: str,
        subject: str,
        html_content: str,
        text_content: str,
    ) -> None:
        body = SendEmailRequest(
            sender=self._sender,
            recipient=recipient,
            subject=subject,
            html_body=html_content,
            text_body=text_content,
        )
        try:
            resp = await self._client.post(
                f"{self._base_url}/email",
                json=body.model_dump(by_alias=True),
                headers={AUTH_HEADER: self._authorization_token.get_secret_value()},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log.error("email.rejected", status=exc.response.status_code)
            raise EmailDeliveryError(
                f"Email API responded with status {exc.response.status_code}"
            ) from exc
        except httpx.TimeoutException as exc:
            log.error("email.timeout", base_url=self._base_url)
            raise EmailDeliveryError("Timed out waiting for the email API") from exc
        except httpx.HTTPError as exc:
            log.error("email.unreachable", base_url=self._base_url, error=str(exc))
            raise EmailDeliveryError("Failed to reach the email API") from exc

        log.info("email.sent", status=resp.status_code)
