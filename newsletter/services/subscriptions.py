"""
Subscription service: signup and confirmation workflows.

Signup: validate, insert the subscriber, store its confirmation token, commit,
then email the confirmation link. The subscriber insert and the token insert
share one transaction; the email is only sent after the commit.
"""

from __future__ import annotations

import secrets
import string
import uuid
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from newsletter.core.errors import StorageError, UnknownTokenError
from newsletter.domain.subscriber import NewSubscriber
from newsletter.models.subscriber import Subscriber
from newsletter.models.subscription_token import SubscriptionToken
from newsletter.schemas.subscriptions import SubscriptionStatus
from newsletter.services.email_client import EmailClient

log = structlog.get_logger()

TOKEN_LENGTH = 25
TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_subscription_token() -> str:
    """25 characters drawn uniformly from ``[A-Za-z0-9]``."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))


def confirmation_link(base_url: str, subscription_token: str) -> str:
    return f"{base_url}/subscriptions/confirm?subscription_token={subscription_token}"


async def insert_subscriber(new_subscriber: NewSubscriber, session: AsyncSession) -> uuid.UUID:
    subscriber = Subscriber(
        email=new_subscriber.email,
        name=new_subscriber.name,
        status=SubscriptionStatus.PENDING_CONFIRMATION.value,
    )
    session.add(subscriber)
    try:
        await session.flush()
    except SQLAlchemyError as exc:
        raise StorageError("Failed to insert new subscriber in the database.") from exc
    return subscriber.id


async def store_token(
    subscriber_id: uuid.UUID, subscription_token: str, session: AsyncSession
) -> None:
    session.add(
        SubscriptionToken(subscription_token=subscription_token, subscriber_id=subscriber_id)
    )
    try:
        await session.flush()
    except SQLAlchemyError as exc:
        raise StorageError(
            "Failed to store the confirmation token for a new subscriber."
        ) from exc


async def send_confirmation_email(
    email_client: EmailClient,
    new_subscriber: NewSubscriber,
    base_url: str,
    subscription_token: str,
) -> None:
    link = confirmation_link(base_url, subscription_token)
    await email_client.send_email(
        new_subscriber.email,
        "Welcome!",
        (
            "Welcome to our newsletter!<br />"
            f'Click <a href="{link}">here</a> to confirm your subscription.'
        ),
        f"Welcome to our newsletter!\nVisit {link} to confirm your subscription.",
    )


async def subscribe(
    new_subscriber: NewSubscriber,
    session: AsyncSession,
    email_client: EmailClient,
    base_url: str,
) -> uuid.UUID:
    """Persist a pending subscriber and send the confirmation email.

    Returns the new subscriber id.
    """
    structlog.contextvars.bind_contextvars(
        subscriber_email=new_subscriber.email,
        subscriber_name=new_subscriber.name,
    )

    subscriber_id = await insert_subscriber(new_subscriber, session)
    subscription_token = generate_subscription_token()
    await store_token(subscriber_id, subscription_token, session)
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        raise StorageError(
            "Failed to commit SQL transaction to store a new subscriber."
        ) from exc
    log.info("subscription.created", subscriber_id=str(subscriber_id))

    # Past this point the subscriber stays pending if the email fails.
    await send_confirmation_email(email_client, new_subscriber, base_url, subscription_token)
    return subscriber_id


async def get_subscriber_id_from_token(
    subscription_token: str, session: AsyncSession
) -> Optional[uuid.UUID]:
    try:
        result = await session.execute(
            select(SubscriptionToken.subscriber_id).where(
                SubscriptionToken.subscription_token == subscription_token
            )
        )
    except SQLAlchemyError as exc:
        raise StorageError("Failed to look up the confirmation token.") from exc
    return result.scalar_one_or_none()


async def confirm_subscriber(subscriber_id: uuid.UUID, session: AsyncSession) -> None:
    try:
        await session.execute(
            update(Subscriber)
            .where(Subscriber.id == subscriber_id)
            .values(status=SubscriptionStatus.CONFIRMED.value)
        )
        await session.commit()
    except SQLAlchemyError as exc:
        raise StorageError("Failed to update confirmation status in the database.") from exc


async def confirm_subscription(subscription_token: str, session: AsyncSession) -> uuid.UUID:
    """Mark the subscriber owning ``subscription_token`` as confirmed.

    Confirming an already confirmed subscriber is a no-op that still succeeds.
    """
    subscriber_id = await get_subscriber_id_from_token(subscription_token, session)
    if subscriber_id is None:
        raise UnknownTokenError("No subscriber is associated with the provided token.")

    await confirm_subscriber(subscriber_id, session)
    log.info("subscription.confirmed", subscriber_id=str(subscriber_id))
    return subscriber_id
