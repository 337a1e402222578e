"""Subscriber model."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from newsletter.schemas.subscriptions import SubscriptionStatus

from .base import UUIDMixin, utcnow


class Subscriber(UUIDMixin, SQLModel, table=True):
    __tablename__ = "subscriptions"

    email: str = Field(nullable=False, unique=True)
    name: str = Field(nullable=False)
    subscribed_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
    status: str = Field(
        default=SubscriptionStatus.PENDING_CONFIRMATION.value,
        nullable=False,
    )  # pending_confirmation | confirmed
