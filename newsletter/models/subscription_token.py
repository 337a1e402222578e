"""Confirmation token model."""

import uuid

from sqlmodel import Field, SQLModel


class SubscriptionToken(SQLModel, table=True):
    __tablename__ = "subscription_tokens"

    subscription_token: str = Field(primary_key=True, nullable=False)
    subscriber_id: uuid.UUID = Field(foreign_key="subscriptions.id", nullable=False)
