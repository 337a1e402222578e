"""Subscription schemas."""

from enum import Enum


class SubscriptionStatus(str, Enum):
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"
