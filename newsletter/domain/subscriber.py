"""
Subscriber input validation.

Names and emails arrive as raw form strings. Nothing is written to the
database until both have been parsed into a ``NewSubscriber``.
"""

from __future__ import annotations

import regex
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel

from newsletter.core.errors import SubscriberValidationError

MAX_NAME_LENGTH = 256  # grapheme clusters
FORBIDDEN_NAME_CHARACTERS = frozenset('/()"<>\\{}')

_GRAPHEME = regex.compile(r"\X")


def grapheme_length(value: str) -> int:
    """Number of user-perceived characters (extended grapheme clusters)."""
    return len(_GRAPHEME.findall(value))


def parse_subscriber_name(value: str) -> str:
    """Return ``value`` unchanged if it is an acceptable display name."""
    if not value.strip():
        raise SubscriberValidationError(f"{value!r} is not a valid subscriber name: it is empty.")
    if grapheme_length(value) > MAX_NAME_LENGTH:
        raise SubscriberValidationError(
            f"Subscriber name is longer than {MAX_NAME_LENGTH} characters."
        )
    if any(ch in FORBIDDEN_NAME_CHARACTERS for ch in value):
        raise SubscriberValidationError(
            f"{value!r} is not a valid subscriber name: it contains forbidden characters."
        )
    return value


def parse_subscriber_email(value: str) -> str:
    """Return ``value`` unchanged if it is a syntactically valid address.

    Deliverability (DNS) is not checked.
    """
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise SubscriberValidationError(f"{value!r} is not a valid subscriber email: {exc}") from None
    return value


class NewSubscriber(BaseModel):
    """A validated signup, ready to be persisted."""

    email: str
    name: str

    @classmethod
    def parse(cls, *, email: str, name: str) -> "NewSubscriber":
        # Name is checked first so an empty form reports the name problem.
        return cls(
            name=parse_subscriber_name(name),
            email=parse_subscriber_email(email),
        )
