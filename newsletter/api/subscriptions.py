"""
Subscription API endpoints.

POST /subscriptions           Sign up (form-urlencoded: name, email)
GET  /subscriptions/confirm   Confirm a pending subscription (?subscription_token=)
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form, Response
from sqlalchemy.ext.asyncio import AsyncSession

from newsletter.core.context import AppContext, get_context
from newsletter.core.database import get_session
from newsletter.core.errors import MissingParameterError
from newsletter.domain.subscriber import NewSubscriber
from newsletter.services import subscriptions as subscription_service

router = APIRouter()


@router.post("")
async def subscribe(
    name: Annotated[Optional[str], Form()] = None,
    email: Annotated[Optional[str], Form()] = None,
    context: AppContext = Depends(get_context),
    session: AsyncSession = Depends(get_session),
):
    """Register a pending subscriber and email them a confirmation link."""
    if name is None or email is None:
        raise MissingParameterError("Both 'name' and 'email' form fields are required.")
    new_subscriber = NewSubscriber.parse(email=email, name=name)
    await subscription_service.subscribe(
        new_subscriber, session, context.email_client, context.base_url
    )
    return Response(status_code=200)


@router.get("/confirm")
async def confirm(
    subscription_token: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    """Confirm the subscription associated with ``subscription_token``."""
    if not subscription_token:
        raise MissingParameterError("The 'subscription_token' query parameter is required.")
    await subscription_service.confirm_subscription(subscription_token, session)
    return Response(status_code=200)
