# SQLModel definitions, imported here to ensure metadata is populated for Alembic.
from .base import UUIDMixin  # noqa: F401
from .subscriber import Subscriber  # noqa: F401
from .subscription_token import SubscriptionToken  # noqa: F401
