"""ORM model registry: import all models so Alembic autogenerate discovers them."""

from outreach_api.models.address import UserAddress
from outreach_api.models.outreach_request import OutreachRequest
from outreach_api.models.prayer import Prayer
from outreach_api.models.representative import Representative
from outreach_api.models.user import User
from outreach_api.models.user_representative import UserRepresentative

__all__ = [
    "OutreachRequest",
    "Prayer",
    "Representative",
    "User",
    "UserAddress",
    "UserRepresentative",
]
