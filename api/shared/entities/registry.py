"""Entity registry to ensure SQLAlchemy loads all table metadata.

Import all entity modules here so Alembic and `create_all` can discover them.
"""
# Import base first to expose BaseEntity.metadata
from api.shared.entities.base import BaseEntity  # noqa: F401

# Feature: Users
from api.features.users.entities.user import User  # noqa: F401

# Feature: Events
from api.features.events.entities.event import Event  # noqa: F401

# Feature: Participants
from api.features.participants.entities.participant import Participant  # noqa: F401
