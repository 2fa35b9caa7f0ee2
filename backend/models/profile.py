# backend/models/profile.py
import uuid

from sqlalchemy import Column, String, JSON
from database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


# Storefront profile linked 1:1 with an identity-provider account by email.
# The role mirrors identity group membership and is refreshed on every sync.
class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(String(32), primary_key=True, default=_new_id)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")

    # Serialized list of Address
    addresses = Column(JSON, nullable=False, default=list)
