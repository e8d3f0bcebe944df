"""
Profile schemas

Profiles are owned by Supabase Auth; these tools only read them or upsert
rows keyed by the auth user id.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    EDITOR = "editor"
    AUTHOR = "author"
    SUBSCRIBER = "subscriber"
    PREMIUM_SUBSCRIBER = "premium_subscriber"


class Profile(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: UserRole = UserRole.USER
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")
