import enum
import uuid
from sqlalchemy import Column, String, DateTime, Enum
from sqlalchemy.sql import func
from app.core.database import Base


class Role(str, enum.Enum):
    CLIENT = "client"
    VENDOR = "vendor"
    ADMIN = "admin"


def generate_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """
    User model representing marketplace accounts.

    Stores authentication credentials, the account role and, for vendors,
    the contact number buyers reach them on. Passwords are stored as
    bcrypt hashes only.
    """
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    # Email is the login key - unique and indexed
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(
        Enum(Role, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.CLIENT,
    )
    # Only set for vendors
    whatsapp_number = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
