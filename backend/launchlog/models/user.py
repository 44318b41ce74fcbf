from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from launchlog.core.database import Base


class User(Base):
    """
    Registered LaunchLog account.

    Passwords are stored as bcrypt hashes (never plaintext).
    """
    __tablename__ = "users"

    # uuid4 hex, generated by the store so both backends share one id format
    id = Column(String(32), primary_key=True, index=True)
    # Email is unique and indexed for fast lookups during login
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
