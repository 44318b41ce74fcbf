from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func
from launchlog.core.database import Base


class UserData(Base):
    """
    One aggregate document per owner.

    user_id is a users.id or the literal shared owner ("default"), so it is
    deliberately not a foreign key. Each list is stored whole as JSON.
    """
    __tablename__ = "user_data"

    user_id = Column(String, primary_key=True, index=True)
    timer_sessions = Column(JSON, nullable=False, default=list)
    tasks = Column(JSON, nullable=False, default=dict)
    jobs = Column(JSON, nullable=False, default=list)
    dashboard_data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
