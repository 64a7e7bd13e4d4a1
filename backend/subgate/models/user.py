from sqlalchemy import Column, String, Boolean, DateTime, func
from subgate.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, comment="ClerkユーザーID")
    email = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=True)
    is_subscribed = Column(Boolean, nullable=False, default=False)
    subscription_ends = Column(DateTime, nullable=True, comment="購読期限 (UTC)")
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
