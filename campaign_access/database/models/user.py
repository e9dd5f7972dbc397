import uuid
from sqlalchemy import Column, String, DateTime, func
from sqlalchemy.orm import relationship
from ..database import Base

class User(Base):
    """
    시스템에 로그인하고 캠페인을 소유하거나 참여할 수 있는 사용자를 나타냅니다.
    하나의 사용자는 여러 캠페인에 서로 다른 역할(CampaignRole)로 소속될 수 있습니다.
    """
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    owned_campaigns = relationship("Campaign", back_populates="owner", cascade="all, delete-orphan")
    campaign_roles = relationship("CampaignRole", back_populates="user", cascade="all, delete-orphan")
