import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from ..database import Base

class Campaign(Base):
    """
    모든 RPG 콘텐츠(캐릭터, 노트, 지도 등)를 담는 최상위 컨테이너입니다.
    정확히 한 명의 소유자(owner)를 가지며, 소유자는 CampaignRole 행과 무관하게
    항상 모든 권한을 가집니다.
    """
    __tablename__ = "campaigns"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    visibility = Column(String, nullable=False, default="private")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owner_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    owner = relationship("User", back_populates="owned_campaigns")
    campaign_roles = relationship("CampaignRole", back_populates="campaign", cascade="all, delete-orphan")
