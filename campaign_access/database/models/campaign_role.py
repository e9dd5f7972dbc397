import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from ..database import Base

class CampaignRole(Base):
    """
    소유자가 아닌 사용자에게 부여된 캠페인 멤버십과 역할입니다.
    (campaign_id, user_id) 쌍마다 최대 하나의 행만 존재할 수 있습니다.
    """
    __tablename__ = "campaign_roles"
    __table_args__ = (
        UniqueConstraint("campaign_id", "user_id", name="uq_campaign_roles_campaign_user"),
    )
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    campaign_id = Column(String, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    campaign = relationship("Campaign", back_populates="campaign_roles")
    user = relationship("User", back_populates="campaign_roles")
