from typing import List, Optional
from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from campaign_access.database import models
from campaign_access.repositories.interfaces import ICampaignRepository

class SqlalchemyCampaignRepository(ICampaignRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, campaign_model: models.Campaign) -> models.Campaign:
        self.db.add(campaign_model)
        self.db.commit()
        self.db.refresh(campaign_model)
        return campaign_model

    def find_by_id(self, campaign_id: str) -> Optional[models.Campaign]:
        return self.db.query(models.Campaign).filter(models.Campaign.id == campaign_id).first()

    def list_for_user(self, user_id: str) -> List[models.Campaign]:
        member_of = select(models.CampaignRole.campaign_id).where(models.CampaignRole.user_id == user_id)
        return self.db.query(models.Campaign).filter(
            or_(
                models.Campaign.owner_id == user_id,
                models.Campaign.id.in_(member_of)
            )
        ).order_by(models.Campaign.name.asc()).all()

    def update(self, campaign: models.Campaign) -> models.Campaign:
        self.db.commit()
        self.db.refresh(campaign)
        return campaign

    def delete(self, campaign: models.Campaign) -> bool:
        if campaign:
            self.db.delete(campaign)
            self.db.commit()
            return True
        return False
