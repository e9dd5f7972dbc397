from contextlib import contextmanager
from typing import List, Optional
from sqlalchemy import case
from sqlalchemy.orm import Session, joinedload
from campaign_access.database import models
from campaign_access.domain.permissions import RoleLevel
from campaign_access.repositories.interfaces import ICampaignRoleRepository

class SqlalchemyCampaignRoleRepository(ICampaignRoleRepository):
    def __init__(self, db_session: Session):
        self.db = db_session
        self._atomic_depth = 0

    @contextmanager
    def atomic(self):
        self._atomic_depth += 1
        try:
            yield self
        except Exception:
            self._atomic_depth -= 1
            if self._atomic_depth == 0:
                self.db.rollback()
            raise
        else:
            self._atomic_depth -= 1
            if self._atomic_depth == 0:
                self.db.commit()

    def _commit(self):
        # atomic() 블록 안에서는 블록이 끝날 때 한 번만 커밋합니다.
        if self._atomic_depth:
            self.db.flush()
        else:
            self.db.commit()

    def find_role(self, campaign_id: str, user_id: str) -> Optional[models.CampaignRole]:
        return self.db.query(models.CampaignRole).filter(
            models.CampaignRole.campaign_id == campaign_id,
            models.CampaignRole.user_id == user_id
        ).first()

    def create_role(self, campaign_id: str, user_id: str, role) -> models.CampaignRole:
        campaign_role = models.CampaignRole(campaign_id=campaign_id, user_id=user_id, role=RoleLevel.parse(role).value)
        self.db.add(campaign_role)
        self._commit()
        self.db.refresh(campaign_role)
        return campaign_role

    def upsert_role(self, campaign_id: str, user_id: str, role) -> models.CampaignRole:
        role = RoleLevel.parse(role).value
        campaign_role = self.find_role(campaign_id, user_id)
        if campaign_role:
            campaign_role.role = role
            self._commit()
            self.db.refresh(campaign_role)
            return campaign_role
        return self.create_role(campaign_id, user_id, role)

    def delete_role(self, campaign_id: str, user_id: str) -> bool:
        deleted = self.db.query(models.CampaignRole).filter(
            models.CampaignRole.campaign_id == campaign_id,
            models.CampaignRole.user_id == user_id
        ).delete(synchronize_session=False)
        self._commit()
        return deleted > 0

    def find_owner_id(self, campaign_id: str, for_update: bool = False) -> Optional[str]:
        query = self.db.query(models.Campaign.owner_id).filter(models.Campaign.id == campaign_id)
        if for_update:
            query = query.with_for_update()
        row = query.first()
        return row[0] if row else None

    def list_by_campaign(self, campaign_id: str) -> List[models.CampaignRole]:
        admin_first = case((models.CampaignRole.role == "admin", 0), else_=1)
        return self.db.query(models.CampaignRole).options(
            joinedload(models.CampaignRole.user)
        ).filter(
            models.CampaignRole.campaign_id == campaign_id
        ).order_by(admin_first, models.CampaignRole.created_at.asc(), models.CampaignRole.id.asc()).all()
