import logging
from typing import Dict, Any, List, Optional

from campaign_access.database import models
from campaign_access.domain.permissions import Permission
from campaign_access.repositories.interfaces import ICampaignRepository
from campaign_access.services.exceptions import (
    CampaignAccessDeniedError, CampaignNotFoundError, TokenInvalidError
)
from campaign_access.services.permission_service import PermissionService

logger = logging.getLogger(__name__)

VISIBILITIES = ("private", "public")


class CampaignService:
    """캠페인 생성, 조회, 수정, 삭제를 제공합니다. 모든 변경은 권한 평가기를 통과해야 합니다."""

    def __init__(self, campaign_repo: ICampaignRepository, permission_service: PermissionService):
        self.campaign_repo = campaign_repo
        self.permissions = permission_service

    @staticmethod
    def _to_dict(campaign: models.Campaign) -> Dict[str, Any]:
        return {
            "id": campaign.id,
            "name": campaign.name,
            "description": campaign.description,
            "visibility": campaign.visibility,
            "owner_id": campaign.owner_id,
        }

    def _get_or_raise(self, campaign_id: str) -> models.Campaign:
        campaign = self.campaign_repo.find_by_id(campaign_id)
        if not campaign:
            raise CampaignNotFoundError(f"Campaign with id '{campaign_id}' not found.")
        return campaign

    def create_campaign(self, owner_id: str, name: str, description: Optional[str] = None, visibility: str = "private") -> Dict[str, Any]:
        """
        새로운 캠페인을 생성합니다. 요청한 사용자가 소유자가 되며, 소유자에게는 역할 행을 만들지 않습니다.

        Raises:
            TokenInvalidError: 사용자 ID가 없을 때.
            ValueError: 이름이 비어 있거나 공개 범위 값이 잘못되었을 때.
        """
        if not owner_id:
            raise TokenInvalidError("Authentication required.")
        if not name or not name.strip():
            raise ValueError("Campaign name is required.")
        if visibility not in VISIBILITIES:
            raise ValueError(f"Visibility must be one of {', '.join(VISIBILITIES)}.")

        campaign = self.campaign_repo.create(
            models.Campaign(name=name.strip(), description=description, visibility=visibility, owner_id=owner_id)
        )
        logger.info("User %s created campaign %s", owner_id, campaign.id)
        return self._to_dict(campaign)

    def get_campaign(self, campaign_id: str, acting_user_id: str) -> Dict[str, Any]:
        """
        캠페인을 조회합니다. 공개 캠페인은 인증된 사용자 누구나, 비공개 캠페인은 read 권한이 있어야 조회할 수 있습니다.
        """
        if not acting_user_id:
            raise TokenInvalidError("Authentication required.")
        campaign = self._get_or_raise(campaign_id)
        if campaign.visibility != "public":
            self.permissions.require_campaign_access(campaign_id, acting_user_id, Permission.READ)
        return self._to_dict(campaign)

    def list_campaigns(self, acting_user_id: str) -> List[Dict[str, Any]]:
        """사용자가 소유했거나 참여 중인 캠페인 목록을 조회합니다."""
        if not acting_user_id:
            raise TokenInvalidError("Authentication required.")
        return [self._to_dict(c) for c in self.campaign_repo.list_for_user(acting_user_id)]

    def update_campaign(self, campaign_id: str, acting_user_id: str, name: str = None, description: str = None, visibility: str = None) -> Dict[str, Any]:
        """
        캠페인 정보를 수정합니다. edit 권한이 필요합니다.

        Raises:
            CampaignAccessDeniedError: edit 권한이 없을 때.
        """
        self.permissions.require_campaign_access(campaign_id, acting_user_id, Permission.EDIT)
        campaign = self._get_or_raise(campaign_id)

        if name is not None:
            if not name.strip():
                raise ValueError("Campaign name is required.")
            campaign.name = name.strip()
        if description is not None:
            campaign.description = description
        if visibility is not None:
            if visibility not in VISIBILITIES:
                raise ValueError(f"Visibility must be one of {', '.join(VISIBILITIES)}.")
            campaign.visibility = visibility

        return self._to_dict(self.campaign_repo.update(campaign))

    def delete_campaign(self, campaign_id: str, acting_user_id: str) -> bool:
        """
        캠페인을 삭제합니다. 소유자만 삭제할 수 있으며, 모든 멤버십도 함께 삭제됩니다.

        Raises:
            CampaignNotFoundError: 캠페인이 존재하지 않을 때.
            CampaignAccessDeniedError: 요청자가 소유자가 아닐 때.
        """
        if not acting_user_id:
            raise TokenInvalidError("Authentication required.")
        campaign = self._get_or_raise(campaign_id)
        if not self.permissions.is_campaign_owner(campaign.id, acting_user_id):
            raise CampaignAccessDeniedError("Forbidden: Only the campaign owner can delete the campaign")
        self.campaign_repo.delete(campaign)
        logger.info("User %s deleted campaign %s", acting_user_id, campaign_id)
        return True
