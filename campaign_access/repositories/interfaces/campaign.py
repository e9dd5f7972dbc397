from abc import ABC, abstractmethod
from typing import List, Optional
from campaign_access.database import models

class ICampaignRepository(ABC):
    @abstractmethod
    def create(self, campaign_model: models.Campaign) -> models.Campaign:
        """새로운 캠페인을 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, campaign_id: str) -> Optional[models.Campaign]:
        """고유 ID로 특정 캠페인을 조회합니다."""
        pass

    @abstractmethod
    def list_for_user(self, user_id: str) -> List[models.Campaign]:
        """사용자가 소유했거나 멤버로 참여 중인 캠페인 목록을 조회합니다."""
        pass

    @abstractmethod
    def update(self, campaign: models.Campaign) -> models.Campaign:
        """변경된 캠페인 정보를 저장합니다."""
        pass

    @abstractmethod
    def delete(self, campaign: models.Campaign) -> bool:
        """캠페인을 삭제합니다. 소속된 멤버십(CampaignRole)도 함께 삭제됩니다."""
        pass
