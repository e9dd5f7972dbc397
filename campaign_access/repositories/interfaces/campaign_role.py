from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import List, Optional
from campaign_access.database import models

class ICampaignRoleRepository(ABC):
    """
    (캠페인, 사용자) -> 역할 매핑을 저장하는 Role Store 계약입니다.
    (campaign_id, user_id) 쌍마다 최대 하나의 CampaignRole 행만 존재함을 보장해야 합니다.
    """

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """
        블록 안의 모든 호출을 하나의 트랜잭션으로 묶습니다.
        블록이 정상 종료되면 커밋하고, 예외가 발생하면 롤백한 뒤 예외를 다시 던집니다.
        """
        pass

    @abstractmethod
    def find_role(self, campaign_id: str, user_id: str) -> Optional[models.CampaignRole]:
        """(캠페인, 사용자) 쌍의 역할 행을 조회합니다. 없으면 None."""
        pass

    @abstractmethod
    def create_role(self, campaign_id: str, user_id: str, role) -> models.CampaignRole:
        """새 역할 행을 생성합니다. 이미 행이 존재하는지는 호출자가 확인합니다. 알 수 없는 역할은 InvalidRoleError."""
        pass

    @abstractmethod
    def upsert_role(self, campaign_id: str, user_id: str, role) -> models.CampaignRole:
        """역할 행이 있으면 역할을 교체하고, 없으면 새로 생성합니다. 중복 행을 만들지 않으며, 알 수 없는 역할은 InvalidRoleError."""
        pass

    @abstractmethod
    def delete_role(self, campaign_id: str, user_id: str) -> bool:
        """역할 행을 삭제합니다. 삭제된 행이 있으면 True, 없으면 False."""
        pass

    @abstractmethod
    def find_owner_id(self, campaign_id: str, for_update: bool = False) -> Optional[str]:
        """
        캠페인 소유자의 사용자 ID를 조회합니다. 캠페인이 없으면 None.

        Args:
            campaign_id: 조회할 캠페인의 ID.
            for_update: True이면 트랜잭션이 끝날 때까지 캠페인 행을 잠급니다.
        """
        pass

    @abstractmethod
    def list_by_campaign(self, campaign_id: str) -> List[models.CampaignRole]:
        """
        캠페인의 모든 역할 행을 사용자 정보와 함께 조회합니다.
        admin 역할이 먼저, 그다음 가입 순서대로 정렬됩니다.
        """
        pass
