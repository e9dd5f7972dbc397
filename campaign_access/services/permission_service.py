import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional

from campaign_access.domain.permissions import (
    ALL_PERMISSIONS, Permission, RoleLevel, permissions_for_role
)
from campaign_access.repositories.interfaces import ICampaignRoleRepository
from campaign_access.services.exceptions import (
    CampaignAccessDeniedError, CampaignNotFoundError, InvalidRoleError, TokenInvalidError
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CampaignPermissions:
    """한 사용자가 한 캠페인에서 가지는 유효 권한입니다."""
    is_owner: bool
    is_admin: bool
    role: Optional[RoleLevel]
    permissions: FrozenSet[Permission]

    def to_dict(self):
        return {
            "is_owner": self.is_owner,
            "is_admin": self.is_admin,
            "role": self.role.value if self.role else None,
            "permissions": sorted(p.value for p in self.permissions),
        }


def _require_id(value, name: str):
    if not value or not str(value).strip():
        raise ValueError(f"'{name}' must be a non-empty identifier.")


class PermissionService:
    """
    "사용자 U가 캠페인 X에서 권한 C를 행사할 수 있는가?"에 답하는 권한 평가기입니다.

    판단 순서:
        1. 캠페인 소유자이면 무조건 허용 (소유자 우회).
        2. (캠페인, 사용자)의 역할 행이 없으면 거부.
        3. 역할에 매핑된 정적 권한 집합에 포함되는지로 결정.

    모든 조회는 읽기 전용이며 부수 효과가 없습니다. 사용자 ID는 호출자가 명시적으로 전달합니다.
    """

    def __init__(self, role_repo: ICampaignRoleRepository):
        self.role_repo = role_repo

    def _stored_role(self, campaign_id: str, user_id: str) -> Optional[RoleLevel]:
        # 알 수 없는 역할 문자열이 저장되어 있으면 역할이 없는 것으로 취급합니다.
        campaign_role = self.role_repo.find_role(campaign_id, user_id)
        if campaign_role is None:
            return None
        try:
            return RoleLevel.parse(campaign_role.role)
        except InvalidRoleError:
            logger.warning("Ignoring unknown role '%s' for user %s in campaign %s", campaign_role.role, user_id, campaign_id)
            return None

    def _evaluate(self, campaign_id: str, user_id: str, owner_id: str) -> Optional[CampaignPermissions]:
        if owner_id == user_id:
            return CampaignPermissions(
                is_owner=True, is_admin=True, role=self._stored_role(campaign_id, user_id), permissions=ALL_PERMISSIONS
            )

        role = self._stored_role(campaign_id, user_id)
        if role is None:
            return None

        return CampaignPermissions(
            is_owner=False,
            is_admin=role == RoleLevel.ADMIN,
            role=role,
            permissions=permissions_for_role(role),
        )

    def get_campaign_permissions(self, campaign_id: str, user_id: str) -> Optional[CampaignPermissions]:
        """
        사용자의 캠페인 유효 권한을 계산합니다.

        Returns:
            CampaignPermissions. 캠페인이 없거나, 소유자도 멤버도 아니면 None.
        """
        _require_id(campaign_id, "campaign_id")
        _require_id(user_id, "user_id")

        owner_id = self.role_repo.find_owner_id(campaign_id)
        if owner_id is None:
            return None
        return self._evaluate(campaign_id, user_id, owner_id)

    def has_permission(self, campaign_id: str, user_id: str, permission) -> bool:
        """
        사용자가 캠페인에서 특정 권한을 가지는지 확인합니다.

        Args:
            campaign_id: 대상 캠페인의 ID.
            user_id: 확인할 사용자의 ID.
            permission: Permission 값 또는 그 문자열.

        Raises:
            ValueError: campaign_id 또는 user_id가 비어 있을 때.
            InvalidPermissionError: 알 수 없는 권한일 때.
        """
        permission = Permission.parse(permission)
        perms = self.get_campaign_permissions(campaign_id, user_id)
        if perms is None:
            return False
        return permission in perms.permissions

    def is_campaign_owner(self, campaign_id: str, user_id: str) -> bool:
        """캠페인 소유자인지 확인합니다. 역할 행은 보지 않습니다."""
        _require_id(campaign_id, "campaign_id")
        if not user_id:
            return False
        return self.role_repo.find_owner_id(campaign_id) == user_id

    def require_campaign_access(self, campaign_id: str, user_id: Optional[str], permission=None) -> CampaignPermissions:
        """
        캠페인 접근 권한을 강제합니다. 보호된 작업은 반드시 이 검사를 통과한 뒤에만 수행해야 합니다.

        Args:
            campaign_id: 대상 캠페인의 ID.
            user_id: 인증된 사용자 ID. 없으면 인증되지 않은 요청으로 간주합니다.
            permission: 요구하는 권한. None이면 캠페인 접근 가능 여부만 확인합니다.

        Returns:
            사용자의 CampaignPermissions.

        Raises:
            TokenInvalidError: 사용자 ID가 없을 때.
            CampaignNotFoundError: 캠페인이 존재하지 않을 때.
            CampaignAccessDeniedError: 접근 권한 또는 요구 권한이 없을 때.
        """
        if not user_id:
            raise TokenInvalidError("Authentication required.")
        _require_id(campaign_id, "campaign_id")
        _require_id(user_id, "user_id")
        if permission is not None:
            permission = Permission.parse(permission)

        owner_id = self.role_repo.find_owner_id(campaign_id)
        if owner_id is None:
            raise CampaignNotFoundError(f"Campaign with id '{campaign_id}' not found.")

        perms = self._evaluate(campaign_id, user_id, owner_id)
        if perms is None:
            logger.warning("User %s has no access to campaign %s", user_id, campaign_id)
            raise CampaignAccessDeniedError("Forbidden: No access to campaign")

        if permission is not None and permission not in perms.permissions:
            logger.warning("User %s lacks '%s' in campaign %s", user_id, permission.value, campaign_id)
            raise CampaignAccessDeniedError(f"Forbidden: Missing {permission.value} permission")

        return perms
