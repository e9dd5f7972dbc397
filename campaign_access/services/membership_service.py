import logging
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError

from campaign_access.domain.permissions import Permission, RoleLevel
from campaign_access.repositories.interfaces import ICampaignRoleRepository, IUserRepository
from campaign_access.services.exceptions import (
    CampaignNotFoundError, MemberAlreadyExistsError, MemberNotFoundError,
    OwnerRemovalForbiddenError, SelfRemovalError, UserNotFoundError
)
from campaign_access.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


class MembershipService:
    """캠페인 멤버십의 생명주기(추가, 역할 변경, 제거, 탈퇴, 조회)를 관리합니다."""

    def __init__(self, role_repo: ICampaignRoleRepository, user_repo: IUserRepository, permission_service: PermissionService):
        self.role_repo = role_repo
        self.user_repo = user_repo
        self.permissions = permission_service

    def remove_campaign_member(self, campaign_id: str, user_id: str) -> None:
        """
        캠페인에서 사용자의 역할 행을 삭제합니다.

        소유자 확인과 삭제는 하나의 트랜잭션에서 수행되며, 캠페인 행을 잠가
        확인과 삭제 사이에 소유권이 바뀌지 않도록 합니다. 멤버가 아닌 사용자를
        제거하는 것은 오류가 아닙니다. 호출자의 권한은 확인하지 않습니다.

        Raises:
            CampaignNotFoundError: 캠페인이 존재하지 않을 때.
            OwnerRemovalForbiddenError: 대상이 캠페인 소유자일 때.
        """
        with self.role_repo.atomic():
            owner_id = self.role_repo.find_owner_id(campaign_id, for_update=True)
            if owner_id is None:
                raise CampaignNotFoundError(f"Campaign with id '{campaign_id}' not found.")
            if owner_id == user_id:
                raise OwnerRemovalForbiddenError()
            deleted = self.role_repo.delete_role(campaign_id, user_id)

        if deleted:
            logger.info("Removed user %s from campaign %s", user_id, campaign_id)

    def leave_campaign(self, campaign_id: str, acting_user_id: str) -> None:
        """
        요청한 사용자가 스스로 캠페인에서 탈퇴합니다.

        Raises:
            OwnerRemovalForbiddenError: 소유자는 탈퇴할 수 없습니다. 소유권을 이전하거나 캠페인을 삭제해야 합니다.
        """
        self.remove_campaign_member(campaign_id, acting_user_id)

    def kick_member(self, campaign_id: str, acting_user_id: str, target_user_id: str) -> None:
        """
        관리 권한(members)을 가진 사용자가 다른 멤버를 제거합니다.

        Raises:
            CampaignAccessDeniedError: 요청자에게 members 권한이 없을 때.
            SelfRemovalError: 자기 자신을 대상으로 했을 때 (탈퇴 기능을 사용해야 함).
            OwnerRemovalForbiddenError: 대상이 캠페인 소유자일 때.
        """
        self.permissions.require_campaign_access(campaign_id, acting_user_id, Permission.MEMBERS)
        if acting_user_id == target_user_id:
            raise SelfRemovalError("Use the leave endpoint to leave the campaign.")
        self.remove_campaign_member(campaign_id, target_user_id)

    def add_campaign_member(self, campaign_id: str, acting_user_id: str, email: str, role=RoleLevel.MEMBER) -> Dict[str, Any]:
        """
        이메일로 사용자를 찾아 캠페인 멤버로 추가합니다.

        Raises:
            CampaignAccessDeniedError: 요청자에게 members 권한이 없을 때.
            UserNotFoundError: 해당 이메일의 사용자가 없을 때.
            MemberAlreadyExistsError: 대상이 소유자이거나 이미 멤버일 때.
        """
        role = RoleLevel.parse(role)
        self.permissions.require_campaign_access(campaign_id, acting_user_id, Permission.MEMBERS)

        user = self.user_repo.find_by_email(email)
        if not user:
            raise UserNotFoundError("User not found. They must register first.")

        try:
            with self.role_repo.atomic():
                if self.role_repo.find_owner_id(campaign_id) == user.id:
                    raise MemberAlreadyExistsError("Campaign owner is already a member.")
                if self.role_repo.find_role(campaign_id, user.id):
                    raise MemberAlreadyExistsError("User is already a member of this campaign.")
                campaign_role = self.role_repo.create_role(campaign_id, user.id, role.value)
        except IntegrityError:
            # 동시에 들어온 추가 요청이 먼저 행을 만든 경우 (유니크 제약 위반)
            raise MemberAlreadyExistsError("User is already a member of this campaign.") from None

        logger.info("Added user %s to campaign %s as %s", user.id, campaign_id, role.value)
        return self._member_dict(campaign_role, user)

    def update_campaign_member(self, campaign_id: str, acting_user_id: str, target_user_id: str, role) -> Dict[str, Any]:
        """
        기존 멤버의 역할을 변경합니다.

        Raises:
            CampaignAccessDeniedError: 요청자에게 members 권한이 없을 때.
            MemberAlreadyExistsError: 대상이 소유자일 때 (소유자에게는 역할을 부여하지 않음).
            MemberNotFoundError: 대상이 캠페인 멤버가 아닐 때.
        """
        role = RoleLevel.parse(role)
        self.permissions.require_campaign_access(campaign_id, acting_user_id, Permission.MEMBERS)

        with self.role_repo.atomic():
            if self.role_repo.find_owner_id(campaign_id) == target_user_id:
                raise MemberAlreadyExistsError("Campaign owner cannot be assigned a role.")
            if not self.role_repo.find_role(campaign_id, target_user_id):
                raise MemberNotFoundError(f"User '{target_user_id}' is not a member of this campaign.")
            campaign_role = self.role_repo.upsert_role(campaign_id, target_user_id, role.value)

        logger.info("Changed role of user %s in campaign %s to %s", target_user_id, campaign_id, role.value)
        return self._member_dict(campaign_role, campaign_role.user)

    def list_campaign_members(self, campaign_id: str, acting_user_id: str) -> Dict[str, Any]:
        """
        캠페인 소유자와 멤버 목록을 조회합니다. 캠페인에 접근할 수 있는 사용자라면 누구나 조회할 수 있습니다.

        Returns:
            {"owner": {...}, "members": [{...}, ...]} 형태의 딕셔너리.
            멤버는 admin이 먼저, 그다음 가입 순서대로 정렬됩니다.
        """
        self.permissions.require_campaign_access(campaign_id, acting_user_id)

        owner_id = self.role_repo.find_owner_id(campaign_id)
        owner = self.user_repo.find_by_id(owner_id)
        members = [
            self._member_dict(campaign_role, campaign_role.user)
            for campaign_role in self.role_repo.list_by_campaign(campaign_id)
            if campaign_role.user_id != owner_id
        ]
        return {
            "owner": {"id": owner.id, "email": owner.email, "name": owner.name} if owner else None,
            "members": members,
        }

    @staticmethod
    def _member_dict(campaign_role, user) -> Dict[str, Any]:
        return {
            "id": campaign_role.id,
            "campaign_id": campaign_role.campaign_id,
            "user_id": campaign_role.user_id,
            "role": campaign_role.role,
            "user": {"id": user.id, "email": user.email, "name": user.name} if user else None,
        }
