# tests/repositories/test_sqlalchemy_campaign_role_repository.py
import pytest
from sqlalchemy.exc import IntegrityError

from campaign_access.database import models
from campaign_access.database.db_init import initialize_db
from campaign_access.repositories.sqlalchemy import (
    SqlalchemyCampaignRepository, SqlalchemyCampaignRoleRepository, SqlalchemyUserRepository
)
from campaign_access.services.exceptions import InvalidRoleError, OwnerRemovalForbiddenError
from campaign_access.services.membership_service import MembershipService
from campaign_access.services.permission_service import PermissionService
from campaign_access.domain.permissions import Permission


@pytest.fixture
def role_repo(db_session) -> SqlalchemyCampaignRoleRepository:
    return SqlalchemyCampaignRoleRepository(db_session)

def count_rows(db_session, campaign_id, user_id):
    return db_session.query(models.CampaignRole).filter_by(campaign_id=campaign_id, user_id=user_id).count()

# ===================================================================
#  Role Store 테스트 (인메모리 SQLite)
# ===================================================================
class TestRoleStore:
    def test_find_role(self, role_repo, seed):
        role = role_repo.find_role(seed["campaign_id"], seed["member"])
        assert role.role == "member"
        assert role_repo.find_role(seed["campaign_id"], seed["outsider"]) is None

    def test_find_owner_id(self, role_repo, seed):
        assert role_repo.find_owner_id(seed["campaign_id"]) == seed["owner"]
        assert role_repo.find_owner_id(seed["campaign_id"], for_update=True) == seed["owner"]
        assert role_repo.find_owner_id("missing") is None

    def test_upsert_never_duplicates(self, role_repo, db_session, seed):
        """같은 쌍에 대해 upsert를 반복해도 행은 하나만 남고 마지막 역할이 적용됩니다."""
        for role in ("viewer", "member", "admin", "viewer"):
            role_repo.upsert_role(seed["campaign_id"], seed["outsider"], role)

        assert count_rows(db_session, seed["campaign_id"], seed["outsider"]) == 1
        assert role_repo.find_role(seed["campaign_id"], seed["outsider"]).role == "viewer"

    def test_unique_constraint_rejects_second_row(self, role_repo, seed):
        with pytest.raises(IntegrityError):
            role_repo.create_role(seed["campaign_id"], seed["member"], "viewer")

    def test_unknown_role_is_rejected(self, role_repo, db_session, seed):
        """닫힌 역할 집합 밖의 문자열은 저장되지 않습니다."""
        with pytest.raises(InvalidRoleError):
            role_repo.upsert_role(seed["campaign_id"], seed["owner"], "gm")
        with pytest.raises(InvalidRoleError):
            role_repo.create_role(seed["campaign_id"], seed["outsider"], "gm")
        with pytest.raises(InvalidRoleError):
            role_repo.upsert_role(seed["campaign_id"], seed["member"], "gm")

        assert count_rows(db_session, seed["campaign_id"], seed["owner"]) == 0
        assert count_rows(db_session, seed["campaign_id"], seed["outsider"]) == 0
        assert role_repo.find_role(seed["campaign_id"], seed["member"]).role == "member"

    def test_delete_role(self, role_repo, db_session, seed):
        assert role_repo.delete_role(seed["campaign_id"], seed["member"]) is True
        assert role_repo.delete_role(seed["campaign_id"], seed["member"]) is False
        assert count_rows(db_session, seed["campaign_id"], seed["member"]) == 0

    def test_atomic_rolls_back_on_error(self, role_repo, db_session, seed):
        """atomic 블록에서 예외가 발생하면 블록 안의 변경이 모두 취소됩니다."""
        with pytest.raises(RuntimeError):
            with role_repo.atomic():
                role_repo.delete_role(seed["campaign_id"], seed["member"])
                raise RuntimeError("boom")

        assert count_rows(db_session, seed["campaign_id"], seed["member"]) == 1

    def test_atomic_commits_on_success(self, role_repo, session_factory, seed):
        with role_repo.atomic():
            role_repo.upsert_role(seed["campaign_id"], seed["outsider"], "viewer")
            role_repo.delete_role(seed["campaign_id"], seed["viewer"])

        # 다른 세션에서 커밋된 결과를 확인
        other = session_factory()
        try:
            assert count_rows(other, seed["campaign_id"], seed["outsider"]) == 1
            assert count_rows(other, seed["campaign_id"], seed["viewer"]) == 0
        finally:
            other.close()

    def test_list_by_campaign_orders_admins_first(self, role_repo, seed):
        roles = role_repo.list_by_campaign(seed["campaign_id"])
        assert roles[0].role == "admin"
        assert {r.user_id for r in roles} == {seed["admin"], seed["member"], seed["viewer"]}
        assert roles[0].user.email == "admin@example.com"


class TestCampaignRepository:
    def test_list_for_user_includes_owned_and_joined(self, db_session, seed):
        repo = SqlalchemyCampaignRepository(db_session)
        other = repo.create(models.Campaign(name="Another Table", owner_id=seed["member"]))

        member_campaigns = {c.id for c in repo.list_for_user(seed["member"])}
        assert member_campaigns == {seed["campaign_id"], other.id}
        assert repo.list_for_user(seed["outsider"]) == []

    def test_delete_campaign_removes_roles(self, db_session, seed):
        repo = SqlalchemyCampaignRepository(db_session)
        repo.delete(repo.find_by_id(seed["campaign_id"]))
        assert db_session.query(models.CampaignRole).count() == 0

# ===================================================================
#  실제 저장소 위에서의 권한 시나리오
# ===================================================================
class TestAccessScenarios:
    @pytest.fixture
    def services(self, db_session):
        role_repo = SqlalchemyCampaignRoleRepository(db_session)
        permission_service = PermissionService(role_repo)
        membership_service = MembershipService(role_repo, SqlalchemyUserRepository(db_session), permission_service)
        return role_repo, permission_service, membership_service

    def test_grant_then_check(self, services, seed):
        role_repo, permissions, _ = services
        role_repo.upsert_role(seed["campaign_id"], seed["outsider"], "member")

        assert permissions.has_permission(seed["campaign_id"], seed["outsider"], Permission.EDIT) is True
        assert permissions.has_permission(seed["campaign_id"], seed["outsider"], Permission.MEMBERS) is False

    def test_unknown_stored_role_keeps_owner_bypass(self, services, db_session, seed):
        """검증을 거치지 않고 들어간 역할 문자열이 있어도 소유자는 모든 권한을, 다른 사용자는 거부를 받습니다."""
        _, permissions, _ = services
        db_session.add_all([
            models.CampaignRole(campaign_id=seed["campaign_id"], user_id=seed["owner"], role="gm"),
            models.CampaignRole(campaign_id=seed["campaign_id"], user_id=seed["outsider"], role="gm"),
        ])
        db_session.commit()

        assert permissions.has_permission(seed["campaign_id"], seed["owner"], Permission.READ) is True
        assert permissions.has_permission(seed["campaign_id"], seed["outsider"], Permission.READ) is False

    def test_leave_as_member(self, services, seed):
        role_repo, permissions, membership = services
        membership.remove_campaign_member(seed["campaign_id"], seed["member"])

        assert permissions.has_permission(seed["campaign_id"], seed["member"], Permission.EDIT) is False
        assert role_repo.find_role(seed["campaign_id"], seed["member"]) is None

    def test_leave_as_owner_even_with_role_row(self, services, db_session, seed):
        role_repo, permissions, membership = services
        role_repo.upsert_role(seed["campaign_id"], seed["owner"], "viewer")

        with pytest.raises(OwnerRemovalForbiddenError):
            membership.remove_campaign_member(seed["campaign_id"], seed["owner"])
        # 역할 행은 그대로 남아 있고, 소유자 권한도 유지됩니다.
        assert count_rows(db_session, seed["campaign_id"], seed["owner"]) == 1
        assert permissions.has_permission(seed["campaign_id"], seed["owner"], Permission.DELETE) is True

    def test_remove_non_member_twice(self, services, db_session, seed):
        _, _, membership = services
        before = db_session.query(models.CampaignRole).count()

        membership.remove_campaign_member(seed["campaign_id"], seed["outsider"])
        membership.remove_campaign_member(seed["campaign_id"], seed["outsider"])

        assert db_session.query(models.CampaignRole).count() == before

    def test_admin_kicks_member(self, services, seed):
        role_repo, _, membership = services
        membership.kick_member(seed["campaign_id"], seed["admin"], seed["viewer"])
        assert role_repo.find_role(seed["campaign_id"], seed["viewer"]) is None

    def test_list_members_excludes_owner_row(self, services, seed):
        role_repo, _, membership = services
        role_repo.upsert_role(seed["campaign_id"], seed["owner"], "viewer")

        result = membership.list_campaign_members(seed["campaign_id"], seed["viewer"])

        assert result["owner"]["id"] == seed["owner"]
        assert seed["owner"] not in {m["user_id"] for m in result["members"]}
        assert result["members"][0]["role"] == "admin"


def test_initialize_db_seeds_once(session_factory):
    """초기화를 두 번 실행해도 기본 데이터는 한 번만 삽입되고, 소유자에게는 역할 행이 없습니다."""
    bind = session_factory.kw["bind"]
    initialize_db(bind=bind, session_factory=session_factory)
    initialize_db(bind=bind, session_factory=session_factory)

    session = session_factory()
    try:
        campaign = session.query(models.Campaign).one()
        assert session.query(models.User).count() == 2
        roles = session.query(models.CampaignRole).all()
        assert [r.role for r in roles] == ["member"]
        assert roles[0].user_id != campaign.owner_id
    finally:
        session.close()
