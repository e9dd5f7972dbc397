# tests/conftest.py
import pytest

from campaign_access.database.database import Base, build_engine, build_session_factory
from campaign_access.database import models
from campaign_access.services.identity_service import IdentityService, hash_password


@pytest.fixture
def session_factory():
    """테스트마다 새로운 인메모리 SQLite DB와 세션 팩토리를 생성합니다."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seed(db_session):
    """
    소유자(owner), 관리자(admin), 멤버(member), 뷰어(viewer), 외부인(outsider) 사용자와
    owner가 소유한 캠페인 하나를 생성합니다.
    """
    users = {
        key: models.User(id=f"user-{key}", email=f"{key}@example.com", name=key.title(), password_hash=hash_password(key))
        for key in ("owner", "admin", "member", "viewer", "outsider")
    }
    db_session.add_all(users.values())
    db_session.commit()

    campaign = models.Campaign(id="campaign-1", name="Curse of the Crimson Moon", owner_id=users["owner"].id)
    db_session.add(campaign)
    db_session.commit()

    for key in ("admin", "member", "viewer"):
        db_session.add(models.CampaignRole(campaign_id=campaign.id, user_id=users[key].id, role=key))
    db_session.commit()
    return {"campaign_id": campaign.id, **{key: user.id for key, user in users.items()}}


@pytest.fixture(autouse=True)
def clear_token_cache():
    """IdentityService의 토큰 캐시는 클래스 변수이므로 테스트 간에 비워줍니다."""
    IdentityService._token_cache.clear()
    yield
    IdentityService._token_cache.clear()
