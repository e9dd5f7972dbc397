import logging
from .database import engine, SessionLocal, Base
from .models import *
from campaign_access.domain.permissions import RoleLevel
from campaign_access.services.identity_service import hash_password

logger = logging.getLogger(__name__)

def initialize_db(bind=engine, session_factory=SessionLocal):
    """
    DB와 테이블을 생성하고, 기본 데이터를 삽입합니다.
    기본 데이터: 관리자 계정, 데모 플레이어 계정, 관리자가 소유한 데모 캠페인.
    """
    logger.info("Initializing database...")

    # 모든 테이블을 생성합니다. (이미 존재하면 생성하지 않음)
    Base.metadata.create_all(bind=bind)

    db = session_factory()
    try:
        # 기본 데이터가 이미 있는지 확인
        if db.query(User).first():
            logger.info("Seed data already present, skipping.")
            return

        admin_user = User(email='admin@example.com', name='Game Master', password_hash=hash_password('admin'))
        player_user = User(email='player@example.com', name='Player', password_hash=hash_password('player'))
        db.add_all([admin_user, player_user])
        # 변경사항을 커밋하여 각 객체의 id를 할당받습니다.
        db.commit()

        demo_campaign = Campaign(name='Demo Campaign', visibility='private', owner_id=admin_user.id)
        db.add(demo_campaign)
        db.commit()

        # 소유자는 역할 행 없이 모든 권한을 가지므로 플레이어만 멤버로 추가합니다.
        db.add(CampaignRole(campaign_id=demo_campaign.id, user_id=player_user.id, role=RoleLevel.MEMBER.value))
        db.commit()
        logger.info("Database initialized with seed data.")

    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == '__main__':
    from campaign_access.logging_config import setup_logging
    setup_logging()
    initialize_db()
