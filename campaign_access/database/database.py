from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from campaign_access import config


def build_engine(url: str):
    """
    데이터베이스 URL로 SQLAlchemy 엔진을 생성합니다.

    SQLite는 스레드 간 연결 공유를 허용해야 하며, 메모리 DB는 하나의 연결을
    계속 재사용해야 테이블이 유지됩니다.
    """
    if url.startswith("sqlite"):
        if ":memory:" in url:
            return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url)


def build_session_factory(bind):
    # autocommit=False, autoflush=False: 명시적으로 commit을 호출해야 DB에 반영됩니다.
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = build_engine(config.DATABASE_URL)

SessionLocal = build_session_factory(engine)

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()
