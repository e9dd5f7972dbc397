import hashlib
import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, Any, List

from campaign_access import config
from campaign_access.database import models
from campaign_access.repositories.interfaces import IUserRepository
from campaign_access.services.exceptions import (
    UserCreationError, UserNotFoundError, AuthenticationError, TokenInvalidError
)

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


class IdentityService:
    """사용자 계정과 인증 토큰(세션)을 관리합니다. 요청의 사용자 ID를 확인하는 유일한 곳입니다."""
    _token_cache = {}

    def __init__(self, user_repo: IUserRepository, token_ttl_hours: int = None):
        """
        IdentityService를 초기화합니다.

        Args:
            user_repo: 사용자 데이터에 접근하기 위한 리포지토리.
            token_ttl_hours: 발급한 토큰의 유효 시간 (기본값: config.TOKEN_TTL_HOURS).
        """
        self.user_repo = user_repo
        self.token_ttl = timedelta(hours=token_ttl_hours if token_ttl_hours is not None else config.TOKEN_TTL_HOURS)

    @staticmethod
    def _to_dict(user: models.User) -> Dict[str, Any]:
        return {"id": user.id, "email": user.email, "name": user.name}

    def create_user(self, email: str, password: str, name: str = None) -> Dict[str, Any]:
        """
        새로운 사용자를 생성합니다. 비밀번호는 해시하여 저장합니다.

        Raises:
            UserCreationError: 동일한 이메일의 사용자가 이미 존재할 때.
        """
        if self.user_repo.find_by_email(email):
            raise UserCreationError(f"User with email '{email}' already exists.")

        new_user = models.User(email=email, name=name, password_hash=hash_password(password))
        created_user = self.user_repo.create(new_user)
        logger.info("Created user %s", created_user.id)
        return self._to_dict(created_user)

    def list_users(self) -> List[Dict[str, Any]]:
        """모든 사용자의 목록을 조회합니다. (비밀번호 제외)"""
        return [self._to_dict(u) for u in self.user_repo.list_all()]

    def get_user(self, user_id: str) -> Dict[str, Any]:
        """
        ID로 특정 사용자를 조회합니다. (비밀번호 제외)

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
        """
        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        return self._to_dict(user)

    def delete_user(self, user_id: str) -> bool:
        """
        사용자를 삭제합니다. 사용자가 소유한 캠페인과 모든 멤버십도 함께 삭제됩니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
        """
        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        self.user_repo.delete(user)
        logger.info("Deleted user %s", user_id)
        return True

    def authenticate(self, email: str, password: str) -> Dict[str, str]:
        """
        자격증명을 검증하고, 성공 시 인증 토큰을 발급합니다.

        Raises:
            AuthenticationError: 사용자가 없거나 비밀번호가 일치하지 않을 때.
        """
        user = self.user_repo.find_by_email(email)
        if not user or user.password_hash != hash_password(password):
            logger.warning("Failed login attempt for %s", email)
            raise AuthenticationError("Invalid email or password.")

        token = str(uuid.uuid4())
        expires_at = datetime.now() + self.token_ttl
        self._token_cache[token] = {
            'user_id': user.id,
            'expires_at': expires_at
        }
        return {"token": token, "expires_at": expires_at.isoformat()}

    def validate_token(self, token: str) -> Dict[str, Any]:
        """
        인증 토큰의 유효성을 검증하고, 유효하면 토큰 데이터를 반환합니다.

        Raises:
            TokenInvalidError: 토큰을 찾을 수 없거나 만료되었을 때.
        """
        token_data = self._token_cache.get(token)
        if not token_data:
            raise TokenInvalidError("Token not found or invalid.")

        if datetime.now() > token_data['expires_at']:
            del self._token_cache[token]
            raise TokenInvalidError("Token has expired.")

        return token_data

    def revoke_token(self, token: str) -> None:
        """토큰을 폐기합니다 (로그아웃). 없는 토큰이면 아무 일도 하지 않습니다."""
        self._token_cache.pop(token, None)
