# campaign_access/services/exceptions.py

# --- General Exceptions ---
class CampaignNotFoundError(Exception):
    """캠페인을 찾을 수 없을 때"""
    pass

class UserNotFoundError(Exception):
    """사용자를 찾을 수 없을 때"""
    pass

class MemberNotFoundError(Exception):
    """대상 사용자가 캠페인 멤버가 아닐 때"""
    pass

# --- Creation/Validation Exceptions ---
class UserCreationError(Exception):
    """사용자 생성 실패 시 (이메일 중복 등)"""
    pass

class MemberAlreadyExistsError(Exception):
    """이미 캠페인 멤버(또는 소유자)인 사용자를 추가하려고 할 때"""
    pass

class InvalidRoleError(ValueError):
    """알 수 없는 역할 이름일 때"""
    pass

class InvalidPermissionError(ValueError):
    """알 수 없는 권한 이름일 때"""
    pass

# --- Membership Exceptions ---
class OwnerRemovalForbiddenError(Exception):
    """캠페인 소유자를 제거하거나 소유자가 탈퇴하려고 할 때"""
    def __init__(self, message="Cannot remove campaign owner."):
        super().__init__(message)

class SelfRemovalError(Exception):
    """관리 기능으로 자기 자신을 제거하려고 할 때 (탈퇴 기능을 사용해야 함)"""
    pass

# --- Auth Exceptions ---
class TokenInvalidError(Exception):
    """토큰이 유효하지 않거나 없을 때 (인증되지 않은 요청)"""
    pass

class AuthenticationError(Exception):
    """사용자 자격 증명 실패 시"""
    pass

class CampaignAccessDeniedError(Exception):
    """인증은 되었지만 캠페인에 대한 권한이 없을 때"""
    pass
