from enum import Enum
from typing import Dict, FrozenSet

from campaign_access.services.exceptions import InvalidPermissionError, InvalidRoleError


class Permission(str, Enum):
    """
    캠페인 안에서 수행할 수 있는 단일 행위(capability)입니다.
    저장되지 않는 값 객체이며, 역할(RoleLevel)마다 고정된 집합이 매핑됩니다.
    """
    READ = "read"
    EDIT = "edit"
    CREATE = "create"
    DELETE = "delete"
    ADMIN = "admin"
    MANAGE = "manage"
    MEMBERS = "members"
    POSTS = "posts"
    PERMISSIONS = "permissions"
    DASHBOARD = "dashboard"
    GALLERY = "gallery"
    TEMPLATES = "templates"
    BOOKMARKS = "bookmarks"

    @classmethod
    def parse(cls, value) -> "Permission":
        """문자열 또는 Permission 값을 Permission으로 변환합니다."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidPermissionError(f"Unknown permission '{value}'.") from None


class RoleLevel(str, Enum):
    """캠페인 멤버(소유자 제외)에게 부여되는 역할입니다."""
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value) -> "RoleLevel":
        """문자열 또는 RoleLevel 값을 RoleLevel로 변환합니다."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidRoleError(f"Unknown role '{value}'.") from None


ALL_PERMISSIONS: FrozenSet[Permission] = frozenset(Permission)

# 역할 -> 권한 집합 (정적 설정, 멤버십 행마다 저장하지 않음)
ROLE_PERMISSIONS: Dict[RoleLevel, FrozenSet[Permission]] = {
    RoleLevel.ADMIN: ALL_PERMISSIONS,
    RoleLevel.MEMBER: frozenset({
        Permission.READ,
        Permission.EDIT,
        Permission.CREATE,
        Permission.POSTS,
        Permission.GALLERY,
    }),
    RoleLevel.VIEWER: frozenset({Permission.READ}),
}

ROLE_LEVEL_LABELS: Dict[RoleLevel, str] = {
    RoleLevel.ADMIN: "Admin",
    RoleLevel.MEMBER: "Member",
    RoleLevel.VIEWER: "Viewer",
}

# 새 역할을 추가하고 매핑을 빠뜨리면 임포트 시점에 실패합니다.
_unmapped = set(RoleLevel) - set(ROLE_PERMISSIONS)
if _unmapped:
    raise RuntimeError(f"Roles without a permission set: {sorted(r.value for r in _unmapped)}")


def permissions_for_role(role) -> FrozenSet[Permission]:
    """역할에 매핑된 권한 집합을 반환합니다."""
    return ROLE_PERMISSIONS[RoleLevel.parse(role)]
