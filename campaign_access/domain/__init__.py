from .permissions import Permission, RoleLevel, ROLE_PERMISSIONS, ROLE_LEVEL_LABELS, permissions_for_role
