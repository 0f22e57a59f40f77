"""服务层能力导出集合。"""

from teamsync_api.services.authorization import get_member_role_in_workspace, require_workspace_permissions
from teamsync_api.services.identity import Email, Facebook, Github, Google, Provider, normalize_email, oauth_provider
from teamsync_api.services.local_auth import INVALID_CREDENTIALS_MESSAGE, verify_user
from teamsync_api.services.onboarding import login_or_create_account, register_user
from teamsync_api.services.permissions import (
    DEFAULT_ROLE_PERMISSIONS,
    has_permission,
    permission_catalog,
    role_guard,
    seed_roles,
)

__all__ = [
    "DEFAULT_ROLE_PERMISSIONS",
    "INVALID_CREDENTIALS_MESSAGE",
    "Email",
    "Facebook",
    "Github",
    "Google",
    "Provider",
    "get_member_role_in_workspace",
    "has_permission",
    "login_or_create_account",
    "normalize_email",
    "oauth_provider",
    "permission_catalog",
    "register_user",
    "require_workspace_permissions",
    "role_guard",
    "seed_roles",
    "verify_user",
]
