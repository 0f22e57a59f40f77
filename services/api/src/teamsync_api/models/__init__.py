"""ORM 模型导出集合。"""

from teamsync_api.models.permission import Role
from teamsync_api.models.project import Project, Task
from teamsync_api.models.user import Account, User
from teamsync_api.models.workspace import Member, Workspace

__all__ = [
    "Account",
    "Member",
    "Project",
    "Role",
    "Task",
    "User",
    "Workspace",
]
