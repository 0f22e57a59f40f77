"""领域枚举定义。

枚举值与名称保持一致，直接作为数据库与接口中的字符串。
"""

from enum import StrEnum


class ProviderKind(StrEnum):
    """登录来源。"""

    GOOGLE = "GOOGLE"
    GITHUB = "GITHUB"
    FACEBOOK = "FACEBOOK"
    EMAIL = "EMAIL"  # 邮箱 + 密码本地登录。


class RoleName(StrEnum):
    """工作空间角色。"""

    OWNER = "OWNER"  # 工作空间所有者，具备全部权限。
    ADMIN = "ADMIN"  # 管理员，可管理成员与项目。
    MEMBER = "MEMBER"  # 普通成员，可查看并维护任务。


class Permission(StrEnum):
    """权限点。"""

    CREATE_WORKSPACE = "CREATE_WORKSPACE"
    DELETE_WORKSPACE = "DELETE_WORKSPACE"
    EDIT_WORKSPACE = "EDIT_WORKSPACE"
    MANAGE_WORKSPACE_SETTINGS = "MANAGE_WORKSPACE_SETTINGS"

    ADD_MEMBER = "ADD_MEMBER"
    CHANGE_MEMBER_ROLE = "CHANGE_MEMBER_ROLE"
    REMOVE_MEMBER = "REMOVE_MEMBER"

    CREATE_PROJECT = "CREATE_PROJECT"
    EDIT_PROJECT = "EDIT_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"

    CREATE_TASK = "CREATE_TASK"
    EDIT_TASK = "EDIT_TASK"
    DELETE_TASK = "DELETE_TASK"

    VIEW_ONLY = "VIEW_ONLY"


class TaskStatus(StrEnum):
    """任务状态。"""

    BACKLOG = "BACKLOG"
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    DONE = "DONE"  # 已完成，不计入逾期统计。


class TaskPriority(StrEnum):
    """任务优先级。"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
