"""登录来源与身份字段规范化。

登录来源建模为带标签的变体：第三方来源只携带来源侧身份标识，
邮箱来源携带口令，身份标识即邮箱本身。
"""

from dataclasses import dataclass, field
from typing import ClassVar, TypeAlias

from teamsync_api.exceptions import BadRequestError
from teamsync_api.models.enums import ProviderKind


def normalize_email(value: str) -> str:
    """标准化邮箱字段（去空格 + 小写）。"""
    return value.strip().lower()


@dataclass(frozen=True)
class Google:
    provider_id: str
    kind: ClassVar[ProviderKind] = ProviderKind.GOOGLE


@dataclass(frozen=True)
class Github:
    provider_id: str
    kind: ClassVar[ProviderKind] = ProviderKind.GITHUB


@dataclass(frozen=True)
class Facebook:
    provider_id: str
    kind: ClassVar[ProviderKind] = ProviderKind.FACEBOOK


@dataclass(frozen=True)
class Email:
    # 明文口令仅在内存中流转，落库前由 User 持久化钩子哈希。
    password: str = field(repr=False)
    kind: ClassVar[ProviderKind] = ProviderKind.EMAIL


Provider: TypeAlias = Google | Github | Facebook | Email

_OAUTH_PROVIDERS: dict[str, type[Google] | type[Github] | type[Facebook]] = {
    ProviderKind.GOOGLE: Google,
    ProviderKind.GITHUB: Github,
    ProviderKind.FACEBOOK: Facebook,
}


def oauth_provider(kind: str, provider_id: str) -> Provider:
    """由来源名称与来源侧标识构造第三方登录来源。"""
    provider_cls = _OAUTH_PROVIDERS.get(kind.strip().upper())
    if provider_cls is None:
        raise BadRequestError(f"Unsupported OAuth provider: {kind}")
    normalized_id = provider_id.strip()
    if not normalized_id:
        raise BadRequestError("Provider id is required")
    return provider_cls(provider_id=normalized_id)


def provider_identity(provider: Provider, *, email: str) -> tuple[ProviderKind, str]:
    """返回写入 Account 的 (provider, provider_id)。"""
    match provider:
        case Email():
            return ProviderKind.EMAIL, normalize_email(email)
        case Google(provider_id=provider_id) | Github(provider_id=provider_id) | Facebook(provider_id=provider_id):
            return provider.kind, provider_id
    raise TypeError(f"unknown provider variant: {provider!r}")


def provider_password(provider: Provider) -> str | None:
    """只有邮箱来源携带口令。"""
    if isinstance(provider, Email):
        return provider.password
    return None
