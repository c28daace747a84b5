"""
Provider identity resolver：把 ProviderLookup 解析成 Healthie provider id。

四种方式，每次请求只用一种（由 ProviderLookup.kind 决定）：
  token          Authorizer profile → app_data 里的 provider id
                 缺 token 401 / token 无效 401 / 没有 provider id 403
  practice_name  扫描 authorizer_users 全表，按 trim + lower 后的 practice_name 精确匹配
                 第一个带 provider id 的账号胜出；找不到 404
  phone          电话（纯数字）等值查找；找不到 404
  direct_id      调用方直接给的 id，原样使用

practice_name 是 O(n) 全表扫描，每次请求都扫一遍，小规模下可以接受。
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .exceptions import AuthenticationError, NotFoundError, PermissionDeniedError, ValidationError
from .models import AuthorizerUser
from .payloads.types import ProviderLookup
from .upstream import get_authorizer_client
from .upstream.authorizer import extract_provider_id, parse_app_data

logger = logging.getLogger(__name__)


@dataclass
class ProviderProfile:
    id: Optional[str]                 # Authorizer 账号 id（direct_id 时未知）
    practice_name: Optional[str]
    provider_id: str                  # Healthie provider id，写进 patients.provider_id


def normalize_practice_name(value) -> str:
    return str(value or "").strip().lower()


def get_bearer_token(request) -> Optional[str]:
    """从 Authorization header 取 bearer token；没有返回 None。"""
    header = request.headers.get("Authorization") or ""
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


# ── 各个策略 ───────────────────────────────────────────────────────────────

def resolve_by_token(token, identity_client=None) -> ProviderProfile:
    if not token:
        raise AuthenticationError(message="Missing access token.", code="MISSING_TOKEN")

    client = identity_client or get_authorizer_client()
    profile = client.fetch_profile(token)

    app_data = parse_app_data(profile.get("app_data"))
    provider_id = extract_provider_id(app_data)
    if not provider_id:
        logger.info("[resolver] profile %s has no healthie provider id", profile.get("id"))
        raise PermissionDeniedError(message="No healthie_provider_id found for this user.")

    return ProviderProfile(
        id=profile.get("id"),
        practice_name=(app_data or {}).get("practice_name"),
        provider_id=provider_id,
    )


def resolve_by_practice_name(practice_name) -> ProviderProfile:
    wanted = normalize_practice_name(practice_name)

    # TODO: 换成 provider profile 表上的索引列，别再扫 app_data
    accounts = AuthorizerUser.objects.filter(app_data__isnull=False).only("id", "app_data")
    for account in accounts.iterator():
        app_data = parse_app_data(account.app_data)
        if not app_data or not isinstance(app_data.get("practice_name"), str):
            continue
        if normalize_practice_name(app_data["practice_name"]) != wanted:
            continue

        provider_id = extract_provider_id(app_data)
        if provider_id:
            return ProviderProfile(
                id=account.id,
                practice_name=str(practice_name).strip(),
                provider_id=provider_id,
            )

    logger.info("[resolver] no provider for practice %r", wanted)
    raise NotFoundError(
        message="Practice not found (no healthie_provider_id stored for that practice).",
        code="PRACTICE_NOT_FOUND",
    )


def resolve_by_phone(phone) -> ProviderProfile:
    if not phone:
        raise ValidationError(message="providerPhone is required", fields=["providerPhone"])

    account = AuthorizerUser.objects.filter(phone_number=phone).first()
    app_data = None
    provider_id = None
    if account is not None:
        app_data = parse_app_data(account.app_data)
        # signup 时 nickname 里存的也是同一个 provider id
        provider_id = extract_provider_id(app_data) or (account.nickname or "").strip()

    if not provider_id:
        logger.info("[resolver] no provider for phone ending %s", phone[-4:])
        raise NotFoundError(
            message="Provider not found for that phone number.",
            code="PROVIDER_NOT_FOUND",
        )

    return ProviderProfile(
        id=account.id,
        practice_name=(app_data or {}).get("practice_name"),
        provider_id=provider_id,
    )


def resolve_direct_id(provider_id) -> ProviderProfile:
    provider_id = str(provider_id or "").strip()
    if not provider_id:
        raise ValidationError(message="provider_id is required", fields=["provider_id"])
    return ProviderProfile(id=None, practice_name=None, provider_id=provider_id)


# ── 对外统一入口 ───────────────────────────────────────────────────────────

def resolve_provider(lookup: ProviderLookup, identity_client=None) -> ProviderProfile:
    if lookup.kind == ProviderLookup.TOKEN:
        return resolve_by_token(lookup.value, identity_client=identity_client)
    if lookup.kind == ProviderLookup.PRACTICE_NAME:
        return resolve_by_practice_name(lookup.value)
    if lookup.kind == ProviderLookup.PHONE:
        return resolve_by_phone(lookup.value)
    if lookup.kind == ProviderLookup.DIRECT_ID:
        return resolve_direct_id(lookup.value)
    raise ValueError(f"Unknown provider lookup kind: {lookup.kind!r}")
