"""
UpstreamConfig — 两个外部服务需要的全部配置。

进程启动后从 django.conf.settings 构建一次，注入给 HealthieClient / AuthorizerClient。
client 和业务代码都不直接读环境变量。
"""

from dataclasses import dataclass

from django.conf import settings

from ..exceptions import ConfigError

# 字段名 → 对应的环境变量名，用于报错信息
ENV_NAMES = {
    'healthie_authorization': 'HEALTHIE_AUTHORIZATION',
    'authorizer_admin_secret': 'AUTHORIZER_ADMIN_SECRET',
}


@dataclass(frozen=True)
class UpstreamConfig:
    healthie_url: str
    healthie_authorization: str
    healthie_auth_source: str
    authorizer_url: str
    authorizer_admin_secret: str
    timeout: float = 10.0

    @classmethod
    def from_settings(cls) -> "UpstreamConfig":
        return cls(
            healthie_url=settings.HEALTHIE_GRAPHQL_URL,
            healthie_authorization=settings.HEALTHIE_AUTHORIZATION,
            healthie_auth_source=settings.HEALTHIE_AUTH_SOURCE,
            authorizer_url=settings.AUTHORIZER_GRAPHQL_URL,
            authorizer_admin_secret=settings.AUTHORIZER_ADMIN_SECRET,
            timeout=float(settings.UPSTREAM_TIMEOUT_SECONDS),
        )

    def require(self, name: str) -> str:
        """取一个必需的凭证，缺失时抛 ConfigError（在任何网络请求之前）。"""
        value = getattr(self, name)
        if not value:
            raise ConfigError(
                message=f"Missing required environment variable: {ENV_NAMES.get(name, name.upper())}",
            )
        return value
