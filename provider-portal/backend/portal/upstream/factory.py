"""
工厂函数：返回注入了 UpstreamConfig 的 client 实例。

配置在第一次调用时从 settings 构建，之后整个进程复用同一份（client 无状态，只读配置）。
测试里改了 settings 以后调用 reset_clients() 即可。
"""

from functools import lru_cache

from .authorizer import AuthorizerClient
from .config import UpstreamConfig
from .healthie import HealthieClient


@lru_cache(maxsize=None)
def get_upstream_config() -> UpstreamConfig:
    return UpstreamConfig.from_settings()


@lru_cache(maxsize=None)
def get_healthie_client() -> HealthieClient:
    return HealthieClient(get_upstream_config())


@lru_cache(maxsize=None)
def get_authorizer_client() -> AuthorizerClient:
    return AuthorizerClient(get_upstream_config())


def reset_clients() -> None:
    get_upstream_config.cache_clear()
    get_healthie_client.cache_clear()
    get_authorizer_client.cache_clear()
