"""
工厂函数：根据 kind 返回对应 Adapter。

新增一种请求体只需：
  1. 在 adapters.py 新建 Adapter 类
  2. 在此处 _build_registry() 加一行
"""

from typing import Any

from .base import BasePayloadAdapter


def _build_registry() -> dict[str, type[BasePayloadAdapter]]:
    # 延迟导入，避免循环依赖
    from .adapters import PatientAdapter, ProviderSignupAdapter, PublicPatientAdapter

    return {
        "provider_signup": ProviderSignupAdapter,
        "patient":         PatientAdapter,
        "public_patient":  PublicPatientAdapter,
    }


def get_adapter(kind: str, data: Any) -> BasePayloadAdapter:
    """
    根据 kind 返回已实例化的 Adapter。

    Args:
        kind: "provider_signup" / "patient" / "public_patient"
        data: 已经解析好的请求体（DRF request.data）

    Raises:
        KeyError: 未知的 kind（编程错误，不是用户输入错误）
    """
    registry = _build_registry()
    adapter_cls = registry.get(kind)

    if adapter_cls is None:
        raise KeyError(f"Unknown payload kind: {kind!r}. Known kinds: {list(registry)}")

    return adapter_cls(data)
