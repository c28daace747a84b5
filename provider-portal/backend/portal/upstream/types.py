"""
外部服务调用结果的标准结构。

每个 client 在自己的边界上把五花八门的 GraphQL 响应解析成三种之一：
  Success    — 新建成功（可能带 id）
  Duplicate  — 已存在，不算错误（可能带已有记录的 id）
  Failure    — 失败，带 code / message / http_status / details

业务层（services.py）只认识这三个类型，永远不碰原始 JSON。
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from ..exceptions import UpstreamError


@dataclass
class Success:
    id: Optional[str] = None
    message: Optional[str] = None
    duplicated = False


@dataclass
class Duplicate:
    id: Optional[str] = None
    message: Optional[str] = None
    duplicated = True


@dataclass
class Failure:
    code: str
    message: str
    http_status: int = 502
    details: Any = None

    def to_exception(self) -> UpstreamError:
        return UpstreamError(
            message=self.message,
            code=self.code,
            details=self.details,
            http_status=self.http_status,
        )


UpstreamResult = Union[Success, Duplicate, Failure]
