"""
BaseGraphQLClient — Healthie / Authorizer client 的抽象基类。

负责 HTTP 传输（POST JSON，显式超时）和容错的 JSON 解析；
子类只负责拼 query/variables 以及把响应分类成 Success / Duplicate / Failure。
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from .config import UpstreamConfig

logger = logging.getLogger(__name__)


@dataclass
class GraphQLResponse:
    ok: bool
    status_code: Optional[int]
    body: dict = field(default_factory=dict)
    # 网络层错误（连接失败 / 超时），此时 status_code 为 None
    transport_error: Optional[str] = None

    @property
    def errors(self) -> list:
        errors = self.body.get('errors')
        return errors if isinstance(errors, list) else []

    @property
    def data(self) -> dict:
        data = self.body.get('data')
        return data if isinstance(data, dict) else {}


def parse_json_safe(text: str) -> dict:
    """解析失败不抛异常，原文放进 raw。"""
    if not text:
        return {}
    try:
        parsed = json.loads(text)
    except ValueError:
        return {'raw': text}
    return parsed if isinstance(parsed, dict) else {'raw': parsed}


def first_error_message(body: dict, fallback: str) -> str:
    errors = body.get('errors')
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict) and first.get('message'):
            return first['message']
    return body.get('message') or fallback


class BaseGraphQLClient(ABC):

    # 日志里用的服务名
    service_name: str = ""

    def __init__(self, config: UpstreamConfig):
        self.config = config

    @abstractmethod
    def ensure_configured(self) -> None:
        """
        检查本 client 的必需凭证是否存在。

        Raises:
            ConfigError: 凭证缺失。编排层在发出第一个请求之前调用。
        """

    def execute(self, url: str, query: str, variables: Optional[dict] = None,
                headers: Optional[dict] = None) -> GraphQLResponse:
        payload: dict[str, Any] = {'query': query}
        if variables is not None:
            payload['variables'] = variables

        request_headers = {'Content-Type': 'application/json'}
        request_headers.update(headers or {})

        try:
            response = requests.post(
                url,
                json=payload,
                headers=request_headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("[%s] request to %s failed: %s", self.service_name, url, exc)
            return GraphQLResponse(ok=False, status_code=None, transport_error=str(exc))

        body = parse_json_safe(response.text)
        if not response.ok:
            logger.warning("[%s] HTTP %s from %s", self.service_name, response.status_code, url)
        return GraphQLResponse(ok=response.ok, status_code=response.status_code, body=body)
