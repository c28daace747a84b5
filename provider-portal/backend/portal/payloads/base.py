"""
BasePayloadAdapter — 所有请求体 Adapter 的抽象基类。

每个接口的请求体只需：
1. 继承 BasePayloadAdapter
2. 实现 transform()
3. 在 factory.py 的 _build_registry() 注册一行

View 层拿到的永远是校验过的 dataclass。
"""

import math
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import date
from typing import Any, Optional

from ..exceptions import ValidationError

# ── 共用常量 / 小工具（Adapter 可直接复用） ─────────────────────────────────
NON_DIGIT_RE = re.compile(r"\D")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

ISI_SCORE_MIN = 0
ISI_SCORE_MAX = 28


def trimmed(value: Any) -> str:
    """非字符串一律当成空字符串。"""
    return value.strip() if isinstance(value, str) else ""


def text(value: Any) -> str:
    """数字之类的也接受（provider_id 可能是数字），None → ""。"""
    if value is None or isinstance(value, bool):
        return ""
    return str(value).strip()


def digits_only(value: Any) -> str:
    """"(915) 474-6142" → "9154746142"。"""
    return NON_DIGIT_RE.sub("", text(value))


def parse_isi_score(value: Any) -> Optional[int]:
    """
    None / "" / 纯空白 → None（没有分数）。
    其他值必须能转成 0-28 的整数，否则 ValueError。
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            number = float(value)
        except ValueError:
            raise ValueError(f"not a number: {value!r}")
    elif isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"not a number: {value!r}")
    elif isinstance(value, int):
        # 不转 float，超大整数转 float 会 OverflowError
        if value < ISI_SCORE_MIN or value > ISI_SCORE_MAX:
            raise ValueError(f"out of range: {value}")
        return value
    else:
        number = value

    if not math.isfinite(number) or not number.is_integer():
        raise ValueError(f"not an integer: {value!r}")
    score = int(number)
    if score < ISI_SCORE_MIN or score > ISI_SCORE_MAX:
        raise ValueError(f"out of range: {score}")
    return score


def is_iso_date(value: str) -> bool:
    if not ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


class BasePayloadAdapter(ABC):
    """
    三步流水线：parse → transform → validate

    transform() 过程中发现的格式错误用 self.invalid() 记下来，
    validate() 统一抛出：先报缺失字段，再报格式错误。
    """

    # 子类声明自己对应的 kind 标识符（与 factory 注册键一致）
    kind: str = ""

    def __init__(self, data: Any):
        self._data = data
        self._parsed: dict = {}
        self._missing: list[str] = []
        self._invalid: list[tuple[str, str, str]] = []

    def parse(self) -> dict:
        if not isinstance(self._data, Mapping):
            raise ValidationError(
                message="Request body must be a JSON object.",
                code="INVALID_BODY",
            )
        self._parsed = dict(self._data)
        return self._parsed

    @abstractmethod
    def transform(self) -> Any:
        """将 self._parsed 转换为对应的 dataclass。"""

    # ── transform() 里用的记录方法 ─────────────────────────────────────────

    def required(self, field_name: str, value: str) -> str:
        if not value:
            self._missing.append(field_name)
        return value

    def invalid(self, field_name: str, code: str, message: str) -> None:
        self._invalid.append((field_name, code, message))

    # ── 提供默认实现，子类可 override ──────────────────────────────────────

    def validate(self, result: Any) -> None:
        if self._missing:
            raise ValidationError(
                message="Missing required fields.",
                code="MISSING_FIELDS",
                fields=self._missing,
            )
        if self._invalid:
            field_name, code, message = self._invalid[0]
            raise ValidationError(
                message=message,
                code=code,
                fields=[name for name, _, _ in self._invalid],
            )

    # ── 对外统一入口 ───────────────────────────────────────────────────────

    def process(self) -> Any:
        """parse → transform → validate，返回校验通过的 dataclass。"""
        self.parse()
        result = self.transform()
        self.validate(result)
        return result
