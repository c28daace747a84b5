"""
请求体解析后的标准结构。

所有 Adapter 的 transform() 都返回这里的 dataclass。
业务层（services.py / resolver.py）只消费这些结构，永远不碰原始请求 JSON。
"""

from dataclasses import dataclass, field
from typing import Optional

from ..treatments import TREATMENT_FIELDS


@dataclass
class ProviderSignupInput:
    first_name: str
    last_name: str
    practice_name: str
    npi: str          # digits only
    email: str
    phone: str        # digits only
    password: str = field(repr=False)

    # 请求里的字段名 → 属性名，顺序即报错时 fields 的顺序
    REQUIRED_FIELDS = (
        ('firstName', 'first_name'),
        ('lastName', 'last_name'),
        ('practiceName', 'practice_name'),
        ('npi', 'npi'),
        ('email', 'email'),
        ('phone', 'phone'),
        ('password', 'password'),
    )

    def missing_fields(self) -> list[str]:
        return [name for name, attr in self.REQUIRED_FIELDS if not getattr(self, attr)]


@dataclass(frozen=True)
class ProviderLookup:
    """
    解析 provider id 的方式，一次请求只用一种。

    kind:
      token          — Authorizer access token
      practice_name  — 诊所名（public intake 首选）
      phone          — provider 电话（旧版）
      direct_id      — 调用方直接给的 Healthie provider id
    """

    kind: str
    value: str

    TOKEN = 'token'
    PRACTICE_NAME = 'practice_name'
    PHONE = 'phone'
    DIRECT_ID = 'direct_id'


@dataclass
class TreatmentFlags:
    tx_cbti: bool = False
    tx_cpap_comisa: bool = False
    tx_sleep_eeg: bool = False
    tx_zepbound_osa: bool = False
    tx_natural_products: bool = False
    tx_insomnia_meds_mgmt: bool = False

    def as_dict(self) -> dict[str, bool]:
        return {name: bool(getattr(self, name)) for name in TREATMENT_FIELDS}


@dataclass
class PatientSubmission:
    """
    标准 patient intake 格式。

    provider_id  在 public 流程里 transform 时还不知道，由 resolver 解析后填进来。
    lookup       public 流程用来解析 provider 的方式；已知 provider_id 时为 None。
    """

    full_name: str
    date_of_birth: str  # ISO 8601: "YYYY-MM-DD"
    mobile: str
    provider_id: str = ""
    email: Optional[str] = None
    isi_score: Optional[int] = None
    treatments: TreatmentFlags = field(default_factory=TreatmentFlags)
    lookup: Optional[ProviderLookup] = None
