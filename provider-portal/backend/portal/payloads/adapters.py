"""
具体 Adapter 实现。

已注册：
  provider_signup  — ProviderSignupAdapter   POST /api/provider/signup
  patient          — PatientAdapter          POST /api/patients（请求体直接带 provider_id）
  public_patient   — PublicPatientAdapter    POST /api/patients/public（按诊所名 / 电话 / id 找 provider）
"""

from ..treatments import discrete_flags, treatments_to_flags
from .base import (
    BasePayloadAdapter,
    digits_only,
    is_iso_date,
    parse_isi_score,
    text,
    trimmed,
)
from .types import PatientSubmission, ProviderLookup, ProviderSignupInput, TreatmentFlags


# ── ProviderSignupAdapter ──────────────────────────────────────────────────
#
# {
#   "firstName": "Ana", "lastName": "Lopez", "practiceName": "Clinic A",
#   "npi": "123-45-6789", "email": "ana@clinic-a.com",
#   "phone": "(915) 474-6142", "password": "..."
# }
#
# npi / phone 去掉所有非数字字符；password 原样保留，不 trim。

class ProviderSignupAdapter(BasePayloadAdapter):
    kind = "provider_signup"

    def transform(self) -> ProviderSignupInput:
        raw = self._parsed
        password = raw.get("password")

        signup = ProviderSignupInput(
            first_name=trimmed(raw.get("firstName")),
            last_name=trimmed(raw.get("lastName")),
            practice_name=trimmed(raw.get("practiceName")),
            npi=digits_only(trimmed(raw.get("npi"))),
            email=trimmed(raw.get("email")),
            phone=digits_only(trimmed(raw.get("phone"))),
            password=password if isinstance(password, str) else "",
        )
        self._missing.extend(signup.missing_fields())
        return signup


# ── Patient intake ─────────────────────────────────────────────────────────
#
# 两个 intake 接口共用的字段：
# {
#   "name": "Jane Roe", "dateOfBirth": "1980-02-14", "mobile": "9155550100",
#   "email": "jane@example.com",           ← 可选
#   "isiScore": 17,                        ← 可选，0-28
#   "suggestedTreatments": ["Sleep EEG for Insomnia", ...]
#      或者老格式 "tx_cbti": true, "tx_sleep_eeg": false, ...
# }

class _PatientAdapterBase(BasePayloadAdapter):

    def _build_submission(self, provider_id="", lookup=None) -> PatientSubmission:
        raw = self._parsed

        full_name = self.required("name", trimmed(raw.get("name")))
        date_of_birth = self.required("dateOfBirth", trimmed(raw.get("dateOfBirth")))
        mobile = self.required("mobile", trimmed(raw.get("mobile")))

        if date_of_birth and not is_iso_date(date_of_birth):
            self.invalid(
                "dateOfBirth",
                "INVALID_DATE_OF_BIRTH",
                "dateOfBirth must be a valid date in YYYY-MM-DD format",
            )

        try:
            isi_score = parse_isi_score(raw.get("isiScore"))
        except ValueError:
            isi_score = None
            self.invalid("isiScore", "INVALID_ISI_SCORE", "isiScore must be 0-28")

        # suggestedTreatments 优先；没传就读 tx_* 字段
        if "suggestedTreatments" in raw:
            flags = treatments_to_flags(raw.get("suggestedTreatments"))
        else:
            flags = discrete_flags(raw)

        return PatientSubmission(
            provider_id=provider_id,
            full_name=full_name,
            date_of_birth=date_of_birth,
            mobile=mobile,
            email=trimmed(raw.get("email")) or None,
            isi_score=isi_score,
            treatments=TreatmentFlags(**flags),
            lookup=lookup,
        )


class PatientAdapter(_PatientAdapterBase):
    kind = "patient"

    def transform(self) -> PatientSubmission:
        provider_id = self.required("provider_id", text(self._parsed.get("provider_id")))
        return self._build_submission(provider_id=provider_id)


class PublicPatientAdapter(_PatientAdapterBase):
    """
    不登录也能录入 patient。provider 的解析方式按优先级：
      1. practiceName          （当前前端的诊所下拉框）
      2. providerPhone         （旧版）
      3. healthie_provider_id / provider_id（直接给 id）
    都没有 → 缺 practiceName。
    """

    kind = "public_patient"

    def _lookup(self):
        raw = self._parsed

        practice_name = text(raw.get("practiceName"))
        if practice_name:
            return ProviderLookup(ProviderLookup.PRACTICE_NAME, practice_name)

        phone = digits_only(raw.get("providerPhone"))
        if phone:
            return ProviderLookup(ProviderLookup.PHONE, phone)

        direct_id = text(raw.get("healthie_provider_id")) or text(raw.get("provider_id"))
        if direct_id:
            return ProviderLookup(ProviderLookup.DIRECT_ID, direct_id)

        self._missing.append("practiceName")
        return None

    def transform(self) -> PatientSubmission:
        lookup = self._lookup()
        return self._build_submission(lookup=lookup)
