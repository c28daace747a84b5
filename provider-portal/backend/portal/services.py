import logging
from dataclasses import dataclass

from .exceptions import UpstreamError, ValidationError
from .models import Patient
from .payloads.types import PatientSubmission, ProviderSignupInput
from .upstream import get_authorizer_client, get_healthie_client
from .upstream.types import Failure, UpstreamResult

logger = logging.getLogger(__name__)


@dataclass
class SignupResult:
    healthie: UpstreamResult
    authorizer: UpstreamResult


def signup_provider(signup: ProviderSignupInput, clinical_client=None, identity_client=None) -> SignupResult:
    """
    Provider 注册：先 Healthie，再 Authorizer，严格串行。

    Authorizer 账号要存 Healthie 的 provider id，所以 Healthie 必须先成功；
    Healthie 失败就直接结束，不会调 Authorizer。
    任意一边 duplicate 都不算错误，返回 duplicated=True 由调用方决定怎么处理。
    两边之间没有事务，Authorizer 失败时 Healthie 里的记录保留。

    Raises:
        ConfigError:   凭证缺失（任何网络请求之前）
        UpstreamError: HEALTHIE_ERROR / AUTHORIZER_ERROR (502), HEALTHIE_CREATE_FAILED (422)
    """
    clinical_client = clinical_client or get_healthie_client()
    identity_client = identity_client or get_authorizer_client()

    # 两个凭证都先检查，缺一个就一个请求都不发
    clinical_client.ensure_configured()
    identity_client.ensure_configured()

    # --- 1. Healthie ---
    logger.info("[signup] creating referring provider in Healthie (npi=%s)", signup.npi)
    healthie = clinical_client.create_referring_provider(signup)
    if isinstance(healthie, Failure):
        raise healthie.to_exception()

    if not healthie.id:
        raise UpstreamError(
            message=healthie.message or "Healthie did not return a provider id.",
            code='HEALTHIE_CREATE_FAILED',
            http_status=422,
        )
    logger.info("[signup] Healthie provider id=%s duplicated=%s", healthie.id, healthie.duplicated)

    # --- 2. Authorizer（带上 step 1 的 id）---
    authorizer = identity_client.sign_up(signup, provider_id=healthie.id)
    if isinstance(authorizer, Failure):
        raise authorizer.to_exception()
    logger.info("[signup] Authorizer account for %s duplicated=%s", signup.email, authorizer.duplicated)

    return SignupResult(healthie=healthie, authorizer=authorizer)


def record_patient(submission: PatientSubmission) -> Patient:
    """
    插入一条 patient。只新建，不更新也不删除；重复提交会得到两条记录。

    submission 必须已经过 adapter 校验，provider_id 已解析。
    """
    provider_id = (submission.provider_id or "").strip()
    if not provider_id:
        raise ValidationError(message="provider_id is required", fields=["provider_id"])

    patient = Patient.objects.create(
        provider_id=provider_id,
        full_name=submission.full_name,
        date_of_birth=submission.date_of_birth,
        mobile=submission.mobile,
        email=submission.email,
        isi_score=submission.isi_score,
        **submission.treatments.as_dict(),
    )
    logger.info("[intake] patient id=%s created for provider_id=%s", patient.id, provider_id)
    return patient


def list_patients(provider_id: str):
    """某个 provider 的全部 patient，新的在前。"""
    return Patient.objects.filter(provider_id=provider_id).order_by('-id')
