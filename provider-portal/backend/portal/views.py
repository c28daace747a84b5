import dataclasses

from django.http import JsonResponse
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .exception_handler import error_body
from .payloads import get_adapter
from .payloads.types import ProviderLookup
from .resolver import get_bearer_token, resolve_provider
from .serializers import (
    serialize_patient_created,
    serialize_patient_list,
    serialize_signup_result,
)
from .services import list_patients, record_patient, signup_provider


class ProviderSignupView(APIView):
    """POST /api/provider/signup - Healthie referring provider + Authorizer account"""

    def post(self, request):
        signup = get_adapter("provider_signup", request.data).process()
        result = signup_provider(signup)
        return Response(serialize_signup_result(result))


class PatientListCreateView(APIView):
    """
    GET  /api/patients - 当前登录 provider 的 patients（provider id 来自 access token）
    POST /api/patients - 请求体直接带 provider_id
    """

    def get(self, request):
        lookup = ProviderLookup(ProviderLookup.TOKEN, get_bearer_token(request) or "")
        profile = resolve_provider(lookup)
        patients = list_patients(profile.provider_id)
        return Response(serialize_patient_list(patients, profile.provider_id))

    def post(self, request):
        submission = get_adapter("patient", request.data).process()
        patient = record_patient(submission)
        return Response(serialize_patient_created(patient), status=status.HTTP_201_CREATED)


class PublicPatientCreateView(APIView):
    """POST /api/patients/public - 不登录录入 patient，按诊所名 / 电话 / id 找 provider"""

    def post(self, request):
        submission = get_adapter("public_patient", request.data).process()
        profile = resolve_provider(submission.lookup)
        patient = record_patient(dataclasses.replace(submission, provider_id=profile.provider_id))
        return Response(serialize_patient_created(patient, profile), status=status.HTTP_201_CREATED)


def not_found(request, exception=None):
    """handler404：未匹配的路由也返回统一 JSON。"""
    return JsonResponse(error_body('not_found', 'NOT_FOUND', 'Not found'), status=404)
