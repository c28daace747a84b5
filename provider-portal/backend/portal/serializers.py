"""
Response serializers — 业务对象 → JSON-able dict。

只负责「输出格式化」，不做任何解析或校验。
输入解析和校验在 portal/payloads/ adapter 系统。
"""

from .treatments import TREATMENT_FIELDS


def serialize_signup_result(result):
    """200 response of POST /api/provider/signup."""
    healthie = {
        'duplicated': result.healthie.duplicated,
        'id': result.healthie.id,
    }
    if result.healthie.message:
        healthie['message'] = result.healthie.message

    return {
        'healthie': healthie,
        'authorizer': {'duplicated': result.authorizer.duplicated},
    }


def serialize_patient_created(patient, profile=None):
    """201 response; public 流程额外回显 practiceName 和 provider id。"""
    body = {
        'patientId': patient.id,
        'status': 'created',
    }
    if profile is not None:
        if profile.practice_name:
            body['practiceName'] = profile.practice_name
        body['healthie_provider_id'] = profile.provider_id
    return body


def serialize_patient(patient):
    row = {
        'id': patient.id,
        'provider_id': patient.provider_id,
        'full_name': patient.full_name,
        'date_of_birth': patient.date_of_birth.isoformat() if patient.date_of_birth else None,
        'mobile': patient.mobile,
        'email': patient.email,
        'isi_score': patient.isi_score,
        'created_at': patient.created_at.isoformat() if patient.created_at else None,
    }
    for field in TREATMENT_FIELDS:
        row[field] = getattr(patient, field)
    return row


def serialize_patient_list(patients, provider_id):
    return {
        'patients': [serialize_patient(patient) for patient in patients],
        'provider_id': provider_id,
    }
