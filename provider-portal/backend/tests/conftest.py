"""
Shared fixtures for all tests.

factory-boy factories live here so both unit/ and integration/ can import them.
外部 GraphQL 请求一律 mock 掉 requests.post，用 fake_response() 造响应。
"""
import json
from datetime import date
from unittest.mock import MagicMock

import factory
import pytest
from django.test import Client

from portal.models import AuthorizerUser, Patient
from portal.payloads.types import ProviderSignupInput
from portal.upstream import reset_clients
from portal.upstream.config import UpstreamConfig


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class PatientFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Patient

    provider_id = '77'
    full_name = 'Jane Roe'
    date_of_birth = date(1980, 2, 14)
    mobile = '9155550100'
    email = 'jane@example.com'
    isi_score = 15


class AuthorizerUserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = AuthorizerUser

    class Params:
        practice_name = 'Clinic A'
        healthie_provider_id = '77'

    id = factory.Sequence(lambda n: f'user-{n:04d}')
    email = factory.Sequence(lambda n: f'provider{n}@example.com')
    given_name = 'Ana'
    family_name = 'Lopez'
    phone_number = factory.Sequence(lambda n: f'915555{n:04d}')
    nickname = factory.SelfAttribute('healthie_provider_id')
    app_data = factory.LazyAttribute(
        lambda o: json.dumps({
            'practice_name': o.practice_name,
            'healthie_provider_id': o.healthie_provider_id,
        })
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def fake_response(body=None, status=200, text=None):
    """造一个 requests.Response 替身：ok / status_code / text。"""
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.text = text if text is not None else json.dumps(body if body is not None else {})
    return response


def healthie_created(provider_id='77'):
    return fake_response({'data': {'createReferringPhysician': {
        'referring_physician': {'id': provider_id},
        'duplicated_physician': None,
        'messages': [],
    }}})


def authorizer_signed_up():
    return fake_response({'data': {'signup': {'message': 'Signed up successfully.'}}})


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _fresh_upstream_clients():
    """client 是进程级缓存的，每个测试前后清掉，settings 的修改才会生效。"""
    reset_clients()
    yield
    reset_clients()


@pytest.fixture
def api_client():
    """Django test client for integration tests."""
    return Client()


@pytest.fixture
def upstream_config():
    return UpstreamConfig(
        healthie_url='https://healthie.test/graphql',
        healthie_authorization='Basic test-healthie-key',
        healthie_auth_source='API',
        authorizer_url='https://authorizer.test/graphql',
        authorizer_admin_secret='test-admin-secret',
        timeout=5,
    )


@pytest.fixture
def signup_input():
    return ProviderSignupInput(
        first_name='Ana',
        last_name='Lopez',
        practice_name='Clinic A',
        npi='123456789',
        email='ana@clinic-a.com',
        phone='9154746142',
        password='s3cret-pass',
    )


@pytest.fixture
def signup_payload():
    """Minimal valid payload for POST /api/provider/signup."""
    return {
        'firstName': 'Ana',
        'lastName': 'Lopez',
        'practiceName': 'Clinic A',
        'npi': '123-45-6789',
        'email': 'ana@clinic-a.com',
        'phone': '(915) 474-6142',
        'password': 's3cret-pass',
    }


@pytest.fixture
def patient_payload():
    """Patient fields shared by both intake endpoints."""
    return {
        'name': 'Jane Roe',
        'dateOfBirth': '1980-02-14',
        'mobile': '9155550100',
        'email': 'jane@example.com',
        'isiScore': 17,
        'suggestedTreatments': ['Sleep EEG for Insomnia'],
    }
