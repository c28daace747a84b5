"""
Unit tests for the Healthie / Authorizer clients.

requests.post 全部 mock 掉，不发真实请求。覆盖：
1. 响应分类：Success / Duplicate / Failure（含 422 HEALTHIE_CREATE_FAILED）
2. 请求内容：header、variables、超时
3. 凭证缺失 → ConfigError，且不发请求
4. profile 查询失败 → AuthenticationError
"""
from dataclasses import replace
from unittest.mock import patch

import pytest
import requests

from portal.exceptions import AuthenticationError, ConfigError
from portal.upstream.authorizer import (
    AuthorizerClient,
    classify_signup_response,
    extract_provider_id,
    is_duplicate_account_message,
    parse_app_data,
)
from portal.upstream.base import GraphQLResponse, first_error_message, parse_json_safe
from portal.upstream.healthie import HealthieClient, classify_referring_provider_response
from portal.upstream.types import Duplicate, Failure, Success
from tests.conftest import authorizer_signed_up, fake_response, healthie_created

POST = 'portal.upstream.base.requests.post'


def _gql(body, ok=True, status=200):
    return GraphQLResponse(ok=ok, status_code=status, body=body)


def _physician(created=None, duplicated=None, messages=None):
    return _gql({'data': {'createReferringPhysician': {
        'referring_physician': created,
        'duplicated_physician': duplicated,
        'messages': messages or [],
    }}})


# -------------------------------------------------------------------
# base helpers
# -------------------------------------------------------------------

class TestBaseHelpers:

    def test_parse_json_safe_tolerates_html(self):
        assert parse_json_safe('<html>Bad Gateway</html>') == {'raw': '<html>Bad Gateway</html>'}

    def test_parse_json_safe_empty(self):
        assert parse_json_safe('') == {}

    def test_first_error_message_prefers_errors(self):
        body = {'errors': [{'message': 'first'}, {'message': 'second'}], 'message': 'top'}
        assert first_error_message(body, 'fallback') == 'first'

    def test_first_error_message_fallbacks(self):
        assert first_error_message({'message': 'top'}, 'fallback') == 'top'
        assert first_error_message({}, 'fallback') == 'fallback'


# -------------------------------------------------------------------
# Healthie classification
# -------------------------------------------------------------------

class TestClassifyReferringProvider:

    def test_created(self):
        outcome = classify_referring_provider_response(_physician(created={'id': 77}))

        assert isinstance(outcome, Success)
        assert outcome.id == '77'
        assert outcome.duplicated is False

    def test_duplicate_carries_existing_id(self):
        outcome = classify_referring_provider_response(
            _physician(duplicated={'id': '42'}, messages=[{'field': 'npi', 'message': 'NPI already used'}])
        )

        assert isinstance(outcome, Duplicate)
        assert outcome.id == '42'
        assert outcome.duplicated is True
        assert outcome.message == 'NPI already used'

    def test_duplicate_without_id(self):
        outcome = classify_referring_provider_response(_physician(duplicated={'id': None}))
        assert isinstance(outcome, Duplicate)
        assert outcome.id is None

    def test_neither_created_nor_duplicate_is_422(self):
        messages = [{'field': 'npi', 'message': 'NPI is invalid'}]
        outcome = classify_referring_provider_response(_physician(messages=messages))

        assert isinstance(outcome, Failure)
        assert outcome.code == 'HEALTHIE_CREATE_FAILED'
        assert outcome.http_status == 422
        assert outcome.message == 'NPI is invalid'
        assert outcome.details == messages

    def test_graphql_errors_are_502(self):
        errors = [{'message': 'Not authorized'}]
        outcome = classify_referring_provider_response(_gql({'errors': errors}))

        assert isinstance(outcome, Failure)
        assert outcome.code == 'HEALTHIE_ERROR'
        assert outcome.http_status == 502
        assert outcome.message == 'Not authorized'
        assert outcome.details == errors

    def test_non_2xx_is_502(self):
        outcome = classify_referring_provider_response(_gql({'raw': 'oops'}, ok=False, status=500))
        assert outcome.code == 'HEALTHIE_ERROR'
        assert outcome.message == 'Unable to create referring provider in Healthie.'

    def test_missing_mutation_result_is_502(self):
        outcome = classify_referring_provider_response(_gql({'data': {}}))
        assert outcome.code == 'HEALTHIE_ERROR'
        assert outcome.http_status == 502


class TestHealthieClient:

    def test_request_shape(self, upstream_config, signup_input):
        with patch(POST, return_value=healthie_created('77')) as mock_post:
            outcome = HealthieClient(upstream_config).create_referring_provider(signup_input)

        assert outcome.id == '77'
        args, kwargs = mock_post.call_args
        assert args[0] == 'https://healthie.test/graphql'
        assert kwargs['timeout'] == 5
        assert kwargs['headers']['Authorization'] == 'Basic test-healthie-key'
        assert kwargs['headers']['AuthorizationSource'] == 'API'
        variables = kwargs['json']['variables']['input']
        assert variables['business_name'] == 'Clinic A'
        assert variables['npi'] == '123456789'
        assert variables['phone_number'] == '9154746142'
        assert variables['other_id'] == 'InsomniaRX'

    def test_timeout_is_transport_failure(self, upstream_config, signup_input):
        with patch(POST, side_effect=requests.Timeout('read timed out')):
            outcome = HealthieClient(upstream_config).create_referring_provider(signup_input)

        assert isinstance(outcome, Failure)
        assert outcome.code == 'HEALTHIE_ERROR'
        assert outcome.http_status == 502

    def test_missing_credential_fails_before_request(self, upstream_config, signup_input):
        config = replace(upstream_config, healthie_authorization='')

        with patch(POST) as mock_post:
            with pytest.raises(ConfigError) as exc_info:
                HealthieClient(config).create_referring_provider(signup_input)

        mock_post.assert_not_called()
        assert 'HEALTHIE_AUTHORIZATION' in exc_info.value.message


# -------------------------------------------------------------------
# Authorizer
# -------------------------------------------------------------------

class TestAppData:

    def test_parse_text_and_dict(self):
        assert parse_app_data('{"practice_name": "Clinic A"}') == {'practice_name': 'Clinic A'}
        assert parse_app_data({'a': 1}) == {'a': 1}

    def test_parse_garbage(self):
        assert parse_app_data('not json') is None
        assert parse_app_data('[1, 2]') is None
        assert parse_app_data(None) is None

    @pytest.mark.parametrize('key', ['healthie_provider_id', 'healthie_providerId', 'healthie_id'])
    def test_provider_id_aliases(self, key):
        assert extract_provider_id({key: 77}) == '77'

    def test_blank_provider_id(self):
        assert extract_provider_id({'healthie_provider_id': '  '}) is None
        assert extract_provider_id({}) is None


class TestClassifySignup:

    @pytest.mark.parametrize('message', [
        'User already exists',
        'user exists with this email',
        'Duplicate email',
    ])
    def test_duplicate_account_patterns(self, message):
        assert is_duplicate_account_message(message)
        outcome = classify_signup_response(_gql({'errors': [{'message': message}]}))
        assert isinstance(outcome, Duplicate)

    def test_other_error_is_failure(self):
        outcome = classify_signup_response(_gql({'errors': [{'message': 'password too weak'}]}))

        assert isinstance(outcome, Failure)
        assert outcome.code == 'AUTHORIZER_ERROR'
        assert outcome.http_status == 502

    def test_missing_signup_payload(self):
        outcome = classify_signup_response(_gql({'data': {'signup': None}}))
        assert outcome.code == 'AUTHORIZER_ERROR'

    def test_success(self):
        outcome = classify_signup_response(_gql({'data': {'signup': {'message': 'ok'}}}))
        assert isinstance(outcome, Success)
        assert outcome.duplicated is False


class TestAuthorizerClient:

    def test_signup_embeds_provider_id(self, upstream_config, signup_input):
        with patch(POST, return_value=authorizer_signed_up()) as mock_post:
            AuthorizerClient(upstream_config).sign_up(signup_input, provider_id='77')

        args, kwargs = mock_post.call_args
        assert args[0] == 'https://authorizer.test/graphql'
        assert kwargs['headers']['x-authorizer-admin-secret'] == 'test-admin-secret'
        params = kwargs['json']['variables']['params']
        assert params['nickname'] == '77'
        assert params['app_data'] == {'practice_name': 'Clinic A', 'healthie_provider_id': '77'}
        assert params['confirm_password'] == params['password']
        assert params['roles'] == ['user']

    def test_missing_admin_secret(self, upstream_config, signup_input):
        config = replace(upstream_config, authorizer_admin_secret='')

        with patch(POST) as mock_post:
            with pytest.raises(ConfigError):
                AuthorizerClient(config).sign_up(signup_input, provider_id='77')

        mock_post.assert_not_called()

    def test_fetch_profile_sends_bearer(self, upstream_config):
        profile = {'id': 'user-1', 'email': 'a@b.c', 'app_data': {'healthie_provider_id': '77'}}
        with patch(POST, return_value=fake_response({'data': {'profile': profile}})) as mock_post:
            result = AuthorizerClient(upstream_config).fetch_profile('tok-123')

        assert result == profile
        assert mock_post.call_args.kwargs['headers']['Authorization'] == 'Bearer tok-123'
        assert 'variables' not in mock_post.call_args.kwargs['json']

    def test_fetch_profile_rejected(self, upstream_config):
        body = {'errors': [{'message': 'unauthorized'}]}
        with patch(POST, return_value=fake_response(body, status=401)):
            with pytest.raises(AuthenticationError) as exc_info:
                AuthorizerClient(upstream_config).fetch_profile('expired')

        assert exc_info.value.http_status == 401

    def test_fetch_profile_network_error(self, upstream_config):
        with patch(POST, side_effect=requests.ConnectionError('refused')):
            with pytest.raises(AuthenticationError):
                AuthorizerClient(upstream_config).fetch_profile('tok')
