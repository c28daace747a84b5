"""
AuthorizerClient — 身份服务。

两个操作：
  sign_up(signup, provider_id)  管理员 mutation，创建登录账号，
                                把 Healthie provider id 写进 nickname 和 app_data
  fetch_profile(access_token)   用调用方的 bearer token 查当前账号的 profile

app_data 的字段名历史上改过几次：healthie_provider_id / healthie_providerId /
healthie_id 都要认。
"""

import json
import logging
import re

from ..exceptions import AuthenticationError
from .base import BaseGraphQLClient, GraphQLResponse, first_error_message
from .types import Duplicate, Failure, Success, UpstreamResult

logger = logging.getLogger(__name__)

SIGNUP_MUTATION = """
  mutation ($params: SignUpInput!) {
    signup(params: $params) { message }
  }
"""

PROFILE_QUERY = """
  query {
    profile {
      id
      email
      app_data
    }
  }
"""

DEFAULT_FAILURE_MESSAGE = "Unable to create Authorizer account."
SESSION_FAILURE_MESSAGE = "Unable to verify session."

DUPLICATE_ACCOUNT_RE = re.compile(r"already exists|user exists|duplicate", re.IGNORECASE)

PROVIDER_ID_KEYS = ('healthie_provider_id', 'healthie_providerId', 'healthie_id')


def is_duplicate_account_message(message) -> bool:
    return bool(DUPLICATE_ACCOUNT_RE.search(message or ""))


def parse_app_data(value):
    """app_data 可能是 dict，也可能是 JSON 文本；解析不了返回 None。"""
    if not value:
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else None
    return None


def extract_provider_id(app_data):
    if not isinstance(app_data, dict):
        return None
    for key in PROVIDER_ID_KEYS:
        candidate = app_data.get(key)
        if candidate is not None:
            provider_id = str(candidate).strip()
            return provider_id or None
    return None


def classify_signup_response(response: GraphQLResponse) -> UpstreamResult:
    body = response.body

    if not response.ok or response.errors:
        message = first_error_message(body, response.transport_error or DEFAULT_FAILURE_MESSAGE)
        if is_duplicate_account_message(message):
            return Duplicate(message=message)
        return Failure(
            code='AUTHORIZER_ERROR',
            message=message,
            http_status=502,
            details=response.errors or None,
        )

    signup = response.data.get('signup')
    if not signup:
        return Failure(code='AUTHORIZER_ERROR', message=DEFAULT_FAILURE_MESSAGE, http_status=502)

    return Success(message=signup.get('message') if isinstance(signup, dict) else None)


class AuthorizerClient(BaseGraphQLClient):

    service_name = "Authorizer"

    def ensure_configured(self) -> None:
        self.config.require('authorizer_admin_secret')

    def sign_up(self, signup, provider_id: str) -> UpstreamResult:
        admin_secret = self.config.require('authorizer_admin_secret')

        response = self.execute(
            self.config.authorizer_url,
            SIGNUP_MUTATION,
            variables={
                'params': {
                    'email': signup.email,
                    'password': signup.password,
                    'confirm_password': signup.password,
                    'roles': ['user'],
                    'given_name': signup.first_name,
                    'family_name': signup.last_name,
                    'phone_number': signup.phone,
                    'nickname': provider_id,
                    'app_data': {
                        'practice_name': signup.practice_name,
                        'healthie_provider_id': provider_id,
                    },
                },
            },
            headers={'x-authorizer-admin-secret': admin_secret},
        )

        outcome = classify_signup_response(response)
        if isinstance(outcome, Failure):
            logger.warning("[Authorizer] signup failed: %s", outcome.message)
        elif isinstance(outcome, Duplicate):
            logger.info("[Authorizer] account already exists, metadata not re-linked")
        return outcome

    def fetch_profile(self, access_token: str) -> dict:
        """
        Returns:
            profile dict（id / email / app_data）

        Raises:
            AuthenticationError: token 无效、过期，或服务不可用
        """
        response = self.execute(
            self.config.authorizer_url,
            PROFILE_QUERY,
            headers={'Authorization': f"Bearer {access_token}"},
        )

        if not response.ok or response.errors:
            logger.info("[Authorizer] profile query rejected: %s",
                        first_error_message(response.body, response.transport_error or SESSION_FAILURE_MESSAGE))
            raise AuthenticationError(message="Invalid or expired token.", code='INVALID_TOKEN')

        profile = response.data.get('profile')
        if not isinstance(profile, dict):
            raise AuthenticationError(message="Invalid or expired token.", code='INVALID_TOKEN')

        return profile
