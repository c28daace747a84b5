"""
HealthieClient — 在 Healthie 里创建 referring provider。

响应分类规则：
  网络错误 / 非 2xx / GraphQL errors           → Failure(HEALTHIE_ERROR, 502)
  data.createReferringPhysician 不存在          → Failure(HEALTHIE_ERROR, 502)
  既没有 referring_physician 也没有 duplicated  → Failure(HEALTHIE_CREATE_FAILED, 422)
  duplicated_physician                          → Duplicate(id)
  referring_physician                           → Success(id)
"""

import logging

from .base import BaseGraphQLClient, GraphQLResponse, first_error_message
from .types import Duplicate, Failure, Success, UpstreamResult

logger = logging.getLogger(__name__)

CREATE_REFERRING_PROVIDER_MUTATION = """
  mutation CreateReferringProvider($input: createReferringPhysicianInput!) {
    createReferringPhysician(input: $input) {
      referring_physician { id }
      duplicated_physician { id }
      messages { field message }
    }
  }
"""

DEFAULT_FAILURE_MESSAGE = "Unable to create referring provider in Healthie."

# 写进 Healthie 的 other_id，用来标记来源
OTHER_ID = "InsomniaRX"


def _record_id(record):
    if not isinstance(record, dict):
        return None
    value = record.get('id')
    if value is None:
        return None
    return str(value).strip() or None


def classify_referring_provider_response(response: GraphQLResponse) -> UpstreamResult:
    body = response.body

    if not response.ok or response.errors:
        message = response.transport_error or first_error_message(body, DEFAULT_FAILURE_MESSAGE)
        return Failure(
            code='HEALTHIE_ERROR',
            message=message,
            http_status=502,
            details=response.errors or None,
        )

    result = response.data.get('createReferringPhysician')
    if not isinstance(result, dict):
        return Failure(code='HEALTHIE_ERROR', message=DEFAULT_FAILURE_MESSAGE, http_status=502)

    messages = result.get('messages') if isinstance(result.get('messages'), list) else []
    message = next(
        (entry['message'] for entry in messages if isinstance(entry, dict) and entry.get('message')),
        None,
    )

    created = result.get('referring_physician')
    duplicated = result.get('duplicated_physician')

    if not created and not duplicated:
        return Failure(
            code='HEALTHIE_CREATE_FAILED',
            message=message or DEFAULT_FAILURE_MESSAGE,
            http_status=422,
            details=messages,
        )

    # 优先用新建记录的 id，没有再用重复记录的 id
    provider_id = _record_id(created) or _record_id(duplicated)
    if duplicated:
        return Duplicate(id=provider_id, message=message)
    return Success(id=provider_id, message=message)


class HealthieClient(BaseGraphQLClient):

    service_name = "Healthie"

    def ensure_configured(self) -> None:
        self.config.require('healthie_authorization')

    def create_referring_provider(self, signup) -> UpstreamResult:
        """
        Args:
            signup: ProviderSignupInput（已经 normalize + validate 过）
        """
        authorization = self.config.require('healthie_authorization')

        response = self.execute(
            self.config.healthie_url,
            CREATE_REFERRING_PROVIDER_MUTATION,
            variables={
                'input': {
                    'first_name': signup.first_name,
                    'last_name': signup.last_name,
                    'business_name': signup.practice_name,
                    'phone_number': signup.phone,
                    'email': signup.email,
                    'npi': signup.npi,
                    'other_id': OTHER_ID,
                },
            },
            headers={
                'Authorization': authorization,
                'AuthorizationSource': self.config.healthie_auth_source,
            },
        )

        outcome = classify_referring_provider_response(response)
        if isinstance(outcome, Failure):
            logger.warning("[Healthie] create referring provider failed: %s (%s)", outcome.message, outcome.code)
        return outcome
