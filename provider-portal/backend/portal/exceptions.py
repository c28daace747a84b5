"""
统一异常体系。

所有业务异常继承 BaseAppException，包含：
- type:        错误类型标识（validation_error / auth_error / upstream_error / ...）
- code:        业务错误码（CONFIG_ERROR / HEALTHIE_ERROR / HEALTHIE_CREATE_FAILED / ...）
- message:     人类可读的描述
- details:     可选的附加信息，通常是上游返回的 errors / messages 列表
- http_status: HTTP 状态码

View / service 层只需 raise，exception_handler 统一捕获并格式化响应。
没有任何地方自动重试，重试交给调用方。
"""


class BaseAppException(Exception):
    """所有业务异常的基类。"""

    type = 'error'
    code = 'UNKNOWN_ERROR'
    http_status = 500

    def __init__(self, message, code=None, details=None, http_status=None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.details = details
        super().__init__(message)


class ValidationError(BaseAppException):
    """输入验证失败，400。fields 列出出问题的字段名。"""

    type = 'validation_error'
    code = 'VALIDATION_ERROR'
    http_status = 400

    def __init__(self, message, code=None, details=None, http_status=None, fields=None):
        super().__init__(message, code=code, details=details, http_status=http_status)
        self.fields = list(fields) if fields else None


class AuthenticationError(BaseAppException):
    """缺少 token，或 token 无效 / 过期。"""

    type = 'auth_error'
    code = 'UNAUTHENTICATED'
    http_status = 401


class PermissionDeniedError(BaseAppException):
    """已登录，但账号没有绑定 provider id。"""

    type = 'auth_error'
    code = 'PROVIDER_NOT_PROVISIONED'
    http_status = 403


class NotFoundError(BaseAppException):
    type = 'not_found'
    code = 'NOT_FOUND'
    http_status = 404


class UpstreamError(BaseAppException):
    """
    外部 GraphQL 服务（Healthie / Authorizer）调用失败。

    - 502: 网络错误、非 2xx、GraphQL errors → 调用方可以重试
    - 422: 调用成功但既没有新建记录也没有 duplicate → 需要换输入
    """

    type = 'upstream_error'
    code = 'UPSTREAM_ERROR'
    http_status = 502


class ConfigError(BaseAppException):
    """缺少必需的环境变量（凭证）。需要运维介入，500。"""

    type = 'error'
    code = 'CONFIG_ERROR'
    http_status = 500
