"""
统一异常处理器。

挂到 DRF 的 EXCEPTION_HANDLER setting 上。
前端判断逻辑：有 type 字段 → 出问题了；没有 type 字段 → 成功。

统一错误响应格式：
{
    "type":    "validation_error" | "auth_error" | "upstream_error" | ...,
    "code":    "HEALTHIE_CREATE_FAILED",
    "message": "Unable to create referring provider in Healthie.",
    "error":   同 message（patients 接口的老前端读的是 error）,
    "details": [ ... ],   // 可选，上游返回的错误列表
    "fields":  [ ... ]    // 可选，缺失 / 非法的字段
}
"""

import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404, JsonResponse
from rest_framework import exceptions as drf_exceptions
from rest_framework.exceptions import APIException
from rest_framework.exceptions import ValidationError as DRFValidationError

from .exceptions import BaseAppException, ValidationError

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = 'Server error'


def error_body(type_, code, message, details=None, fields=None):
    body = {
        'type': type_,
        'code': code,
        'message': message,
        'error': message,
    }
    if details is not None:
        body['details'] = details
    if fields:
        body['fields'] = fields
    return body


def unified_exception_handler(exc, context):
    """
    DRF exception handler entry point.

    优先级：
    1. BaseAppException 及其子类 → 统一格式
    2. DRF 自带的 ValidationError → 转成统一格式
    3. 其他 DRF APIException（JSON 解析失败、405、415 ...）→ 保留状态码，统一格式
    4. 其他任何异常 → 固定的 500，不泄露堆栈
    """

    # --- 1. 我们自己的异常体系 ---
    if isinstance(exc, BaseAppException):
        fields = exc.fields if isinstance(exc, ValidationError) else None
        if exc.http_status >= 500:
            logger.error('[%s] %s', exc.code, exc.message)
        body = error_body(exc.type, exc.code, exc.message, exc.details, fields)
        return JsonResponse(body, status=exc.http_status)

    # --- 2. DRF 自带的 ValidationError ---
    if isinstance(exc, DRFValidationError):
        body = error_body(
            'validation_error',
            'VALIDATION_ERROR',
            'Request validation failed',
            details=exc.detail,
        )
        return JsonResponse(body, status=400)

    # --- 3. 其他 DRF 异常 ---
    # Django 自带的 404 / 403 先换成 DRF 对应的异常
    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = drf_exceptions.PermissionDenied()

    if isinstance(exc, APIException):
        code = str(exc.default_code).upper()
        body = error_body('error', code, str(exc.detail))
        return JsonResponse(body, status=exc.status_code)

    # --- 4. 兜底 ---
    view = context.get('view') if context else None
    logger.exception('Unhandled error in %s', type(view).__name__ if view else 'view', exc_info=exc)
    return JsonResponse(error_body('error', 'SERVER_ERROR', SERVER_ERROR_MESSAGE), status=500)
