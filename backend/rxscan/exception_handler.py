"""
统一异常 → JSON 响应。

所有响应（无论成功还是失败）前端都能用同一套逻辑判断：
  response.type === 'validation_error' / 'illegal_transition' / 'extraction_error'  → 出问题了
  没有 type 字段  → 成功

统一错误响应格式：
{
    "type":    "validation_error",
    "code":    "DRAFT_VALIDATION_FAILED",
    "message": "...",
    "detail":  { ... }  // 可选
}
"""

from django.http import JsonResponse

from .exceptions import BaseAppException


def render_app_exception(exc: BaseAppException) -> JsonResponse:
    body = {
        'type': exc.type,
        'code': exc.code,
        'message': exc.message,
    }
    if exc.detail is not None:
        body['detail'] = exc.detail
    return JsonResponse(body, status=exc.http_status)


class ExceptionHandlerMixin:
    """
    View mixin：dispatch 时捕获 BaseAppException 并统一格式化。

    非 BaseAppException 的异常不拦截，照常冒泡给 Django。
    """

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except BaseAppException as exc:
            return render_app_exception(exc)
