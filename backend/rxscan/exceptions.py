"""
统一异常体系。

所有业务异常继承 BaseAppException，包含：
- type:        错误类型标识（validation_error / illegal_transition / extraction_error）
- code:        业务错误码（DRAFT_VALIDATION_FAILED / EXTRACTION_TIMEOUT / ...）
- message:     人类可读的描述
- detail:      可选的附加信息（dict / list / None）
- http_status: HTTP 状态码

Workflow / Reconciler 只需 raise，views 的 ExceptionHandlerMixin 统一捕获并格式化响应。
"""


class BaseAppException(Exception):
    """所有业务异常的基类。"""

    type = 'error'
    code = 'UNKNOWN_ERROR'
    http_status = 500

    def __init__(self, message, code=None, detail=None, http_status=None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.detail = detail
        super().__init__(message)


class ValidationError(BaseAppException):
    """输入验证失败（请求体、字段名等），400。"""

    type = 'validation_error'
    code = 'VALIDATION_ERROR'
    http_status = 400


class ValidationFailed(ValidationError):
    """
    Draft 没通过 validate()，commit 被拒绝。

    可以原地修复：workflow 保持在 Correcting，detail['errors'] 是逐字段的错误列表，
    前端据此标注具体输入框。
    """

    code = 'DRAFT_VALIDATION_FAILED'


class OutOfRange(ValidationError):
    """edit 引用的 medication index 在当前 draft 里不存在。"""

    code = 'MEDICATION_INDEX_OUT_OF_RANGE'
    http_status = 404


class IllegalTransition(BaseAppException):
    """
    当前状态下不允许的操作（例如 Extracting 时 commit）。

    属于调用方违反契约，不是用户错误。strict 模式下抛出，lenient 模式下只记日志。
    """

    type = 'illegal_transition'
    code = 'ILLEGAL_TRANSITION'
    http_status = 409


class ExtractionFailure(BaseAppException):
    """外部识别服务调用失败或返回不可用的结果。不自动重试。"""

    type = 'extraction_error'
    code = 'EXTRACTION_FAILED'
    http_status = 502


class InvalidExtractionShape(ExtractionFailure):
    """识别服务返回成功，但结构不对（缺日期、medications 不是列表）。"""

    code = 'INVALID_EXTRACTION_SHAPE'


class ExtractionTimeout(ExtractionFailure):
    """识别服务超时。"""

    code = 'EXTRACTION_TIMEOUT'
    http_status = 504
