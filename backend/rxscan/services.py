"""
识别服务边界。

外部调用可能抛出任何异常（网络、鉴权、SDK 内部错误、JSON 解析失败）。
在这里统一转成 ExtractionFailure，workflow 永远看不到传输层的原始异常。
"""

import logging

from .exceptions import ExtractionFailure
from .intake import check_shape
from .llm import get_extraction_service
from .llm.types import ExtractionResponse

logger = logging.getLogger(__name__)

EXTRACTION_FAILED_MESSAGE = (
    "Could not read the prescription. Check that the photo is sharp and try again."
)


def extract_prescription(image, service=None) -> ExtractionResponse:
    """
    调用识别服务并校验返回结构。

    Args:
        image:   ImagePayload
        service: BaseExtractionService；None 时按 settings.EXTRACTION_PROVIDER 创建

    Raises:
        ExtractionTimeout:      SDK 超时
        InvalidExtractionShape: 返回结构不合法
        ExtractionFailure:      其他一切失败
    """
    try:
        if service is None:
            service = get_extraction_service()
        response = service.extract(image)
    except ExtractionFailure:
        raise
    except Exception as exc:
        logger.warning("[Extraction] 识别服务调用失败: %s: %s", type(exc).__name__, exc)
        raise ExtractionFailure(
            message=EXTRACTION_FAILED_MESSAGE,
            detail={"cause": f"{type(exc).__name__}: {exc}"},
        ) from exc

    check_shape(response.payload)
    logger.info(
        "[Extraction] 识别成功 model=%s，药品数=%d",
        response.model, len(response.payload["medications"]),
    )
    return response
