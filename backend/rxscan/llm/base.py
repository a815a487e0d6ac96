"""
BaseExtractionService — 所有识别服务实现的抽象基类。

每个新供应商只需：
1. 继承 BaseExtractionService
2. 实现 extract()
3. 在 factory.py 的 _build_registry 注册一行

tasks.py / workflow.py 完全不知道背后用哪家模型。
"""

import base64
from abc import ABC, abstractmethod

from ..models import ImagePayload
from .types import ExtractionResponse


class BaseExtractionService(ABC):

    @abstractmethod
    def extract(self, image: ImagePayload) -> ExtractionResponse:
        """
        把处方图片交给模型，返回结构化结果。

        Args:
            image: 原始图片字节 + MIME type

        Returns:
            ExtractionResponse(payload=解析后的 dict, model=模型名)

        Raises:
            ExtractionTimeout: SDK 超时
            Exception:         其他失败，由 services.extract_prescription() 统一转成 ExtractionFailure
        """

    @staticmethod
    def encode_image(image: ImagePayload) -> str:
        """base64 编码，供应商的 API 都要文本形式的图片。"""
        return base64.b64encode(image.data).decode("ascii")
