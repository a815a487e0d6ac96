"""
工厂函数：根据 settings.EXTRACTION_PROVIDER 返回对应的 ExtractionService 实例。

新增供应商只需：
  1. 在 services.py 新建 XxxService(BaseExtractionService) 类
  2. 在此处 _build_registry 加一行
  不需要修改 tasks.py 或任何业务代码。
"""

from django.conf import settings

from .base import BaseExtractionService


def _build_registry() -> dict[str, type[BaseExtractionService]]:
    # 延迟导入，SDK 只在真正调用时才 import
    from .services import ClaudeService, OpenAIService

    return {
        "anthropic": ClaudeService,
        "openai":    OpenAIService,
    }


def get_extraction_service() -> BaseExtractionService:
    """
    从 settings.EXTRACTION_PROVIDER 读取供应商，返回对应的 service 实例。

    settings.EXTRACTION_PROVIDER 由环境变量 EXTRACTION_PROVIDER 控制（默认 "anthropic"）。

    Raises:
        ValueError: EXTRACTION_PROVIDER 未知
    """
    provider = getattr(settings, "EXTRACTION_PROVIDER", "anthropic")
    registry = _build_registry()
    service_cls = registry.get(provider)

    if service_cls is None:
        raise ValueError(
            f"Unknown EXTRACTION_PROVIDER: {provider!r}. "
            f"Known providers: {list(registry.keys())}"
        )

    return service_cls()
