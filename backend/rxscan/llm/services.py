"""
具体识别服务实现。

新增供应商：在此文件添加一个类，然后在 factory.py 注册即可。

已注册供应商：
  anthropic — ClaudeService   (claude-sonnet-4-20250514，tool use 强制结构化输出)
  openai    — OpenAIService   (gpt-4o，response_format=json_schema)
"""

import json
import os

from django.conf import settings

from ..exceptions import ExtractionTimeout
from ..models import ImagePayload
from .base import BaseExtractionService
from .prompts import EXTRACTION_INSTRUCTION, PRESCRIPTION_SCHEMA, SYSTEM_PROMPT
from .types import ExtractionResponse


def _timeout() -> float:
    return float(getattr(settings, "EXTRACTION_TIMEOUT", 60))


def _max_tokens() -> int:
    return int(getattr(settings, "EXTRACTION_MAX_TOKENS", 2000))


# ── ClaudeService ──────────────────────────────────────────────────────────
#
# 使用 Anthropic SDK。
# 环境变量：ANTHROPIC_API_KEY
# 模型：claude-sonnet-4-20250514（可通过 ANTHROPIC_MODEL 覆盖）
# 用一个只有 input_schema 的 tool 并强制 tool_choice，拿到的 tool_use.input 就是结构化结果。

class ClaudeService(BaseExtractionService):

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    TOOL_NAME = "record_prescription"

    def extract(self, image: ImagePayload) -> ExtractionResponse:
        import anthropic

        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")

        model = os.getenv("ANTHROPIC_MODEL", self.DEFAULT_MODEL)
        client = anthropic.Anthropic(api_key=api_key, timeout=_timeout())

        try:
            response = client.messages.create(
                model=model,
                max_tokens=_max_tokens(),
                system=SYSTEM_PROMPT,
                tools=[{
                    "name": self.TOOL_NAME,
                    "description": "Record the data transcribed from the prescription image.",
                    "input_schema": PRESCRIPTION_SCHEMA,
                }],
                tool_choice={"type": "tool", "name": self.TOOL_NAME},
                messages=[{
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": image.mime_type,
                                "data": self.encode_image(image),
                            },
                        },
                        {"type": "text", "text": EXTRACTION_INSTRUCTION},
                    ],
                }],
            )
        except anthropic.APITimeoutError as exc:
            raise ExtractionTimeout(message="Timeout", detail={"provider": "anthropic"}) from exc

        for block in response.content:
            if getattr(block, "type", None) == "tool_use":
                return ExtractionResponse(payload=block.input, model=model)

        raise ValueError("Claude response contained no tool_use block")


# ── OpenAIService ──────────────────────────────────────────────────────────
#
# 使用 OpenAI SDK。
# 环境变量：OPENAI_API_KEY
# 模型：gpt-4o（可通过 OPENAI_MODEL 覆盖）

class OpenAIService(BaseExtractionService):

    DEFAULT_MODEL = "gpt-4o"

    def extract(self, image: ImagePayload) -> ExtractionResponse:
        import openai

        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not set")

        model = os.getenv("OPENAI_MODEL", self.DEFAULT_MODEL)
        client = openai.OpenAI(api_key=api_key, timeout=_timeout())

        data_url = f"data:{image.mime_type};base64,{self.encode_image(image)}"

        try:
            response = client.chat.completions.create(
                model=model,
                max_tokens=_max_tokens(),
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": [
                        {"type": "text", "text": EXTRACTION_INSTRUCTION},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ]},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "prescription",
                        "schema": PRESCRIPTION_SCHEMA,
                        "strict": True,
                    },
                },
            )
        except openai.APITimeoutError as exc:
            raise ExtractionTimeout(message="Timeout", detail={"provider": "openai"}) from exc

        return ExtractionResponse(
            payload=json.loads(response.choices[0].message.content),
            model=model,
        )
