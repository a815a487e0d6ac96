"""
识别层的标准响应结构。

所有 ExtractionService 实现的 extract() 都返回这个对象。
业务层（services.py / tasks.py）只认识这个格式，不知道背后用的是哪家模型。
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ExtractionResponse:
    payload: Any = field(repr=False)   # 解析后的 JSON：{prescriptionDate, medications: [...]}
    model: str                         # 实际使用的模型名
