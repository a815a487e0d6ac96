"""
领域模型 — 处方 / 药品 / 库存行。

持久化不在本项目范围内：history 只活在进程内存里，所以这里是 dataclass，不是 ORM model。
Draft（可编辑的中间态）在 intake/types.py。
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ImagePayload:
    """处方照片。core 不关心它来自相机还是相册，只负责转交给识别服务和回显。"""

    data: bytes = field(repr=False)
    mime_type: str = "image/jpeg"


@dataclass
class Medication:
    id: str
    name: str          # 药名，尽量带规格，例如 "DrugX 20mg"，原样抄录
    usage: str         # 用法，原样抄录
    days: int          # 处方天数，>= 0
    dosage: str = ""   # 可选：用量（"20mg" / "1 tablet"）


@dataclass
class Prescription:
    """
    一张已提交的处方。

    medications 的顺序 = 纸质处方上的顺序，从识别到入库全程不重排。
    original_image 只用于历史页回显照片。
    """

    id: str
    prescription_date: str  # "YYYY-MM-DD"
    medications: list[Medication] = field(default_factory=list)
    original_image: Any = field(default=None, repr=False)


@dataclass(frozen=True)
class InventoryRow:
    medication_id: str
    prescription_id: str
    name: str
    dosage: str
    usage: str
    remaining_days: int
