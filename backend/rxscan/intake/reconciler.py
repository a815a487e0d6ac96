"""
Extraction Result Reconciler。

三步：check_shape → to_draft → (set_field ...) → validate

- check_shape: 识别服务的原始 JSON 结构不对就直接判失败，不做部分接受
- to_draft:    逐字段重建，draft 与原始结果之间不共享任何可变对象
- set_field:   修改一个字段，返回新的 draft
- validate:    commit 前的逐字段校验，结果以 ValidationReport 返回
"""

import logging
import math
import re
from dataclasses import replace
from datetime import date
from typing import Any, Mapping, Optional

from ..exceptions import InvalidExtractionShape, OutOfRange, ValidationError
from .types import DraftMedication, ExtractionDraft, FieldError, ValidationReport

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

DATE_FIELD = "prescription_date"
MEDICATION_FIELDS = ("name", "dosage", "usage", "days")


def coerce_days(value: Any) -> int:
    """
    用户输入的天数 → int。

    "14" / "14日分" / 14.0 → 14；空串、None、"abc" 之类解析不了的一律 → 0。
    负数原样保留，交给 validate() 报错。
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        return int(match.group(1)) if match else 0
    return 0


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def check_shape(raw: Any) -> None:
    """
    识别结果的结构校验。

    Raises:
        InvalidExtractionShape: 不是对象 / 缺 prescriptionDate / medications 不是列表 /
                                medications 里有非对象元素
    """
    if not isinstance(raw, Mapping):
        raise InvalidExtractionShape(
            message="Extraction result is not a JSON object.",
            detail={"received_type": type(raw).__name__},
        )

    if not raw.get("prescriptionDate"):
        raise InvalidExtractionShape(
            message="Extraction result is missing prescriptionDate.",
            detail={"keys": sorted(raw.keys())},
        )

    medications = raw.get("medications")
    if not isinstance(medications, list):
        raise InvalidExtractionShape(
            message="Extraction result medications is not a list.",
            detail={"received_type": type(medications).__name__},
        )

    for i, item in enumerate(medications):
        if not isinstance(item, Mapping):
            raise InvalidExtractionShape(
                message=f"Extraction result medications[{i}] is not an object.",
                detail={"index": i, "received_type": type(item).__name__},
            )


def to_draft(raw: Mapping) -> ExtractionDraft:
    """
    识别结果 → ExtractionDraft。

    药品数量和顺序与输入完全一致：不补、不删、不排序。
    缺失的文本字段补 ""，days 走与用户编辑相同的 coerce_days()。
    """
    check_shape(raw)

    medications = tuple(
        DraftMedication(
            name=_text(item.get("name")),
            usage=_text(item.get("usage")),
            days=coerce_days(item.get("days")),
            dosage=_text(item.get("dosage")),
        )
        for item in raw["medications"]
    )

    return ExtractionDraft(
        prescription_date=_text(raw["prescriptionDate"]).strip(),
        medications=medications,
    )


def set_field(
    draft: ExtractionDraft,
    medication_index: Optional[int],
    field_name: str,
    value: Any,
) -> ExtractionDraft:
    """
    替换 draft 中的一个字段，返回新 draft。

    medication_index 为 None 时只能改顶层的 prescription_date。
    其余药品对象原样复用（不会被复制或改动）。

    Raises:
        OutOfRange:      index 超出当前药品列表
        ValidationError: 未知字段名
    """
    if medication_index is None:
        if field_name != DATE_FIELD:
            raise ValidationError(
                message=f"Unknown prescription field: {field_name!r}.",
                code="UNKNOWN_FIELD",
                detail={"field": field_name, "known_fields": [DATE_FIELD]},
            )
        return replace(draft, prescription_date=_text(value))

    if field_name not in MEDICATION_FIELDS:
        raise ValidationError(
            message=f"Unknown medication field: {field_name!r}.",
            code="UNKNOWN_FIELD",
            detail={"field": field_name, "known_fields": list(MEDICATION_FIELDS)},
        )

    count = len(draft.medications)
    if isinstance(medication_index, bool) or not isinstance(medication_index, int) \
            or not 0 <= medication_index < count:
        raise OutOfRange(
            message=f"Medication index {medication_index!r} is out of range.",
            detail={"index": medication_index, "count": count},
        )

    if field_name == "days":
        new_value = coerce_days(value)
        if new_value == 0 and value not in (0, "0"):
            logger.info("[Reconciler] days input %r for medication %d coerced to 0", value, medication_index)
    else:
        new_value = _text(value)

    medications = list(draft.medications)
    medications[medication_index] = replace(medications[medication_index], **{field_name: new_value})
    return replace(draft, medications=tuple(medications))


def _is_calendar_date(value: str) -> bool:
    if not DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate(draft: ExtractionDraft) -> ValidationReport:
    """commit 前的字段校验。不抛异常，不清空任何已填数据。"""
    report = ValidationReport()

    if not _is_calendar_date(draft.prescription_date or ""):
        report.errors.append(FieldError(
            DATE_FIELD,
            "Prescription date must be a real calendar date in YYYY-MM-DD format.",
        ))

    for i, med in enumerate(draft.medications):
        prefix = f"medications[{i}]"

        if not (med.name or "").strip():
            report.errors.append(FieldError(f"{prefix}.name", "Medication name is required."))

        if not (med.usage or "").strip():
            report.errors.append(FieldError(f"{prefix}.usage", "Usage instructions are required."))

        if isinstance(med.days, bool) or not isinstance(med.days, int):
            report.errors.append(FieldError(f"{prefix}.days", "Days must be a whole number."))
        elif med.days < 0:
            report.errors.append(FieldError(f"{prefix}.days", "Days must be 0 or greater."))
        elif med.days == 0:
            report.warnings.append(FieldError(
                f"{prefix}.days",
                "Days is 0; this medication will not appear in the active inventory.",
            ))

    return report
