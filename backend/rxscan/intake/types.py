"""
ExtractionDraft — 识别结果到正式处方之间的可编辑中间态。

Draft 是 frozen 的：每次 set_field() 返回一个新对象，workflow 替换引用即可，
旧 draft（以及原始识别结果）永远不会被原地修改。
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DraftMedication:
    name: str = ""
    usage: str = ""
    days: int = 0
    dosage: str = ""


@dataclass(frozen=True)
class ExtractionDraft:
    prescription_date: str = ""                             # 期望 "YYYY-MM-DD"，validate() 复查
    medications: tuple[DraftMedication, ...] = ()


@dataclass(frozen=True)
class FieldError:
    field: str       # "prescription_date" / "medications[1].usage" / ...
    message: str

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationReport:
    """
    validate() 的返回值。校验失败以数据形式返回，不抛异常。

    warnings 不阻止 commit（例如 days == 0 的药品提交后不会出现在库存里）。
    """

    errors: list[FieldError] = field(default_factory=list)
    warnings: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
