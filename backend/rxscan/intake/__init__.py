from .reconciler import check_shape, coerce_days, set_field, to_draft, validate
from .types import DraftMedication, ExtractionDraft, FieldError, ValidationReport

__all__ = [
    "check_shape",
    "coerce_days",
    "set_field",
    "to_draft",
    "validate",
    "DraftMedication",
    "ExtractionDraft",
    "FieldError",
    "ValidationReport",
]
