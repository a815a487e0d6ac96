"""识别指令和结构化输出 schema，所有供应商共用。"""

SYSTEM_PROMPT = (
    "You are a high-accuracy OCR engine for paper medical prescriptions. "
    "You transcribe exactly what is printed and never guess."
)

EXTRACTION_INSTRUCTION = """Read the prescription in the attached image and extract:
- the prescription issue date
- every prescribed medication, with:
  - name (include the strength / form if printed, e.g. "DrugX 20mg")
  - dosage (amount per dose if printed separately, e.g. "1 tablet"; empty string if not shown)
  - usage (dosing instructions exactly as written, e.g. "3 times daily after meals")
  - days (number of days supplied, as an integer)

Rules:
- Transcribe verbatim. Do not infer missing values and do not do any arithmetic.
- Keep the medications in the same order as they appear on the prescription.
- Always return the date as YYYY-MM-DD.
- Respond only with data matching the given JSON schema."""

_MEDICATION_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "name":   {"type": "string", "description": "Medication name, including strength if shown"},
        "dosage": {"type": "string", "description": "Dose amount, e.g. 20mg or 1 tablet; empty if not shown"},
        "usage":  {"type": "string", "description": "Dosing instructions as written"},
        "days":   {"type": "integer", "description": "Number of days supplied, e.g. 7"},
    },
    "required": ["name", "dosage", "usage", "days"],
}

PRESCRIPTION_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "prescriptionDate": {
            "type": "string",
            "description": "Prescription issue date, always YYYY-MM-DD",
        },
        "medications": {
            "type": "array",
            "description": "Prescribed medications in the order printed on the prescription",
            "items": _MEDICATION_SCHEMA,
        },
    },
    "required": ["prescriptionDate", "medications"],
}
