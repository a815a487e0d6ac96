"""
Response serializers — 领域对象 → JSON-able dict。

只负责「输出格式化」，不做任何解析或校验。
"""

import base64

from .workflow import Correcting, Error, Extracting


def serialize_image(image):
    """图片 → data URL，历史页 / 修正页直接放进 <img src>。"""
    if image is None:
        return None
    encoded = base64.b64encode(image.data).decode("ascii")
    return f"data:{image.mime_type};base64,{encoded}"


def serialize_draft(draft):
    return {
        'prescription_date': draft.prescription_date,
        'medications': [
            {
                'name': med.name,
                'dosage': med.dosage,
                'usage': med.usage,
                'days': med.days,
            }
            for med in draft.medications
        ],
    }


def serialize_state(state):
    """Serialize workflow state with state-dependent fields."""
    response = {'state': state.name}

    if isinstance(state, Extracting):
        response['token'] = state.token
        response['message'] = 'Reading the prescription, please wait...'
    elif isinstance(state, Correcting):
        response['draft'] = serialize_draft(state.draft)
        response['image'] = serialize_image(state.image)
    elif isinstance(state, Error):
        response['error'] = {
            'code': state.code,
            'message': state.message,
            'retry_allowed': True,
        }

    return response


def serialize_prescription(prescription, include_image=True):
    response = {
        'id': prescription.id,
        'prescription_date': prescription.prescription_date,
        'medications': [
            {
                'id': med.id,
                'name': med.name,
                'dosage': med.dosage,
                'usage': med.usage,
                'days': med.days,
            }
            for med in prescription.medications
        ],
    }
    if include_image:
        response['original_image'] = serialize_image(prescription.original_image)
    return response


def serialize_history(prescriptions):
    results = [serialize_prescription(p) for p in prescriptions]
    return {
        'count': len(results),
        'prescriptions': results,
    }


def serialize_inventory(rows, today):
    results = [
        {
            'medication_id': row.medication_id,
            'prescription_id': row.prescription_id,
            'name': row.name,
            'dosage': row.dosage,
            'usage': row.usage,
            'remaining_days': row.remaining_days,
        }
        for row in rows
    ]
    return {
        'today': today.isoformat(),
        'count': len(results),
        'medications': results,
    }
