import json
from datetime import date

from django.http import JsonResponse
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from . import tasks
from .exception_handler import ExceptionHandlerMixin
from .exceptions import ValidationError
from .intake.reconciler import DATE_RE
from .inventory import history_recent_first
from .models import ImagePayload
from .serializers import (
    serialize_draft,
    serialize_history,
    serialize_inventory,
    serialize_prescription,
    serialize_state,
)
from .session import get_workflow


def _json_body(request):
    try:
        data = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        raise ValidationError(message='Request body must be valid JSON.', code='INVALID_JSON')
    if not isinstance(data, dict):
        raise ValidationError(message='Request body must be a JSON object.', code='INVALID_JSON')
    return data


def _image_from_request(request):
    """multipart 的 image 字段，或者 Content-Type 为 image/* 的原始请求体。"""
    upload = request.FILES.get('image')
    if upload is not None:
        mime_type = upload.content_type or 'image/jpeg'
        if not mime_type.startswith('image/'):
            raise ValidationError(
                message='Uploaded file must be an image.',
                code='NOT_AN_IMAGE',
                detail={'content_type': mime_type},
            )
        return ImagePayload(data=upload.read(), mime_type=mime_type)

    if request.content_type.startswith('image/') and request.body:
        return ImagePayload(data=request.body, mime_type=request.content_type)

    raise ValidationError(message='An image is required.', code='IMAGE_REQUIRED')


def _today_from_request(request):
    raw = request.GET.get('today')
    if not raw:
        return timezone.localdate()
    try:
        if not DATE_RE.match(raw):
            raise ValueError(raw)
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError(
            message='today must be a date in YYYY-MM-DD format.',
            code='INVALID_DATE',
            detail={'today': raw},
        )


class SessionView(ExceptionHandlerMixin, View):
    """GET /api/session/ - Current workflow state"""

    def get(self, request):
        return JsonResponse(serialize_state(get_workflow().state))


@method_decorator(csrf_exempt, name='dispatch')
class ScanCreateView(ExceptionHandlerMixin, View):
    """POST /api/scans/ - Submit a prescription photo and start extraction"""

    def post(self, request):
        image = _image_from_request(request)
        workflow = get_workflow()
        token = tasks.dispatch_extraction(workflow, image)

        body = serialize_state(workflow.state)
        body['token'] = token
        return JsonResponse(body, status=202)


@method_decorator(csrf_exempt, name='dispatch')
class DraftEditView(ExceptionHandlerMixin, View):
    """PATCH /api/session/draft/ - Replace one field of the draft"""

    def patch(self, request):
        data = _json_body(request)
        if 'field' not in data:
            raise ValidationError(message='field is required.', code='FIELD_REQUIRED')

        workflow = get_workflow()
        draft = workflow.edit(
            data.get('medication_index'),
            data['field'],
            data.get('value'),
        )
        if draft is None:
            return JsonResponse(serialize_state(workflow.state))
        return JsonResponse({'state': 'correcting', 'draft': serialize_draft(draft)})


@method_decorator(csrf_exempt, name='dispatch')
class CommitView(ExceptionHandlerMixin, View):
    """POST /api/session/commit/ - Save the corrected draft into history"""

    def post(self, request):
        prescription = get_workflow().commit()
        if prescription is None:
            return JsonResponse(serialize_state(get_workflow().state))
        return JsonResponse(serialize_prescription(prescription, include_image=False), status=201)


@method_decorator(csrf_exempt, name='dispatch')
class CancelView(ExceptionHandlerMixin, View):
    """POST /api/session/cancel/ - Discard the draft or abandon the running extraction"""

    def post(self, request):
        workflow = get_workflow()
        workflow.cancel()
        return JsonResponse(serialize_state(workflow.state))


@method_decorator(csrf_exempt, name='dispatch')
class AcknowledgeErrorView(ExceptionHandlerMixin, View):
    """POST /api/session/acknowledge/ - Dismiss the extraction error"""

    def post(self, request):
        workflow = get_workflow()
        workflow.acknowledge_error()
        return JsonResponse(serialize_state(workflow.state))


class PrescriptionHistoryView(ExceptionHandlerMixin, View):
    """GET /api/prescriptions/ - Full history, most recent prescription date first"""

    def get(self, request):
        return JsonResponse(serialize_history(history_recent_first(get_workflow().history)))


class InventoryView(ExceptionHandlerMixin, View):
    """GET /api/inventory/?today=YYYY-MM-DD - Active medications, running out soonest first"""

    def get(self, request):
        today = _today_from_request(request)
        rows = get_workflow().inventory(today)
        return JsonResponse(serialize_inventory(rows, today))
