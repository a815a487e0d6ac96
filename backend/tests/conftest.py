"""
Shared fixtures for all tests.

factory-boy factories live here so both unit/ and integration/ can import them.
领域模型都是 dataclass，所以用 factory.Factory（不是 DjangoModelFactory）。
"""
import itertools

import factory
import pytest
from django.test import Client

from rxscan.intake import DraftMedication, ExtractionDraft
from rxscan.llm import BaseExtractionService, ExtractionResponse
from rxscan.models import ImagePayload, Medication, Prescription
from rxscan.session import reset_workflow
from rxscan.workflow import PrescriptionWorkflow


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class MedicationFactory(factory.Factory):
    class Meta:
        model = Medication

    id = factory.Sequence(lambda n: f'med-{n}')
    name = 'DrugA 10mg'
    usage = '1x daily after breakfast'
    days = 14
    dosage = '1 tablet'


class PrescriptionFactory(factory.Factory):
    class Meta:
        model = Prescription

    id = factory.Sequence(lambda n: f'rx-{n}')
    prescription_date = '2024-01-01'
    medications = factory.LazyFunction(lambda: [MedicationFactory()])
    original_image = None


class DraftMedicationFactory(factory.Factory):
    class Meta:
        model = DraftMedication

    name = 'DrugA 10mg'
    usage = '1x daily'
    days = 10
    dosage = ''


class ExtractionDraftFactory(factory.Factory):
    class Meta:
        model = ExtractionDraft

    prescription_date = '2024-03-05'
    medications = factory.LazyFunction(lambda: (DraftMedicationFactory(),))


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------

class FakeExtractionService(BaseExtractionService):
    """返回固定 payload，或抛出给定异常。记录收到的图片。"""

    def __init__(self, payload=None, error=None, model='fake-vision-1'):
        self.payload = payload
        self.error = error
        self.model = model
        self.calls = []

    def extract(self, image):
        self.calls.append(image)
        if self.error is not None:
            raise self.error
        return ExtractionResponse(payload=self.payload, model=self.model)


def sequential_ids(prefix='id'):
    counter = itertools.count(1)
    return lambda: f'{prefix}-{next(counter)}'


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_extraction_payload():
    """识别服务的典型返回。"""
    return {
        'prescriptionDate': '2024-03-05',
        'medications': [
            {'name': 'DrugA', 'dosage': '', 'usage': '1x daily', 'days': 10},
        ],
    }


@pytest.fixture
def two_drug_payload():
    return {
        'prescriptionDate': '2024-01-01',
        'medications': [
            {'name': 'DrugX 20mg', 'dosage': '1 tablet', 'usage': '2x daily after meals', 'days': 14},
            {'name': 'DrugY 5mg', 'dosage': '2 tablets', 'usage': 'at bedtime', 'days': 7},
        ],
    }


@pytest.fixture
def image():
    return ImagePayload(data=b'\xff\xd8\xff\xe0fake-jpeg', mime_type='image/jpeg')


@pytest.fixture
def workflow():
    return PrescriptionWorkflow(id_factory=sequential_ids())


@pytest.fixture
def lenient_workflow():
    return PrescriptionWorkflow(id_factory=sequential_ids(), strict=False)


@pytest.fixture
def session_workflow():
    """替换进程内的 workflow，测试结束后还原。"""
    wf = PrescriptionWorkflow(id_factory=sequential_ids())
    reset_workflow(wf)
    yield wf
    reset_workflow(None)


@pytest.fixture
def api_client():
    """Django test client for integration tests."""
    return Client()
