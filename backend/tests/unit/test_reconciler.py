"""
测试 Extraction Result Reconciler：
- check_shape() 结构校验
- to_draft() 独立拷贝、顺序/数量不变
- set_field() 单字段替换、不改原 draft、OutOfRange
- validate() 逐字段报错
"""
import copy

import pytest

from rxscan.exceptions import InvalidExtractionShape, OutOfRange, ValidationError
from rxscan.intake import coerce_days, set_field, to_draft, validate
from tests.conftest import DraftMedicationFactory, ExtractionDraftFactory


# ── check_shape / to_draft ────────────────────────────────────────────────

class TestToDraft:

    def test_fields_copied(self, two_drug_payload):
        draft = to_draft(two_drug_payload)
        assert draft.prescription_date == '2024-01-01'
        assert [m.name for m in draft.medications] == ['DrugX 20mg', 'DrugY 5mg']
        assert draft.medications[0].usage == '2x daily after meals'
        assert draft.medications[0].dosage == '1 tablet'
        assert draft.medications[1].days == 7

    def test_count_and_order_preserved(self):
        raw = {
            'prescriptionDate': '2024-01-01',
            'medications': [{'name': n, 'usage': 'u', 'days': i} for i, n in enumerate('ZYXWV')],
        }
        draft = to_draft(raw)
        assert [m.name for m in draft.medications] == list('ZYXWV')
        assert [m.days for m in draft.medications] == [0, 1, 2, 3, 4]

    def test_raw_payload_not_mutated(self, two_drug_payload):
        before = copy.deepcopy(two_drug_payload)
        draft = to_draft(two_drug_payload)
        set_field(draft, 0, 'name', 'Changed')
        assert two_drug_payload == before

    def test_later_raw_mutation_does_not_leak_into_draft(self, two_drug_payload):
        draft = to_draft(two_drug_payload)
        two_drug_payload['medications'][0]['name'] = 'Tampered'
        two_drug_payload['medications'].append({'name': 'Extra', 'usage': 'x', 'days': 1})
        assert draft.medications[0].name == 'DrugX 20mg'
        assert len(draft.medications) == 2

    def test_missing_text_fields_become_empty(self):
        draft = to_draft({'prescriptionDate': '2024-01-01', 'medications': [{'days': 3}]})
        med = draft.medications[0]
        assert (med.name, med.usage, med.dosage, med.days) == ('', '', '', 3)

    def test_string_days_coerced(self):
        draft = to_draft({'prescriptionDate': '2024-01-01', 'medications': [
            {'name': 'A', 'usage': 'u', 'days': '14'},
            {'name': 'B', 'usage': 'u', 'days': 'unknown'},
        ]})
        assert [m.days for m in draft.medications] == [14, 0]

    def test_empty_medication_list_allowed(self):
        draft = to_draft({'prescriptionDate': '2024-01-01', 'medications': []})
        assert draft.medications == ()

    @pytest.mark.parametrize('raw', [
        {'medications': []},
        {'prescriptionDate': '', 'medications': []},
        {'prescriptionDate': '2024-01-01'},
        {'prescriptionDate': '2024-01-01', 'medications': {'name': 'A'}},
        {'prescriptionDate': '2024-01-01', 'medications': ['DrugA']},
        ['not', 'an', 'object'],
        None,
    ])
    def test_bad_shape_raises(self, raw):
        with pytest.raises(InvalidExtractionShape) as exc_info:
            to_draft(raw)
        assert exc_info.value.code == 'INVALID_EXTRACTION_SHAPE'


# ── coerce_days ───────────────────────────────────────────────────────────

class TestCoerceDays:

    @pytest.mark.parametrize('value, expected', [
        (14, 14),
        ('14', 14),
        (' 7 ', 7),
        ('14日分', 14),
        (3.9, 3),
        ('', 0),
        ('abc', 0),
        (None, 0),
        (True, 0),
        ('-3', -3),
        (float('nan'), 0),
    ])
    def test_coercion(self, value, expected):
        assert coerce_days(value) == expected


# ── set_field ─────────────────────────────────────────────────────────────

class TestSetField:

    def _draft(self):
        return ExtractionDraftFactory(medications=(
            DraftMedicationFactory(name='DrugA', days=10),
            DraftMedicationFactory(name='DrugB', days=5),
        ))

    def test_replaces_exactly_one_field(self):
        draft = self._draft()
        updated = set_field(draft, 1, 'usage', 'at bedtime')
        assert updated.medications[1].usage == 'at bedtime'
        assert updated.medications[1].name == 'DrugB'
        assert updated.medications[1].days == 5
        assert updated.prescription_date == draft.prescription_date

    def test_other_medications_untouched(self):
        draft = self._draft()
        updated = set_field(draft, 1, 'name', 'DrugC')
        assert updated.medications[0] is draft.medications[0]

    def test_input_draft_not_mutated(self):
        draft = self._draft()
        set_field(draft, 0, 'days', 20)
        assert draft.medications[0].days == 10

    def test_top_level_date(self):
        updated = set_field(self._draft(), None, 'prescription_date', '2024-04-01')
        assert updated.prescription_date == '2024-04-01'

    def test_days_coerced_from_text(self):
        assert set_field(self._draft(), 0, 'days', '21').medications[0].days == 21
        assert set_field(self._draft(), 0, 'days', 'abc').medications[0].days == 0

    def test_same_value_is_structurally_equal(self):
        draft = self._draft()
        updated = set_field(draft, 0, 'name', 'DrugA')
        assert updated == draft
        assert updated is not draft

    @pytest.mark.parametrize('index', [2, -1, 99])
    def test_out_of_range(self, index):
        with pytest.raises(OutOfRange) as exc_info:
            set_field(self._draft(), index, 'name', 'X')
        assert exc_info.value.detail == {'index': index, 'count': 2}

    def test_unknown_medication_field(self):
        with pytest.raises(ValidationError) as exc_info:
            set_field(self._draft(), 0, 'id', 'x')
        assert exc_info.value.code == 'UNKNOWN_FIELD'

    def test_medication_field_without_index(self):
        with pytest.raises(ValidationError) as exc_info:
            set_field(self._draft(), None, 'name', 'x')
        assert exc_info.value.code == 'UNKNOWN_FIELD'


# ── validate ──────────────────────────────────────────────────────────────

class TestValidate:

    def _fields(self, report):
        return [e.field for e in report.errors]

    def test_valid_draft(self):
        report = validate(ExtractionDraftFactory())
        assert report.ok
        assert report.errors == []

    @pytest.mark.parametrize('value', ['', '2024/03/05', '05-03-2024', '2024-02-30', '2024-3-5', 'soon'])
    def test_bad_date(self, value):
        report = validate(ExtractionDraftFactory(prescription_date=value))
        assert not report.ok
        assert 'prescription_date' in self._fields(report)

    def test_blank_name_and_usage(self):
        draft = ExtractionDraftFactory(medications=(
            DraftMedicationFactory(),
            DraftMedicationFactory(name='  ', usage=''),
        ))
        report = validate(draft)
        assert self._fields(report) == ['medications[1].name', 'medications[1].usage']

    def test_negative_days(self):
        draft = ExtractionDraftFactory(medications=(DraftMedicationFactory(days=-2),))
        assert self._fields(validate(draft)) == ['medications[0].days']

    def test_zero_days_is_warning_only(self):
        draft = ExtractionDraftFactory(medications=(DraftMedicationFactory(days=0),))
        report = validate(draft)
        assert report.ok
        assert [w.field for w in report.warnings] == ['medications[0].days']

    def test_dosage_not_required(self):
        draft = ExtractionDraftFactory(medications=(DraftMedicationFactory(dosage=''),))
        assert validate(draft).ok

    def test_validation_keeps_data(self):
        draft = ExtractionDraftFactory(prescription_date='')
        validate(draft)
        assert draft.medications[0].name == 'DrugA 10mg'
