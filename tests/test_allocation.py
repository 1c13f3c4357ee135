import json
import unittest

from planner.artifacts.allocation import (
    generate_allocation,
    is_valid_budget,
    validate_allocations,
    yearly_budget,
)
from planner.errors import ArtifactGenerationError
from planner.models import SequencedRow
from planner.models.constants import DEFAULT_TIME_BUDGET
from tests.helpers import FakeService


def flow_rows(count=3):
    return [
        SequencedRow(topic="T", objective=f"o{i}", code=f"1.{i + 1}", sequence=i + 1, semester="Ganjil")
        for i in range(count)
    ]


class TestValidateAllocations(unittest.TestCase):
    def test_valid_value_is_accepted_verbatim(self):
        result = validate_allocations([{"index": 0, "value": "4 JP"}], 1)
        self.assertEqual(result.values, ["4 JP"])
        self.assertEqual(result.substituted, [])

    def test_missing_unit_and_negative_values_are_replaced(self):
        entries = [
            {"index": 0, "value": "4"},
            {"index": 1, "value": "-3 JP"},
            {"index": 2, "value": "6 JP"},
        ]
        result = validate_allocations(entries, 3)
        self.assertEqual(result.values, [DEFAULT_TIME_BUDGET, DEFAULT_TIME_BUDGET, "6 JP"])
        self.assertEqual(result.substituted, [0, 1])

    def test_missing_and_duplicated_rows_are_replaced(self):
        entries = [
            {"index": 0, "alokasiWaktu": "4 JP"},
            {"index": 0, "alokasiWaktu": "6 JP"},
            {"index": 2, "timeBudget": "8 JP"},
        ]
        result = validate_allocations(entries, 3)
        self.assertEqual(result.values, [DEFAULT_TIME_BUDGET, DEFAULT_TIME_BUDGET, "8 JP"])
        self.assertEqual(len(result.warnings), 2)

    def test_out_of_range_and_non_object_entries_are_ignored(self):
        result = validate_allocations([{"index": 7, "value": "4 JP"}, "4 JP"], 1)
        self.assertEqual(result.values, [DEFAULT_TIME_BUDGET])

    def test_non_list_input_defaults_everything(self):
        result = validate_allocations({"index": 0, "value": "4 JP"}, 2)
        self.assertEqual(result.values, [DEFAULT_TIME_BUDGET] * 2)
        self.assertEqual(result.substituted, [0, 1])

    def test_budget_format(self):
        self.assertTrue(is_valid_budget("12 JP"))
        for value in ("0 JP", "4", "4JP", "4 jp", "-3 JP", "120 Menit", 4, None):
            with self.subTest(value=value):
                self.assertFalse(is_valid_budget(value))


class TestGenerateAllocation(unittest.TestCase):
    def test_rows_follow_flow_and_budget_is_not_enforced(self):
        response = json.dumps([
            {"index": 0, "alokasiWaktu": "4 JP"},
            {"index": 1, "alokasiWaktu": "6 JP"},
            {"index": 2, "alokasiWaktu": "2 JP"},
        ])
        service = FakeService([response])
        result = generate_allocation(service, flow_rows(), weekly_hours=2, subject="Matematika")

        self.assertEqual([r.time_budget for r in result.rows], ["4 JP", "6 JP", "2 JP"])
        self.assertEqual([r.code for r in result.rows], ["1.1", "1.2", "1.3"])
        self.assertEqual(result.budget, 64)
        self.assertEqual(result.allocated_total, 12)
        self.assertIn("64 JP", service.prompts[0])

    def test_unparsable_response_defaults_every_row(self):
        service = FakeService(["no idea"])
        result = generate_allocation(service, flow_rows(2), weekly_hours=3)
        self.assertEqual([r.time_budget for r in result.rows], [DEFAULT_TIME_BUDGET] * 2)
        self.assertEqual(result.substituted, [0, 1])

    def test_empty_flow_raises(self):
        with self.assertRaises(ArtifactGenerationError):
            generate_allocation(FakeService([]), [], weekly_hours=2)

    def test_service_failure_raises(self):
        with self.assertRaises(ArtifactGenerationError):
            generate_allocation(FakeService([RuntimeError("down")]), flow_rows(1), weekly_hours=2)

    def test_yearly_budget(self):
        self.assertEqual(yearly_budget(4), 128)


if __name__ == "__main__":
    unittest.main()
