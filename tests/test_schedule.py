import json
import unittest

from planner.artifacts.schedule import (
    budget_hours,
    correct_distribution,
    generate_schedule,
    normalize_distribution,
    semester_headers,
)
from planner.errors import ArtifactGenerationError
from planner.models import AllocationRow
from tests.helpers import FakeService

MONTHS = ["Juli", "Agustus", "September", "Oktober", "November", "Desember"]


def allocation_rows():
    return [
        AllocationRow(order=1, topic="T", code="1.1", objective="o1", time_budget="4 JP", semester="Ganjil"),
        AllocationRow(order=2, topic="T", code="1.2", objective="o2", time_budget="6 JP", semester="Ganjil"),
        AllocationRow(order=3, topic="U", code="2.1", objective="o3", time_budget="2 JP", semester="Genap"),
    ]


class TestHelpers(unittest.TestCase):
    def test_headers(self):
        headers = semester_headers("genap")
        self.assertEqual(headers[0].month, "Januari")
        self.assertEqual(len(headers), 6)
        self.assertTrue(all(h.weeks == 5 for h in headers))

    def test_unknown_semester(self):
        with self.assertRaises(ArtifactGenerationError):
            semester_headers("Semester 3")

    def test_budget_hours(self):
        self.assertEqual(budget_hours("6 JP"), 6)
        self.assertEqual(budget_hours(""), 0)

    def test_stored_row_accepts_hand_edited_budget(self):
        row = AllocationRow.model_validate(
            {"no": 1, "topikMateri": "T", "alurTujuanPembelajaran": "1.1",
             "tujuanPembelajaran": "o1", "alokasiWaktu": "120 Menit"}
        )
        self.assertEqual(row.hours, 120)
        self.assertEqual(budget_hours(row.time_budget), 120)
        self.assertEqual(AllocationRow(order=1, topic="T", code="1.1", objective="o", time_budget="-").hours, 0)

    def test_normalize_pads_cuts_and_empties_zero(self):
        raw = {"Juli": [2, 0, "0", None, 1, 9], "Agustus": [3], "Oktober": "x"}
        distribution = normalize_distribution(raw, MONTHS)
        self.assertEqual(distribution["Juli"], ["2", None, None, None, "1"])
        self.assertEqual(distribution["Agustus"], ["3", None, None, None, None])
        self.assertEqual(distribution["Oktober"], [None] * 5)
        self.assertTrue(all(len(weeks) == 5 for weeks in distribution.values()))

    def test_surplus_goes_to_first_slot(self):
        distribution = normalize_distribution({"Agustus": [1]}, MONTHS)
        self.assertTrue(correct_distribution(distribution, MONTHS, 4))
        self.assertEqual(distribution["Juli"][0], "3")

    def test_deficit_is_taken_in_calendar_order(self):
        distribution = normalize_distribution({"Juli": [1, 2], "Agustus": [4]}, MONTHS)
        self.assertTrue(correct_distribution(distribution, MONTHS, 3))
        self.assertEqual(distribution["Juli"], [None, None, None, None, None])
        self.assertEqual(distribution["Agustus"][0], "3")

    def test_matching_total_is_untouched(self):
        distribution = normalize_distribution({"Juli": [2, 2]}, MONTHS)
        self.assertFalse(correct_distribution(distribution, MONTHS, 4))


class TestGenerateSchedule(unittest.TestCase):
    def test_rows_sum_to_allocation(self):
        response = json.dumps([
            {"id": 1, "bulan": {"Juli": [2, 2, 0, 0, 0]}, "keterangan": "awal"},
            {"id": 2, "bulan": {"Agustus": [2, 2, 0, 0, 0]}},
        ])
        service = FakeService([response])
        result = generate_schedule(service, allocation_rows(), "Ganjil")

        self.assertEqual(len(result.rows), 2)
        self.assertEqual(result.rows[0].note, "awal")
        self.assertEqual(result.rows[0].scheduled_hours(), 4)
        self.assertEqual(result.rows[1].scheduled_hours(), 6)
        self.assertEqual(result.corrected, [1])
        for row in result.rows:
            self.assertEqual(list(row.weeks_by_month), MONTHS)
            self.assertTrue(all(len(weeks) == 5 for weeks in row.weeks_by_month.values()))
        self.assertIn('"total_jp": 6', service.prompts[0])

    def test_unparsable_response_still_sums(self):
        result = generate_schedule(FakeService(["??"]), allocation_rows(), "ganjil")
        self.assertEqual([r.scheduled_hours() for r in result.rows], [4, 6])
        self.assertEqual(result.semester, "Ganjil")
        self.assertTrue(result.warnings)

    def test_empty_semester_raises(self):
        rows = [r for r in allocation_rows() if r.semester == "Ganjil"]
        with self.assertRaises(ArtifactGenerationError):
            generate_schedule(FakeService([]), rows, "Genap")

    def test_service_failure_raises(self):
        with self.assertRaises(ArtifactGenerationError):
            generate_schedule(FakeService([RuntimeError("down")]), allocation_rows(), "Genap")


if __name__ == "__main__":
    unittest.main()
