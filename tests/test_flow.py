import unittest

from planner.artifacts.flow import generate_flow, resequence
from planner.errors import ArtifactGenerationError
from planner.reconciliation import StrategyKind
from tests.helpers import FakeService, make_tree, two_material_tree


class TestGenerateFlow(unittest.TestCase):
    def test_fine_grained_order(self):
        service = FakeService(["Urutan terbaik:\n```json\n[4, 3, 2, 1, 0]\n```"])
        result = generate_flow(service, two_material_tree(), subject="Matematika", grade="7")
        self.assertEqual(result.strategy, StrategyKind.FINE_GRAINED)
        self.assertEqual([r.objective for r in result.rows], ["B3", "B2", "B1", "A2", "A1"])
        self.assertIn('"index": 4', service.prompts[0])

    def test_coarse_order(self):
        service = FakeService(["[1, 0]"])
        result = generate_flow(service, two_material_tree())
        self.assertEqual(result.strategy, StrategyKind.COARSE)
        self.assertEqual([r.code for r in result.rows], ["2.1", "2.2", "2.3", "1.1", "1.2"])

    def test_unparsable_response_keeps_original_order(self):
        service = FakeService(["I am unable to comply."])
        result = generate_flow(service, two_material_tree())
        self.assertEqual(result.strategy, StrategyKind.IDENTITY)
        self.assertEqual([r.code for r in result.rows], ["1.1", "1.2", "2.1", "2.2", "2.3"])
        self.assertTrue(result.warnings)

    def test_deeply_nested_response_keeps_original_order(self):
        service = FakeService(["[" * 100000])
        result = generate_flow(service, two_material_tree())
        self.assertEqual(result.strategy, StrategyKind.IDENTITY)
        self.assertEqual(len(result.rows), 5)

    def test_semester_is_carried_from_material(self):
        service = FakeService(["[0, 1, 2, 3, 4]"])
        result = generate_flow(service, two_material_tree())
        self.assertEqual([r.semester for r in result.rows], ["Ganjil"] * 2 + ["Genap"] * 3)

    def test_empty_tree_raises(self):
        with self.assertRaises(ArtifactGenerationError):
            generate_flow(FakeService([]), make_tree(("Ganjil", "M", [[]])))

    def test_service_failure_raises(self):
        with self.assertRaises(ArtifactGenerationError):
            generate_flow(FakeService([TimeoutError("slow")]), two_material_tree())


class TestResequence(unittest.TestCase):
    def test_renumbers_in_current_order(self):
        rows = generate_flow(FakeService(["[4, 3, 2, 1, 0]"]), two_material_tree()).rows
        moved = resequence([rows[2], rows[0], rows[1], rows[3], rows[4]])
        self.assertEqual([r.sequence for r in moved], [1, 2, 3, 4, 5])
        self.assertEqual(moved[0].objective, "B1")


if __name__ == "__main__":
    unittest.main()
