import json
import unittest

from planner.artifacts.objectives import build_tree_from_response, generate_objectives
from planner.errors import ArtifactGenerationError, MalformedResponse
from planner.models import CPElement
from tests.helpers import FakeService

GROUPS = [
    {
        "semester": "ganjil",
        "materi": "Bilangan",
        "subMateriGroups": [{"subMateri": "Bulat", "tps": ["Murid dapat membandingkan", "  "]}],
    },
    {
        "semester": "Genap",
        "materi": "Aljabar",
        "subMateriGroups": [{"subMateri": "Bentuk", "tps": ["Murid dapat menyederhanakan"]}],
    },
]


class TestBuildTree(unittest.TestCase):
    def test_groups_are_normalised(self):
        tree, warnings = build_tree_from_response(json.dumps(GROUPS))
        self.assertEqual([g.semester for g in tree.groups], ["Ganjil", "Genap"])
        self.assertEqual(tree.groups[0].sub_groups[0].objectives, ["Murid dapat membandingkan"])
        self.assertEqual(warnings, [])

    def test_wrapped_groups_and_unknown_semester(self):
        groups = [dict(GROUPS[0], semester="Semester 3")]
        tree, warnings = build_tree_from_response(json.dumps({"tpGroups": groups}))
        self.assertEqual(tree.groups[0].semester, "Ganjil")
        self.assertEqual(len(warnings), 1)

    def test_malformed_group_is_skipped(self):
        tree, warnings = build_tree_from_response(json.dumps([GROUPS[1], {"semester": "Genap"}, "x"]))
        self.assertEqual([g.material for g in tree.groups], ["Aljabar"])
        self.assertEqual(len(warnings), 2)

    def test_no_valid_group_raises(self):
        with self.assertRaises(MalformedResponse):
            build_tree_from_response('[{"semester": "Ganjil"}]')


class TestGenerateObjectives(unittest.TestCase):
    def test_prompt_carries_cp_and_tree_is_returned(self):
        service = FakeService(["```json\n" + json.dumps(GROUPS) + "\n```"])
        result = generate_objectives(
            service,
            [CPElement(element="Bilangan", cp="Murid memahami bilangan bulat")],
            grade="7",
            additional_notes="fokus konteks lokal",
        )
        self.assertEqual(len(result.tree.groups), 2)
        self.assertIn("Murid memahami bilangan bulat", service.prompts[0])
        self.assertIn("fokus konteks lokal", service.prompts[0])
        self.assertEqual(service.calls[0]["response_mime_type"], "application/json")

    def test_empty_cp_raises_without_calling_service(self):
        service = FakeService([])
        with self.assertRaises(ArtifactGenerationError):
            generate_objectives(service, [CPElement(element="x", cp="  ")], grade="7")
        self.assertEqual(service.prompts, [])

    def test_service_failure_raises(self):
        service = FakeService([RuntimeError("quota")])
        with self.assertRaises(ArtifactGenerationError):
            generate_objectives(service, [CPElement(element="x", cp="cp")], grade="7")


if __name__ == "__main__":
    unittest.main()
