"""Shared fixtures for the planner tests."""

from __future__ import annotations

from planner.models import CurriculumTree


class FakeService:
    """Text service that replays canned responses and records every prompt.

    Each entry of `responses` is returned in turn; an entry that is an
    exception instance is raised instead.
    """

    def __init__(self, responses):
        self.responses = list(responses)
        self.prompts = []
        self.calls = []

    def generate_text(self, prompt, *, response_mime_type=None, temperature=None):
        self.prompts.append(prompt)
        self.calls.append({"response_mime_type": response_mime_type, "temperature": temperature})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_tree(*materials) -> CurriculumTree:
    """Build a tree from `(semester, material, [[objectives per sub-group], ...])` tuples."""
    groups = []
    for semester, material, sub_groups in materials:
        groups.append(
            {
                "semester": semester,
                "materi": material,
                "subMateriGroups": [
                    {"subMateri": f"{material} {i + 1}", "tps": list(objectives)}
                    for i, objectives in enumerate(sub_groups)
                ],
            }
        )
    return CurriculumTree.from_groups(groups)


def two_material_tree() -> CurriculumTree:
    """Material 0 with 2 objectives, material 1 with 3 (split over two sub-groups)."""
    return make_tree(
        ("Ganjil", "Bilangan", [["A1", "A2"]]),
        ("Genap", "Aljabar", [["B1", "B2"], ["B3"]]),
    )
