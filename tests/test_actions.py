import unittest

from planner.artifacts.actions import (
    ACTION_ALLOCATION,
    ACTION_CRITERIA,
    ACTION_FLOW,
    ACTION_OBJECTIVES,
    ACTION_SCHEDULE,
    PROMPT_BUILDERS,
    build_prompt,
    dispatch_action,
)
from planner.errors import UnknownActionError
from planner.models.constants import EFFECTIVE_WEEKS_PER_YEAR
from tests.helpers import FakeService


class TestActions(unittest.TestCase):
    def test_all_actions_registered(self):
        self.assertEqual(
            set(PROMPT_BUILDERS),
            {ACTION_OBJECTIVES, ACTION_FLOW, ACTION_ALLOCATION, ACTION_CRITERIA, ACTION_SCHEDULE},
        )

    def test_unknown_action(self):
        with self.assertRaises(UnknownActionError):
            build_prompt("generateEverything", {})

    def test_allocation_requires_weekly_hours(self):
        with self.assertRaises(KeyError):
            build_prompt(ACTION_ALLOCATION, {"items": []})

    def test_allocation_prompt_states_budget(self):
        prompt = build_prompt(ACTION_ALLOCATION, {"jamPertemuan": 3, "items": [{"index": 0}]})
        self.assertIn("96 JP", prompt)
        self.assertIn(f"x {EFFECTIVE_WEEKS_PER_YEAR} effective weeks", prompt)

    def test_schedule_prompt_lists_months(self):
        prompt = build_prompt(ACTION_SCHEDULE, {"semester": "Genap", "months": ["Januari", "Februari"], "items": []})
        self.assertIn("Januari, Februari", prompt)

    def test_dispatch_requests_json_deterministically(self):
        service = FakeService(["[0]"])
        text = dispatch_action(service, ACTION_FLOW, {"items": [{"index": 0, "tp": "x"}]})
        self.assertEqual(text, "[0]")
        self.assertEqual(service.calls[0], {"response_mime_type": "application/json", "temperature": 0.0})

    def test_dispatch_unknown_action_does_not_call_service(self):
        service = FakeService([])
        with self.assertRaises(UnknownActionError):
            dispatch_action(service, "nope", {})
        self.assertEqual(service.prompts, [])


if __name__ == "__main__":
    unittest.main()
