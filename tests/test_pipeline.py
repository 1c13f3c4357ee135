import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from planner.artifacts.pipeline import PipelineConfig, run_artifact_pipeline
from tests.helpers import FakeService

TREE = {
    "subject": "IPA",
    "tpGroups": [
        {"semester": "Ganjil", "materi": "Zat", "subMateriGroups": [{"subMateri": "Wujud", "tps": ["Z1", "Z2"]}]},
    ],
}


class TestRunArtifactPipeline(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, name, data):
        path = self.dir / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_flow_then_allocation(self):
        curriculum = self._write("tp.json", TREE)
        flow_out = self.dir / "flow.json"
        result = run_artifact_pipeline(
            PipelineConfig(artifact="flow", input_path=curriculum, output_path=flow_out),
            service=FakeService(["[1, 0]"]),
        )
        self.assertTrue(result.success)
        self.assertEqual(result.row_count, 2)
        flow = json.loads(flow_out.read_text(encoding="utf-8"))
        self.assertEqual([r["tp"] for r in flow["content"]], ["Z2", "Z1"])

        allocation_out = self.dir / "prota.json"
        result = run_artifact_pipeline(
            PipelineConfig(artifact="allocation", input_path=flow_out, output_path=allocation_out, weekly_hours=2),
            service=FakeService(['[{"index": 0, "value": "4 JP"}, {"index": 1, "value": "6 JP"}]']),
        )
        self.assertTrue(result.success)
        prota = json.loads(allocation_out.read_text(encoding="utf-8"))
        self.assertEqual([r["alokasiWaktu"] for r in prota["content"]], ["4 JP", "6 JP"])

    def test_generation_error_is_reported(self):
        curriculum = self._write("empty.json", {"tpGroups": []})
        result = run_artifact_pipeline(
            PipelineConfig(artifact="flow", input_path=curriculum, output_path=self.dir / "out.json"),
            service=FakeService([]),
        )
        self.assertFalse(result.success)
        self.assertEqual(len(result.errors), 1)

    def test_missing_input(self):
        result = run_artifact_pipeline(
            PipelineConfig(artifact="flow", input_path=self.dir / "missing.json"),
            service=FakeService([]),
        )
        self.assertFalse(result.success)
        self.assertIn("Failed to load input", result.errors[0])

    @patch("planner.artifacts.pipeline.load_default_service", side_effect=RuntimeError("no key"))
    def test_service_initialisation_failure(self, _):
        curriculum = self._write("tp.json", TREE)
        result = run_artifact_pipeline(PipelineConfig(artifact="flow", input_path=curriculum))
        self.assertFalse(result.success)
        self.assertIn("Failed to initialize service", result.errors[0])


if __name__ == "__main__":
    unittest.main()
