import unittest
from unittest.mock import MagicMock

from planner.batching import BatchAccumulator, chunk_ranges, run_batched
from planner.errors import ArtifactGenerationError


def _align(parsed, chunk, start):
    if not isinstance(parsed, list) or len(parsed) != len(chunk):
        raise ValueError("misaligned")
    return [f"gen-{value}" for value in parsed]


def _default(position, unit):
    return f"default-{position}"


def _responses_for(units, chunk_size, broken=()):
    """One JSON response per chunk echoing the unit values; chunks in `broken` are garbage."""
    responses = []
    for index, span in enumerate(chunk_ranges(len(units), chunk_size)):
        if index in broken:
            responses.append("I could not do that, sorry")
        else:
            responses.append("[" + ", ".join(str(units[i]) for i in span) + "]")
    return responses


class TestChunkRanges(unittest.TestCase):
    def test_twelve_by_five(self):
        self.assertEqual(chunk_ranges(12, 5), [range(0, 5), range(5, 10), range(10, 12)])

    def test_empty(self):
        self.assertEqual(chunk_ranges(0, 5), [])

    def test_invalid_size(self):
        with self.assertRaises(ValueError):
            chunk_ranges(3, 0)


class TestRunBatched(unittest.TestCase):
    def setUp(self):
        self.units = list(range(12))
        self.sleep = MagicMock()

    def _run(self, responses, accumulator=None):
        request = MagicMock(side_effect=responses)
        accumulator = accumulator or BatchAccumulator(total=len(self.units))
        result = run_batched(
            self.units,
            request_chunk=request,
            align_chunk=_align,
            default_factory=_default,
            accumulator=accumulator,
            chunk_size=5,
            pacing_seconds=2.0,
            sleep=self.sleep,
        )
        return result, request, accumulator

    def test_all_chunks_succeed(self):
        result, request, accumulator = self._run(_responses_for(self.units, 5))
        self.assertEqual(request.call_count, 3)
        self.assertEqual(result.items, [f"gen-{i}" for i in range(12)])
        self.assertTrue(result.success)
        self.assertEqual(accumulator.requests_made, 3)

    def test_chunks_receive_absolute_offsets(self):
        _, request, _ = self._run(_responses_for(self.units, 5))
        starts = [call.args[1] for call in request.call_args_list]
        self.assertEqual(starts, [0, 5, 10])
        self.assertEqual(list(request.call_args_list[2].args[0]), [10, 11])

    def test_failed_middle_chunk_gets_defaults(self):
        result, request, _ = self._run(_responses_for(self.units, 5, broken={1}))
        self.assertEqual(request.call_count, 3)
        self.assertEqual(len(result.items), 12)
        self.assertEqual(result.items[:5], [f"gen-{i}" for i in range(5)])
        self.assertEqual(result.items[5:10], [f"default-{i}" for i in range(5, 10)])
        self.assertEqual(result.items[10:], ["gen-10", "gen-11"])
        self.assertEqual(result.defaulted_positions, [5, 6, 7, 8, 9])
        self.assertEqual(len(result.failures), 1)
        self.assertEqual((result.failures[0].start, result.failures[0].stop), (5, 10))
        self.assertFalse(result.success)

    def test_request_exception_is_a_chunk_failure(self):
        responses = _responses_for(self.units, 5)
        responses[2] = ConnectionError("boom")
        result, _, _ = self._run(responses)
        self.assertEqual(result.items[10:], ["default-10", "default-11"])
        self.assertIn("Request failed", result.failures[0].reason)

    def test_misaligned_count_is_a_chunk_failure(self):
        responses = _responses_for(self.units, 5)
        responses[0] = "[0, 1, 2]"
        result, _, _ = self._run(responses)
        self.assertEqual(result.defaulted_positions, [0, 1, 2, 3, 4])

    def test_pacing_between_chunks_only(self):
        self._run(_responses_for(self.units, 5))
        self.assertEqual(self.sleep.call_count, 2)
        self.sleep.assert_called_with(2.0)

    def test_all_chunks_failing_raises(self):
        with self.assertRaises(ArtifactGenerationError):
            self._run(["nope", "nope", "nope"])

    def test_accumulators_are_independent(self):
        first = BatchAccumulator(total=12)
        second = BatchAccumulator(total=12)
        self._run(_responses_for(self.units, 5), accumulator=first)
        self._run(_responses_for(self.units, 5, broken={0}), accumulator=second)
        self.assertEqual(first.results[0], "gen-0")
        self.assertEqual(second.results[0], "default-0")
        self.assertEqual(first.failures, [])

    def test_empty_workload(self):
        result = run_batched(
            [],
            request_chunk=MagicMock(),
            align_chunk=_align,
            default_factory=_default,
            accumulator=BatchAccumulator(total=0),
            sleep=self.sleep,
        )
        self.assertEqual(result.items, [])
        self.assertEqual(result.chunk_count, 0)

    def test_mismatched_accumulator_is_rejected(self):
        request = MagicMock()
        with self.assertRaises(ValueError):
            run_batched(
                self.units,
                request_chunk=request,
                align_chunk=_align,
                default_factory=_default,
                accumulator=BatchAccumulator(total=5),
                sleep=self.sleep,
            )
        request.assert_not_called()


if __name__ == "__main__":
    unittest.main()
