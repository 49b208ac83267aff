# tests/test_keyspace_search.py
"""
Unit tests for the batched KeyspaceSearch driver.
"""

import logging

import numpy as np
import pytest
from unittest.mock import patch

from clspread import IncrementMode, KernelTemplate, KeyspaceSearch, Scheduler, SearchParameters


class TestKeyspaceSearch:
    """Test walking a keyspace in batches."""

    def test_batches(self, fake_contexts):
        search = KeyspaceSearch(Scheduler(fake_contexts(2)), SearchParameters(0, 0), total=10, batch_size=4)

        assert list(search.batches()) == [4, 4, 2]
        assert search.batch_count == 3

    def test_default_keyspace(self, fake_contexts):
        search = KeyspaceSearch(Scheduler(fake_contexts(1)), SearchParameters(0, 0))

        assert search.total == 2**64 - 1
        assert search.batch_size == 2**32 - 1
        assert search.batch_count == 2**32 + 1

    def test_run_covers_every_key(self, fake_contexts):
        contexts = fake_contexts(2)
        params = SearchParameters(lower=10, upper=20, increment_mode=IncrementMode.LOWER)
        search = KeyspaceSearch(Scheduler(contexts), params, total=10, batch_size=4)

        covered = search.run()

        assert covered == 10
        assert params.completed == 10
        assert params.current_offsets() == (20, 20)

    def test_parameters_per_batch(self, fake_contexts):
        scheduler = Scheduler(fake_contexts(2))
        params = SearchParameters(lower=1, upper=2, increment_mode=IncrementMode.BOTH)
        search = KeyspaceSearch(scheduler, params, total=10, batch_size=4)

        seen = []
        with patch.object(scheduler, 'set_parameters', side_effect=lambda *a: seen.append(a)):
            with patch.object(scheduler, 'invoke') as mock_invoke:
                search.run()

        assert [int(args[3]) for args in seen] == [0, 4, 8]
        assert all(args[2] == np.uint8(3) for args in seen)
        assert [c.args for c in mock_invoke.call_args_list] == [(0, 4, 2), (0, 4, 2), (0, 2, 2)]

    def test_each_batch_starts_at_zero(self, fake_contexts):
        contexts = fake_contexts(2)
        search = KeyspaceSearch(Scheduler(contexts), SearchParameters(0, 0), total=8, batch_size=4)
        search.run()

        executed = sorted(r for c in contexts for r in c.executed)
        assert executed == [(0, 2), (0, 2), (2, 4), (2, 4)]

    def test_max_batches(self, fake_contexts):
        params = SearchParameters(0, 0)
        search = KeyspaceSearch(Scheduler(fake_contexts(2)), params, total=100, batch_size=10)

        assert search.run(max_batches=3) == 30
        assert params.completed == 30
        # Resumes where it left off
        assert list(search.batches())[0] == 10
        assert len(list(search.batches())) == 7

    def test_resumed_search_numbers_parts_absolutely(self, fake_contexts, caplog):
        params = SearchParameters(0, 0, completed=30)
        search = KeyspaceSearch(Scheduler(fake_contexts(2)), params, total=100, batch_size=10, report_every=1)
        caplog.set_level(logging.INFO, logger="clspread")

        assert search.batch_count == 10
        assert search.completed_batches == 3
        assert search.remaining_batches == 7

        search.run(max_batches=2)

        assert "10 part(s), 7 remaining" in caplog.text
        assert "Part 3/10, 40 completed" in caplog.text
        assert "Part 4/10, 50 completed" in caplog.text
        assert "Part 0/10" not in caplog.text

    def test_load_kernel(self, fake_contexts):
        contexts = fake_contexts(2)
        search = KeyspaceSearch(Scheduler(contexts), SearchParameters(0, 0), total=1)
        template = KernelTemplate("__kernel void Bruteforce() { ulong iv = IV0; }").replace("IV0", 42)

        search.load_kernel(template, "Bruteforce")

        assert all(c.source == "__kernel void Bruteforce() { ulong iv = 42; }" for c in contexts)
        assert all(c.entry_point == "Bruteforce" for c in contexts)

    def test_invalid_sizes(self, fake_contexts):
        with pytest.raises(ValueError):
            KeyspaceSearch(Scheduler(fake_contexts(1)), SearchParameters(0, 0), total=0)
        with pytest.raises(ValueError):
            KeyspaceSearch(Scheduler(fake_contexts(1)), SearchParameters(0, 0), batch_size=0)
