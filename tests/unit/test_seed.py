"""Unit tests for demo history generation."""

import random
from datetime import datetime, timezone

from pulse.services.result_repository import InMemoryResultRepository
from pulse.services.seed import (
    SEED_CATEGORIES,
    SEED_SURVEY_ID,
    generate_seed_history,
    seed_demo_history,
)

NOW = datetime(2024, 8, 31, 15, 30, tzinfo=timezone.utc)


class TestGenerateSeedHistory:

    def test_six_monthly_results_oldest_first(self):
        history = generate_seed_history("user_1", now=NOW, rng=random.Random(7))

        assert len(history) == 6
        assert [result.id for result in history] == [f"hist_{n}" for n in range(5, -1, -1)]
        assert [result.timestamp.month for result in history] == [3, 4, 5, 6, 7, 8]
        assert all(result.survey_id == SEED_SURVEY_ID for result in history)
        assert all(result.user_id == "user_1" for result in history)

    def test_month_end_clamped(self):
        history = generate_seed_history("user_1", now=NOW, rng=random.Random(1))
        # 31 August minus two months is 30 June
        assert history[3].timestamp == datetime(2024, 6, 30, tzinfo=timezone.utc)
        assert history[-1].timestamp == datetime(2024, 8, 31, tzinfo=timezone.utc)

    def test_crosses_year_boundary(self):
        now = datetime(2024, 2, 10, tzinfo=timezone.utc)
        history = generate_seed_history("user_1", months=4, now=now, rng=random.Random(3))
        assert [(r.timestamp.year, r.timestamp.month) for r in history] == [
            (2023, 11), (2023, 12), (2024, 1), (2024, 2)
        ]

    def test_scores_in_range_and_rounded(self):
        history = generate_seed_history("user_1", now=NOW, rng=random.Random(42))

        for result in history:
            assert list(result.scores) == [category for category, *_ in SEED_CATEGORIES]
            for value in result.scores.values():
                assert 1.0 <= value <= 5.0
                assert round(value, 1) == value
            assert 1.0 <= result.total_score <= 5.0

    def test_reproducible_with_seeded_rng(self):
        first = generate_seed_history("user_1", now=NOW, rng=random.Random(5))
        second = generate_seed_history("user_1", now=NOW, rng=random.Random(5))
        assert first == second


class TestSeedDemoHistory:

    def test_seeds_once(self):
        repository = InMemoryResultRepository()

        assert seed_demo_history(repository, "user_1", now=NOW) == 6
        assert seed_demo_history(repository, "user_1", now=NOW) == 0
        assert repository.count() == 6

    def test_other_users_untouched(self):
        repository = InMemoryResultRepository()
        seed_demo_history(repository, "user_1", months=2, now=NOW)
        assert repository.list_for_user("user_2") == []
