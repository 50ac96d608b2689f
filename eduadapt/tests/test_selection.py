import datetime
import unittest

import pytest

from eduadapt.common.config import ScoringConfig
from eduadapt.common.exceptions import InvalidInputError
from eduadapt.domain.questions.model import Difficulty
from eduadapt.personalization.allocator import DifficultyAllocation
from eduadapt.personalization.profile import QuestionStats
from eduadapt.personalization.selection import difficulty_targets, score_candidate, select
from eduadapt.tests.helpers import BASE_TIME, open_question

BEGINNER_MIX = DifficultyAllocation(easy=0.6, medium=0.3, hard=0.1)
EVEN_MIX = DifficultyAllocation.from_weights(1, 1, 1)


def tier_pool(easy: int, medium: int, hard: int):
    pool = []
    for tier, count in (("easy", easy), ("medium", medium), ("hard", hard)):
        pool.extend(open_question(f"{tier}-{i}", difficulty=tier) for i in range(count))
    return pool


class TestScoreCandidate(unittest.TestCase):
    """Test candidate scoring."""

    def setUp(self):
        self.now = BASE_TIME
        self.allocation = DifficultyAllocation(easy=0.5, medium=0.25, hard=0.25)
        self.question = open_question("q1", difficulty="easy")

    def test_unseen_question(self):
        """Test unseen questions get the base score weighted by tier share."""
        self.assertEqual(score_candidate(self.question, None, self.allocation, self.now), 50.0)

    def test_seen_question(self):
        """Test weakness, recency and under-practice terms."""
        stats = QuestionStats(attempts=4, correct=1, last_attempt=self.now - datetime.timedelta(days=3))
        # (1 - 0.25) * 80 + 3 * 2 + (10 - 4 * 2) = 68
        self.assertAlmostEqual(score_candidate(self.question, stats, self.allocation, self.now), 34.0)

    def test_recency_is_capped(self):
        """Test the recency bonus is capped and practice bonus floored."""
        stats = QuestionStats(attempts=10, correct=10, last_attempt=self.now - datetime.timedelta(days=30))
        self.assertAlmostEqual(score_candidate(self.question, stats, self.allocation, self.now), 10.0)

    def test_future_attempt_counts_as_today(self):
        """Test a last attempt after the reference time adds no recency bonus."""
        stats = QuestionStats(attempts=4, correct=1, last_attempt=self.now + datetime.timedelta(days=1))
        self.assertAlmostEqual(score_candidate(self.question, stats, self.allocation, self.now), 31.0)

    def test_naive_and_aware_times_mix(self):
        """Test naive times count as UTC and offsets are converted before comparing."""
        tokyo = datetime.timezone(datetime.timedelta(hours=9))
        three_days_ago = (self.now - datetime.timedelta(days=3)).astimezone(tokyo)
        stats = QuestionStats(attempts=4, correct=1, last_attempt=three_days_ago)
        naive_now = self.now.replace(tzinfo=None)

        self.assertAlmostEqual(score_candidate(self.question, stats, self.allocation, naive_now), 34.0)

        naive_stats = QuestionStats(attempts=4, correct=1, last_attempt=three_days_ago.replace(tzinfo=None))
        # The naive 18:00 is read as UTC, so the attempt is 9 hours more recent
        self.assertAlmostEqual(
            score_candidate(self.question, naive_stats, self.allocation, self.now),
            34.0 - 9 / 24
        )

    def test_configured_weights(self):
        """Test weights come from the scoring config."""
        config = ScoringConfig(unseen_score=10.0)
        self.assertEqual(score_candidate(self.question, None, self.allocation, self.now, config), 5.0)


class TestDifficultyTargets(unittest.TestCase):
    """Test per-tier targets."""

    def test_rounds_half_up(self):
        """Test targets are rounded with halves going up."""
        targets = difficulty_targets(5, BEGINNER_MIX)
        self.assertEqual(targets, {Difficulty.EASY: 3, Difficulty.MEDIUM: 2, Difficulty.HARD: 1})

    def test_zero_count(self):
        """Test a zero count has zero targets."""
        self.assertEqual(set(difficulty_targets(0, BEGINNER_MIX).values()), {0})


class TestSelect(unittest.TestCase):
    """Test session selection."""

    def test_unseen_scenario(self):
        """Test five from twenty unseen candidates with the beginner mix."""
        pool = tier_pool(7, 7, 6)
        result = select(pool, {}, BEGINNER_MIX, 5, now=BASE_TIME)

        self.assertEqual(result.question_ids, ["easy-0", "easy-1", "easy-2", "medium-0", "medium-1"])
        self.assertEqual(
            result.counts_by_difficulty(),
            {Difficulty.EASY: 3, Difficulty.MEDIUM: 2, Difficulty.HARD: 0}
        )

    def test_ties_keep_input_order(self):
        """Test equal scores keep candidate order."""
        pool = [open_question(f"q{i}", difficulty="medium") for i in range(6)]
        pool.reverse()
        result = select(pool, {}, EVEN_MIX, 3, now=BASE_TIME)
        self.assertEqual(result.question_ids, ["q5", "q4", "q3"])

    def test_second_pass_fills_short_tiers(self):
        """Test remaining slots are filled by score regardless of tier."""
        pool = tier_pool(1, 0, 10)
        result = select(pool, {}, BEGINNER_MIX, 5, now=BASE_TIME)
        self.assertEqual(result.question_ids, ["easy-0", "hard-0", "hard-1", "hard-2", "hard-3"])

    def test_weak_questions_first(self):
        """Test weaker seen questions rank ahead of stronger ones."""
        pool = [open_question("strong", difficulty="easy"), open_question("weak", difficulty="easy")]
        stats = {
            "strong": QuestionStats(attempts=5, correct=5, last_attempt=BASE_TIME),
            "weak": QuestionStats(attempts=5, correct=0, last_attempt=BASE_TIME),
        }
        result = select(pool, stats, EVEN_MIX, 1, now=BASE_TIME)
        self.assertEqual(result.question_ids, ["weak"])
        self.assertGreater(result.scores["weak"], result.scores["strong"])

    def test_default_now_with_aware_stats(self):
        """Test the default reference time compares with aware attempt times."""
        pool = [open_question("strong", difficulty="easy"), open_question("weak", difficulty="easy")]
        stats = {
            "strong": QuestionStats(attempts=5, correct=5, last_attempt=BASE_TIME),
            "weak": QuestionStats(attempts=5, correct=0, last_attempt=BASE_TIME),
        }
        self.assertEqual(select(pool, stats, EVEN_MIX, 1).question_ids, ["weak"])
        naive_now = BASE_TIME.replace(tzinfo=None)
        self.assertEqual(select(pool, stats, EVEN_MIX, 1, now=naive_now).question_ids, ["weak"])

    def test_empty_pool(self):
        """Test an empty pool gives an empty selection."""
        result = select([], {}, BEGINNER_MIX, 5, now=BASE_TIME)
        self.assertEqual(len(result), 0)
        self.assertEqual(result.question_ids, [])

    def test_zero_count(self):
        """Test a zero count gives an empty selection."""
        self.assertEqual(len(select(tier_pool(2, 2, 2), {}, BEGINNER_MIX, 0, now=BASE_TIME)), 0)

    def test_duplicate_candidates(self):
        """Test a candidate id listed twice is selected once."""
        question = open_question("dup", difficulty="easy")
        result = select([question, question, open_question("other")], {}, EVEN_MIX, 3, now=BASE_TIME)
        self.assertEqual(result.question_ids, ["dup", "other"])

    def test_invalid_count(self):
        """Test negative and non-integer counts are rejected."""
        for bad in (-1, 2.0, True, "3", None):
            with self.assertRaises(InvalidInputError):
                select(tier_pool(1, 1, 1), {}, BEGINNER_MIX, bad, now=BASE_TIME)

    def test_mapping_allocation(self):
        """Test a plain mapping is accepted and validated."""
        result = select(tier_pool(7, 7, 6), {}, {"easy": 0.6, "medium": 0.3, "hard": 0.1}, 5, now=BASE_TIME)
        self.assertEqual(len(result), 5)

        with self.assertRaises(InvalidInputError):
            select(tier_pool(1, 1, 1), {}, {"easy": -0.2, "medium": 0.6, "hard": 0.6}, 2)
        with self.assertRaises(InvalidInputError):
            select(tier_pool(1, 1, 1), {}, [0.6, 0.3, 0.1], 2)

    def test_deterministic(self):
        """Test identical inputs give identical selections."""
        pool = tier_pool(4, 4, 4)
        stats = {
            "easy-1": QuestionStats(attempts=2, correct=1, last_attempt=BASE_TIME - datetime.timedelta(days=1)),
            "hard-2": QuestionStats(attempts=1, correct=0, last_attempt=BASE_TIME - datetime.timedelta(days=9)),
        }
        first = select(pool, stats, BEGINNER_MIX, 6, now=BASE_TIME)
        second = select(pool, stats, BEGINNER_MIX, 6, now=BASE_TIME)
        self.assertEqual(first.question_ids, second.question_ids)


@pytest.mark.parametrize("requested_count", [0, 1, 2, 5, 9, 15, 30])
@pytest.mark.parametrize("sizes", [(0, 0, 0), (1, 0, 0), (3, 3, 3), (10, 2, 0), (0, 0, 8)])
def test_selection_is_bounded_and_unique(requested_count, sizes):
    pool = tier_pool(*sizes)
    result = select(pool, {}, BEGINNER_MIX, requested_count, now=BASE_TIME)
    ids = result.question_ids
    assert len(ids) <= requested_count
    assert len(ids) == len(set(ids))
    assert len(ids) == min(requested_count, len(pool))
