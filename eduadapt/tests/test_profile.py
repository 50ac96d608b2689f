import datetime
import unittest

from eduadapt.common.config import LevelConfig
from eduadapt.common.exceptions import NotFoundError
from eduadapt.domain.questions.model import Difficulty
from eduadapt.personalization.aggregator import aggregate, index_questions
from eduadapt.personalization.classifier import LearningLevel, classify
from eduadapt.personalization.profile import PerformanceProfile, QuestionStats
from eduadapt.tests.helpers import BASE_TIME, closed_question, make_profile, open_question, response


class TestAggregate(unittest.TestCase):
    """Test building performance profiles from responses."""

    def setUp(self):
        self.questions = index_questions([
            closed_question("e1", difficulty="easy"),
            closed_question("e2", difficulty="easy"),
            open_question("m1", difficulty="medium"),
            open_question("h1", difficulty="hard"),
        ])

    def test_empty_history(self):
        """Test no responses yield all-zero tiers with zero accuracy."""
        profile = aggregate([], {})
        for tier in Difficulty:
            self.assertEqual(profile.tier(tier).attempts, 0)
            self.assertEqual(profile.tier(tier).correct, 0)
            self.assertEqual(profile.tier(tier).accuracy, 0.0)
        self.assertEqual(profile.questions, {})
        self.assertTrue(profile.is_cold_start)
        self.assertEqual(profile.overall_accuracy, 0.0)

    def test_counts_per_tier_and_question(self):
        """Test attempts and correct answers are accumulated per tier and per question."""
        later = BASE_TIME + datetime.timedelta(days=2)
        responses = [
            response("s1", "e1", True),
            response("s1", "e2", False),
            response("s1", "m1", True, timestamp=later),
            response("s1", "m1", False),
        ]
        profile = aggregate(responses, self.questions)

        self.assertEqual(profile.easy.attempts, 2)
        self.assertEqual(profile.easy.correct, 1)
        self.assertEqual(profile.easy.accuracy, 0.5)
        self.assertEqual(profile.medium.attempts, 2)
        self.assertEqual(profile.hard.attempts, 0)
        self.assertEqual(profile.total_attempts, 4)
        self.assertEqual(profile.total_correct, 2)

        stats = profile.questions["m1"]
        self.assertEqual(stats.attempts, 2)
        self.assertEqual(stats.correct, 1)
        self.assertEqual(stats.last_attempt, later)
        self.assertNotIn("h1", profile.questions)

    def test_unknown_questions_are_skipped(self):
        """Test responses outside the question index don't count."""
        profile = aggregate([response("s1", "other", True), response("s1", "e1", True)], self.questions)
        self.assertEqual(profile.total_attempts, 1)
        self.assertNotIn("other", profile.questions)

    def test_strict_mode_raises(self):
        """Test strict aggregation surfaces unresolved questions."""
        with self.assertRaises(NotFoundError) as ctx:
            aggregate([response("s1", "other", True)], self.questions, strict=True)
        self.assertEqual(ctx.exception.resource_id, "other")

    def test_index_keeps_first_duplicate(self):
        """Test indexing keeps the first question for a duplicated id."""
        first = open_question("q", difficulty="easy")
        second = open_question("q", difficulty="hard")
        self.assertIs(index_questions([first, second])["q"], first)


class TestProfileSerialization(unittest.TestCase):
    """Test profile dictionaries for reporting surfaces."""

    def test_round_trip(self):
        """Test a profile survives to_dict and from_dict."""
        profile = make_profile(easy=(4, 3), hard=(2, 1))
        profile.questions["q1"] = QuestionStats(attempts=2, correct=1, last_attempt=BASE_TIME)

        data = profile.to_dict()
        self.assertEqual(data["difficulty"]["easy"]["accuracy"], 0.75)
        self.assertEqual(data["total_attempts"], 6)

        restored = PerformanceProfile.from_dict(data)
        self.assertEqual(restored.easy.correct, 3)
        self.assertEqual(restored.hard.attempts, 2)
        self.assertEqual(restored.questions["q1"].last_attempt, BASE_TIME)


class TestClassify(unittest.TestCase):
    """Test learning level classification."""

    def test_cold_start_is_beginner(self):
        """Test a profile with no attempts is beginner."""
        self.assertEqual(classify(PerformanceProfile()), LearningLevel.BEGINNER)

    def test_weak_easy_is_beginner(self):
        """Test easy accuracy below the cut-off is beginner."""
        profile = make_profile(easy=(10, 6), medium=(10, 9), hard=(10, 9))
        self.assertEqual(classify(profile), LearningLevel.BEGINNER)

    def test_weak_medium_overrides_strong_easy(self):
        """Test failing medium items keeps a subject at beginner."""
        profile = make_profile(easy=(10, 10), medium=(4, 1))
        self.assertEqual(classify(profile), LearningLevel.BEGINNER)

    def test_advanced(self):
        """Test strong medium and hard results are advanced."""
        profile = make_profile(easy=(10, 9), medium=(10, 7), hard=(10, 5))
        self.assertEqual(classify(profile), LearningLevel.ADVANCED)

    def test_intermediate(self):
        """Test everything else is intermediate."""
        self.assertEqual(
            classify(make_profile(easy=(10, 8), medium=(10, 5))),
            LearningLevel.INTERMEDIATE
        )
        # No medium attempts: rule one does not apply, rule two fails
        self.assertEqual(classify(make_profile(easy=(5, 5))), LearningLevel.INTERMEDIATE)

    def test_configured_cut_offs(self):
        """Test cut-offs come from the level config."""
        profile = make_profile(easy=(10, 6))
        lenient = LevelConfig(beginner_easy_accuracy=0.5)
        self.assertEqual(classify(profile, lenient), LearningLevel.INTERMEDIATE)
