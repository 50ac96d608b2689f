"""
Personalization Components

The pure components that turn response histories into personalized sessions:

1. Grading - Normalize and grade submitted answers
2. Aggregation - Per-difficulty and per-question performance profiles
3. Classification - Ordered rules mapping a profile to a learning level
4. Allocation - Target difficulty mix for the next session
5. Selection - Score candidates and fill a difficulty-balanced session

The PersonalizationService wires them to the host's repositories and cache.
"""

from eduadapt.personalization.grading import (
    AnswerGrader, GradeResult, GradeRule, grade, grade_question, normalize_answer
)
from eduadapt.personalization.profile import DifficultyStats, PerformanceProfile, QuestionStats
from eduadapt.personalization.aggregator import aggregate, index_questions
from eduadapt.personalization.classifier import LearningLevel, classify
from eduadapt.personalization.allocator import DifficultyAllocation, allocate
from eduadapt.personalization.selection import SelectionResult, difficulty_targets, score_candidate, select
from eduadapt.personalization.recommendations import generate_recommendations
from eduadapt.personalization.analytics import (
    DifficultySummary, LearningPatterns, LectureSummary, QuestionStatistics,
    learning_patterns, lecture_summary, question_statistics
)
from eduadapt.personalization.service import PersonalizationService, PersonalizedSession, SubmissionResult

__all__ = [
    'AnswerGrader', 'GradeResult', 'GradeRule', 'grade', 'grade_question', 'normalize_answer',
    'DifficultyStats', 'PerformanceProfile', 'QuestionStats',
    'aggregate', 'index_questions',
    'LearningLevel', 'classify',
    'DifficultyAllocation', 'allocate',
    'SelectionResult', 'difficulty_targets', 'score_candidate', 'select',
    'generate_recommendations',
    'DifficultySummary', 'LearningPatterns', 'LectureSummary', 'QuestionStatistics',
    'learning_patterns', 'lecture_summary', 'question_statistics',
    'PersonalizationService', 'PersonalizedSession', 'SubmissionResult',
]
