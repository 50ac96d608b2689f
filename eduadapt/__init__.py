"""
EduAdapt Adaptive Assessment Engine

An in-process library used by request handlers to:
1. Grade submitted answers with normalization and fuzzy matching for open-form items
2. Aggregate response histories into performance profiles
3. Classify learning levels and derive a target difficulty mix
4. Select a bounded, difficulty-balanced set of questions for the next session
"""

__version__ = "0.1.0"
