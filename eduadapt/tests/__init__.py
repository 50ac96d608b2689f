"""
Test suite for the adaptive assessment engine.
"""
