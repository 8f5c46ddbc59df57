"""Personal medication and symptom tracker.

This package contains the state model, persistence and AI summary logic,
kept free of any presentation framework for easy testing and reasoning.
"""
