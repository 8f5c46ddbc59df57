"""
Core services for the application.

This package contains the main service implementations for the application,
including the state reducer, persistence, AI analysis and the tracker store.
"""

from .ai_analysis import (
    AIAnalysisConfig,
    AnalysisError,
    AnalysisInProgressError,
    AnalysisNotConfiguredError,
    HealthAnalysisAgent,
    build_analysis_prompt,
)
from .alerts import AlertDispatcher, UserAlert
from .result import Result
from .storage import BlobStorage, InMemoryStorage, JsonFileStorage, StateRepository
from .tracker import HealthTracker, create_tracker

__all__ = [
    "AIAnalysisConfig",
    "AnalysisError",
    "AnalysisInProgressError",
    "AnalysisNotConfiguredError",
    "HealthAnalysisAgent",
    "build_analysis_prompt",
    "AlertDispatcher",
    "UserAlert",
    "Result",
    "BlobStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "StateRepository",
    "HealthTracker",
    "create_tracker",
]
