"""
Analysis Orchestration Module
"""
from .orchestrator import (
    AnalysisOrchestrator,
    AnalysisOutcome,
    AnalysisState,
    AnalysisStatus,
    failure_message,
)

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisOutcome",
    "AnalysisState",
    "AnalysisStatus",
    "failure_message",
]
