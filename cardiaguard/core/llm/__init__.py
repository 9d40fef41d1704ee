"""
Analysis Capability Module

Gemini-backed heart disease classification. The orchestrator only depends
on the ``analyze(record)`` coroutine; everything else here is the remote
capability's own contract.
"""
from .gemini_client import GeminiClient, GeminiConfig, GeminiResponse
from .heart_analyzer import (
    HeartAnalysis,
    HeartAnalyzer,
    KeyFactor,
    RiskLevel,
    RESPONSE_SCHEMA,
    build_prompt,
    parse_analysis,
)

__all__ = [
    "GeminiClient",
    "GeminiConfig",
    "GeminiResponse",
    "HeartAnalysis",
    "HeartAnalyzer",
    "KeyFactor",
    "RiskLevel",
    "RESPONSE_SCHEMA",
    "build_prompt",
    "parse_analysis",
]
