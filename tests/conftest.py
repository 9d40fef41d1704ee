"""
Pytest Configuration and Fixtures

Shared fixtures for clinical feature pipeline tests.
"""
import asyncio
from typing import Any, List, Optional

import pytest

from cardiaguard.core.features import FeatureRecord
from cardiaguard.core.llm import HeartAnalysis, RiskLevel


class FakeAnalyzer:
    """
    Scripted stand-in for the analysis capability.

    Each call pops the next outcome: an exception is raised, anything
    else is returned. Calls can be held until released via ``gate``.
    """

    def __init__(self, outcomes: Optional[List[Any]] = None):
        self.outcomes = list(outcomes or [])
        self.calls: List[FeatureRecord] = []
        self.gate: Optional[asyncio.Event] = None

    async def analyze(self, record: FeatureRecord) -> Any:
        self.calls.append(record)
        outcome = self.outcomes.pop(0) if self.outcomes else make_analysis()
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def make_analysis(level: RiskLevel = RiskLevel.LOW, score: float = 12.0) -> HeartAnalysis:
    return HeartAnalysis(
        risk_level=level,
        risk_score=score,
        diagnosis="No significant coronary artery disease",
        summary="Profile consistent with low risk.",
        recommendations=["Consult a cardiologist for routine follow-up."],
        model="fake",
    )


@pytest.fixture
def sample_record() -> FeatureRecord:
    """A record distinct from the default profile."""
    return FeatureRecord(
        age=63, sex=1, cp=3, bp=145, chol=233,
        maxhr=150, exang=0, oldpeak=2.3, ca=0, thal=6,
    )


@pytest.fixture
def orange_tab_text() -> str:
    """A complete Orange .tab document with one data row."""
    return (
        "age\tsex\tcp\tbp\tchol\tmaxhr\texang\toldpeak\tca\tthal\n"
        "continuous\tdiscrete\tdiscrete\tcontinuous\tcontinuous\tcontinuous\tdiscrete\tcontinuous\tdiscrete\tdiscrete\n"
        "feature\tfeature\tfeature\tfeature\tfeature\tfeature\tfeature\tfeature\tfeature\tfeature\n"
        "41\t0\t2\t130\t204\t172\t0\t1.4\t0\t3\n"
    )


@pytest.fixture
def fake_analyzer() -> FakeAnalyzer:
    return FakeAnalyzer()
