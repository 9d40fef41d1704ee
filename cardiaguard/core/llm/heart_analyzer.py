"""
Heart Analyzer

The external analysis capability: sends the ten clinical features to
Gemini with a JSON response schema and turns the reply into a
HeartAnalysis result record.

Contract: ``await analyzer.analyze(record)`` returns a HeartAnalysis or
raises an AnalysisError subclass.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
from enum import Enum
import json
import math
import re

from cardiaguard.core.features import FIELD_SPECS, FEATURE_NAMES, FeatureRecord
from cardiaguard.core.llm.gemini_client import GeminiClient, GeminiConfig
from cardiaguard.utils import AnalysisResponseError, get_logger

logger = get_logger(__name__)


class RiskLevel(str, Enum):
    """Heart disease risk classification."""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


@dataclass
class KeyFactor:
    """One feature the model singled out as driving the classification."""
    feature: str
    impact: str
    note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"feature": self.feature, "impact": self.impact, "note": self.note}


@dataclass
class HeartAnalysis:
    """Diagnostic output for one submitted record."""
    risk_level: RiskLevel
    risk_score: float
    diagnosis: str
    summary: str = ""
    key_factors: List[KeyFactor] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    # Metadata
    model: str = ""
    latency_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk_level": self.risk_level.value,
            "risk_score": self.risk_score,
            "diagnosis": self.diagnosis,
            "summary": self.summary,
            "key_factors": [f.to_dict() for f in self.key_factors],
            "recommendations": self.recommendations,
            "model": self.model,
            "latency_ms": round(self.latency_ms, 2),
        }


RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "risk_level": {"type": "string", "enum": [level.value for level in RiskLevel]},
        "risk_score": {"type": "number"},
        "diagnosis": {"type": "string"},
        "summary": {"type": "string"},
        "key_factors": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "feature": {"type": "string"},
                    "impact": {"type": "string"},
                    "note": {"type": "string"},
                },
                "required": ["feature", "impact"],
            },
        },
        "recommendations": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["risk_level", "risk_score", "diagnosis", "summary"],
}

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def _describe(value: float) -> str:
    if math.isnan(value):
        return "not provided"
    return f"{value:g}"


def build_prompt(record: FeatureRecord) -> str:
    """Render the record as the user prompt."""
    prompt = "Classify heart disease risk for this patient (UCI Heart Disease attributes).\n\n"
    prompt += "PATIENT FEATURES:\n"
    for name in FEATURE_NAMES:
        spec = FIELD_SPECS[name]
        value = getattr(record, name)
        line = f"- {name} ({spec.label}): {_describe(value)}"
        option = next((o.label for o in spec.options if o.value == value), None)
        if option:
            line += f" [{option}]"
        prompt += line + "\n"
    prompt += """
Return JSON with:
1. risk_level: Low, Moderate or High
2. risk_score: probability of heart disease, 0-100
3. diagnosis: short classification label
4. summary: 2-3 sentence explanation
5. key_factors: the features driving the result, with impact (increases/decreases risk)
6. recommendations: general next steps, always including consulting a cardiologist
"""
    return prompt


def parse_analysis(text: str) -> HeartAnalysis:
    """
    Parse the model's JSON reply.

    Raises:
        AnalysisResponseError: reply is not JSON or misses required keys
    """
    cleaned = _FENCE.sub("", text.strip())
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AnalysisResponseError(f"Model reply is not valid JSON: {e.msg}", raw_text=text) from e

    if not isinstance(payload, dict):
        raise AnalysisResponseError("Model reply is not a JSON object", raw_text=text)

    try:
        level = RiskLevel(str(payload["risk_level"]).strip().capitalize())
        score = float(payload["risk_score"])
        diagnosis = str(payload["diagnosis"])
    except KeyError as e:
        raise AnalysisResponseError(f"Model reply is missing {e.args[0]!r}", raw_text=text) from e
    except (TypeError, ValueError) as e:
        raise AnalysisResponseError(f"Model reply has an invalid value: {e}", raw_text=text) from e

    factors = [
        KeyFactor(
            feature=str(item.get("feature", "")),
            impact=str(item.get("impact", "")),
            note=str(item.get("note", "")),
        )
        for item in payload.get("key_factors") or []
        if isinstance(item, dict)
    ]

    return HeartAnalysis(
        risk_level=level,
        risk_score=max(0.0, min(100.0, score)),
        diagnosis=diagnosis,
        summary=str(payload.get("summary", "")),
        key_factors=factors,
        recommendations=[str(r) for r in payload.get("recommendations") or []],
    )


class HeartAnalyzer:
    """
    Gemini-backed heart disease classifier.

    Screening aid only: every result recommends professional follow-up.
    """

    SYSTEM_INSTRUCTION = """You are a cardiology screening assistant working with the UCI Heart Disease attributes used in Orange data-mining workflows.

CRITICAL CONSTRAINTS:
1. Base the classification only on the ten provided features
2. CA (major vessels) and Thal are the strongest indicators; Thal > 3 or CA > 0 is a pathological warning
3. Oldpeak above 1.0 and exercise-induced angina raise risk
4. Do NOT recommend specific medications
5. Always recommend consulting a healthcare professional
6. Reply with JSON only
"""

    def __init__(self, client: Optional[GeminiClient] = None):
        """
        Args:
            client: Optional GeminiClient; a JSON-mode client is built if omitted
        """
        if client is None:
            client = GeminiClient(GeminiConfig(
                response_mime_type="application/json",
                response_schema=RESPONSE_SCHEMA,
            ))
        self.client = client

    @property
    def is_available(self) -> bool:
        return self.client.is_available

    async def analyze(self, record: FeatureRecord) -> HeartAnalysis:
        """Classify ``record``; raises AnalysisError on any failure."""
        response = await self.client.generate_async(
            build_prompt(record),
            system_instruction=self.SYSTEM_INSTRUCTION,
        )
        analysis = parse_analysis(response.text)
        analysis.model = response.model
        analysis.latency_ms = response.latency_ms
        logger.info(
            f"Heart analysis: {analysis.risk_level.value} "
            f"({analysis.risk_score:.0f}/100) in {response.latency_ms:.0f} ms"
        )
        return analysis
