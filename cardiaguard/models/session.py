"""
API request/response schemas for the clinical session endpoints.
"""
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def json_number(value: float) -> Optional[float]:
    """NaN and infinities have no JSON form; they are sent as null."""
    if value is None or math.isnan(value) or math.isinf(value):
        return None
    return value


def json_features(features: Dict[str, float]) -> Dict[str, Optional[float]]:
    return {name: json_number(value) for name, value in features.items()}


class FeatureValues(BaseModel):
    """All ten clinical features; used for wholesale replacement."""
    model_config = ConfigDict(extra="forbid")

    age: float = Field(..., description="Age in years")
    sex: float = Field(..., description="0 = female, 1 = male")
    cp: float = Field(..., description="Chest pain type 1..4")
    bp: float = Field(..., description="Resting systolic blood pressure (mmHg)")
    chol: float = Field(..., description="Serum cholesterol (mg/dl)")
    maxhr: float = Field(..., description="Maximum heart rate achieved")
    exang: float = Field(..., description="Exercise-induced angina, 0/1")
    oldpeak: float = Field(..., description="ST depression")
    ca: float = Field(..., description="Major vessels 0..3")
    thal: float = Field(..., description="Thallium test 3, 6 or 7")


class FieldUpdate(BaseModel):
    """Raw value for a single field edit; unparseable input becomes NaN."""
    value: Union[float, str, None] = None


class FeaturesResponse(BaseModel):
    features: Dict[str, Optional[float]]
    warnings: List[str] = []


class SessionStateResponse(BaseModel):
    features: Dict[str, Optional[float]]
    warnings: List[str] = []
    status: str
    outcome: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    submissions: int = 0
    in_flight: int = 0


class ImportResponse(BaseModel):
    replaced: bool
    filename: str
    invalid_fields: List[str] = []
    reason: str = ""
    features: Dict[str, Optional[float]]


class HealthResponse(BaseModel):
    status: str
    version: str
    analyzer_available: bool
    timestamp: datetime
