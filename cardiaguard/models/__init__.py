from .session import (
    FeatureValues,
    FieldUpdate,
    FeaturesResponse,
    SessionStateResponse,
    ImportResponse,
    HealthResponse,
    json_features,
)

__all__ = [
    "FeatureValues",
    "FieldUpdate",
    "FeaturesResponse",
    "SessionStateResponse",
    "ImportResponse",
    "HealthResponse",
    "json_features",
]
