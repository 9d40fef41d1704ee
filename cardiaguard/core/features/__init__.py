"""
Feature Record Module

Canonical ten-field clinical record, its default profile and field metadata.
"""
from .record import (
    FEATURE_NAMES,
    DEFAULT_RECORD,
    FIELD_SPECS,
    FeatureRecord,
    FieldOption,
    FieldSpec,
    advisory_warnings,
    parse_number,
    set_field,
)

__all__ = [
    "FEATURE_NAMES",
    "DEFAULT_RECORD",
    "FIELD_SPECS",
    "FeatureRecord",
    "FieldOption",
    "FieldSpec",
    "advisory_warnings",
    "parse_number",
    "set_field",
]
