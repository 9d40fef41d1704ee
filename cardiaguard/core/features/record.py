"""
Feature Record — Data Model

The canonical ten-field patient record used both as the analysis request
payload and as the tabular interchange unit. Field order is fixed and
shared by the tabular codec.

The model enforces shape only. Bounds and categorical options live in
FIELD_SPECS and are advisory: they describe the input widgets, never
reject a value.
"""
from __future__ import annotations

import dataclasses
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from cardiaguard.utils import RecordShapeError

FEATURE_NAMES: Tuple[str, ...] = (
    "age", "sex", "cp", "bp", "chol", "maxhr", "exang", "oldpeak", "ca", "thal",
)

# Leading numeric prefix, same acceptance as a browser's parseFloat
_NUMERIC_PREFIX = re.compile(
    r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
)


def parse_number(raw: Union[str, float, int, None]) -> float:
    """
    Parse a raw value into a float, returning NaN when nothing parses.

    Numbers pass through unchanged. Strings are read up to the longest
    numeric prefix after leading whitespace, so "12abc" gives 12.0.
    """
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, (int, float)):
        return float(raw)
    if raw is None:
        return math.nan
    match = _NUMERIC_PREFIX.match(str(raw).lstrip())
    if not match:
        return math.nan
    text = match.group()
    if text.endswith("Infinity"):
        return -math.inf if text.startswith("-") else math.inf
    return float(text)


@dataclass(frozen=True)
class FeatureRecord:
    """One patient's ten clinical measurements. Immutable; updates return copies."""
    age: float
    sex: float
    cp: float
    bp: float
    chol: float
    maxhr: float
    exang: float
    oldpeak: float
    ca: float
    thal: float

    def __post_init__(self):
        for name in FEATURE_NAMES:
            object.__setattr__(self, name, float(getattr(self, name)))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "FeatureRecord":
        """Build a record from a mapping holding exactly the ten feature keys."""
        keys = set(mapping.keys())
        missing = [name for name in FEATURE_NAMES if name not in keys]
        extra = sorted(keys - set(FEATURE_NAMES))
        if missing or extra:
            raise RecordShapeError(
                "Feature record requires exactly the ten clinical fields",
                details={"missing": missing, "extra": extra},
            )
        return cls(**{name: parse_number(mapping[name]) for name in FEATURE_NAMES})

    @classmethod
    def from_values(cls, values) -> "FeatureRecord":
        """Build a record from ten values in canonical order."""
        values = list(values)
        if len(values) != len(FEATURE_NAMES):
            raise RecordShapeError(
                f"Expected {len(FEATURE_NAMES)} values, got {len(values)}"
            )
        return cls(**{name: float(v) for name, v in zip(FEATURE_NAMES, values)})

    def values(self) -> Tuple[float, ...]:
        return tuple(getattr(self, name) for name in FEATURE_NAMES)

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in FEATURE_NAMES}


DEFAULT_RECORD = FeatureRecord(
    age=54, sex=1, cp=2, bp=130, chol=240,
    maxhr=155, exang=0, oldpeak=1.2, ca=0, thal=3,
)


def set_field(record: FeatureRecord, name: str, raw_value: Any) -> FeatureRecord:
    """
    Return a copy of ``record`` with one field replaced.

    The raw value goes through parse_number: a value that does not parse
    becomes NaN and is kept as such. No clamping is applied.

    Raises:
        RecordShapeError: if ``name`` is not one of the ten features
    """
    if name not in FEATURE_NAMES:
        raise RecordShapeError(f"Unknown feature: {name}", field_name=name)
    return dataclasses.replace(record, **{name: parse_number(raw_value)})


# ── Field metadata (input widget bounds and options) ───────────────────

@dataclass(frozen=True)
class FieldOption:
    label: str
    value: float


@dataclass(frozen=True)
class FieldSpec:
    """Display and advisory-range metadata for one feature."""
    name: str
    label: str
    kind: str                           # "continuous" | "discrete"
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    step: Optional[float] = None
    options: Tuple[FieldOption, ...] = ()
    helper_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "kind": self.kind,
            "min": self.minimum,
            "max": self.maximum,
            "step": self.step,
            "options": [{"label": o.label, "value": o.value} for o in self.options],
            "helper_text": self.helper_text,
        }


FIELD_SPECS: Dict[str, FieldSpec] = {
    spec.name: spec for spec in (
        FieldSpec("age", "Patient Age", "continuous", minimum=1, maximum=120),
        FieldSpec("sex", "Sex (0=F, 1=M)", "discrete",
                  options=(FieldOption("Male", 1), FieldOption("Female", 0))),
        FieldSpec("cp", "CP Type (1-4)", "discrete",
                  options=(FieldOption("Typical Angina", 1),
                           FieldOption("Atypical Angina", 2),
                           FieldOption("Non-Anginal", 3),
                           FieldOption("Asymptomatic", 4))),
        FieldSpec("bp", "Sys. BP (mmHg)", "continuous", minimum=80, maximum=220),
        FieldSpec("chol", "Cholesterol", "continuous", minimum=100, maximum=600,
                  helper_text="mg/dl units"),
        FieldSpec("maxhr", "Max Heart Rate", "continuous", minimum=60, maximum=220),
        FieldSpec("exang", "Angina (0=N, 1=Y)", "discrete",
                  options=(FieldOption("None Reported", 0), FieldOption("Positive", 1))),
        FieldSpec("oldpeak", "Oldpeak (>1.0 Risk)", "continuous", step=0.1),
        FieldSpec("ca", "Vessels (CA 0-3)", "discrete", minimum=0, maximum=3),
        FieldSpec("thal", "Thal (3, 6, 7)", "discrete",
                  options=(FieldOption("Normal (3)", 3),
                           FieldOption("Fixed Defect (6)", 6),
                           FieldOption("Reversable (7)", 7))),
    )
}


def advisory_warnings(record: FeatureRecord) -> List[str]:
    """Notes for values outside widget bounds or options. Never rejects."""
    warnings: List[str] = []
    for name in FEATURE_NAMES:
        value = getattr(record, name)
        spec = FIELD_SPECS[name]
        if math.isnan(value):
            warnings.append(f"{name}: value is not a number")
            continue
        if spec.options and value not in {o.value for o in spec.options}:
            allowed = ", ".join(f"{o.value:g}" for o in spec.options)
            warnings.append(f"{name}: {value:g} is not one of {allowed}")
        if spec.minimum is not None and value < spec.minimum:
            warnings.append(f"{name}: {value:g} is below {spec.minimum:g}")
        if spec.maximum is not None and value > spec.maximum:
            warnings.append(f"{name}: {value:g} is above {spec.maximum:g}")
    return warnings
