"""
Orange Tabular Codec

Reads and writes the single-patient feature row in the tab-delimited
layout Orange uses for its .tab files:

    line 1  attribute names
    line 2  attribute types   (continuous / discrete)
    line 3  attribute roles   (feature / class / meta)
    line 4+ data rows

Import is lenient: it looks for the first data row, accepts comma or tab
separators, and never raises. Export always writes exactly four
tab-separated lines so the file loads in Orange unchanged.
"""
from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from cardiaguard.core.features import FEATURE_NAMES, FeatureRecord, parse_number
from cardiaguard.utils import UnsupportedFileError, get_logger

logger = get_logger(__name__)

FEATURE_TYPES = (
    "continuous", "discrete", "discrete", "continuous", "continuous",
    "continuous", "discrete", "continuous", "discrete", "discrete",
)
FEATURE_ROLES = ("feature",) * len(FEATURE_NAMES)

# Substrings that mark Orange header/metadata rows
HEADER_MARKERS = ("class", "meta", "feature", "continuous")

ACCEPTED_EXTENSIONS = (".tab", ".csv")
MEDIA_TYPE = "text/tab-separated-values"

_SEPARATOR = re.compile(r",|\t")


@dataclass
class ImportReport:
    """Outcome of reading a tabular document."""
    record: Optional[FeatureRecord] = None
    line_index: Optional[int] = None
    invalid_fields: List[str] = field(default_factory=list)
    reason: str = ""

    @property
    def replaced(self) -> bool:
        return self.record is not None


def _is_column_name_row(tokens: List[str]) -> bool:
    """The attribute-name row: first ten tokens are the feature names."""
    names = tuple(t.lower() for t in tokens[:len(FEATURE_NAMES)])
    return names == FEATURE_NAMES


def _is_data_line(line: str) -> bool:
    if not line.strip() or line.startswith("#"):
        return False
    if any(marker in line for marker in HEADER_MARKERS):
        return False
    return not _is_column_name_row(_split(line))


def _split(line: str) -> List[str]:
    return [token.strip() for token in _SEPARATOR.split(line)]


def inspect_tabular(text: str) -> ImportReport:
    """
    Locate and parse the first data row, reporting coerced tokens.

    Tokens that do not parse become 0, the same as a true zero; the names
    of those fields are listed in ``invalid_fields``.
    """
    lines = text.split("\n")
    for index, line in enumerate(lines):
        if not _is_data_line(line):
            continue

        tokens = _split(line)
        if len(tokens) < len(FEATURE_NAMES):
            return ImportReport(
                line_index=index,
                reason=f"data row has {len(tokens)} values, need {len(FEATURE_NAMES)}",
            )

        values = []
        invalid = []
        for name, token in zip(FEATURE_NAMES, tokens):
            value = parse_number(token)
            if math.isnan(value):
                invalid.append(name)
                value = 0.0
            values.append(value)

        return ImportReport(
            record=FeatureRecord.from_values(values),
            line_index=index,
            invalid_fields=invalid,
        )

    return ImportReport(reason="no data row found")


def parse_tabular(text: str) -> Optional[FeatureRecord]:
    """Return the record in ``text``, or None when there is no usable row."""
    return inspect_tabular(text).record


def format_number(value: float) -> str:
    """Shortest natural decimal form: 54, 1.2, 0.00001, 1e-7, NaN, Infinity."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if float(value).is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(float(value))
    if 1e-6 <= abs(value) < 1e21:
        # Positional between 1e-6 and 1e21, as Number#toString writes it
        return format(Decimal(text), "f")
    # 1e-07 -> 1e-7
    return re.sub(r"e([+-])0*(\d)", r"e\1\2", text)


def export_tabular(record: FeatureRecord) -> bytes:
    """Serialize ``record`` into the four-line Orange layout (UTF-8)."""
    rows = (
        FEATURE_NAMES,
        FEATURE_TYPES,
        FEATURE_ROLES,
        tuple(format_number(v) for v in record.values()),
    )
    return "".join("\t".join(row) + "\n" for row in rows).encode("utf-8")


_last_export_millis = 0


def export_filename() -> str:
    """Unique artifact name; the millisecond suffix never repeats in a process."""
    global _last_export_millis
    millis = max(time.time_ns() // 1_000_000, _last_export_millis + 1)
    _last_export_millis = millis
    return f"orange_export_{millis}.tab"


def check_extension(filename: Optional[str]) -> None:
    """
    Raises:
        UnsupportedFileError: unless ``filename`` ends in .tab or .csv
    """
    if not filename or not filename.lower().endswith(ACCEPTED_EXTENSIONS):
        raise UnsupportedFileError(
            f"Unsupported file type; expected one of {', '.join(ACCEPTED_EXTENSIONS)}",
            filename=filename or "",
        )


async def read_upload(upload) -> str:
    """Read an uploaded file once and decode it as UTF-8 text."""
    check_extension(getattr(upload, "filename", None))
    content = await upload.read()
    text = content.decode("utf-8-sig", errors="replace")
    logger.debug(f"Read {len(content)} bytes from {upload.filename}")
    return text
