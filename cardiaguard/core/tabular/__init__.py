"""
Tabular Codec Module

Import/export of the single-patient feature row in Orange's .tab layout.
"""
from .codec import (
    ACCEPTED_EXTENSIONS,
    FEATURE_ROLES,
    FEATURE_TYPES,
    HEADER_MARKERS,
    MEDIA_TYPE,
    ImportReport,
    check_extension,
    export_filename,
    export_tabular,
    format_number,
    inspect_tabular,
    parse_tabular,
    read_upload,
)

__all__ = [
    "ACCEPTED_EXTENSIONS",
    "FEATURE_ROLES",
    "FEATURE_TYPES",
    "HEADER_MARKERS",
    "MEDIA_TYPE",
    "ImportReport",
    "check_extension",
    "export_filename",
    "export_tabular",
    "format_number",
    "inspect_tabular",
    "parse_tabular",
    "read_upload",
]
