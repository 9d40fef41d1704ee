"""
Clinical Session

Owns the session's single mutable FeatureRecord and the analysis
orchestrator. Everything the consumer reads or changes goes through here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from cardiaguard.core.analysis import AnalysisOrchestrator, AnalysisState
from cardiaguard.core.analysis.orchestrator import AnalyzeFn
from cardiaguard.core.features import (
    DEFAULT_RECORD,
    FeatureRecord,
    advisory_warnings,
    set_field,
)
from cardiaguard.core.tabular import (
    MEDIA_TYPE,
    ImportReport,
    export_filename,
    export_tabular,
    inspect_tabular,
    read_upload,
)
from cardiaguard.utils import get_logger

logger = get_logger(__name__)


@dataclass
class ExportArtifact:
    filename: str
    content: bytes
    media_type: str = MEDIA_TYPE


@dataclass
class SessionSnapshot:
    record: FeatureRecord
    analysis: AnalysisState
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "features": self.record.to_dict(),
            "warnings": self.warnings,
            **self.analysis.to_dict(),
        }


class ClinicalSession:
    """Session-scoped record/result pair with its import, export and submit operations."""

    def __init__(
        self,
        analyze: AnalyzeFn,
        record: FeatureRecord = DEFAULT_RECORD,
        on_result: Optional[Callable[[Any], None]] = None,
    ):
        self._record = record
        self.orchestrator = AnalysisOrchestrator(analyze, on_result=on_result)
        logger.info("Clinical session started with default patient profile")

    @property
    def record(self) -> FeatureRecord:
        return self._record

    def set_field(self, name: str, raw_value: Any) -> FeatureRecord:
        self._record = set_field(self._record, name, raw_value)
        return self._record

    def replace(self, record: FeatureRecord) -> FeatureRecord:
        self._record = record
        return self._record

    def replace_from_mapping(self, mapping: Mapping[str, Any]) -> FeatureRecord:
        return self.replace(FeatureRecord.from_mapping(mapping))

    def import_text(self, text: str) -> ImportReport:
        """Replace the record from tabular text; no usable row leaves it as is."""
        report = inspect_tabular(text)
        if report.replaced:
            self._record = report.record
            if report.invalid_fields:
                logger.warning(
                    f"Import coerced invalid tokens to 0: {', '.join(report.invalid_fields)}"
                )
            logger.info(f"Imported feature record from line {report.line_index + 1}")
        else:
            logger.info(f"Import ignored: {report.reason}")
        return report

    async def import_file(self, upload) -> ImportReport:
        """
        Read an uploaded .tab/.csv file and import it.

        Raises:
            UnsupportedFileError: the file extension is not accepted
        """
        text = await read_upload(upload)
        return self.import_text(text)

    def export(self) -> ExportArtifact:
        artifact = ExportArtifact(
            filename=export_filename(),
            content=export_tabular(self._record),
        )
        logger.info(f"Exported feature record as {artifact.filename}")
        return artifact

    async def submit(self) -> Optional[Any]:
        """Analyze the record as it is now; later edits do not affect this request."""
        return await self.orchestrator.submit(self._record)

    def reset_analysis(self) -> None:
        self.orchestrator.reset()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            record=self._record,
            analysis=self.orchestrator.state,
            warnings=advisory_warnings(self._record),
        )
