"""
CardiaGuard - FastAPI Application

HTTP surface of the clinical session:
- Current feature record (read, wholesale replace, single-field edit)
- Orange .tab import/export
- Heart disease analysis and its pending/settled state
"""
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, HTTPException, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from cardiaguard.config import APP_VERSION, settings
from cardiaguard.core.analysis.orchestrator import AnalyzeFn
from cardiaguard.core.features import FIELD_SPECS, FEATURE_NAMES, advisory_warnings
from cardiaguard.core.llm import HeartAnalyzer
from cardiaguard.core.session import ClinicalSession
from cardiaguard.models import (
    FeaturesResponse,
    FeatureValues,
    FieldUpdate,
    HealthResponse,
    ImportResponse,
    SessionStateResponse,
    json_features,
)
from cardiaguard.utils import (
    RecordShapeError,
    UnsupportedFileError,
    get_logger,
    setup_logging,
)

logger = get_logger(__name__)


def _session(request: Request) -> ClinicalSession:
    return request.app.state.session


def _state_response(session: ClinicalSession) -> SessionStateResponse:
    data = session.snapshot().to_dict()
    data["features"] = json_features(data["features"])
    return SessionStateResponse(**data)


def create_app(
    analyze: Optional[AnalyzeFn] = None,
    analyzer_available: Optional[bool] = None,
) -> FastAPI:
    """
    Build the application with one clinical session.

    Args:
        analyze: analysis coroutine; defaults to the Gemini HeartAnalyzer
        analyzer_available: reported by /health when ``analyze`` is given
    """
    setup_logging(settings.log_level, settings.log_file)

    if analyze is None:
        analyzer = HeartAnalyzer()
        analyze = analyzer.analyze
        analyzer_available = analyzer.is_available
    elif analyzer_available is None:
        analyzer_available = True

    app = FastAPI(
        title="CardiaGuard API",
        description="Heart disease feature collection, Orange .tab interchange and Gemini analysis",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.session = ClinicalSession(analyze)
    app.state.analyzer_available = analyzer_available

    # ---- Health ----

    @app.get("/", response_model=HealthResponse, tags=["Health"])
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        return HealthResponse(
            status="healthy",
            version=APP_VERSION,
            analyzer_available=request.app.state.analyzer_available,
            timestamp=datetime.now(),
        )

    # ---- Reference ----

    @app.get("/api/v1/features/schema", tags=["Reference"])
    async def feature_schema() -> Dict[str, Any]:
        return {"fields": [FIELD_SPECS[name].to_dict() for name in FEATURE_NAMES]}

    # ---- Session state ----

    @app.get("/api/v1/session", response_model=SessionStateResponse, tags=["Session"])
    async def get_session_state(request: Request):
        return _state_response(_session(request))

    @app.get("/api/v1/session/features", response_model=FeaturesResponse, tags=["Session"])
    async def get_features(request: Request):
        record = _session(request).record
        return FeaturesResponse(
            features=json_features(record.to_dict()),
            warnings=advisory_warnings(record),
        )

    @app.put("/api/v1/session/features", response_model=FeaturesResponse, tags=["Session"])
    async def replace_features(payload: FeatureValues, request: Request):
        record = _session(request).replace_from_mapping(payload.model_dump())
        return FeaturesResponse(
            features=json_features(record.to_dict()),
            warnings=advisory_warnings(record),
        )

    @app.patch("/api/v1/session/features/{name}", response_model=FeaturesResponse, tags=["Session"])
    async def update_feature(name: str, payload: FieldUpdate, request: Request):
        try:
            record = _session(request).set_field(name, payload.value)
        except RecordShapeError as e:
            raise HTTPException(status_code=404, detail=e.to_dict())
        return FeaturesResponse(
            features=json_features(record.to_dict()),
            warnings=advisory_warnings(record),
        )

    # ---- Orange .tab interchange ----

    @app.post("/api/v1/session/import", response_model=ImportResponse, tags=["Tabular"])
    async def import_features(request: Request, file: UploadFile = File(...)):
        session = _session(request)
        try:
            report = await session.import_file(file)
        except UnsupportedFileError as e:
            raise HTTPException(status_code=415, detail=e.to_dict())
        return ImportResponse(
            replaced=report.replaced,
            filename=file.filename or "",
            invalid_fields=report.invalid_fields,
            reason=report.reason,
            features=json_features(session.record.to_dict()),
        )

    @app.get("/api/v1/session/export", tags=["Tabular"])
    async def export_features(request: Request):
        artifact = _session(request).export()
        return Response(
            content=artifact.content,
            media_type=artifact.media_type,
            headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
        )

    # ---- Analysis ----

    @app.post("/api/v1/session/analyze", response_model=SessionStateResponse, tags=["Analysis"])
    async def analyze_features(request: Request):
        session = _session(request)
        await session.submit()
        return _state_response(session)

    @app.post("/api/v1/session/reset", response_model=SessionStateResponse, tags=["Analysis"])
    async def reset_analysis(request: Request):
        session = _session(request)
        session.reset_analysis()
        return _state_response(session)

    logger.info("CardiaGuard API ready to accept requests")
    return app


app = create_app()


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
