import uuid

from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware

from pixsafe.config import settings
from pixsafe.database import Base, engine
from pixsafe.errors import ServiceUnavailable, UnknownFailure, ValidationError
from pixsafe.schemas.report_schemas import (
    LookupRequest,
    ReportRequest,
    ReportResponse,
    RiskAssessment,
    ScamCategory,
    StatusResponse,
    ValidateResponse,
)
from pixsafe.services.report_service import ReportService
from pixsafe.services.risk_service import RiskDecisionService
from pixsafe.utils.identifiers import fingerprint, identifier_kind, is_valid_identifier
from pixsafe.api.dependencies import get_report_service, get_risk_service
from pixsafe.api.security import verify_api_token, check_rate_limit
from pixsafe.api.admin import router as admin_router
from pixsafe.utils.logging_config import StructuredLogger, init_logging, request_id_var

VERSION = "0.1.0"

init_logging()

logger = StructuredLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="PixSafe API",
    version=VERSION,
    description="Fraud report lookup for payment keys",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    if settings.is_production:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


@app.middleware("http")
async def bind_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def add_rate_limit_headers(request: Request, call_next):
    response = await call_next(request)
    if hasattr(request.state, "rate_limit_remaining"):
        response.headers["X-RateLimit-Limit"] = str(request.state.rate_limit_limit)
        response.headers["X-RateLimit-Remaining"] = str(request.state.rate_limit_remaining)
    return response


app.include_router(admin_router)


def _require_valid_identifier(identifier: str) -> str:
    """Validate a raw identifier and return its fingerprint."""
    if not is_valid_identifier(identifier):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid key. Use an email, phone number, tax id or random key.",
        )
    return fingerprint(identifier)


def _service_unavailable(e: ServiceUnavailable) -> HTTPException:
    logger.error("Report stores unreachable", error=str(e))
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Could not reach the report service. Try again later.",
    )


@app.get("/health")
def health():
    """Health check endpoint - no auth required."""
    return {"status": "ok"}


@app.get("/status", response_model=StatusResponse)
def status_info():
    """API status and configuration info."""
    return StatusResponse(
        status="ok",
        version=VERSION,
        environment=settings.environment,
        remote_enabled=settings.remote_enabled,
        auth_enabled=bool(settings.api_token),
        rate_limit_requests=settings.rate_limit_requests,
        rate_limit_window=settings.rate_limit_window,
        categories=[c.value for c in ScamCategory],
    )


@app.post("/validate", response_model=ValidateResponse)
def validate_identifier(request: LookupRequest):
    """Check whether an identifier looks like a usable key. Nothing is stored."""
    kind = identifier_kind(request.identifier)
    return ValidateResponse(valid=kind is not None, kind=kind)


@app.post(
    "/lookup",
    response_model=RiskAssessment,
    dependencies=[Depends(verify_api_token), Depends(check_rate_limit)],
)
def lookup(
    request: LookupRequest,
    service: RiskDecisionService = Depends(get_risk_service),
):
    """
    Fingerprint a raw identifier and return its risk assessment.

    The raw identifier is hashed here and never logged or stored.
    """
    fp = _require_valid_identifier(request.identifier)
    try:
        return service.assess(fp)
    except ServiceUnavailable as e:
        raise _service_unavailable(e)


@app.get(
    "/assessments/{fp}",
    response_model=RiskAssessment,
    dependencies=[Depends(verify_api_token), Depends(check_rate_limit)],
)
def get_assessment(
    fp: str,
    service: RiskDecisionService = Depends(get_risk_service),
):
    """Risk assessment for an already-computed fingerprint."""
    try:
        return service.assess(fp)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ServiceUnavailable as e:
        raise _service_unavailable(e)


@app.post(
    "/reports",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(verify_api_token), Depends(check_rate_limit)],
)
def create_report(
    request: ReportRequest,
    service: ReportService = Depends(get_report_service),
):
    """
    Report a key used in a scam.

    Succeeds whether the report reached the remote table or the local
    fallback store.
    """
    fp = _require_valid_identifier(request.identifier)
    try:
        service.submit_report(fp, request.category, request.has_police_filing)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ServiceUnavailable as e:
        raise _service_unavailable(e)
    except UnknownFailure as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not submit report: {e}",
        )

    return ReportResponse(
        success=True,
        fingerprint=fp,
        message="Report submitted. Thank you for helping protect others!",
    )
