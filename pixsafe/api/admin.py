"""
Admin API endpoints for PixSafe management.

Includes:
- Override fixture management
- Metrics and monitoring
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from pixsafe.api.dependencies import get_override_table
from pixsafe.api.security import verify_api_token
from pixsafe.errors import ValidationError
from pixsafe.schemas.report_schemas import AddOverrideRequest, OverrideEntry
from pixsafe.services.overrides_service import OverrideTable
from pixsafe.utils.identifiers import fingerprint, is_valid_identifier
from pixsafe.utils.logging_config import metrics


router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(verify_api_token)],
)


# ============== OVERRIDE ENDPOINTS ==============


@router.get("/overrides", response_model=List[OverrideEntry])
async def list_overrides(table: OverrideTable = Depends(get_override_table)):
    """List every override fixture."""
    return [
        OverrideEntry(fingerprint=fp, severity=record.severity, reason=record.reason)
        for fp, record in table
    ]


@router.post("/overrides", response_model=OverrideEntry)
async def add_override(
    request: AddOverrideRequest,
    table: OverrideTable = Depends(get_override_table),
):
    """Add or replace an override fixture, by raw identifier or fingerprint."""
    if request.identifier:
        if not is_valid_identifier(request.identifier):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid key. Use an email, phone number, tax id or random key.",
            )
        fp = fingerprint(request.identifier)
    elif request.fingerprint:
        fp = request.fingerprint
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide either 'identifier' or 'fingerprint'.",
        )

    try:
        record = table.add(fp, request.severity, request.reason)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return OverrideEntry(fingerprint=fp, severity=record.severity, reason=record.reason)


@router.delete("/overrides/{fp}")
async def remove_override(fp: str, table: OverrideTable = Depends(get_override_table)):
    """Remove an override fixture."""
    removed = table.remove(fp)
    return {
        "message": "Override removed" if removed else "Fingerprint not found in overrides",
        "fingerprint": fp,
    }


# ============== METRICS ENDPOINTS ==============


@router.get("/metrics")
async def get_metrics():
    """Get current application metrics."""
    return metrics.get_stats()


@router.post("/metrics/reset")
async def reset_metrics():
    """Reset all metrics (use with caution)."""
    metrics.reset()
    return {"message": "Metrics reset"}
