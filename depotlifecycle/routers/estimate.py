"""Estimate router.

Endpoints:
    POST  /api/v2/estimate                                    Create or revise
    GET   /api/v2/estimate/{estimateNumber}                   Current revision
    POST  /api/v2/estimate/{estimateNumber}/customerApproval  Customer approval
    POST  /api/v2/estimate/{estimateNumber}/photo             Attach a photo
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.auth import roles
from depotlifecycle.auth.deps import Principal, require_role
from depotlifecycle.config import settings
from depotlifecycle.database import get_db
from depotlifecycle.models.estimate import Estimate
from depotlifecycle.schemas.estimate import (
    EstimateAllocationOut,
    EstimateCustomerApprovalIn,
    EstimateCustomerApprovalOut,
    EstimateIn,
    EstimateLineItemOut,
    EstimateOut,
    EstimatePhotoOut,
    PhotoStatus,
    PreliminaryDecision,
)
from depotlifecycle.schemas.party import PartyOut
from depotlifecycle.services import estimate as estimate_service

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def _build_estimate_out(estimate: Estimate) -> EstimateOut:
    approval = None
    if estimate.approval_number:
        approval = EstimateCustomerApprovalOut(
            approval_number=estimate.approval_number,
            approval_time=estimate.approval_time,
            approval_total=estimate.approval_total,
        )
    decision = None
    if estimate.recommendation:
        decision = PreliminaryDecision(
            recommendation=estimate.recommendation,
            reason=estimate.recommendation_reason,
        )
    return EstimateOut(
        estimate_number=estimate.estimate_number,
        revision=estimate.revision,
        unit_number=estimate.unit_number,
        depot=PartyOut.model_validate(estimate.depot),
        owner=PartyOut.model_validate(estimate.owner) if estimate.owner else None,
        customer=PartyOut.model_validate(estimate.customer) if estimate.customer else None,
        estimate_time=estimate.estimate_time,
        currency=estimate.currency,
        labor_rate=estimate.labor_rate,
        ctl=estimate.ctl,
        status=estimate.status,
        comments=estimate.comments or [],
        line_items=[EstimateLineItemOut.model_validate(li) for li in estimate.line_items],
        allocation=(
            EstimateAllocationOut.model_validate(estimate.allocation)
            if estimate.allocation else None
        ),
        preliminary_decision=decision,
        customer_approval=approval,
    )


# ── POST /api/v2/estimate ───────────────────────────────────

@router.post("", response_model=EstimateOut, status_code=201)
async def create_estimate(
    body: EstimateIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.ESTIMATE_CREATE)),
):
    """Submit an estimate; resubmitting a number requires a higher revision."""
    estimate = await estimate_service.create_estimate(db, body)
    return _build_estimate_out(estimate)


# ── GET /api/v2/estimate/{estimateNumber} ───────────────────

@router.get("/{estimate_number}", response_model=EstimateOut)
async def get_estimate(
    estimate_number: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.ESTIMATE_CREATE)),
):
    estimate = await estimate_service.get_estimate(db, estimate_number)
    return _build_estimate_out(estimate)


# ── POST /api/v2/estimate/{estimateNumber}/customerApproval ─

@router.post("/{estimate_number}/customerApproval", response_model=EstimateOut)
async def approve_estimate(
    estimate_number: str,
    body: EstimateCustomerApprovalIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.ESTIMATE_APPROVE)),
):
    estimate = await estimate_service.approve_estimate(db, estimate_number, body)
    return _build_estimate_out(estimate)


# ── POST /api/v2/estimate/{estimateNumber}/photo ────────────

@router.post("/{estimate_number}/photo", response_model=EstimatePhotoOut, status_code=201)
async def upload_photo(
    estimate_number: str,
    file: UploadFile = File(...),
    line_number: int | None = Form(None, alias="lineNumber"),
    photo_status: PhotoStatus = Form("BEFORE", alias="status"),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.ESTIMATE_CREATE)),
):
    """Attach a before/after repair photo (multipart upload)."""
    # One byte past the limit is enough for add_photo to reject the upload.
    content = await file.read(settings.max_photo_bytes + 1)
    photo = await estimate_service.add_photo(
        db,
        estimate_number,
        content,
        filename=file.filename,
        content_type=file.content_type,
        line_number=line_number,
        status=photo_status,
    )
    return EstimatePhotoOut.model_validate(photo)
