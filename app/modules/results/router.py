from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.db import get_db
from app.core.security import get_clinic_context, get_required_portal_identity, PortalIdentity
from app.modules.clinics.service import ClinicMembership
from app.modules.orders.schemas import OrderOut
from app.modules.results.schemas import PortalResultsOut, PendingReleaseOut
from app.modules.results.service import ResultReleaseService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_db)) -> ResultReleaseService:
    return ResultReleaseService(session)

@router.post("/portal/results/{order_id}/release")
async def release_result(
    order_id: int,
    type: str = Query(..., pattern="^(lab|imaging)$"),
    ctx: ClinicMembership = Depends(get_clinic_context),
    service: ResultReleaseService = Depends(svc),
):
    await service.release(ctx, order_id, type)
    return RedirectResponse(settings.PORTAL_RESULTS_REDIRECT, status_code=303)

@router.get("/portal/results/pending", response_model=PendingReleaseOut)
async def pending_release(
    ctx: ClinicMembership = Depends(get_clinic_context),
    service: ResultReleaseService = Depends(svc),
):
    rows = await service.pending_release(ctx)
    return PendingReleaseOut(
        labOrders=[OrderOut.from_model("lab", o) for o in rows["lab"]],
        imagingOrders=[OrderOut.from_model("imaging", o) for o in rows["imaging"]],
    )

@router.get("/portal/results", response_model=PortalResultsOut)
async def my_results(
    identity: PortalIdentity = Depends(get_required_portal_identity),
    service: ResultReleaseService = Depends(svc),
):
    rows = await service.portal_results(identity)
    return PortalResultsOut(
        labOrders=[OrderOut.from_model("lab", o) for o in rows["lab"]],
        imagingOrders=[OrderOut.from_model("imaging", o) for o in rows["imaging"]],
        pendingLabResults=rows["pending_lab"],
        pendingImagingResults=rows["pending_imaging"],
    )
