from fastapi import APIRouter
from app.modules.clinics.router import router as clinics_router
from app.modules.invitations.router import router as invitations_router
from app.modules.patients.router import router as patients_router
from app.modules.appointments.router import router as appointments_router
from app.modules.orders.router import router as orders_router
from app.modules.results.router import router as results_router
from app.modules.portal.router import router as portal_router
from app.modules.audit.router import router as audit_router
from app.modules.onboarding.router import router as onboarding_router

api_router = APIRouter()
api_router.include_router(clinics_router, tags=["clinics"])
api_router.include_router(invitations_router, tags=["invitations"])
api_router.include_router(patients_router, prefix="/patients", tags=["patients"])
# appointments_router carries both /portal/appointments/* and /appointment-requests
api_router.include_router(appointments_router, tags=["appointments"])
api_router.include_router(orders_router, tags=["orders"])
api_router.include_router(results_router, tags=["results"])
api_router.include_router(portal_router, tags=["portal"])
api_router.include_router(audit_router, tags=["audit"])
api_router.include_router(onboarding_router, tags=["onboarding"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
