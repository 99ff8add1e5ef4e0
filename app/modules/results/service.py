import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import NotFound
from app.core.security import PortalIdentity
from app.modules.audit.service import AuditService
from app.modules.clinics.service import ClinicMembership
from app.modules.orders.repository import OrderRepository
from app.modules.results.models import ResultRelease
from app.modules.results.repository import ResultReleaseRepository

logger = logging.getLogger(__name__)

class ResultReleaseService:
    """Gate between completed lab/imaging results and the patient portal.

    Releasing only ever appends a row, so visibility is monotonic: repeated
    releases are tolerated and nothing un-releases a result.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.releases = ResultReleaseRepository(session)

    async def release(self, ctx: ClinicMembership, order_id: int, kind: str) -> ResultRelease:
        order = await OrderRepository(self.session, kind).get(ctx.clinic_id, order_id)
        if not order:
            raise NotFound("Order not found")
        obj = await self.releases.add(kind, order_id, ctx.user_id)
        await AuditService(self.session).log(ctx.clinic_id, ctx.user_id, "UPDATE", "ResultRelease", str(obj.id), f"{kind}:{order_id}")
        await self.session.commit()
        logger.info(f"Released {kind} result {order_id} by {ctx.user_id}")
        return obj

    async def is_visible(self, order_id: int, kind: str) -> bool:
        return await self.releases.is_released(kind, order_id)

    async def portal_results(self, identity: PortalIdentity) -> dict:
        out: dict = {}
        for kind in ("lab", "imaging"):
            out[kind] = await self.releases.completed_orders(
                kind, clinic_id=identity.clinic_id, released=True, patient_id=identity.patient_id
            )
            pending = await self.releases.completed_orders(
                kind, clinic_id=identity.clinic_id, released=False, patient_id=identity.patient_id
            )
            out[f"pending_{kind}"] = len(pending)
        return out

    async def pending_release(self, ctx: ClinicMembership) -> dict:
        return {
            kind: await self.releases.completed_orders(kind, clinic_id=ctx.clinic_id, released=False)
            for kind in ("lab", "imaging")
        }
