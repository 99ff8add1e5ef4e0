from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from app.core.db import get_db
from app.core.security import get_clinic_context
from app.modules.audit.models import AuditEvent
from app.modules.clinics.service import ClinicMembership

router = APIRouter()

@router.get("/audit")
async def list_audit(
    ctx: ClinicMembership = Depends(get_clinic_context),
    session: AsyncSession = Depends(get_db),
    entity_type: str | None = None,
    action: str | None = Query(default=None, pattern="^(READ|CREATE|UPDATE|DELETE)$"),
    limit: int = Query(50, ge=1, le=200),
):
    cond = [AuditEvent.clinic_id == ctx.clinic_id]
    # non-admins only see their own trail
    if ctx.role != "ADMIN":
        cond.append(AuditEvent.actor_user_id == ctx.user_id)
    if entity_type:
        cond.append(AuditEvent.entity_type == entity_type)
    if action:
        cond.append(AuditEvent.action == action)
    q = select(AuditEvent).where(*cond).order_by(desc(AuditEvent.occurred_at), desc(AuditEvent.id)).limit(limit)
    res = await session.execute(q)
    return [
        {
            "id": str(row.id),
            "userId": row.actor_user_id,
            "action": row.action,
            "entityType": row.entity_type,
            "entityId": row.entity_id,
            "entityName": row.entity_name,
            "ipAddress": row.client_ip,
            "occurredAt": row.occurred_at,
        }
        for row in res.scalars().all()
    ]
