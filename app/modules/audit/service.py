from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.audit.models import AuditEvent

def _client_ip(request: Request | None) -> str | None:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (request.client.host if request.client else None)

class AuditService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(self,
                  clinic_id: int,
                  actor_user_id: str,
                  action: str,
                  entity_type: str,
                  entity_id: str,
                  entity_name: str | None = None,
                  request: Request | None = None) -> None:
        # written in the caller's transaction; the caller commits
        ev = AuditEvent(
            clinic_id=clinic_id,
            actor_user_id=actor_user_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            entity_name=entity_name,
            client_ip=_client_ip(request),
            user_agent=(request.headers.get("user-agent") if request else None),
        )
        self.session.add(ev)
        await self.session.flush()
