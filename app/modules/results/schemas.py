from pydantic import BaseModel
from app.modules.orders.schemas import OrderOut

class PortalResultsOut(BaseModel):
    labOrders: list[OrderOut]
    imagingOrders: list[OrderOut]
    pendingLabResults: int
    pendingImagingResults: int

class PendingReleaseOut(BaseModel):
    labOrders: list[OrderOut]
    imagingOrders: list[OrderOut]
