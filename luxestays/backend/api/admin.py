"""Operator dashboard API endpoints."""
from fastapi import APIRouter, Depends
from luxestays.backend.core.security import owned_resort_id, require_operator
from luxestays.backend.schemas.admin import RevenueOverview
from luxestays.backend.services.booking import BookingService
from luxestays.backend.services.record_store import RecordStore, get_record_store

router = APIRouter()
booking_service = BookingService()


@router.get("/admin/overview", response_model=RevenueOverview)
async def revenue_overview(
    operator: str = Depends(require_operator),
    store: RecordStore = Depends(get_record_store)
):
    """Revenue and booking totals from confirmed bookings; resort owners see their resort only."""
    return booking_service.revenue_overview(store, resort_id=owned_resort_id(operator))
