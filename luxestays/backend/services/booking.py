"""Booking confirmation and reporting service."""
from collections import defaultdict
from typing import Any, List, Optional
import logging
from pydantic import BaseModel
from luxestays.backend.db.models import AvailabilityStatus, BookingStatus, PaymentStatus
from luxestays.backend.schemas.admin import ResortRevenue, RevenueOverview
from luxestays.backend.schemas.booking import BookingQuote
from luxestays.backend.services.audit import AuditService
from luxestays.backend.services.record_store import RecordStore, RecordStoreError

logger = logging.getLogger(__name__)


class BookingCommit(BaseModel):
    """Result of committing a paid quote."""
    booking: Any = None
    availability_updated: bool = False
    error: Optional[str] = None


class BookingService:
    """Service for turning paid quotes into bookings."""
    
    def __init__(self, audit_service: AuditService = None):
        self.audit_service = audit_service or AuditService()
    
    def confirm_booking(
        self,
        store: RecordStore,
        quote: BookingQuote,
        user_id: Optional[str],
        payment_reference: Optional[str] = None,
        guest_name: Optional[str] = None,
        guest_email: Optional[str] = None
    ) -> BookingCommit:
        """
        Record a paid booking, then flag its stay option as limited.
        
        The two writes are not atomic. The booking is the authoritative
        record, so a failed availability update is reported but never undoes
        the booking. The "limited" flag is a coarse signal, not an inventory
        decrement.
        
        Args:
            store: Record store
            quote: Paid quote
            user_id: Identity that made the booking
            payment_reference: Payment session reference
            guest_name: Guest name (optional)
            guest_email: Guest email (optional)
        
        Returns:
            BookingCommit
        
        Raises:
            RecordStoreError: If the booking itself could not be created
        """
        booking = store.create("bookings", {
            "user_id": user_id,
            "resort_id": quote.resort_id,
            "stay_option_id": quote.stay_option_id,
            "check_in_date": quote.check_in,
            "check_out_date": quote.check_out,
            "guest_count": quote.guest_count,
            "total_amount": quote.total_amount,
            "status": BookingStatus.CONFIRMED,
            "payment_status": PaymentStatus.COMPLETED,
            "payment_method": "upi",
            "payment_reference": payment_reference,
            "guest_name": guest_name or "",
            "guest_email": guest_email,
        })
        logger.info(f"Booking {booking.id} confirmed for stay option {quote.stay_option_id}")
        
        self.audit_service.log_action(
            action="booking_confirmed",
            user=user_id,
            entity_type="bookings",
            entity_id=booking.id,
            after_state=quote.model_dump(mode="json"),
            details={"payment_reference": payment_reference},
            store=store
        )
        
        try:
            store.update("stay_options", quote.stay_option_id, {
                "availability_status": AvailabilityStatus.LIMITED
            })
        except RecordStoreError as e:
            logger.error(f"Booking {booking.id} stands but availability update failed: {e}")
            return BookingCommit(booking=booking, availability_updated=False, error=str(e))
        
        return BookingCommit(booking=booking, availability_updated=True)
    
    def list_user_bookings(self, store: RecordStore, user_id: str) -> List[Any]:
        """Bookings made by a user, newest first."""
        return store.list("bookings", filters={"user_id": user_id}, order="-created_at")
    
    def revenue_overview(self, store: RecordStore, resort_id: Optional[str] = None) -> RevenueOverview:
        """
        Revenue from confirmed bookings, overall and per resort.
        
        Args:
            store: Record store
            resort_id: Limit the overview to one resort (resort owners)
        
        Returns:
            RevenueOverview with resorts ordered by revenue, highest first
        """
        filters = {"status": BookingStatus.CONFIRMED}
        if resort_id is not None:
            filters["resort_id"] = resort_id
        bookings = store.list("bookings", filters=filters)
        resorts = {r.id: r.name for r in store.list("resorts")}
        
        revenue = defaultdict(float)
        counts = defaultdict(int)
        for booking in bookings:
            if booking.resort_id is None:
                continue
            revenue[booking.resort_id] += booking.total_amount
            counts[booking.resort_id] += 1
        
        per_resort = [
            ResortRevenue(
                resort_id=resort_id,
                resort_name=resorts.get(resort_id, "Unknown resort"),
                total_revenue=round(amount, 2),
                bookings=counts[resort_id]
            )
            for resort_id, amount in revenue.items()
        ]
        per_resort.sort(key=lambda r: r.total_revenue, reverse=True)
        
        return RevenueOverview(
            total_revenue=round(sum(b.total_amount for b in bookings), 2),
            bookings=len(bookings),
            resorts=per_resort
        )
