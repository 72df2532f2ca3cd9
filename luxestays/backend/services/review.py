"""Review eligibility and submission service."""
from datetime import date
from typing import Any, List, Optional
from luxestays.backend.db.models import BookingStatus
from luxestays.backend.schemas.review import ReviewCreate
from luxestays.backend.services.record_store import RecordStore


class ReviewNotAllowedError(Exception):
    """The user has no completed, unreviewed stay at the resort."""


class ReviewService:
    """Service for guest reviews."""
    
    def list_reviews(self, store: RecordStore, resort_id: str) -> List[Any]:
        """Reviews for a resort, newest first."""
        return store.list("reviews", filters={"resort_id": resort_id}, order="-created_at")
    
    def find_eligible_booking(
        self,
        store: RecordStore,
        resort_id: str,
        user_id: str,
        today: Optional[date] = None
    ) -> Optional[Any]:
        """
        Find a confirmed booking the user has checked out of and not yet reviewed.
        
        Args:
            store: Record store
            resort_id: Resort being reviewed
            user_id: Reviewer
            today: Reference date (defaults to today)
        
        Returns:
            Oldest eligible booking, or None
        """
        today = today or date.today()
        bookings = store.list(
            "bookings",
            filters={"resort_id": resort_id, "user_id": user_id, "status": BookingStatus.CONFIRMED},
            order="check_out_date"
        )
        reviewed = {
            r.booking_id
            for r in store.list("reviews", filters={"resort_id": resort_id, "user_id": user_id})
        }
        for booking in bookings:
            if booking.check_out_date < today and booking.id not in reviewed:
                return booking
        return None
    
    def submit_review(
        self,
        store: RecordStore,
        resort_id: str,
        user_id: str,
        review: ReviewCreate,
        today: Optional[date] = None
    ) -> Any:
        """
        Submit a review against the user's oldest eligible booking.
        
        Raises:
            ReviewNotAllowedError: If no eligible booking exists
        """
        booking = self.find_eligible_booking(store, resort_id, user_id, today)
        if booking is None:
            raise ReviewNotAllowedError("No completed stay at this resort is awaiting a review")
        
        return store.create("reviews", {
            "resort_id": resort_id,
            "user_id": user_id,
            "booking_id": booking.id,
            "rating": review.rating,
            "comment": review.comment,
        })
