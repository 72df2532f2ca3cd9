"""Quote and booking API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Tuple
from luxestays.backend.core.security import require_user
from luxestays.backend.schemas.booking import QuoteRequest, BookingQuote, Booking as BookingSchema
from luxestays.backend.services.booking import BookingService
from luxestays.backend.services.quote import QuoteService, QuoteValidationError
from luxestays.backend.services.record_store import RecordStore, get_record_store

router = APIRouter()
quote_service = QuoteService()
booking_service = BookingService()


def build_quote_for_request(store: RecordStore, request: QuoteRequest) -> Tuple[BookingQuote, object]:
    """
    Load the requested stay option and quote it.
    
    Returns:
        Tuple of (quote, stay option)
    
    Raises:
        HTTPException: 404 for an unknown stay option, 400 for an invalid stay
    """
    stay_option = store.get("stay_options", request.stay_option_id)
    if not stay_option:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Stay option {request.stay_option_id} not found"
        )
    
    try:
        quote = quote_service.build_quote(
            stay_option,
            check_in=request.check_in,
            check_out=request.check_out,
            guest_count=request.guest_count
        )
    except QuoteValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    
    return quote, stay_option


@router.post("/quotes", response_model=BookingQuote)
async def create_quote(
    request: QuoteRequest,
    store: RecordStore = Depends(get_record_store)
):
    """Price a stay without booking it."""
    quote, _ = build_quote_for_request(store, request)
    return quote


@router.get("/bookings", response_model=List[BookingSchema])
async def list_my_bookings(
    user: str = Depends(require_user),
    store: RecordStore = Depends(get_record_store)
):
    """List the current user's bookings, newest first."""
    return booking_service.list_user_bookings(store, user)


@router.get("/bookings/{booking_id}", response_model=BookingSchema)
async def get_booking(
    booking_id: str,
    user: str = Depends(require_user),
    store: RecordStore = Depends(get_record_store)
):
    """Get one of the current user's bookings."""
    booking = store.get("bookings", booking_id)
    if not booking or booking.user_id != user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Booking {booking_id} not found"
        )
    return booking
