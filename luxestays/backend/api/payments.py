"""UPI payment flow API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from luxestays.backend.core.security import require_user
from luxestays.backend.schemas.payment import PaymentSessionCreate, PaymentSession, PaymentCheckOutcome
from luxestays.backend.services.booking import BookingService
from luxestays.backend.services.notification import CollectingNotifier
from luxestays.backend.services.payment_flow import PaymentFlow, payment_sessions
from luxestays.backend.services.payment_gateway import PaymentStatusChecker, get_payment_checker
from luxestays.backend.services.record_store import RecordStore, get_record_store
from luxestays.backend.api.bookings import build_quote_for_request

router = APIRouter()
booking_service = BookingService()


def _get_flow_or_404(payment_id: str, user: str) -> PaymentFlow:
    flow = payment_sessions.get(payment_id)
    if flow is None or flow.user_id != user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Payment {payment_id} not found"
        )
    return flow


@router.post("/payments", response_model=PaymentSession, status_code=status.HTTP_201_CREATED)
async def start_payment(
    request: PaymentSessionCreate,
    user: str = Depends(require_user),
    checker: PaymentStatusChecker = Depends(get_payment_checker),
    store: RecordStore = Depends(get_record_store)
):
    """Quote the stay and open a 5 minute UPI payment window."""
    quote, stay_option = build_quote_for_request(store, request)
    
    flow = payment_sessions.start(
        quote=quote,
        checker=checker,
        booking_service=booking_service,
        notifier=CollectingNotifier("luxestays.payments"),
        user_id=user,
        resort_name=stay_option.resort.name if stay_option.resort else "",
        guest_name=request.guest_name,
        guest_email=request.guest_email
    )
    return flow.snapshot()


@router.get("/payments/{payment_id}", response_model=PaymentSession)
async def get_payment(
    payment_id: str,
    user: str = Depends(require_user)
):
    """Get payment state, remaining time and pending notifications."""
    return _get_flow_or_404(payment_id, user).snapshot()


@router.post("/payments/{payment_id}/check", response_model=PaymentCheckOutcome)
async def check_payment(
    payment_id: str,
    user: str = Depends(require_user),
    store: RecordStore = Depends(get_record_store)
):
    """Check whether the UPI payment arrived and confirm the booking if so."""
    flow = _get_flow_or_404(payment_id, user)
    return await flow.check_payment_status(store)


@router.delete("/payments/{payment_id}", response_model=PaymentSession)
async def abandon_payment(
    payment_id: str,
    user: str = Depends(require_user)
):
    """Abandon a pending payment; the countdown stops and nothing is booked."""
    flow = _get_flow_or_404(payment_id, user)
    flow.abandon()
    return flow.snapshot()
