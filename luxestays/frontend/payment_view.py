"""Display logic for the Payment page, kept free of Streamlit calls."""
from typing import Any, Dict, List, MutableMapping, Optional

PENDING = "pending"
AWAITING_BOOKING = "awaiting_booking"
CONFIRMED = "confirmed"
EXPIRED = "expired"
ABANDONED = "abandoned"

FLASH_KEY = "flash"


def payment_stage(session: Dict[str, Any]) -> str:
    """
    Map a payment session snapshot to what the Payment page shows.
    
    A completed payment without a booking id means the money arrived but the
    booking write failed; the guest can check again to retry it.
    """
    if session.get("abandoned"):
        return ABANDONED
    state = session.get("state")
    if state == "completed":
        return CONFIRMED if session.get("booking_id") else AWAITING_BOOKING
    if state == "expired":
        return EXPIRED
    return PENDING


def can_check(stage: str) -> bool:
    return stage in (PENDING, AWAITING_BOOKING)


def countdown_running(stage: str) -> bool:
    return stage == PENDING


def push_flash(state: MutableMapping, kind: str, message: str, detail: str = "") -> None:
    """Queue a message to show after the next rerun."""
    state.setdefault(FLASH_KEY, []).append({"kind": kind, "title": message, "detail": detail})


def pop_flash(state: MutableMapping) -> Optional[List[Dict[str, str]]]:
    """Take the queued messages, in the shape show_notifications renders."""
    return state.pop(FLASH_KEY, None)
