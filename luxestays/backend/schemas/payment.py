"""Payment flow Pydantic schemas."""
import enum
from pydantic import BaseModel, Field
from typing import List, Optional
from luxestays.backend.schemas.booking import BookingQuote, QuoteRequest


class PaymentState(str, enum.Enum):
    """Payment confirmation state."""
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"


class PaymentCheckResult(str, enum.Enum):
    """Result reported by the external payment-status check."""
    SUCCESS = "success"
    PENDING = "pending"
    ERROR = "error"


class NotificationKind(str, enum.Enum):
    """Notification severity."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """Human-readable outcome message for the guest."""
    kind: NotificationKind
    title: str
    detail: str = ""


class PaymentSessionCreate(QuoteRequest):
    """Schema for starting a UPI payment for a stay."""
    guest_name: Optional[str] = Field(None, description="Guest full name")
    guest_email: Optional[str] = Field(None, description="Guest email")


class PaymentSession(BaseModel):
    """Snapshot of a payment flow."""
    id: str
    state: PaymentState
    quote: BookingQuote
    remaining_seconds: int = Field(..., ge=0)
    time_left: str = Field(..., description="Remaining time as m:ss")
    upi_link: str
    abandoned: bool = False
    booking_id: Optional[str] = None
    availability_updated: Optional[bool] = None
    notifications: List[Notification] = Field(default_factory=list)


class PaymentCheckOutcome(BaseModel):
    """Outcome of one payment-status check."""
    result: PaymentCheckResult
    state: PaymentState
    transitioned: bool = Field(..., description="Whether this check moved the flow to a terminal state")
    anomaly: bool = Field(default=False, description="Success reported after the flow had already ended")
    booking_id: Optional[str] = None
    availability_updated: Optional[bool] = None
    remaining_seconds: int = Field(..., ge=0)
