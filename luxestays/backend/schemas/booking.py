"""Quote and booking Pydantic schemas."""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from luxestays.backend.db.models import BookingStatus, PaymentStatus, PricingModel


class QuoteRequest(BaseModel):
    """Schema for requesting a price quote."""
    stay_option_id: str = Field(..., description="Selected stay option")
    check_in: date = Field(..., description="Check-in date")
    check_out: date = Field(..., description="Check-out date")
    guest_count: int = Field(..., description="Number of guests")


class BookingQuote(BaseModel):
    """Computed, unpersisted price for a prospective booking."""
    resort_id: str
    stay_option_id: str
    check_in: date
    check_out: date
    guest_count: int = Field(..., ge=1)
    nights: int = Field(..., ge=1)
    unit_price: float = Field(..., gt=0, description="Stay option price per night")
    pricing_model: PricingModel
    total_amount: float = Field(..., gt=0, description="Total amount in INR")


class Booking(BaseModel):
    """Schema for booking response."""
    id: str
    user_id: Optional[str]
    resort_id: Optional[str]
    stay_option_id: Optional[str]
    check_in_date: date
    check_out_date: date
    guest_count: int
    total_amount: float
    status: BookingStatus
    payment_status: PaymentStatus
    payment_method: str
    payment_reference: Optional[str]
    guest_name: Optional[str]
    guest_email: Optional[str]
    created_at: datetime
    
    class Config:
        from_attributes = True
