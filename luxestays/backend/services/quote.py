"""Booking quote computation."""
import math
from datetime import date, datetime, time
from typing import Any, Union
from luxestays.backend.db.models import AvailabilityStatus, PricingModel
from luxestays.backend.schemas.booking import BookingQuote

DateLike = Union[date, datetime]

SECONDS_PER_DAY = 24 * 60 * 60


class QuoteValidationError(ValueError):
    """The requested stay cannot be quoted."""


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


class QuoteService:
    """Service for pricing a stay option over a date range."""
    
    def compute_nights(self, check_in: DateLike, check_out: DateLike) -> int:
        """
        Number of nights charged for a stay.
        
        Partial days round up, so a stay shorter than a full day is one night.
        
        Raises:
            QuoteValidationError: If check-out is not after check-in
        """
        seconds = (_as_datetime(check_out) - _as_datetime(check_in)).total_seconds()
        if seconds <= 0:
            raise QuoteValidationError("Check-out must be after check-in")
        return max(1, math.ceil(seconds / SECONDS_PER_DAY))
    
    def compute_total(self, price: float, nights: int, pricing_model: PricingModel, guest_count: int) -> float:
        """Total amount: price x nights, multiplied by guests for per-person options."""
        multiplier = guest_count if PricingModel(pricing_model) == PricingModel.PER_PERSON else 1
        return round(price * nights * multiplier, 2)
    
    def build_quote(
        self,
        stay_option: Any,
        check_in: DateLike,
        check_out: DateLike,
        guest_count: int
    ) -> BookingQuote:
        """
        Quote a stay.
        
        Args:
            stay_option: Stay option record (needs id, resort_id, price,
                pricing_model, capacity, availability_status)
            check_in: Check-in date or datetime
            check_out: Check-out date or datetime
            guest_count: Number of guests
        
        Returns:
            BookingQuote
        
        Raises:
            QuoteValidationError: For a bad date range, guest count, or a
                booked-out option
        """
        if guest_count is None or guest_count < 1:
            raise QuoteValidationError("At least one guest is required")
        
        if stay_option.capacity and guest_count > stay_option.capacity:
            raise QuoteValidationError(
                f"{stay_option.name} accommodates at most {stay_option.capacity} guests"
            )
        
        if AvailabilityStatus(stay_option.availability_status) == AvailabilityStatus.BOOKED_OUT:
            raise QuoteValidationError(f"{stay_option.name} is booked out")
        
        nights = self.compute_nights(check_in, check_out)
        pricing_model = PricingModel(stay_option.pricing_model)
        total_amount = self.compute_total(stay_option.price, nights, pricing_model, guest_count)
        
        return BookingQuote(
            resort_id=stay_option.resort_id,
            stay_option_id=stay_option.id,
            check_in=_as_date(check_in),
            check_out=_as_date(check_out),
            guest_count=guest_count,
            nights=nights,
            unit_price=stay_option.price,
            pricing_model=pricing_model,
            total_amount=total_amount
        )
