"""Stay option Pydantic schemas."""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from luxestays.backend.db.models import PricingModel, AvailabilityStatus


class StayOptionCreate(BaseModel):
    """Schema for creating or replacing a stay option."""
    name: str = Field(..., min_length=1, description="Stay option name, e.g. Deluxe Villa")
    description: Optional[str] = Field(None, description="Short description")
    price: float = Field(..., gt=0, description="Price per night in INR")
    pricing_model: PricingModel = Field(default=PricingModel.PER_OPTION, description="Charged per booking or per guest")
    capacity: int = Field(..., ge=1, description="Maximum number of guests")
    availability_status: AvailabilityStatus = Field(default=AvailabilityStatus.AVAILABLE, description="Availability flag")
    amenities: List[str] = Field(default_factory=list, description="Amenity tags")
    image_url: Optional[str] = Field(None, description="Image URL")


class StayOption(BaseModel):
    """Schema for stay option response."""
    id: str
    resort_id: str
    name: str
    description: Optional[str]
    price: float
    pricing_model: PricingModel
    capacity: int
    availability_status: AvailabilityStatus
    amenities: List[str]
    image_url: Optional[str]
    created_at: datetime
    
    class Config:
        from_attributes = True
