"""Resort Pydantic schemas."""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from luxestays.backend.schemas.stay_option import StayOption


class ResortCreate(BaseModel):
    """Schema for creating or replacing a resort."""
    name: str = Field(..., min_length=1, description="Resort name")
    location: str = Field(default="", description="Free-text location, e.g. Munnar, Kerala")
    description: Optional[str] = Field(None, description="Resort description")
    price_per_night: Optional[float] = Field(None, ge=0, description="Average price per night in INR (display only)")
    rating: Optional[float] = Field(None, ge=0, le=5, description="Rating from 0.0 to 5.0")
    amenities: List[str] = Field(default_factory=list, description="Amenity tags")
    capacity: Optional[int] = Field(None, ge=1, description="Declared guest capacity when no stay options exist")
    image_url: Optional[str] = Field(None, description="Cover image URL")


class Resort(BaseModel):
    """Schema for resort response, including its stay options."""
    id: str
    name: str
    location: str
    description: Optional[str]
    price_per_night: Optional[float]
    rating: Optional[float]
    amenities: List[str]
    capacity: Optional[int]
    image_url: Optional[str]
    stay_options: List[StayOption] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime]
    
    class Config:
        from_attributes = True
