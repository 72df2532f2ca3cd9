"""Operator dashboard Pydantic schemas."""
from pydantic import BaseModel, Field
from typing import List


class ResortRevenue(BaseModel):
    """Revenue attributed to a single resort."""
    resort_id: str
    resort_name: str
    total_revenue: float = Field(..., ge=0)
    bookings: int = Field(..., ge=0)


class RevenueOverview(BaseModel):
    """Revenue across all resorts from confirmed bookings."""
    total_revenue: float = Field(..., ge=0, description="Sum of confirmed booking amounts in INR")
    bookings: int = Field(..., ge=0, description="Number of confirmed bookings")
    resorts: List[ResortRevenue] = Field(default_factory=list)
