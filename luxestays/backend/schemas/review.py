"""Review Pydantic schemas."""
from pydantic import BaseModel, Field, field_validator
from datetime import datetime


class ReviewCreate(BaseModel):
    """Schema for submitting a review."""
    rating: int = Field(..., ge=1, le=5, description="Star rating")
    comment: str = Field(..., min_length=1, description="Review text")
    
    @field_validator("comment")
    @classmethod
    def comment_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Comment must not be blank")
        return value.strip()


class Review(BaseModel):
    """Schema for review response."""
    id: str
    resort_id: str
    user_id: str
    booking_id: str
    rating: int
    comment: str
    created_at: datetime
    
    class Config:
        from_attributes = True
