"""Website settings and contact form Pydantic schemas."""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class WebsiteSettings(BaseModel):
    """Public contact details and social links shown on the site."""
    company_address: str = ""
    company_phone: str = ""
    company_email: str = ""
    map_location: str = Field(default="", description="Embeddable map URL or place query")
    facebook_url: str = ""
    instagram_url: str = ""
    twitter_url: str = ""
    linkedin_url: str = ""


class WebsiteSettingsUpdate(BaseModel):
    """Partial update; omitted keys keep their stored value."""
    company_address: Optional[str] = None
    company_phone: Optional[str] = None
    company_email: Optional[str] = None
    map_location: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    twitter_url: Optional[str] = None
    linkedin_url: Optional[str] = None


class ContactMessageCreate(BaseModel):
    """Schema for the public contact form."""
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    
    @field_validator("name", "email", "subject", "message")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please fill in all required fields")
        return value.strip()
    
    @field_validator("email")
    @classmethod
    def looks_like_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Enter a valid email address")
        return value


class ContactMessage(BaseModel):
    """Schema for contact message response."""
    id: str
    name: str
    email: str
    subject: str
    message: str
    created_at: datetime
    
    class Config:
        from_attributes = True
